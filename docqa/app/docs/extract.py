"""File-to-text extraction, dispatched on the normalised file extension."""

import io
import zipfile
from collections.abc import Callable
from pathlib import Path

import docx
from docx.opc.exceptions import PackageNotFoundError
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from docqa.app.errors import ValidationError

Extractor = Callable[[bytes], str]


def file_extension(filename: str) -> str:
    """Lower-cased extension including the dot, e.g. 'Report.PDF' -> '.pdf'."""
    return Path(filename).suffix.lower()


def _plain_text(content: bytes) -> str:
    return content.decode("utf-8", errors="replace")


def _pdf_text(content: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError, KeyError) as e:
        raise ValidationError("Could not read the PDF file.") from e

    text = "\n".join(pages).strip()
    if not text:
        raise ValidationError(
            "Could not extract text from the PDF. The file may be scanned/image-only."
        )
    return text


def _docx_text(content: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(content))
    # ValueError: a valid OOXML package whose main part is not a Word document
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise ValidationError("Could not read the DOCX file.") from e

    text = "\n".join(paragraph.text for paragraph in document.paragraphs).strip()
    if not text:
        raise ValidationError("Could not extract text from the DOCX file.")
    return text


EXTRACTORS: dict[str, Extractor] = {
    ".txt": _plain_text,
    ".md": _plain_text,
    ".csv": _plain_text,
    ".json": _plain_text,
    ".pdf": _pdf_text,
    ".docx": _docx_text,
}


def extract_text(filename: str, content: bytes) -> str:
    """Extract plain text from an uploaded file.

    Args:
        filename: Original file name; only its extension is used
        content: Raw file bytes

    Returns:
        Extracted text (may be blank for plain-text formats)

    Raises:
        ValidationError: Unsupported extension or unreadable PDF/DOCX
    """
    ext = file_extension(filename)
    extractor = EXTRACTORS.get(ext)
    if extractor is None:
        allowed = ", ".join(EXTRACTORS)
        raise ValidationError(f'Unsupported file type "{ext}". Allowed: {allowed}')
    return extractor(content)
