"""Unit tests for file-to-text extraction."""

import io
import zipfile

import docx
import pytest
from PyPDF2 import PdfWriter

from docqa.app.docs.extract import EXTRACTORS, extract_text, file_extension
from docqa.app.errors import ValidationError


def test_file_extension_is_lowercased() -> None:
    """Test that extensions are normalised for dispatch."""
    assert file_extension("Report.PDF") == ".pdf"
    assert file_extension("notes.tar.md") == ".md"
    assert file_extension("README") == ""


@pytest.mark.parametrize("filename", ["a.txt", "b.md", "c.csv", "d.json", "E.TXT"])
def test_plain_text_formats_decode_utf8(filename: str) -> None:
    """Test that text formats are decoded as UTF-8."""
    assert extract_text(filename, "Grüße aus Köln.".encode()) == "Grüße aus Köln."


def test_invalid_utf8_is_replaced_not_rejected() -> None:
    """Test that undecodable bytes do not fail plain-text extraction."""
    text = extract_text("notes.txt", b"ok \xff\xfe end")

    assert text.startswith("ok ")
    assert text.endswith(" end")


def test_unsupported_extension_is_validation_error() -> None:
    """Test that unknown extensions are rejected with the allowed list."""
    with pytest.raises(ValidationError) as exc_info:
        extract_text("image.png", b"\x89PNG")

    assert '".png"' in exc_info.value.message
    assert ".docx" in exc_info.value.message


def test_dispatch_table_covers_allowed_formats() -> None:
    """Test that every supported extension has an extractor."""
    assert set(EXTRACTORS) == {".txt", ".md", ".csv", ".json", ".pdf", ".docx"}


def test_docx_paragraphs_joined_by_newlines() -> None:
    """Test that DOCX paragraph text is extracted in order."""
    document = docx.Document()
    document.add_paragraph("First paragraph.")
    document.add_paragraph("Second paragraph.")
    buffer = io.BytesIO()
    document.save(buffer)

    assert extract_text("report.docx", buffer.getvalue()) == "First paragraph.\nSecond paragraph."


def test_corrupt_docx_is_validation_error() -> None:
    """Test that a non-zip DOCX is reported as unreadable."""
    with pytest.raises(ValidationError, match="DOCX"):
        extract_text("broken.docx", b"definitely not a zip archive")


def _docx_with_content_type(content_type: str) -> bytes:
    """A python-docx file whose main part declares another content type."""
    document = docx.Document()
    document.add_paragraph("Not really a Word body.")
    original = io.BytesIO()
    document.save(original)

    rewritten = io.BytesIO()
    with zipfile.ZipFile(original) as src, zipfile.ZipFile(rewritten, "w") as dst:
        for item in src.infolist():
            data = src.read(item.filename)
            if item.filename == "[Content_Types].xml":
                data = data.replace(
                    b"wordprocessingml.document.main+xml", content_type.encode()
                )
            dst.writestr(item, data)
    return rewritten.getvalue()


def test_non_word_ooxml_package_is_validation_error() -> None:
    """Test that a spreadsheet renamed to .docx is reported as unreadable."""
    content = _docx_with_content_type("spreadsheetml.sheet.main+xml")

    with pytest.raises(ValidationError, match="Could not read the DOCX file"):
        extract_text("renamed.docx", content)


def test_corrupt_pdf_is_validation_error() -> None:
    """Test that garbage PDF bytes are reported as unreadable."""
    with pytest.raises(ValidationError, match="PDF"):
        extract_text("broken.pdf", b"definitely not a pdf")


def test_pdf_without_text_is_validation_error() -> None:
    """Test that an image-only (here: blank) PDF is rejected."""
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)

    with pytest.raises(ValidationError, match="Could not extract text"):
        extract_text("scan.pdf", buffer.getvalue())
