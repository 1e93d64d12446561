"""Answer composition models."""

from pydantic import BaseModel, Field


class Source(BaseModel):
    """A retrieved chunk as presented to the user, labelled like the prompt."""

    document_name: str
    chunk_text: str
    similarity: float


class ConversationTurn(BaseModel):
    """One prior question/answer exchange fed back as short-term memory."""

    question: str
    answer: str


class AnswerResult(BaseModel):
    """Grounded answer plus the sources shown to the model, in label order."""

    answer: str
    sources: list[Source] = Field(default_factory=list)
