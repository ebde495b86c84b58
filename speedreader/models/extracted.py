"""Intermediate extraction result for the ingestion pipeline."""

from pydantic import BaseModel

from speedreader.models.document import UNKNOWN_AUTHOR, DocumentFormat


class ExtractedText(BaseModel):
    """Cleaned plain text recovered from a source file.

    Produced by a format extractor, consumed by the document assembler.
    """

    title: str
    author: str = UNKNOWN_AUTHOR
    content: str
    file_format: DocumentFormat
    default_chapter_title: str = "Full Document"
