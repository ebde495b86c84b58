"""Document and chapter data models."""

import time
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

UNKNOWN_AUTHOR = "Unknown"


def progress_percent(position: int, total: int) -> int:
    """Percentage of ``total`` reached at ``position``, rounding halves up."""
    if total <= 0:
        return 0
    return (position * 200 + total) // (total * 2)


def now_ms() -> int:
    """Current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


class DocumentFormat(str, Enum):
    """Closed set of supported source formats."""

    TXT = "txt"
    MD = "md"
    PDF = "pdf"
    EPUB = "epub"
    HTML = "html"
    DOCX = "docx"
    DOC = "doc"
    ODT = "odt"
    RTF = "rtf"
    FB2 = "fb2"
    MOBI = "mobi"
    AZW = "azw"
    AZW3 = "azw3"
    CBZ = "cbz"
    CBR = "cbr"


class Chapter(BaseModel):
    """A contiguous, inclusive range of word indices within a document."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    start_word_index: int
    end_word_index: int
    word_count: int


class Document(BaseModel):
    """An ingested document plus its mutable reading state.

    Content fields are fixed at creation. Reading state is never patched
    in place: ``with_position`` returns a replacement record.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    title: str
    author: str = UNKNOWN_AUTHOR
    source: str
    format: DocumentFormat
    content: str
    word_count: int
    chapters: list[Chapter] = Field(default_factory=list)
    date_added: int = Field(default_factory=now_ms)
    last_read: int = 0  # 0 = never read
    current_position: int = 0
    reading_progress: int = 0

    def with_position(self, position: int, read_at: int | None = None) -> "Document":
        """Return a copy with the cursor, progress and last-read time updated."""
        if self.word_count > 0:
            position = max(0, min(position, self.word_count - 1))
            progress = progress_percent(position, self.word_count)
        else:
            position = 0
            progress = 0
        return self.model_copy(
            update={
                "current_position": position,
                "reading_progress": progress,
                "last_read": read_at if read_at is not None else now_ms(),
            }
        )

    def chapter_at(self, position: int) -> Chapter | None:
        """Find the chapter containing a word index."""
        for chapter in self.chapters:
            if chapter.start_word_index <= position <= chapter.end_word_index:
                return chapter
        return None
