"""Reading session data model."""

from uuid import uuid4

from pydantic import BaseModel, Field

from speedreader.models.preferences import ReadingMode


class ReadingSession(BaseModel):
    """One continuous stretch of reading a document."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    document_id: str
    start_time: int
    end_time: int
    start_position: int
    end_position: int
    words_read: int = 0
    average_speed: float = 0.0  # words per minute
    mode: ReadingMode = "rsvp"
