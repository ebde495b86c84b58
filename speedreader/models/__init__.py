"""Data models for the Speedreader application."""

from speedreader.models.document import (
    UNKNOWN_AUTHOR,
    Chapter,
    Document,
    DocumentFormat,
    now_ms,
)
from speedreader.models.extracted import ExtractedText
from speedreader.models.preferences import AccessibilitySettings, UserPreferences
from speedreader.models.session import ReadingSession

__all__ = [
    "UNKNOWN_AUTHOR",
    "AccessibilitySettings",
    "Chapter",
    "Document",
    "DocumentFormat",
    "ExtractedText",
    "ReadingSession",
    "UserPreferences",
    "now_ms",
]
