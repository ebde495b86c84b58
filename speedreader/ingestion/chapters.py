"""Heading-based chapter segmentation over the word stream."""

import logging
import re
from uuid import uuid4

from speedreader.models.document import Chapter
from speedreader.playback.engine import tokenize

logger = logging.getLogger(__name__)

# "Chapter 3.", "PART:", "section 12:" at the start of a trimmed line
HEADING_PATTERN = re.compile(r"^(chapter|part|section)\s*\d*[.:]", re.IGNORECASE)

FULL_DOCUMENT_TITLE = "Full Document"
PREAMBLE_TITLE = "Opening"


class ChapterSegmenter:
    """Partitions a document's word indices into chapters.

    Lines are scanned in order while a running word cursor tracks the
    index of each line's first token. Every heading line opens a new
    chapter at that cursor and closes the previous one just before it.
    The result always covers ``[0, word_count)`` contiguously.

    Args:
        title_max_length: Heading lines are truncated to this many
            characters to form chapter titles.
    """

    def __init__(self, title_max_length: int = 50) -> None:
        self._title_max_length = title_max_length

    def segment(
        self, text: str, default_title: str = FULL_DOCUMENT_TITLE
    ) -> list[Chapter]:
        """Split ``text`` into chapters.

        Args:
            text: Normalized document content.
            default_title: Title of the single chapter emitted when no
                heading is found.

        Returns:
            Ordered chapters; empty only when the text has no words.
        """
        word_count = len(tokenize(text))
        if word_count == 0:
            return []

        starts: list[tuple[int, str]] = []
        cursor = 0
        for line in text.split("\n"):
            stripped = line.strip()
            if HEADING_PATTERN.match(stripped):
                starts.append((cursor, stripped[: self._title_max_length]))
            cursor += len(tokenize(line))

        if not starts:
            return [self._chapter(default_title, 0, word_count - 1)]

        # Words before the first heading still need a chapter
        if starts[0][0] > 0:
            starts.insert(0, (0, PREAMBLE_TITLE))

        chapters = []
        for i, (start, title) in enumerate(starts):
            end = starts[i + 1][0] - 1 if i + 1 < len(starts) else word_count - 1
            chapters.append(self._chapter(title, start, end))

        logger.debug("Detected %d chapters over %d words", len(chapters), word_count)
        return chapters

    def _chapter(self, title: str, start: int, end: int) -> Chapter:
        return Chapter(
            id=str(uuid4()),
            title=title,
            start_word_index=start,
            end_word_index=end,
            word_count=end - start + 1,
        )
