"""Document assembly: extraction, tokenization and chapter detection."""

import logging
from pathlib import Path

from speedreader.config import IngestionConfig
from speedreader.ingestion.chapters import ChapterSegmenter
from speedreader.ingestion.extractors import DocumentExtractor
from speedreader.ingestion.formats import resolve_format
from speedreader.models.document import Document, now_ms
from speedreader.playback.engine import tokenize

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Builds Document records from raw file bytes.

    Adds no failure modes of its own: format resolution and extractor
    errors propagate to the caller unchanged.

    Args:
        config: IngestionConfig shared by the extractor and segmenter.
    """

    def __init__(self, config: IngestionConfig | None = None) -> None:
        self._config = config or IngestionConfig()
        self._extractor = DocumentExtractor(self._config)
        self._segmenter = ChapterSegmenter(self._config.chapter_title_max_length)

    def assemble(self, filename: str, data: bytes) -> Document:
        """Turn a file's bytes into a new Document.

        Args:
            filename: Original filename, used for format resolution.
            data: Raw file bytes.

        Returns:
            A fresh Document with identity and timestamps stamped.
        """
        file_format = resolve_format(filename)
        extracted = self._extractor.extract(filename, data, file_format)

        word_count = len(tokenize(extracted.content))
        chapters = self._segmenter.segment(
            extracted.content, default_title=extracted.default_chapter_title
        )

        document = Document(
            title=extracted.title,
            author=extracted.author,
            source=Path(filename).name,
            format=file_format,
            content=extracted.content,
            word_count=word_count,
            chapters=chapters,
            date_added=now_ms(),
        )
        logger.info(
            "Assembled %s: %d words, %d chapters",
            document.source,
            word_count,
            len(chapters),
        )
        return document

    def assemble_file(self, file_path: str | Path) -> Document:
        """Read a file from disk and assemble it.

        The format is resolved before the file is read, so unsupported
        files fail without any I/O.

        Raises:
            UnsupportedFormat: If the extension is not supported.
            FileNotFoundError: If file_path does not exist.
        """
        path = Path(file_path)
        resolve_format(path.name)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return self.assemble(path.name, path.read_bytes())
