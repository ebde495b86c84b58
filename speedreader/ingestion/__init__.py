"""Document ingestion: format resolution, extraction and assembly."""

from speedreader.ingestion.assembler import DocumentAssembler
from speedreader.ingestion.chapters import ChapterSegmenter
from speedreader.ingestion.extractors import DocumentExtractor
from speedreader.ingestion.formats import SUPPORTED_FORMATS, resolve_format

__all__ = [
    "SUPPORTED_FORMATS",
    "ChapterSegmenter",
    "DocumentAssembler",
    "DocumentExtractor",
    "resolve_format",
]
