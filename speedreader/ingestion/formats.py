"""Extension-based format resolution."""

from pathlib import PurePath

from speedreader.errors import UnsupportedFormat
from speedreader.models.document import DocumentFormat

# Supported file extensions mapped to format identifiers
SUPPORTED_FORMATS: dict[str, DocumentFormat] = {
    ".txt": DocumentFormat.TXT,
    ".md": DocumentFormat.MD,
    ".pdf": DocumentFormat.PDF,
    ".epub": DocumentFormat.EPUB,
    ".html": DocumentFormat.HTML,
    ".htm": DocumentFormat.HTML,
    ".docx": DocumentFormat.DOCX,
    ".doc": DocumentFormat.DOC,
    ".odt": DocumentFormat.ODT,
    ".rtf": DocumentFormat.RTF,
    ".fb2": DocumentFormat.FB2,
    ".mobi": DocumentFormat.MOBI,
    ".azw": DocumentFormat.AZW,
    ".azw3": DocumentFormat.AZW3,
    ".cbz": DocumentFormat.CBZ,
    ".cbr": DocumentFormat.CBR,
}

FORMAT_NAMES: dict[DocumentFormat, str] = {
    DocumentFormat.TXT: "Plain Text",
    DocumentFormat.MD: "Markdown",
    DocumentFormat.PDF: "PDF",
    DocumentFormat.EPUB: "EPUB",
    DocumentFormat.HTML: "HTML",
    DocumentFormat.DOCX: "Word Document",
    DocumentFormat.DOC: "Word (Legacy)",
    DocumentFormat.ODT: "OpenDocument",
    DocumentFormat.RTF: "Rich Text",
    DocumentFormat.FB2: "FictionBook",
    DocumentFormat.MOBI: "Mobi",
    DocumentFormat.AZW: "Kindle AZW",
    DocumentFormat.AZW3: "Kindle AZW3",
    DocumentFormat.CBZ: "Comic Book (ZIP)",
    DocumentFormat.CBR: "Comic Book (RAR)",
}


def resolve_format(filename: str) -> DocumentFormat:
    """Determine a document's format from its filename extension.

    Resolution never inspects file content.

    Args:
        filename: Original filename, with or without directories.

    Returns:
        The matching DocumentFormat.

    Raises:
        UnsupportedFormat: If the extension is missing or unknown.
    """
    ext = PurePath(filename).suffix
    fmt = SUPPORTED_FORMATS.get(ext.lower())
    if fmt is None:
        raise UnsupportedFormat(ext)
    return fmt


def strip_extension(filename: str) -> str:
    """Filename without directories or its final extension."""
    return PurePath(filename).stem
