"""Per-format text extraction from raw file bytes."""

import logging
from collections.abc import Callable

import chardet
from bs4 import BeautifulSoup, Tag

from speedreader.config import IngestionConfig
from speedreader.errors import (
    ContainerCorrupt,
    FormatNotSupported,
    SpeedreaderError,
)
from speedreader.ingestion.container import Container, open_container
from speedreader.ingestion.formats import strip_extension
from speedreader.ingestion.markup import (
    DOCX_RULES,
    FB2_RULES,
    HTML_RULES,
    ODT_RULES,
    RTF_RULES,
    XHTML_RULES,
    strip_markup,
)
from speedreader.ingestion.salvage import salvage_or_fail
from speedreader.models.document import UNKNOWN_AUTHOR, DocumentFormat
from speedreader.models.extracted import ExtractedText

logger = logging.getLogger(__name__)

EPUB_BODY_PATTERNS = ("*.html", "*.xhtml")
EPUB_MANIFEST = "META-INF/container.xml"
DOCX_BODY = "word/document.xml"
DOCX_CORE_PROPERTIES = "docProps/core.xml"
ODT_BODY = "content.xml"
ODT_META = "meta.xml"
COMIC_PAGE_PATTERNS = ("*.jpg", "*.jpeg", "*.png", "*.gif", "*.webp")

DOC_HINT = "Please save the document as .docx format for better compatibility."
MOBI_HINT = "Try converting to EPUB first using Calibre or a similar tool."
CBR_HINT = (
    "Please convert to CBZ format first, or use a dedicated comic reader."
)
PDF_HINT = "The PDF may be damaged or encrypted. Try re-exporting it."

COMIC_PLACEHOLDER = (
    "This is a comic book file ({filename}) containing {pages} pages.\n\n"
    "Comic book files contain images rather than text, so they cannot be "
    "read using RSVP or traditional reading modes.\n\n"
    "For the best comic reading experience, please use a dedicated comic "
    "reader application."
)


def decode_text(data: bytes, filename: str) -> str:
    """Decode a text-based file with encoding detection.

    Tries UTF-8 first (honouring a BOM), then uses chardet, and finally
    falls back to latin-1, which never fails.

    Args:
        data: Raw file bytes.
        filename: Source filename, used for log messages.

    Returns:
        The decoded text.
    """
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        pass

    detected = chardet.detect(data)
    encoding = detected.get("encoding") or "utf-8"
    confidence = detected.get("confidence") or 0

    if confidence < 0.7:
        logger.warning(
            "Low confidence encoding detection for %s: %s (%.0f%%)",
            filename,
            encoding,
            confidence * 100,
        )

    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError):
        logger.warning("Failed to decode %s as %s, using latin-1", filename, encoding)
        return data.decode("latin-1")


def _first_text(soup: Tag, *names: str) -> str | None:
    for name in names:
        tag = soup.find(name)
        if tag is not None:
            text = tag.get_text(" ", strip=True)
            if text:
                return text
    return None


def _xml_metadata(
    markup: bytes | str | None, author_tags: tuple[str, ...]
) -> tuple[str | None, str | None]:
    """Read a title and author from Dublin Core style XML metadata."""
    if not markup:
        return None, None
    soup = BeautifulSoup(markup, "lxml-xml")
    return _first_text(soup, "title"), _first_text(soup, *author_tags)


class DocumentExtractor:
    """Turns raw file bytes into cleaned plain text.

    One private strategy per DocumentFormat; ``extract`` selects it. Errors
    raised by a strategy propagate unchanged.

    Args:
        config: IngestionConfig with binary salvage thresholds.
    """

    def __init__(self, config: IngestionConfig | None = None) -> None:
        self._config = config or IngestionConfig()

    def extract(
        self, filename: str, data: bytes, file_format: DocumentFormat
    ) -> ExtractedText:
        """Extract title, author and normalized content.

        Args:
            filename: Original filename, used for the fallback title.
            data: Raw file bytes.
            file_format: Format resolved from the filename.

        Returns:
            An ExtractedText for the document assembler.
        """
        dispatch: dict[DocumentFormat, Callable[[str, bytes], ExtractedText]] = {
            DocumentFormat.TXT: self._extract_plain,
            DocumentFormat.MD: self._extract_plain,
            DocumentFormat.PDF: self._extract_pdf,
            DocumentFormat.EPUB: self._extract_epub,
            DocumentFormat.HTML: self._extract_html,
            DocumentFormat.DOCX: self._extract_docx,
            DocumentFormat.DOC: self._extract_doc,
            DocumentFormat.ODT: self._extract_odt,
            DocumentFormat.RTF: self._extract_rtf,
            DocumentFormat.FB2: self._extract_fb2,
            DocumentFormat.MOBI: self._extract_mobi,
            DocumentFormat.AZW: self._extract_mobi,
            DocumentFormat.AZW3: self._extract_mobi,
            DocumentFormat.CBZ: self._extract_cbz,
            DocumentFormat.CBR: self._extract_cbr,
        }
        result = dispatch[file_format](filename, data)
        if result.file_format is not file_format:
            result = result.model_copy(update={"file_format": file_format})
        logger.debug(
            "Extracted %d characters from %s (%s)",
            len(result.content),
            filename,
            file_format.value,
        )
        return result

    def _extract_plain(self, filename: str, data: bytes) -> ExtractedText:
        """Plain text and Markdown: raw text with normalized line endings."""
        text = decode_text(data, filename)
        content = text.replace("\r\n", "\n").replace("\r", "\n").strip()
        return ExtractedText(
            title=strip_extension(filename),
            content=content,
            file_format=DocumentFormat.TXT,
        )

    def _extract_html(self, filename: str, data: bytes) -> ExtractedText:
        raw = decode_text(data, filename)
        title = _first_text(BeautifulSoup(raw, "lxml"), "title")
        return ExtractedText(
            title=title or strip_extension(filename),
            content=strip_markup(raw, HTML_RULES),
            file_format=DocumentFormat.HTML,
        )

    def _extract_epub(self, filename: str, data: bytes) -> ExtractedText:
        """Concatenate XHTML bodies in lexicographic path order.

        Path order stands in for the package spine, so output is
        deterministic for a given archive.
        """
        with open_container(data) as container:
            parts = []
            for path in sorted(container.list_entries(*EPUB_BODY_PATTERNS)):
                text = strip_markup(container.read_entry(path), XHTML_RULES)
                if text:
                    parts.append(text)
            title, author = self._epub_metadata(container, filename)

        return ExtractedText(
            title=title or strip_extension(filename),
            author=author or UNKNOWN_AUTHOR,
            content="\n\n".join(parts),
            file_format=DocumentFormat.EPUB,
        )

    def _epub_metadata(
        self, container: Container, filename: str
    ) -> tuple[str | None, str | None]:
        """Read dc:title and dc:creator from the package document, if any."""
        try:
            if not container.has_entry(EPUB_MANIFEST):
                return None, None
            manifest = BeautifulSoup(container.read_bytes(EPUB_MANIFEST), "lxml-xml")
            rootfile = manifest.find("rootfile")
            opf_path = rootfile.get("full-path") if rootfile is not None else None
            if not opf_path or not container.has_entry(opf_path):
                return None, None
            return _xml_metadata(container.read_bytes(opf_path), ("creator",))
        except SpeedreaderError as exc:
            logger.warning("Ignoring unreadable EPUB metadata in %s: %s", filename, exc)
            return None, None

    def _extract_docx(self, filename: str, data: bytes) -> ExtractedText:
        with open_container(data) as container:
            content = strip_markup(container.read_entry(DOCX_BODY), DOCX_RULES)
            title, author = self._optional_metadata(
                container, DOCX_CORE_PROPERTIES, ("creator",), filename
            )
        return ExtractedText(
            title=title or strip_extension(filename),
            author=author or UNKNOWN_AUTHOR,
            content=content,
            file_format=DocumentFormat.DOCX,
        )

    def _extract_odt(self, filename: str, data: bytes) -> ExtractedText:
        with open_container(data) as container:
            content = strip_markup(container.read_entry(ODT_BODY), ODT_RULES)
            title, author = self._optional_metadata(
                container, ODT_META, ("initial-creator", "creator"), filename
            )
        return ExtractedText(
            title=title or strip_extension(filename),
            author=author or UNKNOWN_AUTHOR,
            content=content,
            file_format=DocumentFormat.ODT,
        )

    def _optional_metadata(
        self,
        container: Container,
        path: str,
        author_tags: tuple[str, ...],
        filename: str,
    ) -> tuple[str | None, str | None]:
        if not container.has_entry(path):
            return None, None
        try:
            return _xml_metadata(container.read_bytes(path), author_tags)
        except SpeedreaderError as exc:
            logger.warning("Ignoring unreadable metadata %s in %s: %s", path, filename, exc)
            return None, None

    def _extract_rtf(self, filename: str, data: bytes) -> ExtractedText:
        return ExtractedText(
            title=strip_extension(filename),
            content=strip_markup(decode_text(data, filename), RTF_RULES),
            file_format=DocumentFormat.RTF,
        )

    def _extract_fb2(self, filename: str, data: bytes) -> ExtractedText:
        title, author = self._fb2_metadata(data)
        return ExtractedText(
            title=title or strip_extension(filename),
            author=author or UNKNOWN_AUTHOR,
            content=strip_markup(decode_text(data, filename), FB2_RULES),
            file_format=DocumentFormat.FB2,
        )

    def _fb2_metadata(self, data: bytes) -> tuple[str | None, str | None]:
        """Read book-title and the first author from <title-info>."""
        info = BeautifulSoup(data, "lxml-xml").find("title-info")
        if info is None:
            return None, None
        title = _first_text(info, "book-title")
        author_tag = info.find("author")
        author = None
        if author_tag is not None:
            names = [
                _first_text(author_tag, part)
                for part in ("first-name", "middle-name", "last-name")
            ]
            author = " ".join(n for n in names if n) or _first_text(author_tag, "nickname")
        return title, author

    def _extract_doc(self, filename: str, data: bytes) -> ExtractedText:
        """Legacy Word binary: heuristic salvage, no OLE decoding."""
        content = salvage_or_fail(
            data,
            self._config.doc_min_run_length,
            self._config.doc_min_output_length,
            hint=DOC_HINT,
        )
        return ExtractedText(
            title=strip_extension(filename),
            content=content,
            file_format=DocumentFormat.DOC,
        )

    def _extract_mobi(self, filename: str, data: bytes) -> ExtractedText:
        """MOBI/AZW/AZW3: heuristic salvage with a stricter run length."""
        content = salvage_or_fail(
            data,
            self._config.mobi_min_run_length,
            self._config.mobi_min_output_length,
            hint=MOBI_HINT,
        )
        return ExtractedText(
            title=strip_extension(filename),
            content=content,
            file_format=DocumentFormat.MOBI,
        )

    def _extract_cbz(self, filename: str, data: bytes) -> ExtractedText:
        """Comic archives: count page images and return a placeholder text."""
        with open_container(data) as container:
            pages = container.list_entries(*COMIC_PAGE_PATTERNS)

        if not pages:
            raise FormatNotSupported(
                "No page images found in comic book archive.",
                hint="Use a dedicated comic reader application.",
            )

        return ExtractedText(
            title=strip_extension(filename),
            content=COMIC_PLACEHOLDER.format(filename=filename, pages=len(pages)),
            file_format=DocumentFormat.CBZ,
            default_chapter_title="Comic Info",
        )

    def _extract_cbr(self, filename: str, data: bytes) -> ExtractedText:
        raise FormatNotSupported(
            "CBR (RAR) comic book files are not supported.", hint=CBR_HINT
        )

    def _extract_pdf(self, filename: str, data: bytes) -> ExtractedText:
        """Extract the text layer page by page using pymupdf (fitz).

        Pages are joined in order with blank lines; pages without a text
        layer are skipped.
        """
        import fitz  # type: ignore[import-untyped]

        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as exc:
            logger.exception("Failed to open PDF: %s", filename)
            raise ContainerCorrupt(str(exc), hint=PDF_HINT) from exc

        with doc:
            pages = []
            for page in doc:
                text = page.get_text("text").replace("\r\n", "\n").strip()
                if text:
                    pages.append(text)
            metadata = doc.metadata or {}

        title = (metadata.get("title") or "").strip()
        author = (metadata.get("author") or "").strip()
        return ExtractedText(
            title=title or strip_extension(filename),
            author=author or UNKNOWN_AUTHOR,
            content="\n\n".join(pages),
            file_format=DocumentFormat.PDF,
        )
