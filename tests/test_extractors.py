"""Tests for per-format text extraction."""

import io
import zipfile
from unittest.mock import MagicMock, patch

import pytest

from speedreader.config import IngestionConfig
from speedreader.errors import (
    ContainerCorrupt,
    ContainerMissingEntry,
    FormatNotSupported,
    UnrecoverableBinaryFormat,
)
from speedreader.ingestion.extractors import DocumentExtractor, decode_text
from speedreader.models import UNKNOWN_AUTHOR, DocumentFormat

OPF = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="2.0">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>The Test Book</dc:title>
    <dc:creator>Jane Writer</dc:creator>
  </metadata>
</package>
"""

CONTAINER_XML = """<?xml version="1.0"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

CORE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<cp:coreProperties
    xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties"
    xmlns:dc="http://purl.org/dc/elements/1.1/">
  <dc:title>Quarterly Report</dc:title>
  <dc:creator>Sam Analyst</dc:creator>
</cp:coreProperties>
"""

FB2 = """<?xml version="1.0" encoding="utf-8"?>
<FictionBook xmlns="http://www.gribuser.ru/xml/fictionbook/2.0">
  <description>
    <title-info>
      <genre>prose</genre>
      <author><first-name>Anton</first-name><last-name>Chekhov</last-name></author>
      <book-title>Short Stories</book-title>
    </title-info>
  </description>
  <body>
    <section><p>First paragraph.</p><empty-line/><p>Second paragraph.</p></section>
  </body>
</FictionBook>
"""


def _make_zip(entries: dict[str, bytes | str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


@pytest.fixture
def extractor() -> DocumentExtractor:
    return DocumentExtractor(IngestionConfig())


class TestDecodeText:
    def test_utf8(self) -> None:
        assert decode_text("naïve".encode("utf-8"), "a.txt") == "naïve"

    def test_utf8_bom_is_dropped(self) -> None:
        assert decode_text(b"\xef\xbb\xbfhello", "a.txt") == "hello"

    def test_utf16_is_detected(self) -> None:
        text = "Reading quickly is a skill worth practising every day."
        assert decode_text(text.encode("utf-16"), "a.txt") == text

    def test_undecodable_never_raises(self) -> None:
        result = decode_text(b"\xff\xfe\xfa\x80\x81", "a.txt")
        assert isinstance(result, str)


class TestPlainText:
    def test_normalizes_line_endings_and_trims(self, extractor: DocumentExtractor) -> None:
        result = extractor.extract("notes.txt", b"  line one\r\nline two\rline three\n\n", DocumentFormat.TXT)
        assert result.content == "line one\nline two\nline three"
        assert result.title == "notes"
        assert result.author == UNKNOWN_AUTHOR
        assert result.file_format is DocumentFormat.TXT

    def test_markdown_keeps_its_format(self, extractor: DocumentExtractor) -> None:
        result = extractor.extract("readme.md", b"# Heading\n\nBody", DocumentFormat.MD)
        assert result.content == "# Heading\n\nBody"
        assert result.file_format is DocumentFormat.MD


class TestHtml:
    def test_strips_markup_and_reads_title(self, extractor: DocumentExtractor) -> None:
        html = (
            b"<html><head><title>Page Title</title><script>var x = 1;</script></head>"
            b"<body><h1>Header</h1><p>Body &amp; soul</p></body></html>"
        )
        result = extractor.extract("page.html", html, DocumentFormat.HTML)
        assert result.title == "Page Title"
        assert "Body & soul" in result.content
        assert "var x" not in result.content
        assert "<p>" not in result.content

    def test_title_falls_back_to_filename(self, extractor: DocumentExtractor) -> None:
        result = extractor.extract("page.htm", b"<p>text</p>", DocumentFormat.HTML)
        assert result.title == "page"


class TestEpub:
    def test_bodies_in_lexicographic_path_order(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({
            "OEBPS/chapter10.xhtml": "<html><body><p>Tenth</p></body></html>",
            "OEBPS/chapter02.xhtml": "<html><body><p>Second</p></body></html>",
            "OEBPS/chapter01.html": "<html><body><p>First</p></body></html>",
            "OEBPS/style.css": "p { margin: 0 }",
        })
        result = extractor.extract("book.epub", data, DocumentFormat.EPUB)
        assert result.content == "First\n\nSecond\n\nTenth"

    def test_reads_package_metadata(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({
            "META-INF/container.xml": CONTAINER_XML,
            "OEBPS/content.opf": OPF,
            "OEBPS/text.xhtml": "<html><body><p>Words</p></body></html>",
        })
        result = extractor.extract("book.epub", data, DocumentFormat.EPUB)
        assert result.title == "The Test Book"
        assert result.author == "Jane Writer"

    def test_missing_metadata_uses_defaults(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({"text.xhtml": "<p>Words</p>"})
        result = extractor.extract("My Book.epub", data, DocumentFormat.EPUB)
        assert result.title == "My Book"
        assert result.author == UNKNOWN_AUTHOR

    def test_corrupt_archive(self, extractor: DocumentExtractor) -> None:
        with pytest.raises(ContainerCorrupt):
            extractor.extract("book.epub", b"PK\x03\x04garbage", DocumentFormat.EPUB)


class TestDocx:
    def test_extracts_paragraphs(self, extractor: DocumentExtractor) -> None:
        document_xml = (
            '<?xml version="1.0"?><w:document xmlns:w="w"><w:body>'
            "<w:p><w:r><w:t>First</w:t></w:r></w:p>"
            "<w:p><w:r><w:t>Second &amp; last</w:t></w:r></w:p>"
            "</w:body></w:document>"
        )
        data = _make_zip({
            "word/document.xml": document_xml,
            "docProps/core.xml": CORE_XML,
        })
        result = extractor.extract("report.docx", data, DocumentFormat.DOCX)
        assert result.content == "First Second & last"
        assert result.title == "Quarterly Report"
        assert result.author == "Sam Analyst"

    def test_missing_document_xml(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({"word/styles.xml": "<w:styles/>"})
        with pytest.raises(ContainerMissingEntry) as exc_info:
            extractor.extract("report.docx", data, DocumentFormat.DOCX)
        assert exc_info.value.path == "word/document.xml"

    def test_corrupt_archive(self, extractor: DocumentExtractor) -> None:
        with pytest.raises(ContainerCorrupt):
            extractor.extract("report.docx", b"not a zip", DocumentFormat.DOCX)


class TestOdt:
    def test_extracts_content_xml(self, extractor: DocumentExtractor) -> None:
        content_xml = (
            "<office:document-content><office:body><office:text>"
            "<text:p>Alpha<text:line-break/>Beta</text:p><text:p>Gamma</text:p>"
            "</office:text></office:body></office:document-content>"
        )
        data = _make_zip({"content.xml": content_xml})
        result = extractor.extract("essay.odt", data, DocumentFormat.ODT)
        assert result.content == "Alpha Beta Gamma"
        assert result.title == "essay"

    def test_missing_content_xml(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({"meta.xml": "<office:meta/>"})
        with pytest.raises(ContainerMissingEntry):
            extractor.extract("essay.odt", data, DocumentFormat.ODT)


class TestRtf:
    def test_strips_control_words(self, extractor: DocumentExtractor) -> None:
        rtf = rb"{\rtf1\ansi{\b Hello} world.\par Second line.}"
        result = extractor.extract("memo.rtf", rtf, DocumentFormat.RTF)
        assert result.content == "Hello world. Second line."
        assert result.title == "memo"


class TestFb2:
    def test_extracts_body_and_metadata(self, extractor: DocumentExtractor) -> None:
        result = extractor.extract("stories.fb2", FB2.encode("utf-8"), DocumentFormat.FB2)
        assert result.content == "First paragraph. Second paragraph."
        assert result.title == "Short Stories"
        assert result.author == "Anton Chekhov"


class TestBinarySalvage:
    def test_legacy_doc_salvages_text(self, extractor: DocumentExtractor) -> None:
        data = b"\xd0\xcf\x11\xe0" + b"\x00" * 20 + b"The quick brown fox jumps over the lazy dog." * 3 + b"\x00\x01"
        result = extractor.extract("old.doc", data, DocumentFormat.DOC)
        assert result.content.startswith("The quick brown fox")
        assert result.file_format is DocumentFormat.DOC

    def test_legacy_doc_failure_names_workaround(self, extractor: DocumentExtractor) -> None:
        with pytest.raises(UnrecoverableBinaryFormat) as exc_info:
            extractor.extract("old.doc", b"\xd0\xcf\x11\xe0\x00\x01\x02", DocumentFormat.DOC)
        assert ".docx" in exc_info.value.hint

    def test_mobi_uses_stricter_run_length(self, extractor: DocumentExtractor) -> None:
        # Runs of 15 characters pass the .doc threshold but not the MOBI one
        chunk = b"fifteen chars!!\x00"
        data = chunk * 20
        doc_result = extractor.extract("a.doc", data, DocumentFormat.DOC)
        assert doc_result.content
        with pytest.raises(UnrecoverableBinaryFormat) as exc_info:
            extractor.extract("a.mobi", data, DocumentFormat.MOBI)
        assert "Calibre" in exc_info.value.hint

    def test_azw_variants_keep_their_format(self, extractor: DocumentExtractor) -> None:
        data = b"\x00" + b"A sufficiently long run of readable book text here. " * 4
        result = extractor.extract("a.azw3", data, DocumentFormat.AZW3)
        assert result.file_format is DocumentFormat.AZW3


class TestComicArchives:
    def test_cbz_placeholder_counts_pages(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({
            "001.jpg": b"\xff\xd8",
            "002.PNG": b"\x89PNG",
            "003.webp": b"RIFF",
            "ComicInfo.xml": "<ComicInfo/>",
        })
        result = extractor.extract("hero.cbz", data, DocumentFormat.CBZ)
        assert "containing 3 pages" in result.content
        assert "hero.cbz" in result.content
        assert result.default_chapter_title == "Comic Info"

    def test_cbz_without_images(self, extractor: DocumentExtractor) -> None:
        data = _make_zip({"notes.txt": "no pages"})
        with pytest.raises(FormatNotSupported):
            extractor.extract("empty.cbz", data, DocumentFormat.CBZ)

    def test_cbz_corrupt(self, extractor: DocumentExtractor) -> None:
        with pytest.raises(ContainerCorrupt):
            extractor.extract("bad.cbz", b"garbage", DocumentFormat.CBZ)

    def test_cbr_always_rejected(self, extractor: DocumentExtractor) -> None:
        with pytest.raises(FormatNotSupported) as exc_info:
            extractor.extract("hero.cbr", b"Rar!\x1a\x07\x00", DocumentFormat.CBR)
        assert "CBZ" in exc_info.value.hint


class TestPdf:
    """PDF extraction with a mocked fitz decoder."""

    def _mock_fitz(self, pages: list[str], metadata: dict[str, str]) -> MagicMock:
        mock_pages = []
        for text in pages:
            page = MagicMock()
            page.get_text.return_value = text
            mock_pages.append(page)

        mock_doc = MagicMock()
        mock_doc.__iter__ = lambda self: iter(mock_pages)
        mock_doc.__enter__ = lambda self: self
        mock_doc.__exit__ = MagicMock(return_value=False)
        mock_doc.metadata = metadata

        mock_fitz = MagicMock()
        mock_fitz.open.return_value = mock_doc
        return mock_fitz

    def test_pages_joined_with_blank_lines(self, extractor: DocumentExtractor) -> None:
        mock_fitz = self._mock_fitz(["Page one text.\n", "   ", "Page two text."], {})

        with patch.dict("sys.modules", {"fitz": mock_fitz}):
            result = extractor.extract("paper.pdf", b"%PDF-1.4", DocumentFormat.PDF)

        assert result.content == "Page one text.\n\nPage two text."
        assert result.title == "paper"
        assert result.author == UNKNOWN_AUTHOR
        mock_fitz.open.assert_called_once_with(stream=b"%PDF-1.4", filetype="pdf")

    def test_metadata_title_and_author(self, extractor: DocumentExtractor) -> None:
        mock_fitz = self._mock_fitz(["Text."], {"title": "A Paper", "author": "Dr. Who"})

        with patch.dict("sys.modules", {"fitz": mock_fitz}):
            result = extractor.extract("paper.pdf", b"%PDF", DocumentFormat.PDF)

        assert result.title == "A Paper"
        assert result.author == "Dr. Who"

    def test_unreadable_pdf_raises_corrupt(
        self, extractor: DocumentExtractor, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_fitz = MagicMock()
        mock_fitz.open.side_effect = RuntimeError("Corrupt PDF")

        with patch.dict("sys.modules", {"fitz": mock_fitz}):
            with pytest.raises(ContainerCorrupt):
                extractor.extract("bad.pdf", b"junk", DocumentFormat.PDF)

        assert "Failed to open PDF" in caplog.text
