"""ZIP container access for EPUB, DOCX, ODT and CBZ documents."""

import io
import logging
import zipfile
import zlib
from fnmatch import fnmatch

from speedreader.errors import (
    ContainerCorrupt,
    ContainerMissingEntry,
    MalformedArchiveEntry,
)

logger = logging.getLogger(__name__)

_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError)


class Container:
    """Read-only view over an in-memory ZIP archive.

    Use ``open_container`` to construct one; it validates the archive.
    """

    def __init__(self, archive: zipfile.ZipFile) -> None:
        self._archive = archive

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._archive.close()

    def list_entries(self, *patterns: str) -> list[str]:
        """List file entries whose path matches any glob pattern.

        Matching is case-insensitive. Directories are skipped. Paths are
        returned in archive order; callers that need a reading order sort
        them themselves.

        Args:
            patterns: Glob patterns such as ``"*.xhtml"``. No patterns
                means every file entry.
        """
        entries = []
        for info in self._archive.infolist():
            if info.is_dir():
                continue
            name = info.filename.lower()
            if not patterns or any(fnmatch(name, p.lower()) for p in patterns):
                entries.append(info.filename)
        return entries

    def has_entry(self, path: str) -> bool:
        try:
            self._archive.getinfo(path)
        except KeyError:
            return False
        return True

    def read_bytes(self, path: str) -> bytes:
        """Read an entry's raw bytes.

        Raises:
            ContainerMissingEntry: If the entry does not exist.
            ContainerCorrupt: If the entry data cannot be decompressed.
        """
        try:
            return self._archive.read(path)
        except KeyError:
            raise ContainerMissingEntry(path) from None
        except _READ_ERRORS as exc:
            logger.warning("Failed to read archive entry %s: %s", path, exc)
            raise ContainerCorrupt(str(exc)) from exc

    def read_entry(self, path: str) -> str:
        """Read an entry and decode it as UTF-8 text.

        Raises:
            ContainerMissingEntry: If the entry does not exist.
            ContainerCorrupt: If the entry data cannot be decompressed.
            MalformedArchiveEntry: If the entry is not valid UTF-8.
        """
        data = self.read_bytes(path)
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise MalformedArchiveEntry(path) from exc

    def read_optional_entry(self, path: str) -> str | None:
        """Like ``read_entry`` but returns None when the entry is absent."""
        if not self.has_entry(path):
            return None
        return self.read_entry(path)


def open_container(data: bytes) -> Container:
    """Open raw bytes as a ZIP container.

    Raises:
        ContainerCorrupt: If the bytes are not a readable ZIP archive.
    """
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except _READ_ERRORS as exc:
        raise ContainerCorrupt(str(exc)) from exc
    return Container(archive)
