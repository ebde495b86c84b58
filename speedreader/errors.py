"""Error taxonomy for document ingestion.

Every error carries a user-facing message and, where one exists, a
remediation ``hint`` the import flow can show next to it.
"""


class SpeedreaderError(Exception):
    """Base class for all ingestion failures."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint

    def user_message(self) -> str:
        """Message with the remediation hint appended, if any."""
        if self.hint:
            return f"{self.message} {self.hint}"
        return self.message


class UnsupportedFormat(SpeedreaderError):
    """The file extension maps to no known format."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(
            f"Unsupported file format: '{extension}'.",
            hint="Convert the file to EPUB, PDF, DOCX or plain text first.",
        )


class ContainerCorrupt(SpeedreaderError):
    """A ZIP-based container could not be opened."""

    def __init__(self, detail: str = "", hint: str | None = None) -> None:
        message = "The document archive is corrupt or not a valid archive."
        if detail:
            message = f"{message} ({detail})"
        super().__init__(
            message,
            hint=hint or "Re-export or re-download the file and try again.",
        )


class ContainerMissingEntry(SpeedreaderError):
    """A required fixed entry is absent from a container."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f"Invalid document archive: missing '{path}'.",
            hint="Re-save the document from its original application.",
        )


class MalformedArchiveEntry(SpeedreaderError):
    """A payload entry inside a container could not be decoded as text."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Could not decode archive entry '{path}' as text.")


class UnrecoverableBinaryFormat(SpeedreaderError):
    """Heuristic salvage produced too little text to be a real document."""


class FormatNotSupported(SpeedreaderError):
    """The format is recognized but deliberately not decoded."""

    def __init__(self, reason: str, hint: str | None = None) -> None:
        self.reason = reason
        super().__init__(reason, hint=hint)
