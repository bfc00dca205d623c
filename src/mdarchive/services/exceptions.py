"""Custom exceptions for mdarchive services."""


class MdArchiveError(Exception):
    """Base class for mdarchive errors."""


class ArchiveTargetError(MdArchiveError):
    """Raised when the archive destination cannot hold markdown lines.

    Attributes:
        path: Path (or buffer name) of the rejected target
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str = "Archive target is not a valid markdown file"):
        """Initialize ArchiveTargetError.

        Args:
            path: Path (or buffer name) of the rejected target
            message: Human-readable error message
        """
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
