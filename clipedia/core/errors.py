"""Exceptions raised by the clipboard pipeline."""


class ClipediaError(Exception):
    """Base exception for all Clipedia errors."""


class CaptureError(ClipediaError):
    """Raised when the OS clipboard cannot be read or written."""


class StorageError(ClipediaError):
    """Raised on database connection, statement or constraint failures."""


class PatternError(ClipediaError):
    """Raised when a user-supplied search pattern is not a valid regex."""
