"""Custom exceptions for music sorter."""


class SorterError(Exception):
    """Base exception for music sorter errors."""
    pass


class MetadataError(SorterError):
    """Raised when the tags of an audio file cannot be read."""
    pass


class FileOperationError(SorterError):
    """Raised when creating a directory, moving or copying a file fails."""
    pass


class ConfigurationError(SorterError):
    """Raised when there's an error in configuration."""
    pass


class SortAbortedError(SorterError):
    """Raised when a sort run cannot continue.

    The partial report collected before the failure is kept on ``report`` so
    callers can still show the transcript.
    """

    def __init__(self, message: str, report=None):
        super().__init__(message)
        self.report = report


class ScriptReadError(SortAbortedError):
    """Raised when the sort script is missing or unreadable."""
    pass


class EnumerationError(SortAbortedError):
    """Raised when the source directory cannot be walked."""
    pass
