"""Status store errors."""


class StorageError(Exception):
    """Raised when the status file cannot be read or written."""
