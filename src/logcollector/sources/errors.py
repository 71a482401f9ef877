"""Errors raised while retrieving content from a source."""


class SourceError(Exception):
    """Base exception for source retrieval failures."""


class SourceUnavailable(SourceError):
    """Raised when there is nothing to collect, e.g. the shell cannot be started."""


class CommandFailure(SourceError):
    """Raised when a collection command cannot run to completion."""


class EncodingError(SourceError):
    """Raised when file content cannot be decoded with the declared encoding."""
