"""Source strategies for obtaining collected content."""

from .errors import CommandFailure, EncodingError, SourceError, SourceUnavailable
from .executor import CommandOutput, report_output, run_source
from .reader import DEFAULT_CONSUMED_SUFFIX, mark_consumed, read_source

__all__ = [
    "DEFAULT_CONSUMED_SUFFIX",
    "CommandOutput",
    "CommandFailure",
    "EncodingError",
    "SourceError",
    "SourceUnavailable",
    "mark_consumed",
    "read_source",
    "report_output",
    "run_source",
]
