"""File source: read a log file and mark it as consumed."""

from __future__ import annotations

import codecs
from pathlib import Path

from .errors import EncodingError, SourceError

DEFAULT_CONSUMED_SUFFIX = ".collected"


def read_source(path: Path | str, encoding: str) -> bytes | None:
    """Read the file at ``path`` and check that it is valid ``encoding``.

    The decode only validates the content. The file's own bytes are returned so
    the output keeps the source encoding, line endings and trailing content.

    Args:
        path: File to collect.
        encoding: Text encoding of the file, such as ``utf-8`` or ``shift_jis``.

    Returns:
        bytes | None: Raw file content, or None when the file does not exist.

    Raises:
        EncodingError: If the encoding is unknown or the bytes cannot be decoded.
        SourceError: If the existing file cannot be read.
    """
    source = Path(path)
    if not source.exists():
        return None

    try:
        codecs.lookup(encoding)
    except LookupError as exc:
        raise EncodingError(f"Unknown encoding: {encoding}") from exc

    try:
        raw = source.read_bytes()
    except OSError as exc:
        raise SourceError(f"Unable to read {source}: {exc}") from exc

    try:
        raw.decode(encoding)
    except UnicodeDecodeError as exc:
        raise EncodingError(f"{source} is not valid {encoding}: {exc}") from exc
    return raw


def mark_consumed(path: Path | str, suffix: str = DEFAULT_CONSUMED_SUFFIX) -> Path:
    """Rename a collected file so later runs do not pick it up again.

    Args:
        path: File that was collected.
        suffix: Suffix appended to the file name.

    Returns:
        Path: New location of the file.

    Raises:
        SourceError: If the rename fails.
    """
    source = Path(path)
    destination = source.with_name(source.name + suffix)
    try:
        source.replace(destination)
    except OSError as exc:
        raise SourceError(f"Unable to move {source} to {destination}: {exc}") from exc
    return destination


__all__ = ["DEFAULT_CONSUMED_SUFFIX", "read_source", "mark_consumed"]
