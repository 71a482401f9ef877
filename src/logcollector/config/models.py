"""Settings model for logcollector."""

from __future__ import annotations

import codecs
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CollectorConfig(BaseModel):
    """Defaults applied to every collection run.

    Attributes:
        encoding: Encoding that file sources must be valid in.
        consumed_suffix: Suffix appended to files moved after collection.
        command_timeout_seconds: Time limit for command sources; None waits indefinitely.
        log_level: Verbosity of the stderr error channel.
    """

    model_config = ConfigDict(extra="forbid")

    encoding: str = "shift_jis"
    consumed_suffix: str = ".collected"
    command_timeout_seconds: Optional[float] = Field(default=None, gt=0)
    log_level: str = "WARNING"

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value}") from exc
        return value

    @field_validator("consumed_suffix")
    @classmethod
    def _non_empty_suffix(cls, value: str) -> str:
        if not value:
            raise ValueError("consumed_suffix must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level: {value}")
        return level


__all__ = ["CollectorConfig"]
