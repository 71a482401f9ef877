"""Persisted status record for scheduled collections."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

SCHEMA_VERSION = 1


class CollectionStatus(BaseModel):
    """Last-collection bookkeeping stored in a status file.

    Attributes:
        schema_version: Layout version of the stored record.
        last_collection_time: Time of the last successful collection, if any.
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: int = SCHEMA_VERSION
    last_collection_time: Optional[datetime] = None


__all__ = ["SCHEMA_VERSION", "CollectionStatus"]
