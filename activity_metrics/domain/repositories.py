"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from .models import ActivityCollections


class ErrorKind(str, Enum):
    MISSING_SOURCE = "missing_source"
    INVALID_JSON = "invalid_json"
    INVALID_SHAPE = "invalid_shape"


@dataclass(frozen=True)
class LoadOutcome:
    """Either the loaded collections or the reason loading failed."""

    collections: ActivityCollections | None = None
    error: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None and self.collections is not None

    @classmethod
    def success(cls, collections: ActivityCollections) -> "LoadOutcome":
        return cls(collections=collections)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> "LoadOutcome":
        return cls(error=error, message=message)


class ActivityRepository(Protocol):
    """Provides the already-fetched activity collections for one query cycle."""

    def load(self) -> LoadOutcome:
        ...
