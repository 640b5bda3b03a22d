"""JSON-snapshot-backed repositories for activity data."""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from io import BytesIO
from pathlib import Path
from typing import Any

from activity_metrics.domain.repositories import ActivityRepository, ErrorKind, LoadOutcome
from activity_metrics.infrastructure.parsing.records import COLLECTION_KEYS, collections_from_payload

logger = logging.getLogger(__name__)


def _read_text(source: BytesIO | Path | bytes | str) -> str:
    if isinstance(source, bytes):
        return source.decode("utf-8")
    if isinstance(source, BytesIO):
        return source.getvalue().decode("utf-8")
    return Path(source).read_text(encoding="utf-8")


def _shape_problem(payload: Any) -> str | None:
    if not isinstance(payload, Mapping):
        return "snapshot must be a JSON object"
    for keys in COLLECTION_KEYS.values():
        for key in keys:
            value = payload.get(key)
            if value is None:
                continue
            if not isinstance(value, list) or not all(isinstance(row, dict) for row in value):
                return f"{key!r} must be a list of objects"
    return None


class JsonActivityRepository(ActivityRepository):
    """Loads a snapshot of the REST collections dumped to a single JSON document."""

    def __init__(self, source: BytesIO | Path | bytes | str) -> None:
        self._source = source

    def load(self) -> LoadOutcome:
        if isinstance(self._source, (str, Path)) and not Path(self._source).exists():
            return LoadOutcome.failure(ErrorKind.MISSING_SOURCE, f"Snapshot not found: {self._source}")
        try:
            payload = json.loads(_read_text(self._source))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            return LoadOutcome.failure(ErrorKind.INVALID_JSON, f"Snapshot is not valid JSON: {exc}")

        problem = _shape_problem(payload)
        if problem:
            return LoadOutcome.failure(ErrorKind.INVALID_SHAPE, problem)

        collections = collections_from_payload(payload)
        logger.info("Loaded snapshot: %s", collections.sizes())
        return LoadOutcome.success(collections)


class InMemoryActivityRepository(ActivityRepository):
    """Wraps payloads already fetched by the caller (for example from the REST client)."""

    def __init__(self, payload: Mapping[str, Any]) -> None:
        self._payload = payload

    def load(self) -> LoadOutcome:
        problem = _shape_problem(self._payload)
        if problem:
            return LoadOutcome.failure(ErrorKind.INVALID_SHAPE, problem)
        return LoadOutcome.success(collections_from_payload(self._payload))
