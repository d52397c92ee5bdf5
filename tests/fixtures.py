"""Shared test fakes and helpers."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from oh_blocks.models import DateRange, Entity, Occurrence

UTC = timezone.utc

# Sunday 18 October 2026, mid-afternoon.
SUNDAY = datetime(2026, 10, 18, 15, 30, tzinfo=UTC)


def fixed_clock(now: datetime = SUNDAY):
    return lambda: now


def make_entity(entity_id: str = "1", name: str = "Central Library") -> Entity:
    return Entity(entity_type="node", id=entity_id, name=name)


def occurrence(
    day: int,
    start: str = "09:00",
    end: str = "17:00",
    *,
    is_open: bool = True,
    messages: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
    tz=UTC,
) -> Occurrence:
    """Occurrence on ``day`` days after 18 October 2026, between local ``start`` and ``end``."""
    base = datetime(2026, 10, 18, tzinfo=tz) + timedelta(days=day)
    sh, sm = (int(p) for p in start.split(":"))
    eh, em = (int(p) for p in end.split(":"))
    return Occurrence(
        start=base.replace(hour=sh, minute=sm),
        end=base.replace(hour=eh, minute=em),
        is_open=is_open,
        messages=messages or [],
        cache_tags=tags or [],
    )


class FakeProvider:
    """Returns a fixed list of occurrences and records each call."""

    def __init__(self, occurrences: Optional[List[Occurrence]] = None) -> None:
        self.occurrences = list(occurrences or [])
        self.calls: List[tuple] = []

    def get_occurrences(self, entity, date_range: DateRange) -> List[Occurrence]:
        self.calls.append((entity, date_range))
        return list(self.occurrences)


def write_document(document: Dict[str, Any]) -> str:
    """Write ``document`` as JSON to a temporary file and return its path."""
    fd, path = tempfile.mkstemp(suffix=".json")
    with os.fdopen(fd, "w", encoding="utf-8") as fh:
        json.dump(document, fh)
    return path
