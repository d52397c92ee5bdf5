"""The weekly opening hours block.

The block renders a table like::

    |-----------|-----------------------|
    | Day       | Hours                 |
    |-----------|-----------------------|
    | Sunday    | Closed                |
    | Monday    | Open 9:00am to 5:00pm |
    | Tuesday   | Open 9:00am to 5:00pm |
    | Wednesday | Open 9:00am to 5:00pm |
    | Thursday  | Open 9:00am to 5:00pm |
    | Friday    | Open 9:00am to 5:00pm |
    | Saturday  | Closed                |
    |-----------|-----------------------|

``build_weekly_table`` does the work and takes all of its collaborators as
arguments. ``WeeklyHoursBlock`` wraps it with the block definition and the
context handling the HTTP layer uses.
"""

from __future__ import annotations

from datetime import datetime, timezone, tzinfo
from functools import cmp_to_key
from typing import Any, Callable, Dict, List, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel

from .config import Settings
from .dates import DAYS_PER_WEEK, format_time, week_days, week_range, weekday_number
from .i18n import Translator
from .models import CacheableMetadata, EntityInterface, Occurrence, TableRow, TableViewModel
from .provider import OpeningHoursProvider

BLOCK_ID = "oh_blocks_sample_a"

# Rendered tables expire after an hour even if no occurrence changes.
CACHE_MAX_AGE = 3600

Clock = Callable[[], datetime]
Translate = Callable[..., str]


def _utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def unique_messages(messages: List[str]) -> List[str]:
    """Drop repeated messages, keeping the first of each in order."""
    return list(dict.fromkeys(messages))


def format_occurrence(occurrence: Occurrence, translate: Translate, tz: tzinfo) -> str:
    """Return e.g. ``Open 9:00am to 5:00pm (Holiday)`` for one occurrence."""
    status = translate("Open") if occurrence.is_open else translate("Closed")
    start = format_time(occurrence.start, tz)
    end = format_time(occurrence.end, tz)
    messages = unique_messages(occurrence.messages)
    suffix = f" ({' '.join(messages)})" if messages else ""
    return f"{status} {start} to {end}{suffix}"


def build_weekly_table(
    entity: Any,
    provider: OpeningHoursProvider,
    clock: Clock,
    translate: Translate,
    tz: tzinfo,
) -> TableViewModel:
    """Build the weekly opening hours table for ``entity``.

    Args:
        entity: the context entity; must satisfy ``EntityInterface``.
        provider: source of occurrences.
        clock: returns the current time.
        translate: translates fixed UI strings.
        tz: the viewer's time zone. The week starts at midnight today in
            this zone and occurrences are placed on weekdays in it.

    Returns:
        A table with one row per weekday, Sunday first, carrying the cache
        metadata of everything it was built from.

    Raises:
        TypeError: if ``entity`` is missing or is not an entity.
    """
    if not isinstance(entity, EntityInterface):
        raise TypeError(f"weekly hours block requires an entity context, got {type(entity).__name__}")

    cacheability = (
        CacheableMetadata()
        # Ranges vary by time zone.
        .add_cache_contexts(["timezone"])
        .set_cache_max_age(CACHE_MAX_AGE)
    )

    date_range = week_range(clock(), tz)
    occurrences = list(provider.get_occurrences(entity, date_range))

    for occurrence in occurrences:
        cacheability.add_cacheable_dependency(occurrence)
    # The table expires hourly whatever its dependencies declare.
    cacheability.set_cache_max_age(CACHE_MAX_AGE)

    occurrences.sort(key=cmp_to_key(Occurrence.sort))

    days: Dict[int, List[Occurrence]] = {number: [] for number in range(DAYS_PER_WEEK)}
    for occurrence in occurrences:
        days[weekday_number(occurrence.start, tz)].append(occurrence)

    names = week_days(translate)
    rows: List[TableRow] = []
    for number, day_occurrences in days.items():
        if day_occurrences:
            hours: Any = [format_occurrence(o, translate, tz) for o in day_occurrences]
        else:
            hours = translate("Closed")
        rows.append(TableRow(day=names[number], hours=hours))

    table = TableViewModel(
        header={"day": translate("Day"), "hours": translate("Hours")},
        rows=rows,
        empty=translate("There are no opening hours for @entity", {"@entity": entity.label()}),
    )
    cacheability.apply_to(table)
    return table


class ContextError(LookupError):
    """Raised for unknown block contexts or a missing required context value."""


class ContextDefinition(BaseModel):
    data_type: str
    label: str
    required: bool = True


class BlockDefinition(BaseModel):
    id: str
    admin_label: str
    category: str
    context: Dict[str, ContextDefinition]


class WeeklyHoursBlock:
    """Block showing an entity's opening hours for the coming week."""

    definition = BlockDefinition(
        id=BLOCK_ID,
        admin_label="Sample Block A",
        category="OH Sample Blocks",
        context={"entity": ContextDefinition(data_type="entity", label="Entity", required=True)},
    )

    def __init__(
        self,
        provider: OpeningHoursProvider,
        *,
        clock: Clock = _utcnow,
        translate: Optional[Translate] = None,
        tz: tzinfo = timezone.utc,
    ) -> None:
        self.provider = provider
        self.clock = clock
        self.translate = translate or Translator()
        self.tz = tz
        self._context: Dict[str, Any] = {}

    @classmethod
    def create(
        cls,
        settings: Settings,
        provider: OpeningHoursProvider,
        *,
        clock: Clock = _utcnow,
        translate: Optional[Translate] = None,
        tz: Optional[tzinfo] = None,
    ) -> "WeeklyHoursBlock":
        """Build a block from application settings.

        ``tz`` overrides the configured default time zone, e.g. with the
        viewer's own.
        """
        if translate is None:
            translate = Translator.from_directory(settings.language, settings.translations_dir)
        return cls(
            provider,
            clock=clock,
            translate=translate,
            tz=tz if tz is not None else ZoneInfo(settings.timezone),
        )

    def set_context_value(self, name: str, value: Any) -> "WeeklyHoursBlock":
        if name not in self.definition.context:
            raise ContextError(f"block {self.definition.id} has no context {name!r}")
        self._context[name] = value
        return self

    def get_context_value(self, name: str) -> Any:
        definition = self.definition.context.get(name)
        if definition is None:
            raise ContextError(f"block {self.definition.id} has no context {name!r}")
        if name not in self._context:
            if definition.required:
                raise ContextError(f"required context {name!r} is missing for block {self.definition.id}")
            return None
        return self._context[name]

    def build(self) -> TableViewModel:
        entity = self.get_context_value("entity")
        return build_weekly_table(entity, self.provider, self.clock, self.translate, self.tz)
