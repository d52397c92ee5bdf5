"""Pydantic data models shared across the service.

These models describe the entity a block renders for, the occurrences an
opening hours provider returns, the cacheability attached to rendered
output and the table view model the weekly hours block produces. They are
kept separate from the provider's storage format so the block never
depends on where occurrences come from.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Protocol, Set, Union, runtime_checkable

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_serializer, model_validator

# Max-age value meaning "cache forever".
PERMANENT = -1


@runtime_checkable
class CacheableDependencyInterface(Protocol):
    """Anything that can contribute cache contexts, tags and a max-age."""

    def get_cache_contexts(self) -> List[str]: ...

    def get_cache_tags(self) -> List[str]: ...

    def get_cache_max_age(self) -> int: ...


@runtime_checkable
class EntityInterface(Protocol):
    """The capability a block context entity must provide."""

    entity_type: str
    id: str

    def label(self) -> str: ...

    def get_cache_tags(self) -> List[str]: ...


class Entity(BaseModel):
    """A content entity that has opening hours, e.g. a branch or a venue."""

    model_config = ConfigDict(frozen=True)

    entity_type: str
    id: str
    name: str

    def label(self) -> str:
        return self.name

    def get_cache_tags(self) -> List[str]:
        return [f"{self.entity_type}:{self.id}"]


class DateRange(BaseModel):
    """A half-open ``[start, end)`` interval between two zone-aware datetimes."""

    model_config = ConfigDict(frozen=True)

    start: AwareDatetime
    end: AwareDatetime

    @model_validator(mode="after")
    def _check_order(self) -> "DateRange":
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self

    def intersects(self, start: AwareDatetime, end: AwareDatetime) -> bool:
        """Return True if the interval ``[start, end)`` overlaps this range."""
        return start < self.end and end > self.start


class Occurrence(BaseModel):
    """One concrete opening or closing interval for an entity.

    Occurrences are produced by an opening hours provider and are read-only
    here. Each carries its own cacheability so consumers can vary and
    invalidate rendered output on the data it was built from.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start: AwareDatetime
    end: AwareDatetime
    is_open: bool = Field(default=False, alias="open")
    messages: List[str] = Field(default_factory=list)
    cache_tags: List[str] = Field(default_factory=list)
    cache_contexts: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_order(self) -> "Occurrence":
        if self.end < self.start:
            raise ValueError("occurrence end must not be before its start")
        return self

    def get_cache_contexts(self) -> List[str]:
        return list(self.cache_contexts)

    def get_cache_tags(self) -> List[str]:
        return list(self.cache_tags)

    def get_cache_max_age(self) -> int:
        return PERMANENT

    @staticmethod
    def sort(a: "Occurrence", b: "Occurrence") -> int:
        """Comparator ordering occurrences by start, then by end.

        Occurrences with equal start and end compare equal, so a stable sort
        keeps them in the order the provider returned them.
        """
        left = (a.start, a.end)
        right = (b.start, b.end)
        if left < right:
            return -1
        if left > right:
            return 1
        return 0


def _merge_max_age(a: int, b: int) -> int:
    if a == PERMANENT:
        return b
    if b == PERMANENT:
        return a
    return min(a, b)


class CacheableMetadata(BaseModel):
    """Cache contexts, tags and max-age accumulated while building output.

    The mutating methods return ``self`` so calls can be chained.
    """

    contexts: Set[str] = Field(default_factory=set)
    tags: Set[str] = Field(default_factory=set)
    max_age: int = PERMANENT

    @field_serializer("contexts", "tags")
    def _sorted(self, value: Set[str]) -> List[str]:
        return sorted(value)

    def add_cache_contexts(self, contexts: Iterable[str]) -> "CacheableMetadata":
        self.contexts.update(contexts)
        return self

    def add_cache_tags(self, tags: Iterable[str]) -> "CacheableMetadata":
        self.tags.update(tags)
        return self

    def set_cache_max_age(self, max_age: int) -> "CacheableMetadata":
        if max_age < PERMANENT:
            raise ValueError("max_age must be a number of seconds or -1 for permanent")
        self.max_age = max_age
        return self

    def add_cacheable_dependency(self, dependency: Any) -> "CacheableMetadata":
        """Merge the cacheability of ``dependency`` into this object.

        A dependency that cannot describe its own cacheability makes the
        result uncacheable.
        """
        if not isinstance(dependency, CacheableDependencyInterface):
            self.max_age = 0
            return self
        self.contexts.update(dependency.get_cache_contexts())
        self.tags.update(dependency.get_cache_tags())
        self.max_age = _merge_max_age(self.max_age, dependency.get_cache_max_age())
        return self

    def merge(self, other: "CacheableMetadata") -> "CacheableMetadata":
        """Return a new object combining this metadata with ``other``."""
        return CacheableMetadata(
            contexts=self.contexts | other.contexts,
            tags=self.tags | other.tags,
            max_age=_merge_max_age(self.max_age, other.max_age),
        )

    def apply_to(self, target: "TableViewModel") -> None:
        """Attach this metadata to ``target``, keeping what it already has."""
        target.cache = target.cache.merge(self)

    def get_cache_contexts(self) -> List[str]:
        return sorted(self.contexts)

    def get_cache_tags(self) -> List[str]:
        return sorted(self.tags)

    def get_cache_max_age(self) -> int:
        return self.max_age


class TableRow(BaseModel):
    """One table row: a weekday name and either a single text or a list of items."""

    day: str
    hours: Union[str, List[str]]


class TableViewModel(BaseModel):
    """Structured description of a table, ready to be rendered as HTML or JSON."""

    header: Dict[str, str]
    rows: List[TableRow] = Field(default_factory=list)
    empty: str = ""
    cache: CacheableMetadata = Field(default_factory=CacheableMetadata)
