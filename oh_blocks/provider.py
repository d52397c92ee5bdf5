"""Opening hours providers.

A provider turns an entity and a date range into the occurrences that
intersect it. The block only depends on the ``OpeningHoursProvider``
protocol. ``JsonOpeningHoursProvider`` is the implementation the service
ships with: it reads pre-computed occurrences from a JSON document of the
form::

    {
      "entities": [{"entity_type": "node", "id": "1", "name": "Central Library"}],
      "occurrences": [
        {"entity_type": "node", "entity_id": "1",
         "start": "2024-01-01T09:00:00+00:00", "end": "2024-01-01T17:00:00+00:00",
         "open": true, "messages": ["New Year's Day"]}
      ]
    }

The document is read lazily on first use and kept in memory until
``reload`` is called.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional, Protocol, Tuple

from pydantic import BaseModel, Field, ValidationError

from .models import DateRange, Entity, EntityInterface, Occurrence

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when occurrences cannot be loaded."""


class EntityNotFound(LookupError):
    """Raised when the requested entity is not known to the provider."""


class OpeningHoursProvider(Protocol):
    """Source of opening hours occurrences."""

    def get_occurrences(self, entity: EntityInterface, date_range: DateRange) -> List[Occurrence]:
        """Return occurrences for ``entity`` intersecting ``date_range``."""
        ...


class OccurrenceRecord(Occurrence):
    """An occurrence as stored in the JSON document, keyed to its entity."""

    entity_type: str
    entity_id: str

    def to_occurrence(self, extra_tags: List[str]) -> Occurrence:
        return Occurrence(
            start=self.start,
            end=self.end,
            is_open=self.is_open,
            messages=list(self.messages),
            cache_tags=list(dict.fromkeys([*extra_tags, *self.cache_tags])),
            cache_contexts=list(self.cache_contexts),
        )


class OpeningHoursDocument(BaseModel):
    entities: List[Entity] = Field(default_factory=list)
    occurrences: List[OccurrenceRecord] = Field(default_factory=list)


class JsonOpeningHoursProvider:
    """Provider backed by a JSON document on disk."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._document: Optional[OpeningHoursDocument] = None
        self._entities: Dict[Tuple[str, str], Entity] = {}

    def _load(self) -> OpeningHoursDocument:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                raw = fh.read()
        except OSError as exc:
            logger.error("Failed to read opening hours from %s: %s", self.path, exc)
            raise ProviderError(f"cannot read {self.path}: {exc}") from exc
        try:
            document = OpeningHoursDocument.model_validate_json(raw)
        except ValidationError as exc:
            logger.error("Invalid opening hours document %s: %s", self.path, exc)
            raise ProviderError(f"invalid opening hours document {self.path}") from exc
        logger.info(
            "Loaded %d entities and %d occurrences from %s",
            len(document.entities),
            len(document.occurrences),
            self.path,
        )
        return document

    def _get_document(self) -> OpeningHoursDocument:
        with self._lock:
            if self._document is None:
                document = self._load()
                self._entities = {(e.entity_type, e.id): e for e in document.entities}
                self._document = document
            return self._document

    def reload(self) -> None:
        """Forget the loaded document so the next call reads the file again."""
        with self._lock:
            self._document = None
            self._entities = {}

    def get_entity(self, entity_type: str, entity_id: str) -> Entity:
        self._get_document()
        try:
            return self._entities[(entity_type, entity_id)]
        except KeyError:
            raise EntityNotFound(f"{entity_type}:{entity_id}") from None

    def get_occurrences(self, entity: EntityInterface, date_range: DateRange) -> List[Occurrence]:
        document = self._get_document()
        entity_tags = entity.get_cache_tags()
        occurrences = [
            record.to_occurrence(entity_tags)
            for record in document.occurrences
            if record.entity_type == entity.entity_type
            and record.entity_id == entity.id
            and date_range.intersects(record.start, record.end)
        ]
        logger.debug(
            "Found %d occurrences for %s:%s between %s and %s",
            len(occurrences),
            entity.entity_type,
            entity.id,
            date_range.start.isoformat(),
            date_range.end.isoformat(),
        )
        return occurrences
