"""Tests for oh_blocks/models.py."""

import unittest
from datetime import datetime, timezone
from functools import cmp_to_key

from pydantic import ValidationError

from oh_blocks.models import (
    PERMANENT,
    CacheableMetadata,
    DateRange,
    EntityInterface,
    Occurrence,
    TableViewModel,
)

from tests.fixtures import make_entity, occurrence

UTC = timezone.utc


class TestEntity(unittest.TestCase):
    def test_label_and_cache_tags(self):
        entity = make_entity("42", "Harbour Branch")
        self.assertEqual(entity.label(), "Harbour Branch")
        self.assertEqual(entity.get_cache_tags(), ["node:42"])
        self.assertIsInstance(entity, EntityInterface)


class TestDateRange(unittest.TestCase):
    def test_rejects_reversed_range(self):
        with self.assertRaises(ValidationError):
            DateRange(start=datetime(2026, 10, 19, tzinfo=UTC), end=datetime(2026, 10, 18, tzinfo=UTC))

    def test_rejects_naive_datetimes(self):
        with self.assertRaises(ValidationError):
            DateRange(start=datetime(2026, 10, 18), end=datetime(2026, 10, 19))

    def test_intersects_is_half_open(self):
        week = DateRange(start=datetime(2026, 10, 18, tzinfo=UTC), end=datetime(2026, 10, 25, tzinfo=UTC))
        self.assertTrue(week.intersects(datetime(2026, 10, 17, 22, tzinfo=UTC), datetime(2026, 10, 18, 2, tzinfo=UTC)))
        self.assertFalse(week.intersects(datetime(2026, 10, 17, 9, tzinfo=UTC), datetime(2026, 10, 18, tzinfo=UTC)))
        self.assertFalse(week.intersects(datetime(2026, 10, 25, tzinfo=UTC), datetime(2026, 10, 25, 9, tzinfo=UTC)))


class TestOccurrence(unittest.TestCase):
    def test_open_alias(self):
        occ = Occurrence.model_validate(
            {"start": "2026-10-19T09:00:00+00:00", "end": "2026-10-19T17:00:00+00:00", "open": True}
        )
        self.assertTrue(occ.is_open)
        self.assertEqual(occ.messages, [])

    def test_defaults_to_closed(self):
        occ = Occurrence(start=datetime(2026, 10, 19, 9, tzinfo=UTC), end=datetime(2026, 10, 19, 17, tzinfo=UTC))
        self.assertFalse(occ.is_open)

    def test_rejects_end_before_start(self):
        with self.assertRaises(ValidationError):
            Occurrence(start=datetime(2026, 10, 19, 17, tzinfo=UTC), end=datetime(2026, 10, 19, 9, tzinfo=UTC))

    def test_sort_by_start_then_end(self):
        a = occurrence(1, "09:00", "12:00")
        b = occurrence(1, "09:00", "17:00")
        c = occurrence(0, "18:00", "19:00")
        self.assertEqual(Occurrence.sort(a, b), -1)
        self.assertEqual(Occurrence.sort(b, a), 1)
        self.assertEqual(Occurrence.sort(a, occurrence(1, "09:00", "12:00")), 0)
        self.assertEqual(sorted([b, a, c], key=cmp_to_key(Occurrence.sort)), [c, a, b])

    def test_cacheability(self):
        occ = occurrence(1, tags=["node:1"])
        self.assertEqual(occ.get_cache_tags(), ["node:1"])
        self.assertEqual(occ.get_cache_contexts(), [])
        self.assertEqual(occ.get_cache_max_age(), PERMANENT)


class TestCacheableMetadata(unittest.TestCase):
    def test_chaining(self):
        metadata = CacheableMetadata().add_cache_contexts(["timezone"]).add_cache_tags(["a"]).set_cache_max_age(60)
        self.assertEqual(metadata.contexts, {"timezone"})
        self.assertEqual(metadata.tags, {"a"})
        self.assertEqual(metadata.max_age, 60)

    def test_rejects_negative_max_age(self):
        with self.assertRaises(ValueError):
            CacheableMetadata().set_cache_max_age(-5)

    def test_dependency_merges_tags_and_keeps_max_age(self):
        metadata = CacheableMetadata().set_cache_max_age(3600)
        metadata.add_cacheable_dependency(occurrence(1, tags=["node:1"]))
        self.assertEqual(metadata.tags, {"node:1"})
        self.assertEqual(metadata.max_age, 3600)

    def test_dependency_with_lower_max_age_wins(self):
        metadata = CacheableMetadata().set_cache_max_age(3600)
        metadata.add_cacheable_dependency(CacheableMetadata(max_age=60, tags={"x"}))
        self.assertEqual(metadata.max_age, 60)
        self.assertEqual(metadata.tags, {"x"})

    def test_uncacheable_dependency(self):
        metadata = CacheableMetadata().set_cache_max_age(3600)
        metadata.add_cacheable_dependency(object())
        self.assertEqual(metadata.max_age, 0)

    def test_merge_and_apply_to(self):
        table = TableViewModel(header={"day": "Day"}, cache=CacheableMetadata(tags={"existing"}, max_age=PERMANENT))
        CacheableMetadata(contexts={"timezone"}, tags={"node:1"}, max_age=3600).apply_to(table)
        self.assertEqual(table.cache.tags, {"existing", "node:1"})
        self.assertEqual(table.cache.contexts, {"timezone"})
        self.assertEqual(table.cache.max_age, 3600)

    def test_serializes_sorted_lists(self):
        metadata = CacheableMetadata(contexts={"timezone"}, tags={"b", "a"}, max_age=3600)
        self.assertEqual(
            metadata.model_dump(mode="json"),
            {"contexts": ["timezone"], "tags": ["a", "b"], "max_age": 3600},
        )


if __name__ == "__main__":
    unittest.main()
