"""Tests for oh_blocks/config.py Settings."""

import os
import unittest

from pydantic import ValidationError

from oh_blocks.config import DEFAULT_DATA_FILE, Settings
from oh_blocks.provider import JsonOpeningHoursProvider


class TestSettings(unittest.TestCase):
    def test_default_data_file_is_packaged_sample(self):
        self.assertTrue(os.path.isabs(DEFAULT_DATA_FILE))
        self.assertTrue(os.path.exists(DEFAULT_DATA_FILE))
        self.assertEqual(Settings.model_fields["data_file"].default, DEFAULT_DATA_FILE)

    def test_sample_document_loads(self):
        entity = JsonOpeningHoursProvider(DEFAULT_DATA_FILE).get_entity("node", "1")
        self.assertEqual(entity.label(), "Central Library")

    def test_rejects_unknown_time_zones(self):
        for name in ("Mars/Olympus_Mons", "Europe", "a" * 300):
            with self.subTest(tz=name[:20]):
                with self.assertRaises(ValidationError):
                    Settings(OH_TIMEZONE=name)

    def test_accepts_iana_time_zone(self):
        self.assertEqual(Settings(OH_TIMEZONE="Asia/Tokyo").timezone, "Asia/Tokyo")


if __name__ == "__main__":
    unittest.main()
