"""
Field Vocabulary Tests

Alias resolution and dotted-path reads on nested log records.
"""

import sys
import unittest
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logqa.models import FIELD_ALIASES, get_path, is_identifier_field, resolve_field


class TestResolveField(unittest.TestCase):

    def test_aliases_are_case_insensitive(self):
        self.assertEqual(resolve_field("deviceid"), "DeviceId")
        self.assertEqual(resolve_field("DEVICEID"), "DeviceId")
        self.assertEqual(resolve_field("Ward"), "LogData.Ward")

    def test_nested_aliases(self):
        self.assertEqual(resolve_field("model"), "LogData.Model")
        self.assertEqual(resolve_field("alertcode"), "LogData.TagDetail.AlertCode")
        self.assertEqual(resolve_field("tagdetailmessage"), "LogData.TagDetail.Message")

    def test_both_organization_spellings(self):
        self.assertEqual(resolve_field("organizationid"), "OrganizationId")
        self.assertEqual(resolve_field("organisationid"), "OrganizationId")

    def test_unknown_token_passes_through(self):
        self.assertEqual(resolve_field("LogData.Custom"), "LogData.Custom")
        self.assertEqual(resolve_field("firmware"), "firmware")

    def test_whitespace_is_trimmed(self):
        self.assertEqual(resolve_field("  state "), "LogData.State")

    def test_alias_table_is_read_only(self):
        with self.assertRaises(TypeError):
            FIELD_ALIASES["ward"] = "Somewhere.Else"

    def test_every_alias_key_is_lowercase(self):
        for key in FIELD_ALIASES:
            self.assertEqual(key, key.lower())


class TestIdentifierFields(unittest.TestCase):

    def test_identifiers(self):
        for field in ("DeviceId", "OrganizationId", "UserId", "TagId"):
            self.assertTrue(is_identifier_field(field))

    def test_non_identifiers(self):
        self.assertFalse(is_identifier_field("LogData.Ward"))
        self.assertFalse(is_identifier_field("deviceid"))


class TestGetPath(unittest.TestCase):

    def setUp(self):
        self.record = {
            "DeviceId": "ABC123",
            "LogData": {"Ward": "ICU", "TagDetail": {"AlertCode": "E42"}},
        }

    def test_top_level_and_nested(self):
        self.assertEqual(get_path(self.record, "DeviceId"), "ABC123")
        self.assertEqual(get_path(self.record, "LogData.Ward"), "ICU")
        self.assertEqual(get_path(self.record, "LogData.TagDetail.AlertCode"), "E42")

    def test_missing_segments_return_none(self):
        self.assertIsNone(get_path(self.record, "LogData.Model"))
        self.assertIsNone(get_path(self.record, "Other.Field"))
        self.assertIsNone(get_path({"LogData": None}, "LogData.Ward"))
        self.assertIsNone(get_path({"LogData": "text"}, "LogData.Ward"))
        self.assertIsNone(get_path(None, "DeviceId"))


if __name__ == "__main__":
    unittest.main()
