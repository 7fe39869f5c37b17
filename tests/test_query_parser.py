"""
Structured Query Parser Tests

Field lists, filter clauses and predicate construction.
"""

import sys
import unittest
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from logqa.agent.core.query_parser import (
    build_predicate,
    clean_filters,
    extract_fields_and_filters,
    extract_filters_only,
)


class TestExtractFieldsAndFilters(unittest.TestCase):
    """list/show/find <fields> [where/with/having/for <conditions>]"""

    def test_fields_with_and(self):
        parsed = extract_fields_and_filters("list deviceid and model")
        self.assertEqual(parsed.fields, ["DeviceId", "LogData.Model"])
        self.assertEqual(parsed.filters, {})

    def test_fields_with_commas(self):
        parsed = extract_fields_and_filters("show deviceid, ward, state")
        self.assertEqual(parsed.fields, ["DeviceId", "LogData.Ward", "LogData.State"])

    def test_field_order_is_preserved(self):
        parsed = extract_fields_and_filters("find timestamp and deviceid")
        self.assertEqual(parsed.fields, ["Timestamp", "DeviceId"])

    def test_and_inside_a_word_is_not_a_separator(self):
        parsed = extract_fields_and_filters("list brand and standardcode")
        self.assertEqual(parsed.fields, ["brand", "standardcode"])

    def test_punctuation_is_stripped_from_fields(self):
        parsed = extract_fields_and_filters("list deviceid? and 'model'")
        self.assertEqual(parsed.fields, ["DeviceId", "LogData.Model"])

    def test_identifier_filter_is_exact(self):
        parsed = extract_fields_and_filters("find model for deviceid=ABC123")
        self.assertEqual(parsed.fields, ["LogData.Model"])
        self.assertEqual(parsed.filters, {"DeviceId": "ABC123"})

    def test_other_filters_are_substring_regex(self):
        parsed = extract_fields_and_filters("list deviceid where ward=icu")
        self.assertEqual(
            parsed.filters,
            {"LogData.Ward": {"$regex": "icu", "$options": "i"}}
        )

    def test_space_separated_condition(self):
        parsed = extract_fields_and_filters("list deviceid, model where state Error")
        self.assertEqual(
            parsed.filters,
            {"LogData.State": {"$regex": "Error", "$options": "i"}}
        )

    def test_quoted_values(self):
        parsed = extract_fields_and_filters("list deviceid where ward='ICU 2'")
        self.assertEqual(parsed.filters["LogData.Ward"]["$regex"], "ICU 2")

    def test_multiple_conditions(self):
        parsed = extract_fields_and_filters("list model where deviceid=D1 and ward=icu")
        self.assertEqual(parsed.filters["DeviceId"], "D1")
        self.assertIn("LogData.Ward", parsed.filters)

    def test_condition_without_value_is_dropped(self):
        parsed = extract_fields_and_filters("list model where ward")
        self.assertEqual(parsed.filters, {})

    def test_non_matching_line(self):
        parsed = extract_fields_and_filters("what happened yesterday")
        self.assertEqual(parsed.fields, [])
        self.assertEqual(parsed.filters, {})

    def test_only_punctuation_yields_no_fields(self):
        parsed = extract_fields_and_filters("list ???")
        self.assertEqual(parsed.fields, [])


class TestExtractFiltersOnly(unittest.TestCase):
    """Trailing filter clause of show-logs lines."""

    def test_identifier_filter(self):
        self.assertEqual(
            extract_filters_only("show logs for deviceid=ABC123"),
            {"DeviceId": "ABC123"}
        )

    def test_non_identifier_is_anchored(self):
        filters = extract_filters_only("show all logs where ward=ICU")
        self.assertEqual(filters, {"LogData.Ward": {"$regex": "^ICU$", "$options": "i"}})

    def test_anchored_value_is_escaped(self):
        filters = extract_filters_only("show logs with model=X.1+")
        self.assertEqual(filters["LogData.Model"]["$regex"], r"^X\.1\+$")

    def test_conditions_without_equals_are_ignored(self):
        filters = extract_filters_only("show logs for ward ICU and deviceid=D9")
        self.assertEqual(filters, {"DeviceId": "D9"})

    def test_no_clause(self):
        self.assertEqual(extract_filters_only("show all logs"), {})


class TestPredicates(unittest.TestCase):

    def test_identifier_value_is_literal(self):
        self.assertEqual(build_predicate("TagId", "T-1"), "T-1")
        self.assertEqual(build_predicate("UserId", "u.1", anchored=True), "u.1")

    def test_invalid_pattern_is_escaped(self):
        predicate = build_predicate("LogData.Description", "pump (left")
        self.assertEqual(predicate["$regex"], r"pump\ \(left")
        self.assertEqual(predicate["$options"], "i")

    def test_valid_pattern_is_kept(self):
        predicate = build_predicate("LogData.Description", "occlu.*")
        self.assertEqual(predicate["$regex"], "occlu.*")

    def test_clean_filters_drops_empty_values(self):
        self.assertEqual(
            clean_filters({"DeviceId": "", "LogData.Ward": None, "TagId": "T1"}),
            {"TagId": "T1"}
        )
        self.assertEqual(clean_filters(None), {})


if __name__ == "__main__":
    unittest.main()
