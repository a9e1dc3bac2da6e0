"""Tests for conflict report rendering."""
from datetime import datetime

from entrel.relations import (
    Conflict,
    ConflictReport,
    DateRange,
    NoConflictChecker,
    ValidationResult,
    conflict_messages,
    format_date_range,
)
from entrel.relations.validation import CONFLICT_HEADER, OPENING_HOURS_MESSAGE


class TestFormatDateRange:

    def test_same_day(self):
        assert (
            format_date_range(datetime(2024, 1, 15, 10), datetime(2024, 1, 15, 12))
            == "15 January 2024, 10:00–12:00"
        )

    def test_spanning_days(self):
        assert (
            format_date_range(datetime(2024, 1, 15, 10), datetime(2024, 1, 16, 12))
            == "15 January 2024, 10:00 – 16 January 2024, 12:00"
        )


class TestConflictMessages:

    def test_clear_report(self):
        report = ConflictReport()
        assert report.is_clear
        assert conflict_messages(report) == []

    def test_conflicts_combined_into_one_message(self):
        report = ConflictReport(
            conflicts=[
                Conflict(
                    "Yoga",
                    "https://example.org/option/1",
                    datetime(2024, 1, 15, 10),
                    datetime(2024, 1, 15, 12),
                ),
                Conflict(
                    "Pilates",
                    "https://example.org/option/2",
                    datetime(2024, 1, 16, 9),
                    datetime(2024, 1, 16, 10),
                ),
            ]
        )

        messages = conflict_messages(report)

        assert len(messages) == 1
        lines = messages[0].split("\n")
        assert lines[0] == CONFLICT_HEADER
        assert lines[1] == "- Yoga (15 January 2024, 10:00–12:00): https://example.org/option/1"
        assert lines[2].startswith("- Pilates (16 January 2024")

    def test_opening_hours(self):
        messages = conflict_messages(ConflictReport(openinghours=True))
        assert messages == [OPENING_HOURS_MESSAGE]


class TestNoConflictChecker:

    def test_reports_nothing(self):
        ranges = [DateRange(datetime(2024, 1, 15, 10), datetime(2024, 1, 15, 12))]
        assert NoConflictChecker().check(5, ranges, 0, "option").is_clear


class TestValidationResult:

    def test_empty_is_valid(self):
        assert ValidationResult().is_valid

    def test_messages_accumulate_per_field(self):
        result = ValidationResult()
        result.add("entities_entityid_0", "first")
        result.extend("entities_entityid_0", ["second"])
        result.add("entities_entityid_1", "other")

        assert not result.is_valid
        assert result.errors == {
            "entities_entityid_0": "first\nsecond",
            "entities_entityid_1": "other",
        }
