"""
Tests for due-date arithmetic and the rule-based deadline calculator
"""

from datetime import datetime, timezone

import pytest

from legal_deadlines.core.deadline_calculator import (
    DEADLINE_RULES,
    LegalDeadlineCalculator,
    add_duration,
    normalize_to_business_day
)


def utc(year, month, day, hour=9):
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


class TestAddDuration:

    def test_days(self):
        assert add_duration(utc(2026, 2, 10), add_days=14) == utc(2026, 2, 24)

    def test_months_keep_day_of_month(self):
        assert add_duration(utc(2026, 2, 10), add_months=1) == utc(2026, 3, 10)

    def test_missing_day_rolls_into_next_month(self):
        assert add_duration(utc(2026, 1, 31), add_months=1) == utc(2026, 3, 3)
        assert add_duration(utc(2028, 1, 31), add_months=1) == utc(2028, 3, 2)
        assert add_duration(utc(2026, 3, 31), add_months=1) == utc(2026, 5, 1)

    def test_month_rollover_across_year_end(self):
        assert add_duration(utc(2026, 12, 31), add_months=2) == utc(2027, 3, 3)
        assert add_duration(utc(2026, 11, 30), add_months=1) == utc(2026, 12, 30)

    def test_months_before_days(self):
        assert add_duration(utc(2026, 1, 31), add_days=1, add_months=1) == utc(2026, 3, 4)

    def test_time_of_day_is_kept(self):
        assert add_duration(utc(2026, 2, 20, 12), add_months=36) == utc(2029, 2, 20, 12)


class TestNormalizeToBusinessDay:

    def test_saturday_moves_to_monday(self):
        assert normalize_to_business_day(utc(2026, 2, 28)) == utc(2026, 3, 2)

    def test_sunday_moves_to_monday(self):
        assert normalize_to_business_day(utc(2026, 3, 1)) == utc(2026, 3, 2)

    def test_weekdays_unchanged(self):
        for day in range(2, 7):
            assert normalize_to_business_day(utc(2026, 3, day)) == utc(2026, 3, day)

    def test_holidays_are_ignored(self):
        # Christmas Day 2026 is a Friday
        assert normalize_to_business_day(utc(2026, 12, 25)) == utc(2026, 12, 25)


@pytest.fixture(scope="module")
def calculator():
    return LegalDeadlineCalculator(years=range(2025, 2028))


class TestLegalDeadlineCalculator:

    def test_appeal_deadlines_with_labour_day(self, calculator):
        result = calculator.calculate("DE", "2026-03-02", "berufung_zpo")

        assert result["ok"]
        first, second = result["deadlines"]
        assert first["calculated_date"] == "2026-04-01"
        assert not first["adjusted_for_weekend_or_holiday"]
        # 2026-05-01 is a Friday and a public holiday
        assert second["calculated_date"] == "2026-05-04"
        assert second["adjusted_for_weekend_or_holiday"]
        assert second["legal_basis"] == "§ 520 Abs. 2 ZPO (2 Monate)"

    def test_christmas_rolls_forward(self, calculator):
        result = calculator.calculate("DE", "2026-12-11", "widerspruch_mahnbescheid")

        (deadline,) = result["deadlines"]
        assert deadline["calculated_date"] == "2026-12-28"
        assert deadline["calculated_date_iso"] == "2026-12-28T00:00:00.000Z"

    def test_austrian_holidays(self, calculator):
        # 8 December is a public holiday in Austria only
        at = calculator.calculate("AT", "2026-11-24", "widerspruch_mahnbescheid")
        de = calculator.calculate("DE", "2026-11-24", "widerspruch_mahnbescheid")

        assert at["deadlines"][0]["calculated_date"] == "2026-12-09"
        assert de["deadlines"][0]["calculated_date"] == "2026-12-08"

    def test_unsupported_jurisdiction_uses_german_calendar(self, calculator):
        result = calculator.calculate("fr", "2026-12-11", "widerspruch_mahnbescheid")

        assert result["jurisdiction"] == "FR"
        assert result["deadlines"][0]["calculated_date"] == "2026-12-28"

    def test_unknown_type(self, calculator):
        result = calculator.calculate("DE", "2026-03-02", "unbekannt")

        assert not result["ok"]
        assert result["error"] == "Unknown deadline type: unbekannt"
        assert result["available_types"] == list(DEADLINE_RULES)

    def test_invalid_trigger_date(self, calculator):
        result = calculator.calculate("DE", "kein Datum", "berufung_zpo")
        assert result == {"ok": False, "error": "Invalid trigger date."}

    def test_available_types(self, calculator):
        types = calculator.get_available_types()

        assert len(types) == len(DEADLINE_RULES)
        assert {"type": "berufung_zpo", "label": "Berufungsfrist", "deadline_count": 2} in types
