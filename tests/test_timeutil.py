"""Unit tests for UTC helpers."""

import unittest
from datetime import UTC, date, datetime, timedelta, timezone

from runners_api.core.timeutil import add_months, age_on, as_utc, utcnow


class TestTimeUtil(unittest.TestCase):
    def test_utcnow_is_aware(self) -> None:
        self.assertEqual(utcnow().utcoffset(), timedelta(0))

    def test_as_utc_attaches_and_converts(self) -> None:
        naive = datetime(2026, 1, 2, 3, 4, 5)
        self.assertEqual(as_utc(naive), datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC))
        plus_two = datetime(2026, 1, 2, 5, 0, tzinfo=timezone(timedelta(hours=2)))
        self.assertEqual(as_utc(plus_two).hour, 3)
        self.assertIsNone(as_utc(None))

    def test_add_months_rolls_year_and_clamps_day(self) -> None:
        self.assertEqual(add_months(datetime(2026, 9, 15, tzinfo=UTC), 6), datetime(2027, 3, 15, tzinfo=UTC))
        self.assertEqual(add_months(datetime(2026, 8, 31, tzinfo=UTC), 6), datetime(2027, 2, 28, tzinfo=UTC))
        self.assertEqual(add_months(datetime(2027, 8, 31, tzinfo=UTC), 6), datetime(2028, 2, 29, tzinfo=UTC))

    def test_age_on_counts_birthdays(self) -> None:
        dob = date(2012, 5, 4)
        self.assertEqual(age_on(dob, date(2026, 5, 3)), 13)
        self.assertEqual(age_on(dob, date(2026, 5, 4)), 14)
