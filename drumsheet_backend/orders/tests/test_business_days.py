# orders/tests/test_business_days.py

from datetime import date, datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from orders.services.business_days import (
    calculate_expected_completion_date,
    calculate_next_business_day,
    format_date_korean,
    format_date_ymd,
    is_weekend,
)


class ExpectedCompletionDateTests(SimpleTestCase):
    """
    GUARANTEES:
    - Mon-Thu (KST) -> next day
    - Fri / Sat / Sun (KST) -> next Monday
    - UTC inputs are judged by their Seoul calendar day
    """

    def test_weekday_rolls_to_next_day(self):
        self.assertEqual(calculate_expected_completion_date(datetime(2024, 6, 3, 10)), date(2024, 6, 4))
        self.assertEqual(calculate_expected_completion_date(datetime(2024, 6, 6, 23)), date(2024, 6, 7))

    def test_friday_and_weekend_roll_to_monday(self):
        self.assertEqual(calculate_expected_completion_date(datetime(2024, 6, 7, 9)), date(2024, 6, 10))
        self.assertEqual(calculate_expected_completion_date(datetime(2024, 6, 8, 12)), date(2024, 6, 10))
        self.assertEqual(calculate_expected_completion_date(datetime(2024, 6, 9, 23, 59)), date(2024, 6, 10))

    def test_utc_evening_thursday_is_friday_in_seoul(self):
        paid_at = datetime(2024, 6, 6, 16, 0, tzinfo=dt_timezone.utc)
        self.assertEqual(calculate_expected_completion_date(paid_at), date(2024, 6, 10))

    def test_iso_string_input(self):
        self.assertEqual(calculate_expected_completion_date("2024-06-04T01:00:00Z"), date(2024, 6, 5))

    def test_is_weekend(self):
        self.assertTrue(is_weekend(datetime(2024, 6, 8, 12)))
        self.assertFalse(is_weekend(datetime(2024, 6, 7, 12)))

    def test_multiple_business_days_skip_weekend(self):
        self.assertEqual(calculate_next_business_day(datetime(2024, 6, 6, 12), 3), date(2024, 6, 11))

    def test_formatting(self):
        self.assertEqual(format_date_ymd(date(2024, 6, 10)), "2024-06-10")
        self.assertEqual(format_date_korean(date(2024, 6, 10)), "2024. 6. 10")
        self.assertEqual(format_date_korean("2024-06-10"), "2024. 6. 10")
