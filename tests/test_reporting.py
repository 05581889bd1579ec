import unittest
from datetime import datetime

from batch_scheduler import Batch, ConflictReport, detect_conflicts, format_conflict_message, format_time_range
from batch_scheduler.reporting import describe_conflicts, format_clock_time


class TestFormatTimeRange(unittest.TestCase):
    def test_same_day_shows_end_time_only(self) -> None:
        self.assertEqual(
            format_time_range(datetime(2024, 7, 24, 8, 0), datetime(2024, 7, 24, 16, 0)),
            "Jul 24, 8:00 AM - 4:00 PM",
        )

    def test_multi_day_shows_both_dates(self) -> None:
        self.assertEqual(
            format_time_range(datetime(2024, 7, 24, 20, 30), datetime(2024, 7, 25, 6, 5)),
            "Jul 24, 8:30 PM - Jul 25, 6:05 AM",
        )

    def test_ending_at_midnight_crosses_the_day_boundary(self) -> None:
        self.assertEqual(
            format_time_range(datetime(2024, 12, 31, 18, 0), datetime(2025, 1, 1, 0, 0)),
            "Dec 31, 6:00 PM - Jan 1, 12:00 AM",
        )

    def test_noon_and_midnight_clock_times(self) -> None:
        self.assertEqual(format_clock_time(datetime(2024, 7, 24, 12, 0)), "12:00 PM")
        self.assertEqual(format_clock_time(datetime(2024, 7, 24, 0, 15)), "12:15 AM")


class TestFormatConflictMessage(unittest.TestCase):
    def setUp(self) -> None:
        self.b1 = Batch(
            batch_id="b1",
            equipment_id="eq-001",
            product_name="Pharmaceutical Compound XR-25",
            start=datetime(2024, 7, 24, 8, 0),
            end=datetime(2024, 7, 24, 16, 0),
        )
        self.b2 = Batch(
            batch_id="b2",
            equipment_id="eq-001",
            product_name="Industrial Polymer P-402",
            start=datetime(2024, 7, 24, 17, 0),
            end=datetime(2024, 7, 25, 1, 0),
        )

    def test_no_conflicts_yields_empty_message(self) -> None:
        self.assertEqual(format_conflict_message(ConflictReport()), "")

    def test_single_conflict_names_product_and_range(self) -> None:
        report = detect_conflicts("eq-001", datetime(2024, 7, 24, 12, 0), datetime(2024, 7, 24, 20, 0), [self.b1])

        self.assertEqual(
            format_conflict_message(report),
            'Scheduling conflict detected with "Pharmaceutical Compound XR-25" (Jul 24, 8:00 AM - 4:00 PM)',
        )

    def test_multiple_conflicts_yield_count_only(self) -> None:
        report = detect_conflicts(
            "eq-001",
            datetime(2024, 7, 24, 12, 0),
            datetime(2024, 7, 24, 20, 0),
            [self.b1, self.b2],
        )

        message = format_conflict_message(report)
        self.assertEqual(
            message,
            "2 scheduling conflicts detected. Please adjust the time or choose different equipment.",
        )
        self.assertNotIn("Pharmaceutical", message)

    def test_describe_conflicts_lists_each_overlap(self) -> None:
        report = detect_conflicts(
            "eq-001",
            datetime(2024, 7, 24, 12, 0),
            datetime(2024, 7, 24, 20, 0),
            [self.b1, self.b2],
        )

        self.assertEqual(
            describe_conflicts(report),
            [
                '"Pharmaceutical Compound XR-25" (b1): overlap Jul 24, 12:00 PM - 4:00 PM',
                '"Industrial Polymer P-402" (b2): overlap Jul 24, 5:00 PM - 8:00 PM',
            ],
        )


if __name__ == "__main__":
    unittest.main()
