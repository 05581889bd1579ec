import unittest
from datetime import datetime

from batch_scheduler import InvalidIntervalError, TimeInterval, has_time_overlap, overlap_range


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 7, 24, hour, minute)


class TestTimeOverlap(unittest.TestCase):
    def setUp(self) -> None:
        self.exist_start = _at(8)
        self.exist_end = _at(16)

    def test_exactly_adjacent_does_not_overlap(self) -> None:
        self.assertFalse(has_time_overlap(_at(9), _at(17), _at(17), _at(20)))
        self.assertFalse(has_time_overlap(_at(17), _at(20), _at(9), _at(17)))

    def test_identical_ranges_overlap(self) -> None:
        self.assertTrue(has_time_overlap(_at(8), _at(16), _at(8), _at(16)))
        self.assertEqual(overlap_range(_at(8), _at(16), _at(8), _at(16)), TimeInterval(_at(8), _at(16)))

    def test_partial_overlap_at_start(self) -> None:
        self.assertTrue(has_time_overlap(self.exist_start, self.exist_end, _at(12), _at(20)))
        self.assertEqual(
            overlap_range(self.exist_start, self.exist_end, _at(12), _at(20)),
            TimeInterval(_at(12), _at(16)),
        )

    def test_partial_overlap_at_end(self) -> None:
        self.assertTrue(has_time_overlap(_at(4), _at(12), self.exist_start, self.exist_end))
        self.assertEqual(
            overlap_range(_at(4), _at(12), self.exist_start, self.exist_end),
            TimeInterval(_at(8), _at(12)),
        )

    def test_containment_overlaps(self) -> None:
        self.assertTrue(has_time_overlap(_at(6), _at(18), self.exist_start, self.exist_end))
        self.assertEqual(
            overlap_range(_at(6), _at(18), self.exist_start, self.exist_end),
            TimeInterval(_at(8), _at(16)),
        )

    def test_non_overlapping_before_and_after(self) -> None:
        self.assertFalse(has_time_overlap(_at(5), _at(7, 59), self.exist_start, self.exist_end))
        self.assertFalse(has_time_overlap(_at(16, 1), _at(18), self.exist_start, self.exist_end))
        self.assertIsNone(overlap_range(_at(16, 1), _at(18), self.exist_start, self.exist_end))

    def test_overlap_is_symmetric(self) -> None:
        ranges = [
            (_at(8), _at(16)),
            (_at(12), _at(20)),
            (_at(4), _at(12)),
            (_at(6), _at(18)),
            (_at(16), _at(20)),
            (_at(0), _at(8)),
            (_at(9), _at(10)),
        ]
        for start_a, end_a in ranges:
            for start_b, end_b in ranges:
                self.assertEqual(
                    has_time_overlap(start_a, end_a, start_b, end_b),
                    has_time_overlap(start_b, end_b, start_a, end_a),
                )

    def test_equal_endpoints_do_not_crash(self) -> None:
        self.assertFalse(has_time_overlap(_at(8), _at(8), _at(8), _at(8)))
        # A zero-length range inside another passes the raw check but has no shared window.
        self.assertTrue(has_time_overlap(_at(12), _at(12), _at(8), _at(16)))
        self.assertIsNone(overlap_range(_at(12), _at(12), _at(8), _at(16)))


class TestTimeInterval(unittest.TestCase):
    def test_rejects_start_not_before_end(self) -> None:
        with self.assertRaises(InvalidIntervalError):
            TimeInterval(_at(10), _at(10))
        with self.assertRaises(ValueError):
            TimeInterval(_at(11), _at(10))

    def test_intersection_and_duration(self) -> None:
        first = TimeInterval(_at(8), _at(16))
        second = TimeInterval(_at(12), _at(20))

        self.assertTrue(first.overlaps(second))
        self.assertEqual(first.intersection(second), TimeInterval(_at(12), _at(16)))
        self.assertEqual(first.duration.total_seconds(), 8 * 3600)
        self.assertIsNone(first.intersection(TimeInterval(_at(16), _at(17))))


if __name__ == "__main__":
    unittest.main()
