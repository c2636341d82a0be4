import datetime as dt
import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils import time_formatting


def _local_clock(seconds):
    return dt.datetime.fromtimestamp(seconds).strftime("%H:%M:%S")


class TestTimeFormatting(unittest.TestCase):
    def test_format_clock_time_uses_local_wall_clock(self):
        seconds = 1_700_000_000
        self.assertEqual(time_formatting.format_clock_time(seconds), _local_clock(seconds))

    def test_format_clock_time_accepts_milliseconds(self):
        seconds = 1_700_000_123
        self.assertEqual(
            time_formatting.format_clock_time(seconds * 1000 + 456),
            _local_clock(seconds + 0.456),
        )

    def test_format_clock_time_is_zero_padded(self):
        midnight = dt.datetime(2024, 1, 2, 3, 4, 5).timestamp()
        self.assertEqual(time_formatting.format_clock_time(midnight), "03:04:05")

    def test_format_clock_time_handles_invalid(self):
        self.assertEqual(time_formatting.format_clock_time("invalid"), "00:00:00")
        self.assertEqual(time_formatting.format_clock_time(None), "00:00:00")


if __name__ == "__main__":
    unittest.main()
