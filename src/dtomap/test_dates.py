from datetime import date, datetime, time, timedelta, timezone

import pytest

from dtomap.dates import format_date

MOMENT = datetime(2025, 6, 19, 14, 30, 5)


class TestFormatDate:
    @pytest.mark.parametrize(
        "fmt,expected",
        [
            ("Y-m-d H:i:s", "2025-06-19 14:30:05"),
            ("Y-m-d", "2025-06-19"),
            ("d/m/Y", "19/06/2025"),
            ("m/d/Y", "06/19/2025"),
            ("d M, Y", "19 Jun, 2025"),
            ("D, d M Y H:i:s", "Thu, 19 Jun 2025 14:30:05"),
            ("l jS F", "Thursday 19th June"),
            ("g:i A", "2:30 PM"),
            ("h:i a", "02:30 pm"),
            ("n/j/y", "6/19/25"),
            ("N w z t L", "4 4 169 30 0"),
            ("W", "25"),
        ],
    )
    def test_php_style_tokens(self, fmt, expected):
        assert format_date(MOMENT, fmt) == expected

    @pytest.mark.parametrize(
        "day,expected",
        [
            (1, "1st"),
            (2, "2nd"),
            (3, "3rd"),
            (4, "4th"),
            (11, "11th"),
            (12, "12th"),
            (13, "13th"),
            (21, "21st"),
            (22, "22nd"),
            (23, "23rd"),
        ],
    )
    def test_ordinal_suffix(self, day, expected):
        assert format_date(date(2025, 1, day), "jS") == expected

    def test_strftime_pattern(self):
        assert format_date(MOMENT, "%d.%m.%Y %H:%M") == "19.06.2025 14:30"

    def test_escaped_characters(self):
        assert format_date(MOMENT, "\\Y\\e\\a\\r: Y") == "Year: 2025"

    def test_date_value(self):
        assert format_date(date(2025, 6, 19), "Y-m-d H:i") == "2025-06-19 00:00"

    def test_time_value(self):
        assert format_date(time(9, 5), "H:i") == "09:05"

    def test_timezone_tokens(self):
        moment = MOMENT.replace(tzinfo=timezone(timedelta(hours=-3, minutes=-30)))

        assert format_date(moment, "O P") == "-0330 -03:30"
        assert format_date(moment, "c") == "2025-06-19T14:30:05-03:30"

    def test_naive_datetime_is_utc(self):
        assert format_date(MOMENT, "P") == "+00:00"
        assert format_date(datetime(1970, 1, 1, 0, 1), "U") == "60"
