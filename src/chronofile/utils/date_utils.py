"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/date_utils.py
"""
import re
from datetime import datetime

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]
DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

# Longest tokens first so 'YYYY' is not read as two 'YY'
_TOKEN_PATTERN = re.compile(
    r"\[([^\]]*)\]|YYYY|YY|MMMM|MMM|MM|M|DD|D|dddd|ddd|HH|H|hh|h|mm|m|ss|s|SSS|A|a"
)


class DateUtils:
    @staticmethod
    def parse_iso(value: str) -> datetime:
        """
        Parse an ISO-8601 timestamp ('2020-05-01T10:00:00', '2020-05-01', with or without offset).
        A trailing 'Z' is accepted as UTC.
        Raises ValueError for invalid input.
        """
        if not value or not isinstance(value, str):
            raise ValueError(f"Invalid ISO-8601 timestamp: {value!r}")
        value = value.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)

    @staticmethod
    def format_tokens(moment: datetime, template: str) -> str:
        """
        Format a datetime with a token template, e.g. 'YYYY/MM/DD' -> '2020/05/01'.

        Supported tokens: YYYY YY MMMM MMM MM M DD D dddd ddd HH H hh h mm m ss s SSS A a.
        Text in square brackets is copied literally: '[week] YYYY' -> 'week 2020'.
        Any other character is kept as is.
        """
        if not template:
            raise ValueError("Date format template cannot be empty")

        hour12 = moment.hour % 12 or 12
        values = {
            "YYYY": f"{moment.year:04d}",
            "YY": f"{moment.year % 100:02d}",
            "MMMM": MONTH_NAMES[moment.month - 1],
            "MMM": MONTH_NAMES[moment.month - 1][:3],
            "MM": f"{moment.month:02d}",
            "M": str(moment.month),
            "DD": f"{moment.day:02d}",
            "D": str(moment.day),
            "dddd": DAY_NAMES[moment.weekday()],
            "ddd": DAY_NAMES[moment.weekday()][:3],
            "HH": f"{moment.hour:02d}",
            "H": str(moment.hour),
            "hh": f"{hour12:02d}",
            "h": str(hour12),
            "mm": f"{moment.minute:02d}",
            "m": str(moment.minute),
            "ss": f"{moment.second:02d}",
            "s": str(moment.second),
            "SSS": f"{moment.microsecond // 1000:03d}",
            "A": "AM" if moment.hour < 12 else "PM",
            "a": "am" if moment.hour < 12 else "pm",
        }

        def replace(match: re.Match) -> str:
            literal = match.group(1)
            if literal is not None:
                return literal
            return values[match.group(0)]

        return _TOKEN_PATTERN.sub(replace, template)

    @staticmethod
    def sanitize_segment(formatted: str) -> str:
        """Make a formatted date safe as path segments on all platforms."""
        return formatted.replace(":", "-").replace(" ", "-")

    @staticmethod
    def file_stamp(moment: datetime = None) -> str:
        """Timestamp used in artifact file names: '20240131-235959'."""
        return (moment or datetime.now()).strftime("%Y%m%d-%H%M%S")
