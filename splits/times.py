"""Time values and the arithmetic on them.

A time value is one of three things:

- ``None``: absent, no time was recorded (e.g. a missed punch)
- ``INVALID``: a time was recorded but it has been judged to be wrong
- an ``int`` or ``float``: a valid number of seconds

Arithmetic on time values lives here so that the model code never has to
check for absent or invalid times itself. The formatting and parsing
functions convert time values to and from the text shown to users.
"""

import enum
import re


class _InvalidTime(enum.Enum):
    INVALID = "INVALID"

    def __repr__(self) -> str:
        return "INVALID"


INVALID = _InvalidTime.INVALID

Time = int | float | _InvalidTime | None

NULL_TIME_PLACEHOLDER = "-----"
INVALID_TIME_PLACEHOLDER = "???"

_TIME_RE = re.compile(r"^(-?\d+:)?-?\d+:-?\d\d([,.]\d{1,10})?$")


def is_valid_time(time: Time) -> bool:
    """Return True if the time is a number of seconds."""
    return time is not None and time is not INVALID


def is_invalid_time(time: Time) -> bool:
    return time is INVALID


def add_times(a: Time, b: Time) -> Time:
    """Add two times.

    Absent wins over invalid: the sum is absent if either time is absent,
    otherwise invalid if either time is invalid.
    """
    if a is None or b is None:
        return None
    if a is INVALID or b is INVALID:
        return INVALID
    return a + b


def subtract_times(a: Time, b: Time) -> Time:
    """Subtract time b from time a, with the same rules as add_times."""
    if a is None or b is None:
        return None
    if a is INVALID or b is INVALID:
        return INVALID
    return a - b


def _two_digits(value: int) -> str:
    return f"{value:02d}"


def format_time(seconds: Time, precision: int | None = None) -> str:
    """Format a number of seconds as [-][h:]mm:ss.

    Absent times are formatted as a placeholder of dashes, invalid ones as
    question marks.  Fractional seconds are shown to the given precision, or
    to at most two decimal places if no precision is given.
    """
    if seconds is None:
        return NULL_TIME_PLACEHOLDER
    if seconds is INVALID:
        return INVALID_TIME_PLACEHOLDER

    result = ""
    if seconds < 0:
        result = "-"
        seconds = -seconds

    hours = int(seconds // 3600)
    mins = int(seconds // 60) % 60
    secs = seconds % 60
    if hours > 0:
        result += f"{hours}:"

    result += _two_digits(mins) + ":"

    if secs < 10:
        result += "0"

    if precision is not None:
        result += f"{secs:.{precision}f}"
    else:
        result += f"{round(secs, 2):g}"

    return result


def format_time_of_day(seconds: int | float) -> str:
    """Format a number of seconds past midnight as hh:mm:ss."""
    hours = int(seconds // 3600) % 24
    mins = int(seconds // 60) % 60
    secs = int(seconds % 60)
    return f"{_two_digits(hours)}:{_two_digits(mins)}:{_two_digits(secs)}"


def parse_time(text: str) -> int | float | None:
    """Parse a time of the form [h:]mm:ss, optionally with fractional seconds.

    Anything not recognised is treated as a missed split, so None is
    returned rather than an error raised.
    """
    text = text.strip()
    if not _TIME_RE.match(text):
        return None

    total: int | float = 0
    fractional = False
    for part in text.replace(",", ".").split(":"):
        if "." in part:
            fractional = True
            total = total * 60 + float(part)
        else:
            total = total * 60 + int(part)

    return float(total) if fractional else total
