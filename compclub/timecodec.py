# timecodec.py
import re

TIME_PATTERN = re.compile(r"([0-9]{2}):([0-9]{2})")
MINUTES_PER_HOUR = 60


def is_valid_time(time_str: str) -> bool:
    match = TIME_PATTERN.fullmatch(time_str)
    if not match: return False
    hours, minutes = int(match.group(1)), int(match.group(2))
    return 0 <= hours < 24 and 0 <= minutes < MINUTES_PER_HOUR


def parse_time(time_str: str) -> int:
    """Converts a zero-padded 24-hour 'HH:MM' string into minutes since midnight."""
    if not is_valid_time(time_str):
        raise ValueError(f"Invalid time '{time_str}', expected HH:MM")
    hours, minutes = time_str.split(":")
    return int(hours) * MINUTES_PER_HOUR + int(minutes)


def format_time(minutes: int) -> str:
    # Hours are not wrapped, so accumulated busy time renders the same way.
    hours, minutes = divmod(minutes, MINUTES_PER_HOUR)
    return f"{hours:02d}:{minutes:02d}"
