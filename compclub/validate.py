# validate.py
import re
from typing import Iterable, List, Optional, Tuple

from compclub.events import Event, EventKind, INPUT_KINDS
from compclub.state import ClubConfig
from compclub.timecodec import is_valid_time, parse_time

CLIENT_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")
NON_NEGATIVE_INT_PATTERN = re.compile(r"[0-9]+")
HEADER_LINE_COUNT = 3

# Number of arguments each input event id carries.
EVENT_ARITY = {
    EventKind.ARRIVED: 1,
    EventKind.SAT: 2,
    EventKind.WAITING: 1,
    EventKind.LEFT: 1,
}


class EventLogError(Exception):
    """A structurally malformed event log. Carries the first offending line."""
    def __init__(self, line_num: int, line: str, reason: str):
        self.line_num = line_num
        self.line = line
        self.reason = reason
        super().__init__(f"Line {line_num}: {reason}: '{line}'")


# --- Single-line parsers: return None on malformed input ---
def is_valid_client_name(name: str) -> bool:
    return CLIENT_NAME_PATTERN.fullmatch(name) is not None


def parse_non_negative_int(token: str) -> Optional[int]:
    if not NON_NEGATIVE_INT_PATTERN.fullmatch(token): return None
    return int(token)


def parse_capacity_line(line: str) -> Optional[int]:
    parts = line.split()
    if len(parts) != 1: return None
    capacity = parse_non_negative_int(parts[0])
    if capacity is None or capacity < 1: return None
    return capacity


def parse_hours_line(line: str) -> Optional[Tuple[int, int]]:
    parts = line.split()
    if len(parts) != 2: return None
    if not (is_valid_time(parts[0]) and is_valid_time(parts[1])): return None
    open_time, close_time = parse_time(parts[0]), parse_time(parts[1])
    if open_time >= close_time: return None
    return open_time, close_time


def parse_rate_line(line: str) -> Optional[int]:
    parts = line.split()
    if len(parts) != 1: return None
    return parse_non_negative_int(parts[0])


def parse_event_line(line: str) -> Optional[Event]:
    parts = line.split()
    if len(parts) < 2: return None
    time_str, id_str, args = parts[0], parts[1], parts[2:]

    if not is_valid_time(time_str): return None
    event_id = parse_non_negative_int(id_str)
    if event_id is None or event_id not in [int(kind) for kind in INPUT_KINDS]: return None
    kind = EventKind(event_id)

    if len(args) != EVENT_ARITY[kind]: return None
    if not is_valid_client_name(args[0]): return None
    if kind == EventKind.SAT:
        table_number = parse_non_negative_int(args[1])
        if table_number is None or table_number < 1: return None

    return Event(parse_time(time_str), kind, tuple(args))


# --- Whole-log loader: raises EventLogError on the first bad line ---
def _strip_line_endings(lines: Iterable[str]) -> List[str]:
    stripped = [line.rstrip("\r\n") for line in lines]
    while stripped and not stripped[-1].strip():
        stripped.pop()
    return stripped


def load_event_log(lines: Iterable[str]) -> Tuple[ClubConfig, List[Event]]:
    """Validate a complete event log and return its config and events.

    The log is a three-line header (table count, opening hours, hourly rate)
    followed by one event per line in non-decreasing time order. Blank
    lines at the end are ignored. The first line that breaks the format
    aborts the whole load with EventLogError.
    """
    all_lines = _strip_line_endings(lines)
    if len(all_lines) < HEADER_LINE_COUNT:
        line_num = len(all_lines) + 1
        raise EventLogError(line_num, "", "Header is incomplete")

    capacity = parse_capacity_line(all_lines[0])
    if capacity is None:
        raise EventLogError(1, all_lines[0], "Invalid number of tables")
    hours = parse_hours_line(all_lines[1])
    if hours is None:
        raise EventLogError(2, all_lines[1], "Invalid opening hours")
    rate = parse_rate_line(all_lines[2])
    if rate is None:
        raise EventLogError(3, all_lines[2], "Invalid hourly rate")
    config = ClubConfig(capacity, hours[0], hours[1], rate)

    events: List[Event] = []
    for idx, line in enumerate(all_lines[HEADER_LINE_COUNT:], start=HEADER_LINE_COUNT + 1):
        event = parse_event_line(line)
        if event is None:
            raise EventLogError(idx, line, "Malformed event")
        if events and event.time < events[-1].time:
            raise EventLogError(idx, line, "Event is earlier than the previous one")
        events.append(event)
    return config, events


def read_event_log(filepath: str) -> Tuple[ClubConfig, List[Event]]:
    with open(filepath, 'r', encoding='utf-8', errors='replace') as f:
        return load_event_log(f)
