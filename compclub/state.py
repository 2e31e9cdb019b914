# state.py
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, Iterable, List, Optional, Tuple

from compclub.config import debug_print
from compclub.events import ErrorCode, Event, EventKind
from compclub.timecodec import MINUTES_PER_HOUR, format_time


@dataclass(frozen=True)
class ClubConfig:
    capacity: int
    open_time: int
    close_time: int
    hourly_rate: int

    def __post_init__(self):
        if self.capacity < 1:
            raise ValueError(f"Club capacity must be at least 1, got {self.capacity}")
        if self.open_time >= self.close_time:
            raise ValueError(f"Opening time {format_time(self.open_time)} is not before closing time {format_time(self.close_time)}")
        if self.hourly_rate < 0:
            raise ValueError(f"Hourly rate must be non-negative, got {self.hourly_rate}")

    def is_open_at(self, minute: int) -> bool:
        return self.open_time <= minute < self.close_time


class Table:
    def __init__(self, number: int):
        self.number: int = number
        self.occupant: Optional[str] = None
        self.occupied_since: int = 0
        self.revenue: int = 0
        self.busy_minutes: int = 0

    @property
    def is_occupied(self) -> bool:
        return self.occupant is not None

    @staticmethod
    def billed_hours(elapsed_minutes: int) -> int:
        # Any started hour is paid in full.
        return -(-elapsed_minutes // MINUTES_PER_HOUR)

    def occupy(self, client_name: str, at_time: int):
        self.occupant = client_name
        self.occupied_since = at_time

    def release(self, at_time: int, rate: int) -> int:
        """Ends the current occupancy and returns the amount billed for it (0 if free)."""
        if not self.is_occupied: return 0
        elapsed = at_time - self.occupied_since
        charge = self.billed_hours(elapsed) * rate
        self.revenue += charge
        self.busy_minutes += elapsed
        self.occupant = None
        return charge

    def force_release(self, at_time: int, rate: int) -> int:
        return self.release(at_time, rate)

    def __repr__(self):
        return (f"Table(number={self.number}, occupant={self.occupant!r}, "
                f"revenue={self.revenue}, busy='{format_time(self.busy_minutes)}')")


class Client:
    def __init__(self, name: str, arrival_time: int):
        self.name: str = name
        self.arrival_time: int = arrival_time
        self.table_number: Optional[int] = None

    @property
    def is_seated(self) -> bool:
        return self.table_number is not None

    def __repr__(self):
        return f"Client(name='{self.name}', table={self.table_number})"


class ComputerClub:
    """Replays club events and accumulates the output trace and per-table totals.

    Input events are echoed into the output stream before they are applied.
    Rule violations never raise: they become ERROR events and leave the state
    untouched. Only contract misuse (a non-input kind, or an event after
    closing) raises.
    """

    def __init__(self, config: ClubConfig):
        self.config = config
        self.tables: List[Table] = [Table(number) for number in range(1, config.capacity + 1)]
        self.clients: Dict[str, Client] = {}
        self.waiting_queue: Deque[str] = deque()
        self.output_events: List[Event] = []
        self.is_closed = False
        self._handlers: Dict[EventKind, Callable[[Event], None]] = {
            EventKind.ARRIVED: self._process_client_arrived,
            EventKind.SAT: self._process_client_sat,
            EventKind.WAITING: self._process_client_waiting,
            EventKind.LEFT: self._process_client_left,
        }

    # --- Lookups ---
    def is_client_in_club(self, client_name: str) -> bool:
        return client_name in self.clients

    def is_table_number_valid(self, table_number: int) -> bool:
        return 1 <= table_number <= len(self.tables)

    def get_table(self, table_number: int) -> Table:
        return self.tables[table_number - 1]

    def has_free_tables(self) -> bool:
        return any(not table.is_occupied for table in self.tables)

    def free_table_numbers(self) -> List[int]:
        return [table.number for table in self.tables if not table.is_occupied]

    def seated_client_names(self) -> List[str]:
        return [name for name, client in self.clients.items() if client.is_seated]

    # --- Output helpers ---
    def _add_error_event(self, time: int, code: str):
        debug_print(f"{format_time(time)} rule violation: {code}")
        self.output_events.append(Event.error(time, code))

    def _remove_client(self, client_name: str):
        del self.clients[client_name]
        if client_name in self.waiting_queue:
            self.waiting_queue.remove(client_name)

    # --- Event handlers ---
    def _process_client_arrived(self, event: Event):
        client_name = event.client_name
        if self.is_client_in_club(client_name):
            self._add_error_event(event.time, ErrorCode.YOU_SHALL_NOT_PASS)
        elif not self.config.is_open_at(event.time):
            self._add_error_event(event.time, ErrorCode.NOT_OPEN_YET)
        else:
            self.clients[client_name] = Client(client_name, event.time)

    def _process_client_sat(self, event: Event):
        client_name = event.client_name
        table_number = event.table_number

        if not self.is_client_in_club(client_name):
            self._add_error_event(event.time, ErrorCode.CLIENT_UNKNOWN)
        elif not self.is_table_number_valid(table_number):
            # An unknown table is reported exactly like a busy one.
            self._add_error_event(event.time, ErrorCode.PLACE_IS_BUSY)
        elif self.get_table(table_number).is_occupied:
            self._add_error_event(event.time, ErrorCode.PLACE_IS_BUSY)
        else:
            client = self.clients[client_name]
            if client.is_seated:
                charge = self.get_table(client.table_number).force_release(event.time, self.config.hourly_rate)
                debug_print(f"{format_time(event.time)} {client_name} moves from table {client.table_number} (billed {charge})")
            self.get_table(table_number).occupy(client_name, event.time)
            client.table_number = table_number

    def _process_client_waiting(self, event: Event):
        client_name = event.client_name

        if not self.is_client_in_club(client_name):
            self._add_error_event(event.time, ErrorCode.CLIENT_UNKNOWN)
        elif self.has_free_tables():
            self._add_error_event(event.time, ErrorCode.I_CAN_WAIT_NO_LONGER)
        elif self.clients[client_name].is_seated or client_name in self.waiting_queue:
            debug_print(f"{format_time(event.time)} {client_name} is already seated or waiting, ignored")
        elif len(self.waiting_queue) >= self.config.capacity:
            self.output_events.append(Event.forced_left(event.time, client_name))
            self._remove_client(client_name)
        else:
            self.waiting_queue.append(client_name)

    def _process_client_left(self, event: Event):
        client_name = event.client_name

        if not self.is_client_in_club(client_name):
            self._add_error_event(event.time, ErrorCode.CLIENT_UNKNOWN)
            return

        client = self.clients[client_name]
        if client.is_seated:
            table = self.get_table(client.table_number)
            table.release(event.time, self.config.hourly_rate)
            client.table_number = None

            if self.waiting_queue:
                next_client_name = self.waiting_queue.popleft()
                table.occupy(next_client_name, event.time)
                self.clients[next_client_name].table_number = table.number
                self.output_events.append(Event.auto_seated(event.time, next_client_name, table.number))

        self._remove_client(client_name)

    # --- Public operations ---
    def process_event(self, event: Event):
        if self.is_closed:
            raise RuntimeError(f"Event '{event.to_line()}' arrived after the club was closed")
        handler = self._handlers.get(event.kind)
        if handler is None:
            raise ValueError(f"Event kind {int(event.kind)} is not an input event")
        self.output_events.append(event)
        handler(event)

    def process_events(self, events: Iterable[Event]):
        for event in events:
            self.process_event(event)

    def close_club(self):
        close_time = self.config.close_time
        for client_name in sorted(self.clients):
            self.output_events.append(Event.forced_left(close_time, client_name))
            client = self.clients[client_name]
            if client.is_seated:
                self.get_table(client.table_number).force_release(close_time, self.config.hourly_rate)
                client.table_number = None
        self.clients.clear()
        self.waiting_queue.clear()
        self.is_closed = True

    def sorted_events(self) -> List[Event]:
        # sorted() is stable, so same (time, kind) keeps processing order.
        return sorted(self.output_events, key=Event.sort_key)

    def table_report(self) -> List[Tuple[int, int, int]]:
        return [(table.number, table.revenue, table.busy_minutes) for table in self.tables]

    def render(self) -> List[str]:
        lines = [format_time(self.config.open_time)]
        lines.extend(event.to_line() for event in self.sorted_events())
        lines.append(format_time(self.config.close_time))
        lines.extend(f"{number} {revenue} {format_time(busy)}" for number, revenue, busy in self.table_report())
        return lines


def simulate(config: ClubConfig, events: Iterable[Event]) -> ComputerClub:
    club = ComputerClub(config)
    club.process_events(events)
    club.close_club()
    return club
