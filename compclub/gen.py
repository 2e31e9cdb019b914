# gen.py
import random
from typing import Callable, List, Optional, Tuple

from compclub.config import debug_print
from compclub.events import Event, EventKind
from compclub.state import ClubConfig, ComputerClub
from compclub.timecodec import format_time

LAST_MINUTE_OF_DAY = 23 * 60 + 59
MAX_STEP_MINUTES = 45

# --- Command weights ---
DEFAULT_ARRIVE_WEIGHT = 4
DEFAULT_SIT_WEIGHT = 4
DEFAULT_WAIT_WEIGHT = 2
DEFAULT_LEAVE_WEIGHT = 3
DEFAULT_SWITCH_WEIGHT = 1
DEFAULT_FAILED_ARRIVE_WEIGHT = 1
DEFAULT_FAILED_SIT_WEIGHT = 1
DEFAULT_FAILED_WAIT_WEIGHT = 1
DEFAULT_UNKNOWN_CLIENT_WEIGHT = 1


def make_client_pool(num_clients: int) -> List[str]:
    return [f"client{i}" for i in range(1, num_clients + 1)]


def generate_club_config(rng: random.Random, min_tables: int, max_tables: int, max_rate: int) -> ClubConfig:
    capacity = rng.randint(min_tables, max_tables)
    open_time = rng.randint(6, 12) * 60 + rng.choice([0, 15, 30, 45])
    close_hour = rng.randint(open_time // 60 + 4, 22)
    close_time = close_hour * 60 + rng.choice([0, 15, 30, 45])
    rate = rng.randint(0, max_rate)
    return ClubConfig(capacity, open_time, close_time, rate)


def format_header(config: ClubConfig) -> List[str]:
    return [str(config.capacity), f"{format_time(config.open_time)} {format_time(config.close_time)}", str(config.hourly_rate)]


class _Generator:
    """Picks the next command from what the shadow club currently allows."""

    def __init__(self, rng: random.Random, club: ComputerClub, client_pool: List[str]):
        self.rng = rng
        self.club = club
        self.client_pool = client_pool

    def _absent_clients(self) -> List[str]:
        return [name for name in self.client_pool if not self.club.is_client_in_club(name)]

    def _present_clients(self) -> List[str]:
        return list(self.club.clients.keys())

    def _unseated_clients(self) -> List[str]:
        return [name for name, client in self.club.clients.items()
                if not client.is_seated and name not in self.club.waiting_queue]

    def arrive(self) -> Optional[Tuple[EventKind, List[str]]]:
        absent = self._absent_clients()
        if not absent: return None
        return EventKind.ARRIVED, [self.rng.choice(absent)]

    def failed_arrive(self) -> Optional[Tuple[EventKind, List[str]]]:
        present = self._present_clients()
        if not present: return None
        return EventKind.ARRIVED, [self.rng.choice(present)]

    def sit(self) -> Optional[Tuple[EventKind, List[str]]]:
        unseated = self._unseated_clients()
        free_tables = self.club.free_table_numbers()
        if not unseated or not free_tables: return None
        return EventKind.SAT, [self.rng.choice(unseated), str(self.rng.choice(free_tables))]

    def switch(self) -> Optional[Tuple[EventKind, List[str]]]:
        seated = self.club.seated_client_names()
        free_tables = self.club.free_table_numbers()
        if not seated or not free_tables: return None
        return EventKind.SAT, [self.rng.choice(seated), str(self.rng.choice(free_tables))]

    def failed_sit(self) -> Optional[Tuple[EventKind, List[str]]]:
        present = self._present_clients()
        if not present: return None
        busy_tables = [t.number for t in self.club.tables if t.is_occupied]
        out_of_range = len(self.club.tables) + self.rng.randint(1, 3)
        table_number = self.rng.choice(busy_tables) if busy_tables and self.rng.random() < 0.7 else out_of_range
        return EventKind.SAT, [self.rng.choice(present), str(table_number)]

    def wait(self) -> Optional[Tuple[EventKind, List[str]]]:
        unseated = self._unseated_clients()
        if not unseated or self.club.has_free_tables(): return None
        return EventKind.WAITING, [self.rng.choice(unseated)]

    def failed_wait(self) -> Optional[Tuple[EventKind, List[str]]]:
        unseated = self._unseated_clients()
        if not unseated or not self.club.has_free_tables(): return None
        return EventKind.WAITING, [self.rng.choice(unseated)]

    def leave(self) -> Optional[Tuple[EventKind, List[str]]]:
        present = self._present_clients()
        if not present: return None
        return EventKind.LEFT, [self.rng.choice(present)]

    def unknown_client(self) -> Optional[Tuple[EventKind, List[str]]]:
        absent = self._absent_clients()
        if not absent: return None
        kind = self.rng.choice([EventKind.SAT, EventKind.WAITING, EventKind.LEFT])
        name = self.rng.choice(absent)
        if kind == EventKind.SAT:
            return kind, [name, str(self.rng.randint(1, len(self.club.tables)))]
        return kind, [name]


def generate_event_log(
    seed: Optional[int] = None,
    num_events: int = 40,
    num_clients: int = 8,
    min_tables: int = 1, max_tables: int = 5,
    max_rate: int = 100,
    arrive_weight: int = DEFAULT_ARRIVE_WEIGHT,
    sit_weight: int = DEFAULT_SIT_WEIGHT,
    wait_weight: int = DEFAULT_WAIT_WEIGHT,
    leave_weight: int = DEFAULT_LEAVE_WEIGHT,
    switch_weight: int = DEFAULT_SWITCH_WEIGHT,
    failed_arrive_weight: int = DEFAULT_FAILED_ARRIVE_WEIGHT,
    failed_sit_weight: int = DEFAULT_FAILED_SIT_WEIGHT,
    failed_wait_weight: int = DEFAULT_FAILED_WAIT_WEIGHT,
    unknown_client_weight: int = DEFAULT_UNKNOWN_CLIENT_WEIGHT,
) -> List[str]:
    """Produce the lines of a random, well-formed event log.

    Times start up to an hour before opening and may run past closing, so
    early arrivals and after-hours events are covered. A shadow club is fed
    every generated event so that later picks see real occupancy and queue
    state.
    """
    if num_clients < 1:
        raise ValueError("num_clients must be at least 1")
    if not 1 <= min_tables <= max_tables:
        raise ValueError(f"Invalid table range [{min_tables}, {max_tables}]")

    rng = random.Random(seed)
    config = generate_club_config(rng, min_tables, max_tables, max_rate)
    club = ComputerClub(config)
    generator = _Generator(rng, club, make_client_pool(num_clients))
    debug_print(f"Generating {num_events} events for {config}")

    weighted_generators: List[Tuple[Callable[[], Optional[Tuple[EventKind, List[str]]]], int]] = [
        (generator.arrive, arrive_weight),
        (generator.sit, sit_weight),
        (generator.wait, wait_weight),
        (generator.leave, leave_weight),
        (generator.switch, switch_weight),
        (generator.failed_arrive, failed_arrive_weight),
        (generator.failed_sit, failed_sit_weight),
        (generator.failed_wait, failed_wait_weight),
        (generator.unknown_client, unknown_client_weight),
    ]
    weighted_generators = [(func, weight) for func, weight in weighted_generators if weight > 0]
    if not weighted_generators:
        raise ValueError("At least one command weight must be positive")

    lines = format_header(config)
    current_time = max(0, config.open_time - rng.randint(0, 60))
    end_time = min(LAST_MINUTE_OF_DAY, config.close_time + 60)

    generated = 0
    attempts = 0
    while generated < num_events and attempts < num_events * 20:
        attempts += 1
        funcs, weights = zip(*weighted_generators)
        picked = rng.choices(funcs, weights=weights, k=1)[0]()
        if picked is None: continue

        kind, args = picked
        event = Event(current_time, kind, tuple(args))
        club.process_event(event)
        lines.append(event.to_line())
        generated += 1

        step = rng.randint(0, MAX_STEP_MINUTES)
        if current_time + step > end_time: break
        current_time += step

    debug_print(f"Generated {generated} events in {attempts} attempts")
    return lines
