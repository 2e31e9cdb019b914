# events.py
from enum import IntEnum
from typing import NamedTuple, Tuple

from compclub.timecodec import format_time


class EventKind(IntEnum):
    # Values are the numeric ids used in input and output lines.
    ARRIVED = 1
    SAT = 2
    WAITING = 3
    LEFT = 4
    FORCED_LEFT = 11
    AUTO_SEATED = 12
    ERROR = 13


INPUT_KINDS = (EventKind.ARRIVED, EventKind.SAT, EventKind.WAITING, EventKind.LEFT)


class ErrorCode:
    YOU_SHALL_NOT_PASS = "YouShallNotPass"
    NOT_OPEN_YET = "NotOpenYet"
    CLIENT_UNKNOWN = "ClientUnknown"
    PLACE_IS_BUSY = "PlaceIsBusy"
    I_CAN_WAIT_NO_LONGER = "ICanWaitNoLonger!"

    ALL = (YOU_SHALL_NOT_PASS, NOT_OPEN_YET, CLIENT_UNKNOWN, PLACE_IS_BUSY, I_CAN_WAIT_NO_LONGER)


class Event(NamedTuple):
    time: int
    kind: EventKind
    args: Tuple[str, ...] = ()

    @classmethod
    def error(cls, time: int, code: str) -> "Event":
        return cls(time, EventKind.ERROR, (code,))

    @classmethod
    def forced_left(cls, time: int, client_name: str) -> "Event":
        return cls(time, EventKind.FORCED_LEFT, (client_name,))

    @classmethod
    def auto_seated(cls, time: int, client_name: str, table_number: int) -> "Event":
        return cls(time, EventKind.AUTO_SEATED, (client_name, str(table_number)))

    @property
    def client_name(self) -> str:
        return self.args[0]

    @property
    def table_number(self) -> int:
        return int(self.args[1])

    def sort_key(self) -> Tuple[int, int]:
        return self.time, int(self.kind)

    def to_line(self) -> str:
        return " ".join([format_time(self.time), str(int(self.kind))] + list(self.args))

    def __str__(self):
        return self.to_line()
