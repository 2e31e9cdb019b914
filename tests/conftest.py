import pytest

from compclub.config import set_debug
from compclub.events import Event, EventKind
from compclub.state import ClubConfig, ComputerClub
from compclub.timecodec import parse_time

SAMPLE_LOG = """3
09:00 19:00
10
08:48 1 client1
09:41 1 client1
09:48 1 client2
09:52 3 client1
09:54 2 client1 1
10:25 2 client2 2
10:58 1 client3
10:59 2 client3 3
11:30 1 client4
11:35 2 client4 2
11:45 3 client4
12:33 4 client1
12:43 4 client2
15:52 4 client4
"""

SAMPLE_REPORT = """09:00
08:48 1 client1
08:48 13 NotOpenYet
09:41 1 client1
09:48 1 client2
09:52 3 client1
09:52 13 ICanWaitNoLonger!
09:54 2 client1 1
10:25 2 client2 2
10:58 1 client3
10:59 2 client3 3
11:30 1 client4
11:35 2 client4 2
11:35 13 PlaceIsBusy
11:45 3 client4
12:33 4 client1
12:33 12 client4 1
12:43 4 client2
15:52 4 client4
19:00 11 client3
19:00
1 70 05:58
2 30 02:18
3 90 08:01"""


@pytest.fixture(autouse=True)
def quiet_debug():
    set_debug(False)
    yield
    set_debug(False)


def ev(time_str, kind, *args):
    return Event(parse_time(time_str), EventKind(kind), tuple(str(a) for a in args))


@pytest.fixture
def make_club():
    def _make(capacity=1, open_str="09:00", close_str="19:00", rate=10):
        return ComputerClub(ClubConfig(capacity, parse_time(open_str), parse_time(close_str), rate))
    return _make


@pytest.fixture
def sample_log_path(tmp_path):
    path = tmp_path / "input.txt"
    path.write_text(SAMPLE_LOG, encoding="utf-8")
    return path
