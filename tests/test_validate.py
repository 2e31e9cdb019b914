import pytest

from compclub.events import EventKind
from compclub.validate import EventLogError, load_event_log, parse_event_line, read_event_log

HEADER = ["3", "09:00 19:00", "10"]


class TestParseEventLine:

    def test_parses_each_input_kind(self):
        assert parse_event_line("08:48 1 client1").kind == EventKind.ARRIVED
        sat = parse_event_line("09:54 2 client1 1")
        assert sat.kind == EventKind.SAT and sat.table_number == 1
        assert parse_event_line("09:52 3 client_1").kind == EventKind.WAITING
        assert parse_event_line("12:33 4 client-1").kind == EventKind.LEFT

    def test_tolerates_extra_spaces(self):
        event = parse_event_line("09:54   2  client1   1")
        assert event.to_line() == "09:54 2 client1 1"

    @pytest.mark.parametrize("line", [
        "",
        "09:00",
        "9:00 1 client1",
        "09:00 5 client1",
        "09:00 11 client1",
        "09:00 x client1",
        "09:00 1",
        "09:00 1 client1 extra",
        "09:00 1 client!",
        "09:00 2 client1",
        "09:00 2 client1 0",
        "09:00 2 client1 -1",
        "09:00 2 client1 one",
        "09:00 3",
        "09:00 4 a b",
    ])
    def test_rejects_malformed(self, line):
        assert parse_event_line(line) is None


class TestLoadEventLog:

    def test_loads_header_and_events(self):
        config, events = load_event_log(HEADER + ["09:00 1 a", "09:00 2 a 1"])
        assert (config.capacity, config.open_time, config.close_time, config.hourly_rate) == (3, 540, 1140, 10)
        assert [e.kind for e in events] == [EventKind.ARRIVED, EventKind.SAT]

    def test_table_number_beyond_capacity_reaches_the_club(self):
        _, events = load_event_log(HEADER + ["09:00 2 a 42"])
        assert events[0].table_number == 42

    def test_trailing_blank_lines_and_crlf(self):
        _, events = load_event_log(["3\r\n", "09:00 19:00\r\n", "10\r\n", "09:00 1 a\r\n", "\r\n", "\n"])
        assert len(events) == 1

    @pytest.mark.parametrize("header, bad_line_num", [
        (["0", "09:00 19:00", "10"], 1),
        (["three", "09:00 19:00", "10"], 1),
        (["3 4", "09:00 19:00", "10"], 1),
        (["3", "19:00 09:00", "10"], 2),
        (["3", "09:00 09:00", "10"], 2),
        (["3", "09:00", "10"], 2),
        (["3", "09:00 19:00", "-10"], 3),
        (["3", "09:00 19:00", "ten"], 3),
    ])
    def test_rejects_bad_header(self, header, bad_line_num):
        with pytest.raises(EventLogError) as exc_info:
            load_event_log(header)
        assert exc_info.value.line_num == bad_line_num
        assert exc_info.value.line == header[bad_line_num - 1]

    def test_incomplete_header(self):
        with pytest.raises(EventLogError) as exc_info:
            load_event_log(["3", "09:00 19:00"])
        assert exc_info.value.line_num == 3

    def test_reports_first_malformed_event(self):
        with pytest.raises(EventLogError) as exc_info:
            load_event_log(HEADER + ["09:00 1 a", "09:01 7 a", "09:02 9 b"])
        assert exc_info.value.line == "09:01 7 a"
        assert exc_info.value.line_num == 5

    def test_blank_line_between_events(self):
        with pytest.raises(EventLogError) as exc_info:
            load_event_log(HEADER + ["09:00 1 a", "", "09:02 1 b"])
        assert exc_info.value.line == ""

    def test_out_of_order_event(self):
        with pytest.raises(EventLogError) as exc_info:
            load_event_log(HEADER + ["09:10 1 a", "09:05 1 b"])
        assert exc_info.value.line == "09:05 1 b"

    def test_equal_times_are_allowed(self):
        _, events = load_event_log(HEADER + ["09:10 1 a", "09:10 1 b"])
        assert len(events) == 2

    def test_read_event_log_from_file(self, sample_log_path):
        config, events = read_event_log(str(sample_log_path))
        assert config.capacity == 3
        assert len(events) == 14
