# checker.py
from typing import Any, Dict, List, Sequence

from compclub.config import debug_print
from compclub.state import simulate
from compclub.validate import EventLogError, load_event_log


def expected_output(input_lines: Sequence[str]) -> List[str]:
    """Reference output for an input log: the report, or the offending line if the log is malformed."""
    try:
        config, events = load_event_log(input_lines)
    except EventLogError as e:
        debug_print(f"Reference rejects input: {e}")
        return [e.line]
    return simulate(config, events).render()


def _normalise(lines: Sequence[str]) -> List[str]:
    normalised = [line.rstrip() for line in lines]
    while normalised and not normalised[-1]:
        normalised.pop()
    return normalised


def check_output(input_lines: Sequence[str], candidate_lines: Sequence[str]) -> Dict[str, Any]:
    expected = _normalise(expected_output(input_lines))
    actual = _normalise(candidate_lines)

    for idx, (expected_line, actual_line) in enumerate(zip(expected, actual), start=1):
        if expected_line != actual_line:
            return {"is_legal": False, "line": idx,
                    "error_message": f"Line {idx}: expected '{expected_line}', got '{actual_line}'."}

    if len(actual) < len(expected):
        idx = len(actual) + 1
        return {"is_legal": False, "line": idx,
                "error_message": f"Output ended early: expected {len(expected)} lines, got {len(actual)}. Next expected line: '{expected[len(actual)]}'."}
    if len(actual) > len(expected):
        idx = len(expected) + 1
        return {"is_legal": False, "line": idx,
                "error_message": f"Output too long: expected {len(expected)} lines, got {len(actual)}. First extra line: '{actual[len(expected)]}'."}
    return {"is_legal": True}


def check_files(input_path: str, output_path: str) -> Dict[str, Any]:
    with open(input_path, 'r', encoding='utf-8', errors='replace') as f:
        input_lines = f.read().splitlines()
    with open(output_path, 'r', encoding='utf-8', errors='replace') as f:
        candidate_lines = f.read().splitlines()
    return check_output(input_lines, candidate_lines)
