import os
import sys
from pathlib import Path

from compclub.driver import (
    STATUS_ACCEPTED, STATUS_CRASHED, STATUS_TLE, STATUS_WRONG_ANSWER,
    judge, judge_one_round, run_candidate,
)

from conftest import SAMPLE_LOG

REPO_ROOT = Path(__file__).resolve().parents[1]

REFERENCE_CANDIDATE = f"""
import sys
sys.path.insert(0, {str(REPO_ROOT)!r})
from compclub.main import main
sys.exit(main(["--config", "missing-config.yml", "run", sys.argv[1]]))
"""


def write_script(tmp_path, name, source):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return [sys.executable, str(path)]


class TestRunCandidate:

    def test_collects_stdout_and_exit_code(self, tmp_path, sample_log_path):
        command = write_script(tmp_path, "head.py", "import sys\nprint(open(sys.argv[1]).readline().strip())\n")
        result = run_candidate(command, str(sample_log_path), timeout=10.0)
        assert result["status"] is None
        assert result["stdout"].strip() == "3"
        assert result["exit_code"] == 0

    def test_kills_slow_candidate(self, tmp_path, sample_log_path):
        command = write_script(tmp_path, "slow.py", "import time\ntime.sleep(30)\n")
        result = run_candidate(command, str(sample_log_path), timeout=0.5)
        assert result["status"] == STATUS_TLE
        assert result["wall_time"] < 10

    def test_missing_executable_is_a_crash(self, sample_log_path):
        result = run_candidate(["/nonexistent/candidate-binary"], str(sample_log_path))
        assert result["status"] == STATUS_CRASHED


class TestJudge:

    def test_reference_candidate_is_accepted(self, tmp_path):
        command = write_script(tmp_path, "reference.py", REFERENCE_CANDIDATE)
        verdict = judge_one_round(command, SAMPLE_LOG.splitlines(), str(tmp_path / "in.txt"), timeout=30.0)
        assert verdict["status"] == STATUS_ACCEPTED

    def test_silent_candidate_is_wrong(self, tmp_path):
        command = write_script(tmp_path, "silent.py", "pass\n")
        verdict = judge_one_round(command, SAMPLE_LOG.splitlines(), str(tmp_path / "in.txt"), timeout=10.0)
        assert verdict["status"] == STATUS_WRONG_ANSWER
        assert "Output ended early" in verdict["reason"]

    def test_crashing_candidate(self, tmp_path):
        command = write_script(tmp_path, "crash.py", "raise SystemExit(3)\n")
        verdict = judge_one_round(command, SAMPLE_LOG.splitlines(), str(tmp_path / "in.txt"), timeout=10.0)
        assert verdict["status"] == STATUS_CRASHED

    def test_rounds_summary_and_cleanup(self, tmp_path, capsys):
        command = write_script(tmp_path, "reference.py", REFERENCE_CANDIDATE)
        work_dir = tmp_path / "work"
        summary = judge(command, rounds=2, timeout=30.0, seed=11, tmp_dir=str(work_dir), cleanup=True,
                        gen_options={"num_events": 15})
        assert summary["status"] == "success"
        assert summary["passed"] == 2
        assert os.listdir(work_dir) == []
        assert "ACCEPTED" in capsys.readouterr().out

    def test_failed_rounds_keep_inputs(self, tmp_path, capsys):
        command = write_script(tmp_path, "silent.py", "pass\n")
        work_dir = tmp_path / "work"
        summary = judge(command, rounds=1, timeout=10.0, seed=5, tmp_dir=str(work_dir))
        assert summary["status"] == "failure"
        assert len(summary["failures"]) == 1
        assert os.path.exists(summary["failures"][0]["input_path"])
