# driver.py
import os
import sys
import time
import random
import subprocess
from typing import Any, Dict, List, Optional, Sequence

import psutil

from compclub.checker import check_output
from compclub.config import debug_print
from compclub.gen import generate_event_log

DEFAULT_TIMEOUT = 5.0
DEFAULT_ROUNDS = 10

# Candidate run statuses
STATUS_ACCEPTED = "ACCEPTED"
STATUS_WRONG_ANSWER = "WRONG_ANSWER"
STATUS_TLE = "TLE"
STATUS_CRASHED = "CRASHED"


def _kill_process_tree(pid: int):
    try:
        parent = psutil.Process(pid)
        children = parent.children(recursive=True)
        for child in children:
            try: child.terminate()
            except psutil.NoSuchProcess: pass
        parent.terminate()
        gone, alive = psutil.wait_procs(children + [parent], timeout=1.0)
        for p in alive:
            try: p.kill()
            except psutil.NoSuchProcess: pass
    except psutil.NoSuchProcess: pass


def run_candidate(command: Sequence[str], input_path: str, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    """Run `command input_path` and collect its output under a wall-time limit."""
    full_command = list(command) + [input_path]
    debug_print(f"Running candidate: {' '.join(full_command)}")
    result: Dict[str, Any] = {"status": None, "stdout": "", "stderr": "", "exit_code": None, "wall_time": 0.0}

    start_wall_time = time.monotonic()
    try:
        process = subprocess.Popen(
            full_command, stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE, stderr=subprocess.PIPE,
            text=True, encoding='utf-8', errors='replace'
        )
    except OSError as e:
        result["status"] = STATUS_CRASHED
        result["stderr"] = f"Failed to start candidate: {e}"
        return result

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_tree(process.pid)
        stdout, stderr = process.communicate()
        result["status"] = STATUS_TLE
    result["wall_time"] = time.monotonic() - start_wall_time
    result["stdout"], result["stderr"] = stdout or "", stderr or ""
    result["exit_code"] = process.returncode
    debug_print(f"Candidate finished in {result['wall_time']:.2f}s with exit code {process.returncode}")
    return result


def judge_one_round(command: Sequence[str], input_lines: List[str], input_path: str,
                    timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    with open(input_path, 'w', encoding='utf-8') as f:
        f.write("\n".join(input_lines) + "\n")

    run_result = run_candidate(command, input_path, timeout)
    verdict = {"input_path": input_path, "wall_time": run_result["wall_time"], "exit_code": run_result["exit_code"]}

    if run_result["status"] == STATUS_TLE:
        verdict.update(status=STATUS_TLE, reason=f"Wall time exceeded {timeout:.2f}s")
        return verdict
    if run_result["status"] == STATUS_CRASHED:
        verdict.update(status=STATUS_CRASHED, reason=run_result["stderr"])
        return verdict

    check_result = check_output(input_lines, run_result["stdout"].splitlines())
    if check_result["is_legal"]:
        verdict["status"] = STATUS_ACCEPTED
    elif run_result["exit_code"] not in (0, 1):
        # A wrong answer from a process that died is reported as a crash.
        verdict.update(status=STATUS_CRASHED, reason=f"Exit code {run_result['exit_code']}: {run_result['stderr'].strip()}")
    else:
        verdict.update(status=STATUS_WRONG_ANSWER, reason=check_result["error_message"])
    return verdict


def judge(command: Sequence[str],
          rounds: int = DEFAULT_ROUNDS,
          timeout: float = DEFAULT_TIMEOUT,
          seed: Optional[int] = None,
          tmp_dir: str = "tmp",
          cleanup: bool = True,
          gen_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    gen_options = gen_options or {}
    base_seed = seed if seed is not None else random.randrange(1 << 30)
    os.makedirs(tmp_dir, exist_ok=True)

    passed = 0
    failures: List[Dict[str, Any]] = []
    for round_num in range(1, rounds + 1):
        round_seed = base_seed + round_num
        input_lines = generate_event_log(seed=round_seed, **gen_options)
        input_path = os.path.abspath(os.path.join(tmp_dir, f"club_input_{round_seed}.txt"))
        verdict = judge_one_round(command, input_lines, input_path, timeout)
        verdict.update(round=round_num, seed=round_seed)

        if verdict["status"] == STATUS_ACCEPTED:
            passed += 1
            print(f"INFO: Round {round_num} (seed {round_seed}): {STATUS_ACCEPTED} in {verdict['wall_time']:.2f}s")
            if cleanup:
                try:
                    os.remove(input_path)
                except OSError as e:
                    print(f"WARNING: Failed to delete temp file {input_path}: {e}", file=sys.stderr)
        else:
            print(f"INFO: Round {round_num} (seed {round_seed}): {verdict['status']} - {verdict.get('reason', '')}")
            print(f"INFO: Keeping failed input: {input_path}")
            failures.append(verdict)

    return {"status": "success" if not failures else "failure", "rounds": rounds, "passed": passed,
            "seed": base_seed, "failures": failures}
