# main.py
import sys
import json
import argparse
from typing import List, Optional

from compclub.checker import check_files
from compclub.config import DEFAULT_CONFIG_PATH, debug_print, load_config, set_debug
from compclub.driver import judge
from compclub.gen import generate_event_log
from compclub.state import simulate
from compclub.validate import EventLogError, read_event_log


def cmd_run(args, config) -> int:
    try:
        club_settings, events = read_event_log(args.input)
    except OSError as e:
        print(f"ERROR: Cannot open input file '{args.input}': {e}", file=sys.stderr)
        return 1
    except EventLogError as e:
        print(e.line)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    debug_print(f"Loaded {len(events)} events for {club_settings}")
    club = simulate(club_settings, events)
    for line in club.render():
        print(line)
    return 0


def cmd_gen(args, config) -> int:
    gen_config = config["gen"]
    lines = generate_event_log(
        seed=args.seed,
        num_events=args.events if args.events is not None else gen_config["events"],
        num_clients=args.clients if args.clients is not None else gen_config["clients"],
        min_tables=gen_config["min_tables"], max_tables=gen_config["max_tables"],
        max_rate=gen_config["max_rate"],
    )
    text = "\n".join(lines) + "\n"
    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            f.write(text)
        print(f"INFO: Wrote {len(lines)} lines to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


def cmd_check(args, config) -> int:
    try:
        result = check_files(args.input, args.output)
    except (OSError, ValueError) as e:
        print(json.dumps({"status": "failure", "reason": f"Cannot read files: {e}"}))
        return 1
    if result["is_legal"]:
        print(json.dumps({"status": "success"}))
        return 0
    print(json.dumps({"status": "failure", "reason": result["error_message"], "line": result["line"]}))
    return 1


def cmd_judge(args, config) -> int:
    judge_config = config["judge"]
    gen_config = config["gen"]
    summary = judge(
        args.command,
        rounds=args.rounds if args.rounds is not None else judge_config["rounds"],
        timeout=args.timeout if args.timeout is not None else judge_config["timeout"],
        seed=args.seed,
        tmp_dir=config["tmp_dir"],
        cleanup=bool(judge_config["cleanup"]),
        gen_options={
            "num_events": gen_config["events"], "num_clients": gen_config["clients"],
            "min_tables": gen_config["min_tables"], "max_tables": gen_config["max_tables"],
            "max_rate": gen_config["max_rate"],
        },
    )
    print(json.dumps(summary))
    return 0 if summary["status"] == "success" else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="compclub", description="Computer club event log replay and judge tools.")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to config.yml.")
    parser.add_argument("--debug", action="store_true", help="Print detailed debug output to stderr.")
    subparsers = parser.add_subparsers(dest="subcommand", required=True)

    run_parser = subparsers.add_parser("run", help="Replay an event log and print the day report.")
    run_parser.add_argument("input", help="Path to the event log.")
    run_parser.set_defaults(handler=cmd_run)

    gen_parser = subparsers.add_parser("gen", help="Generate a random valid event log.")
    gen_parser.add_argument("--seed", type=int, default=None)
    gen_parser.add_argument("--events", type=int, default=None)
    gen_parser.add_argument("--clients", type=int, default=None)
    gen_parser.add_argument("-o", "--output", default=None, help="Write to a file instead of stdout.")
    gen_parser.set_defaults(handler=cmd_gen)

    check_parser = subparsers.add_parser("check", help="Check a candidate output against the reference replay.")
    check_parser.add_argument("input", help="Path to the event log.")
    check_parser.add_argument("output", help="Path to the candidate output.")
    check_parser.set_defaults(handler=cmd_check)

    judge_parser = subparsers.add_parser("judge", help="Run a candidate program on generated logs.")
    judge_parser.add_argument("command", nargs="+",
                              help="Candidate command; the input path is appended. Put it after '--' when it has its own options.")
    judge_parser.add_argument("--rounds", type=int, default=None)
    judge_parser.add_argument("--timeout", type=float, default=None)
    judge_parser.add_argument("--seed", type=int, default=None)
    judge_parser.set_defaults(handler=cmd_judge)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    set_debug(args.debug or config.get("debug", False))
    return args.handler(args, config)


if __name__ == "__main__":
    sys.exit(main())
