"""
Directory trigger runner.

Registers glob patterns for one job and prints each emitted job as a JSON
line on stdout. Logs go to stderr.

Usage:
======
    watchtrigger-run --job-id 1 --include '/data/**/*.log'
    watchtrigger-run --job-id 1 --include '/data/**/*.log' --exclude /data/tmp --once
    watchtrigger-run --job-id 1 --include '/data/*.csv' --interval 5
    watchtrigger-run --job-id 1 --include '/data/*.csv' --serve --port 8086
"""

import argparse
import sys
import time
from typing import List, Optional

from watchtrigger.logging_config import setup_logging
from watchtrigger.triggers import (
    DEFAULT_CHECK_INTERVAL,
    DirectoryTrigger,
    InvalidConfigError,
    InvalidPatternError,
    TriggerConfig,
)

EXIT_OK = 0
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watchtrigger-run",
        description="Poll directories and emit one job per newly matched file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --job-id 1 --include '/data/**/*.log'                 # Poll every 2s
  %(prog)s --job-id 1 --include '/data/**/*.log' --once          # Single scan, then exit
  %(prog)s --job-id 1 --include '/data/*.txt' --exclude /data/tmp --interval 10
        """,
    )
    parser.add_argument("--job-id", required=True, help="Owning job identifier")
    parser.add_argument(
        "--include",
        action="append",
        required=True,
        metavar="GLOB",
        help="Absolute whitelist glob (repeatable)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Absolute blacklist glob or directory (repeatable)",
    )
    parser.add_argument("--offset", default=None, help="Resume offset carried on emitted jobs")
    parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_CHECK_INTERVAL,
        metavar="N",
        help=f"Seconds between scans (default: {DEFAULT_CHECK_INTERVAL})",
    )
    parser.add_argument("--once", action="store_true", help="Perform a single scan and exit")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Serve the trigger HTTP API instead of printing jobs",
    )
    parser.add_argument("--host", default="127.0.0.1", help="HTTP bind host (with --serve)")
    parser.add_argument("--port", type=int, default=8086, help="HTTP port (with --serve)")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser


def _print_jobs(trigger: DirectoryTrigger) -> int:
    jobs = trigger.fetched_jobs().drain()
    for job in jobs:
        print(job.model_dump_json(), flush=True)
    return len(jobs)


def run(args: argparse.Namespace) -> int:
    try:
        config = TriggerConfig.from_dict(
            {"job_id": args.job_id, "check_interval": args.interval}
        )
    except InvalidConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    trigger = DirectoryTrigger()

    if args.serve:
        import uvicorn

        from watchtrigger.main import create_app

        app = create_app(config, trigger=trigger)
    else:
        trigger.init(config)

    try:
        trigger.register(args.include, offset=args.offset, blacklist=args.exclude)
    except InvalidPatternError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    if args.serve:
        uvicorn.run(app, host=args.host, port=args.port)
        return EXIT_OK

    if args.once:
        trigger.run_tick()
        _print_jobs(trigger)
        return EXIT_OK

    trigger.start()
    try:
        while True:
            _print_jobs(trigger)
            time.sleep(min(config.check_interval, 1.0))
    except KeyboardInterrupt:
        print("Shutting down directory trigger...", file=sys.stderr)
    finally:
        trigger.stop()
        trigger.join()
        _print_jobs(trigger)

    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
