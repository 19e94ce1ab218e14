from __future__ import annotations

import argparse
import logging


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="activity-ledger")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logs")
    sub = parser.add_subparsers(dest="command", required=True)

    run_p = sub.add_parser("run", help="Run the poll loop (foreground)")
    run_p.add_argument("--once", action="store_true", help="Run a single tick and exit")
    run_p.set_defaults(_handler="run")

    summary_p = sub.add_parser("summary", help="Show recorded totals in hours/minutes")
    summary_p.add_argument(
        "period",
        nargs="?",
        default="today",
        choices=["today", "yesterday", "week"],
        help="Summary period (default: today)",
    )
    summary_p.set_defaults(_handler="summary")

    record_p = sub.add_parser("record", help="Append a transition to the log")
    record_p.add_argument("state", choices=["active", "inactive"])
    record_p.add_argument("--at", type=int, default=None, help="Unix time (default: now)")
    record_p.set_defaults(_handler="record")

    clear_p = sub.add_parser("clear", help="Delete all recorded daily totals")
    clear_p.set_defaults(_handler="clear")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    if args._handler == "run":
        from activity_ledger.cli.run import main as run_main

        return int(run_main(once=bool(args.once)))

    if args._handler == "summary":
        from activity_ledger.cli.summary import main as summary_main

        return int(summary_main(period=str(getattr(args, "period", "today"))))

    if args._handler == "record":
        from activity_ledger.cli.record import main as record_main

        return int(record_main(state=str(args.state), at=args.at))

    if args._handler == "clear":
        from activity_ledger.cli.record import clear_main

        return int(clear_main())

    raise RuntimeError(f"Unknown command: {args._handler}")


if __name__ == "__main__":
    raise SystemExit(main())
