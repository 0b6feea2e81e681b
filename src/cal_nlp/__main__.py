"""Entry point for ``python -m cal_nlp``.

Previews a parse from the command line: the sentence goes through the
hybrid orchestrator and the resulting event is printed as JSON using the
camelCase wire names.  Uses stdlib :mod:`argparse` for argument parsing.

Exit codes:
    0 -- An event was parsed.
    1 -- Parse or configuration error (unknown timezone, nothing parsed,
         invalid environment settings).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import json
import sys

from cal_nlp.config import ConfigError, load_settings
from cal_nlp.exceptions import BothFailed, InvalidTimezone
from cal_nlp.hybrid import HybridOrchestrator, build_orchestrator
from cal_nlp.log import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="cal-nlp",
        description="Parse a natural-language event description into JSON.",
    )
    parser.add_argument(
        "text",
        type=str,
        help='Event description, e.g. "Lunch with Sam tomorrow at noon".',
    )
    parser.add_argument(
        "--timezone",
        type=str,
        default=None,
        help="IANA timezone of the text (defaults to TIMEZONE from config).",
    )
    parser.add_argument(
        "--rule-only",
        action="store_true",
        default=False,
        help="Skip the Gemini call and use the rule-based parser only.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the cal-nlp CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``
            when ``None`` (the normal case).

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    try:
        setup_logging("DEBUG" if args.verbose else settings.log_level)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.rule_only:
        orchestrator = HybridOrchestrator()
    else:
        orchestrator = build_orchestrator(settings)

    timezone = args.timezone or settings.timezone
    try:
        event = orchestrator.parse_event(args.text, timezone)
    except (InvalidTimezone, BothFailed) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(json.dumps(event.to_payload(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
