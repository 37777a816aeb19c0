from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from loguru import logger

from secret_santa.core.config import Settings, load_settings
from secret_santa.core.logging import setup_logging
from secret_santa.services import SantaError, SecretSanta, load_state, save_state


def parse_args(argv: Optional[List[str]], settings: Settings) -> argparse.Namespace:
    base = argparse.ArgumentParser(add_help=False)
    base.add_argument("--state", default=settings.state_path, help="Path to the JSON state file")

    parser = argparse.ArgumentParser(prog="secret-santa", description="Weighted Secret Santa draws")
    subparsers = parser.add_subparsers(dest="command", required=True)

    draw_parser = subparsers.add_parser("draw", parents=[base], help="Draw recipients for a group")
    draw_parser.add_argument("names", nargs="+", help="Participant names")
    draw_parser.add_argument("--seed", type=int, default=settings.seed)
    draw_parser.add_argument("--lenient", action="store_true", help="Ignore duplicate names instead of failing")
    draw_parser.add_argument("--dry-run", action="store_true", help="Do not write the updated state")
    draw_parser.add_argument("--json", action="store_true", help="Print the pairings as a JSON list")

    subparsers.add_parser("show", parents=[base], help="Show stored participant statistics")

    return parser.parse_args(argv)


def run_draw(args: argparse.Namespace, settings: Settings) -> int:
    state = load_state(args.state)
    santa = SecretSanta(state, seed=args.seed, strict=settings.strict and not args.lenient)
    santa.add_participants(args.names)

    pairings = santa.draw()
    if args.json:
        print(json.dumps([pairing.to_dict() for pairing in pairings], indent=2, ensure_ascii=False))
    else:
        for pairing in pairings:
            print(f"{pairing.name} -> {pairing.recipient}")

    if args.dry_run:
        logger.info("Dry run, state left untouched")
    else:
        save_state(args.state, santa.serialize())
        logger.info("State written to {path}", path=args.state)
    return 0


def run_show(args: argparse.Namespace) -> int:
    state = load_state(args.state)
    if not state:
        print("No participants recorded yet.")
        return 0

    for record in state:
        stats = record.get("stats", {})
        print(
            "{name}: previous={previous!r} repeats={repeats} mean weight={mean}".format(
                name=record["name"],
                previous=stats.get("previousRecipient", ""),
                repeats=stats.get("recipientRepeatFrequency", 0),
                mean=stats.get("meanRecipientWeight", 1),
            )
        )
        for recipient in stats.get("recipients", []):
            print(
                f"    {recipient['name']}: weight={recipient['weight']} "
                f"chosen={recipient['frequency']}"
            )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    settings = load_settings()
    setup_logging(settings)
    args = parse_args(argv, settings)

    try:
        if args.command == "draw":
            return run_draw(args, settings)
        return run_show(args)
    except SantaError as exc:
        logger.error("{error}", error=exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
