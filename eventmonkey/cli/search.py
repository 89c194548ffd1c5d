#!/usr/bin/env python3
"""
CLI for searching events and managing the relational store.

Usage:
    # Search both catalogs by keyword
    python -m eventmonkey.cli.search search --keyword jazz --limit 5

    # Only TicketMaster, by classification, written to a file
    python -m eventmonkey.cli.search search --source remote --classification Rock -o rock.json

    # Look up a single event
    python -m eventmonkey.cli.search event 42 --source relational

    # List EventMonkey's own events
    python -m eventmonkey.cli.search list

    # Create the relational schema
    python -m eventmonkey.cli.search init-db
"""

import argparse
import asyncio
import json
import logging
import sys

from eventmonkey.config import configure_logging
from eventmonkey.models import Event, SearchRequest, SourceSelector
from eventmonkey.services import (
    EventManager,
    get_data_source,
    get_event_manager,
    get_ticketmaster_client,
)

logger = logging.getLogger(__name__)


def event_to_dict(event: Event) -> dict:
    """Convert an Event to a JSON-serializable dict."""
    return event.model_dump(mode="json")


def positive_int(value: str) -> int:
    """argparse type for limits."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def _write_output(data: object, output_file: str | None) -> None:
    output = json.dumps(data, indent=2)
    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        logger.info("Wrote results to %s", output_file)
    else:
        print(output)


async def _shutdown() -> None:
    await get_ticketmaster_client().close()
    await get_data_source().close()


async def run_search(
    request: SearchRequest,
    output_file: str | None = None,
    manager: EventManager | None = None,
) -> int:
    """Run a search and print the matching events."""
    manager = manager or get_event_manager()
    events = await manager.search(request)

    if not events:
        logger.warning("No events found")
    else:
        logger.info("Found %d events", len(events))

    _write_output([event_to_dict(event) for event in events], output_file)
    return len(events)


async def show_event(
    event_id: str,
    source: SourceSelector = SourceSelector.COMPOSITE,
    manager: EventManager | None = None,
) -> bool:
    """Print a single event. Returns False if it does not exist."""
    manager = manager or get_event_manager()
    event = await manager.find_event_by_id(event_id, source)

    if event is None:
        logger.error("Event %s not found in %s source", event_id, source.value)
        return False

    _write_output(event_to_dict(event), None)
    return True


async def list_events(
    output_file: str | None = None, manager: EventManager | None = None
) -> int:
    """Print every event stored by EventMonkey."""
    manager = manager or get_event_manager()
    events = await manager.get_all_events()
    logger.info("Listing %d stored events", len(events))
    _write_output([event_to_dict(event) for event in events], output_file)
    return len(events)


async def init_db() -> None:
    """Create the relational schema."""
    await get_data_source().init_schema()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Event search CLI for EventMonkey",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sources = [selector.value for selector in SourceSelector]

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # search command
    search = subparsers.add_parser("search", help="Search events")
    search.add_argument(
        "--source",
        choices=sources,
        default=SourceSelector.COMPOSITE.value,
        help="Event source to search (default: composite)",
    )
    search.add_argument("--event-id", help="Event id to look up")
    search.add_argument(
        "--classification",
        nargs="+",
        default=[],
        help="Genre names to match",
    )
    search.add_argument(
        "--segment",
        nargs="+",
        default=[],
        help="Segment names to match",
    )
    search.add_argument("--organizer-id", type=int, help="Organizer id (relational events only)")
    search.add_argument("--keyword", help="Free-text keyword")
    search.add_argument("--limit", type=positive_int, help="Maximum results per lookup")
    search.add_argument(
        "-o", "--output",
        help="Output file path (default: stdout)",
    )

    # event command
    event = subparsers.add_parser("event", help="Show a single event")
    event.add_argument("event_id", help="Event id")
    event.add_argument(
        "--source",
        choices=sources,
        default=SourceSelector.COMPOSITE.value,
        help="Event source to search (default: composite)",
    )

    # list command
    list_parser = subparsers.add_parser("list", help="List every stored event")
    list_parser.add_argument(
        "-o", "--output",
        help="Output file path (default: stdout)",
    )

    # init-db command
    subparsers.add_parser("init-db", help="Create the relational schema")

    return parser


async def _run(args: argparse.Namespace) -> int:
    try:
        if args.command == "search":
            request = SearchRequest(
                source=SourceSelector(args.source),
                event_id=args.event_id,
                classification=args.classification,
                segment=args.segment,
                organizer_id=args.organizer_id,
                keyword=args.keyword,
                limit=args.limit,
            )
            await run_search(request, output_file=args.output)
            return 0
        elif args.command == "event":
            found = await show_event(args.event_id, SourceSelector(args.source))
            return 0 if found else 1
        elif args.command == "list":
            await list_events(output_file=args.output)
            return 0
        elif args.command == "init-db":
            await init_db()
            return 0
        return 1
    finally:
        await _shutdown()


def main(argv: list[str] | None = None) -> None:
    """Main CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    configure_logging()
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
