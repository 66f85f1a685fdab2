"""Command line entry point: ``rapla-ics fetch`` and ``rapla-ics serve``."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests

from .config import get_settings
from .errors import ExtractionError
from .ics import serialize
from .parser import DetailFormat, extract
from .rapla_ics import RaplaIcs


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="rapla-ics", description="Convert Rapla timetables to ICS")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="Fetch one calendar and print or save it")
    source = fetch.add_mutually_exclusive_group(required=True)
    source.add_argument("--key", help="Rapla calendar key (requires --salt)")
    source.add_argument("--file", type=Path, help="Read a saved Rapla page instead of fetching")
    fetch.add_argument("--salt", help="Rapla calendar salt")
    fetch.add_argument("--json", action="store_true", help="Output JSON instead of ICS")
    fetch.add_argument("--output", type=Path, default=None, help="Write to this file instead of stdout")
    fetch.add_argument(
        "--format",
        dest="detail_format",
        choices=[f.value for f in DetailFormat],
        default=settings.detail_format.value,
        help="Layout of the text inside event cells",
    )

    serve = sub.add_parser("serve", help="Run the HTTP proxy")
    serve.add_argument("--host", default=settings.host, help="Address to bind")
    serve.add_argument("--port", type=int, default=settings.port, help="Port to listen on")

    args = parser.parse_args(argv)
    if args.command == "fetch" and args.key and not args.salt:
        parser.error("--key requires --salt")
    return args


def _fetch(args: argparse.Namespace) -> int:
    settings = get_settings()
    try:
        if args.file:
            calendar = extract(args.file.read_text(encoding="utf-8"), args.detail_format)
        else:
            client = RaplaIcs(
                args.key,
                args.salt,
                base_url=settings.base_url,
                weeks_back=settings.weeks_back,
                pages=settings.pages,
                detail_format=args.detail_format,
            )
            calendar = client.get_calendar()
    except ExtractionError as exc:
        logging.error("Could not read calendar: %s", exc)
        return 1
    except requests.RequestException as exc:
        logging.error("Could not fetch calendar: %s", exc)
        return 1

    text = calendar.to_json() if args.json else serialize(calendar)
    if args.output:
        args.output.write_text(text, encoding="utf-8")
        logging.info("Wrote %d events to %s", len(calendar.events), args.output)
    else:
        sys.stdout.write(text)
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from .server import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command == "fetch":
        return _fetch(args)
    return _serve(args)


if __name__ == "__main__":
    raise SystemExit(main())
