from __future__ import annotations

import argparse
import dataclasses
import io
import logging
import sys
from typing import Optional

from .config import Settings
from .convert import convert
from .errors import NotionIcalError
from .sources.adapters.notion_export import NotionExportSource
from .sources.registry import build_source, source_kind

logger = logging.getLogger("notion_ical")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notion-ical",
        description="Generate iCal events from a Notion export or the Notion API.",
    )
    parser.add_argument("-e", "--export", default=None, help="Read events from this export ZIP file.")
    parser.add_argument(
        "-z", "--export-timezone", default=None,
        help="Time zone to interpret dates in (env NOTION_EXPORT_TIMEZONE, default UTC).",
    )
    parser.add_argument(
        "-k", "--api-key", default=None,
        help="Read events from the API using this API key (env NOTION_API_KEY).",
    )
    parser.add_argument(
        "-d", "--database-id", default=None,
        help="Read events from this database ID (env NOTION_DATABASE_ID).",
    )
    parser.add_argument(
        "--date-property", default=None,
        help="Use this date property for the event date instead of looking for the only date property.",
    )
    parser.add_argument(
        "--hide-property", default=None,
        help="Hide events that have this checkbox property set.",
    )
    parser.add_argument(
        "--title-property", default=None,
        help="Use this export column as the event title instead of looking for name/title.",
    )
    parser.add_argument("--timeout", type=int, default=None, help="Seconds allowed per API call.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every fetch.")

    sub = parser.add_subparsers(dest="command", required=True)
    save = sub.add_parser("save", help="Save iCal events to a file.")
    save.add_argument("-o", "--output", required=True, help="Output iCal file path ('-' for stdout).")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings) -> Settings:
    """CLI flags override environment settings."""
    overrides = {
        "export_path": args.export,
        "timezone": args.export_timezone,
        "api_key": args.api_key,
        "database_id": args.database_id,
        "date_property": args.date_property,
        "hide_property": args.hide_property,
        "title_property": args.title_property,
        "timeout_seconds": args.timeout,
    }
    return dataclasses.replace(base, **{k: v for k, v in overrides.items() if v is not None})


def _save(settings: Settings, output: str) -> int:
    source = build_source(settings)

    # Nothing is written unless every event was read.
    buf = io.BytesIO()
    try:
        count = convert(source, buf)
    finally:
        if isinstance(source, NotionExportSource):
            source.close()
    if output == "-":
        sys.stdout.buffer.write(buf.getvalue())
    else:
        with open(output, "wb") as f:
            f.write(buf.getvalue())

    print(
        f"[notion-ical][summary]"
        f" source={source_kind(settings)}"
        f" name={source.name()!r}"
        f" events={count}"
        f" output={output}",
        file=sys.stderr,
    )
    return count


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = settings_from_args(args, Settings.load())

    try:
        _save(settings, args.output)
    except NotionIcalError as e:
        logger.error("%s: %s", type(e).__name__, e)
        return 1
    except OSError as e:
        logger.error("unable to write %s: %s", args.output, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
