#!/usr/bin/env python3
"""CLI Entrypoint - コマンドラインから実行

使い方:
    python -m lessonpath.entrypoints.cli series <item_id>
    python -m lessonpath.entrypoints.cli chain <item_id>
    python -m lessonpath.entrypoints.cli gaps <item_id> [--tolerance 7]
    python -m lessonpath.entrypoints.cli reminders <item_id> [--days 30]
    python -m lessonpath.entrypoints.cli ics [--output lessons.ics]
    python -m lessonpath.entrypoints.cli export <item_id>
    python -m lessonpath.entrypoints.cli resolve app://cal/event_series_<item_id>

環境変数:
    SOURCE_PATH: 取引データのJSONファイル（--source で上書き可）
    LOG_LEVEL: ログレベル (DEBUG, INFO, WARNING, ERROR) デフォルト: INFO
"""

import argparse
import dataclasses
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime

from lessonpath.adapters.ical_renderer import ICalRenderer
from lessonpath.config import AppConfig
from lessonpath.domain.errors import LessonPathError
from lessonpath.entrypoints.factory import create_exporter, create_schedule_service
from lessonpath.logging_config import setup_logging
from lessonpath.services.calendar_materializer import parse_canonical_url

logger = logging.getLogger(__name__)


def _jsonable(value):
    if dataclasses.is_dataclass(value):
        return dataclasses.asdict(value)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _print_json(value) -> None:
    print(json.dumps(_jsonable(value), ensure_ascii=False, indent=2, default=str))


def _chain_view(chain) -> dict:
    return {
        "chain_key": chain.chain_key,
        "student_name": chain.student_name,
        "focus": chain.focus,
        "providers": chain.providers,
        "entries": [
            {
                "item_id": entry.item.id,
                "description": entry.item.description,
                "receipt_id": entry.receipt.id,
                "start_date": entry.start_date,
                "end_date": entry.end_date,
            }
            for entry in chain.entries
        ],
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lessonpath", description="Lesson schedules, learning paths and calendar export"
    )
    parser.add_argument("--source", help="transactions JSON file (overrides SOURCE_PATH)")
    sub = parser.add_subparsers(dest="command", required=True)

    series = sub.add_parser("series", help="expand an item into occurrences")
    series.add_argument("item_id")

    chain = sub.add_parser("chain", help="show the learning path of an item")
    chain.add_argument("item_id")

    gaps = sub.add_parser("gaps", help="detect continuity gaps in an item's chain")
    gaps.add_argument("item_id")
    gaps.add_argument("--tolerance", type=int, default=None, help="tolerance in days")

    ics = sub.add_parser("ics", help="render every occurrence as an iCal feed")
    ics.add_argument("--output", help="write to file instead of stdout")

    reminders = sub.add_parser("reminders", help="plan reminders for upcoming lessons")
    reminders.add_argument("item_id")
    reminders.add_argument("--days", type=int, default=30, help="look-ahead window in days")

    export = sub.add_parser("export", help="add an item to the calendar")
    export.add_argument("item_id")

    resolve = sub.add_parser("resolve", help="resolve an app://cal/ link")
    resolve.add_argument("url")

    return parser


def run(args: argparse.Namespace, config: AppConfig) -> int:
    """サブコマンドを実行して終了コードを返す"""
    if args.command == "resolve":
        link = parse_canonical_url(args.url)
        if link is None:
            logger.error("Not a calendar link: %s", args.url)
            return 1
        _print_json(link)
        return 0

    service = create_schedule_service(config)

    if args.command == "series":
        summary = service.series_summary(args.item_id)
        titles = (
            service.series_titles(args.item_id, summary.first_date.year)
            if summary
            else None
        )
        _print_json(
            {
                "titles": titles,
                "summary": summary,
                "occurrences": service.occurrences(args.item_id),
            }
        )
    elif args.command == "chain":
        chain = service.chain(args.item_id)
        _print_json(_chain_view(chain) if chain else None)
    elif args.command == "gaps":
        _print_json(service.continuity_gaps(args.item_id, args.tolerance))
    elif args.command == "reminders":
        _print_json(service.reminders(args.item_id, datetime.now(), args.days))
    elif args.command == "ics":
        content = ICalRenderer().render(service.feed_events())
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(content)
            logger.info("Wrote iCal feed to %s", args.output)
        else:
            sys.stdout.write(content)
    elif args.command == "export":
        exporter = create_exporter(config)
        results = exporter.export_all(service.calendar_events(args.item_id))
        for result in results:
            if result.needs_manual_copy:
                print("Calendar isn't available here. Copy this link to add it manually:")
                print(result.url)
            else:
                logger.info("Added to calendar: %s", result.event_ref)
        _print_json(results)
    return 0


def main(argv: list[str] | None = None) -> None:
    """メインエントリーポイント"""
    setup_logging()
    args = build_parser().parse_args(argv)

    try:
        config = AppConfig.from_env()
        if args.source:
            config = replace(config, source_backend="json", source_path=args.source)
        sys.exit(run(args, config))

    except LessonPathError as e:
        logger.error("%s", e)
        sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception:
        logger.exception("Fatal error")
        sys.exit(1)


if __name__ == "__main__":
    main()
