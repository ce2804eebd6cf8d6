#!/usr/bin/env python3
"""
IOC Pivot - CLI entry point
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterator
from dataclasses import replace
from typing import Optional

from .batch import BatchProgress, BatchSummary
from .browser import Browser, PrintingBrowser, SystemBrowser
from .classify import classify, classify_lines, suggestion_for
from .config import Settings, load_env_file
from .context import LookupContext, open_context
from .models import ARTIFACT_TYPES
from .output import (
    EXIT_NOTHING,
    EXIT_OK,
    EXIT_USAGE,
    exit_code_from_classification,
    print_history_stats,
    print_records,
    print_service_stats,
    print_services,
    print_validation_report,
    validation_report_csv,
)
from .preferences import coerce_value, field_names
from .resolver import resolve


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ioc-pivot",
        description="Classify indicators and pivot to threat-intelligence lookup services",
    )
    parser.add_argument("--db", help="State database path (or set IOC_PIVOT_DB)", default=None)
    parser.add_argument("--verbose", "-v", action="store_true", help="Log progress to stderr")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("classify", help="Detect the artifact type of a value")
    p.add_argument("value")
    p.add_argument("--json", "-j", action="store_true", help="Output as JSON")

    p = sub.add_parser("resolve", help="Print lookup URLs for a typed value, one per line")
    p.add_argument("type", choices=ARTIFACT_TYPES)
    p.add_argument("value")
    p.add_argument("--all", action="store_true", help="Include disabled services")

    p = sub.add_parser("lookup", help="Classify, open lookups and record the search")
    p.add_argument("value")
    p.add_argument("--type", "-t", choices=ARTIFACT_TYPES, default=None, help="Override the detected type")
    p.add_argument("--open", action="store_true", help="Launch the browser (default: print URLs)")
    p.add_argument("--foreground", action="store_true", help="Bring the browser to the front")

    p = sub.add_parser("batch", help="Run lookups for newline-delimited values")
    p.add_argument("type", choices=ARTIFACT_TYPES)
    p.add_argument("--file", "-f", help="Input file (default: stdin)", default=None)
    p.add_argument("--max-items", type=int, default=None, help="Stop after N items (default: preference)")
    p.add_argument("--delay", type=float, default=None, help="Seconds between items (default: preference)")
    p.add_argument("--open", action="store_true", help="Launch the browser (default: print URLs)")

    p = sub.add_parser("validate", help="Classify newline-delimited values without opening anything")
    p.add_argument("--file", "-f", help="Input file (default: stdin)", default=None)
    p.add_argument("--csv", action="store_true", help="Output the report as CSV")

    p = sub.add_parser("history", help="Inspect or export the search history")
    hsub = p.add_subparsers(dest="action", required=True)
    hsub.add_parser("list", help="List searches, most recent first")
    hs = hsub.add_parser("search", help="Filter by value or type")
    hs.add_argument("query")
    he = hsub.add_parser("export", help="Export as CSV or JSON")
    he.add_argument("--format", choices=["csv", "json"], default="csv")
    he.add_argument("--output", "-o", default=None, help="Write to file instead of stdout")
    hsub.add_parser("clear", help="Delete all searches")
    hd = hsub.add_parser("delete", help="Delete one search by id")
    hd.add_argument("id")
    hsub.add_parser("stats", help="Searches per type")

    p = sub.add_parser("services", help="Manage lookup services")
    ssub = p.add_subparsers(dest="action", required=True)
    sl = ssub.add_parser("list")
    sl.add_argument("--category", "-c", choices=ARTIFACT_TYPES, default=None)
    st = ssub.add_parser("toggle")
    st.add_argument("id")
    ssub.add_parser("reset", help="Restore built-in enabled states")
    ssub.add_parser("stats")

    p = sub.add_parser("prefs", help="Show or change preferences")
    psub = p.add_subparsers(dest="action", required=True)
    psub.add_parser("show")
    ps = psub.add_parser("set")
    ps.add_argument("key", choices=field_names())
    ps.add_argument("value")
    psub.add_parser("reset")

    return parser


def iter_lines(filepath: Optional[str]) -> Iterator[str]:
    """Yield raw lines from a file or stdin."""
    if filepath is None:
        yield from sys.stdin
        return
    with open(filepath) as f:
        yield from f


def _make_browser(open_browser: bool) -> Browser:
    return SystemBrowser() if open_browser else PrintingBrowser()


def main(argv: Optional[list[str]] = None) -> None:
    load_env_file()
    settings = Settings.from_env()

    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.INFO if args.verbose else getattr(logging, settings.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    # Pure commands need no state.
    if args.command == "classify":
        raise SystemExit(cmd_classify(args))
    if args.command == "validate":
        raise SystemExit(cmd_validate(args))

    ctx = open_context(args.db or settings.db_path, browser=_make_browser(getattr(args, "open", False)))

    if args.command == "resolve":
        exit_code = cmd_resolve(ctx, args)
    elif args.command == "lookup":
        exit_code = cmd_lookup(ctx, args)
    elif args.command == "batch":
        exit_code = cmd_batch(ctx, args, settings)
    elif args.command == "history":
        exit_code = cmd_history(ctx, args)
    elif args.command == "services":
        exit_code = cmd_services(ctx, args)
    elif args.command == "prefs":
        exit_code = cmd_prefs(ctx, args, parser)
    else:
        parser.error(f"Unknown command: {args.command}")

    raise SystemExit(exit_code)


def cmd_classify(args: argparse.Namespace) -> int:
    outcome = classify(args.value)
    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2))
    else:
        print(outcome)
        if outcome.status == "invalid":
            hint = suggestion_for(args.value)
            if hint and hint != outcome.reason:
                print(f"hint: {hint}")
    return exit_code_from_classification(outcome)


def cmd_validate(args: argparse.Namespace) -> int:
    results = classify_lines("".join(iter_lines(args.file)))
    if args.csv:
        sys.stdout.write(validation_report_csv(results))
    else:
        print_validation_report(results)
    return EXIT_OK if any(o.is_valid for _v, o in results) else EXIT_NOTHING


def cmd_resolve(ctx: LookupContext, args: argparse.Namespace) -> int:
    urls = resolve(ctx.catalog, args.type, args.value, enabled_only=not args.all)
    for url in urls:
        print(url)
    return EXIT_OK if urls else EXIT_NOTHING


def cmd_lookup(ctx: LookupContext, args: argparse.Namespace) -> int:
    if args.foreground:
        ctx.preferences = replace(ctx.preferences, open_in_background=False)
    result = ctx.lookup(args.value, args.type)
    if not result.ok:
        print(f"❌ {result.value}: {result.error}", file=sys.stderr)
        return EXIT_NOTHING
    if args.open:
        print(f"✅ Opened {len(result.urls)} lookup(s) for {result.value} ({result.type})")
    return EXIT_OK


def cmd_batch(ctx: LookupContext, args: argparse.Namespace, settings: Settings) -> int:
    overrides = {}
    if args.max_items is not None:
        if args.max_items < 0:
            print("--max-items must be >= 0", file=sys.stderr)
            return EXIT_USAGE
        overrides["max_items"] = args.max_items
    if args.delay is not None:
        overrides["delay_seconds"] = max(0.0, args.delay)
    elif settings.batch_delay_seconds is not None:
        overrides["delay_seconds"] = settings.batch_delay_seconds
    if not args.open:
        # URL lines go to stderr; stdout carries progress.
        ctx.browser = PrintingBrowser(sys.stderr)
        overrides.setdefault("delay_seconds", 0.0)

    lines = list(iter_lines(args.file))
    job = ctx.start_batch(lines, args.type, **overrides)
    summary: Optional[BatchSummary] = None
    try:
        for event in job.iter_events():
            if isinstance(event, BatchProgress):
                print(f"[{event.processed}/{event.submitted}] {event.value}")
            else:
                summary = event
    except KeyboardInterrupt:
        job.cancel()
        summary = job.result()

    if summary is None:
        summary = job.result()
    print_batch_summary(summary)
    return EXIT_OK if summary.processed else EXIT_NOTHING


def print_batch_summary(summary: BatchSummary) -> None:
    line = f"Processed {summary.processed} of {summary.submitted}"
    extras = []
    if summary.skipped:
        extras.append(f"{summary.skipped} invalid")
    if summary.failed:
        extras.append(f"{summary.failed} failed")
    if summary.received > summary.submitted:
        extras.append(f"{summary.received - summary.submitted} over limit")
    if summary.cancelled:
        extras.append("cancelled")
    if extras:
        line += f" ({', '.join(extras)})"
    print(line)


def cmd_history(ctx: LookupContext, args: argparse.Namespace) -> int:
    history = ctx.history
    if args.action == "list":
        print_records(history.records)
    elif args.action == "search":
        print_records(history.search(args.query))
    elif args.action == "export":
        content = history.export_csv() if args.format == "csv" else history.export_json()
        if content is None:
            print("Export failed", file=sys.stderr)
            return EXIT_NOTHING
        if args.output:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(content)
        else:
            sys.stdout.write(content if content.endswith("\n") else content + "\n")
    elif args.action == "clear":
        history.clear()
    elif args.action == "delete":
        if not history.delete_search(args.id):
            print(f"No search with id {args.id}", file=sys.stderr)
            return EXIT_NOTHING
    elif args.action == "stats":
        print_history_stats(history.statistics())
    return EXIT_OK


def cmd_services(ctx: LookupContext, args: argparse.Namespace) -> int:
    catalog = ctx.catalog
    if args.action == "list":
        categories = [args.category] if args.category else list(ARTIFACT_TYPES)
        print_services([s for c in categories for s in catalog.all_services(c)])
    elif args.action == "toggle":
        updated = catalog.toggle(args.id)
        if updated is None:
            print(f"Unknown service: {args.id}", file=sys.stderr)
            return EXIT_NOTHING
        print(f"{updated.id}: {'enabled' if updated.enabled else 'disabled'}")
    elif args.action == "reset":
        catalog.reset_to_defaults()
    elif args.action == "stats":
        print_service_stats(catalog.statistics())
    return EXIT_OK


def cmd_prefs(ctx: LookupContext, args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.action == "set":
        try:
            value = coerce_value(args.key, args.value)
        except ValueError as e:
            parser.error(str(e))
        ctx.update_preferences(replace(ctx.preferences, **{args.key: value}))
    elif args.action == "reset":
        ctx.reset_preferences()
    print(json.dumps(ctx.preferences.to_dict(), indent=2))
    return EXIT_OK


if __name__ == "__main__":
    main()
