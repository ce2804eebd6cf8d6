"""Output helpers (text reports, validation CSV, exit codes)."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import Any

from .models import ARTIFACT_TYPES, Classification, LookupService, SearchRecord

EXIT_OK = 0
EXIT_NOTHING = 1
EXIT_USAGE = 2


def exit_code_from_classification(outcome: Classification) -> int:
    return EXIT_OK if outcome.is_valid else EXIT_NOTHING


def validation_report_csv(results: Sequence[tuple[str, Classification]]) -> str:
    """CSV with one row per line: Index,Value,Status,Error."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(["Index", "Value", "Status", "Error"])
    for i, (value, outcome) in enumerate(results, start=1):
        status = "Valid" if outcome.is_valid else "Invalid"
        writer.writerow([i, value, status, outcome.reason or ""])
    return buf.getvalue()


def print_validation_report(results: Sequence[tuple[str, Classification]]) -> None:
    valid = sum(1 for _v, o in results if o.is_valid)
    print("\n🔍 Batch Validation")
    print(f"{'=' * 60}")
    print(f"Total: {len(results)}  Valid: {valid}  Invalid: {len(results) - valid}")
    print(f"{'-' * 60}")
    for i, (value, outcome) in enumerate(results, start=1):
        if outcome.is_valid:
            print(f"  {i:>3}. ✅ {value}  ({outcome.type})")
        else:
            print(f"  {i:>3}. ❌ {value}  ({outcome.reason})")
    print()


def print_services(services: Sequence[LookupService]) -> None:
    current = None
    for s in services:
        if s.category != current:
            current = s.category
            print(f"\n[{current}]")
        mark = "✅" if s.enabled else "⬜"
        print(f"  {mark} {s.id:<22} {s.name}")


def print_service_stats(stats: dict[str, int]) -> None:
    for category in ARTIFACT_TYPES:
        print(f"  {category:<8} {stats.get(category, 0)}/{stats.get(f'{category}_total', 0)} enabled")


def print_records(records: Sequence[SearchRecord]) -> None:
    if not records:
        print("(no searches)")
        return
    for r in records:
        ts = r.timestamp.astimezone().strftime("%Y-%m-%d %H:%M:%S")
        print(f"  {ts}  {r.display_type:<8} {r.value}  [{r.id}]")


def print_history_stats(stats: dict[str, Any]) -> None:
    for category in sorted(stats):
        print(f"  {category.upper()}: {stats[category]}")
