#!/usr/bin/env python3
"""CLI runner for IPC reporting summaries.

Usage:
    python -m ipc_src.runner --rates
    python -m ipc_src.runner --compliance 2025
    python -m ipc_src.runner --census
    python -m ipc_src.runner --pending
    python -m ipc_src.runner --export-csv notifiable.csv
"""

import argparse
import logging
import sys
from pathlib import Path

from .analytics import export_cases_csv
from .config import Config
from .data import SQLiteRecordStore
from .models import MonitoredArea, ReportKind
from .workflow import ReportWorkflow


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )

    # Reduce noise from HTTP libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def show_rates(workflow: ReportWorkflow) -> None:
    """Display HAI rates per monitored area."""
    rates = workflow.get_infection_rates()

    print("\n=== HAI Rates (per 1,000 patient/device-days) ===")
    print(f"{'Area':<15} {'Overall':>8} {'VAP':>8} {'HAP':>8} {'CAUTI':>8} {'CLABSI':>8}")
    for area in MonitoredArea:
        r = rates[area.value]
        print(
            f"{area.label:<15} {r.overall:>8.2f} {r.vap:>8.2f} "
            f"{r.hap:>8.2f} {r.cauti:>8.2f} {r.clabsi:>8.2f}"
        )
    print()


def show_compliance(workflow: ReportWorkflow, year: str | None = None) -> None:
    """Display hand-hygiene compliance."""
    stats = workflow.get_hand_hygiene_stats(year)
    if stats is None:
        print("\nNo hand hygiene audits found.\n")
        return

    print(f"\n=== Hand Hygiene Compliance{f' ({year})' if year else ''} ===")
    print(f"Overall: {stats.overall}% ({stats.grand_performed}/{stats.grand_total})")
    print("\nBy role:")
    for bucket in stats.role_data:
        print(f"  {bucket.name:<20} {bucket.compliance:>3}%  ({bucket.performed}/{bucket.total})")
    print("\nBy area:")
    for bucket in stats.area_data:
        print(f"  {bucket.name:<20} {bucket.compliance:>3}%  ({bucket.performed}/{bucket.total})")
    print()


def show_census(workflow: ReportWorkflow) -> None:
    """Display the active notifiable-disease census."""
    census = workflow.get_active_census()

    print("\n=== Active Notifiable Disease Census ===")
    print(f"Total active: {census.total_active}")
    for disease, count in census.per_disease_counts:
        print(f"  {disease:<30} {count}")
    print()


def show_pending(workflow: ReportWorkflow) -> None:
    """Display the coordinator validation queue."""
    pending = workflow.get_pending_reports()

    print("\n=== Pending Validation ===")
    for kind in ReportKind:
        print(f"{kind.label:<22} {len(pending[kind.slug])}")
    print()


def export_csv(workflow: ReportWorkflow, path: str) -> int:
    """Write validated notifiable cases to a CSV file."""
    cases = workflow.get_validated_records(ReportKind.NOTIFIABLE)
    content = export_cases_csv(cases, authenticated=True)
    if not content:
        print("No notifiable cases to export.")
        return 0
    Path(path).write_text(content)
    print(f"Exported {len(cases)} cases to {path}")
    return len(cases)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="IPC reporting summaries",
    )
    parser.add_argument("--rates", action="store_true", help="Show HAI rates by area")
    parser.add_argument(
        "--compliance",
        nargs="?",
        const="",
        metavar="YEAR",
        help="Show hand hygiene compliance (optionally for one year)",
    )
    parser.add_argument("--census", action="store_true", help="Show active notifiable census")
    parser.add_argument("--pending", action="store_true", help="Show pending validation queue")
    parser.add_argument("--export-csv", metavar="PATH", help="Export notifiable cases to CSV")
    parser.add_argument("--db", default=None, help="Record store path (default: IPC_DB_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()
    setup_logging(args.verbose)

    workflow = ReportWorkflow(SQLiteRecordStore(args.db or Config.IPC_DB_PATH))

    if args.rates:
        show_rates(workflow)
    if args.compliance is not None:
        show_compliance(workflow, args.compliance or None)
    if args.census:
        show_census(workflow)
    if args.pending:
        show_pending(workflow)
    if args.export_csv:
        export_csv(workflow, args.export_csv)

    if not any([args.rates, args.compliance is not None, args.census, args.pending, args.export_csv]):
        parser.print_help()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
