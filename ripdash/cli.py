#!/usr/bin/env python3
"""
RIP Dashboard CLI — load, inspect and export the class registration sheet.

USAGE:
  python -m ripdash.cli load                               # Fast then full load, show counts
  python -m ripdash.cli load --fast --force                # Fast snapshot only, bypass cache

  python -m ripdash.cli dashboard                          # Classification + balance buckets

  python -m ripdash.cli statement "Ana Pérez"              # Student statement
  python -m ripdash.cli export "Ana Pérez"                 # Statement workbook (.xlsx)
  python -m ripdash.cli archive "Ana Pérez"                # Prior-year rows

  python -m ripdash.cli filter --teacher Laura --type pago
  python -m ripdash.cli filter --service Piano --from 2026-01-01 --to 2026-01-31

  python -m ripdash.cli serve --port 8000                  # Start API server
"""
from __future__ import annotations

import argparse
import logging
import os
import sys

from ripdash.analytics.balances import balance_buckets, global_kpis
from ripdash.analytics.classification import classification_buckets
from ripdash.analytics.context import ViewContext
from ripdash.analytics.dashboard import BALANCE_TITLES, CLASSIFICATION_TITLES
from ripdash.config import EXPORTS_DIR
from ripdash.data.archive import ArchiveLookup
from ripdash.data.normalize import fmt_money
from ripdash.data.schemas import FilterSpec, entry_type_label
from ripdash.data.store import DataStore
from ripdash.errors import RipError


def _load_store(fast: bool = False, force: bool = False) -> DataStore:
    store = DataStore()
    if fast:
        store.load_fast(force=force)
    else:
        store.load_full(force=force)
    return store


def _context(store: DataStore) -> ViewContext:
    return ViewContext(records=store.records, students=store.students)


def _require_student(store: DataStore, name: str) -> str:
    key = store.find_student_key(name)
    if not key:
        print(f"  Student not found: {name}")
        matches = store.suggest_students(name, limit=10)
        if matches:
            print("  Did you mean:")
            for s in matches:
                print(f"    - {s.name}")
        raise SystemExit(1)
    return key


def cmd_load(args):
    """Load the sheets and print what was loaded."""
    store = DataStore()
    if args.fast:
        store.load_fast(force=args.force)
    else:
        store.load(force=args.force)
    print(f"\n  State:    {store.state.value}")
    print(f"  Records:  {store.row_count():,}")
    print(f"  Students: {len(store.students):,}")
    print(f"  Services: {len(store.services())}")
    print(f"  Teachers: {len(store.teachers())}")
    print(f"  Loaded:   {store.loaded_at_label()}\n")


def cmd_dashboard(args):
    store = _load_store(force=args.force)

    print("\n" + "=" * 70)
    print("CLASSIFICATION")
    print("=" * 70)
    for name, members in classification_buckets(store.students).items():
        print(f"  {CLASSIFICATION_TITLES[name]:<30} {len(members):>6}")

    kpis = global_kpis(store.records)
    print("\n" + "=" * 70)
    print("BALANCES")
    print("=" * 70)
    print(f"  Global balance:         {fmt_money(kpis['global_balance'], signed=True)}")
    print(f"  Students with balance:  {kpis['students_with_balance']}")
    for name, members in balance_buckets(store.students, store.records).items():
        print(f"\n  {BALANCE_TITLES[name]} ({len(members)})")
        for item in members[: args.top]:
            print(f"    {item.name:<40} {fmt_money(item.balance, signed=True):>14}")
    print()


def cmd_statement(args):
    store = _load_store(force=args.force)
    key = _require_student(store, args.name)
    ctx = _context(store).with_student(key)
    st = ctx.statement()

    print(f"\n  {ctx.student.name}  ({ctx.student.classification or 'sin clasificación'})")
    print(f"  Balance: {fmt_money(st.balance, signed=True)}")
    if st.balance_labels:
        print(f"  Counting only: {', '.join(st.balance_labels)}")
    if st.last_class:
        print(f"  Last class:   {st.last_class.date_raw}  {st.last_class.service}  {st.last_class.teacher}")
    if st.last_payment:
        print(f"  Last payment: {st.last_payment.date_raw}  {st.last_payment.payment_note}")

    if st.pivot:
        print("\n  By classification:")
        for p in st.pivot:
            label = f"{p.classification} / {p.payment_classification}"
            print(f"    {label:<44} {fmt_money(p.total, signed=True):>14}")

    print(f"\n  Rows ({len(st.rows)}):")
    for r in st.rows[: args.limit]:
        amount = fmt_money(r.amount, signed=True) if r.amount_present else ""
        print(f"    {r.date_raw:<12} {entry_type_label(r):<6} {r.service[:20]:<20} {amount:>12}  {r.classification}")
    print()


def cmd_filter(args):
    store = _load_store(force=args.force)
    student_key = _require_student(store, args.student) if args.student else ""
    spec = FilterSpec.from_values(
        student_key=student_key,
        teacher=args.teacher or "",
        entry_type=args.type,
        services=args.service,
        date_from=args.date_from,
        date_to=args.date_to,
    )
    rows = _context(store).with_filters(spec).filtered()
    print(f"\n  {len(rows):,} of {store.row_count():,} records match\n")
    for r in rows[: args.limit]:
        print(f"    {r.date_raw:<12} {r.student_name[:28]:<28} {r.service[:18]:<18} "
              f"{r.teacher[:16]:<16} {entry_type_label(r):<6}")
    if len(rows) > args.limit:
        print(f"    ... {len(rows) - args.limit:,} more")
    print()


def cmd_export(args):
    from ripdash.excel.statement_report import generate_excel

    store = _load_store(force=args.force)
    key = _require_student(store, args.name)
    path = generate_excel(_context(store).with_student(key), args.output)
    print(f"\n  Saved: {path}\n")


def cmd_archive(args):
    lookup = ArchiveLookup()
    result = lookup.for_student(args.name)
    if not result.rows:
        print(f"\n  No archived rows for {args.name}\n")
        return
    print("\n  " + " | ".join(result.headers))
    for row in result.rows:
        print("  " + " | ".join(row))
    print()


def cmd_serve(args):
    """Start the API server."""
    import uvicorn
    print(f"\nStarting RIP Dashboard API on port {args.port}...")
    uvicorn.run("ripdash.main:app", host="0.0.0.0", port=args.port, reload=args.reload,
                timeout_keep_alive=65)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="RIP Dashboard — class registration analytics",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    load_parser = subparsers.add_parser("load", help="Load the sheets and show counts")
    load_parser.add_argument("--fast", action="store_true", help="Registration-only fast snapshot")
    load_parser.add_argument("--force", action="store_true", help="Ignore the local cache")
    load_parser.set_defaults(func=cmd_load)

    dash_parser = subparsers.add_parser("dashboard", help="Classification and balance summaries")
    dash_parser.add_argument("--top", type=int, default=10, help="Students shown per bucket (default 10)")
    dash_parser.add_argument("--force", action="store_true", help="Ignore the local cache")
    dash_parser.set_defaults(func=cmd_dashboard)

    st_parser = subparsers.add_parser("statement", help="Student statement")
    st_parser.add_argument("name", help="Student name (accents and case ignored)")
    st_parser.add_argument("--limit", type=int, default=50, help="Rows shown (default 50)")
    st_parser.add_argument("--force", action="store_true", help="Ignore the local cache")
    st_parser.set_defaults(func=cmd_statement)

    filter_parser = subparsers.add_parser("filter", help="Filter registration records")
    filter_parser.add_argument("--student", help="Student name")
    filter_parser.add_argument("--teacher", help="Teacher name")
    filter_parser.add_argument("--type", choices=["all", "clase", "pago"], default="all", help="Entry type")
    filter_parser.add_argument("--service", action="append", help="Service (repeatable)")
    filter_parser.add_argument("--from", dest="date_from", help="Start date (YYYY-MM-DD or DD/MM/YYYY)")
    filter_parser.add_argument("--to", dest="date_to", help="End date, inclusive")
    filter_parser.add_argument("--limit", type=int, default=50, help="Rows shown (default 50)")
    filter_parser.add_argument("--force", action="store_true", help="Ignore the local cache")
    filter_parser.set_defaults(func=cmd_filter)

    export_parser = subparsers.add_parser("export", help="Export a student statement workbook")
    export_parser.add_argument("name", help="Student name")
    export_parser.add_argument("--output", default=str(EXPORTS_DIR), help=f"Output directory (default: {EXPORTS_DIR})")
    export_parser.add_argument("--force", action="store_true", help="Ignore the local cache")
    export_parser.set_defaults(func=cmd_export)

    archive_parser = subparsers.add_parser("archive", help="Prior-year rows for a student")
    archive_parser.add_argument("name", help="Student name")
    archive_parser.set_defaults(func=cmd_archive)

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")), help="Port (default 8000)")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not args.command:
        parser.print_help()
        return 0

    try:
        args.func(args)
    except RipError as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
