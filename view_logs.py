#!/usr/bin/env python3
"""
View stored call logs and objection exchanges.

Usage:
    python view_logs.py                 # Both tables
    python view_logs.py calls           # Call logs only
    python view_logs.py objections      # Objections only
    python view_logs.py --call CA123    # One call log
    python view_logs.py --stats         # Counts
"""

import argparse
import os
import sys
from datetime import datetime

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from dotenv import load_dotenv

from src.storage import CallLog, Objection, RelayStore

console = Console()


def format_datetime(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%d %H:%M")


def truncate(text: str, max_len: int = 50) -> str:
    """Truncate text with ellipsis."""
    if not text:
        return ""
    if len(text) > max_len:
        return text[:max_len-3] + "..."
    return text


def make_call_table(calls: list[CallLog]) -> Table:
    table = Table(title="📞 Call Logs", box=box.ROUNDED, header_style="bold cyan")
    table.add_column("Call SID", style="bold")
    table.add_column("Created", style="dim")
    table.add_column("Phone Number")
    table.add_column("Status")
    table.add_column("Duration (s)", justify="right")

    for call in calls:
        duration = f"{call.duration_seconds:.0f}" if call.duration_seconds is not None else "-"
        table.add_row(call.id, format_datetime(call.created_at), call.phone_number, call.status, duration)
    return table


def make_objection_table(objections: list[Objection]) -> Table:
    table = Table(title="💬 Objections", box=box.ROUNDED, header_style="bold cyan", show_lines=True)
    table.add_column("#", style="bold", justify="right")
    table.add_column("Created", style="dim")
    table.add_column("Objection")
    table.add_column("Suggestion")

    for objection in objections:
        table.add_row(
            str(objection.id),
            format_datetime(objection.created_at),
            truncate(objection.message, 40),
            truncate(objection.response, 80),
        )
    return table


def show_call(store: RelayStore, call_id: str) -> bool:
    call = store.get_call_log(call_id)
    if call is None:
        console.print(f"[red]Call log not found: {call_id}[/red]")
        return False

    body = "\n".join([
        f"Phone number: {call.phone_number}",
        f"Status:       {call.status}",
        f"Duration:     {call.duration_seconds if call.duration_seconds is not None else '-'}",
        f"Created:      {call.created_at.isoformat()}",
    ])
    console.print(Panel(body, title=f"Call {call.id}", box=box.ROUNDED))
    return True


def show_stats(store: RelayStore):
    console.print(Panel(
        f"Call logs:  {store.count_call_logs()}\n"
        f"Objections: {store.count_objections()}\n"
        f"Database:   {store.db_path}",
        title="Database Statistics",
        box=box.ROUNDED,
    ))


def main():
    parser = argparse.ArgumentParser(description="View stored call logs and objections")
    parser.add_argument("table", nargs="?", choices=["calls", "objections"], help="Only show one table")
    parser.add_argument("--call", help="Show a single call log by Call SID")
    parser.add_argument("--stats", action="store_true", help="Show counts")
    parser.add_argument("--limit", type=int, default=50, help="Max rows per table")
    parser.add_argument("--db", help="Database path (defaults to DATABASE_PATH)")

    args = parser.parse_args()

    load_dotenv()
    db_path = args.db or os.getenv("DATABASE_PATH")
    if not db_path:
        console.print("[red]No database given: pass --db or set DATABASE_PATH[/red]")
        sys.exit(1)

    store = RelayStore(db_path)

    if args.stats:
        show_stats(store)
        return

    if args.call:
        if not show_call(store, args.call):
            sys.exit(1)
        return

    if args.table in (None, "calls"):
        console.print(make_call_table(store.list_call_logs(limit=args.limit)))
    if args.table in (None, "objections"):
        console.print(make_objection_table(store.list_objections(limit=args.limit)))


if __name__ == "__main__":
    main()
