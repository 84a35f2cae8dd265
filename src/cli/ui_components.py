"""CLI UI components (Rich).

Keeps formatting out of the command functions so `main` and `doctor` render
errors and check tables the same way.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.domain.models import DependencyCheck


def print_error(console: Console, message: str) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False, soft_wrap=True)


def print_settings_error(console: Console, exc: ValidationError) -> None:
    """Report invalid VIPVPN_* settings, one line per field."""

    print_error(console, "Invalid configuration")
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "settings"
        console.print(
            f"  VIPVPN_{escape(field.upper())}: {escape(err.get('msg', ''))}",
            highlight=False,
            soft_wrap=True,
        )


def build_checks_table(checks: Iterable[DependencyCheck], *, title: str = "vipvpn doctor") -> Table:
    table = Table(title=title)
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Location", style="cyan")
    table.add_column("Details", style="dim")
    for check in checks:
        status = "OK" if check.ok else "[red]FAIL[/red]"
        table.add_row(check.name, status, escape(check.location), escape(check.detail))
    return table
