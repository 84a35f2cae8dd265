"""Doctor command for environment diagnostics."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from adapters.notifier import DesktopNotifier
from adapters.vip_secret import read_secret
from cli.ui_components import build_checks_table
from core.config import AppSettings, write_user_env_vars
from core.dependencies import check_dependencies
from core.domain.errors import SecretFileError
from core.domain.models import DependencyCheck

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _settings(ctx: typer.Context) -> AppSettings:
    return ctx.obj if isinstance(ctx.obj, AppSettings) else AppSettings()


def _check_secret_layout(settings: AppSettings) -> DependencyCheck:
    """Make sure the secret sits where the VIP code reader expects it."""

    location = f"{settings.secret_file} line {settings.secret_line} field {settings.secret_field}"
    try:
        read_secret(settings.secret_file, line=settings.secret_line, field=settings.secret_field)
    except SecretFileError as exc:
        return DependencyCheck(name="Secret layout", location=location, ok=False, detail=str(exc))
    return DependencyCheck(name="Secret layout", location=location, ok=True, detail="OK")


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = _settings(ctx)

    checks = check_dependencies(settings)
    if settings.secret_file.is_file():
        checks.append(_check_secret_layout(settings))

    table = build_checks_table(checks)

    table.add_row("Lock file", "OK", str(settings.lock_file), "flock guard for connect/disconnect")
    backend = DesktopNotifier(settings, console=_console).backend()
    if not settings.notifications_enabled:
        table.add_row("Notifications", "OFF", "-", "VIPVPN_NOTIFICATIONS_ENABLED=false")
    elif backend:
        table.add_row("Notifications", "OK", backend, "desktop notifications enabled")
    else:
        table.add_row("Notifications", "OPTIONAL", "-", "no backend, console output only")

    _console.print(table)

    failed = [check.name for check in checks if not check.ok]
    if not failed:
        _console.print("[green]All checks passed.[/green]")
        return

    _console.print(f"\n[red]Failed checks:[/red] {', '.join(failed)}", soft_wrap=True)
    _console.print(
        "[yellow]Note:[/yellow] run `vipvpn doctor setup` or set VIPVPN_* variables "
        "for the failed checks."
    )
    raise typer.Exit(code=1)


@app.command()
def setup(ctx: typer.Context) -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = _settings(ctx)

    vpn_binary = typer.prompt("VPN client", default=str(settings.vpn_binary), show_default=True).strip()
    totp_binary = typer.prompt("TOTP tool", default=settings.totp_binary, show_default=True).strip()
    secret_file = typer.prompt("Secret file", default=str(settings.secret_file), show_default=True).strip()
    group_choice = typer.prompt("Group menu choice", default=settings.group_choice, show_default=True).strip()

    if not vpn_binary or not totp_binary or not secret_file or not group_choice:
        raise typer.BadParameter("all values are required")

    if not Path(secret_file).expanduser().is_file():
        _console.print(f"[yellow]Warning:[/yellow] {secret_file} does not exist yet.")

    env_path = write_user_env_vars(
        {
            "VIPVPN_VPN_BINARY": vpn_binary,
            "VIPVPN_TOTP_BINARY": totp_binary,
            "VIPVPN_SECRET_FILE": secret_file,
            "VIPVPN_GROUP_CHOICE": group_choice,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
