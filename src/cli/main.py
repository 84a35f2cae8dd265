"""vipvpn command line.

Usage:
    vipvpn [-h|--help] [-v] connect -u USER -p PASS HOST | disconnect | status | vipcode

Exit status is 0 on success or help and 1 on any failure (usage errors
included).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

from adapters.anyconnect_client import AnyConnectClient
from adapters.notifier import DesktopNotifier
from adapters.oathtool import OathToolGenerator
from cli import doctor
from cli.ui_components import print_error, print_settings_error
from core.config import AppSettings
from core.domain.errors import VipVpnError
from core.domain.models import Credentials
from core.logging_config import setup_logging
from core.services.vpn_controller import VpnController

COMMANDS = ("connect", "disconnect", "status", "vipcode")

app = typer.Typer(
    name="vipvpn",
    help="Connect to the VPN using a VIP code as second factor.",
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
    add_completion=False,
)
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


def load_settings() -> AppSettings:
    return AppSettings()


def build_controller(settings: AppSettings) -> VpnController:
    return VpnController(
        settings=settings,
        client=AnyConnectClient(settings),
        totp=OathToolGenerator(settings),
        notifier=DesktopNotifier(settings, console=_console),
    )


def _fail(message: str) -> typer.Exit:
    print_error(_err_console, message)
    return typer.Exit(code=1)


@contextmanager
def _handle_errors() -> Iterator[None]:
    try:
        yield
    except VipVpnError as exc:
        raise _fail(str(exc)) from exc


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_usage(), err=True)
        raise _fail("Missing command, expected one of: " + ", ".join(COMMANDS))

    try:
        settings = load_settings()
    except ValidationError as exc:
        print_settings_error(_err_console, exc)
        raise typer.Exit(code=1)

    setup_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@app.command()
def connect(
    ctx: typer.Context,
    host: Optional[str] = typer.Argument(None, help="VPN gateway host.", show_default=False),
    username: Optional[str] = typer.Option(None, "-u", "--username", help="VPN user name."),
    password: Optional[str] = typer.Option(None, "-p", "--password", help="VPN password."),
) -> None:
    """Connect to HOST, answering the login prompts with a fresh VIP code."""

    if not (username or "").strip():
        raise _fail("Missing username (-u)")
    if not password:
        raise _fail("Missing password (-p)")
    if not (host or "").strip():
        raise _fail("Missing host")

    credentials = Credentials(username=username, password=password, host=host)
    with _handle_errors():
        build_controller(ctx.obj).connect(credentials)


@app.command()
def disconnect(ctx: typer.Context) -> None:
    """Disconnect the current VPN session."""

    with _handle_errors():
        build_controller(ctx.obj).disconnect()


@app.command()
def status(ctx: typer.Context) -> None:
    """Show whether the VPN is connected."""

    with _handle_errors():
        build_controller(ctx.obj).status()


@app.command()
def vipcode(ctx: typer.Context) -> None:
    """Print the current VIP code."""

    with _handle_errors():
        code = build_controller(ctx.obj).vipcode()
    typer.echo(code)


def run(args: list[str] | None = None) -> None:
    """Console-script entry point; maps every usage error to exit status 1."""

    try:
        app(args=args, prog_name="vipvpn")
    except SystemExit as exc:
        if exc.code == 2:
            raise SystemExit(1) from None
        raise
