"""Core configuration.

Why here:
- Centralizes environment variables (pydantic-settings) away from the CLI.
- Adapters (VPN client, oathtool, notifier) read one explicit settings object
  built at startup instead of consulting the environment themselves.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "vipvpn"


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / APP_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_NAME

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / APP_NAME
    return Path.home() / ".config" / APP_NAME


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str]) -> Path:
    """Write/update variables in the user's global .env."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# vipvpn user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Application settings.

    Precedence, highest first: environment, the user `.env` written by
    `vipvpn doctor setup`, then `.env` in the working directory (later
    `env_file` entries override earlier ones).
    """

    model_config = SettingsConfigDict(
        env_prefix="VIPVPN_",
        extra="ignore",
        case_sensitive=False,
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
        validate_default=True,
    )

    vpn_binary: Path = Field(
        default=Path("/opt/cisco/anyconnect/bin/vpn"),
        description="VPN client executable (accepts status, disconnect and -s).",
    )
    totp_binary: str = Field(
        default="oathtool",
        min_length=1,
        description="TOTP generator, resolved through PATH unless absolute.",
    )
    totp_digits: int = Field(
        default=6,
        ge=6,
        le=8,
        description="Number of digits of the VIP code.",
    )

    secret_file: Path = Field(
        default=Path("~/.vipaccess"),
        description="File holding the shared TOTP secret.",
    )
    secret_line: int = Field(
        default=2,
        ge=1,
        description="Line of the secret file holding the secret (1-based).",
    )
    secret_field: int = Field(
        default=2,
        ge=1,
        description="Whitespace-delimited field holding the secret (1-based).",
    )

    group_choice: str = Field(
        default="1",
        min_length=1,
        description="Answer sent to the client's group selection menu.",
    )
    connected_marker: str = Field(
        default="Connected",
        min_length=1,
        description="Word in `vpn status` output meaning the tunnel is up.",
    )
    prompt_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Max wait for each prompt of the scripted connect session.",
    )

    lock_file: Path = Field(
        default_factory=lambda: get_user_config_dir() / f"{APP_NAME}.lock",
        description="Lock file guarding connect/disconnect against concurrent runs.",
    )

    notifications_enabled: bool = Field(
        default=True,
        description="Post desktop notifications (osascript / notify-send).",
    )
    notification_title: str = Field(
        default="VPN",
        min_length=1,
        description="Title used for desktop notifications.",
    )

    log_level: str = Field(
        default="WARNING",
        description="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )

    @field_validator("vpn_binary", "secret_file", "lock_file", mode="after")
    @classmethod
    def expand_user(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="after")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level
