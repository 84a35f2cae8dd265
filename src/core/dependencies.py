"""Checks for the external programs and files every operation needs."""

from __future__ import annotations

import logging
import os
import shutil

from core.config import AppSettings
from core.domain.errors import MissingDependencyError
from core.domain.models import DependencyCheck

logger = logging.getLogger(__name__)


def _check_vpn_binary(settings: AppSettings) -> DependencyCheck:
    path = settings.vpn_binary
    if not path.is_file():
        return DependencyCheck(name="VPN client", location=str(path), ok=False, detail="not found")
    if not os.access(path, os.X_OK):
        return DependencyCheck(name="VPN client", location=str(path), ok=False, detail="not executable")
    return DependencyCheck(name="VPN client", location=str(path), ok=True, detail="OK")


def _check_totp_binary(settings: AppSettings) -> DependencyCheck:
    resolved = shutil.which(settings.totp_binary)
    if resolved is None:
        return DependencyCheck(
            name="TOTP tool",
            location=settings.totp_binary,
            ok=False,
            detail="not found in PATH",
        )
    return DependencyCheck(name="TOTP tool", location=resolved, ok=True, detail="OK")


def _check_secret_file(settings: AppSettings) -> DependencyCheck:
    path = settings.secret_file
    if not path.is_file():
        return DependencyCheck(name="Secret file", location=str(path), ok=False, detail="not found")
    return DependencyCheck(name="Secret file", location=str(path), ok=True, detail="OK")


def check_dependencies(settings: AppSettings) -> list[DependencyCheck]:
    """Run every check and return one row per dependency (nothing raised)."""

    return [
        _check_vpn_binary(settings),
        _check_totp_binary(settings),
        _check_secret_file(settings),
    ]


def ensure_dependencies(settings: AppSettings) -> None:
    """Raise `MissingDependencyError` naming every failed check."""

    missing = [
        f"{check.name} ({check.location}: {check.detail})"
        for check in check_dependencies(settings)
        if not check.ok
    ]
    if missing:
        raise MissingDependencyError(missing)
    logger.debug("All dependencies present")
