"""Errors raised by the core and the adapters.

Every failure is fatal for the current invocation: the CLI catches
`VipVpnError`, prints the message and exits with status 1.
"""

from __future__ import annotations

from typing import Sequence


class VipVpnError(Exception):
    """Base class for expected, user-facing failures."""


class MissingDependencyError(VipVpnError):
    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__("Missing dependencies: " + ", ".join(self.missing))


class SecretFileError(VipVpnError):
    """The secret file cannot be read or has no secret at the expected place."""


class TotpError(VipVpnError):
    """The TOTP generator failed."""


class InstanceLockedError(VipVpnError):
    def __init__(self, lock_file: str, pid: int | None = None) -> None:
        self.lock_file = lock_file
        self.pid = pid
        holder = f" (pid {pid})" if pid is not None else ""
        super().__init__(f"Another vipvpn instance is running{holder}; lock: {lock_file}")


class AlreadyConnectedError(VipVpnError):
    def __init__(self) -> None:
        super().__init__("VPN is already connected")


class AlreadyDisconnectedError(VipVpnError):
    def __init__(self) -> None:
        super().__init__("VPN is already disconnected")


class ConnectFailedError(VipVpnError):
    """After the scripted session the client does not report a tunnel."""


class DisconnectFailedError(VipVpnError):
    """`vpn disconnect` ran but the client still reports a tunnel."""


class VpnClientError(VipVpnError):
    """The VPN client could not be launched."""


class ScriptedSessionError(VipVpnError):
    """The scripted connect exchange broke off."""

    def __init__(self, message: str, transcript: str = "") -> None:
        self.transcript = transcript
        super().__init__(message)


class PromptTimeoutError(ScriptedSessionError):
    """An expected prompt did not show up in time."""
