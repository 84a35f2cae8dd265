"""Contracts for the external programs the controller drives.

Why Protocol:
- Structural typing, no inheritance: any object with the right methods fits.
- The controller can be exercised with in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import Credentials


@runtime_checkable
class VpnClient(Protocol):
    """Minimal surface of the external VPN client."""

    def status(self) -> str:
        """Return the raw output of the client's status query."""

        ...

    def disconnect(self) -> str:
        """Ask the client to tear the tunnel down; return its output."""

        ...

    def connect(self, credentials: Credentials, code: str) -> str:
        """Run the scripted login; return the session transcript."""

        ...


@runtime_checkable
class TotpGenerator(Protocol):
    def generate(self, secret: str) -> str:
        """Return the current time-based code for `secret`."""

        ...


@runtime_checkable
class Notifier(Protocol):
    def notify(self, message: str, *, title: str | None = None) -> None:
        """Post a user-facing notification."""

        ...
