"""Sequencing of the four user operations.

The controller holds no state between calls. It reads the tunnel state from
the client, applies the already-connected / already-disconnected guards,
takes the instance lock around anything that changes the tunnel, and reports
outcomes through the notifier. Printing and exit codes stay in the CLI.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable

from adapters.vip_secret import read_secret
from core.config import AppSettings
from core.dependencies import ensure_dependencies
from core.domain.errors import (
    AlreadyConnectedError,
    AlreadyDisconnectedError,
    ConnectFailedError,
    DisconnectFailedError,
    ScriptedSessionError,
    VipVpnError,
)
from core.domain.models import ConnectResult, Credentials, StatusReport, VpnState
from core.instance_lock import InstanceLock
from core.interfaces.vpn import Notifier, TotpGenerator, VpnClient

logger = logging.getLogger(__name__)


def parse_status(output: str, marker: str = "Connected") -> StatusReport:
    """Map raw `vpn status` output to a `StatusReport`.

    The marker must appear as a whole, case-sensitive word, so
    "Disconnected" never counts as connected.
    """

    pattern = rf"\b{re.escape(marker)}\b"
    state = VpnState.CONNECTED if re.search(pattern, output) else VpnState.DISCONNECTED
    return StatusReport(state=state, output=output)


@dataclass
class VpnController:
    settings: AppSettings
    client: VpnClient
    totp: TotpGenerator
    notifier: Notifier
    clock: Callable[[], float] = field(default=time.monotonic)

    def _lock(self) -> InstanceLock:
        return InstanceLock(self.settings.lock_file)

    def _fail(self, error: VipVpnError) -> VipVpnError:
        self.notifier.notify(str(error))
        return error

    def check_dependencies(self) -> None:
        ensure_dependencies(self.settings)

    def query_status(self) -> StatusReport:
        return parse_status(self.client.status(), self.settings.connected_marker)

    def status(self) -> StatusReport:
        """Query the client and notify the current state."""

        self.check_dependencies()
        report = self.query_status()
        self.notifier.notify(report.state.label())
        return report

    def vipcode(self) -> str:
        """Current VIP code, exactly as the TOTP tool printed it."""

        self.check_dependencies()
        return self._generate_code()

    def _generate_code(self) -> str:
        secret = read_secret(
            self.settings.secret_file,
            line=self.settings.secret_line,
            field=self.settings.secret_field,
        )
        return self.totp.generate(secret)

    def connect(self, credentials: Credentials) -> ConnectResult:
        self.check_dependencies()
        with self._lock():
            if self.query_status().connected:
                raise self._fail(AlreadyConnectedError())

            started = self.clock()
            code = self._generate_code()
            logger.info("Connecting to %s as %s", credentials.host, credentials.username)
            session_error: ScriptedSessionError | None = None
            try:
                transcript = self.client.connect(credentials, code)
            except ScriptedSessionError as exc:
                session_error = exc
                transcript = exc.transcript
                logger.debug("Scripted session broke off: %s", exc)
            except VipVpnError as exc:
                self.notifier.notify(str(exc))
                raise
            logger.debug("Session transcript:\n%s", transcript)

            if not self.query_status().connected:
                reason = f": {session_error}" if session_error else ""
                raise self._fail(ConnectFailedError(f"Could not connect to {credentials.host}{reason}"))

            result = ConnectResult(host=credentials.host, elapsed_seconds=self.clock() - started)
        self.notifier.notify(result.summary())
        return result

    def disconnect(self) -> StatusReport:
        self.check_dependencies()
        with self._lock():
            if not self.query_status().connected:
                raise self._fail(AlreadyDisconnectedError())

            logger.info("Disconnecting")
            output = self.client.disconnect()
            logger.debug("Disconnect output:\n%s", output)

            report = self.query_status()
            if report.connected:
                raise self._fail(DisconnectFailedError("VPN is still connected after disconnect"))
        self.notifier.notify(report.state.label())
        return report
