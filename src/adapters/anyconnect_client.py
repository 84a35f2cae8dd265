"""`VpnClient` backed by the AnyConnect-style `vpn` command line tool."""

from __future__ import annotations

from core.config import AppSettings
from core.domain.errors import VpnClientError
from core.domain.models import Credentials

from adapters import process
from adapters.scripted_session import PromptStep, ScriptedSession


def connect_script(credentials: Credentials, group_choice: str, code: str) -> list[PromptStep]:
    """Prompt/answer pairs of an interactive `vpn -s` login."""

    return [
        PromptStep(expect=None, line=f"connect {credentials.host}"),
        PromptStep.after(r"Group:", group_choice),
        PromptStep.after(r"Username:", credentials.username),
        PromptStep.after(r"(?<!Second )Password:", credentials.password, secret=True),
        PromptStep.after(r"Second Password:", code, secret=True),
        PromptStep.after(r"accept\?", "y"),
    ]


class AnyConnectClient:
    def __init__(self, settings: AppSettings) -> None:
        self._binary = str(settings.vpn_binary)
        self._group_choice = settings.group_choice
        self._prompt_timeout = settings.prompt_timeout_seconds

    def _run(self, action: str) -> str:
        try:
            result = process.run_command([self._binary, action])
        except OSError as exc:
            raise VpnClientError(f"Cannot run {self._binary}: {exc}") from exc
        return result.stdout + result.stderr

    def status(self) -> str:
        return self._run("status")

    def disconnect(self) -> str:
        return self._run("disconnect")

    def connect(self, credentials: Credentials, code: str) -> str:
        session = ScriptedSession([self._binary, "-s"], prompt_timeout=self._prompt_timeout)
        try:
            return session.run(connect_script(credentials, self._group_choice, code))
        except OSError as exc:
            raise VpnClientError(f"Cannot run {self._binary}: {exc}") from exc
