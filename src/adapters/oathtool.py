from __future__ import annotations

from core.config import AppSettings
from core.domain.errors import TotpError

from adapters import process


class OathToolGenerator:
    """`TotpGenerator` backed by `oathtool --totp -b`."""

    def __init__(self, settings: AppSettings) -> None:
        self._binary = settings.totp_binary
        self._digits = settings.totp_digits

    def argv(self, secret: str) -> list[str]:
        return [self._binary, "--totp", "-b", "-d", str(self._digits), secret]

    def generate(self, secret: str) -> str:
        try:
            result = process.run_command(self.argv(secret), secrets=[secret])
        except OSError as exc:
            raise TotpError(f"Cannot run {self._binary}: {exc}") from exc

        if result.returncode != 0:
            hint = process.last_line(result.stderr)
            raise TotpError(f"Failed to generate VIP code{': ' + hint if hint else ''}")
        return result.stdout.rstrip("\n")
