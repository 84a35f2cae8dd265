"""Reader for the VIP shared-secret file.

Default layout is the `~/.vipaccess` file written by python-vipaccess:

    version 1
    secret JBSWY3DPEHPK3PXP
    id VSST12345678
    expiry 2030-01-01T00:00:00.000Z

The secret is the second field of the second line.
"""

from __future__ import annotations

from pathlib import Path

from core.domain.errors import SecretFileError


def read_secret(path: Path, *, line: int = 2, field: int = 2) -> str:
    """Return field `field` of line `line` (both 1-based) of `path`."""

    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise SecretFileError(f"Cannot read secret file {path}: {exc.strerror or exc}") from exc

    if len(lines) < line:
        raise SecretFileError(f"Secret file {path} has no line {line}")

    fields = lines[line - 1].split()
    if len(fields) < field:
        raise SecretFileError(f"Secret file {path}, line {line} has no field {field}")
    return fields[field - 1]
