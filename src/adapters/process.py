"""Thin wrapper over `subprocess.run`.

Why a wrapper:
- Standardizes text mode, output capture and debug logging for every
  external program (VPN client, oathtool, notification backends).
- Secrets passed on the command line are masked in the logs.
- Tests replace `run_command` in one place.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from typing import Sequence

logger = logging.getLogger(__name__)

MASK = "******"


def describe(argv: Sequence[str], secrets: Sequence[str] = ()) -> str:
    """Render `argv` for logs, replacing any secret value with a mask."""

    return shlex.join(MASK if arg in secrets else arg for arg in argv)


def run_command(
    argv: Sequence[str],
    *,
    secrets: Sequence[str] = (),
) -> subprocess.CompletedProcess[str]:
    """Run `argv` to completion and capture stdout/stderr as text.

    The return code is not checked; callers decide what a failure means.
    `OSError` (missing or non-executable program) propagates.
    """

    logger.debug("Running %s", describe(argv, secrets))
    result = subprocess.run(
        list(argv),
        capture_output=True,
        text=True,
        check=False,
    )
    logger.debug("%s exited with %s", argv[0], result.returncode)
    return result


def last_line(text: str | None) -> str | None:
    """Last non-empty line of `text`, used as an error hint."""

    if not text:
        return None
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    return lines[-1] if lines else None
