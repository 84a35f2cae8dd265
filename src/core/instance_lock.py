"""Single-instance guard based on an advisory `flock` lock file.

The lock is taken with `LOCK_EX | LOCK_NB`, so a second process fails at once
instead of queuing behind the first. The kernel drops the lock when the
holder exits, even on a crash.
"""

from __future__ import annotations

import fcntl
import logging
import os
from pathlib import Path
from types import TracebackType
from typing import IO

from core.domain.errors import InstanceLockedError

logger = logging.getLogger(__name__)


class InstanceLock:
    """Context manager holding the lock file for the duration of the block."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._fp: IO[str] | None = None

    @property
    def locked(self) -> bool:
        return self._fp is not None

    def acquire(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fp = open(self.path, "a+", encoding="utf-8")
        try:
            fcntl.flock(fp.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError:
            fp.seek(0)
            pid = _parse_pid(fp.read())
            fp.close()
            raise InstanceLockedError(str(self.path), pid) from None

        fp.seek(0)
        fp.truncate()
        fp.write(str(os.getpid()))
        fp.flush()
        self._fp = fp
        logger.debug("Acquired instance lock %s", self.path)

    def release(self) -> None:
        if self._fp is None:
            return
        try:
            self._fp.seek(0)
            self._fp.truncate()
            fcntl.flock(self._fp.fileno(), fcntl.LOCK_UN)
        finally:
            self._fp.close()
            self._fp = None
        logger.debug("Released instance lock %s", self.path)

    def __enter__(self) -> "InstanceLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def _parse_pid(text: str) -> int | None:
    text = text.strip()
    return int(text) if text.isdigit() else None
