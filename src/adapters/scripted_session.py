"""Prompt-by-prompt stdin exchange with an interactive child process.

The client is started with stdout and stderr merged into one pipe. For each
`PromptStep` the session reads output until `expect` matches (searching only
text after the previous match), then writes `line` followed by a newline.
After the last step stdin is closed and the output drained until EOF.
"""

from __future__ import annotations

import codecs
import logging
import os
import re
import selectors
import subprocess
import time
from dataclasses import dataclass
from typing import Sequence

from core.domain.errors import PromptTimeoutError, ScriptedSessionError

from adapters.process import MASK, describe

logger = logging.getLogger(__name__)

_CHUNK = 4096


@dataclass(frozen=True)
class PromptStep:
    """Wait for `expect` (None: send at once), then send `line`."""

    expect: re.Pattern[str] | None
    line: str
    secret: bool = False

    @classmethod
    def after(cls, pattern: str, line: str, *, secret: bool = False) -> "PromptStep":
        return cls(expect=re.compile(pattern), line=line, secret=secret)

    def shown(self) -> str:
        return MASK if self.secret else self.line


class ScriptedSession:
    """One run of `argv` driven by a list of `PromptStep`."""

    def __init__(self, argv: Sequence[str], *, prompt_timeout: float) -> None:
        self.argv = list(argv)
        self.prompt_timeout = prompt_timeout
        self._buffer = ""
        self._cursor = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def run(self, steps: Sequence[PromptStep]) -> str:
        """Play `steps` against a fresh child process; return the transcript."""

        logger.debug("Starting scripted session: %s", describe(self.argv))
        proc = subprocess.Popen(
            self.argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        assert proc.stdin is not None and proc.stdout is not None
        selector = selectors.DefaultSelector()
        selector.register(proc.stdout, selectors.EVENT_READ)
        try:
            for step in steps:
                if step.expect is not None:
                    self._wait_for(proc, selector, step.expect)
                logger.debug("Sending %r", step.shown())
                self._send(proc, step.line)
            proc.stdin.close()
            self._drain(proc)
            proc.wait()
        except BaseException:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            raise
        finally:
            selector.close()
            proc.stdout.close()
            if not proc.stdin.closed:
                try:
                    proc.stdin.close()
                except BrokenPipeError:
                    pass

        logger.debug("Scripted session exited with %s", proc.returncode)
        return self._buffer

    def _read_chunk(self, proc: subprocess.Popen[bytes]) -> bool:
        assert proc.stdout is not None
        chunk = os.read(proc.stdout.fileno(), _CHUNK)
        if not chunk:
            self._buffer += self._decoder.decode(b"", final=True)
            return False
        self._buffer += self._decoder.decode(chunk)
        return True

    def _wait_for(
        self,
        proc: subprocess.Popen[bytes],
        selector: selectors.BaseSelector,
        pattern: re.Pattern[str],
    ) -> None:
        deadline = time.monotonic() + self.prompt_timeout
        while True:
            match = pattern.search(self._buffer, self._cursor)
            if match:
                self._cursor = match.end()
                return
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise PromptTimeoutError(
                    f"Timed out after {self.prompt_timeout:g}s waiting for {pattern.pattern!r}",
                    self._buffer,
                )
            if not selector.select(remaining):
                continue
            if not self._read_chunk(proc):
                raise ScriptedSessionError(
                    f"VPN client exited before prompt {pattern.pattern!r}",
                    self._buffer,
                )

    def _send(self, proc: subprocess.Popen[bytes], line: str) -> None:
        assert proc.stdin is not None
        try:
            proc.stdin.write((line + "\n").encode("utf-8"))
            proc.stdin.flush()
        except BrokenPipeError as exc:
            raise ScriptedSessionError("VPN client closed its input", self._buffer) from exc

    def _drain(self, proc: subprocess.Popen[bytes]) -> None:
        while self._read_chunk(proc):
            pass
