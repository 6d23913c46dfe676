from __future__ import annotations

import logging
import subprocess
import time
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from .errors import ProcessError, ProcessTimeout


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 60.0


@dataclass
class ProcessResult:
    command: list[str]
    exit_code: int
    stdout: bytes
    stderr: bytes
    duration_ms: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    def text(self) -> str:
        return self.stdout.decode("utf-8", errors="replace")

    def error_text(self) -> str:
        return self.stderr.decode("utf-8", errors="replace")


def run(
    executable: str,
    args: Sequence[str] = (),
    stdin: str | bytes | None = None,
    timeout: float | None = None,
    cwd: Path | str | None = None,
    merge_stderr: bool = False,
) -> ProcessResult:
    command = [str(executable), *(str(a) for a in args)]
    effective_timeout = DEFAULT_TIMEOUT_SEC if timeout is None else max(0.1, float(timeout))
    stdin_bytes = stdin.encode("utf-8") if isinstance(stdin, str) else stdin

    logger.debug("running %s (timeout=%ss)", command, effective_timeout)
    started = time.monotonic()
    try:
        proc = subprocess.run(
            command,
            input=stdin_bytes,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            cwd=None if cwd is None else str(cwd),
            timeout=effective_timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise ProcessTimeout(command, effective_timeout) from exc
    except OSError as exc:
        raise ProcessError(f"Could not start '{command[0]}': {exc}") from exc
    elapsed_ms = int((time.monotonic() - started) * 1000)

    logger.debug("%s exited with %s in %sms", command[0], proc.returncode, elapsed_ms)
    return ProcessResult(
        command=command,
        exit_code=int(proc.returncode),
        stdout=proc.stdout or b"",
        stderr=proc.stderr or b"",
        duration_ms=elapsed_ms,
    )
