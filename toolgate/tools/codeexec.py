from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import Settings
from ..errors import ProcessError
from ..process import run
from ..scoped import scoped_temp_file


logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    ok: bool
    exit_code: int
    output: str
    duration_ms: int
    truncated: bool


class Sandbox:
    """Runs agent-supplied source with an external interpreter.

    The source goes into a scoped temp file that is removed before ``execute``
    returns, whatever happens. There is no static analysis of the source:
    isolation comes from the separate process and from the confirmation gate.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def execute(self, source_text: str, timeout: float | None = None) -> ExecutionResult:
        effective_timeout = timeout if timeout is not None else self.settings.exec_timeout
        if effective_timeout is None:
            effective_timeout = self.settings.process_timeout

        with scoped_temp_file("toolgate-exec-", ".py", self.settings.temp_dir) as tmp:
            tmp.write_text(source_text)
            result = run(
                self.settings.interpreter,
                [str(tmp.path)],
                timeout=effective_timeout,
                cwd=self.settings.temp_dir,
                merge_stderr=True,
            )

        output, truncated = _truncate_output(result.text(), self.settings.max_chars)
        if not result.ok:
            logger.info("interpreter exited with %s", result.exit_code)
        return ExecutionResult(
            ok=result.ok,
            exit_code=result.exit_code,
            output=output,
            duration_ms=result.duration_ms,
            truncated=truncated,
        )

    def evaluate(self, source_text: str, timeout: float | None = None) -> str:
        try:
            result = self.execute(source_text, timeout=timeout)
        except (ProcessError, OSError, UnicodeError) as exc:
            return f"Error executing code: {exc}"
        return render_execution(result)


def render_execution(result: ExecutionResult) -> str:
    # Non-zero exit still reports the captured output as the result.
    text = result.output.rstrip("\n")
    if not text:
        if result.ok:
            return "(no output)"
        return f"Process exited with code {result.exit_code} and produced no output."
    if result.truncated:
        text += "\n\nOutput truncated."
    return text


def _truncate_output(text: str, max_output_chars: int) -> tuple[str, bool]:
    max_output_chars = max(400, int(max_output_chars))
    if len(text) <= max_output_chars:
        return text, False
    return text[:max_output_chars], True
