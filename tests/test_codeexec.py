from pathlib import Path

import pytest

from toolgate.config import Settings
from toolgate.scoped import ScopedTempFile
from toolgate.tools.codeexec import ExecutionResult, Sandbox, render_execution


def _sandbox(tmp_path: Path, **overrides: object) -> Sandbox:
    return Sandbox(Settings(temp_dir=tmp_path / "scratch", **overrides))  # type: ignore[arg-type]


def _leftovers(tmp_path: Path) -> list[Path]:
    scratch = tmp_path / "scratch"
    return list(scratch.iterdir()) if scratch.exists() else []


def test_evaluate_returns_printed_output(tmp_path: Path) -> None:
    out = _sandbox(tmp_path).evaluate("print(1+1)")
    assert "2" in out
    assert _leftovers(tmp_path) == []


def test_system_exit_returns_text_not_exception(tmp_path: Path) -> None:
    out = _sandbox(tmp_path).evaluate("raise SystemExit(1)")
    assert isinstance(out, str)
    assert "exited with code 1" in out
    assert _leftovers(tmp_path) == []


def test_traceback_is_captured_as_output(tmp_path: Path) -> None:
    sandbox = _sandbox(tmp_path)
    result = sandbox.execute("print('before')\n1 / 0\n")
    assert result.ok is False
    assert result.exit_code != 0
    assert "before" in result.output
    assert "ZeroDivisionError" in result.output
    assert "ZeroDivisionError" in sandbox.evaluate("1 / 0")
    assert _leftovers(tmp_path) == []


def test_source_is_written_verbatim(tmp_path: Path) -> None:
    source = "import sys\nprint(open(sys.argv[0], encoding='utf-8').read().count('needle'))  # needle\n"
    assert _sandbox(tmp_path).evaluate(source).strip() == "2"


def test_timeout_returns_error_and_cleans_up(tmp_path: Path) -> None:
    out = _sandbox(tmp_path).evaluate("import time\ntime.sleep(10)\n", timeout=0.5)
    assert out.startswith("Error executing code:")
    assert "timed out" in out
    assert _leftovers(tmp_path) == []


def test_configured_exec_timeout_applies(tmp_path: Path) -> None:
    out = _sandbox(tmp_path, exec_timeout=0.5).evaluate("import time\ntime.sleep(10)\n")
    assert "timed out" in out


def test_missing_interpreter_returns_error(tmp_path: Path) -> None:
    out = _sandbox(tmp_path, interpreter=str(tmp_path / "no-python")).evaluate("print(1)")
    assert out.startswith("Error executing code:")
    assert _leftovers(tmp_path) == []


def test_write_failure_still_releases(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_write(self: ScopedTempFile, text: str) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(ScopedTempFile, "write_text", broken_write)
    with pytest.raises(OSError):
        _sandbox(tmp_path).execute("print(1)")
    assert _leftovers(tmp_path) == []


def test_evaluate_reports_write_failure_as_text(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_write(self: ScopedTempFile, text: str) -> None:
        raise OSError("disk full")

    monkeypatch.setattr(ScopedTempFile, "write_text", broken_write)
    out = _sandbox(tmp_path).evaluate("print(1)")
    assert out == "Error executing code: disk full"
    assert _leftovers(tmp_path) == []


def test_unencodable_source_returns_error_text(tmp_path: Path) -> None:
    out = _sandbox(tmp_path).evaluate("print('\ud800')")
    assert isinstance(out, str)
    assert out.startswith("Error executing code:")
    assert _leftovers(tmp_path) == []


def test_long_output_is_truncated(tmp_path: Path) -> None:
    result = _sandbox(tmp_path, max_chars=500).execute("print('x' * 5000)")
    assert result.truncated is True
    assert len(result.output) == 500
    assert render_execution(result).endswith("Output truncated.")


def test_render_execution_empty_output() -> None:
    ok = ExecutionResult(ok=True, exit_code=0, output="", duration_ms=1, truncated=False)
    assert render_execution(ok) == "(no output)"
    failed = ExecutionResult(ok=False, exit_code=4, output="\n", duration_ms=1, truncated=False)
    assert render_execution(failed) == "Process exited with code 4 and produced no output."
