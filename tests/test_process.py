import sys
from pathlib import Path

import pytest

from toolgate.errors import ProcessError, ProcessTimeout
from toolgate.process import run


def test_run_captures_stdout() -> None:
    result = run(sys.executable, ["-c", "print('runner-ok')"])
    assert result.ok is True
    assert result.exit_code == 0
    assert "runner-ok" in result.text()
    assert result.command[0] == sys.executable


def test_nonzero_exit_is_reported_not_raised() -> None:
    result = run(sys.executable, ["-c", "import sys; print('partial'); sys.exit(3)"])
    assert result.ok is False
    assert result.exit_code == 3
    assert "partial" in result.text()


def test_stdin_is_passed_through() -> None:
    result = run(sys.executable, ["-c", "import sys; print(sys.stdin.read().upper())"], stdin="quiet")
    assert "QUIET" in result.text()


def test_merge_stderr_combines_streams() -> None:
    code = "import sys; print('out'); sys.stdout.flush(); print('err', file=sys.stderr)"
    separate = run(sys.executable, ["-c", code])
    assert "err" not in separate.text()
    assert "err" in separate.error_text()

    merged = run(sys.executable, ["-c", code], merge_stderr=True)
    assert "out" in merged.text()
    assert "err" in merged.text()
    assert merged.stderr == b""


def test_timeout_raises_process_timeout() -> None:
    with pytest.raises(ProcessTimeout) as info:
        run(sys.executable, ["-c", "import time; time.sleep(10)"], timeout=0.5)
    assert info.value.timeout == 0.5
    assert "timed out" in str(info.value)


def test_missing_executable_raises_process_error(tmp_path: Path) -> None:
    with pytest.raises(ProcessError):
        run(str(tmp_path / "no-such-binary"), ["--version"])


def test_cwd_is_respected(tmp_path: Path) -> None:
    result = run(sys.executable, ["-c", "import os; print(os.getcwd())"], cwd=tmp_path)
    assert Path(result.text().strip()).resolve() == tmp_path.resolve()
