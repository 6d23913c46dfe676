from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


logger = logging.getLogger(__name__)


class ScopedTempFile:
    """A temp file owned by one operation and deleted exactly once.

    The file is created on acquisition with a collision-free name. ``release``
    may be called any number of times; only the first call touches the
    filesystem.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def write_text(self, text: str) -> None:
        self.path.write_text(text, encoding="utf-8")

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self.path.unlink(missing_ok=True)
        logger.debug("released temp file %s", self.path)

    def __enter__(self) -> ScopedTempFile:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"ScopedTempFile({str(self.path)!r}, {state})"


def acquire(prefix: str, suffix: str = "", directory: Path | str | None = None) -> ScopedTempFile:
    if directory is not None:
        Path(directory).mkdir(parents=True, exist_ok=True)
    fd, raw_path = tempfile.mkstemp(prefix=prefix, suffix=suffix, dir=None if directory is None else str(directory))
    os.close(fd)
    logger.debug("acquired temp file %s", raw_path)
    return ScopedTempFile(Path(raw_path))


@contextmanager
def scoped_temp_file(
    prefix: str,
    suffix: str = "",
    directory: Path | str | None = None,
) -> Iterator[ScopedTempFile]:
    handle = acquire(prefix, suffix, directory)
    try:
        yield handle
    finally:
        handle.release()
