from __future__ import annotations

import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from pathlib import Path


VERSION = "0.3.0"

DEFAULT_SEARCH_URL = "https://html.duckduckgo.com/html/"
DEFAULT_PYPI_URL = "https://pypi.org/pypi"
HTTP_TRANSPORTS = {"requests", "curl"}
DEFAULT_MAX_DOWNLOAD_BYTES = 40 * 1024 * 1024


@dataclass(frozen=True)
class Settings:
    search_url: str = DEFAULT_SEARCH_URL
    pypi_url: str = DEFAULT_PYPI_URL
    http_transport: str = "requests"
    http_timeout: float = 30.0
    process_timeout: float = 60.0
    exec_timeout: float | None = None
    interpreter: str = sys.executable
    max_chars: int = 20000
    max_download_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES
    temp_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    hidden_tools: frozenset[str] = frozenset()
    user_agent: str = f"toolgate/{VERSION}"
    log_level: str = "WARNING"
    api_token: str = ""

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self.user_agent}


def load_settings(env: dict[str, str] | None = None) -> Settings:
    source = os.environ if env is None else env

    transport = source.get("TOOLGATE_HTTP_TRANSPORT", "requests").strip().lower() or "requests"
    if transport not in HTTP_TRANSPORTS:
        raise ValueError(
            f"TOOLGATE_HTTP_TRANSPORT must be one of {', '.join(sorted(HTTP_TRANSPORTS))}, got '{transport}'"
        )

    raw_exec_timeout = source.get("TOOLGATE_EXEC_TIMEOUT", "").strip()
    raw_temp_dir = source.get("TOOLGATE_TEMP_DIR", "").strip()
    raw_max_bytes = source.get("TOOLGATE_MAX_DOWNLOAD_BYTES", "").strip()
    hidden = {n.strip() for n in source.get("TOOLGATE_HIDDEN_TOOLS", "").split(",") if n.strip()}

    return Settings(
        search_url=source.get("TOOLGATE_SEARCH_URL", DEFAULT_SEARCH_URL).strip() or DEFAULT_SEARCH_URL,
        pypi_url=(source.get("TOOLGATE_PYPI_URL", DEFAULT_PYPI_URL).strip() or DEFAULT_PYPI_URL).rstrip("/"),
        http_transport=transport,
        http_timeout=max(1.0, float(source.get("TOOLGATE_HTTP_TIMEOUT", "30"))),
        process_timeout=max(1.0, float(source.get("TOOLGATE_PROCESS_TIMEOUT", "60"))),
        exec_timeout=max(1.0, float(raw_exec_timeout)) if raw_exec_timeout else None,
        interpreter=source.get("TOOLGATE_INTERPRETER", "").strip() or sys.executable,
        max_chars=max(200, int(source.get("TOOLGATE_MAX_CHARS", "20000"))),
        max_download_bytes=max(1024, int(raw_max_bytes)) if raw_max_bytes else DEFAULT_MAX_DOWNLOAD_BYTES,
        temp_dir=Path(raw_temp_dir).expanduser().resolve() if raw_temp_dir else Path(tempfile.gettempdir()),
        hidden_tools=frozenset(hidden),
        user_agent=source.get("TOOLGATE_USER_AGENT", "").strip() or f"toolgate/{VERSION}",
        log_level=source.get("TOOLGATE_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
        api_token=source.get("TOOLGATE_API_TOKEN", "").strip(),
    )


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
