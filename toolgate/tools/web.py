from __future__ import annotations

import logging
import urllib.parse
from pathlib import Path
from typing import Protocol

import requests

from ..config import DEFAULT_MAX_DOWNLOAD_BYTES, Settings
from ..errors import InvalidArguments, NetworkError, ProcessError
from ..process import run
from ..scoped import scoped_temp_file
from .docs import Document, document_text
from .html_text import extract


logger = logging.getLogger(__name__)

PYTHON_DOCS_SITE = "docs.python.org"
STACKOVERFLOW_SITE = "stackoverflow.com"
TRUNCATION_MARKER = "\n...[truncated]..."
CURL_FILESIZE_EXCEEDED = 63


class HttpTransport(Protocol):
    def download(self, url: str, dest: Path) -> str:
        """GET ``url`` into ``dest`` and return the response content type."""
        ...


class RequestsTransport:
    def __init__(
        self,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        max_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES,
    ) -> None:
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.max_bytes = max_bytes

    def download(self, url: str, dest: Path) -> str:
        try:
            with requests.get(url, stream=True, timeout=self.timeout, headers=self.headers) as response:
                response.raise_for_status()
                total = 0
                with Path(dest).open("wb") as f:
                    for chunk in response.iter_content(chunk_size=65536):
                        if not chunk:
                            continue
                        total += len(chunk)
                        if total > self.max_bytes:
                            raise NetworkError(
                                f"GET {url} failed: download too large, {total} bytes exceeds {self.max_bytes} bytes"
                            )
                        f.write(chunk)
                return response.headers.get("Content-Type", "")
        except requests.RequestException as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc


class CurlTransport:
    def __init__(
        self,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        executable: str = "curl",
        max_bytes: int = DEFAULT_MAX_DOWNLOAD_BYTES,
    ) -> None:
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.executable = executable
        self.max_bytes = max_bytes

    def download(self, url: str, dest: Path) -> str:
        args = ["-sS", "-L", "--fail", "--max-time", str(int(self.timeout))]
        args += ["--max-filesize", str(self.max_bytes)]
        for key, value in self.headers.items():
            args += ["-H", f"{key}: {value}"]
        args += ["-o", str(dest), "-w", "%{content_type}", url]
        try:
            result = run(self.executable, args, timeout=self.timeout + 5)
        except ProcessError as exc:
            raise NetworkError(f"GET {url} failed: {exc}") from exc
        if result.exit_code == CURL_FILESIZE_EXCEEDED:
            raise NetworkError(f"GET {url} failed: download too large, exceeds {self.max_bytes} bytes")
        if not result.ok:
            detail = result.error_text().strip()[:1500] or f"curl exited with code {result.exit_code}"
            raise NetworkError(f"GET {url} failed: {detail}")
        return result.text().strip()


def make_transport(settings: Settings) -> HttpTransport:
    if settings.http_transport == "curl":
        return CurlTransport(
            timeout=settings.http_timeout, headers=settings.headers, max_bytes=settings.max_download_bytes
        )
    return RequestsTransport(
        timeout=settings.http_timeout, headers=settings.headers, max_bytes=settings.max_download_bytes
    )


class Retriever:
    """Search, fetch and extract text through scoped temp files."""

    def __init__(self, settings: Settings, transport: HttpTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport or make_transport(settings)

    def fetch_document(self, url: str) -> Document:
        with scoped_temp_file("toolgate-fetch-", ".body", self.settings.temp_dir) as tmp:
            content_type = self.transport.download(url, tmp.path)
            data = tmp.read_bytes()
        logger.debug("fetched %s (%d bytes, %s)", url, len(data), content_type or "unknown type")
        return Document(url=url, data=data, content_type=content_type)

    def web_search(self, query: str) -> str:
        clean = (query or "").strip()
        if not clean:
            raise InvalidArguments("web_search requires a non-empty query")

        url = f"{self.settings.search_url}?q={urllib.parse.quote_plus(clean)}"
        try:
            doc = self.fetch_document(url)
        except NetworkError as exc:
            raise NetworkError(f"Web search failed for '{clean}': {exc}") from exc

        text = extract(doc.data)
        if not text:
            return f"No text content returned for search '{clean}'."
        return _clip(text, self.settings.max_chars)

    def fetch_url(self, url: str) -> str:
        clean = (url or "").strip()
        _assert_http_url(clean)
        try:
            doc = self.fetch_document(clean)
        except NetworkError as exc:
            raise NetworkError(f"Fetching {clean} failed: {exc}") from exc

        text, kind = document_text(doc)
        if not text:
            return f"No text content found at {clean} ({kind})."
        return _clip(text, self.settings.max_chars)

    def search_python_docs(self, topic: str) -> str:
        return self.web_search(site_query(PYTHON_DOCS_SITE, topic))

    def search_stackoverflow(self, query: str) -> str:
        return self.web_search(site_query(STACKOVERFLOW_SITE, query))


def site_query(domain: str, query: str) -> str:
    clean = (query or "").strip()
    if not clean:
        raise InvalidArguments(f"a non-empty query is required to search {domain}")
    return f"site:{domain} {clean}"


def _assert_http_url(url: str) -> None:
    parsed = urllib.parse.urlparse(url)
    if (parsed.scheme or "").lower() not in {"http", "https"}:
        raise NetworkError(f"Only http/https URLs can be fetched: '{url}'")
    if not parsed.hostname:
        raise NetworkError(f"URL host is missing: '{url}'")


def _clip(text: str, max_chars: int) -> str:
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER
