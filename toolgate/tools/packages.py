from __future__ import annotations

import json
import re
import urllib.parse
from dataclasses import dataclass
from typing import Any

from ..config import Settings
from ..errors import InvalidArguments, NetworkError, ParseError, RetrievalError
from ..process import ProcessResult, run
from .web import Retriever


NOT_SPECIFIED = "Not specified"

PACKAGE_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")
REQUIREMENT_RE = re.compile(
    r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}"
    r"(\[[A-Za-z0-9._,-]+\])?"
    r"((===|==|!=|<=|>=|~=|<|>)[A-Za-z0-9.*+!-]+"
    r"(,(===|==|!=|<=|>=|~=|<|>)[A-Za-z0-9.*+!-]+)*)?$"
)


@dataclass(frozen=True)
class PackageMetadata:
    name: str
    version: str
    summary: str
    author: str = NOT_SPECIFIED
    homepage: str = NOT_SPECIFIED
    license: str = NOT_SPECIFIED

    def render(self) -> str:
        return "\n".join(
            [
                f"Package: {self.name}",
                f"Version: {self.version}",
                f"Summary: {self.summary}",
                f"Author: {self.author}",
                f"Homepage: {self.homepage}",
                f"License: {self.license}",
            ]
        )


def normalize_package_metadata(package_name: str, payload: Any) -> PackageMetadata:
    if not isinstance(payload, dict) or not isinstance(payload.get("info"), dict):
        raise ParseError(f"Registry response for '{package_name}' has no 'info' object")

    info = payload["info"]
    version = _text(info.get("version"))
    if not version:
        raise ParseError(f"Registry response for '{package_name}' has no version")

    project_urls = info.get("project_urls")
    homepage = _text(info.get("home_page"))
    if not homepage and isinstance(project_urls, dict):
        homepage = _text(project_urls.get("Homepage") or project_urls.get("homepage"))

    return PackageMetadata(
        name=_text(info.get("name")) or package_name,
        version=version,
        summary=_text(info.get("summary")),
        author=_text(info.get("author")) or NOT_SPECIFIED,
        homepage=homepage or NOT_SPECIFIED,
        license=_text(info.get("license")) or NOT_SPECIFIED,
    )


class PackageTools:
    def __init__(self, settings: Settings, retriever: Retriever | None = None) -> None:
        self.settings = settings
        self.retriever = retriever or Retriever(settings)

    def package_metadata(self, package_name: str) -> PackageMetadata:
        name = _checked_name(package_name)
        url = f"{self.settings.pypi_url}/{urllib.parse.quote(name)}/json"
        try:
            doc = self.retriever.fetch_document(url)
        except NetworkError as exc:
            raise NetworkError(f"Registry lookup for '{name}' failed: {exc}") from exc
        try:
            payload = json.loads(doc.data.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as exc:
            raise ParseError(f"Registry response for '{name}' is not valid JSON: {exc}") from exc
        return normalize_package_metadata(name, payload)

    def fetch_package_metadata(self, package_name: str) -> str:
        try:
            return self.package_metadata(package_name).render()
        except RetrievalError as exc:
            return f"Error fetching package info for '{package_name}': {exc}"

    def python_version(self) -> str:
        result = run(
            self.settings.interpreter,
            ["--version"],
            timeout=self.settings.process_timeout,
            merge_stderr=True,
        )
        return _passthrough(result)

    def pip_list(self) -> str:
        return self._pip(["list"])

    def pip_show(self, package_name: str) -> str:
        return self._pip(["show", _checked_name(package_name)])

    def pip_install(self, requirement: str) -> str:
        clean = (requirement or "").strip()
        if not REQUIREMENT_RE.match(clean):
            raise InvalidArguments(f"Not a valid package requirement: '{requirement}'")
        return self._pip(["install", clean])

    def _pip(self, args: list[str]) -> str:
        result = run(
            self.settings.interpreter,
            ["-m", "pip", *args],
            timeout=self.settings.process_timeout,
            merge_stderr=True,
        )
        return _passthrough(result)


def _checked_name(package_name: str) -> str:
    clean = (package_name or "").strip()
    if not PACKAGE_NAME_RE.match(clean):
        raise InvalidArguments(f"Not a valid package name: '{package_name}'")
    return clean


def _passthrough(result: ProcessResult) -> str:
    text = result.text().strip()
    if text:
        return text
    return f"Command exited with code {result.exit_code} and produced no output: {' '.join(result.command)}"


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
