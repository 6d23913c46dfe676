from __future__ import annotations

import re

from bs4 import BeautifulSoup


WHITESPACE_RE = re.compile(r"\s+")


def normalize_whitespace(text: str) -> str:
    return WHITESPACE_RE.sub(" ", text).strip()


def extract(html: str | bytes | None) -> str:
    if not html:
        return ""

    soup = BeautifulSoup(html, "html.parser")
    if soup is None or not soup.contents:
        return ""

    return normalize_whitespace("".join(soup.strings))


def looks_like_html(text: str) -> bool:
    prefix = text[:500].lstrip().lower()
    return prefix.startswith("<") and ("<html" in prefix or "<!doctype html" in prefix or "<body" in prefix)
