from __future__ import annotations

import io
from dataclasses import dataclass

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from ..errors import ParseError
from .html_text import extract, looks_like_html


@dataclass
class Document:
    url: str
    data: bytes
    content_type: str = ""

    @property
    def kind(self) -> str:
        content_type = self.content_type.lower()
        if "application/pdf" in content_type or self.data[:5] == b"%PDF-":
            return "pdf"
        if "html" in content_type:
            return "html"
        if looks_like_html(_decode_text(self.data[:2048])):
            return "html"
        return "text"


def document_text(doc: Document) -> tuple[str, str]:
    kind = doc.kind
    if kind == "pdf":
        return _extract_pdf(doc), kind
    if kind == "html":
        return extract(doc.data), kind
    return _decode_text(doc.data).strip(), kind


def _decode_text(data: bytes) -> str:
    for enc in ("utf-8", "utf-16", "latin-1"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def _extract_pdf(doc: Document) -> str:
    try:
        reader = PdfReader(io.BytesIO(doc.data))
        pages = [(page.extract_text() or "") for page in reader.pages]
    except (PdfReadError, ValueError, KeyError, TypeError) as exc:
        raise ParseError(f"Could not read PDF from {doc.url}: {exc}") from exc
    return "\n\n".join(pages).strip()
