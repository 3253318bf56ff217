"""Output destinations for finished documents."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document


def save_pdf(document: "Document", path: str | Path) -> None:
    Path(path).write_bytes(document.output())


def write_pdf(document: "Document", stream: BinaryIO) -> None:
    stream.write(document.output())


__all__ = ["save_pdf", "write_pdf"]
