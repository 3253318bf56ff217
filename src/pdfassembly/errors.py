"""Exception types raised by pdfassembly."""

from __future__ import annotations


class PDFAssemblyError(RuntimeError):
    """Base class for every error raised while building a document."""


class FormatError(PDFAssemblyError, ValueError):
    """Raised when an image buffer is malformed or uses an unsupported feature."""


class UnsupportedImageType(PDFAssemblyError):
    """Raised when an image type is neither PNG, JPEG nor GIF."""


class MissingExtension(PDFAssemblyError):
    """Raised when an image source has no extension and no explicit type."""


class UndefinedFont(PDFAssemblyError):
    """Raised when a family/style combination is not one of the standard fonts."""


class DocumentStateError(PDFAssemblyError):
    """Raised when an operation is not legal in the current document state."""


__all__ = [
    "DocumentStateError",
    "FormatError",
    "MissingExtension",
    "PDFAssemblyError",
    "UndefinedFont",
    "UnsupportedImageType",
]
