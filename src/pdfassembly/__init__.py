"""Assemble PDF documents from text, vector graphics and images."""

from .document import Document, InternalTarget, UriTarget
from .drawing import LineStyle
from .enums import Align, DrawMode, ImageKind, Layout, LineCap, LineJoin, Orientation, Position, ScaleMode, Zoom
from .errors import (
    DocumentStateError,
    FormatError,
    MissingExtension,
    PDFAssemblyError,
    UndefinedFont,
    UnsupportedImageType,
)
from .fonts import CoreFontMetrics
from .storage import save_pdf, write_pdf

__version__ = "0.1.0"

__all__ = [
    "Align",
    "CoreFontMetrics",
    "Document",
    "DocumentStateError",
    "DrawMode",
    "FormatError",
    "ImageKind",
    "InternalTarget",
    "Layout",
    "LineCap",
    "LineJoin",
    "LineStyle",
    "MissingExtension",
    "Orientation",
    "PDFAssemblyError",
    "Position",
    "ScaleMode",
    "UndefinedFont",
    "UnsupportedImageType",
    "UriTarget",
    "Zoom",
    "save_pdf",
    "write_pdf",
]
