"""User-unit to PDF point-space conversions.

PDF places the origin at the bottom-left corner of the page with the Y axis
pointing up. Documents are laid out in user units (millimetres by default)
with the origin at the top-left corner and the Y axis pointing down; ``k`` is
the number of points per user unit.
"""

from __future__ import annotations

from typing import Dict, Tuple, Union

UNITS: Dict[str, float] = {
    "pt": 1.0,
    "mm": 72 / 25.4,
    "cm": 72 / 2.54,
    "in": 72.0,
}

# Page formats in points (portrait).
PAGE_FORMATS: Dict[str, Tuple[float, float]] = {
    "a3": (841.89, 1190.55),
    "a4": (595.28, 841.89),
    "a5": (420.94, 595.28),
    "letter": (612.0, 792.0),
    "legal": (612.0, 1008.0),
}

PageFormat = Union[str, Tuple[float, float]]


def scale_factor(unit: Union[str, float]) -> float:
    """Return the number of points in one *unit*."""

    if isinstance(unit, (int, float)):
        if unit <= 0:
            raise ValueError(f"Invalid unit scale: {unit}")
        return float(unit)
    try:
        return UNITS[unit.lower()]
    except KeyError:
        raise ValueError(f"Incorrect unit: {unit}") from None


def page_size(page_format: PageFormat, k: float) -> Tuple[float, float]:
    """Return the portrait ``(width, height)`` of *page_format* in points.

    Named formats are looked up in :data:`PAGE_FORMATS`; a tuple is taken as
    ``(width, height)`` in user units.
    """

    if isinstance(page_format, str):
        try:
            return PAGE_FORMATS[page_format.lower()]
        except KeyError:
            raise ValueError(f"Unknown page format: {page_format}") from None
    width, height = page_format
    return width * k, height * k


def flip_y(y: float, page_height: float, k: float) -> float:
    """Convert a top-down user-space ordinate to a bottom-up point ordinate."""

    return (page_height - y) * k


def format_number(value: float) -> str:
    if abs(value - int(value)) < 1e-6:
        return str(int(round(value)))
    text = f"{value:.4f}"
    return text.rstrip("0").rstrip(".")


__all__ = [
    "PAGE_FORMATS",
    "UNITS",
    "flip_y",
    "format_number",
    "page_size",
    "scale_factor",
]
