from __future__ import annotations

import pytest

from pdfassembly.enums import Align, DrawMode, ImageKind, Orientation, Zoom
from pdfassembly.units import flip_y, format_number, page_size, scale_factor


def test_scale_factor() -> None:
    assert scale_factor("pt") == 1.0
    assert scale_factor("mm") == pytest.approx(2.834645, rel=1e-6)
    assert scale_factor("CM") == pytest.approx(28.34645, rel=1e-6)
    assert scale_factor("in") == 72.0
    assert scale_factor(2) == 2.0


@pytest.mark.parametrize("unit", ["furlong", 0, -1])
def test_scale_factor_rejects_unknown_units(unit) -> None:
    with pytest.raises(ValueError):
        scale_factor(unit)


def test_page_size() -> None:
    assert page_size("A4", 1) == (595.28, 841.89)
    assert page_size("letter", 72 / 25.4) == (612.0, 792.0)
    assert page_size((100, 200), 2) == (200, 400)
    with pytest.raises(ValueError):
        page_size("B17", 1)


def test_coordinate_conversion() -> None:
    assert flip_y(10, 100, 2) == 180


def test_format_number() -> None:
    assert format_number(1.0) == "1"
    assert format_number(1.5) == "1.5"
    assert format_number(0.125) == "0.125"


def test_enum_coercion() -> None:
    assert Orientation.coerce("l") is Orientation.LANDSCAPE
    assert Orientation.coerce("portrait") is Orientation.PORTRAIT
    assert Align.coerce("C") is Align.CENTER
    assert Zoom.coerce("fullpage") is Zoom.FULLPAGE
    assert DrawMode.coerce("D") is DrawMode.DRAW
    assert DrawMode.coerce("F") is DrawMode.FILL
    assert DrawMode.coerce("fd") is DrawMode.DRAW_FILL
    assert ImageKind.from_extension(".JPG") is ImageKind.JPEG
    with pytest.raises(ValueError):
        Orientation.coerce("sideways")
