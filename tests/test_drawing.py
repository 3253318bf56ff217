from __future__ import annotations

import pytest

from pdfassembly import Document, DocumentStateError, DrawMode, LineCap, LineJoin, LineStyle
from pdfassembly.drawing import ARC_CONTROL


def make_document() -> Document:
    doc = Document(unit="pt")
    doc.add_page()
    return doc


def content(doc: Document, page: int = 1) -> str:
    return bytes(doc.pages[page].content).decode("latin-1")


def test_arc_control_constant() -> None:
    assert ARC_CONTROL == pytest.approx(0.5522847498)


def test_line() -> None:
    doc = make_document()
    doc.line(10, 10, 20, 20)
    assert "10.00 831.89 m 20.00 821.89 l S\n" in content(doc)


@pytest.mark.parametrize(
    "style, op",
    [("D", "S"), ("F", "f"), ("DF", "B"), (DrawMode.FILL, "f"), ("S", "S")],
)
def test_rect_styles(style, op: str) -> None:
    doc = make_document()
    doc.rect(0, 0, 10, 20, style)
    assert f"0.00 841.89 10.00 -20.00 re {op}\n" in content(doc)


def test_rect_uses_document_units() -> None:
    doc = Document(unit="in")
    doc.add_page()
    doc.rect(1, 1, 2, 1)
    assert "72.00 769.89 144.00 -72.00 re S\n" in content(doc)


def test_curve() -> None:
    doc = make_document()
    doc.curve(0, 0, 10, 0, 10, 10, 20, 10, "F")
    assert content(doc).endswith("0.00 841.89 m\n10.00 841.89 10.00 831.89 20.00 831.89 c\nf\n")


def test_circle_is_a_closed_sequence_of_curves() -> None:
    doc = make_document()
    doc.circle(50, 50, 10, segments=4)
    text = content(doc)
    assert "60.00 791.89 m\n" in text
    assert text.count(" c\n") == 4
    assert text.endswith("60.00 791.89 c\nS\n")


def test_arc_sweep() -> None:
    doc = make_document()
    doc.circle(50, 50, 10, start=0, finish=90, segments=2)
    text = content(doc)
    assert text.count(" c\n") == 2
    # Counter-clockwise: a quarter turn ends above the centre
    assert text.endswith("50.00 801.89 c\nS\n")


def test_rotated_ellipse_is_wrapped_in_graphics_state() -> None:
    doc = make_document()
    doc.ellipse(50, 50, 20, 10, angle=90)
    text = content(doc)
    assert "q 0.00 1.00 -1.00 0.00 50.00 791.89 cm\n" in text
    assert text.endswith("S\nQ\n")


def test_ellipse_without_radius_draws_nothing() -> None:
    doc = make_document()
    before = content(doc)
    doc.ellipse(50, 50, 0)
    assert content(doc) == before


def test_polygon_closes_the_path() -> None:
    doc = make_document()
    doc.polygon([(0, 0), (10, 0), (10, 10)], "DF")
    assert content(doc).endswith(
        "0.00 841.89 m\n10.00 841.89 l\n10.00 831.89 l\n0.00 841.89 l\nB\n"
    )


def test_regular_polygon_has_at_least_three_sides() -> None:
    doc = make_document()
    doc.regular_polygon(50, 50, 10, 2)
    assert content(doc).count(" l\n") == 3


@pytest.mark.parametrize("vertices, gaps, segments", [(5, 2, 5), (6, 2, 3), (8, 3, 8)])
def test_star_polygon_stops_when_the_path_closes(vertices: int, gaps: int, segments: int) -> None:
    doc = make_document()
    doc.star_polygon(50, 50, 20, vertices, gaps)
    assert content(doc).count(" l\n") == segments


def test_rounded_rect() -> None:
    doc = make_document()
    doc.rounded_rect(10, 10, 50, 30, 5, "F")
    text = content(doc)
    assert "15.00 831.89 m\n" in text
    assert text.count(" c\n") == 4
    assert text.count(" l\n") == 4
    assert text.endswith("f\n")


def test_line_width() -> None:
    doc = Document(unit="pt")
    doc.set_line_width(2)
    doc.add_page()
    assert content(doc).startswith("2 J\n2.00 w\n")
    doc.set_line_width(3)
    assert content(doc).endswith("3.00 w\n")


def test_line_style_keeps_document_line_width() -> None:
    doc = make_document()
    doc.set_line_style(
        LineStyle(width=2, cap=LineCap.ROUND, join=LineJoin.BEVEL, dash=[3, 1], color=(255, 0, 0))
    )
    assert content(doc).endswith("2.00 w\n1 J\n2 j\n[3.00 1.00] 0.00 d\n1.000 0.000 0.000 RG\n")
    assert doc.line_width == pytest.approx(0.567)
    assert doc.draw_color == "1.000 0.000 0.000 RG"


def test_line_style_gray_color_and_reset_dash() -> None:
    doc = make_document()
    doc.set_line_style(LineStyle(dash=[], color=128))
    assert content(doc).endswith("[] 0.00 d\n0.502 G\n")


def test_draw_color_survives_page_break() -> None:
    doc = make_document()
    doc.set_draw_color(255, 0, 0)
    doc.set_fill_color(0, 0, 255)
    doc.add_page()
    assert "1.000 0.000 0.000 RG\n0.000 0.000 1.000 rg\n" in content(doc, 2)


@pytest.mark.parametrize(
    "operation",
    [
        lambda doc: doc.line(0, 0, 1, 1),
        lambda doc: doc.rect(0, 0, 1, 1),
        lambda doc: doc.circle(5, 5, 1),
        lambda doc: doc.polygon([(0, 0), (1, 1)]),
        lambda doc: doc.rounded_rect(0, 0, 10, 10, 2),
    ],
)
def test_drawing_requires_an_open_page(operation) -> None:
    with pytest.raises(DocumentStateError):
        operation(Document())
