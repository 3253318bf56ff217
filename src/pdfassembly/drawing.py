"""Vector drawing operators for the page content stream.

:class:`GraphicsMixin` expects the host to provide ``k`` (points per user
unit), ``h`` (current page height in user units), ``line_width``, ``page``,
``set_draw_color`` and ``_out`` (append one line to the current page).
Coordinates are in user units, top-down; every operator converts them to
bottom-up points.
"""

from __future__ import annotations

from dataclasses import dataclass
import functools
import math
from typing import Optional, Sequence, Tuple, Union

from .enums import DocumentState, DrawMode, LineCap, LineJoin
from .errors import DocumentStateError
from .units import flip_y

Point = Tuple[float, float]
Color = Union[int, Tuple[int, int, int]]

# Distance of the Bezier control points from the end points of a quarter circle
ARC_CONTROL = 4 / 3 * (math.sqrt(2) - 1)


def check_page(fn):
    """Reject content operators while no page is being written."""

    @functools.wraps(fn)
    def wrapper(self, *args, **kwargs):
        if self.state is not DocumentState.IN_PAGE:
            raise DocumentStateError("No page open, you need to call add_page() first")
        return fn(self, *args, **kwargs)

    return wrapper


@dataclass
class LineStyle:
    """Line settings applied together by :meth:`GraphicsMixin.set_line_style`.

    ``None`` leaves the corresponding setting untouched.
    """

    width: Optional[float] = None
    cap: Optional[LineCap] = None
    join: Optional[LineJoin] = None
    dash: Optional[Sequence[float]] = None
    phase: float = 0
    color: Optional[Color] = None


class GraphicsMixin:
    def _point(self, x: float, y: float) -> None:
        self._out(f"{x * self.k:.2f} {flip_y(y, self.h, self.k):.2f} m")

    def _line_to(self, x: float, y: float) -> None:
        self._out(f"{x * self.k:.2f} {flip_y(y, self.h, self.k):.2f} l")

    def _curve_to(self, x1, y1, x2, y2, x3, y3) -> None:
        k, h = self.k, self.h
        self._out(
            f"{x1 * k:.2f} {(h - y1) * k:.2f} {x2 * k:.2f} {(h - y2) * k:.2f} "
            f"{x3 * k:.2f} {(h - y3) * k:.2f} c"
        )

    def set_line_width(self, width: float) -> None:
        self.line_width = width
        if self.page > 0:
            self._out(f"{width * self.k:.2f} w")

    def set_line_style(self, style: LineStyle) -> None:
        """Apply *style* to the following paths.

        The width is written to the stream but the document's remembered line
        width is kept, so the next page still starts with the previous one.
        """

        if style.width is not None:
            previous = self.line_width
            self.set_line_width(style.width)
            self.line_width = previous
        if style.cap is not None:
            self._out(f"{int(style.cap)} J")
        if style.join is not None:
            self._out(f"{int(style.join)} j")
        if style.dash is not None:
            dashes = " ".join(f"{dash:.2f}" for dash in style.dash)
            self._out(f"[{dashes}] {style.phase:.2f} d")
        if style.color is not None:
            if isinstance(style.color, int):
                self.set_draw_color(style.color)
            else:
                self.set_draw_color(*style.color)

    @check_page
    def line(self, x1: float, y1: float, x2: float, y2: float) -> None:
        k, h = self.k, self.h
        self._out(f"{x1 * k:.2f} {(h - y1) * k:.2f} m {x2 * k:.2f} {(h - y2) * k:.2f} l S")

    @check_page
    def rect(self, x: float, y: float, w: float, h: float, style=DrawMode.DRAW) -> None:
        op = DrawMode.coerce(style).value
        k = self.k
        self._out(f"{x * k:.2f} {(self.h - y) * k:.2f} {w * k:.2f} {-h * k:.2f} re {op}")

    @check_page
    def curve(
        self, x0, y0, x1, y1, x2, y2, x3, y3, style=DrawMode.DRAW
    ) -> None:
        """Cubic Bezier from ``(x0, y0)`` to ``(x3, y3)`` with two control points."""

        op = DrawMode.coerce(style).value
        self._point(x0, y0)
        self._curve_to(x1, y1, x2, y2, x3, y3)
        self._out(op)

    @check_page
    def ellipse(
        self,
        x: float,
        y: float,
        rx: float,
        ry: float = 0,
        angle: float = 0,
        start: float = 0,
        finish: float = 360,
        style=DrawMode.DRAW,
        segments: int = 8,
    ) -> None:
        """Draw an ellipse (or an arc of one) centred on ``(x, y)``.

        The outline is approximated by *segments* Bezier curves. A non-zero
        *angle* rotates the ellipse counter-clockwise around its centre.
        """

        if rx <= 0:
            return
        op = DrawMode.coerce(style).value
        if ry <= 0:
            ry = rx
        k, h = self.k, self.h
        rx *= k
        ry *= k
        segments = max(segments, 2)
        start_rad = math.radians(start)
        total = math.radians(finish) - start_rad
        dt = total / segments
        dtm = dt / 3
        x0 = x * k
        y0 = (h - y) * k
        if angle != 0:
            a = -math.radians(angle)
            self._out(
                f"q {math.cos(a):.2f} {-math.sin(a):.2f} {math.sin(a):.2f} "
                f"{math.cos(a):.2f} {x0:.2f} {y0:.2f} cm"
            )
            x0 = y0 = 0

        t = start_rad
        a0 = x0 + rx * math.cos(t)
        b0 = y0 + ry * math.sin(t)
        c0 = -rx * math.sin(t)
        d0 = ry * math.cos(t)
        self._point(a0 / k, h - b0 / k)
        for i in range(1, segments + 1):
            t = i * dt + start_rad
            a1 = x0 + rx * math.cos(t)
            b1 = y0 + ry * math.sin(t)
            c1 = -rx * math.sin(t)
            d1 = ry * math.cos(t)
            self._curve_to(
                (a0 + c0 * dtm) / k,
                h - (b0 + d0 * dtm) / k,
                (a1 - c1 * dtm) / k,
                h - (b1 - d1 * dtm) / k,
                a1 / k,
                h - b1 / k,
            )
            a0, b0, c0, d0 = a1, b1, c1, d1
        self._out(op)
        if angle != 0:
            self._out("Q")

    def circle(
        self, x: float, y: float, r: float, start: float = 0, finish: float = 360,
        style=DrawMode.DRAW, segments: int = 8,
    ) -> None:
        self.ellipse(x, y, r, 0, 0, start, finish, style, segments)

    @check_page
    def polygon(self, points: Sequence[Point], style=DrawMode.DRAW) -> None:
        """Closed path through *points*, back to the first one."""

        op = DrawMode.coerce(style).value
        first_x, first_y = points[0]
        self._point(first_x, first_y)
        for px, py in points[1:]:
            self._line_to(px, py)
        self._line_to(first_x, first_y)
        self._out(op)

    def regular_polygon(
        self, x: float, y: float, r: float, sides: int, angle: float = 0, style=DrawMode.DRAW
    ) -> None:
        sides = max(sides, 3)
        points = []
        for i in range(sides):
            a = math.radians(angle + i * 360 / sides)
            points.append((x + r * math.sin(a), y + r * math.cos(a)))
        self.polygon(points, style)

    @check_page
    def star_polygon(
        self,
        x: float,
        y: float,
        r: float,
        vertices: int,
        gaps: int,
        angle: float = 0,
        style=DrawMode.DRAW,
    ) -> None:
        """Join every *gaps*-th vertex of a regular polygon until the path closes."""

        vertices = max(vertices, 2)
        corners = []
        for i in range(vertices):
            a = math.radians(angle + i * 360 / vertices)
            corners.append((x + r * math.sin(a), y + r * math.cos(a)))
        visited = [False] * vertices
        points = []
        i = 0
        while not visited[i]:
            visited[i] = True
            points.append(corners[i])
            i = (i + gaps) % vertices
        self.polygon(points, style)

    @check_page
    def rounded_rect(
        self, x: float, y: float, w: float, h: float, r: float, style=DrawMode.DRAW
    ) -> None:
        op = DrawMode.coerce(style).value
        arc = ARC_CONTROL
        self._point(x + r, y)
        xc = x + w - r
        yc = y + r
        self._line_to(xc, y)
        self._curve_to(xc + r * arc, yc - r, xc + r, yc - r * arc, xc + r, yc)
        yc = y + h - r
        self._line_to(x + w, yc)
        self._curve_to(xc + r, yc + r * arc, xc + r * arc, yc + r, xc, yc + r)
        xc = x + r
        self._line_to(xc, y + h)
        self._curve_to(xc - r * arc, yc + r, xc - r, yc + r * arc, xc - r, yc)
        yc = y + r
        self._line_to(x, yc)
        self._curve_to(xc - r, yc - r * arc, xc - r * arc, yc - r, xc, yc - r)
        self._out(op)


__all__ = ["ARC_CONTROL", "GraphicsMixin", "LineStyle", "check_page"]
