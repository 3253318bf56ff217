"""Document state machine, page manager and text/image placement API."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import logging
import os
from typing import Dict, List, Optional, Union

from .drawing import GraphicsMixin, check_page
from .enums import Align, BreakMode, DocumentState, Layout, Orientation, Position, ScaleMode, Zoom
from .errors import DocumentStateError
from .fonts import (
    FAMILY_ALIASES,
    SYMBOLIC_FAMILIES,
    CoreFontMetrics,
    Font,
    FontRegistry,
    encode_text,
    font_key,
    normalize_style,
)
from .image_datastructures import ImageInfo, ImageRegistry
from .images import ImageSource, load_image, read_source, resolve_kind
from .layout import (
    BreakKind,
    FlowKind,
    character_spacing,
    fit_ratio,
    max_units,
    split_flowing,
    split_paragraph,
    string_width,
    word_spacing,
)
from .pdf_writer import build_pdf, escape_string
from .storage import save_pdf, write_pdf
from .units import PageFormat, page_size, scale_factor

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class UriTarget:
    uri: str


@dataclass(frozen=True)
class InternalTarget:
    link_id: int


LinkTarget = Union[UriTarget, InternalTarget]


@dataclass
class PageLink:
    # Rectangle in points: top-left corner (bottom-up y), width and height
    x: float
    y: float
    w: float
    h: float
    target: LinkTarget


@dataclass
class LinkDestination:
    page: int = 0
    y: float = 0


@dataclass
class Page:
    number: int
    content: bytearray = field(default_factory=bytearray)
    orientation_changed: bool = False
    links: List[PageLink] = field(default_factory=list)


class Document(GraphicsMixin):
    """A PDF document built page by page.

    Positions and sizes are expressed in user units (``unit``) from the
    top-left corner of the page. Subclasses may override :meth:`header` and
    :meth:`footer`, which run at the start and end of every page, and
    :meth:`accept_page_break` to control automatic page breaks.
    """

    producer = "pdfassembly"

    def __init__(
        self,
        orientation: Union[Orientation, str] = "P",
        unit: Union[str, float] = "mm",
        format: PageFormat = "A4",
        metrics: Optional[CoreFontMetrics] = None,
    ):
        self.state = DocumentState.UNOPENED
        self.page = 0  # current page number
        self.pages: Dict[int, Page] = {}
        self.fonts = FontRegistry(metrics)
        self.images = ImageRegistry()
        self.links: Dict[int, LinkDestination] = {}  # internal link destinations
        self.buffer: Optional[bytes] = None  # final PDF, set by close()
        self.in_footer = False
        self.lasth = 0.0  # height of the last cell printed

        self.font_family = ""
        self.font_style = ""
        self.font_size_pt = 12.0
        self.underline = False
        self.current_font: Optional[Font] = None
        self.draw_color = "0 G"
        self.fill_color = "0 g"
        self.text_color = "0 g"
        self.color_flag = False  # text color differs from fill color
        self.ws = 0.0  # word spacing

        self.k = scale_factor(unit)
        self.fw_pt, self.fh_pt = page_size(format, self.k)
        self.fw = self.fw_pt / self.k
        self.fh = self.fh_pt / self.k
        orientation = Orientation.coerce(orientation)
        self.def_orientation = self.cur_orientation = orientation
        if orientation is Orientation.PORTRAIT:
            self.w_pt, self.h_pt = self.fw_pt, self.fh_pt
        else:
            self.w_pt, self.h_pt = self.fh_pt, self.fw_pt
        self.w = self.w_pt / self.k
        self.h = self.h_pt / self.k
        self.font_size = self.font_size_pt / self.k

        # Page margins (1 cm)
        margin = 28.35 / self.k
        self.set_margins(margin, margin)
        # Interior cell margin (1 mm)
        self.c_margin = margin / 10
        # Line width (0.2 mm)
        self.line_width = 0.567 / self.k
        self.set_auto_page_break(True, 2 * margin)
        self.set_display_mode(Zoom.FULLWIDTH, Layout.DEFAULT)
        self.compress = False
        self.pdf_version = "1.3"
        self.title: Optional[str] = None
        self.subject: Optional[str] = None
        self.author: Optional[str] = None
        self.keywords: Optional[str] = None
        self.creator: Optional[str] = None
        self.creation_date: Optional[datetime] = None
        self.alias_nb_pages: Optional[str] = None
        self.x = self.l_margin
        self.y = self.t_margin

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_margins(self, left: float, top: float, right: Optional[float] = None) -> None:
        """Set left, top and right margins; *right* defaults to *left*."""

        self.l_margin = left
        self.t_margin = top
        self.r_margin = left if right is None else right

    def set_left_margin(self, margin: float) -> None:
        self.l_margin = margin
        if self.page > 0 and self.x < margin:
            self.x = margin

    def set_top_margin(self, margin: float) -> None:
        self.t_margin = margin

    def set_right_margin(self, margin: float) -> None:
        self.r_margin = margin

    def set_auto_page_break(self, auto: bool, margin: float = 0) -> None:
        self.auto_page_break = auto
        self.b_margin = margin
        self.page_break_trigger = self.h - margin

    def set_display_mode(self, zoom, layout=None) -> None:
        """Set how viewers open the document.

        *zoom* is a :class:`Zoom` (or its name) or a zoom factor in percent;
        *layout* is a :class:`Layout` (or its name).
        """

        if isinstance(zoom, (int, float)):
            if zoom > 0:
                self.zoom_mode = None
                self.zoom_factor = zoom
        else:
            self.zoom_mode = Zoom.coerce(zoom)
            self.zoom_factor = 0
        if layout is not None:
            self.layout_mode = Layout.coerce(layout)

    def set_compression(self, compress: bool) -> None:
        self.compress = compress

    def set_title(self, title: str) -> None:
        self.title = title

    def set_subject(self, subject: str) -> None:
        self.subject = subject

    def set_author(self, author: str) -> None:
        self.author = author

    def set_keywords(self, keywords: str) -> None:
        self.keywords = keywords

    def set_creator(self, creator: str) -> None:
        self.creator = creator

    def set_creation_date(self, date: datetime) -> None:
        self.creation_date = date

    def alias_page_count_token(self, alias: str = "{nb}") -> None:
        """Replace *alias* with the total number of pages when the document is closed."""

        self.alias_nb_pages = alias

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def open(self) -> None:
        if self.state is DocumentState.FINISHED:
            raise DocumentStateError("The document is already closed")
        if self.state is DocumentState.UNOPENED:
            self.state = DocumentState.OPENED

    def close(self) -> None:
        """Terminate the document and serialize it into :attr:`buffer`."""

        if self.state is DocumentState.FINISHED:
            return
        if self.page == 0:
            self.add_page()
        # The last page is already sealed when a previous attempt failed to serialize
        if self.state is DocumentState.IN_PAGE:
            self.in_footer = True
            self.footer()
            self.in_footer = False
            self._endpage()
        self.buffer = build_pdf(self)
        self.state = DocumentState.FINISHED

    def add_page(self, orientation: Union[Orientation, str, None] = None) -> None:
        if self.state is DocumentState.FINISHED:
            raise DocumentStateError("Cannot add a page to a closed document")
        if self.state is DocumentState.UNOPENED:
            self.open()
        family = self.font_family
        style = self.font_style
        size = self.font_size_pt
        lw = self.line_width
        dc = self.draw_color
        fc = self.fill_color
        tc = self.text_color
        cf = self.color_flag
        if self.page > 0:
            self.in_footer = True
            self.footer()
            self.in_footer = False
            self._endpage()

        if orientation is None:
            self._beginpage(self.def_orientation)
        else:
            self._beginpage(Orientation.coerce(orientation))
        # Set line cap style to square
        self._out("2 J")
        self.line_width = lw
        self._out(f"{lw * self.k:.2f} w")
        if family:
            self.set_font(family, style, size)
        self.draw_color = dc
        if dc != "0 G":
            self._out(dc)
        self.fill_color = fc
        if fc != "0 g":
            self._out(fc)
        self.text_color = tc
        self.color_flag = cf

        self.header()

        # Restore what the header changed
        if self.line_width != lw:
            self.line_width = lw
            self._out(f"{lw * self.k:.2f} w")
        if family:
            self.set_font(family, style, size)
        if self.draw_color != dc:
            self.draw_color = dc
            self._out(dc)
        if self.fill_color != fc:
            self.fill_color = fc
            self._out(fc)
        self.text_color = tc
        self.color_flag = cf

    def header(self) -> None:
        """Called at the start of every page; does nothing unless overridden."""

    def footer(self) -> None:
        """Called at the end of every page; does nothing unless overridden."""

    def accept_page_break(self) -> bool:
        return self.auto_page_break

    def page_no(self) -> int:
        return self.page

    def output(self, dest=None) -> Optional[bytes]:
        """Close the document if needed and deliver the PDF.

        Without *dest* the PDF is returned as bytes. A path writes it to that
        file and a binary stream receives it through ``write``.
        """

        if self.state is not DocumentState.FINISHED:
            self.close()
        if dest is None:
            return self.buffer
        if isinstance(dest, (str, os.PathLike)):
            save_pdf(self, dest)
        else:
            write_pdf(self, dest)
        return None

    def _beginpage(self, orientation: Orientation) -> None:
        self.page += 1
        page = Page(self.page)
        self.pages[self.page] = page
        self.state = DocumentState.IN_PAGE
        self.x = self.l_margin
        self.y = self.t_margin
        self.font_family = ""
        if orientation is not self.def_orientation:
            page.orientation_changed = True
        if orientation is not self.cur_orientation:
            if orientation is Orientation.PORTRAIT:
                self.w_pt, self.h_pt = self.fw_pt, self.fh_pt
                self.w, self.h = self.fw, self.fh
            else:
                self.w_pt, self.h_pt = self.fh_pt, self.fw_pt
                self.w, self.h = self.fh, self.fw
            self.page_break_trigger = self.h - self.b_margin
            self.cur_orientation = orientation
        LOGGER.debug("Starting page %d (%s)", self.page, orientation.name.lower())

    def _endpage(self) -> None:
        self.state = DocumentState.OPENED

    def _out(self, s: str) -> None:
        if self.state is not DocumentState.IN_PAGE:
            raise DocumentStateError("No page open, you need to call add_page() first")
        self.pages[self.page].content += encode_text(s) + b"\n"

    # ------------------------------------------------------------------
    # Fonts and colors
    # ------------------------------------------------------------------
    def set_font(self, family: Optional[str] = None, style="", size: float = 0) -> None:
        """Select a standard font; *size* is in points, 0 keeps the current size.

        *style* combines ``B`` (bold), ``I`` (italic) and ``U`` (underline).
        """

        if family is None:
            family = self.font_family
        family = family.lower()
        family = FAMILY_ALIASES.get(family, family)
        if family in SYMBOLIC_FAMILIES:
            style = ""
        style = normalize_style(style)
        if size == 0:
            size = self.font_size_pt
        if self.font_family == family and self.font_style == style and self.font_size_pt == size:
            return
        font = self.fonts.get_or_create(font_key(family, style), family, style)
        self.underline = "U" in style
        self.font_family = family
        self.font_style = style
        self.font_size_pt = size
        self.font_size = size / self.k
        self.current_font = font
        if self.page > 0:
            self._out(f"BT /F{font.index} {size:.2f} Tf ET")

    def set_font_size(self, size: float) -> None:
        if self.font_size_pt == size:
            return
        self.font_size_pt = size
        self.font_size = size / self.k
        if self.page > 0 and self.current_font is not None:
            self._out(f"BT /F{self.current_font.index} {size:.2f} Tf ET")

    def set_font_style(self, style: str) -> None:
        self.set_font(self.font_family, style, self.font_size_pt)

    @staticmethod
    def _color(r, g, b, gray_op: str, rgb_op: str) -> str:
        if g is None or (r == g and g == b):
            return f"{r / 255:.3f} {gray_op}"
        return f"{r / 255:.3f} {g / 255:.3f} {b / 255:.3f} {rgb_op}"

    def set_draw_color(self, r: int, g: Optional[int] = None, b: Optional[int] = None) -> None:
        self.draw_color = self._color(r, g, b, "G", "RG")
        if self.page > 0:
            self._out(self.draw_color)

    def set_fill_color(self, r: int, g: Optional[int] = None, b: Optional[int] = None) -> None:
        self.fill_color = self._color(r, g, b, "g", "rg")
        self.color_flag = self.fill_color != self.text_color
        if self.page > 0:
            self._out(self.fill_color)

    def set_text_color(self, r: int, g: Optional[int] = None, b: Optional[int] = None) -> None:
        self.text_color = self._color(r, g, b, "g", "rg")
        self.color_flag = self.fill_color != self.text_color

    def _font(self) -> Font:
        if self.current_font is None:
            raise DocumentStateError("No font has been set, call set_font() first")
        return self.current_font

    def get_string_width(self, s: str) -> float:
        return string_width(self._font().widths, self.font_size, s)

    # ------------------------------------------------------------------
    # Cursor
    # ------------------------------------------------------------------
    def get_x(self) -> float:
        return self.x

    def set_x(self, x: float) -> None:
        """Set the abscissa; a negative value is measured from the right edge."""

        self.x = x if x >= 0 else self.w + x

    def get_y(self) -> float:
        return self.y

    def set_y(self, y: float) -> None:
        """Set the ordinate and move back to the left margin.

        A negative value is measured from the bottom of the page.
        """

        self.x = self.l_margin
        self.y = y if y >= 0 else self.h + y

    def set_xy(self, x: float, y: float) -> None:
        self.set_y(y)
        self.set_x(x)

    def ln(self, h: Optional[float] = None) -> None:
        """Line feed; the height defaults to the last cell's."""

        self.x = self.l_margin
        self.y += self.lasth if h is None else h

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------
    def _dounderline(self, x: float, y: float, txt: str) -> str:
        font = self._font()
        w = self.get_string_width(txt) + self.ws * txt.count(" ")
        return (
            f"{x * self.k:.2f} "
            f"{(self.h - (y - font.underline_position / 1000 * self.font_size)) * self.k:.2f} "
            f"{w * self.k:.2f} {-font.underline_thickness / 1000 * self.font_size_pt:.2f} re f"
        )

    @check_page
    def text(self, x: float, y: float, txt: str) -> None:
        """Print *txt* with its baseline origin at ``(x, y)``."""

        s = f"BT {x * self.k:.2f} {(self.h - y) * self.k:.2f} Td ({escape_string(txt)}) Tj ET"
        if self.underline and txt:
            s += " " + self._dounderline(x, y, txt)
        if self.color_flag:
            s = f"q {self.text_color} {s} Q"
        self._out(s)

    @check_page
    def cell(
        self,
        w: float,
        h: float = 0,
        txt: str = "",
        border: Union[int, str] = 0,
        ln: BreakMode = Position.RIGHT,
        align: Union[Align, str, None] = "",
        fill: bool = False,
        link=None,
    ) -> None:
        """Print a rectangular area with optional borders, background and text.

        *border* is 0, 1 (frame) or a string of the edges to draw among
        ``L``, ``T``, ``R`` and ``B``. *ln* tells where the cursor goes
        afterwards. A width of 0 extends the cell to the right margin.
        """

        k = self.k
        if self.y + h > self.page_break_trigger and not self.in_footer and self.accept_page_break():
            # Automatic page break
            x = self.x
            ws = self.ws
            if ws > 0:
                self.ws = 0
                self._out("0 Tw")
            self.add_page(self.cur_orientation)
            self.x = x
            if ws > 0:
                self.ws = ws
                self._out(f"{ws * k:.3f} Tw")
        if w == 0:
            w = self.w - self.r_margin - self.x
        s = ""
        if fill or border == 1:
            if fill:
                op = "B" if border == 1 else "f"
            else:
                op = "S"
            s = f"{self.x * k:.2f} {(self.h - self.y) * k:.2f} {w * k:.2f} {-h * k:.2f} re {op} "
        if isinstance(border, str):
            x = self.x
            y = self.y
            top = (self.h - y) * k
            bottom = (self.h - (y + h)) * k
            if "L" in border:
                s += f"{x * k:.2f} {top:.2f} m {x * k:.2f} {bottom:.2f} l S "
            if "T" in border:
                s += f"{x * k:.2f} {top:.2f} m {(x + w) * k:.2f} {top:.2f} l S "
            if "R" in border:
                s += f"{(x + w) * k:.2f} {top:.2f} m {(x + w) * k:.2f} {bottom:.2f} l S "
            if "B" in border:
                s += f"{x * k:.2f} {bottom:.2f} m {(x + w) * k:.2f} {bottom:.2f} l S "
        if txt:
            align = Align.coerce(align) if align else None
            if align is Align.RIGHT:
                dx = w - self.c_margin - self.get_string_width(txt)
            elif align is Align.CENTER:
                dx = (w - self.get_string_width(txt)) / 2
            else:
                dx = self.c_margin
            if self.color_flag:
                s += f"q {self.text_color} "
            baseline = self.y + 0.5 * h + 0.3 * self.font_size
            s += (
                f"BT {(self.x + dx) * k:.2f} {(self.h - baseline) * k:.2f} "
                f"Td ({escape_string(txt)}) Tj ET"
            )
            if self.underline:
                s += " " + self._dounderline(self.x + dx, baseline, txt)
            if self.color_flag:
                s += " Q"
            if link:
                self.link(
                    self.x + dx,
                    self.y + 0.5 * h - 0.5 * self.font_size,
                    self.get_string_width(txt),
                    self.font_size,
                    link,
                )
        if s:
            self._out(s)
        self.lasth = h
        if ln > 0:
            # Go to next line
            self.y += h
            if ln == Position.NEXT_LINE:
                self.x = self.l_margin
        else:
            self.x += w

    @check_page
    def cell_fit(
        self,
        w: float,
        h: float = 0,
        txt: str = "",
        border: Union[int, str] = 0,
        ln: BreakMode = Position.RIGHT,
        align: Union[Align, str, None] = "",
        fill: bool = False,
        link=None,
        scale: Union[ScaleMode, str] = ScaleMode.HORIZONTAL,
        force: bool = True,
    ) -> None:
        """Print a cell, squeezing (or with *force*, stretching) the text to its width.

        With ``ScaleMode.CHARSPACE`` the character spacing absorbs the
        difference; with ``ScaleMode.HORIZONTAL`` the glyphs are scaled.
        """

        scale = ScaleMode.coerce(scale)
        str_width = self.get_string_width(txt)
        if w == 0:
            w = self.w - self.r_margin - self.x
        fit = False
        if str_width > 0:
            ratio = fit_ratio(w, self.c_margin, str_width)
            fit = ratio < 1 or (ratio > 1 and force)
        if not fit:
            self.cell(w, h, txt, border, ln, align, fill, link)
            return
        if scale is ScaleMode.CHARSPACE:
            spacing = character_spacing(w, self.c_margin, str_width, len(txt), self.k)
            self._out(f"BT {spacing:.2f} Tc ET")
        else:
            self._out(f"BT {ratio * 100:.2f} Tz ET")
        # The text fills the cell, alignment does not apply
        self.cell(w, h, txt, border, ln, None, fill, link)
        if scale is ScaleMode.CHARSPACE:
            self._out("BT 0 Tc ET")
        else:
            self._out("BT 100 Tz ET")

    def cell_fit_scale(self, w, h=0, txt="", border=0, ln=0, align="", fill=False, link=None):
        self.cell_fit(w, h, txt, border, ln, align, fill, link, ScaleMode.HORIZONTAL, False)

    def cell_fit_scale_force(self, w, h=0, txt="", border=0, ln=0, align="", fill=False, link=None):
        self.cell_fit(w, h, txt, border, ln, align, fill, link, ScaleMode.HORIZONTAL, True)

    def cell_fit_space(self, w, h=0, txt="", border=0, ln=0, align="", fill=False, link=None):
        self.cell_fit(w, h, txt, border, ln, align, fill, link, ScaleMode.CHARSPACE, False)

    def cell_fit_space_force(self, w, h=0, txt="", border=0, ln=0, align="", fill=False, link=None):
        self.cell_fit(w, h, txt, border, ln, align, fill, link, ScaleMode.CHARSPACE, True)

    @check_page
    def multi_cell(
        self,
        w: float,
        h: float,
        txt: str,
        border: Union[int, str] = 0,
        align: Union[Align, str, None] = Align.JUSTIFY,
        fill: bool = False,
    ) -> None:
        """Print *txt* as a column of cells, wrapping at spaces and newlines.

        Justified lines get their word spacing set with ``Tw``. The top
        border only applies to the first line and the bottom border to the
        last one. The cursor ends below the text, at the left margin.
        """

        font = self._font()
        if w == 0:
            w = self.w - self.r_margin - self.x
        wmax = max_units(w, self.c_margin, self.font_size)
        align = Align.coerce(align) if align else None
        justify = align is None or align is Align.JUSTIFY
        b: Union[int, str] = 0
        b2 = ""
        if border:
            if border == 1:
                border = "LTRB"
                b = "LRT"
                b2 = "LR"
            else:
                b2 = "".join(edge for edge in "LR" if edge in border)
                b = b2 + "T" if "T" in border else b2
        nl = 1
        for line in split_paragraph(txt, font.widths, wmax):
            if line.kind is BreakKind.LAST:
                if self.ws > 0:
                    self.ws = 0
                    self._out("0 Tw")
                if border and "B" in border:
                    b += "B"
                self.cell(w, h, line.text, b, Position.BELOW, align, fill)
                break
            if line.kind is BreakKind.WORD:
                if justify:
                    self.ws = word_spacing(wmax, line.width_to_space, line.spaces, self.font_size)
                    self._out(f"{self.ws * self.k:.3f} Tw")
            elif self.ws > 0:
                self.ws = 0
                self._out("0 Tw")
            self.cell(w, h, line.text, b, Position.BELOW, align, fill)
            nl += 1
            if border and nl == 2:
                b = b2
        self.x = self.l_margin

    @check_page
    def write(self, h: float, txt: str, link=None) -> None:
        """Print flowing text from the current position, wrapping at the right margin.

        The cursor stays at the end of the text, so further calls continue on
        the same line.
        """

        font = self._font()
        w = self.w - self.r_margin - self.x
        full_w = self.w - self.r_margin - self.l_margin
        pieces = split_flowing(
            txt,
            font.widths,
            max_units(w, self.c_margin, self.font_size),
            max_units(full_w, self.c_margin, self.font_size),
            self.x > self.l_margin,
        )
        first = True
        for piece in pieces:
            if piece.kind is FlowKind.TAIL:
                self.cell(piece.units / 1000 * self.font_size, h, piece.text, link=link)
                break
            if piece.kind is FlowKind.MOVE:
                self.x = self.l_margin
                self.y += h
            else:
                self.cell(w, h, piece.text, ln=Position.BELOW, link=link)
            if first:
                first = False
                self.x = self.l_margin
                w = full_w

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    @check_page
    def image(
        self,
        source: ImageSource,
        x: float,
        y: float,
        w: float = 0,
        h: float = 0,
        type=None,
        link=None,
        name: Optional[str] = None,
    ) -> ImageInfo:
        """Place a PNG, JPEG or GIF image with its top-left corner at ``(x, y)``.

        *source* is a path or the raw file content. The image is parsed the
        first time its key (*name*, the path, or a digest of the bytes) is
        seen and reused afterwards. A zero *w* or *h* is derived from the
        pixel size, keeping the aspect ratio.
        """

        key, info = self._register_image(source, type, name)
        self._place_image(info, x, y, w, h, link)
        if info.alpha_mask is not None:
            mask_key = f"mask-of-{key}"
            mask = self.images.get(mask_key)
            if mask is None:
                mask = self.images.register(mask_key, info.alpha_mask)
            assert mask.alpha_mask is None, "alpha masks never carry an alpha channel themselves"
            # Off the page: the mask must be used by the page to be written out
            self._place_image(mask, self.w + 10, 0, 0, 0, None)
        return info

    def _register_image(self, source: ImageSource, type, name: Optional[str]):
        if isinstance(source, (bytes, bytearray)):
            key, data = read_source(source, name)
            info = self.images.get(key)
            if info is not None:
                return key, info
            kind = resolve_kind(key, type)
        else:
            key = name or os.fspath(source)
            info = self.images.get(key)
            if info is not None:
                return key, info
            kind = resolve_kind(os.fspath(source), type)
            key, data = read_source(source, key)
        info = self.images.register(key, load_image(data, kind, key))
        LOGGER.debug("Registered image %s as /I%d", key, info.index)
        return key, info

    def _place_image(self, info: ImageInfo, x: float, y: float, w: float, h: float, link) -> None:
        w, h = info.size_in_document_units(w, h, self.k)
        k = self.k
        self._out(
            f"q {w * k:.2f} 0 0 {h * k:.2f} {x * k:.2f} {(self.h - (y + h)) * k:.2f} cm "
            f"/I{info.index} Do Q"
        )
        if link:
            self.link(x, y, w, h, link)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------
    def add_link(self) -> int:
        """Create an internal link and return its identifier."""

        link_id = len(self.links) + 1
        self.links[link_id] = LinkDestination()
        return link_id

    def set_link(self, link_id: int, y: float = 0, page: int = -1) -> None:
        """Point *link_id* at ordinate *y* of *page*.

        ``y=-1`` means the current position, ``page=-1`` the current page.
        """

        if y == -1:
            y = self.y
        if page == -1:
            page = self.page
        self.links[link_id] = LinkDestination(page, y)

    @check_page
    def link(self, x: float, y: float, w: float, h: float, target) -> None:
        """Make a rectangle of the current page clickable.

        *target* is a URI string, an identifier returned by :meth:`add_link`,
        or a :class:`UriTarget` / :class:`InternalTarget`.
        """

        if isinstance(target, (UriTarget, InternalTarget)):
            resolved = target
        elif isinstance(target, str):
            resolved = UriTarget(target)
        else:
            resolved = InternalTarget(int(target))
        k = self.k
        self.pages[self.page].links.append(PageLink(x * k, self.h_pt - y * k, w * k, h * k, resolved))


__all__ = [
    "Document",
    "InternalTarget",
    "LinkDestination",
    "LinkTarget",
    "Page",
    "PageLink",
    "UriTarget",
]
