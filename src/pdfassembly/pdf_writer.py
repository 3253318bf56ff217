"""PDF serialization of a closed document.

Objects are written in this order: pages (page dictionary then content
stream, numbered from 3), the page tree root (1), fonts, images (each
followed by its palette when indexed), the resource dictionary (2), the
document information dictionary and the catalog. The cross-reference table
records, for every object, the output position of its ``N 0 obj`` line.
"""

from __future__ import annotations

from datetime import datetime
from io import BytesIO
import logging
from typing import TYPE_CHECKING, Dict, Union
import zlib

from .enums import Layout, Orientation, Zoom
from .errors import PDFAssemblyError
from .fonts import encode_text
from .units import format_number

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document, Page

LOGGER = logging.getLogger(__name__)

ZOOM_ACTIONS = {
    Zoom.FULLPAGE: "/Fit",
    Zoom.FULLWIDTH: "/FitH null",
    Zoom.REAL: "/XYZ null null 1",
}

PAGE_LAYOUTS = {
    Layout.SINGLE: "/SinglePage",
    Layout.CONTINUOUS: "/OneColumn",
    Layout.TWO: "/TwoColumnLeft",
}


def escape_string(s: str) -> str:
    """Escape *s* for use inside a PDF literal string."""

    return s.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def text_string(s: str) -> str:
    return f"({escape_string(s)})"


class _ObjectWriter:
    """Output buffer keeping track of object numbers and offsets."""

    def __init__(self) -> None:
        self.buffer = BytesIO()
        self.offsets: Dict[int, int] = {}
        # Objects 1 and 2 are reserved for the page tree and the resources
        self.n = 2

    def out(self, data: Union[str, bytes]) -> None:
        if isinstance(data, str):
            data = encode_text(data)
        self.buffer.write(data)
        self.buffer.write(b"\n")

    def begin_object(self, number: int = 0) -> int:
        """Start a new object, or one of the reserved ones when *number* is given."""

        if not number:
            self.n += 1
            number = self.n
        self.offsets[number] = self.buffer.tell()
        self.out(f"{number} 0 obj")
        return number

    def begin_numbered(self, expected: int) -> None:
        number = self.begin_object()
        if number != expected:  # pragma: no cover - numbering is precomputed
            raise PDFAssemblyError(f"Object {number} was expected to be number {expected}")

    def put_stream(self, data: bytes) -> None:
        self.out("stream")
        self.out(data)
        self.out("endstream")


def build_pdf(document: "Document") -> bytes:
    """Serialize a document whose last page has been closed."""

    writer = _ObjectWriter()
    writer.out(f"%PDF-{document.pdf_version}")
    _put_pages(writer, document)
    _assign_object_numbers(writer, document)
    _put_fonts(writer, document)
    _put_images(writer, document)
    _put_resource_dict(writer, document)

    writer.begin_object()
    writer.out("<<")
    _put_info(writer, document)
    writer.out(">>")
    writer.out("endobj")

    writer.begin_object()
    writer.out("<<")
    _put_catalog(writer, document)
    writer.out(">>")
    writer.out("endobj")

    xref_offset = writer.buffer.tell()
    writer.out("xref")
    writer.out(f"0 {writer.n + 1}")
    writer.out("0000000000 65535 f ")
    for number in range(1, writer.n + 1):
        writer.out(f"{writer.offsets[number]:010d} 00000 n ")
    writer.out("trailer")
    writer.out("<<")
    writer.out(f"/Size {writer.n + 1}")
    writer.out(f"/Root {writer.n} 0 R")
    writer.out(f"/Info {writer.n - 1} 0 R")
    writer.out(">>")
    writer.out("startxref")
    writer.out(str(xref_offset))
    writer.out("%%EOF")
    data = writer.buffer.getvalue()
    LOGGER.debug(
        "Serialized %d pages, %d fonts, %d images into %d objects (%d bytes)",
        document.page,
        len(document.fonts),
        len(document.images),
        writer.n,
        len(data),
    )
    return data


def _default_page_size(document: "Document"):
    if document.def_orientation is Orientation.PORTRAIT:
        return document.fw_pt, document.fh_pt
    return document.fh_pt, document.fw_pt


def _put_pages(writer: _ObjectWriter, document: "Document") -> None:
    nb = document.page
    w_pt, h_pt = _default_page_size(document)
    stream_filter = "/Filter /FlateDecode " if document.compress else ""
    alias = document.alias_nb_pages
    for number in range(1, nb + 1):
        page = document.pages[number]
        # Substitute on a copy, the page buffer itself is left untouched
        content = bytes(page.content)
        if alias:
            content = content.replace(encode_text(alias), str(nb).encode("latin-1"))

        writer.begin_object()
        writer.out("<</Type /Page")
        writer.out("/Parent 1 0 R")
        if page.orientation_changed:
            writer.out(f"/MediaBox [0 0 {h_pt:.2f} {w_pt:.2f}]")
        writer.out("/Resources 2 0 R")
        if page.links:
            writer.out(_annotations(document, page, w_pt, h_pt))
        writer.out(f"/Contents {writer.n + 1} 0 R>>")
        writer.out("endobj")

        if document.compress:
            content = zlib.compress(content)
        writer.begin_object()
        writer.out(f"<<{stream_filter}/Length {len(content)}>>")
        writer.put_stream(content)
        writer.out("endobj")

    # Pages root
    writer.begin_object(1)
    writer.out("<</Type /Pages")
    kids = "".join(f"{3 + 2 * index} 0 R " for index in range(nb))
    writer.out(f"/Kids [{kids}]")
    writer.out(f"/Count {nb}")
    writer.out(f"/MediaBox [0 0 {w_pt:.2f} {h_pt:.2f}]")
    writer.out(">>")
    writer.out("endobj")


def _annotations(document: "Document", page: "Page", w_pt: float, h_pt: float) -> str:
    from .document import UriTarget

    parts = ["/Annots ["]
    for link in page.links:
        rect = f"{link.x:.2f} {link.y:.2f} {link.x + link.w:.2f} {link.y - link.h:.2f}"
        parts.append(f"<</Type /Annot /Subtype /Link /Rect [{rect}] /Border [0 0 0] ")
        if isinstance(link.target, UriTarget):
            parts.append(f"/A <</S /URI /URI {text_string(link.target.uri)}>>>>")
            continue
        destination = document.links.get(link.target.link_id)
        if destination is None or destination.page not in document.pages:
            raise PDFAssemblyError(f"Internal link {link.target.link_id} has no destination")
        target_page = document.pages[destination.page]
        height = w_pt if target_page.orientation_changed else h_pt
        parts.append(
            f"/Dest [{1 + 2 * destination.page} 0 R /XYZ 0 "
            f"{height - destination.y * document.k:.2f} null]>>"
        )
    parts.append("]")
    return "".join(parts)


def _assign_object_numbers(writer: _ObjectWriter, document: "Document") -> None:
    # Every image knows its mask's number before either is written
    number = writer.n
    for font in document.fonts:
        number += 1
        font.object_number = number
    for image in document.images:
        number += 1
        image.object_number = number
        number += image.sub_object_count


def _put_fonts(writer: _ObjectWriter, document: "Document") -> None:
    for font in document.fonts:
        writer.begin_numbered(font.object_number)
        writer.out("<</Type /Font")
        writer.out(f"/BaseFont /{font.name}")
        writer.out("/Subtype /Type1")
        if font.encoding:
            writer.out(f"/Encoding /{font.encoding}")
        writer.out(">>")
        writer.out("endobj")


def _put_images(writer: _ObjectWriter, document: "Document") -> None:
    stream_filter = "/Filter /FlateDecode " if document.compress else ""
    for image in document.images:
        writer.begin_numbered(image.object_number)
        writer.out("<</Type /XObject")
        writer.out("/Subtype /Image")
        writer.out(f"/Width {image.width}")
        writer.out(f"/Height {image.height}")
        if image.alpha_mask is not None:
            writer.out(f"/SMask {image.alpha_mask.object_number} 0 R")
        if image.color_space == "Indexed":
            colors = len(image.palette) // 3 - 1
            writer.out(f"/ColorSpace [/Indexed /DeviceRGB {colors} {writer.n + 1} 0 R]")
        else:
            writer.out(f"/ColorSpace /{image.color_space}")
            if image.color_space == "DeviceCMYK":
                writer.out("/Decode [1 0 1 0 1 0 1 0]")
        writer.out(f"/BitsPerComponent {image.bits_per_component}")
        if image.filter:
            writer.out(f"/Filter /{image.filter}")
        if image.decode_parms:
            parms = " ".join(f"/{key} {value}" for key, value in image.decode_parms.items())
            writer.out(f"/DecodeParms <<{parms}>>")
        if image.transparency:
            mask = "".join(f"{value} {value} " for value in image.transparency)
            writer.out(f"/Mask [{mask}]")
        writer.out(f"/Length {len(image.data)}>>")
        writer.put_stream(image.data)
        image.data = b""
        writer.out("endobj")
        if image.color_space == "Indexed":
            palette = zlib.compress(image.palette) if document.compress else image.palette
            writer.begin_object()
            writer.out(f"<<{stream_filter}/Length {len(palette)}>>")
            writer.put_stream(palette)
            writer.out("endobj")


def _put_resource_dict(writer: _ObjectWriter, document: "Document") -> None:
    writer.begin_object(2)
    writer.out("<<")
    writer.out("/ProcSet [/PDF /Text /ImageB /ImageC /ImageI]")
    writer.out("/Font <<")
    for font in document.fonts:
        writer.out(f"/F{font.index} {font.object_number} 0 R")
    writer.out(">>")
    writer.out("/XObject <<")
    for image in document.images:
        writer.out(f"/I{image.index} {image.object_number} 0 R")
    writer.out(">>")
    writer.out(">>")
    writer.out("endobj")


def _put_info(writer: _ObjectWriter, document: "Document") -> None:
    writer.out(f"/Producer {text_string(document.producer)}")
    for key, value in (
        ("Title", document.title),
        ("Subject", document.subject),
        ("Author", document.author),
        ("Keywords", document.keywords),
        ("Creator", document.creator),
    ):
        if value is not None:
            writer.out(f"/{key} {text_string(value)}")
    created = document.creation_date or datetime.now()
    writer.out(f"/CreationDate (D:{created:%Y%m%d%H%M%S})")


def _put_catalog(writer: _ObjectWriter, document: "Document") -> None:
    writer.out("/Type /Catalog")
    writer.out("/Pages 1 0 R")
    if document.zoom_mode is None and document.zoom_factor > 0:
        writer.out(f"/OpenAction [3 0 R /XYZ null null {format_number(document.zoom_factor / 100)}]")
    elif document.zoom_mode in ZOOM_ACTIONS:
        writer.out(f"/OpenAction [3 0 R {ZOOM_ACTIONS[document.zoom_mode]}]")
    if document.layout_mode in PAGE_LAYOUTS:
        writer.out(f"/PageLayout {PAGE_LAYOUTS[document.layout_mode]}")


__all__ = ["build_pdf", "escape_string", "text_string"]
