"""PNG parser used to embed PNG data in PDF files.

The IDAT stream of a non-interlaced PNG with at most 8 bits per component is
directly consumable by a PDF ``/FlateDecode`` filter once the PNG predictor
parameters are supplied, so the parser only walks the chunk structure and
never inflates pixel data. RGBA images are the exception: the alpha channel
has to be split off into a separate grayscale soft mask, which needs a real
decoder (Pillow) and a re-encode of both halves.
"""

from __future__ import annotations

from io import BytesIO
import logging
import struct
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from .errors import FormatError
from .image_datastructures import ImageInfo

LOGGER = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

COLOR_SPACES = {0: "DeviceGray", 2: "DeviceRGB", 3: "Indexed"}
RGBA_COLOR_TYPE = 6
GRAY_ALPHA_COLOR_TYPE = 4


class _Reader:
    """Sequential big-endian reader over a PNG buffer."""

    def __init__(self, data: bytes, name: str):
        self.data = data
        self.name = name
        self.offset = 0

    def read(self, length: int) -> bytes:
        end = self.offset + length
        if end > len(self.data):
            raise FormatError(f"Unexpected end of PNG data: {self.name}")
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def read_int(self) -> int:
        return struct.unpack(">I", self.read(4))[0]

    def read_byte(self) -> int:
        return self.read(1)[0]

    def at_end(self) -> bool:
        return self.offset >= len(self.data)


def parse_png(data: bytes, name: str = "", _depth: int = 0) -> ImageInfo:
    """Parse PNG bytes and return the descriptor required for PDF embedding.

    Gray, RGB and palette images are read chunk by chunk: ``PLTE`` becomes the
    palette, ``tRNS`` the colour-key mask and the ``IDAT`` payloads are joined
    into the compressed image data. RGBA images go through
    :func:`split_alpha`. Anything else (16-bit samples, interlacing, gray with
    alpha, non-standard compression or filtering) raises :class:`FormatError`.
    """

    label = name or "<bytes>"
    reader = _Reader(data, label)
    if data[: len(PNG_SIGNATURE)] != PNG_SIGNATURE:
        raise FormatError(f"Not a PNG file: {label}")
    reader.offset = len(PNG_SIGNATURE)

    reader.read(4)
    if reader.read(4) != b"IHDR":
        raise FormatError(f"Incorrect PNG file: {label}")
    width = reader.read_int()
    height = reader.read_int()
    bit_depth = reader.read_byte()
    if bit_depth > 8:
        raise FormatError(f"16-bit depth not supported: {label}")
    color_type = reader.read_byte()
    if color_type == GRAY_ALPHA_COLOR_TYPE:
        raise FormatError(f"Alpha channel not supported for grayscale PNG images: {label}")
    if color_type not in COLOR_SPACES and color_type != RGBA_COLOR_TYPE:
        raise FormatError(f"Unsupported PNG color type {color_type}: {label}")
    if reader.read_byte() != 0:
        raise FormatError(f"Unknown compression method: {label}")
    if reader.read_byte() != 0:
        raise FormatError(f"Unknown filter method: {label}")
    if reader.read_byte() != 0:
        raise FormatError(f"Interlacing not supported: {label}")
    if color_type == RGBA_COLOR_TYPE:
        return split_alpha(data, name, _depth)
    color_space = COLOR_SPACES[color_type]
    reader.read(4)

    # Scan chunks looking for palette, transparency and image data
    palette: Optional[bytes] = None
    transparency: Optional[bytes] = None
    compressed_chunks: List[bytes] = []
    while not reader.at_end():
        length = reader.read_int()
        chunk_type = reader.read(4)
        if chunk_type == b"PLTE":
            palette = reader.read(length)
        elif chunk_type == b"tRNS":
            transparency = _transparency_key(reader.read(length), color_type)
        elif chunk_type == b"IDAT":
            compressed_chunks.append(reader.read(length))
        elif chunk_type == b"IEND":
            break
        else:
            reader.read(length)
        # skip CRC (4 bytes)
        reader.read(4)

    if color_space == "Indexed" and not palette:
        raise FormatError(f"Missing palette in {label}")

    decode_parms = {
        "Predictor": 15,
        "Colors": 3 if color_space == "DeviceRGB" else 1,
        "BitsPerComponent": bit_depth,
        "Columns": width,
    }
    return ImageInfo(
        width=width,
        height=height,
        color_space=color_space,
        bits_per_component=bit_depth,
        filter="FlateDecode",
        data=b"".join(compressed_chunks),
        decode_parms=decode_parms,
        palette=palette,
        transparency=transparency,
    )


def _transparency_key(chunk: bytes, color_type: int) -> Optional[bytes]:
    if color_type in (0, 2) and len(chunk) < (2 if color_type == 0 else 6):
        raise FormatError("Truncated tRNS chunk")
    if color_type == 0:
        return chunk[1:2]
    if color_type == 2:
        return bytes((chunk[1], chunk[3], chunk[5]))
    position = chunk.find(b"\x00")
    if position == -1:
        return None
    return bytes((position,))


def split_alpha(data: bytes, name: str = "", _depth: int = 0) -> ImageInfo:
    """Parse an RGBA PNG as an RGB image plus a grayscale soft mask.

    Both halves are re-encoded as standalone PNG files and fed back through
    :func:`parse_png`, so the mask is an ordinary ``DeviceGray`` image that
    can be written as its own XObject.
    """

    assert _depth == 0, "alpha masks never carry an alpha channel themselves"
    try:
        with Image.open(BytesIO(data)) as image:
            rgba = image.convert("RGBA")
    except (UnidentifiedImageError, OSError) as exc:
        raise FormatError(f"Incorrect PNG file: {name or '<bytes>'}") from exc
    rgb = rgba.convert("RGB")
    mask = rgba.getchannel("A")

    info = parse_png(_encode_png(rgb), name, _depth + 1)
    info.alpha_mask = parse_png(_encode_png(mask), f"mask-of-{name}", _depth + 1)
    LOGGER.debug("Split alpha channel of %s (%dx%d)", name or "<bytes>", info.width, info.height)
    return info


def _encode_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


__all__ = ["PNG_SIGNATURE", "parse_png", "split_alpha"]
