from __future__ import annotations

import base64
import binascii
from io import BytesIO
import struct
import zlib

from PIL import Image
import pytest

from pdfassembly.errors import FormatError
from pdfassembly.png import PNG_SIGNATURE, parse_png


SAMPLE_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAIAAACQd1PeAAAADElEQVR4nGP4z8AAAAMBAQDJ/pLvAAAAAElFTkSuQmCC"
)

CHANNELS = {0: 1, 2: 3, 3: 1, 4: 2, 6: 4}


def _png_chunk(tag: bytes, payload: bytes) -> bytes:
    return (
        struct.pack("!I", len(payload))
        + tag
        + payload
        + struct.pack("!I", binascii.crc32(tag + payload) & 0xFFFFFFFF)
    )


def make_png(
    width: int = 2,
    height: int = 2,
    color_type: int = 2,
    bit_depth: int = 8,
    compression: int = 0,
    interlace: int = 0,
    extra_chunks=(),
    idat_parts: int = 1,
) -> bytes:
    header = struct.pack("!IIBBBBB", width, height, bit_depth, color_type, compression, 0, interlace)
    raw = b"".join(b"\x00" + bytes(width * CHANNELS[color_type]) for _ in range(height))
    compressed = zlib.compress(raw)
    step = max(1, len(compressed) // idat_parts + 1)
    idat = b"".join(
        _png_chunk(b"IDAT", compressed[start : start + step])
        for start in range(0, len(compressed), step)
    )
    return (
        PNG_SIGNATURE
        + _png_chunk(b"IHDR", header)
        + b"".join(extra_chunks)
        + idat
        + _png_chunk(b"IEND", b"")
    )


def pillow_png(image: Image.Image) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def test_parse_png_metadata() -> None:
    parsed = parse_png(SAMPLE_PNG)
    assert parsed.width == 1
    assert parsed.height == 1
    assert parsed.bits_per_component == 8
    assert parsed.color_space == "DeviceRGB"
    assert parsed.filter == "FlateDecode"
    assert parsed.data
    assert parsed.decode_parms == {"Predictor": 15, "Colors": 3, "BitsPerComponent": 8, "Columns": 1}
    assert parsed.palette is None
    assert parsed.transparency is None
    assert parsed.alpha_mask is None


def test_parse_png_rejects_non_png() -> None:
    with pytest.raises(FormatError):
        parse_png(b"not png data")


@pytest.mark.parametrize("position", range(8))
def test_parse_png_checks_every_signature_byte(position: int) -> None:
    data = bytearray(SAMPLE_PNG)
    data[position] ^= 0xFF
    with pytest.raises(FormatError, match="Not a PNG"):
        parse_png(bytes(data), "broken.png")


def test_parse_png_requires_ihdr_first() -> None:
    data = PNG_SIGNATURE + _png_chunk(b"tEXt", b"comment\x00hello") + SAMPLE_PNG[8:]
    with pytest.raises(FormatError, match="Incorrect PNG"):
        parse_png(data)


def test_parse_png_truncated() -> None:
    with pytest.raises(FormatError, match="Unexpected end"):
        parse_png(SAMPLE_PNG[:20])


def test_grayscale_png() -> None:
    parsed = parse_png(make_png(width=3, height=1, color_type=0))
    assert parsed.color_space == "DeviceGray"
    assert parsed.decode_parms["Colors"] == 1
    assert parsed.decode_parms["Columns"] == 3


def test_low_bit_depth_is_accepted() -> None:
    parsed = parse_png(make_png(color_type=0, bit_depth=1))
    assert parsed.bits_per_component == 1
    assert parsed.decode_parms["BitsPerComponent"] == 1


def test_sixteen_bit_png_is_rejected() -> None:
    with pytest.raises(FormatError, match="16-bit"):
        parse_png(make_png(bit_depth=16))


def test_gray_alpha_png_is_rejected() -> None:
    with pytest.raises(FormatError, match="grayscale"):
        parse_png(make_png(color_type=4))


def test_unknown_color_type_is_rejected() -> None:
    header = struct.pack("!IIBBBBB", 1, 1, 8, 5, 0, 0, 0)
    data = PNG_SIGNATURE + _png_chunk(b"IHDR", header) + _png_chunk(b"IEND", b"")
    with pytest.raises(FormatError, match="color type 5"):
        parse_png(data)


def test_interlaced_png_is_rejected() -> None:
    with pytest.raises(FormatError, match="Interlacing"):
        parse_png(make_png(interlace=1))


def test_unknown_compression_is_rejected() -> None:
    with pytest.raises(FormatError, match="compression"):
        parse_png(make_png(compression=1))


def test_indexed_png_requires_palette() -> None:
    with pytest.raises(FormatError, match="Missing palette"):
        parse_png(make_png(color_type=3), "indexed.png")


def test_indexed_png_keeps_palette_and_transparency() -> None:
    palette = b"\xff\x00\x00\x00\x00\xff"
    data = make_png(
        color_type=3,
        extra_chunks=[_png_chunk(b"PLTE", palette), _png_chunk(b"tRNS", b"\xff\x00\xff")],
    )
    parsed = parse_png(data)
    assert parsed.color_space == "Indexed"
    assert parsed.palette == palette
    assert parsed.transparency == b"\x01"
    assert parsed.sub_object_count == 1


def test_indexed_transparency_without_transparent_entry() -> None:
    data = make_png(
        color_type=3,
        extra_chunks=[_png_chunk(b"PLTE", b"\x00" * 6), _png_chunk(b"tRNS", b"\xff\xff")],
    )
    assert parse_png(data).transparency is None


def test_gray_transparency_key() -> None:
    data = make_png(color_type=0, extra_chunks=[_png_chunk(b"tRNS", b"\x00\x07")])
    assert parse_png(data).transparency == b"\x07"


def test_rgb_transparency_key() -> None:
    data = make_png(extra_chunks=[_png_chunk(b"tRNS", b"\x00\x01\x00\x02\x00\x03")])
    assert parse_png(data).transparency == b"\x01\x02\x03"


def test_truncated_rgb_transparency_is_rejected() -> None:
    data = make_png(extra_chunks=[_png_chunk(b"tRNS", b"\x00\x01")])
    with pytest.raises(FormatError, match="tRNS"):
        parse_png(data)


def test_unknown_chunks_are_skipped() -> None:
    plain = parse_png(make_png())
    annotated = parse_png(make_png(extra_chunks=[_png_chunk(b"tEXt", b"Title\x00sample")]))
    assert annotated.data == plain.data


def test_idat_chunks_are_concatenated() -> None:
    single = parse_png(make_png(width=16, height=16))
    split = parse_png(make_png(width=16, height=16, idat_parts=3))
    assert split.data == single.data
    assert zlib.decompress(split.data) == b"".join(b"\x00" + bytes(48) for _ in range(16))


def test_rgba_png_is_split_into_color_and_soft_mask() -> None:
    data = pillow_png(Image.new("RGBA", (2, 3), (255, 0, 0, 128)))
    parsed = parse_png(data, "logo.png")
    assert parsed.color_space == "DeviceRGB"
    assert (parsed.width, parsed.height) == (2, 3)
    mask = parsed.alpha_mask
    assert mask is not None
    assert mask.color_space == "DeviceGray"
    assert (mask.width, mask.height) == (2, 3)
    assert mask.decode_parms["Colors"] == 1
    assert mask.alpha_mask is None


def test_rgba_png_with_corrupt_raster_is_rejected() -> None:
    header = struct.pack("!IIBBBBB", 2, 2, 8, 6, 0, 0, 0)
    data = (
        PNG_SIGNATURE
        + _png_chunk(b"IHDR", header)
        + _png_chunk(b"IDAT", b"garbage!")
        + _png_chunk(b"IEND", b"")
    )
    with pytest.raises(FormatError, match="Incorrect PNG file"):
        parse_png(data, "broken.png")
