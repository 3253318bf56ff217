from __future__ import annotations

import hashlib
from io import BytesIO
from pathlib import Path

from PIL import Image
import pytest

from pdfassembly.enums import ImageKind
from pdfassembly.errors import FormatError, MissingExtension, UnsupportedImageType
from pdfassembly.image_datastructures import ImageInfo, ImageRegistry
from pdfassembly.images import gif_to_png, load_image, parse_jpeg, read_source, resolve_kind


def encode(image: Image.Image, image_format: str, **params) -> bytes:
    buffer = BytesIO()
    image.save(buffer, format=image_format, **params)
    return buffer.getvalue()


def make_info(width: int = 4, height: int = 2) -> ImageInfo:
    return ImageInfo(
        width=width,
        height=height,
        color_space="DeviceRGB",
        bits_per_component=8,
        filter="FlateDecode",
        data=b"",
    )


@pytest.mark.parametrize(
    "name, kind, expected",
    [
        ("photo.JPG", None, ImageKind.JPEG),
        ("photo.jpeg", None, ImageKind.JPEG),
        ("icon.gif", None, ImageKind.GIF),
        ("noext", "png", ImageKind.PNG),
        ("wrong.gif", "jpg", ImageKind.JPEG),
        ("any", ImageKind.GIF, ImageKind.GIF),
    ],
)
def test_resolve_kind(name: str, kind, expected: ImageKind) -> None:
    assert resolve_kind(name, kind) is expected


def test_resolve_kind_errors() -> None:
    with pytest.raises(MissingExtension):
        resolve_kind("noext")
    with pytest.raises(UnsupportedImageType, match="bmp"):
        resolve_kind("picture.bmp")
    with pytest.raises(UnsupportedImageType, match="tiff"):
        resolve_kind("picture.png", "tiff")


def test_read_source_bytes_are_keyed_by_content() -> None:
    data = b"\x89PNG fake"
    key, payload = read_source(data)
    assert key == f"bytes-{hashlib.md5(data, usedforsecurity=False).hexdigest()}"
    assert payload == data
    assert read_source(bytearray(data))[0] == key
    assert read_source(data, "logo")[0] == "logo"


def test_read_source_path(tmp_path: Path) -> None:
    path = tmp_path / "image.png"
    path.write_bytes(b"content")
    assert read_source(path) == (str(path), b"content")
    assert read_source(str(path), "alias") == ("alias", b"content")


@pytest.mark.parametrize(
    "mode, color_space",
    [("RGB", "DeviceRGB"), ("L", "DeviceGray"), ("CMYK", "DeviceCMYK")],
)
def test_parse_jpeg(mode: str, color_space: str) -> None:
    data = encode(Image.new(mode, (5, 3)), "JPEG")
    info = parse_jpeg(data, "photo.jpg")
    assert (info.width, info.height) == (5, 3)
    assert info.color_space == color_space
    assert info.bits_per_component == 8
    assert info.filter == "DCTDecode"
    assert info.data == data
    assert info.decode_parms is None


def test_parse_jpeg_rejects_other_formats() -> None:
    with pytest.raises(FormatError):
        parse_jpeg(b"definitely not a jpeg")
    with pytest.raises(FormatError):
        parse_jpeg(encode(Image.new("RGB", (1, 1)), "PNG"))


def test_gif_is_converted_to_indexed_png() -> None:
    data = encode(Image.new("P", (4, 4)), "GIF")
    info = load_image(data, ImageKind.GIF, "icon.gif")
    assert (info.width, info.height) == (4, 4)
    assert info.color_space == "Indexed"
    assert info.palette


def test_gif_transparency_is_kept() -> None:
    data = encode(Image.new("P", (4, 4)), "GIF", transparency=0)
    png = gif_to_png(data)
    with Image.open(BytesIO(png)) as image:
        assert "transparency" in image.info
    assert load_image(data, ImageKind.GIF).transparency is not None


def test_gif_to_png_rejects_garbage() -> None:
    with pytest.raises(FormatError):
        gif_to_png(b"GIF? no")


def test_load_image_dispatches_on_kind() -> None:
    jpeg = load_image(encode(Image.new("RGB", (2, 2)), "JPEG"), ImageKind.JPEG)
    png = load_image(encode(Image.new("RGB", (2, 2)), "PNG"), ImageKind.PNG)
    assert jpeg.filter == "DCTDecode"
    assert png.filter == "FlateDecode"


def test_size_in_document_units() -> None:
    info = make_info(4, 2)
    assert info.size_in_document_units(0, 0, 2) == (2, 1)
    assert info.size_in_document_units(8, 0, 1) == (8, 4)
    assert info.size_in_document_units(0, 8, 1) == (16, 8)
    assert info.size_in_document_units(3, 3, 1) == (3, 3)


def test_registry_indices() -> None:
    registry = ImageRegistry()
    first = registry.register("a.png", make_info())
    second = registry.register("b.png", make_info())
    assert (first.index, second.index) == (1, 2)
    assert registry.get("a.png") is first
    assert registry.get("missing") is None
    assert list(registry) == [first, second]
