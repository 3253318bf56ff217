"""Image source resolution: type detection, JPEG/GIF handling and dispatch."""

from __future__ import annotations

import hashlib
from io import BytesIO
import logging
import os
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from .enums import ImageKind
from .errors import FormatError, MissingExtension, UnsupportedImageType
from .image_datastructures import ImageInfo
from .png import parse_png

LOGGER = logging.getLogger(__name__)

ImageSource = Union[str, os.PathLike, bytes]

JPEG_COLOR_SPACES = {
    "CMYK": "DeviceCMYK",
    "RGB": "DeviceRGB",
    "YCbCr": "DeviceRGB",
    "L": "DeviceGray",
}


def resolve_kind(name: str, kind: Union[ImageKind, str, None] = None) -> ImageKind:
    """Return the image kind, from *kind* if given, else from *name*'s extension."""

    if kind is not None:
        try:
            if isinstance(kind, ImageKind):
                return kind
            return ImageKind.from_extension(kind)
        except ValueError:
            raise UnsupportedImageType(f"Unsupported image type: {kind}") from None
    extension = os.path.splitext(name)[1]
    if not extension:
        raise MissingExtension(f"Image file has no extension and no type was specified: {name}")
    try:
        return ImageKind.from_extension(extension)
    except ValueError:
        raise UnsupportedImageType(f"Unsupported image type: {extension.lstrip('.')}") from None


def read_source(source: ImageSource, name: Optional[str] = None) -> Tuple[str, bytes]:
    """Return ``(key, data)`` for a file path or an in-memory buffer.

    Paths are read immediately; the file handle does not outlive the call.
    Buffers are keyed by *name* when given, otherwise by content.
    """

    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
        if name is None:
            name = f"bytes-{hashlib.md5(data, usedforsecurity=False).hexdigest()}"
        return name, data
    path = Path(source)
    return name or str(source), path.read_bytes()


def parse_jpeg(data: bytes, name: str = "") -> ImageInfo:
    """Describe a JPEG; the DCT stream is embedded unchanged."""

    try:
        with Image.open(BytesIO(data)) as image:
            image_format = image.format
            mode = image.mode
            width, height = image.size
    except UnidentifiedImageError as exc:
        raise FormatError(f"Not a JPEG file: {name or '<bytes>'}") from exc
    if image_format != "JPEG":
        raise FormatError(f"Not a JPEG file: {name or '<bytes>'}")
    try:
        color_space = JPEG_COLOR_SPACES[mode]
    except KeyError:
        raise FormatError(f"Unsupported JPEG color mode {mode}: {name}") from None
    return ImageInfo(
        width=width,
        height=height,
        color_space=color_space,
        bits_per_component=8,
        filter="DCTDecode",
        data=data,
    )


def gif_to_png(data: bytes, name: str = "") -> bytes:
    """Re-encode a GIF as PNG, keeping its transparent colour if any."""

    try:
        with Image.open(BytesIO(data)) as image:
            image.load()
            buffer = BytesIO()
            if "transparency" in image.info:
                image.save(buffer, format="PNG", transparency=image.info["transparency"])
            else:
                image.save(buffer, format="PNG")
    except (UnidentifiedImageError, OSError) as exc:
        raise FormatError(f"Not a GIF file: {name or '<bytes>'}") from exc
    return buffer.getvalue()


def load_image(data: bytes, kind: ImageKind, name: str = "") -> ImageInfo:
    if kind is ImageKind.GIF:
        data = gif_to_png(data, name)
        kind = ImageKind.PNG
    if kind is ImageKind.PNG:
        info = parse_png(data, name)
    elif kind is ImageKind.JPEG:
        info = parse_jpeg(data, name)
    else:  # pragma: no cover - closed enum
        raise UnsupportedImageType(f"Unsupported image type: {kind}")
    LOGGER.debug("Loaded %s image %s: %s", kind.value, name, info)
    return info


__all__ = [
    "ImageSource",
    "gif_to_png",
    "load_image",
    "parse_jpeg",
    "read_source",
    "resolve_kind",
]
