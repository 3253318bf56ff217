"""Enumerations shared by the document API."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Union


class DocumentState(Enum):
    UNOPENED = 0
    OPENED = 1
    IN_PAGE = 2
    FINISHED = 3


class CoerciveEnum(Enum):
    """Enum accepting its members, their values or their names (any case)."""

    @classmethod
    def coerce(cls, value):
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if value == member.value or value.upper() == member.name:
                    return member
            for member in cls:
                if value.upper() == str(member.value).upper():
                    return member
        raise ValueError(f"{value!r} is not a valid {cls.__name__}")


class Orientation(CoerciveEnum):
    PORTRAIT = "P"
    LANDSCAPE = "L"


class Align(CoerciveEnum):
    LEFT = "L"
    CENTER = "C"
    RIGHT = "R"
    JUSTIFY = "J"


class Position(IntEnum):
    """Where the cursor goes after a cell has been emitted."""

    RIGHT = 0
    NEXT_LINE = 1
    BELOW = 2


class ScaleMode(CoerciveEnum):
    CHARSPACE = "charspace"
    HORIZONTAL = "horizontal"


class Zoom(CoerciveEnum):
    FULLPAGE = "fullpage"
    FULLWIDTH = "fullwidth"
    REAL = "real"
    DEFAULT = "default"


class Layout(CoerciveEnum):
    SINGLE = "single"
    CONTINUOUS = "continuous"
    TWO = "two"
    DEFAULT = "default"


class DrawMode(CoerciveEnum):
    """Path painting operator; ``coerce`` also accepts ``D``, ``F`` and ``DF``."""

    DRAW = "S"
    FILL = "f"
    DRAW_FILL = "B"

    @classmethod
    def coerce(cls, value):
        if isinstance(value, str):
            style = value.upper()
            if style == "D":
                return cls.DRAW
            if style == "F" and value != "f":
                return cls.FILL
            if style in ("DF", "FD"):
                return cls.DRAW_FILL
        return super().coerce(value)


class LineCap(IntEnum):
    BUTT = 0
    ROUND = 1
    SQUARE = 2


class LineJoin(IntEnum):
    MITER = 0
    ROUND = 1
    BEVEL = 2


class ImageKind(CoerciveEnum):
    PNG = "png"
    JPEG = "jpeg"
    GIF = "gif"

    @classmethod
    def from_extension(cls, extension: str) -> "ImageKind":
        extension = extension.lower().lstrip(".")
        if extension == "jpg":
            return cls.JPEG
        return cls(extension)


BreakMode = Union[Position, int]


__all__ = [
    "Align",
    "BreakMode",
    "DocumentState",
    "DrawMode",
    "ImageKind",
    "Layout",
    "LineCap",
    "LineJoin",
    "Orientation",
    "Position",
    "ScaleMode",
    "Zoom",
]
