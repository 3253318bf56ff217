"""Text measurement and line breaking.

Widths are accumulated in font units (1/1000 em) and only converted to user
units with the font size at the end, so the break decisions do not depend on
the document's unit. The splitters below only decide *where* lines end; the
document turns each piece into a cell.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .fonts import CharWidths


class BreakKind(Enum):
    NEWLINE = "newline"  # explicit "\n"
    FORCED = "forced"  # no space on the line, broken inside a word
    WORD = "word"  # broken at the last space
    LAST = "last"  # remainder of the text


class FlowKind(Enum):
    LINE = "line"
    MOVE = "move"  # go to the next line without output
    TAIL = "tail"


@dataclass(frozen=True)
class WrappedLine:
    text: str
    kind: BreakKind
    # Number of spaces seen on the line, the breaking one included
    spaces: int = 0
    # Width in font units up to (excluding) the breaking space
    width_to_space: int = 0


@dataclass(frozen=True)
class FlowPiece:
    kind: FlowKind
    text: str = ""
    # Width in font units, only set for TAIL
    units: int = 0


def string_width(widths: CharWidths, font_size: float, text: str) -> float:
    """Width of *text* in user units for a font of *font_size* user units."""

    return widths.text_width(text) * font_size / 1000


def max_units(width: float, cell_margin: float, font_size: float) -> float:
    """Usable width of a cell of *width* in font units."""

    return (width - 2 * cell_margin) * 1000 / font_size


def split_paragraph(text: str, widths: CharWidths, wmax: float) -> Iterator[WrappedLine]:
    """Greedily split *text* into lines no wider than *wmax* font units.

    A single trailing newline is ignored. When a line holds no space the
    break happens before the character that overflowed, except that at least
    one character is always consumed.
    """

    s = text.replace("\r", "")
    nb = len(s)
    if nb > 0 and s[nb - 1] == "\n":
        nb -= 1
    sep = -1
    i = j = 0
    units = 0
    units_to_space = 0
    spaces = 0
    while i < nb:
        c = s[i]
        if c == "\n":
            yield WrappedLine(s[j:i], BreakKind.NEWLINE)
            i += 1
            sep = -1
            j = i
            units = 0
            spaces = 0
            continue
        if c == " ":
            sep = i
            units_to_space = units
            spaces += 1
        units += widths[c]
        if units > wmax:
            if sep == -1:
                if i == j:
                    i += 1
                yield WrappedLine(s[j:i], BreakKind.FORCED)
            else:
                yield WrappedLine(s[j:sep], BreakKind.WORD, spaces, units_to_space)
                i = sep + 1
            sep = -1
            j = i
            units = 0
            spaces = 0
        else:
            i += 1
    yield WrappedLine(s[j:i], BreakKind.LAST)


def split_flowing(
    text: str,
    widths: CharWidths,
    first_wmax: float,
    wmax: float,
    indented: bool,
) -> Iterator[FlowPiece]:
    """Split *text* for flowing output starting in the middle of a line.

    The first line may hold *first_wmax* font units, the following ones
    *wmax*. If the text starts *indented* and its first word does not fit,
    a MOVE is emitted so the word restarts at the left margin. The final
    piece is a TAIL carrying its width, since it does not end the line.
    """

    s = text.replace("\r", "")
    nb = len(s)
    sep = -1
    i = j = 0
    units = 0
    line_number = 1
    current = first_wmax
    while i < nb:
        c = s[i]
        if c == "\n":
            yield FlowPiece(FlowKind.LINE, s[j:i])
            i += 1
            sep = -1
            j = i
            units = 0
            if line_number == 1:
                current = wmax
                indented = False
            line_number += 1
            continue
        if c == " ":
            sep = i
        units += widths[c]
        if units > current:
            if sep == -1:
                if indented:
                    yield FlowPiece(FlowKind.MOVE)
                    indented = False
                    current = wmax
                    i += 1
                    line_number += 1
                    continue
                if i == j:
                    i += 1
                yield FlowPiece(FlowKind.LINE, s[j:i])
            else:
                yield FlowPiece(FlowKind.LINE, s[j:sep])
                i = sep + 1
            sep = -1
            j = i
            units = 0
            if line_number == 1:
                current = wmax
                indented = False
            line_number += 1
        else:
            i += 1
    if i != j:
        yield FlowPiece(FlowKind.TAIL, s[j:], units)


def word_spacing(wmax: float, width_to_space: float, spaces: int, font_size: float) -> float:
    """Extra space per word gap, in user units, that justifies a broken line."""

    if spaces > 1:
        return (wmax - width_to_space) / 1000 * font_size / (spaces - 1)
    return 0.0


def fit_ratio(target_width: float, cell_margin: float, text_width: float) -> float:
    return (target_width - cell_margin * 2) / text_width


def character_spacing(
    target_width: float, cell_margin: float, text_width: float, length: int, k: float
) -> float:
    """Spacing in points between characters so the text fills the cell."""

    return (target_width - cell_margin * 2 - text_width) / max(length - 1, 1) * k


__all__ = [
    "BreakKind",
    "FlowKind",
    "FlowPiece",
    "WrappedLine",
    "character_spacing",
    "fit_ratio",
    "max_units",
    "split_flowing",
    "split_paragraph",
    "string_width",
    "word_spacing",
]
