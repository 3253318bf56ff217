"""Standard-14 font registry and character width metrics."""

from __future__ import annotations

from dataclasses import dataclass
from importlib import resources
import json
from typing import Dict, Iterable, Optional, Sequence, Union

from .errors import UndefinedFont

CORE_FONTS: Dict[str, str] = {
    "courier": "Courier",
    "courierB": "Courier-Bold",
    "courierI": "Courier-Oblique",
    "courierBI": "Courier-BoldOblique",
    "helvetica": "Helvetica",
    "helveticaB": "Helvetica-Bold",
    "helveticaI": "Helvetica-Oblique",
    "helveticaBI": "Helvetica-BoldOblique",
    "times": "Times-Roman",
    "timesB": "Times-Bold",
    "timesI": "Times-Italic",
    "timesBI": "Times-BoldItalic",
    "symbol": "Symbol",
    "zapfdingbats": "ZapfDingbats",
}

FAMILY_ALIASES = {"arial": "helvetica"}
SYMBOLIC_FAMILIES = ("symbol", "zapfdingbats")

FontStyle = Union[str, Iterable[str]]


def normalize_style(style: Optional[FontStyle]) -> str:
    """Return the style letters (``B``, ``I``, ``U``) in canonical order."""

    if not style:
        return ""
    letters = "".join(style).upper()
    unknown = set(letters) - set("BIU")
    if unknown:
        raise ValueError(f"Unknown font style: {''.join(sorted(unknown))}")
    return "".join(letter for letter in "BIU" if letter in letters)


def font_key(family: str, style: str = "") -> str:
    """Build the registry key for *family* and *style*: ``helveticaBI``, ``times``..."""

    family = family.lower()
    family = FAMILY_ALIASES.get(family, family)
    if family in SYMBOLIC_FAMILIES:
        return family
    key = family
    if "B" in style:
        key += "B"
    if "I" in style:
        key += "I"
    return key


def encode_text(text: str) -> bytes:
    """Encode *text* for a standard font: Latin-1 with the euro sign at 0x80."""

    return text.replace("\u20ac", "\x80").encode("latin-1", errors="replace")


class CharWidths:
    """Width of each character in 1/1000 em for one font."""

    def __init__(self, widths: Sequence[int]):
        self._widths = list(widths)
        self.default = self._widths[32] if len(self._widths) > 32 else 0

    def __getitem__(self, char: str) -> int:
        code = ord(char)
        if code == 0x20AC:  # euro sign lives at 128 in WinAnsiEncoding
            code = 128
        if code < len(self._widths):
            return self._widths[code]
        return self.default

    def text_width(self, text: str) -> int:
        return sum(self[char] for char in text)


class CoreFontMetrics:
    """Metrics provider for the standard fonts.

    The width tables are read from the packaged ``core_fonts.json`` resource
    the first time any font is requested and kept for the provider's lifetime.
    """

    resource = "core_fonts.json"

    def __init__(self) -> None:
        self._tables: Optional[Dict[str, CharWidths]] = None

    def _load(self) -> Dict[str, CharWidths]:
        if self._tables is None:
            text = resources.files(__package__).joinpath("data", self.resource).read_text("utf-8")
            raw = json.loads(text)
            self._tables = {key: CharWidths(entry["widths"]) for key, entry in raw.items()}
        return self._tables

    def widths(self, key: str) -> CharWidths:
        try:
            return self._load()[key]
        except KeyError:
            raise UndefinedFont(f"No metrics for font {key}") from None


@dataclass
class Font:
    key: str
    name: str
    # Resource index (``/F<index>``), 1-based in order of first use
    index: int
    widths: CharWidths
    underline_position: int = -100
    underline_thickness: int = 50
    object_number: Optional[int] = None

    @property
    def encoding(self) -> Optional[str]:
        if self.name in ("Symbol", "ZapfDingbats"):
            return None
        return "WinAnsiEncoding"


class FontRegistry:
    """Fonts used by one document, in order of first use."""

    def __init__(self, metrics: Optional[CoreFontMetrics] = None):
        self.metrics = metrics or CoreFontMetrics()
        self._fonts: Dict[str, Font] = {}

    def __len__(self) -> int:
        return len(self._fonts)

    def __iter__(self):
        return iter(self._fonts.values())

    def get_or_create(self, key: str, family: str = "", style: str = "") -> Font:
        font = self._fonts.get(key)
        if font is not None:
            return font
        if key not in CORE_FONTS:
            raise UndefinedFont(f"Undefined font: {family or key} {style}".rstrip())
        font = Font(
            key=key,
            name=CORE_FONTS[key],
            index=len(self._fonts) + 1,
            widths=self.metrics.widths(key),
        )
        self._fonts[key] = font
        return font


__all__ = [
    "CORE_FONTS",
    "CharWidths",
    "CoreFontMetrics",
    "Font",
    "FontRegistry",
    "encode_text",
    "font_key",
    "normalize_style",
]
