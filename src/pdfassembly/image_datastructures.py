"""Image descriptors and the per-document image cache."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional, Tuple


@dataclass
class ImageInfo:
    """Everything the serializer needs to write one image XObject."""

    width: int
    height: int
    color_space: str
    bits_per_component: int
    filter: str
    data: bytes
    decode_parms: Optional[Dict[str, int]] = None
    palette: Optional[bytes] = None
    transparency: Optional[bytes] = None
    alpha_mask: Optional["ImageInfo"] = None
    # Resource index (``/I<index>``), assigned when the image is registered.
    index: int = 0
    # Indirect object number, assigned by the serializer.
    object_number: Optional[int] = None

    def __str__(self) -> str:
        return (
            f"ImageInfo({self.width}x{self.height} {self.color_space} "
            f"bpc={self.bits_per_component} filter={self.filter} index={self.index})"
        )

    def size_in_document_units(self, w: float, h: float, k: float) -> Tuple[float, float]:
        if w == 0 and h == 0:  # Put image at 72 dpi
            w = self.width / k
            h = self.height / k
        elif w == 0:
            w = h * self.width / self.height
        elif h == 0:
            h = w * self.height / self.width
        return w, h

    @property
    def sub_object_count(self) -> int:
        """Number of extra indirect objects written right after the image (palette)."""

        return 1 if self.color_space == "Indexed" else 0


@dataclass
class ImageRegistry:
    # Map source keys to image descriptors, in order of first use
    images: Dict[str, ImageInfo] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.images)

    def __iter__(self) -> Iterator[ImageInfo]:
        return iter(self.images.values())

    def get(self, key: str) -> Optional[ImageInfo]:
        return self.images.get(key)

    def register(self, key: str, info: ImageInfo) -> ImageInfo:
        info.index = len(self.images) + 1
        self.images[key] = info
        return info


__all__ = ["ImageInfo", "ImageRegistry"]
