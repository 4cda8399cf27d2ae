"""Friendly enumerations and their WordprocessingML token values."""
from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Union

from docx_builder.errors import ArgumentError, UnsupportedFormatError


class TableBorderStyle(Enum):
    NONE = "none"
    SINGLE = "single"
    THICK = "thick"
    DOUBLE = "double"
    DOTTED = "dotted"
    DASHED = "dashed"
    DOT_DASH = "dotDash"
    DOT_DOT_DASH = "dotDotDash"


class TableAlignment(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlignment(Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class Justification(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    BOTH = "both"


class WidthUnit(Enum):
    """Width types accepted by ``w:tcW``, ``w:tblW`` and friends."""

    PCT = "pct"
    DXA = "dxa"
    AUTO = "auto"

    @classmethod
    def parse(cls, value: Union[str, "WidthUnit"]) -> "WidthUnit":
        """Map user spellings such as ``percent`` or ``twips`` to a unit."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        try:
            return _WIDTH_ALIASES[key]
        except KeyError:
            raise ArgumentError(f"Unknown width unit: {value!r}") from None


_WIDTH_ALIASES = {
    "pct": WidthUnit.PCT,
    "percent": WidthUnit.PCT,
    "dxa": WidthUnit.DXA,
    "twips": WidthUnit.DXA,
    "auto": WidthUnit.AUTO,
}


class ImageFormat(Enum):
    """Image payload formats that can be embedded, keyed by MIME type."""

    PNG = "image/png"
    JPEG = "image/jpeg"
    GIF = "image/gif"
    BMP = "image/bmp"
    TIFF = "image/tiff"

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFormat":
        suffix = Path(path).suffix.lower()
        try:
            return _IMAGE_EXTENSIONS[suffix]
        except KeyError:
            raise UnsupportedFormatError(f"Image format {suffix or '<none>'} is not supported.") from None


_IMAGE_EXTENSIONS = {
    ".png": ImageFormat.PNG,
    ".jpg": ImageFormat.JPEG,
    ".jpeg": ImageFormat.JPEG,
    ".gif": ImageFormat.GIF,
    ".bmp": ImageFormat.BMP,
    ".tiff": ImageFormat.TIFF,
}
