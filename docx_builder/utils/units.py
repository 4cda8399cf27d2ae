"""Unit conversion helpers for WordprocessingML and DrawingML measurements."""
from __future__ import annotations

EMU_PER_INCH = 914400
EMU_PER_PIXEL = 9525
POINTS_PER_INCH = 72
FIFTIETHS_PER_PERCENT = 50


def pixels_to_emu(value: int) -> int:
    """Convert screen pixels (96 dpi) to English Metric Units."""
    return int(value) * EMU_PER_PIXEL


def emu_to_pixels(value: int) -> int:
    """Convert English Metric Units back to whole pixels."""
    return int(round(value / EMU_PER_PIXEL))


def emu_to_points(value: int) -> float:
    """Convert English Metric Units to typographic points."""
    return (value / EMU_PER_INCH) * POINTS_PER_INCH


def percent_to_fiftieths(value: float) -> int:
    """Convert a percentage to the fiftieths-of-a-percent used by ``pct`` widths."""
    return int(round(value * FIFTIETHS_PER_PERCENT))
