"""Generation defaults shared by the builders."""
from __future__ import annotations

from dataclasses import dataclass

from docx_builder.model.enums import TableBorderStyle
from docx_builder.utils.units import percent_to_fiftieths


@dataclass(slots=True)
class BuilderConfig:
    """Tunable defaults for a generation session."""

    border_style: TableBorderStyle = TableBorderStyle.SINGLE
    border_size: int = 12  # eighths of a point
    border_color: str = "auto"
    table_width: int = percent_to_fiftieths(100)
    toc_levels: str = "1-3"
    toc_placeholder: str = (
        "Table of Contents placeholder. Right-click and select 'Update Field' to generate."
    )
    heading_style_id: str = "Heading1"
    caption_style_id: str = "Caption"
    clear_continued_cells: bool = False


DEFAULT_CONFIG = BuilderConfig()
