"""Read-back representation of generated document content."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class DrawingReference:
    """An inline or anchored picture found inside a run."""

    r_id: str
    target: Optional[str]
    name: Optional[str]
    width_emu: Optional[int]
    height_emu: Optional[int]
    inline: bool


@dataclass(slots=True)
class RunFragment:
    """Text of one run, or the field instruction / drawing it carries."""

    text: str
    field_char: Optional[str] = None
    field_code: Optional[str] = None
    drawing: Optional[DrawingReference] = None


@dataclass(slots=True)
class ParagraphElement:
    """Body paragraph with its runs in document order."""

    runs: List[RunFragment]
    style_id: Optional[str]
    justification: Optional[str] = None
    math_count: int = 0
    math_text: str = ""

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def field_codes(self) -> List[str]:
        return [run.field_code for run in self.runs if run.field_code is not None]

    @property
    def has_math(self) -> bool:
        return self.math_count > 0


@dataclass(slots=True)
class TableCell:
    text: str
    grid_span: int = 1
    v_merge: Optional[str] = None
    shading: Optional[str] = None
    vertical_alignment: Optional[str] = None


@dataclass(slots=True)
class TableRow:
    cells: List[TableCell]


@dataclass(slots=True)
class TableElement:
    """Body table with its grid and cell markers."""

    rows: List[TableRow]
    style_id: Optional[str] = None
    alignment: Optional[str] = None
    grid_columns: List[Optional[int]] = field(default_factory=list)


BlockElement = ParagraphElement | TableElement


@dataclass(slots=True)
class DocumentOutline:
    """Ordered body blocks of a package read back from disk."""

    blocks: List[BlockElement] = field(default_factory=list)

    @property
    def paragraphs(self) -> List[ParagraphElement]:
        return [block for block in self.blocks if isinstance(block, ParagraphElement)]

    @property
    def tables(self) -> List[TableElement]:
        return [block for block in self.blocks if isinstance(block, TableElement)]

    @property
    def drawings(self) -> List[DrawingReference]:
        return [run.drawing for paragraph in self.paragraphs for run in paragraph.runs if run.drawing is not None]
