"""Tagged math-node tree rendered to Office Math Markup Language."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union


@dataclass(frozen=True, slots=True)
class MathRun:
    """Literal math text."""

    text: str


@dataclass(frozen=True, slots=True)
class Fraction:
    numerator: "MathNode"
    denominator: "MathNode"


@dataclass(frozen=True, slots=True)
class Radical:
    """Root of ``base``; a missing degree renders as a square root."""

    base: "MathNode"
    degree: Optional["MathNode"] = None


@dataclass(frozen=True, slots=True)
class SuperScript:
    base: "MathNode"
    exponent: "MathNode"


@dataclass(frozen=True, slots=True)
class SubScript:
    base: "MathNode"
    subscript: "MathNode"


@dataclass(frozen=True, slots=True)
class Delimiter:
    """Group wrapped in open/close glyphs; empty glyphs give a bare group."""

    body: "MathNode"
    open_char: str = "("
    close_char: str = ")"


@dataclass(frozen=True, slots=True)
class Matrix:
    """Rectangular grid of cells stored row by row."""

    cells: Tuple[Tuple["MathNode", ...], ...]

    @property
    def row_count(self) -> int:
        return len(self.cells)

    @property
    def column_count(self) -> int:
        return len(self.cells[0]) if self.cells else 0


MathNode = Union[MathRun, Fraction, Radical, SuperScript, SubScript, Delimiter, Matrix]
MathInput = Union[str, MathNode]


def as_node(value: MathInput) -> MathNode:
    """Promote plain strings to :class:`MathRun` nodes."""
    if isinstance(value, str):
        return MathRun(value)
    return value


def flatten_text(node: MathNode) -> str:
    """Concatenate the literal text of a tree in reading order."""
    node = as_node(node)
    if isinstance(node, MathRun):
        return node.text
    if isinstance(node, Fraction):
        return flatten_text(node.numerator) + flatten_text(node.denominator)
    if isinstance(node, Radical):
        degree = flatten_text(node.degree) if node.degree is not None else ""
        return degree + flatten_text(node.base)
    if isinstance(node, SuperScript):
        return flatten_text(node.base) + flatten_text(node.exponent)
    if isinstance(node, SubScript):
        return flatten_text(node.base) + flatten_text(node.subscript)
    if isinstance(node, Delimiter):
        return node.open_char + flatten_text(node.body) + node.close_char
    if isinstance(node, Matrix):
        return "".join(flatten_text(cell) for row in node.cells for cell in row)
    raise TypeError(f"Unsupported math node: {type(node).__name__}")


def matrix_from_rows(rows: Sequence[Sequence[MathInput]]) -> Matrix:
    return Matrix(tuple(tuple(as_node(cell) for cell in row) for row in rows))
