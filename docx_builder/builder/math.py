"""Office Math (OMML) serialization and equation paragraphs."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from docx.text.paragraph import Paragraph
from lxml import etree

from docx_builder.builder.paragraphs import make_paragraph
from docx_builder.errors import ArgumentError, DimensionMismatchError, InvalidDimensionError
from docx_builder.model.math_model import (
    Delimiter,
    Fraction,
    MathInput,
    MathNode,
    MathRun,
    Matrix,
    Radical,
    SubScript,
    SuperScript,
    as_node,
    flatten_text,
    matrix_from_rows,
)
from docx_builder.utils.logger import get_logger
from docx_builder.utils.xml_utils import M_NS

if TYPE_CHECKING:
    from docx_builder.builder.session import DocumentSession

LOGGER = get_logger(__name__)

INTEGRAL_SIGN = "∫"
XML_SPACE = "{http://www.w3.org/XML/1998/namespace}space"

MatrixValues = Union[Sequence[Sequence[MathInput]], Sequence[MathInput]]


def _m(local: str) -> str:
    return f"{{{M_NS}}}{local}"


def _math_element(local: str, parent=None, val: Optional[str] = None):
    if parent is None:
        element = etree.Element(_m(local), nsmap={"m": M_NS})
    else:
        element = etree.SubElement(parent, _m(local))
    if val is not None:
        element.set(_m("val"), val)
    return element


def _slot(parent, local: str, node: Optional[MathNode]):
    """Append an argument container such as ``m:e`` holding ``node`` (if any)."""
    container = _math_element(local, parent)
    if node is not None:
        container.append(render_math(node))
    return container


def render_math(node: MathInput):
    """Serialize a math node tree to its OMML element; bare strings become runs."""
    node = as_node(node)
    if isinstance(node, MathRun):
        run = _math_element("r")
        text = _math_element("t", run)
        text.text = node.text
        if node.text != node.text.strip():
            text.set(XML_SPACE, "preserve")
        return run

    if isinstance(node, Fraction):
        fraction = _math_element("f")
        _slot(fraction, "num", node.numerator)
        _slot(fraction, "den", node.denominator)
        return fraction

    if isinstance(node, Radical):
        radical = _math_element("rad")
        rad_pr = _math_element("radPr", radical)
        if node.degree is None:
            _math_element("degHide", rad_pr, val="1")
        _slot(radical, "deg", node.degree)
        _slot(radical, "e", node.base)
        return radical

    if isinstance(node, SuperScript):
        script = _math_element("sSup")
        _slot(script, "e", node.base)
        _slot(script, "sup", node.exponent)
        return script

    if isinstance(node, SubScript):
        script = _math_element("sSub")
        _slot(script, "e", node.base)
        _slot(script, "sub", node.subscript)
        return script

    if isinstance(node, Delimiter):
        delimiter = _math_element("d")
        d_pr = _math_element("dPr", delimiter)
        _math_element("begChr", d_pr, val=node.open_char)
        _math_element("endChr", d_pr, val=node.close_char)
        _slot(delimiter, "e", node.body)
        return delimiter

    if isinstance(node, Matrix):
        matrix = _math_element("m")
        m_pr = _math_element("mPr", matrix)
        mc_pr = _math_element("mcPr", _math_element("mc", _math_element("mcs", m_pr)))
        _math_element("count", mc_pr, val=str(node.column_count))
        _math_element("mcJc", mc_pr, val="center")
        for row in node.cells:
            matrix_row = _math_element("mr", matrix)
            for cell in row:
                _slot(matrix_row, "e", cell)
        return matrix

    raise TypeError(f"Unsupported math node: {type(node).__name__}")


def integral_nodes(integrand: Optional[MathInput], lower: Optional[MathInput] = None, upper: Optional[MathInput] = None) -> List[MathNode]:
    """Compose an integral from script nodes over the integral sign.

    Empty limits are left out entirely. With no limits the sign sits in an
    undecorated delimiter group. A non-empty integrand follows as its own run.
    """
    sign: MathNode = MathRun(INTEGRAL_SIGN)
    lower_node = _optional_node(lower)
    upper_node = _optional_node(upper)

    if lower_node is not None:
        sign = SubScript(sign, lower_node)
    if upper_node is not None:
        sign = SuperScript(sign, upper_node)
    if lower_node is None and upper_node is None:
        sign = Delimiter(sign, "", "")

    nodes: List[MathNode] = [sign]
    integrand_node = _optional_node(integrand)
    if integrand_node is not None:
        if isinstance(integrand_node, MathRun):
            integrand_node = MathRun(f" {integrand_node.text}")
        nodes.append(integrand_node)
    return nodes


_NODE_TYPES = (MathRun, Fraction, Radical, SuperScript, SubScript, Delimiter, Matrix)


def _optional_node(value: Optional[MathInput]) -> Optional[MathNode]:
    if value is None or value == "":
        return None
    return _require_node(value, "math argument")


def _require_node(value: Optional[MathInput], name: str) -> MathNode:
    if value is None:
        raise ArgumentError(f"{name} must not be None")
    node = as_node(value)
    if not isinstance(node, _NODE_TYPES):
        raise ArgumentError(f"{name} must be text or a math node, got {type(value).__name__}")
    return node


def build_matrix(rows: int, cols: int, values: Optional[MatrixValues]) -> Matrix:
    """Validate ``values`` against ``rows`` x ``cols`` and return the matrix node.

    ``values`` may be nested row by row or flat in row-major order.
    """
    if values is None:
        raise ArgumentError("values must not be None")
    if rows < 1 or cols < 1:
        raise InvalidDimensionError(f"Matrix needs at least one row and column, got {rows}x{cols}")

    items = list(values)
    nested = bool(items) and all(isinstance(item, (list, tuple)) for item in items)
    if nested:
        if len(items) != rows or any(len(row) != cols for row in items):
            shape = f"{len(items)}x{'/'.join(str(len(row)) for row in items)}"
            raise DimensionMismatchError(
                f"The values array dimensions ({shape}) must match the specified rows and columns ({rows}x{cols})."
            )
        grid = items
    else:
        if len(items) != rows * cols:
            raise DimensionMismatchError(
                f"Expected {rows * cols} matrix values for {rows}x{cols}, got {len(items)}."
            )
        grid = [items[start : start + cols] for start in range(0, len(items), cols)]

    for row in grid:
        for cell in row:
            _require_node(cell, "matrix value")
    return matrix_from_rows(grid)


class MathBuilder:
    """Appends one equation paragraph per call."""

    def __init__(self, session: "DocumentSession") -> None:
        self._session = session

    def add_expression(self, *nodes: MathInput) -> Paragraph:
        """Append a paragraph holding a single ``m:oMath`` built from ``nodes``."""
        if not nodes:
            raise ArgumentError("An equation needs at least one math node")
        resolved = [_require_node(node, "math node") for node in nodes]

        o_math = _math_element("oMath")
        for node in resolved:
            o_math.append(render_math(node))

        p = make_paragraph()
        p.append(o_math)
        self._session.append_block(p)
        LOGGER.debug("Added equation: %s", "".join(flatten_text(node) for node in resolved))
        return self._session.paragraph(p)

    def add_equation(self, equation: str) -> Paragraph:
        return self.add_expression(_require_node(equation, "equation"))

    def add_fraction(self, numerator: MathInput, denominator: MathInput) -> Paragraph:
        return self.add_expression(
            Fraction(_require_node(numerator, "numerator"), _require_node(denominator, "denominator"))
        )

    def add_radical(self, base: MathInput, degree: Optional[MathInput] = None) -> Paragraph:
        return self.add_expression(Radical(_require_node(base, "base"), _optional_node(degree)))

    def add_superscript(self, base: MathInput, exponent: MathInput) -> Paragraph:
        return self.add_expression(SuperScript(_require_node(base, "base"), _require_node(exponent, "exponent")))

    def add_subscript(self, base: MathInput, subscript: MathInput) -> Paragraph:
        return self.add_expression(SubScript(_require_node(base, "base"), _require_node(subscript, "subscript")))

    def add_integral(
        self,
        integrand: Optional[MathInput],
        lower: Optional[MathInput] = None,
        upper: Optional[MathInput] = None,
    ) -> Paragraph:
        return self.add_expression(*integral_nodes(integrand, lower, upper))

    def add_matrix(self, rows: int, cols: int, values: Optional[MatrixValues]) -> Paragraph:
        """Append a ``rows`` x ``cols`` matrix; nothing is appended when validation fails."""
        return self.add_expression(build_matrix(rows, cols, values))

    def add_parentheses(self, content: MathInput, open_char: str = "(", close_char: str = ")") -> Paragraph:
        return self.add_expression(Delimiter(_require_node(content, "content"), open_char, close_char))
