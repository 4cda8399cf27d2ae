"""Table grid construction, cell addressing, merging and formatting."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Union

from docx.oxml import OxmlElement
from docx.oxml.ns import qn

from docx_builder.builder.paragraphs import make_paragraph, set_justification
from docx_builder.errors import ArgumentError, IndexOutOfRangeError, InvalidDimensionError, InvalidRangeError
from docx_builder.model.enums import (
    Justification,
    TableAlignment,
    TableBorderStyle,
    VerticalAlignment,
    WidthUnit,
)
from docx_builder.utils.logger import get_logger
from docx_builder.utils.xml_utils import replace_child

if TYPE_CHECKING:
    from docx_builder.builder.session import DocumentSession

LOGGER = get_logger(__name__)

_TBLPR_ORDER = (
    "w:tblStyle", "w:tblpPr", "w:tblOverlap", "w:bidiVisual", "w:tblStyleRowBandSize",
    "w:tblStyleColBandSize", "w:tblW", "w:jc", "w:tblCellSpacing", "w:tblInd",
    "w:tblBorders", "w:shd", "w:tblLayout", "w:tblCellMar", "w:tblLook",
)
_TCPR_ORDER = (
    "w:cnfStyle", "w:tcW", "w:gridSpan", "w:hMerge", "w:vMerge", "w:tcBorders", "w:shd",
    "w:noWrap", "w:tcMar", "w:textDirection", "w:tcFitText", "w:vAlign", "w:hideMark",
)
_RPR_ORDER = (
    "w:rStyle", "w:rFonts", "w:b", "w:bCs", "w:i", "w:iCs", "w:caps", "w:smallCaps",
    "w:strike", "w:dstrike", "w:outline", "w:shadow", "w:emboss", "w:imprint", "w:noProof",
    "w:snapToGrid", "w:vanish", "w:webHidden", "w:color", "w:spacing", "w:w", "w:kern",
    "w:position", "w:sz", "w:szCs", "w:highlight", "w:u", "w:effect", "w:bdr", "w:shd",
    "w:fitText", "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang", "w:eastAsianLayout",
    "w:specVanish", "w:oMath",
)
_BORDER_EDGES = ("w:top", "w:left", "w:bottom", "w:right", "w:insideH", "w:insideV")

Color = Optional[str]


def _successors(order, tag: str):
    return order[order.index(tag) + 1:]


def _set_ordered(parent, child, order, tag: str):
    return replace_child(parent, child, _successors(order, tag))


def _get_or_add_tbl_pr(tbl):
    tbl_pr = tbl.find(qn("w:tblPr"))
    if tbl_pr is None:
        tbl_pr = OxmlElement("w:tblPr")
        tbl.insert(0, tbl_pr)
    return tbl_pr


def _get_or_add_tc_pr(tc):
    tc_pr = tc.find(qn("w:tcPr"))
    if tc_pr is None:
        tc_pr = OxmlElement("w:tcPr")
        tc.insert(0, tc_pr)
    return tc_pr


def _get_or_add_r_pr(r):
    r_pr = r.find(qn("w:rPr"))
    if r_pr is None:
        r_pr = OxmlElement("w:rPr")
        r.insert(0, r_pr)
    return r_pr


def _make_shading(fill: str):
    return OxmlElement("w:shd", attrs={qn("w:val"): "clear", qn("w:color"): "auto", qn("w:fill"): fill})


def _make_borders(style: TableBorderStyle, size: int, color: Color):
    borders = OxmlElement("w:tblBorders")
    for edge in _BORDER_EDGES:
        attrs = {qn("w:val"): style.value, qn("w:sz"): str(size), qn("w:space"): "0"}
        if color:
            attrs[qn("w:color")] = color
        borders.append(OxmlElement(edge, attrs=attrs))
    return borders


def _make_empty_cell():
    tc = OxmlElement("w:tc")
    tc.append(make_paragraph(""))
    return tc


def _cell_text(tc) -> str:
    return "".join(t.text or "" for t in tc.iter(qn("w:t")))


class TableHandle:
    """A ``w:tbl`` element with indexed row and cell storage.

    Rows and cells are addressed by position in insertion order, so after a
    horizontal merge the cells to the right of the merged span shift left.
    """

    def __init__(self, element, rows: List, cells: List[List]) -> None:
        self.element = element
        self._rows = rows
        self._cells = cells

    @classmethod
    def from_element(cls, tbl) -> "TableHandle":
        rows = tbl.findall(qn("w:tr"))
        cells = [row.findall(qn("w:tc")) for row in rows]
        return cls(tbl, list(rows), cells)

    @property
    def row_count(self) -> int:
        return len(self._rows)

    @property
    def column_count(self) -> int:
        """Number of grid columns, independent of merges."""
        grid = self.element.find(qn("w:tblGrid"))
        return 0 if grid is None else len(grid.findall(qn("w:gridCol")))

    def cell_count(self, row: int) -> int:
        return len(self._cells[self._check_row(row)])

    def cells_in_row(self, row: int) -> List:
        return list(self._cells[self._check_row(row)])

    def cell(self, row: int, col: int):
        cells = self._cells[self._check_row(row)]
        if 0 <= col < len(cells) and cells[col].getparent() is not self._rows[row]:
            # edited through another handle to the same table
            self._reindex()
            cells = self._cells[self._check_row(row)]
        if not 0 <= col < len(cells):
            raise IndexOutOfRangeError(f"Column {col} out of range for row {row} ({len(cells)} cells)")
        return cells[col]

    def cell_text(self, row: int, col: int) -> str:
        return _cell_text(self.cell(row, col))

    def grid_span(self, row: int, col: int) -> int:
        tc_pr = self.cell(row, col).find(qn("w:tcPr"))
        span = None if tc_pr is None else tc_pr.find(qn("w:gridSpan"))
        return 1 if span is None else int(span.get(qn("w:val")))

    def vertical_merge(self, row: int, col: int) -> Optional[str]:
        tc_pr = self.cell(row, col).find(qn("w:tcPr"))
        v_merge = None if tc_pr is None else tc_pr.find(qn("w:vMerge"))
        if v_merge is None:
            return None
        return v_merge.get(qn("w:val"), "continue")

    def shading(self, row: int, col: int) -> Optional[str]:
        tc_pr = self.cell(row, col).find(qn("w:tcPr"))
        shd = None if tc_pr is None else tc_pr.find(qn("w:shd"))
        return None if shd is None else shd.get(qn("w:fill"))

    def remove_cell(self, row: int, col: int) -> None:
        tc = self.cell(row, col)
        self._rows[row].remove(tc)
        del self._cells[row][col]

    def _reindex(self) -> None:
        self._rows = self.element.findall(qn("w:tr"))
        self._cells = [row.findall(qn("w:tc")) for row in self._rows]

    def _check_row(self, row: int) -> int:
        if not 0 <= row < len(self._rows):
            raise IndexOutOfRangeError(f"Row {row} out of range ({len(self._rows)} rows)")
        return row


class TableBuilder:
    """Creates tables in the session body and edits them in place."""

    def __init__(self, session: "DocumentSession") -> None:
        self._session = session

    def create_table(self, rows: int, cols: int, style_id: Optional[str] = None) -> TableHandle:
        if rows < 1 or cols < 1:
            raise InvalidDimensionError(f"Table needs at least one row and column, got {rows}x{cols}")
        config = self._session.config

        tbl = OxmlElement("w:tbl")
        tbl_pr = OxmlElement("w:tblPr")
        if style_id:
            tbl_pr.append(OxmlElement("w:tblStyle", attrs={qn("w:val"): style_id}))
        tbl_pr.append(OxmlElement("w:tblW", attrs={qn("w:w"): str(config.table_width), qn("w:type"): WidthUnit.PCT.value}))
        tbl_pr.append(_make_borders(config.border_style, config.border_size, config.border_color))
        tbl.append(tbl_pr)

        grid = OxmlElement("w:tblGrid")
        for _ in range(cols):
            grid.append(OxmlElement("w:gridCol"))
        tbl.append(grid)

        for _ in range(rows):
            tr = OxmlElement("w:tr")
            for _ in range(cols):
                tr.append(_make_empty_cell())
            tbl.append(tr)

        self._session.append_block(tbl)
        LOGGER.debug("Created %dx%d table", rows, cols)
        return self._session.table_handle(tbl)

    def set_cell_text(self, table: TableHandle, row: int, col: int, text: str, style_id: Optional[str] = None) -> None:
        """Replace a cell's content with one paragraph, keeping its ``w:tcPr``."""
        _require_table(table)
        tc = table.cell(row, col)
        if table.vertical_merge(row, col) == "continue":
            LOGGER.warning("Cell (%d, %d) continues a vertical merge; its text will be hidden", row, col)
        for child in list(tc):
            if child.tag != qn("w:tcPr"):
                tc.remove(child)
        tc.append(make_paragraph(text, style_id))

    def set_cell_properties(
        self,
        table: TableHandle,
        row: int,
        col: int,
        background_color: Color = None,
        vertical_alignment: Optional[VerticalAlignment] = None,
    ) -> None:
        _require_table(table)
        tc = table.cell(row, col)
        tc_pr = _get_or_add_tc_pr(tc)
        if background_color:
            _set_ordered(tc_pr, _make_shading(background_color), _TCPR_ORDER, "w:shd")
        if vertical_alignment is not None:
            v_align = OxmlElement("w:vAlign", attrs={qn("w:val"): vertical_alignment.value})
            _set_ordered(tc_pr, v_align, _TCPR_ORDER, "w:vAlign")

    def merge_cells(self, table: TableHandle, start_row: int, start_col: int, end_row: int, end_col: int) -> None:
        """Merge the rectangle spanning the two corners, inclusive.

        A rectangle is merged row by row horizontally first, then the first
        column of the merged rows vertically.
        """
        _require_table(table)
        if start_row > end_row or start_col > end_col:
            raise InvalidRangeError(
                f"End position ({end_row}, {end_col}) must not precede start ({start_row}, {start_col})"
            )
        for r in range(start_row, end_row + 1):
            table.cell(r, start_col)
            table.cell(r, end_col)

        if start_row == end_row:
            self._merge_horizontal(table, start_row, start_col, end_col)
        elif start_col == end_col:
            self._merge_vertical(table, start_row, end_row, start_col)
        else:
            for r in range(start_row, end_row + 1):
                self._merge_horizontal(table, r, start_col, end_col)
            self._merge_vertical(table, start_row, end_row, start_col)
        LOGGER.debug("Merged cells (%d, %d)-(%d, %d)", start_row, start_col, end_row, end_col)

    def _merge_horizontal(self, table: TableHandle, row: int, start_col: int, end_col: int) -> None:
        if start_col == end_col:
            return
        span = sum(table.grid_span(row, c) for c in range(start_col, end_col + 1))
        first = table.cell(row, start_col)
        grid_span = OxmlElement("w:gridSpan", attrs={qn("w:val"): str(span)})
        _set_ordered(_get_or_add_tc_pr(first), grid_span, _TCPR_ORDER, "w:gridSpan")
        for _ in range(start_col + 1, end_col + 1):
            table.remove_cell(row, start_col + 1)

    def _merge_vertical(self, table: TableHandle, start_row: int, end_row: int, col: int) -> None:
        clear = self._session.config.clear_continued_cells
        for r in range(start_row, end_row + 1):
            tc = table.cell(r, col)
            value = "restart" if r == start_row else "continue"
            v_merge = OxmlElement("w:vMerge", attrs={qn("w:val"): value})
            _set_ordered(_get_or_add_tc_pr(tc), v_merge, _TCPR_ORDER, "w:vMerge")
            if r == start_row or not _cell_text(tc):
                continue
            if clear:
                for child in list(tc):
                    if child.tag != qn("w:tcPr"):
                        tc.remove(child)
                tc.append(make_paragraph(""))
            else:
                LOGGER.warning("Cell (%d, %d) keeps text under a vertical merge", r, col)

    def set_table_borders(
        self,
        table: TableHandle,
        border_style: TableBorderStyle,
        border_size: int,
        border_color: Color,
    ) -> None:
        _require_table(table)
        borders = _make_borders(border_style, border_size, border_color)
        _set_ordered(_get_or_add_tbl_pr(table.element), borders, _TBLPR_ORDER, "w:tblBorders")

    def set_table_alignment(self, table: TableHandle, alignment: TableAlignment) -> None:
        _require_table(table)
        jc = OxmlElement("w:jc", attrs={qn("w:val"): alignment.value})
        _set_ordered(_get_or_add_tbl_pr(table.element), jc, _TBLPR_ORDER, "w:jc")

    def set_column_width(self, table: TableHandle, col: int, width: Union[int, str], unit: Union[str, WidthUnit]) -> None:
        """Set ``w:tcW`` on every row's cell at ``col``; rows with fewer cells are skipped."""
        _require_table(table)
        width_unit = WidthUnit.parse(unit)
        for r in range(table.row_count):
            if col >= table.cell_count(r):
                continue
            tc_w = OxmlElement("w:tcW", attrs={qn("w:w"): str(width), qn("w:type"): width_unit.value})
            _set_ordered(_get_or_add_tc_pr(table.cell(r, col)), tc_w, _TCPR_ORDER, "w:tcW")

        grid = table.element.find(qn("w:tblGrid"))
        grid_cols = [] if grid is None else grid.findall(qn("w:gridCol"))
        # gridCol widths are always twips
        if width_unit is WidthUnit.DXA and col < len(grid_cols):
            grid_cols[col].set(qn("w:w"), str(width))

    def apply_alternating_row_shading(
        self,
        table: TableHandle,
        even_row_color: str,
        odd_row_color: str,
        header_row_color: Color = None,
    ) -> None:
        """Shade rows by parity; row 0 counts as even unless a header color is given."""
        _require_table(table)
        for r in range(table.row_count):
            if r == 0 and header_row_color:
                fill = header_row_color
            elif r % 2 == 0:
                fill = even_row_color
            else:
                fill = odd_row_color
            for tc in table.cells_in_row(r):
                _set_ordered(_get_or_add_tc_pr(tc), _make_shading(fill), _TCPR_ORDER, "w:shd")

    def set_header_row(
        self,
        table: TableHandle,
        header_row_index: int,
        font_color: str,
        background_color: str,
        bold: bool = True,
    ) -> None:
        _require_table(table)
        for tc in table.cells_in_row(header_row_index):
            tc_pr = _get_or_add_tc_pr(tc)
            _set_ordered(tc_pr, _make_shading(background_color), _TCPR_ORDER, "w:shd")
            v_align = OxmlElement("w:vAlign", attrs={qn("w:val"): VerticalAlignment.CENTER.value})
            _set_ordered(tc_pr, v_align, _TCPR_ORDER, "w:vAlign")

            for p in tc.findall(qn("w:p")):
                set_justification(p, Justification.CENTER)
                for r in p.findall(qn("w:r")):
                    r_pr = _get_or_add_r_pr(r)
                    _set_ordered(r_pr, OxmlElement("w:color", attrs={qn("w:val"): font_color}), _RPR_ORDER, "w:color")
                    if bold:
                        _set_ordered(r_pr, OxmlElement("w:b"), _RPR_ORDER, "w:b")


def _require_table(table: Optional[TableHandle]) -> None:
    if table is None:
        raise ArgumentError("table must not be None")
