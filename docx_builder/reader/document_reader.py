"""Parse the main document part of a saved package into an outline."""
from __future__ import annotations

from typing import List, Optional
from xml.etree import ElementTree as ET

from docx_builder.model.elements import (
    BlockElement,
    DocumentOutline,
    DrawingReference,
    ParagraphElement,
    RunFragment,
    TableCell,
    TableElement,
    TableRow,
)
from docx_builder.reader.docx_loader import DocxPackage
from docx_builder.utils.logger import get_logger
from docx_builder.utils.xml_utils import M_NS, Namespaces, R_NS, local_name, qualify

LOGGER = get_logger(__name__)


class DocumentReader:
    """Turns ``word/document.xml`` back into paragraph and table blocks."""

    def __init__(self, package: DocxPackage) -> None:
        self._package = package

    def parse(self) -> DocumentOutline:
        root = self._package.require_document_xml().getroot()
        body = root.find("w:body", Namespaces.WORD)
        if body is None:
            LOGGER.warning("document.xml missing body element")
            return DocumentOutline()

        blocks: List[BlockElement] = []
        for child in list(body):
            tag = local_name(child.tag)
            if tag == "p":
                blocks.append(self._parse_paragraph(child))
            elif tag == "tbl":
                blocks.append(self._parse_table(child))
            elif tag != "sectPr":
                LOGGER.debug("Skipping unsupported element: %s", tag)
        return DocumentOutline(blocks=blocks)

    def dangling_relationships(self) -> List[str]:
        """Relationship ids used in the document part but missing from its rels part."""
        root = self._package.require_document_xml().getroot()
        known = self._package.relationships.for_source(self._package.document_part)
        missing: List[str] = []
        for element in root.iter():
            for attr, value in element.attrib.items():
                if attr.startswith(f"{{{R_NS}}}") and value not in known and value not in missing:
                    missing.append(value)
        return missing

    # ------------------------------------------------------------------
    def _parse_paragraph(self, paragraph_el: ET.Element) -> ParagraphElement:
        runs: List[RunFragment] = []
        for run_el in paragraph_el.iter(qualify("w:r")):
            runs.extend(self._parse_run(run_el))

        math_nodes = list(paragraph_el.iter(f"{{{M_NS}}}oMath"))
        math_text = "".join(t.text or "" for node in math_nodes for t in node.iter(f"{{{M_NS}}}t"))
        return ParagraphElement(
            runs=runs,
            style_id=self._get_val(paragraph_el, "w:pPr/w:pStyle"),
            justification=self._get_val(paragraph_el, "w:pPr/w:jc"),
            math_count=len(math_nodes),
            math_text=math_text,
        )

    def _parse_run(self, run_el: ET.Element) -> List[RunFragment]:
        fragments: List[RunFragment] = []
        text = ""
        for child in list(run_el):
            tag = local_name(child.tag)
            if tag == "t":
                text += child.text or ""
            elif tag == "tab":
                text += "\t"
            elif tag == "br":
                text += "\n"
            elif tag == "fldChar":
                fragments.append(RunFragment(text="", field_char=child.attrib.get(qualify("w:fldCharType"))))
            elif tag == "instrText":
                fragments.append(RunFragment(text="", field_code=child.text or ""))
            elif tag == "drawing":
                drawing = self._parse_drawing(child)
                if drawing is not None:
                    fragments.append(RunFragment(text="", drawing=drawing))
            elif tag != "rPr":
                LOGGER.debug("Skipping run child element: %s", tag)
        if text or not fragments:
            fragments.append(RunFragment(text=text))
        return fragments

    def _parse_drawing(self, drawing_el: ET.Element) -> Optional[DrawingReference]:
        container = drawing_el.find("wp:inline", Namespaces.DRAWING)
        inline = container is not None
        if container is None:
            container = drawing_el.find("wp:anchor", Namespaces.DRAWING)
        if container is None:
            return None

        blip = container.find(".//a:blip", Namespaces.DRAWING)
        r_id = blip.attrib.get(f"{{{R_NS}}}embed") if blip is not None else None
        if not r_id:
            return None

        rel = self._package.relationships.find(self._package.document_part, r_id)
        extent = container.find("wp:extent", Namespaces.DRAWING)
        doc_pr = container.find("wp:docPr", Namespaces.DRAWING)
        return DrawingReference(
            r_id=r_id,
            target=rel.resolved_target if rel else None,
            name=doc_pr.attrib.get("name") if doc_pr is not None else None,
            width_emu=self._int_attr(extent, "cx"),
            height_emu=self._int_attr(extent, "cy"),
            inline=inline,
        )

    def _parse_table(self, table_el: ET.Element) -> TableElement:
        rows: List[TableRow] = []
        for row_el in table_el.findall("w:tr", Namespaces.WORD):
            cells = [self._parse_cell(cell_el) for cell_el in row_el.findall("w:tc", Namespaces.WORD)]
            rows.append(TableRow(cells=cells))

        grid = [
            self._int_attr(col, qualify("w:w"))
            for col in table_el.findall("w:tblGrid/w:gridCol", Namespaces.WORD)
        ]
        return TableElement(
            rows=rows,
            style_id=self._get_val(table_el, "w:tblPr/w:tblStyle"),
            alignment=self._get_val(table_el, "w:tblPr/w:jc"),
            grid_columns=grid,
        )

    def _parse_cell(self, cell_el: ET.Element) -> TableCell:
        paragraphs = cell_el.findall("w:p", Namespaces.WORD)
        text = "\n".join(
            "".join(t.text or "" for t in p.iter(qualify("w:t"))) for p in paragraphs
        )
        v_merge = None
        v_merge_el = cell_el.find("w:tcPr/w:vMerge", Namespaces.WORD)
        if v_merge_el is not None:
            v_merge = v_merge_el.attrib.get(qualify("w:val"), "continue")
        shd = cell_el.find("w:tcPr/w:shd", Namespaces.WORD)
        return TableCell(
            text=text,
            grid_span=self._int_attr(cell_el.find("w:tcPr/w:gridSpan", Namespaces.WORD), qualify("w:val")) or 1,
            v_merge=v_merge,
            shading=shd.attrib.get(qualify("w:fill")) if shd is not None else None,
            vertical_alignment=self._get_val(cell_el, "w:tcPr/w:vAlign"),
        )

    # ------------------------------------------------------------------
    def _get_val(self, element: ET.Element, path: str) -> Optional[str]:
        found = element.find(path, Namespaces.WORD)
        if found is None:
            return None
        return found.attrib.get(qualify("w:val"))

    @staticmethod
    def _int_attr(element: Optional[ET.Element], attr: str) -> Optional[int]:
        if element is None:
            return None
        value = element.attrib.get(attr)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
