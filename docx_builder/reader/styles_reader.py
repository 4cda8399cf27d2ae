"""Extract style definitions from a styles part."""
from __future__ import annotations

from typing import Dict, Optional
from xml.etree import ElementTree as ET

from docx_builder.model.style_model import StyleDefinition, StylesCatalog
from docx_builder.utils.xml_utils import Namespaces, parse_xml, qualify


class StylesReader:
    """Collect ``w:style`` entries as written, without resolving ``basedOn`` chains."""

    def __init__(self, styles_xml: ET.ElementTree) -> None:
        self._styles_xml = styles_xml

    @classmethod
    def from_bytes(cls, data: bytes) -> "StylesReader":
        return cls(parse_xml(data))

    def parse(self) -> StylesCatalog:
        styles: Dict[str, StyleDefinition] = {}
        root = self._styles_xml.getroot()
        for style_el in root.findall("w:style", Namespaces.WORD):
            style_id = style_el.attrib.get(qualify("w:styleId"))
            if not style_id:
                continue
            styles[style_id] = self._read_style(style_id, style_el)
        return StylesCatalog(styles)

    def _read_style(self, style_id: str, style_el: ET.Element) -> StyleDefinition:
        r_pr = style_el.find("w:rPr", Namespaces.WORD)
        return StyleDefinition(
            style_id=style_id,
            style_type=style_el.attrib.get(qualify("w:type"), "paragraph"),
            name=self._child_val(style_el, "w:name"),
            based_on=self._child_val(style_el, "w:basedOn"),
            next_style=self._child_val(style_el, "w:next"),
            is_default=style_el.attrib.get(qualify("w:default")) in ("1", "true"),
            is_primary=style_el.find("w:qFormat", Namespaces.WORD) is not None,
            bold=self._is_on(r_pr, "w:b"),
            italic=self._is_on(r_pr, "w:i"),
            color=self._child_val(r_pr, "w:color"),
            font_size=self._int_val(r_pr, "w:sz"),
            shading=self._shading(style_el),
        )

    def _child_val(self, element: Optional[ET.Element], child_name: str) -> Optional[str]:
        if element is None:
            return None
        child = element.find(child_name, Namespaces.WORD)
        if child is None:
            return None
        return child.attrib.get(qualify("w:val"))

    def _int_val(self, element: Optional[ET.Element], child_name: str) -> Optional[int]:
        value = self._child_val(element, child_name)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def _is_on(self, element: Optional[ET.Element], child_name: str) -> bool:
        """Toggle properties are on when present unless ``w:val`` switches them off."""
        if element is None or element.find(child_name, Namespaces.WORD) is None:
            return False
        return self._child_val(element, child_name) not in ("0", "false", "off")

    def _shading(self, style_el: ET.Element) -> Optional[str]:
        for block in ("w:pPr", "w:rPr", "w:tblPr"):
            shd = style_el.find(f"{block}/w:shd", Namespaces.WORD)
            if shd is not None:
                return shd.attrib.get(qualify("w:fill"))
        return None
