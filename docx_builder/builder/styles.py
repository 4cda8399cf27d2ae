"""Style part seeding and template style import."""
from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Tuple, Type, Union

import docx
from docx.opc.constants import CONTENT_TYPE as CT
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.packuri import PackURI
from docx.opc.part import XmlPart
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.parts.numbering import NumberingPart
from docx.parts.styles import StylesPart

from docx_builder.errors import MissingStylesError
from docx_builder.model.style_model import DEFAULT_STYLES, StyleDefinition, StylesCatalog
from docx_builder.reader.docx_loader import DocxPackage
from docx_builder.reader.styles_reader import StylesReader
from docx_builder.utils.logger import get_logger

if TYPE_CHECKING:
    from docx_builder.builder.session import DocumentSession

LOGGER = get_logger(__name__)

STYLES_PARTNAME = "/word/styles.xml"

# Parts cloned from a template besides the styles part: reltype, content type, part class.
_COMPANION_PARTS: Tuple[Tuple[str, str, Type[XmlPart]], ...] = (
    (RT.NUMBERING, CT.WML_NUMBERING, NumberingPart),
    (RT.THEME, CT.OFC_THEME, XmlPart),
    (RT.FONT_TABLE, CT.WML_FONT_TABLE, XmlPart),
)


def build_style_element(definition: StyleDefinition):
    """Serialize a :class:`StyleDefinition` into a ``w:style`` element."""
    style = OxmlElement("w:style", attrs={qn("w:type"): definition.style_type, qn("w:styleId"): definition.style_id})
    if definition.is_default:
        style.set(qn("w:default"), "1")
    if definition.name:
        style.append(OxmlElement("w:name", attrs={qn("w:val"): definition.name}))
    if definition.based_on:
        style.append(OxmlElement("w:basedOn", attrs={qn("w:val"): definition.based_on}))
    if definition.next_style:
        style.append(OxmlElement("w:next", attrs={qn("w:val"): definition.next_style}))
    if definition.is_primary:
        style.append(OxmlElement("w:qFormat"))

    if definition.shading and definition.style_type == "paragraph":
        p_pr = OxmlElement("w:pPr")
        p_pr.append(_shading(definition.shading))
        style.append(p_pr)

    r_pr = OxmlElement("w:rPr")
    if definition.bold:
        r_pr.append(OxmlElement("w:b"))
    if definition.italic:
        r_pr.append(OxmlElement("w:i"))
    if definition.color:
        r_pr.append(OxmlElement("w:color", attrs={qn("w:val"): definition.color}))
    if definition.font_size:
        r_pr.append(OxmlElement("w:sz", attrs={qn("w:val"): str(definition.font_size)}))
    if definition.shading and definition.style_type == "character":
        r_pr.append(_shading(definition.shading))
    if len(r_pr):
        style.append(r_pr)

    if definition.shading and definition.style_type == "table":
        tbl_pr = OxmlElement("w:tblPr")
        tbl_pr.append(_shading(definition.shading))
        style.append(tbl_pr)
    return style


def _shading(fill: str):
    return OxmlElement("w:shd", attrs={qn("w:val"): "clear", qn("w:color"): "auto", qn("w:fill"): fill})


class StyleCatalog:
    """Owns the style definitions part of a session's package."""

    def __init__(self, session: "DocumentSession") -> None:
        self._session = session

    def has_styles_part(self) -> bool:
        return self._session.styles_part() is not None

    def reset(self) -> None:
        """Replace the style part with an empty ``w:styles`` root."""
        existing = self._session.styles_part()
        partname = existing.partname if existing is not None else PackURI(STYLES_PARTNAME)
        element = parse_xml(f"<w:styles {nsdecls('w')}/>")
        part = StylesPart(partname, CT.WML_STYLES, element, self._session.part.package)
        self._session.replace_part(RT.STYLES, part)

    def register_default_styles(self) -> None:
        for definition in DEFAULT_STYLES:
            self.add_style(definition)
        LOGGER.debug("Registered %d default styles", len(DEFAULT_STYLES))

    def add_style(self, definition: StyleDefinition) -> None:
        """Add a style, replacing any existing style with the same id."""
        root = self._styles_root()
        for existing in self._style_elements(root):
            if existing.get(qn("w:styleId")) == definition.style_id:
                root.remove(existing)
        root.append(build_style_element(definition))

    def style_ids(self) -> List[str]:
        return [style.get(qn("w:styleId")) for style in self._style_elements(self._styles_root())]

    def catalog(self) -> StylesCatalog:
        """Read the current style part back into a :class:`StylesCatalog`."""
        return StylesReader.from_bytes(self._require_styles_part().blob).parse()

    def import_styles_from(self, template_path: Union[str, Path]) -> None:
        """Clone the template's styles, numbering, theme and font table wholesale.

        The existing style part is replaced, not merged, so styles registered
        earlier are lost unless the template defines them too.
        """
        template_path = Path(template_path)
        previous = set(self.style_ids()) if self.has_styles_part() else set()
        # python-docx reads the whole archive and closes it before returning.
        template = docx.Document(str(template_path))
        styles_source = _related(template.part, RT.STYLES)
        if styles_source is None:
            raise MissingStylesError(f"Template {template_path.name} does not contain any styles.")
        self._clone_part(styles_source, RT.STYLES, CT.WML_STYLES, StylesPart)
        for reltype, content_type, part_cls in _COMPANION_PARTS:
            source = _related(template.part, reltype)
            if source is not None:
                self._clone_part(source, reltype, content_type, part_cls)

        dropped = previous - set(self.style_ids())
        if dropped:
            LOGGER.warning("Template import dropped styles: %s", ", ".join(sorted(dropped)))
        LOGGER.info("Imported styles from %s", template_path.name)

    # ------------------------------------------------------------------
    def _clone_part(self, source, reltype: str, content_type: str, part_cls: Type[XmlPart]) -> None:
        package = self._session.part.package
        existing = self._session.related_part(reltype)
        partname = existing.partname if existing is not None else PackURI(source.partname)
        # Reparse the serialized blob so the clone shares no nodes with the template.
        element = parse_xml(source.blob)
        self._session.replace_part(reltype, part_cls(partname, content_type, element, package))
        LOGGER.debug("Cloned %s from template", partname)

    def _require_styles_part(self):
        part = self._session.styles_part()
        if part is None:
            raise MissingStylesError("Document has no styles part")
        return part

    def _styles_root(self):
        return self._require_styles_part().element

    @staticmethod
    def _style_elements(root) -> Iterable:
        return root.findall(qn("w:style"))


def _related(part, reltype: str):
    try:
        return part.part_related_by(reltype)
    except KeyError:
        return None


def get_available_styles(document_path: Union[str, Path]) -> Dict[str, str]:
    """Return ``{style_id: name}`` for every named style in a ``.docx`` file."""
    package = DocxPackage.load(Path(document_path))
    if package.styles_xml is None:
        return {}
    return StylesReader(package.styles_xml).parse().names()
