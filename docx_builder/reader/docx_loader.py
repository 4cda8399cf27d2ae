"""Load a saved ``.docx`` archive into raw parts and parsed XML trees."""
from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from docx_builder.errors import PackageNotFoundError
from docx_builder.reader.rels_parser import (
    MAIN_DOCUMENT_PART,
    RELTYPE_FONT_TABLE,
    RELTYPE_NUMBERING,
    RELTYPE_STYLES,
    RELTYPE_THEME,
    Relationships,
)
from docx_builder.utils.logger import get_logger
from docx_builder.utils.xml_utils import R_NS, parse_xml

LOGGER = get_logger(__name__)

RELTYPE_OFFICE_DOCUMENT = f"{R_NS}/officeDocument"


@dataclass(slots=True)
class DocxPackage:
    """XML parts and media of a DOCX archive, located through its relationships."""

    raw_parts: Mapping[str, bytes]
    xml_cache: Dict[str, ET.ElementTree] = field(default_factory=dict)

    document_part: str = MAIN_DOCUMENT_PART
    document_xml: Optional[ET.ElementTree] = None
    styles_xml: Optional[ET.ElementTree] = None
    numbering_xml: Optional[ET.ElementTree] = None
    theme_xml: Optional[ET.ElementTree] = None
    font_table_xml: Optional[ET.ElementTree] = None

    relationships: Relationships = field(init=False)
    media: Dict[str, bytes] = field(default_factory=dict)

    @classmethod
    def load(cls, docx_path: Path) -> "DocxPackage":
        """Open a DOCX archive and populate the XML trees it relates."""
        docx_path = Path(docx_path)
        if not docx_path.is_file():
            raise PackageNotFoundError(f"Package not found at '{docx_path}'")
        with zipfile.ZipFile(docx_path) as docx_zip:
            parts = {name: docx_zip.read(name) for name in docx_zip.namelist()}

        LOGGER.debug("Loaded %d parts from %s", len(parts), docx_path.name)

        package = cls(raw_parts=parts)
        package._initialize()
        return package

    # ------------------------------------------------------------------
    def require_document_xml(self) -> ET.ElementTree:
        if self.document_xml is None:
            raise KeyError(f"Primary document part missing from package: {self.document_part}")
        return self.document_xml

    def get_xml_part(self, name: str) -> Optional[ET.ElementTree]:
        if name in self.xml_cache:
            return self.xml_cache[name]
        data = self.raw_parts.get(name)
        if data is None:
            return None
        tree = parse_xml(data)
        self.xml_cache[name] = tree
        return tree

    # ------------------------------------------------------------------
    def _initialize(self) -> None:
        self.relationships = Relationships.from_package(self.raw_parts)

        self.document_part = self.relationships.target_of("", RELTYPE_OFFICE_DOCUMENT) or MAIN_DOCUMENT_PART
        self.document_xml = self.get_xml_part(self.document_part)
        self.styles_xml = self._related_xml(RELTYPE_STYLES)
        self.numbering_xml = self._related_xml(RELTYPE_NUMBERING)
        self.theme_xml = self._related_xml(RELTYPE_THEME)
        self.font_table_xml = self._related_xml(RELTYPE_FONT_TABLE)

        self.media = {name: data for name, data in self.raw_parts.items() if name.startswith("word/media/")}

    def _related_xml(self, rel_type: str) -> Optional[ET.ElementTree]:
        target = self.relationships.target_of(self.document_part, rel_type)
        if target is None:
            return None
        return self.get_xml_part(target)
