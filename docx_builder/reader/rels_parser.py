"""Read Open Packaging Convention relationship parts from a saved package."""
from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Dict, Iterable, Mapping, Optional, Tuple
from xml.etree import ElementTree as ET

from docx_builder.utils.xml_utils import Namespaces, R_NS, parse_xml

RELTYPE_IMAGE = f"{R_NS}/image"
RELTYPE_STYLES = f"{R_NS}/styles"
RELTYPE_NUMBERING = f"{R_NS}/numbering"
RELTYPE_THEME = f"{R_NS}/theme"
RELTYPE_FONT_TABLE = f"{R_NS}/fontTable"

MAIN_DOCUMENT_PART = "word/document.xml"


@dataclass(frozen=True)
class Relationship:
    """A single ``Relationship`` entry of a ``.rels`` part."""

    source_part: str
    r_id: str
    target: str
    rel_type: str
    is_external: bool = False
    resolved_target: Optional[str] = None


class Relationships:
    """Relationships of a package grouped by their source part."""

    def __init__(self, relationships: Dict[str, Dict[str, Relationship]]) -> None:
        self._by_source = relationships

    @classmethod
    def from_package(cls, parts: Mapping[str, bytes]) -> "Relationships":
        by_source: Dict[str, Dict[str, Relationship]] = {}
        for name, payload in parts.items():
            if not name.endswith(".rels"):
                continue
            source, base_dir = cls._source_and_base(name)
            parsed = cls._parse_part(source, base_dir, parse_xml(payload))
            if parsed:
                by_source[source] = parsed
        return cls(by_source)

    def find(self, part_name: str, r_id: str) -> Optional[Relationship]:
        return self._by_source.get(part_name, {}).get(r_id)

    def for_source(self, part_name: str) -> Dict[str, Relationship]:
        return dict(self._by_source.get(part_name, {}))

    def of_type(self, part_name: str, rel_type: str) -> Dict[str, Relationship]:
        """Relationships of ``part_name`` whose type matches ``rel_type``."""
        return {r_id: rel for r_id, rel in self.for_source(part_name).items() if rel.rel_type == rel_type}

    def target_of(self, part_name: str, rel_type: str) -> Optional[str]:
        """Resolved target of the first relationship of a type, if any."""
        for rel in self.of_type(part_name, rel_type).values():
            return rel.resolved_target
        return None

    def iter_all(self) -> Iterable[Relationship]:
        for rels in self._by_source.values():
            yield from rels.values()

    @classmethod
    def _parse_part(cls, source_part: str, base_dir: PurePosixPath, tree: ET.ElementTree) -> Dict[str, Relationship]:
        result: Dict[str, Relationship] = {}
        for rel_el in tree.findall(".//rel:Relationship", Namespaces.RELS):
            r_id = rel_el.attrib["Id"]
            target = rel_el.attrib.get("Target", "")
            is_external = rel_el.attrib.get("TargetMode") == "External"
            result[r_id] = Relationship(
                source_part=source_part,
                r_id=r_id,
                target=target,
                rel_type=rel_el.attrib.get("Type", ""),
                is_external=is_external,
                resolved_target=cls._resolve_target(base_dir, target, is_external),
            )
        return result

    @staticmethod
    def _source_and_base(rel_part: str) -> Tuple[str, PurePosixPath]:
        """``word/_rels/document.xml.rels`` -> (``word/document.xml``, ``word``)."""
        if rel_part == "_rels/.rels":
            return "", PurePosixPath("")
        folder, _, suffix = rel_part.rpartition("_rels/")
        folder = folder.rstrip("/")
        return posixpath.join(folder, suffix[: -len(".rels")]), PurePosixPath(folder)

    @staticmethod
    def _resolve_target(base_dir: PurePosixPath, target: str, is_external: bool) -> Optional[str]:
        if not target:
            return None
        if is_external:
            return target
        if target.startswith("/"):
            return target.lstrip("/")
        return posixpath.normpath(base_dir.joinpath(target).as_posix())
