"""Helpers for namespaces, ordered child insertion, and XML parsing."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable
from xml.etree import ElementTree as ET

from docx.oxml.ns import qn


@dataclass(frozen=True)
class Namespaces:
    """OpenXML namespace prefixes shared by the builders and the reader."""

    WORD: Dict[str, str] = None  # type: ignore[assignment]
    RELS: Dict[str, str] = None  # type: ignore[assignment]
    DRAWING: Dict[str, str] = None  # type: ignore[assignment]
    ALL: Dict[str, str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:  # pragma: no cover
        raise RuntimeError("Namespaces should not be instantiated")


W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
M_NS = "http://schemas.openxmlformats.org/officeDocument/2006/math"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_RELS_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
WP_NS = "http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing"
PIC_NS = "http://schemas.openxmlformats.org/drawingml/2006/picture"

Namespaces.WORD = {"w": W_NS}  # type: ignore[attr-defined]
Namespaces.RELS = {"rel": PKG_RELS_NS}  # type: ignore[attr-defined]
Namespaces.DRAWING = {"a": A_NS, "wp": WP_NS, "pic": PIC_NS}  # type: ignore[attr-defined]
Namespaces.ALL = {"w": W_NS, "m": M_NS, "r": R_NS, **Namespaces.DRAWING}  # type: ignore[attr-defined]


def qualify(prefixed: str) -> str:
    """Turn ``w:val`` style names into Clark notation for any known prefix."""
    prefix, local = prefixed.split(":", 1)
    return f"{{{Namespaces.ALL[prefix]}}}{local}"


def local_name(tag: str) -> str:
    return tag.split("}", 1)[-1]


def replace_child(parent, child, successors: Iterable[str] = ()):
    """Insert ``child`` into ``parent`` in schema order, replacing any same-tag child.

    ``successors`` lists the prefixed tags that must come after ``child``.
    """
    for existing in parent.findall(child.tag):
        parent.remove(existing)
    for tag in successors:
        anchor = parent.find(qn(tag))
        if anchor is not None:
            anchor.addprevious(child)
            return child
    parent.append(child)
    return child


def parse_xml(data: bytes) -> ET.ElementTree:
    """Parse XML from raw bytes with sane defaults."""
    return ET.ElementTree(ET.fromstring(data))
