"""Style model describing Word style definitions in a normalized form."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple


@dataclass(slots=True)
class StyleDefinition:
    """A single ``w:style`` entry, keyed by its style id."""

    style_id: str
    style_type: str
    name: Optional[str]
    based_on: Optional[str] = None
    next_style: Optional[str] = None
    is_default: bool = False
    is_primary: bool = False
    bold: bool = False
    italic: bool = False
    color: Optional[str] = None
    font_size: Optional[int] = None  # half-points
    shading: Optional[str] = None


class StylesCatalog:
    """Collection of style definitions keyed by identifier."""

    def __init__(self, styles: Mapping[str, StyleDefinition]):
        self._styles = dict(styles)

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def all(self) -> Mapping[str, StyleDefinition]:
        """Return read-only view of the styles."""
        return dict(self._styles)

    def names(self) -> Dict[str, str]:
        """Map style ids to display names, skipping unnamed styles."""
        return {style_id: style.name for style_id, style in self._styles.items() if style.name}

    def default_for(self, style_type: str) -> Optional[StyleDefinition]:
        """Return the default style for the given style type if defined."""
        for style in self._styles.values():
            if style.style_type == style_type and style.is_default:
                return style
        return None

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def __len__(self) -> int:
        return len(self._styles)


DEFAULT_STYLES: Tuple[StyleDefinition, ...] = (
    StyleDefinition(style_id="Normal", style_type="paragraph", name="Normal", is_default=True, is_primary=True),
    StyleDefinition(
        style_id="Heading1",
        style_type="paragraph",
        name="Heading 1",
        based_on="Normal",
        next_style="Normal",
        is_primary=True,
        bold=True,
        font_size=28,
        color="2E74B5",
    ),
    StyleDefinition(
        style_id="Caption",
        style_type="paragraph",
        name="Caption",
        based_on="Normal",
        is_primary=True,
        italic=True,
        font_size=20,
        color="5A5A5A",
    ),
    StyleDefinition(style_id="TableNormal", style_type="table", name="Normal Table", is_default=True, is_primary=True),
)
