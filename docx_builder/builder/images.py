"""Inline picture embedding."""
from __future__ import annotations

import io
from pathlib import Path
from typing import TYPE_CHECKING, Union

from docx.image.exceptions import UnrecognizedImageError
from docx.image.image import Image
from docx.oxml import OxmlElement
from docx.text.paragraph import Paragraph

from docx_builder.builder.paragraphs import make_paragraph
from docx_builder.errors import ArgumentError, UnsupportedFormatError
from docx_builder.model.enums import ImageFormat
from docx_builder.utils.logger import get_logger
from docx_builder.utils.units import pixels_to_emu

if TYPE_CHECKING:
    from docx_builder.builder.session import DocumentSession

LOGGER = get_logger(__name__)


class ImageEmbedder:
    """Registers image payloads with the package and appends picture paragraphs."""

    def __init__(self, session: "DocumentSession") -> None:
        self._session = session

    def insert_image(self, image_path: Union[str, Path], width_px: int, height_px: int) -> Paragraph:
        """Append a paragraph showing ``image_path`` at ``width_px`` x ``height_px``.

        Extents are written in EMU at 9525 per pixel. The image part is shared
        when the same bytes were embedded before.
        """
        image_path = Path(image_path)
        image_format = ImageFormat.from_path(image_path)
        if width_px <= 0 or height_px <= 0:
            raise ArgumentError(f"Image size must be positive, got {width_px}x{height_px}")

        with open(image_path, "rb") as handle:
            blob = handle.read()

        try:
            content_type = Image.from_blob(blob).content_type
        except UnrecognizedImageError as exc:
            raise UnsupportedFormatError(f"{image_path.name} is not a readable {image_format.name} image") from exc
        if content_type != image_format.value:
            raise UnsupportedFormatError(
                f"{image_path.name} holds {content_type} data but its extension says {image_format.value}"
            )

        cx, cy = pixels_to_emu(width_px), pixels_to_emu(height_px)
        inline = self._session.part.new_pic_inline(io.BytesIO(blob), cx, cy)

        drawing = OxmlElement("w:drawing")
        drawing.append(inline)
        run = OxmlElement("w:r")
        run.append(drawing)
        p = make_paragraph()
        p.append(run)
        self._session.append_block(p)
        LOGGER.debug("Embedded %s (%d x %d EMU)", image_path.name, cx, cy)
        return self._session.paragraph(p)
