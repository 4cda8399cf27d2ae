"""Generation session owning the python-docx package for one document."""
from __future__ import annotations

import io
from pathlib import Path
from typing import IO, Dict, List, Optional, Union

import docx
from docx.document import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.part import Part
from docx.parts.document import DocumentPart
from docx.text.paragraph import Paragraph

from docx_builder.builder.styles import StyleCatalog
from docx_builder.builder.tables import TableHandle
from docx_builder.config import DEFAULT_CONFIG, BuilderConfig
from docx_builder.utils.logger import get_logger

LOGGER = get_logger(__name__)

SaveTarget = Union[str, Path, IO[bytes]]

RT_STYLES_WITH_EFFECTS = "http://schemas.microsoft.com/office/2007/relationships/stylesWithEffects"


class DocumentSession:
    """Explicit context passed to every builder in place of shared globals.

    The session owns the in-memory package. Nothing reaches disk until
    :meth:`save` runs, so a failed generation never leaves a partial file.
    """

    def __init__(
        self,
        document: DocxDocument,
        path: Optional[Path] = None,
        config: Optional[BuilderConfig] = None,
    ) -> None:
        self._document: Optional[DocxDocument] = document
        self.path = path
        self.config = config or DEFAULT_CONFIG
        self._table_handles: Dict = {}

    @classmethod
    def create(cls, path: Optional[Union[str, Path]] = None, config: Optional[BuilderConfig] = None) -> "DocumentSession":
        """Start a new document whose style part holds only the default styles."""
        session = cls(docx.Document(), Path(path) if path is not None else None, config)
        session.drop_related(RT_STYLES_WITH_EFFECTS)
        catalog = StyleCatalog(session)
        catalog.reset()
        catalog.register_default_styles()
        LOGGER.info("Created new document session%s", f" for {session.path.name}" if session.path else "")
        return session

    @classmethod
    def open(cls, path: Union[str, Path], config: Optional[BuilderConfig] = None) -> "DocumentSession":
        """Open an existing package; a missing style part is created and seeded."""
        docx_path = Path(path)
        session = cls(docx.Document(str(docx_path)), docx_path, config)
        catalog = StyleCatalog(session)
        if not catalog.has_styles_part():
            LOGGER.info("%s has no styles part; seeding defaults", docx_path.name)
            catalog.reset()
            catalog.register_default_styles()
        LOGGER.info("Opened %s", docx_path.name)
        return session

    # ------------------------------------------------------------------
    # Package access
    @property
    def document(self) -> DocxDocument:
        if self._document is None:
            raise RuntimeError("Document session is closed")
        return self._document

    @property
    def part(self) -> DocumentPart:
        return self.document.part

    @property
    def body(self):
        return self.document.element.body

    @property
    def closed(self) -> bool:
        return self._document is None

    def append_block(self, element):
        """Append a block-level element, keeping the body ``w:sectPr`` last."""
        body = self.body
        sect_pr = body.sectPr
        if sect_pr is not None:
            sect_pr.addprevious(element)
        else:
            body.append(element)
        return element

    def paragraph(self, p_element) -> Paragraph:
        """Wrap a ``w:p`` element in a python-docx paragraph proxy."""
        return Paragraph(p_element, self.document)

    def related_part(self, reltype: str) -> Optional[Part]:
        try:
            return self.part.part_related_by(reltype)
        except KeyError:
            return None

    def drop_related(self, reltype: str) -> int:
        """Unlink every internal part of ``reltype`` from the main document."""
        main_part = self.part
        dropped = 0
        for r_id, rel in list(main_part.rels.items()):
            if rel.reltype == reltype and not rel.is_external:
                main_part.drop_rel(r_id)
                dropped += 1
        return dropped

    def replace_part(self, reltype: str, new_part: Part) -> str:
        """Relate ``new_part`` to the main document, dropping existing parts of that type."""
        main_part = self.part
        self.drop_related(reltype)
        r_id = main_part.relate_to(new_part, reltype)
        LOGGER.debug("Related %s as %s", new_part.partname, r_id)
        return r_id

    def styles_part(self) -> Optional[Part]:
        return self.related_part(RT.STYLES)

    # ------------------------------------------------------------------
    # Inspection
    def paragraphs(self) -> List[Paragraph]:
        return list(self.document.paragraphs)

    def tables(self) -> List[TableHandle]:
        """Index every top-level table of the body, in document order."""
        return [self.table_handle(tbl) for tbl in self.body.tbl_lst]

    def table_handle(self, tbl) -> TableHandle:
        """Return the single handle shared by every caller addressing ``tbl``."""
        handle = self._table_handles.get(tbl)
        if handle is None:
            handle = TableHandle.from_element(tbl)
            self._table_handles[tbl] = handle
        return handle

    # ------------------------------------------------------------------
    # Lifecycle
    def save(self, target: Optional[SaveTarget] = None) -> None:
        """Serialize the package once, writing the output only after it succeeds."""
        destination = target if target is not None else self.path
        if destination is None:
            raise ValueError("No output path given and session has no default path")

        buffer = io.BytesIO()
        self.document.save(buffer)
        payload = buffer.getvalue()

        if isinstance(destination, (str, Path)):
            output_path = Path(destination)
            output_path.write_bytes(payload)
            LOGGER.info("Saved %s (%d bytes)", output_path.name, len(payload))
        else:
            destination.write(payload)
            LOGGER.debug("Saved document to stream (%d bytes)", len(payload))

    def close(self) -> None:
        self._table_handles.clear()
        self._document = None

    def __enter__(self) -> "DocumentSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None and self.path is not None:
                self.save()
            elif exc_type is not None:
                LOGGER.warning("Generation aborted, nothing written: %s", exc)
        finally:
            self.close()
