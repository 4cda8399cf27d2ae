"""Helpers to dump read-back outlines for inspection."""
from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Optional

from docx_builder.model.elements import DocumentOutline, ParagraphElement, TableElement


class DebugDumper:
    """Serializes a :class:`DocumentOutline` to JSON, optionally onto disk."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = directory

    def to_json(self, outline: DocumentOutline) -> str:
        return json.dumps(self._serialize(outline), indent=2, ensure_ascii=False)

    def dump(self, outline: DocumentOutline, filename: str = "document_outline.json") -> Path:
        if self.directory is None:
            raise ValueError("DebugDumper was created without an output directory")
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / filename
        target.write_text(self.to_json(outline), encoding="utf-8")
        return target

    def _serialize(self, value: Any) -> Any:
        if isinstance(value, DocumentOutline):
            return {"blocks": [self._serialize(block) for block in value.blocks]}
        if isinstance(value, (ParagraphElement, TableElement)):
            payload = {"type": "paragraph" if isinstance(value, ParagraphElement) else "table"}
            payload.update(self._serialize(asdict(value)))
            return payload
        if is_dataclass(value):
            return {k: self._serialize(v) for k, v in asdict(value).items()}
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value
