"""Exception taxonomy raised by the document builders."""
from __future__ import annotations

from docx.opc.exceptions import PackageNotFoundError

__all__ = [
    "DocxBuilderError",
    "ArgumentError",
    "InvalidDimensionError",
    "IndexOutOfRangeError",
    "DimensionMismatchError",
    "InvalidRangeError",
    "UnsupportedFormatError",
    "MissingStylesError",
    "PackageNotFoundError",
]


class DocxBuilderError(Exception):
    """Base class for every error raised while generating a document."""


class ArgumentError(DocxBuilderError, ValueError):
    """A required argument is missing or has an invalid value."""


class InvalidDimensionError(ArgumentError):
    """A table or matrix was requested with fewer than one row or column."""


class IndexOutOfRangeError(ArgumentError, IndexError):
    """A row or column index lies outside the current table bounds."""


class DimensionMismatchError(ArgumentError):
    """Supplied values do not match the declared rows x columns shape."""


class InvalidRangeError(ArgumentError):
    """A merge range ends before it starts."""


class UnsupportedFormatError(DocxBuilderError, ValueError):
    """An image could not be mapped to a supported format."""


class MissingStylesError(DocxBuilderError, LookupError):
    """A template package carries no style definitions part."""
