# Copyright (c) 2025 takotime808
"""
Base extractor definitions.

This module defines the data model shared by every extractor:

* :class:`Field`, a discoverable extraction target,
* :class:`Table`, headers plus unescaped rows,
* :class:`ConversionResult`, the per-file status record,

and the :class:`Extractor` protocol with a :class:`BaseExtractor` that takes
care of selection validation and blank-row suppression.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, asdict, field
from typing import (
    FrozenSet,
    List,
    Optional,
    Protocol,
    Sequence,
)

from xmlcsv.document import XmlDocument

logger = logging.getLogger(__name__)

SAMPLE_LENGTH = 50


@dataclass(frozen=True)
class Field:
    """
    A discoverable extraction target.

    Attributes
    ----------
    path : str
        Dotted chain of tag names, optionally suffixed with ``@attr``.
    name : str
        Display label ("tag" for text fields, "tag@attr" for attributes).
    kind : str
        ``"text"`` or ``"attribute"``.
    sample : str
        First observed value, at most 50 characters. Preview only.
    """
    path: str
    name: str
    kind: str
    sample: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Table:
    """Headers and unescaped rows for one converted document (or a batch)."""
    headers: List[str]
    rows: List[List[str]] = field(default_factory=list)
    verbatim_columns: FrozenSet[int] = frozenset()

    @property
    def row_count(self) -> int:
        return len(self.rows)


@dataclass
class ConversionResult:
    """
    Status of one file's conversion.

    Attributes
    ----------
    file_name : str
        Basename of the source file.
    status : str
        ``"processing"``, ``"success"``, ``"error"`` or ``"duplicate"``.
    csv_data : str | None
        Full CSV text on success.
    row_count : int | None
        Number of data rows, header excluded.
    error : str | None
        Error message if status == "error".
    """
    file_name: str
    status: str = "processing"   # processing | success | error | duplicate
    csv_data: Optional[str] = None
    row_count: Optional[int] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def is_blank_row(row: Sequence[str]) -> bool:
    return not any((cell or "").strip() for cell in row)


def split_path(path: str):
    """Split ``"a.b.c@attr"`` into ``(["a", "b", "c"], "attr")``."""
    element_path, _, attr = path.partition("@")
    segments = [s for s in element_path.split(".") if s]
    return segments, (attr or None)


def resolve_path_value(document: XmlDocument, path: str, record: Optional[int] = None) -> str:
    """
    Resolve a dotted field path to a trimmed string.

    When the record's own tag path is a prefix of ``path`` the remaining
    segments are walked down from the record; anything else is resolved from
    the document root, so document-level values repeat on every row.
    """
    segments, attr = split_path(path)
    if not segments:
        return ""

    start = document.root.id
    remaining = segments
    if record is not None:
        record_segments = document.path_of(record).split(".")
        if segments[: len(record_segments)] == record_segments:
            start = record
            remaining = segments[len(record_segments):]
    if remaining is segments and segments[0] == document.root.tag:
        remaining = segments[1:]

    node_id = document.find_by_path(remaining, start)
    if node_id is None:
        return ""
    if attr is not None:
        return (document.node(node_id).attr(attr) or "").strip()
    return document.text_of(node_id)


class Extractor(Protocol):
    """
    Protocol (interface) that all extractors must implement.

    Methods
    -------
    extract(document, selected) -> list[list[str]]
        Resolve ``selected`` identifiers against ``document``, one row per record.
    verbatim_columns(selected) -> frozenset[int]
        Column indexes exempt from CSV escaping.
    """

    def extract(self, document: XmlDocument, selected: Sequence[str]) -> List[List[str]]:
        ...

    def verbatim_columns(self, selected: Sequence[str]) -> FrozenSet[int]:
        ...


class BaseExtractor:
    """
    Base class providing the shared ``extract()`` wrapper.

    Subclasses override ``_extract(document, selected)`` to produce raw rows.
    This wrapper:

    * rejects an empty selection,
    * drops every row whose cells are all blank after trimming.
    """

    def extract(self, document: XmlDocument, selected: Sequence[str]) -> List[List[str]]:
        selected = list(selected)
        if not selected:
            raise ValueError("No fields selected")
        rows = self._extract(document, selected)
        kept = [row for row in rows if not is_blank_row(row)]
        if len(kept) < len(rows):
            logger.debug("Dropped %d blank rows from %s", len(rows) - len(kept), document.name)
        return kept

    def verbatim_columns(self, selected: Sequence[str]) -> FrozenSet[int]:
        return frozenset()

    # Subclasses must implement this
    def _extract(self, document: XmlDocument, selected: List[str]) -> List[List[str]]:  # pragma: no cover - interface method
        raise NotImplementedError("Extractor subclasses must implement _extract()")
