# Copyright (c) 2025 takotime808

from __future__ import annotations

import logging
from typing import Dict, List

from xmlcsv.document import XmlDocument
from xmlcsv.extractors.base import (
    BaseExtractor,
    resolve_path_value,
)

logger = logging.getLogger(__name__)


def _group_data_nodes(document: XmlDocument) -> Dict[str, List[int]]:
    """Group every data-bearing element by tag, in order of first sight."""
    groups: Dict[str, List[int]] = {}
    for node in document.iter_descendants():
        if node.has_data:
            groups.setdefault(node.tag, []).append(node.id)
    return groups


def detect_record_nodes(document: XmlDocument) -> List[int]:
    """Find the elements that most plausibly represent one output row each.

    Every element carrying data (non-blank text content or at least one
    attribute) is grouped by tag. The largest group with more than one member
    wins; on a tie the tag seen first in document order is kept. When no tag
    repeats, the root element is the single record.

    Args:
        document (XmlDocument): Parsed document.

    Returns:
        List[int]: Node ids of the records, in document order.
    """
    best: List[int] = []
    for ids in _group_data_nodes(document).values():
        if len(ids) > len(best) and len(ids) > 1:
            best = ids
    if not best:
        return [document.root.id]
    return best


def detect_record_tag(document: XmlDocument) -> str:
    """Tag name of the detected record element (the root tag as fallback)."""
    return document.node(detect_record_nodes(document)[0]).tag


class GenericExtractor(BaseExtractor):
    """Extractor for documents without a known schema.

    Rows come from :func:`detect_record_nodes`; each selected field path is
    resolved relative to the record when it lies under the record's own path,
    and from the document root otherwise.
    """

    def _extract(self, document: XmlDocument, selected: List[str]) -> List[List[str]]:
        records = detect_record_nodes(document)
        logger.info(
            "Record tag '%s' (%d records) in %s",
            document.node(records[0]).tag, len(records), document.name,
        )
        return [
            [resolve_path_value(document, path, record) for path in selected]
            for record in records
        ]
