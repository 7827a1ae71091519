# Copyright (c) 2025 takotime808
"""
Fixed-schema extraction for GS1/EANUCC purchase orders.

Each ``orderLineItem`` becomes one row. The ten business columns are modelled
as the closed :class:`SemanticField` enumeration; every member is bound to a
resolver in :data:`RESOLVERS`, which receives the cached document-level view
and the current line item.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from functools import cached_property
from typing import Callable, Dict, FrozenSet, List, NamedTuple, Optional, Sequence, Tuple

from xmlcsv.core import ExtractionOptions
from xmlcsv.document import XmlDocument
from xmlcsv.extractors.base import (
    BaseExtractor,
    resolve_path_value,
)

logger = logging.getLogger(__name__)

LINE_ITEM_TAG = "orderLineItem"
BUYER_ASSIGNED = "BUYER_ASSIGNED_IDENTIFIER_FOR_A_PARTY"
SUPPLIER_ASSIGNED = "SUPPLIER_ASSIGNED"

ORDER_REFERENCE_PATH = "orderIdentification > uniqueCreatorIdentification"
CREATION_DATE_PATH = "DocumentIdentification > CreationDateAndTime"
DELIVERY_DATE_PATH = "orderLogisticalDateGroup > requestedDeliveryDateAtUltimateConsignee > date"
QUANTITY_PATH = "requestedQuantity > value"
UNIT_PRICE_PATH = "netPrice > amount > monetaryAmount"

_DIGITS_ONLY = re.compile(r"^\d+$", re.ASCII)
_HAS_LETTER = re.compile(r"[a-zA-Z]")
_PACK_SIZE = re.compile(r"^\d{1,3}$", re.ASCII)
_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)


class SemanticField(Enum):
    """The ten business columns of an order export, in canonical order."""

    ORDER_REFERENCE = ("__order_reference__", "Order Reference")
    BRANCH_CODE = ("__branch_code__", "Branch Code")
    CUSTOMER_TOWN = ("__customer_town__", "Customer Town")
    CREATION_DATE = ("__creation_date__", "Creation Date")
    DELIVERY_DATE = ("__delivery_date__", "Delivery Date")
    ORDER_LINE = ("__order_lines__", "Order Line")
    LINE_QUANTITY = ("__order_line_quantity__", "Quantity")
    LINE_UNIT_PRICE = ("__order_line_unit_price__", "Unit Price")
    PACK_SIZE = ("__pack_size__", "Pack Size")
    GTIN = ("__gtin__", "GTIN")

    def __init__(self, token: str, label: str) -> None:
        self.token = token
        self.label = label

    @classmethod
    def from_token(cls, token: str) -> Optional["SemanticField"]:
        return _BY_TOKEN.get(token)


_BY_TOKEN = {f.token: f for f in SemanticField}

SEMANTIC_FIELDS: Tuple[SemanticField, ...] = tuple(SemanticField)
SEMANTIC_TOKENS: List[str] = [f.token for f in SEMANTIC_FIELDS]


def is_semantic(identifier: str) -> bool:
    return identifier in _BY_TOKEN


def format_date(raw: str, zero_pad: bool = False) -> str:
    """
    Rewrite ``YYYY-MM-DD`` (optionally followed by ``T...``) as ``D/M/YYYY``.

    Anything else comes back as its date portion: the text before the first
    ``T``, or the whole trimmed value when nothing precedes it.

    >>> format_date("2024-03-07T10:15:00")
    '7/3/2024'
    >>> format_date("2024-03-07", zero_pad=True)
    '07/03/2024'
    >>> format_date("07.03.2024")
    '07.03.2024'
    >>> format_date("07/03/2024T10:00")
    '07/03/2024'
    """
    raw = raw.strip()
    date_part = raw.partition("T")[0] or raw
    match = _ISO_DATE.match(date_part)
    if not match:
        return date_part
    year, month, day = match.groups()
    if zero_pad:
        return f"{day}/{month}/{year}"
    return f"{int(day)}/{int(month)}/{year}"


class LineItem(NamedTuple):
    node_id: int
    index: int   # 0-based position among all line items


class OrderView:
    """Document-level lookups, computed once per document."""

    def __init__(self, document: XmlDocument, options: ExtractionOptions):
        self.document = document
        self.options = options

    @cached_property
    def line_items(self) -> List[LineItem]:
        ids = self.document.select_all(LINE_ITEM_TAG)
        return [LineItem(node_id, i) for i, node_id in enumerate(ids)]

    @cached_property
    def order_reference(self) -> str:
        return self.document.select_text(ORDER_REFERENCE_PATH)

    @cached_property
    def buyer_identifications(self) -> List[Tuple[str, str]]:
        """``(type, value)`` pairs of the first buyer's additional identifications."""
        doc = self.document
        buyer = doc.select_first("buyer")
        if buyer is None:
            return []
        return [
            (
                doc.select_text("additionalPartyIdentificationType", api),
                doc.select_text("additionalPartyIdentificationValue", api),
            )
            for api in doc.select_all("additionalPartyIdentification", buyer)
        ]

    def buyer_identification(self, accept: Callable[[str], bool]) -> str:
        for id_type, value in self.buyer_identifications:
            if id_type == BUYER_ASSIGNED and accept(value):
                return value
        return ""

    @cached_property
    def creation_date(self) -> str:
        return format_date(self.document.select_text(CREATION_DATE_PATH), self.options.zero_pad_dates)

    @cached_property
    def delivery_date(self) -> str:
        return format_date(self.document.select_text(DELIVERY_DATE_PATH), self.options.zero_pad_dates)


# ----------------------------- Resolvers -----------------------------

def _order_reference(view: OrderView, line: LineItem) -> str:
    if view.options.order_reference_mode == "first_row" and line.index > 0:
        return ""
    return view.order_reference


def _branch_code(view: OrderView, line: LineItem) -> str:
    value = view.buyer_identification(lambda v: bool(_DIGITS_ONLY.match(v)))
    return f"{view.options.branch_prefix}{value}" if value else ""


def _customer_town(view: OrderView, line: LineItem) -> str:
    return view.buyer_identification(lambda v: bool(_HAS_LETTER.search(v)))


def _creation_date(view: OrderView, line: LineItem) -> str:
    return view.creation_date


def _delivery_date(view: OrderView, line: LineItem) -> str:
    return view.delivery_date


def _order_line(view: OrderView, line: LineItem) -> str:
    return str(line.index + 1)


def _line_quantity(view: OrderView, line: LineItem) -> str:
    return view.document.select_text(QUANTITY_PATH, line.node_id)


def _line_unit_price(view: OrderView, line: LineItem) -> str:
    return view.document.select_text(UNIT_PRICE_PATH, line.node_id)


def _pack_size(view: OrderView, line: LineItem) -> str:
    doc = view.document
    for ati in doc.select_all("additionalTradeItemIdentification", line.node_id):
        id_type = doc.select_text("additionalTradeItemIdentificationType", ati)
        value = doc.select_text("additionalTradeItemIdentificationValue", ati)
        if id_type == SUPPLIER_ASSIGNED and _PACK_SIZE.match(value):
            return value
    return ""


def _gtin(view: OrderView, line: LineItem) -> str:
    return view.document.select_text("gtin", line.node_id)


RESOLVERS: Dict[SemanticField, Callable[[OrderView, LineItem], str]] = {
    SemanticField.ORDER_REFERENCE: _order_reference,
    SemanticField.BRANCH_CODE: _branch_code,
    SemanticField.CUSTOMER_TOWN: _customer_town,
    SemanticField.CREATION_DATE: _creation_date,
    SemanticField.DELIVERY_DATE: _delivery_date,
    SemanticField.ORDER_LINE: _order_line,
    SemanticField.LINE_QUANTITY: _line_quantity,
    SemanticField.LINE_UNIT_PRICE: _line_unit_price,
    SemanticField.PACK_SIZE: _pack_size,
    SemanticField.GTIN: _gtin,
}

assert set(RESOLVERS) == set(SemanticField), "every SemanticField needs a resolver"


class OrderExtractor(BaseExtractor):
    """Extractor for order documents with a known shape.

    Produces one row per ``orderLineItem`` in document order. Semantic tokens
    go through :data:`RESOLVERS`; any other selected path is resolved with the
    generic path rules, using the line item as the record.
    """

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()

    def verbatim_columns(self, selected: Sequence[str]) -> FrozenSet[int]:
        return frozenset(i for i, token in enumerate(selected) if token == SemanticField.GTIN.token)

    def _extract(self, document: XmlDocument, selected: List[str]) -> List[List[str]]:
        view = OrderView(document, self.options)
        semantic = [SemanticField.from_token(token) for token in selected]
        rows = []
        for line in view.line_items:
            row = []
            for token, sf in zip(selected, semantic):
                if sf is not None:
                    row.append(RESOLVERS[sf](view, line).strip())
                else:
                    row.append(resolve_path_value(document, token, line.node_id))
            rows.append(row)
        logger.info("Resolved %d order line items in %s", len(rows), document.name)
        return rows
