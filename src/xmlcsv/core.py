# Copyright (c) 2025 takotime808

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Optional

ORDER_REFERENCE_MODES = ("every_row", "first_row")
DEDUPE_KEYS = ("hash", "name", "name+size")

_TRUTHY = {"1", "true", "yes", "on"}


# --- Public API options ---
@dataclass
class ExtractionOptions:
    """
    Options to control extraction behavior.

    Attributes
    ----------
    order_reference_mode : str
        "every_row" repeats the order reference on each line; "first_row" emits it on the first line only.
    zero_pad_dates : bool
        If True, dates are written DD/MM/YYYY instead of D/M/YYYY.
    branch_prefix : str
        Literal prepended to a found branch code.
    blank_row_count : int
        Number of blank separator rows between files in a combined table.
    dedupe_key : str
        One of {"hash","name","name+size"}; how the processed-file ledger identifies a file.
    """
    order_reference_mode: str = "every_row"
    zero_pad_dates: bool = False
    branch_prefix: str = ""
    blank_row_count: int = 2
    dedupe_key: str = "hash"

    def __post_init__(self) -> None:
        if self.order_reference_mode not in ORDER_REFERENCE_MODES:
            raise ValueError(
                f"order_reference_mode must be one of {', '.join(ORDER_REFERENCE_MODES)}, "
                f"got '{self.order_reference_mode}'"
            )
        if self.dedupe_key not in DEDUPE_KEYS:
            raise ValueError(f"dedupe_key must be one of {', '.join(DEDUPE_KEYS)}, got '{self.dedupe_key}'")
        if self.blank_row_count < 0:
            raise ValueError("blank_row_count must be >= 0")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def options_from_env(base: Optional[ExtractionOptions] = None) -> ExtractionOptions:
    """
    Overlay ``XMLCSV_*`` environment variables on ``base`` (defaults when omitted).

    - XMLCSV_ORDER_REFERENCE_MODE
    - XMLCSV_ZERO_PAD_DATES
    - XMLCSV_BRANCH_PREFIX
    - XMLCSV_BLANK_ROWS
    - XMLCSV_DEDUPE_KEY
    """
    base = base or ExtractionOptions()
    changes = {}
    if os.getenv("XMLCSV_ORDER_REFERENCE_MODE"):
        changes["order_reference_mode"] = os.environ["XMLCSV_ORDER_REFERENCE_MODE"].strip()
    if os.getenv("XMLCSV_ZERO_PAD_DATES"):
        changes["zero_pad_dates"] = _env_bool(os.environ["XMLCSV_ZERO_PAD_DATES"])
    if os.getenv("XMLCSV_BRANCH_PREFIX") is not None:
        changes["branch_prefix"] = os.environ["XMLCSV_BRANCH_PREFIX"]
    if os.getenv("XMLCSV_BLANK_ROWS"):
        changes["blank_row_count"] = int(os.environ["XMLCSV_BLANK_ROWS"])
    if os.getenv("XMLCSV_DEDUPE_KEY"):
        changes["dedupe_key"] = os.environ["XMLCSV_DEDUPE_KEY"].strip()
    return replace(base, **changes)
