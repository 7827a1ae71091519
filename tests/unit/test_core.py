# Copyright (c) 2025 takotime808

import pytest

from xmlcsv.core import ExtractionOptions, options_from_env


def test_defaults():
    opts = ExtractionOptions()
    assert opts.order_reference_mode == "every_row"
    assert opts.zero_pad_dates is False
    assert opts.branch_prefix == ""
    assert opts.blank_row_count == 2
    assert opts.dedupe_key == "hash"


@pytest.mark.parametrize("kwargs", [
    {"order_reference_mode": "last_row"},
    {"dedupe_key": "mtime"},
    {"blank_row_count": -1},
])
def test_invalid_options(kwargs):
    with pytest.raises(ValueError):
        ExtractionOptions(**kwargs)


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("XMLCSV_ORDER_REFERENCE_MODE", "first_row")
    monkeypatch.setenv("XMLCSV_ZERO_PAD_DATES", "yes")
    monkeypatch.setenv("XMLCSV_BRANCH_PREFIX", "BR-")
    monkeypatch.setenv("XMLCSV_BLANK_ROWS", "0")
    monkeypatch.setenv("XMLCSV_DEDUPE_KEY", "name")
    opts = options_from_env(ExtractionOptions(blank_row_count=5))
    assert opts == ExtractionOptions(
        order_reference_mode="first_row",
        zero_pad_dates=True,
        branch_prefix="BR-",
        blank_row_count=0,
        dedupe_key="name",
    )


def test_env_keeps_base_when_unset(monkeypatch):
    for var in ("XMLCSV_ORDER_REFERENCE_MODE", "XMLCSV_ZERO_PAD_DATES", "XMLCSV_BRANCH_PREFIX",
                "XMLCSV_BLANK_ROWS", "XMLCSV_DEDUPE_KEY"):
        monkeypatch.delenv(var, raising=False)
    base = ExtractionOptions(zero_pad_dates=True, blank_row_count=3)
    assert options_from_env(base) == base
