# Copyright (c) 2025 takotime808

from __future__ import annotations

from typing import List, Sequence
import pandas as pd

from xmlcsv.extractors.base import Table


def _frame(rows: List[List[str]], width: int) -> pd.DataFrame:
    df = pd.DataFrame(rows, dtype=object) if rows else pd.DataFrame(columns=range(width), dtype=object)
    return df.reindex(columns=range(width)).fillna("")


def _blank_frame(count: int, width: int) -> pd.DataFrame:
    return pd.DataFrame([[""] * width for _ in range(count)], columns=range(width), dtype=object)


def trim_trailing_blank_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Drop all-blank rows at the end of ``df``; interior blank rows are kept."""
    if df.empty:
        return df
    blank = df.apply(lambda col: col.astype(str).str.strip().eq("")).all(axis=1)
    filled = (~blank).to_numpy().nonzero()[0]
    if len(filled) == 0:
        return df.iloc[0:0]
    return df.iloc[: filled[-1] + 1]


def combine_tables(tables: Sequence[Table], blank_row_count: int = 2) -> Table:
    """
    Stack per-file tables into one.

    The header (and verbatim column set) of the first table is kept; the
    headers of later tables are discarded. ``blank_row_count`` empty rows,
    as wide as the header, separate consecutive tables, and blank rows left
    at the very end are trimmed.
    """
    if blank_row_count < 0:
        raise ValueError("blank_row_count must be >= 0")
    if not tables:
        return Table(headers=[])

    first = tables[0]
    width = len(first.headers)
    frames = []
    for i, table in enumerate(tables):
        if i > 0 and blank_row_count:
            frames.append(_blank_frame(blank_row_count, width))
        frames.append(_frame(table.rows, width))

    frames = [f for f in frames if len(f)]
    if frames:
        df = trim_trailing_blank_rows(pd.concat(frames, ignore_index=True))
    else:
        df = _frame([], width)
    rows = [[str(v) for v in r] for r in df.itertuples(index=False, name=None)]
    return Table(headers=list(first.headers), rows=rows, verbatim_columns=first.verbatim_columns)
