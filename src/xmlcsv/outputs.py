# Copyright (c) 2025 takotime808

from __future__ import annotations

import os
import json
import pandas as pd
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

from xmlcsv.extractors.base import Field, Table
from xmlcsv.extractors.order_extractor import SemanticField

_NEEDS_QUOTES = (",", '"', "\n")


def escape_cell(value: str) -> str:
    """Quote ``value`` when it contains a comma, a double quote or a newline."""
    value = value or ""
    if any(ch in value for ch in _NEEDS_QUOTES):
        return '"' + value.replace('"', '""') + '"'
    return value


def to_csv(headers: Sequence[str], rows: Iterable[Sequence[str]], verbatim_columns: Iterable[int] = ()) -> str:
    """
    Serialize ``headers`` and ``rows`` to CSV text.

    Cells are comma separated, rows ``\\n`` separated, header first, with no
    trailing newline. Data cells in ``verbatim_columns`` are written as-is.
    """
    verbatim = frozenset(verbatim_columns)
    lines = [",".join(escape_cell(h) for h in headers)]
    for row in rows:
        lines.append(",".join(
            (cell or "") if i in verbatim else escape_cell(cell)
            for i, cell in enumerate(row)
        ))
    return "\n".join(lines)


def table_to_csv(table: Table) -> str:
    return to_csv(table.headers, table.rows, table.verbatim_columns)


def resolve_headers(selected: Sequence[str], fields: Optional[Sequence[Field]] = None) -> List[str]:
    """Display names for ``selected``: field name, then semantic label, then the raw identifier."""
    names = {f.path: f.name for f in (fields or ())}
    headers = []
    for identifier in selected:
        if identifier in names:
            headers.append(names[identifier])
            continue
        sf = SemanticField.from_token(identifier)
        headers.append(sf.label if sf is not None else identifier)
    return headers


def table_to_df(table: Table) -> pd.DataFrame:
    """Column-labelled DataFrame view of a table (duplicate headers are kept)."""
    df = pd.DataFrame(table.rows, columns=range(len(table.headers)), dtype=object)
    df.columns = list(table.headers)
    return df


def write_df(df: pd.DataFrame, out_path: str) -> None:
    """
    Write a DataFrame to a sink inferred from out_path extension.
    Supported: .csv, .jsonl, .parquet (if pyarrow/fastparquet installed).
    """
    out_path = str(out_path)
    ext = os.path.splitext(out_path)[1].lower()
    Path(os.path.dirname(out_path) or ".").mkdir(parents=True, exist_ok=True)

    if ext == ".csv":
        df.to_csv(out_path, index=False)
    elif ext in (".jsonl", ".json"):
        with open(out_path, "w", encoding="utf-8") as f:
            for _, row in df.iterrows():
                f.write(json.dumps(_jsonable(row.to_dict()), ensure_ascii=False) + "\n")
    elif ext == ".parquet":
        try:
            df.to_parquet(out_path, index=False)
        except ImportError as e:
            raise RuntimeError("Parquet support requires 'pyarrow' or 'fastparquet' to be installed") from e
    else:
        raise ValueError(f"Unsupported output extension: {ext}")


def write_csv(csv_text: str, out_path: str) -> Path:
    """Write CSV text produced by :func:`to_csv` to ``out_path``."""
    path = Path(out_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(csv_text, encoding="utf-8", newline="")
    return path


def _jsonable(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {k: _jsonable(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_jsonable(x) for x in obj]
    if obj is None or isinstance(obj, float) and obj != obj:
        return None
    # Leave other types to json.dumps; ensure non-serializable objects are stringified
    try:
        json.dumps(obj)
        return obj
    except TypeError:
        return str(obj)
