# Copyright (c) 2025 takotime808
"""
Conversion pipeline.

This module wires field selections to concrete extractor implementations and
exposes the public operations:

- ``infer_fields(input)``: discover the fields of one document.
- ``extract_rows(input, selected)`` / ``extract_table(...)``: run the
  appropriate extractor and return rows (or a :class:`Table` with headers).
- ``extract_to_table(...)``: the same rows as a pandas DataFrame.
- ``convert_file`` / ``convert_files``: per-file mode, one
  :class:`ConversionResult` (with CSV text) per input; a failing file never
  aborts its siblings.
- ``combine(files, selected, blank_row_count)``: combined mode, one CSV for
  the whole batch; any failing file aborts the batch with a single
  :class:`BatchConversionError`.

Design notes
-----------

* The registry maps mode names to callables that return **new extractor
  instances**, so extractors are stateless across calls. The ``order`` mode
  is used whenever the selection holds a semantic token, otherwise ``generic``.
* Files are processed strictly in input order. The optional ledger
  (:class:`Manifest`) is owned by the caller and consulted before each file.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union
import pandas as pd

from xmlcsv.core import ExtractionOptions
from xmlcsv.document import XmlDocument, parse_document
from xmlcsv.errors import BatchConversionError, ParseError
from xmlcsv.extractors.base import BaseExtractor, ConversionResult, Field, Table
from xmlcsv.extractors.generic_extractor import GenericExtractor
from xmlcsv.extractors.order_extractor import OrderExtractor, is_semantic
from xmlcsv.outputs import resolve_headers, table_to_csv, table_to_df
from xmlcsv.processing import schema
from xmlcsv.processing.combine import combine_tables
from xmlcsv.processing.manifest import Manifest
from xmlcsv.utils.utils import Source, read_source

logger = logging.getLogger(__name__)

COMBINED_FILENAME = "combined_orders.csv"

DocumentInput = Union[XmlDocument, str, Path, bytes]


# ----------------------------- Registry & factories -----------------------------

REGISTRY_BASE: Dict[str, Callable[[ExtractionOptions], BaseExtractor]] = {
    "order": lambda options: OrderExtractor(options),
    "generic": lambda options: GenericExtractor(),
}

# Public registry (users/tests may monkeypatch this!)
REGISTRY = REGISTRY_BASE.copy()


def detect_mode(selected: Sequence[str]) -> str:
    """``"order"`` when any selected identifier is a semantic token, else ``"generic"``."""
    return "order" if any(is_semantic(s) for s in selected) else "generic"


def _extractor_for(selected: Sequence[str], options: ExtractionOptions) -> BaseExtractor:
    return REGISTRY[detect_mode(selected)](options)


# --------------------------------- Core API -----------------------------------

def load_document(input_obj: DocumentInput, filename: Optional[str] = None) -> XmlDocument:
    """
    Parse ``input_obj`` unless it already is an :class:`XmlDocument`.

    Strings and paths are read from disk; bytes are parsed directly, with
    ``filename`` (optional) used in error messages.
    """
    if isinstance(input_obj, XmlDocument):
        return input_obj
    if isinstance(input_obj, (bytes, bytearray)):
        return parse_document(bytes(input_obj), name=filename)
    name, data = read_source(input_obj)
    return parse_document(data, name=filename or name)


def infer_fields(input_obj: DocumentInput, filename: Optional[str] = None) -> List[Field]:
    """Discover the candidate fields of one document."""
    fields = schema.infer_fields(load_document(input_obj, filename))
    logger.info("Discovered %d fields", len(fields))
    return fields


def extract_rows(
    input_obj: DocumentInput,
    selected: Sequence[str],
    options: Optional[ExtractionOptions] = None,
    *,
    filename: Optional[str] = None,
) -> List[List[str]]:
    """Resolve ``selected`` against one document; blank rows are already dropped."""
    options = options or ExtractionOptions()
    document = load_document(input_obj, filename)
    return _extractor_for(selected, options).extract(document, selected)


def extract_table(
    input_obj: DocumentInput,
    selected: Sequence[str],
    *,
    filename: Optional[str] = None,
    fields: Optional[Sequence[Field]] = None,
    options: Optional[ExtractionOptions] = None,
) -> Table:
    """Like :func:`extract_rows`, with resolved headers and the verbatim column set."""
    options = options or ExtractionOptions()
    selected = list(selected)
    document = load_document(input_obj, filename)
    extractor = _extractor_for(selected, options)
    rows = extractor.extract(document, selected)
    headers = resolve_headers(selected, fields)
    logger.debug("CSV headers: %s", headers)
    return Table(headers=headers, rows=rows, verbatim_columns=extractor.verbatim_columns(selected))


def extract_to_table(
    input_obj: DocumentInput,
    selected: Sequence[str],
    *,
    filename: Optional[str] = None,
    fields: Optional[Sequence[Field]] = None,
    options: Optional[ExtractionOptions] = None,
) -> pd.DataFrame:
    """Extract one document and return its rows as a DataFrame labelled with the headers."""
    return table_to_df(extract_table(input_obj, selected, filename=filename, fields=fields, options=options))


def convert_file(
    item: Source,
    selected: Sequence[str],
    *,
    fields: Optional[Sequence[Field]] = None,
    options: Optional[ExtractionOptions] = None,
    manifest: Optional[Manifest] = None,
) -> ConversionResult:
    """
    Convert a single file to CSV text.

    Parse failures are captured on the returned result (``status="error"``)
    rather than raised. If ``manifest`` is provided, files it already knows
    are skipped with ``status="duplicate"`` and every outcome is recorded.
    """
    name, data = read_source(item)
    result = ConversionResult(file_name=name)

    if manifest is not None:
        is_dup, _, _ = manifest.check(name, data)
        if is_dup:
            logger.warning("Skipping already processed file %s", name)
            manifest.record(name, data, "duplicate")
            result.status = "duplicate"
            return result

    try:
        table = extract_table(data, selected, filename=name, fields=fields, options=options)
    except ParseError as e:
        logger.warning("Failed to convert %s: %s", name, e.reason)
        result.status = "error"
        result.error = str(e)
        if manifest is not None:
            manifest.record(name, data, "error")
        return result

    result.status = "success"
    result.csv_data = table_to_csv(table)
    result.row_count = table.row_count
    logger.info("Converted %s: %d rows", name, table.row_count)
    if manifest is not None:
        manifest.record(name, data, "ok")
    return result


def convert_files(
    items: Sequence[Source],
    selected: Sequence[str],
    *,
    fields: Optional[Sequence[Field]] = None,
    options: Optional[ExtractionOptions] = None,
    manifest: Optional[Manifest] = None,
) -> List[ConversionResult]:
    """Convert each file independently, in input order."""
    if not selected:
        raise ValueError("No fields selected")
    return [
        convert_file(item, selected, fields=fields, options=options, manifest=manifest)
        for item in items
    ]


async def convert_paths(items: Sequence[Source], selected: Sequence[str], **kwargs) -> List[ConversionResult]:
    """Asynchronously convert multiple files.

    Conversions run on worker threads via ``asyncio.to_thread``; results are
    returned in input order. No ledger is accepted here because it must be
    consulted serially.
    """
    if "manifest" in kwargs:
        raise TypeError("convert_paths does not accept a manifest; use convert_files")

    async def _one(item):
        return await asyncio.to_thread(convert_file, item, selected, **kwargs)

    return await asyncio.gather(*[_one(item) for item in items])


def results_to_df(results: Sequence[ConversionResult]) -> pd.DataFrame:
    """Summary table of per-file results (CSV text omitted)."""
    cols = ["file_name", "status", "row_count", "error"]
    return pd.DataFrame([{c: r.to_dict()[c] for c in cols} for r in results], columns=cols)


def combine(
    files: Sequence[Source],
    selected: Sequence[str],
    blank_row_count: Optional[int] = None,
    *,
    fields: Optional[Sequence[Field]] = None,
    options: Optional[ExtractionOptions] = None,
    manifest: Optional[Manifest] = None,
) -> str:
    """
    Convert ``files`` and stack them into one CSV text.

    Parameters
    ----------
    files:
        Paths or ``(name, bytes)`` pairs, processed in order.
    selected:
        Shared field selection.
    blank_row_count:
        Separator rows between files; defaults to ``options.blank_row_count`` (2).
    manifest:
        Optional ledger. Files it already knows, and repeats within this
        batch, are skipped. Successful batches are recorded once complete.

    Raises
    ------
    BatchConversionError
        If any file is not well-formed XML. No partial CSV is produced.
    """
    options = options or ExtractionOptions()
    if blank_row_count is None:
        blank_row_count = options.blank_row_count
    if not selected:
        raise ValueError("No fields selected")

    tables: List[Table] = []
    failures = []
    accepted = []
    seen = set()
    for item in files:
        name, data = read_source(item)
        if manifest is not None:
            is_dup, key, _ = manifest.check(name, data)
            if is_dup or key in seen:
                logger.warning("Skipping already processed file %s", name)
                continue
            seen.add(key)
        try:
            tables.append(extract_table(data, selected, filename=name, fields=fields, options=options))
            accepted.append((name, data))
        except ParseError as e:
            logger.warning("Failed to convert %s: %s", name, e.reason)
            failures.append((name, e.reason))

    if failures:
        names = ", ".join(n for n, _ in failures)
        raise BatchConversionError(
            f"Combined conversion failed: {len(failures)} of {len(failures) + len(tables)} files "
            f"could not be parsed ({names})",
            failures=failures,
        )

    if not tables:
        tables = [Table(headers=resolve_headers(selected, fields))]
    combined = combine_tables(tables, blank_row_count)
    if manifest is not None:
        for name, data in accepted:
            manifest.record(name, data, "ok")
    logger.info("Combined %d files into %d rows", len(accepted), combined.row_count)
    return table_to_csv(combined)
