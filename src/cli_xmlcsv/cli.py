# Copyright (c) 2025 takotime808

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Tuple
import pandas as pd
import tomllib

from xmlcsv import version
from xmlcsv.core import DEDUPE_KEYS, ORDER_REFERENCE_MODES, ExtractionOptions, options_from_env
from xmlcsv.errors import BatchConversionError, ParseError
from xmlcsv.extractors.base import Field
from xmlcsv.extractors.generic_extractor import detect_record_tag
from xmlcsv.extractors.order_extractor import SEMANTIC_FIELDS, SEMANTIC_TOKENS, is_semantic
from xmlcsv.outputs import write_csv, write_df
from xmlcsv.pipeline import (
    COMBINED_FILENAME,
    combine,
    convert_files,
    infer_fields,
    load_document,
    results_to_df,
)
from xmlcsv.processing.manifest import Manifest
from xmlcsv.utils.utils import csv_name, norm_ext

DEFAULT_LOGGER_NAME = "xmlcsv"

_OPTION_KEYS = ("order_reference_mode", "zero_pad_dates", "branch_prefix", "blank_row_count", "dedupe_key")


def configure_logging(verbose: bool = False, logger_name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """Attach a stream handler to the package logger (INFO when ``verbose``, else WARNING)."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO if verbose else logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
        )
        logger.addHandler(handler)
    return logger


def _add_selection_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("src", nargs="+", help="XML files or directories containing .xml files.")
    sel = p.add_mutually_exclusive_group()
    sel.add_argument("--fields", default=None,
                     help="Comma-separated field tokens or paths, in column order. "
                          "Defaults to all order fields (see list-fields).")
    sel.add_argument("--all-paths", action="store_true",
                     help="Select every field inferred from the first file.")
    p.add_argument("--manifest", default=None, help="Path to a manifest.jsonl used to skip already processed files.")
    p.add_argument("--dedupe-key", choices=DEDUPE_KEYS, default=None,
                   help="How the manifest identifies a file (default: hash).")
    p.add_argument("--order-reference", choices=ORDER_REFERENCE_MODES, default=None,
                   help="Repeat the order reference on every row or emit it on the first row only.")
    p.add_argument("--zero-pad-dates", action=argparse.BooleanOptionalAction, default=None,
                   help="Write dates as DD/MM/YYYY instead of D/M/YYYY.")
    p.add_argument("--branch-prefix", default=None, help="Literal prepended to branch codes.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xmlcsv",
        description="Convert XML order documents into CSV tables using inferred or fixed field mappings.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {version()}")
    p.add_argument("--config", help="TOML config file with default options.")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging output.")

    sub = p.add_subparsers(dest="cmd", required=True)

    # fields
    fp = sub.add_parser("fields", help="List the fields discovered in one XML file.")
    fp.add_argument("src", help="Path to an XML file.")
    fp.add_argument("--out", help="Optional output file (.csv, .jsonl, .parquet). Defaults to stdout.")
    fp.add_argument("--max-rows", type=int, default=None, help="Limit number of rows printed to stdout.")

    # detect
    dp = sub.add_parser("detect", help="Print the repeating record tag of one XML file.")
    dp.add_argument("src", help="Path to an XML file.")

    # list-fields
    lp = sub.add_parser("list-fields", help="List the fixed order field tokens.")
    lp.add_argument("--one-per-line", action="store_true", help="Print one token per line with its label.")

    # convert
    cp = sub.add_parser("convert", help="Convert each XML file to its own CSV.")
    _add_selection_args(cp)
    cp.add_argument("--out-dir", default=None, help="Directory for <name>.csv files (default: next to each input).")
    cp.add_argument("--summary", default=None, help="Optional per-file summary table (.csv, .jsonl, .parquet).")

    # combine
    mp = sub.add_parser("combine", help="Convert all XML files into one combined CSV.")
    _add_selection_args(mp)
    mp.add_argument("--out", default=None, help=f"Combined CSV path (default: {COMBINED_FILENAME}).")
    mp.add_argument("--blank-rows", type=int, default=None, help="Blank separator rows between files (default: 2).")

    return p


def _print_df(df: pd.DataFrame, max_rows: Optional[int], max_colwidth: int = 60) -> None:
    with pd.option_context("display.max_rows", max_rows or 50, "display.max_colwidth", max_colwidth):
        print(df.to_string(index=False))


def _expand_inputs(srcs: List[str]) -> List[Path]:
    """Expand directories to their ``.xml`` files (sorted); keep files as given."""
    paths: List[Path] = []
    for src in srcs:
        p = Path(src)
        if p.is_dir():
            paths.extend(sorted(c for c in p.iterdir() if c.is_file() and norm_ext(c) == "xml"))
        else:
            paths.append(p)
    return paths


def _resolve_options(args: argparse.Namespace, cfg: dict) -> ExtractionOptions:
    """Merge options: flags > environment > config file > defaults."""
    base = ExtractionOptions(**{k: cfg[k] for k in _OPTION_KEYS if k in cfg})
    opts = options_from_env(base)
    changes = {}
    if args.order_reference is not None:
        changes["order_reference_mode"] = args.order_reference
    if args.zero_pad_dates is not None:
        changes["zero_pad_dates"] = args.zero_pad_dates
    if args.branch_prefix is not None:
        changes["branch_prefix"] = args.branch_prefix
    if args.dedupe_key is not None:
        changes["dedupe_key"] = args.dedupe_key
    if getattr(args, "blank_rows", None) is not None:
        changes["blank_row_count"] = args.blank_rows
    return replace(opts, **changes)


def _resolve_selection(args: argparse.Namespace, cfg: dict, first: Path) -> Tuple[List[str], Optional[List[Field]]]:
    """Selected identifiers plus the inferred fields used for header names (if needed)."""
    if args.all_paths:
        fields = infer_fields(first)
        return [f.path for f in fields], fields
    raw = args.fields if args.fields is not None else cfg.get("fields")
    if raw is None:
        return list(SEMANTIC_TOKENS), None
    selected = [s.strip() for s in raw.split(",")] if isinstance(raw, str) else [str(s).strip() for s in raw]
    selected = [s for s in selected if s]
    if all(is_semantic(s) for s in selected):
        return selected, None
    return selected, infer_fields(first)


def _run_convert(args: argparse.Namespace, cfg: dict, paths: List[Path]) -> int:
    options = _resolve_options(args, cfg)
    selected, fields = _resolve_selection(args, cfg, paths[0])
    manifest_path = args.manifest or cfg.get("manifest")
    manifest = Manifest(Path(manifest_path), key=options.dedupe_key) if manifest_path else None
    out_dir = args.out_dir or cfg.get("out_dir")

    results = convert_files(paths, selected, fields=fields, options=options, manifest=manifest)
    failed = 0
    for path, result in zip(paths, results):
        if result.status == "success":
            target = Path(out_dir) / csv_name(result.file_name) if out_dir else path.with_name(csv_name(result.file_name))
            write_csv(result.csv_data, target)
            print(f"ok        {result.file_name} ({result.row_count} rows) -> {target}")
        elif result.status == "duplicate":
            print(f"skipped   {result.file_name} (already processed)")
        else:
            failed += 1
            print(f"error     {result.error}", file=sys.stderr)

    summary = args.summary or cfg.get("summary")
    if summary:
        write_df(results_to_df(results), summary)
    return 1 if failed else 0


def _run_combine(args: argparse.Namespace, cfg: dict, paths: List[Path]) -> int:
    options = _resolve_options(args, cfg)
    selected, fields = _resolve_selection(args, cfg, paths[0])
    manifest_path = args.manifest or cfg.get("manifest")
    manifest = Manifest(Path(manifest_path), key=options.dedupe_key) if manifest_path else None

    try:
        csv_text = combine(paths, selected, options.blank_row_count, fields=fields, options=options, manifest=manifest)
    except BatchConversionError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    out = Path(args.out or cfg.get("out") or COMBINED_FILENAME)
    write_csv(csv_text, out)
    print(f"Saved combined table -> {out}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)

    cfg = {}
    if args.config:
        cfg = tomllib.loads(Path(args.config).read_text())

    if args.cmd == "list-fields":
        if args.one_per_line:
            for sf in SEMANTIC_FIELDS:
                print(f"{sf.token}\t{sf.label}")
        else:
            print(", ".join(SEMANTIC_TOKENS))
        return 0

    if args.cmd in ("fields", "detect"):
        path = Path(args.src)
        if not path.is_file():
            print(f"error: file not found: {path}", file=sys.stderr)
            return 2
        try:
            if args.cmd == "detect":
                print(detect_record_tag(load_document(path)))
                return 0
            fields = infer_fields(path)
        except ParseError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        df = pd.DataFrame([f.to_dict() for f in fields], columns=["path", "name", "kind", "sample"])
        if args.out:
            write_df(df, args.out)
            print(f"Saved field list -> {args.out}")
        else:
            _print_df(df, max_rows=args.max_rows)
        return 0

    if args.cmd in ("convert", "combine"):
        paths = _expand_inputs(args.src)
        missing = [p for p in paths if not p.is_file()]
        if missing:
            print(f"error: file not found: {missing[0]}", file=sys.stderr)
            return 2
        if not paths:
            print("error: no XML files found", file=sys.stderr)
            return 2

        section = cfg.get(args.cmd, {}) if isinstance(cfg, dict) else {}
        try:
            if args.cmd == "convert":
                return _run_convert(args, section, paths)
            return _run_combine(args, section, paths)
        except ParseError as e:
            # field inference on the first file failed
            print(f"error: {e}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
