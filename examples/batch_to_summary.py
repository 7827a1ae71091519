"""Convert a directory of XML orders concurrently and write a per-file summary."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from xmlcsv.extractors.order_extractor import SEMANTIC_TOKENS
from xmlcsv.outputs import write_csv, write_df
from xmlcsv.pipeline import convert_paths, results_to_df
from xmlcsv.utils.utils import csv_name


async def batch_directory(src_dir: str, out_dir: str) -> None:
    """Convert every ``.xml`` file under ``src_dir`` into ``out_dir``.

    Parameters
    ----------
    src_dir:
        Directory containing XML order documents.
    out_dir:
        Destination directory for the CSV files and ``summary.csv``.
    """
    paths = sorted(p for p in Path(src_dir).iterdir() if p.suffix.lower() == ".xml")
    results = await convert_paths(paths, SEMANTIC_TOKENS)
    for r in results:
        if r.status == "success":
            write_csv(r.csv_data, str(Path(out_dir) / csv_name(r.file_name)))
    write_df(results_to_df(results), str(Path(out_dir) / "summary.csv"))


def main() -> None:
    """CLI entry point for batching a directory."""
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("src_dir", help="Directory of XML files")
    ap.add_argument("out_dir", help="Output directory")
    args = ap.parse_args()
    asyncio.run(batch_directory(args.src_dir, args.out_dir))


if __name__ == "__main__":
    main()
