# Copyright (c) 2025 takotime808

from __future__ import annotations

import argparse
from pathlib import Path
from xmlcsv import extract_to_table, infer_fields, SEMANTIC_FIELDS

def main():
    ap = argparse.ArgumentParser(description="XML order document -> CSV table")
    ap.add_argument("file", help="Path to the input XML file")
    ap.add_argument("--generic", action="store_true", help="Use every inferred field instead of the order fields")
    ap.add_argument("--out", help="Optional path to write CSV/Parquet of the table")
    args = ap.parse_args()

    if args.generic:
        fields = infer_fields(args.file)
        df = extract_to_table(args.file, [f.path for f in fields], fields=fields)
    else:
        df = extract_to_table(args.file, [f.token for f in SEMANTIC_FIELDS])
    print(df.to_string(max_colwidth=80, max_rows=100))

    if args.out:
        out_path = Path(args.out)
        if out_path.suffix.lower() == ".parquet":
            df.to_parquet(out_path, index=False)
        else:
            df.to_csv(out_path, index=False)
        print(f"\nSaved table -> {out_path}")

if __name__ == "__main__":
    main()
