import json
import logging

import pandas as pd

from cli_xmlcsv import cli


def test_list_fields(capsys):
    assert cli.main(["list-fields"]) == 0
    assert capsys.readouterr().out.strip().startswith("__order_reference__, __branch_code__")

    assert cli.main(["list-fields", "--one-per-line"]) == 0
    lines = capsys.readouterr().out.strip().split("\n")
    assert len(lines) == 10
    assert lines[-1] == "__gtin__\tGTIN"


def test_detect_prints_record_tag(tmp_path, catalog_xml, capsys):
    src = tmp_path / "catalog.xml"
    src.write_bytes(catalog_xml)
    assert cli.main(["detect", str(src)]) == 0
    assert capsys.readouterr().out.strip() == "book"


def test_fields_to_jsonl(tmp_path, catalog_xml):
    src = tmp_path / "catalog.xml"
    src.write_bytes(catalog_xml)
    out = tmp_path / "fields.jsonl"
    assert cli.main(["fields", str(src), "--out", str(out)]) == 0
    df = pd.read_json(out, lines=True)
    assert list(df.columns) == ["path", "name", "kind", "sample"]
    assert df["path"].iloc[0] == "catalog.title"


def test_fields_on_malformed_file(tmp_path, capsys):
    src = tmp_path / "bad.xml"
    src.write_text("<a><b></a>")
    assert cli.main(["fields", str(src)]) == 1
    assert "bad.xml: Invalid XML format" in capsys.readouterr().err


def test_missing_input_file(tmp_path, capsys):
    assert cli.main(["detect", str(tmp_path / "nope.xml")]) == 2
    assert cli.main(["combine", str(tmp_path / "nope.xml")]) == 2
    assert "file not found" in capsys.readouterr().err


def test_convert_writes_one_csv_per_file(tmp_path, order_dir, capsys):
    out_dir = tmp_path / "csv"
    summary = tmp_path / "summary.jsonl"
    rc = cli.main(["convert", str(order_dir), "--fields", "__order_lines__,__gtin__",
                   "--out-dir", str(out_dir), "--summary", str(summary)])
    assert rc == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["a.csv", "b.csv", "c.csv"]
    assert (out_dir / "a.csv").read_text() == "Order Line,GTIN\n1,111\n2,112"
    out = capsys.readouterr().out
    assert "a.xml (2 rows)" in out
    records = [json.loads(line) for line in summary.read_text().splitlines()]
    assert [r["status"] for r in records] == ["success"] * 3


def test_convert_reports_failures(tmp_path, order_dir, capsys):
    (order_dir / "z.xml").write_text("<order>")
    rc = cli.main(["convert", str(order_dir), "--out-dir", str(tmp_path / "csv")])
    assert rc == 1
    assert (tmp_path / "csv" / "a.csv").exists()
    assert not (tmp_path / "csv" / "z.csv").exists()
    assert "z.xml: Invalid XML format" in capsys.readouterr().err


def test_convert_next_to_input_and_skips_with_manifest(order_dir, tmp_path, capsys):
    manifest = tmp_path / "seen.jsonl"
    args = ["convert", str(order_dir / "a.xml"), "--manifest", str(manifest)]
    assert cli.main(args) == 0
    assert (order_dir / "a.csv").exists()
    capsys.readouterr()
    assert cli.main(args) == 0
    assert "skipped   a.xml (already processed)" in capsys.readouterr().out


def test_combine_default_fields(tmp_path, order_file):
    out = tmp_path / "combined.csv"
    assert cli.main(["combine", str(order_file), "--out", str(out)]) == 0
    lines = out.read_text().split("\n")
    assert lines[0].startswith("Order Reference,Branch Code")
    assert lines[1] == "PO-1001,0042,Leeds,7/3/2024,12/3/2024,1,12,3.50,6,05012345678900"


def test_combine_failure_writes_nothing(tmp_path, order_dir, capsys):
    (order_dir / "b.xml").write_text("<order>")
    out = tmp_path / "combined.csv"
    assert cli.main(["combine", str(order_dir), "--out", str(out)]) == 1
    assert not out.exists()
    assert "Combined conversion failed: 1 of 3 files" in capsys.readouterr().err


def test_combine_with_inferred_paths(tmp_path, catalog_xml):
    src = tmp_path / "catalog.xml"
    src.write_bytes(catalog_xml)
    out = tmp_path / "books.csv"
    rc = cli.main(["combine", str(src), "--fields", "catalog.book.name,catalog.book.price", "--out", str(out)])
    assert rc == 0
    assert out.read_text() == "name,price\nDune,9.99\nEmma,5.00\nUlysses,"


def test_configure_logging_levels():
    logger = cli.configure_logging(verbose=True, logger_name="xmlcsv.test")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    cli.configure_logging(verbose=False, logger_name="xmlcsv.test")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_directory_given_where_a_file_is_expected(tmp_path, capsys):
    assert cli.main(["detect", str(tmp_path)]) == 2
    assert cli.main(["fields", str(tmp_path)]) == 2
    assert capsys.readouterr().err.count("file not found") == 2
