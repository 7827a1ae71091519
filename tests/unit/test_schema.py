# Copyright (c) 2025 takotime808

import pytest

from xmlcsv.document import parse_document
from xmlcsv.errors import ParseError
from xmlcsv.pipeline import infer_fields
from xmlcsv.processing.schema import infer_fields as infer_from_document, field_paths


def test_infer_fields_order_and_kinds(catalog_xml):
    fields = infer_fields(catalog_xml)
    assert field_paths(fields) == [
        "catalog.title",
        "catalog.book.name",
        "catalog.book.price",
        "catalog.book.price@currency",
        "catalog.book@id",
        "catalog@version",
    ]
    by_path = {f.path: f for f in fields}
    assert by_path["catalog.title"].kind == "text"
    assert by_path["catalog.title"].sample == "Spring"
    assert by_path["catalog.book.price@currency"].name == "price@currency"
    assert by_path["catalog.book.price@currency"].kind == "attribute"
    # first occurrence wins
    assert by_path["catalog.book.name"].sample == "Dune"
    assert by_path["catalog.book@id"].sample == "b1"


def test_paths_are_unique(order_xml):
    fields = infer_fields(order_xml)
    paths = field_paths(fields)
    assert len(paths) == len(set(paths))
    assert "StandardBusinessDocument.message.order.orderLineItem.tradeItemIdentification.gtin" in paths
    assert "StandardBusinessDocument.message.order.orderLineItem@number" in paths


def test_sample_is_truncated_to_50_chars():
    doc = parse_document(("<a><b>" + "x" * 80 + "</b></a>").encode())
    (field,) = infer_from_document(doc)
    assert field.sample == "x" * 50


def test_blank_leaves_are_skipped_but_attributes_kept():
    doc = parse_document(b"<a><empty>  </empty><flag on='yes'/></a>")
    assert [(f.path, f.kind) for f in infer_from_document(doc)] == [("a.flag@on", "attribute")]


def test_attributes_emitted_on_elements_with_children():
    doc = parse_document(b"<a k='v'><b>1</b></a>")
    assert field_paths(infer_from_document(doc)) == ["a.b", "a@k"]


def test_malformed_document_raises():
    with pytest.raises(ParseError):
        infer_fields(b"<a>", filename="x.xml")


def test_deeply_nested_leaf_is_discovered():
    depth = 1500
    xml = "".join(f"<n{i}>" for i in range(depth)) + "v" + "".join(f"</n{i}>" for i in reversed(range(depth)))
    fields = infer_from_document(parse_document(xml, name="deep.xml"))
    assert len(fields) == 1
    assert fields[0].path == ".".join(f"n{i}" for i in range(depth))
    assert fields[0].sample == "v"
