# Copyright (c) 2025 takotime808

import sys
from pathlib import Path
import pytest

# Ensure local src on sys.path if running from a source checkout
def _maybe_add_src_to_path():
    here = Path(__file__).resolve()
    candidates = [
        here.parents[1] / "src",              # repo_root/src when conftest in tests/
    ]
    for c in candidates:
        if c.exists() and str(c) not in sys.path:
            sys.path.insert(0, str(c))

_maybe_add_src_to_path()


ORDER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<sh:StandardBusinessDocument xmlns:sh="http://www.unece.org/cefact/namespaces/StandardBusinessDocumentHeader"
    xmlns:eanucc="urn:ean.ucc:2" xmlns:order="urn:ean.ucc:order:2">
  <sh:StandardBusinessDocumentHeader>
    <sh:DocumentIdentification>
      <sh:Standard>EAN.UCC</sh:Standard>
      <sh:CreationDateAndTime>2024-03-07T09:15:00</sh:CreationDateAndTime>
    </sh:DocumentIdentification>
  </sh:StandardBusinessDocumentHeader>
  <eanucc:message>
    <order:order documentStatus="ORIGINAL">
      <orderIdentification>
        <uniqueCreatorIdentification> PO-1001 </uniqueCreatorIdentification>
      </orderIdentification>
      <orderLogisticalInformation>
        <orderLogisticalDateGroup>
          <requestedDeliveryDateAtUltimateConsignee>
            <date>2024-03-12</date>
          </requestedDeliveryDateAtUltimateConsignee>
        </orderLogisticalDateGroup>
      </orderLogisticalInformation>
      <buyer>
        <gln>5012345000017</gln>
        <additionalPartyIdentification>
          <additionalPartyIdentificationValue>Leeds</additionalPartyIdentificationValue>
          <additionalPartyIdentificationType>BUYER_ASSIGNED_IDENTIFIER_FOR_A_PARTY</additionalPartyIdentificationType>
        </additionalPartyIdentification>
        <additionalPartyIdentification>
          <additionalPartyIdentificationValue>0042</additionalPartyIdentificationValue>
          <additionalPartyIdentificationType>BUYER_ASSIGNED_IDENTIFIER_FOR_A_PARTY</additionalPartyIdentificationType>
        </additionalPartyIdentification>
      </buyer>
      <orderLineItem number="1">
        <requestedQuantity><value>12</value></requestedQuantity>
        <netPrice><amount><monetaryAmount>3.50</monetaryAmount></amount></netPrice>
        <tradeItemIdentification>
          <gtin>05012345678900</gtin>
          <additionalTradeItemIdentification>
            <additionalTradeItemIdentificationValue>ABC-1</additionalTradeItemIdentificationValue>
            <additionalTradeItemIdentificationType>SUPPLIER_ASSIGNED</additionalTradeItemIdentificationType>
          </additionalTradeItemIdentification>
          <additionalTradeItemIdentification>
            <additionalTradeItemIdentificationValue>6</additionalTradeItemIdentificationValue>
            <additionalTradeItemIdentificationType>SUPPLIER_ASSIGNED</additionalTradeItemIdentificationType>
          </additionalTradeItemIdentification>
        </tradeItemIdentification>
      </orderLineItem>
      <orderLineItem number="2">
        <requestedQuantity><value>1,000</value></requestedQuantity>
        <netPrice><amount><monetaryAmount>0.99</monetaryAmount></amount></netPrice>
        <tradeItemIdentification>
          <gtin>05012345678917</gtin>
          <additionalTradeItemIdentification>
            <additionalTradeItemIdentificationValue>1234</additionalTradeItemIdentificationValue>
            <additionalTradeItemIdentificationType>SUPPLIER_ASSIGNED</additionalTradeItemIdentificationType>
          </additionalTradeItemIdentification>
          <additionalTradeItemIdentification>
            <additionalTradeItemIdentificationValue>24</additionalTradeItemIdentificationValue>
            <additionalTradeItemIdentificationType>BUYER_ASSIGNED</additionalTradeItemIdentificationType>
          </additionalTradeItemIdentification>
        </tradeItemIdentification>
      </orderLineItem>
    </order:order>
  </eanucc:message>
</sh:StandardBusinessDocument>
"""

ALL_TOKENS = [
    "__order_reference__", "__branch_code__", "__customer_town__", "__creation_date__",
    "__delivery_date__", "__order_lines__", "__order_line_quantity__",
    "__order_line_unit_price__", "__pack_size__", "__gtin__",
]


def build_order_xml(reference, gtins, creation="2024-03-07T09:15:00"):
    """Small order document with one line item per GTIN."""
    lines = "".join(
        f"<orderLineItem><requestedQuantity><value>{i + 1}</value></requestedQuantity>"
        f"<tradeItemIdentification><gtin>{g}</gtin></tradeItemIdentification></orderLineItem>"
        for i, g in enumerate(gtins)
    )
    return (
        "<order>"
        f"<DocumentIdentification><CreationDateAndTime>{creation}</CreationDateAndTime></DocumentIdentification>"
        f"<orderIdentification><uniqueCreatorIdentification>{reference}</uniqueCreatorIdentification></orderIdentification>"
        f"{lines}</order>"
    ).encode("utf-8")


@pytest.fixture
def order_xml():
    return ORDER_XML.encode("utf-8")


@pytest.fixture
def all_tokens():
    return list(ALL_TOKENS)


@pytest.fixture
def order_factory():
    return build_order_xml


@pytest.fixture
def order_file(tmp_path):
    p = tmp_path / "order_0001.xml"
    p.write_text(ORDER_XML, encoding="utf-8")
    return p


@pytest.fixture
def order_dir(tmp_path):
    d = tmp_path / "orders"
    d.mkdir()
    (d / "a.xml").write_bytes(build_order_xml("A-1", ["111", "112"]))
    (d / "b.xml").write_bytes(build_order_xml("B-1", ["221"]))
    (d / "c.xml").write_bytes(build_order_xml("C-1", ["331"]))
    (d / "notes.txt").write_text("ignored")
    return d


@pytest.fixture
def catalog_xml():
    return (
        b"<catalog version='2'>"
        b"<title>Spring</title>"
        b"<book id='b1'><name>Dune</name><price currency='GBP'>9.99</price></book>"
        b"<book id='b2'><name>Emma</name><price currency='EUR'>5.00</price></book>"
        b"<book id='b3'><name>Ulysses</name></book>"
        b"</catalog>"
    )
