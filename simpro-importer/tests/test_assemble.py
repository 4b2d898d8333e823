from __future__ import annotations

from simpro_importer.simpro.assemble import (
    build_extra_data,
    build_item_description,
    build_ref_item_data,
    primary_ean,
)
from simpro_importer.simpro.xml_decoder import parse_simpro_xml


XML_ITEM = """<PRODUTOS>
  <ITEM CD_SIMPRO="555" DESCRICAO="CEFTRIAXONA 1G FRASCO AMPOLA C/ 1 FA" FABRICA="EUROFARMA"
        CD_BARRA="7891234567890" IDENTIF="M" TP_FRACAO="FA" TP_EMBAL="CX" QTDE_EMBAL="1"
        CD_TUSS="90031234" PC_EM_FAB="12,30" />
</PRODUTOS>
"""


def _row():
    return parse_simpro_xml(XML_ITEM).rows[0]


def test_build_ref_item_data() -> None:
    item = build_ref_item_data(_row())
    assert item.product_name == "CEFTRIAXONA 1G FRASCO AMPOLA C/ 1 FA"
    assert item.concentration == "1G"
    assert item.entry_unit == "CX"
    assert item.base_unit == "FA"
    assert item.quantity == 1.0
    assert item.tiss is None
    assert item.tuss == "90031234"
    assert item.ean == "7891234567890"
    assert item.manufacturer_code is None
    assert item.manufacturer_name == "EUROFARMA"
    assert item.category == "M"
    assert item.subcategory is None


def test_extra_data_merges_category_without_touching_row() -> None:
    row = _row()
    extra = build_extra_data(row)
    assert extra["categoria"] == "M"
    assert extra["cd_tuss"] == "90031234"
    assert "categoria" not in row.extra
    assert build_ref_item_data(row).extra_data == extra


def test_missing_tuss_is_none() -> None:
    row = parse_simpro_xml('<PRODUTOS><ITEM CD_SIMPRO="1" DESCRICAO="GAZE"/></PRODUTOS>').rows[0]
    item = build_ref_item_data(row)
    assert item.tuss is None
    assert item.category == "A"
    assert item.presentation is None


def test_item_description_and_primary_ean() -> None:
    row = _row()
    assert build_item_description(row) == "CEFTRIAXONA 1G FRASCO AMPOLA C/ 1 FA • Fab: EUROFARMA"
    assert primary_ean(row) == "7891234567890"
