from __future__ import annotations

from simpro_importer.simpro import xml_decoder
from simpro_importer.simpro.mapping import PriceKind
from simpro_importer.simpro.xml_decoder import (
    INVALID_XML_MESSAGE,
    MISSING_CODE_MESSAGE,
    MISSING_DESCRIPTION_MESSAGE,
    NO_ITEMS_MESSAGE,
    parse_simpro_xml,
)


XML_ONE_GOOD_ONE_BAD = """<?xml version="1.0" encoding="ISO-8859-1"?>
<PRODUTOS>
  <ITEM CD_SIMPRO="123" DESCRICAO="TESTE 500MG" PC_EM_FAB="10,50" />
  <ITEM CD_SIMPRO="456" PC_EM_FAB="1,00" />
</PRODUTOS>
"""

XML_FULL_ITEM = """<PRODUTOS>
  <ITEM CD_SIMPRO="0000123456" CD_USUARIO="U-77" DESCRICAO="AMOXICILINA 500MG COM 21 CAPS"
        CD_BARRA="7891234-567890" FABRICA="EMS" IDENTIF="M" TP_FRACAO="CAPS" QTDE_FRAC="21"
        TP_EMBAL="CX" QTDE_EMBAL="1" PC_EM_FAB="1.234,56" PC_EM_VEN="1.500,00" PC_EM_USU="1.450,00"
        PC_FR_FAB="58,79" PC_FR_VEN="71,43" PC_FR_USU="69,05" PERC_LUCR="38,24"
        VIGENCIA="17/04/2024" CD_TUSS="90123456" HOSPITALAR="N" />
</PRODUTOS>
"""


def test_one_good_item_and_one_without_description() -> None:
    result = parse_simpro_xml(XML_ONE_GOOD_ONE_BAD, "mat_17-04-2024.pfb.xml")
    assert result.success is False
    assert (result.stats.total, result.stats.parsed, result.stats.errors) == (2, 1, 1)
    assert result.rows[0].code == "123"
    assert result.rows[0].prices[PriceKind.PF] == 10.5
    assert result.errors[0].row == 2
    assert result.errors[0].message == MISSING_DESCRIPTION_MESSAGE
    assert result.reference_date == "2024-04-17"


def test_full_item_fields() -> None:
    result = parse_simpro_xml(XML_FULL_ITEM)
    assert result.success is True
    row = result.rows[0]
    assert row.code == "0000123456"
    assert row.secondary_code == "U-77"
    assert row.ean == "7891234567890"
    assert row.manufacturer == "EMS"
    assert row.category == "M"
    assert row.base_unit == "CAPS"
    assert row.prices[PriceKind.PF] == 1234.56
    assert row.prices[PriceKind.PMC] == 1500.0
    assert row.prices[PriceKind.FRAC_USER] == 69.05
    assert row.extra["quantidade_fracao"] == 21.0
    assert row.extra["perc_lucro"] == "38,24"
    assert row.extra["vigencia"] == "17/04/2024"
    assert row.extra["cd_tuss"] == "90123456"
    assert row.extra["registro_anvisa"] is None
    assert result.reference_date is None


def test_defaults_for_optional_attributes() -> None:
    result = parse_simpro_xml('<PRODUTOS><ITEM CD_SIMPRO="1" DESCRICAO="GAZE"/></PRODUTOS>')
    row = result.rows[0]
    assert row.category == "A"
    assert row.manufacturer == ""
    assert row.ean is None
    assert row.base_unit is None
    assert all(v is None for v in row.prices.values())
    assert len(row.prices) == 6


def test_user_code_is_used_when_simpro_code_missing() -> None:
    result = parse_simpro_xml('<PRODUTOS><ITEM CD_USUARIO="U1" DESCRICAO="GAZE"/></PRODUTOS>')
    assert result.rows[0].code == "U1"


def test_missing_code_is_a_row_error() -> None:
    result = parse_simpro_xml('<PRODUTOS><ITEM DESCRICAO="SEM CODIGO"/><ITEM CD_SIMPRO="2" DESCRICAO="OK"/></PRODUTOS>')
    assert (result.stats.total, result.stats.parsed, result.stats.errors) == (2, 1, 1)
    assert result.errors[0].row == 1
    assert result.errors[0].message == MISSING_CODE_MESSAGE
    assert result.errors[0].data == {"DESCRICAO": "SEM CODIGO"}


def test_attribute_lookup_is_case_insensitive() -> None:
    upper = parse_simpro_xml('<PRODUTOS><ITEM CD_SIMPRO="1" DESCRICAO="SORO 0,9%" PC_EM_FAB="2,50"/></PRODUTOS>')
    lower = parse_simpro_xml('<PRODUTOS><ITEM cd_simpro="1" descricao="SORO 0,9%" pc_em_fab="2,50"/></PRODUTOS>')
    assert upper.rows == lower.rows


def test_item_tag_casings() -> None:
    for tag in ("ITEM", "item", "Item"):
        result = parse_simpro_xml(f'<PRODUTOS><{tag} CD_SIMPRO="1" DESCRICAO="X"/></PRODUTOS>')
        assert result.stats.parsed == 1


def test_leading_bom_is_ignored() -> None:
    result = parse_simpro_xml('\ufeff<?xml version="1.0"?><PRODUTOS><ITEM CD_SIMPRO="1" DESCRICAO="X"/></PRODUTOS>')
    assert result.success is True


def test_invalid_xml_is_structural_error() -> None:
    result = parse_simpro_xml("<PRODUTOS><ITEM CD_SIMPRO=")
    assert result.success is False
    assert result.rows == []
    assert len(result.errors) == 1
    assert result.errors[0].row == 0
    assert result.errors[0].message == INVALID_XML_MESSAGE
    assert (result.stats.total, result.stats.parsed, result.stats.errors) == (0, 0, 1)


def test_document_without_items_is_structural_error() -> None:
    result = parse_simpro_xml("<PRODUTOS><PRODUTO CD_SIMPRO='1'/></PRODUTOS>")
    assert result.success is False
    assert [e.message for e in result.errors] == [NO_ITEMS_MESSAGE]


def test_unexpected_item_failure_becomes_row_error(monkeypatch) -> None:
    def boom(attrs):
        raise RuntimeError("atributo corrompido")

    monkeypatch.setattr(xml_decoder, "decode_item", boom)
    result = parse_simpro_xml('<PRODUTOS><ITEM CD_SIMPRO="1" DESCRICAO="X"/><ITEM CD_SIMPRO="2" DESCRICAO="Y"/></PRODUTOS>')
    assert (result.stats.total, result.stats.parsed, result.stats.errors) == (2, 0, 2)
    assert [e.row for e in result.errors] == [1, 2]
    assert result.errors[0].message == "atributo corrompido"


def test_parsing_is_repeatable() -> None:
    assert parse_simpro_xml(XML_FULL_ITEM, "a.xml") == parse_simpro_xml(XML_FULL_ITEM, "a.xml")


def test_items_under_default_namespace() -> None:
    content = '<PRODUTOS xmlns="http://simpro.example/ns"><ITEM CD_SIMPRO="1" DESCRICAO="GAZE"/></PRODUTOS>'
    result = parse_simpro_xml(content)
    assert (result.stats.total, result.stats.parsed, result.stats.errors) == (1, 1, 0)
    assert result.rows[0].description == "GAZE"
