"""
SIMPRO column/attribute tables.

The source-column names (PC_EM_FAB, TP_FRACAO, ...) are referenced by
downstream configuration, e.g. "which price column feeds the catalog price".
Do not rename them.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


# SIMPRO column/attribute -> canonical key
SIMPRO_FIELD_MAPPING: MappingProxyType[str, str] = MappingProxyType(
    {
        # Product identification
        "CD_BARRA": "ean",
        "DESCRICAO": "descricao",
        "CD_SIMPRO": "codigo_simpro",
        "FABRICA": "fabricante",
        "IDENTIF": "categoria",
        # Prices
        "PC_EM_FAB": "preco_pf",
        "PC_EM_VEN": "preco_pmc",
        "PC_EM_USU": "preco_usuario",
        "PC_FR_FAB": "preco_fracao_fab",
        "PC_FR_VEN": "preco_fracao_venda",
        "PC_FR_USU": "preco_fracao_usuario",
        # Packaging and quantity
        "QTDE_EMBAL": "quantidade_embalagem",
        "TP_EMBAL": "tipo_embalagem",  # CX, FR, UN, PCT
        "TP_FRACAO": "unidade",  # UN, CAPS, CPDS, ML, G, KG
        "QTDE_FRAC": "quantidade_fracao",
    }
)


class PriceKind(str, Enum):
    PF = "pf"
    PMC = "pmc"
    USER = "user"
    FRAC_FAB = "fracFab"
    FRAC_SALE = "fracSale"
    FRAC_USER = "fracUser"

    @property
    def source_column(self) -> str:
        return _PRICE_SOURCE_COLUMNS[self]


_PRICE_SOURCE_COLUMNS: dict[PriceKind, str] = {
    PriceKind.PF: "PC_EM_FAB",
    PriceKind.PMC: "PC_EM_VEN",
    PriceKind.USER: "PC_EM_USU",
    PriceKind.FRAC_FAB: "PC_FR_FAB",
    PriceKind.FRAC_SALE: "PC_FR_VEN",
    PriceKind.FRAC_USER: "PC_FR_USU",
}

# Header aliases seen in CSV exports, tried after the attribute name.
CSV_PRICE_ALIASES: dict[PriceKind, tuple[str, ...]] = {
    PriceKind.PF: ("PREÇO PF",),
    PriceKind.PMC: ("PREÇO PMC",),
}


@dataclass(frozen=True)
class PriceOption:
    value: str
    label: str


# User-selectable price columns, in display order.
SIMPRO_PRICE_OPTIONS: tuple[PriceOption, ...] = (
    PriceOption(value="preco_pf", label="PC_EM_FAB"),
    PriceOption(value="preco_pmc", label="PC_EM_VEN"),
    PriceOption(value="preco_usuario", label="PC_EM_USU"),
    PriceOption(value="preco_fracao_fab", label="PC_FR_FAB"),
    PriceOption(value="preco_fracao_venda", label="PC_FR_VEN"),
)


@dataclass(frozen=True)
class ExtraField:
    key: str
    source: str
    decimal: bool = False


# Auxiliary attributes passed through to `extra` (validity, percentages,
# regulatory codes, flags). Strings verbatim unless marked decimal.
XML_EXTRA_FIELDS: tuple[ExtraField, ...] = (
    ExtraField("cd_usuario", "CD_USUARIO"),
    ExtraField("cd_fracao", "CD_FRACAO"),
    ExtraField("vigencia", "VIGENCIA"),
    ExtraField("identif", "IDENTIF"),
    ExtraField("perc_lucro", "PERC_LUCR"),
    ExtraField("tipo_alteracao", "TIP_ALT"),
    ExtraField("cd_mercado", "CD_MERCADO"),
    ExtraField("perc_desconto", "PERC_DESC"),
    ExtraField("ipi_produto", "IPI_PRODUTO"),
    ExtraField("registro_anvisa", "REGISTRO_ANVISA"),
    ExtraField("validade_anvisa", "VALIDADE_ANVISA"),
    ExtraField("lista", "LISTA"),
    ExtraField("hospitalar", "HOSPITALAR"),
    ExtraField("fracionar", "FRACIONAR"),
    ExtraField("cd_tuss", "CD_TUSS"),
    ExtraField("cd_classif", "CD_CLASSIF"),
    ExtraField("cd_ref_pro", "CD_REF_PRO"),
    ExtraField("generico", "GENERICO"),
    ExtraField("diversos", "DIVERSOS"),
    ExtraField("quantidade_fracao", "QTDE_FRAC", decimal=True),
    ExtraField("tipo_embalagem", "TP_EMBAL"),
    ExtraField("quantidade_embalagem", "QTDE_EMBAL", decimal=True),
)

_CSV_DECIMAL_EXTRAS = {"perc_lucro", "perc_desconto", "ipi_produto"}

# CSV exports carry the percentages already as numbers.
CSV_EXTRA_FIELDS: tuple[ExtraField, ...] = tuple(
    ExtraField(f.key, f.source, decimal=f.decimal or f.key in _CSV_DECIMAL_EXTRAS) for f in XML_EXTRA_FIELDS
)
