from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from simpro_importer.simpro.result import ParsedRow


# Ordered, first match wins. Descriptions often match several patterns.
CONCENTRATION_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(\d+(?:[,.]\d+)?\s*(?:MG|MCG|G|ML|UI|UG|%|L|KG)(?:\s*/\s*(?:ML|L|G|KG|DOSE|GOTA|HORA|DIA))?)",
        flags=re.IGNORECASE,
    ),
]

PRESENTATION_PATTERNS: list[re.Pattern[str]] = [
    # "COM 30 COMP", "C/ 10 AMP"
    re.compile(r"(?:COM|COMP|C/)\s*(\d+\s*(?:COM|COMP|CAPS|CAP|CPR|DRG|AMP|FA|FR|ML|G|UNID).*)", flags=re.IGNORECASE),
    # "CX C/10 FR", "FRASCO 100ML"
    re.compile(r"((?:CX|CAIXA|CT|BL|BLISTER|FR|FRASCO|AMP|AMPOLA)\s*(?:COM|C/|X)?\s*\d+.*)", flags=re.IGNORECASE),
    # "20 UNID"
    re.compile(r"(\d+\s*(?:UN|UNID|UND).*)", flags=re.IGNORECASE),
]

_UNIT_TOKENS = r"(COM|COMP|CAPS|CAP|CPR|DRG|AMP|FA|FR|ML|G|UN|UNID)"
UNIT_QUANTITY_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"(?:C/|COM|X)\s*(\d+)\s*" + _UNIT_TOKENS, flags=re.IGNORECASE),
    re.compile(r"(\d+)\s*" + _UNIT_TOKENS, flags=re.IGNORECASE),
]


@dataclass(frozen=True)
class UnitQuantity:
    entry_unit: Optional[str]
    base_unit: Optional[str]
    quantity: Optional[float]


def extract_concentration(row: ParsedRow) -> Optional[str]:
    """DIPIRONA 500MG -> 500MG, SORO FISIOLOGICO 0,9% -> 0,9%"""
    text = row.description or ""
    for pat in CONCENTRATION_PATTERNS:
        m = pat.search(text)
        if m:
            return re.sub(r"\s+", "", m.group(1).upper())
    return None


def extract_presentation(row: ParsedRow) -> Optional[str]:
    text = row.description or ""
    for pat in PRESENTATION_PATTERNS:
        m = pat.search(text)
        if m:
            return m.group(1).strip()
    return None


def _upper_or_none(value: object) -> Optional[str]:
    if not value:
        return None
    return str(value).upper()


def _positive_or_none(value: object) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return float(value)


def extract_unit_and_quantity(row: ParsedRow) -> UnitQuantity:
    """
    entry_unit is the packaging unit (TP_EMBAL: CX, FR, PCT); base_unit the
    fraction unit (TP_FRACAO: UN, CAPS, ML, G). Structured fields win; the
    description is only scanned when both are absent, and then yields no
    entry_unit.
    """
    extra = row.extra or {}
    entry_unit = _upper_or_none(extra.get("tipo_embalagem"))
    base_unit = _upper_or_none(row.base_unit)
    if entry_unit or base_unit:
        quantity = _positive_or_none(extra.get("quantidade_embalagem")) or _positive_or_none(
            extra.get("quantidade_fracao")
        )
        return UnitQuantity(entry_unit=entry_unit, base_unit=base_unit, quantity=quantity)

    text = row.description or ""
    for pat in UNIT_QUANTITY_PATTERNS:
        m = pat.search(text)
        if m:
            return UnitQuantity(entry_unit=None, base_unit=m.group(2).upper(), quantity=float(m.group(1)))

    return UnitQuantity(entry_unit=None, base_unit=None, quantity=None)
