from __future__ import annotations

from typing import Optional

from simpro_importer.simpro.extract import extract_concentration, extract_presentation, extract_unit_and_quantity
from simpro_importer.simpro.result import ExtraValue, ParsedRow, RefItemData


def build_extra_data(row: ParsedRow) -> dict[str, ExtraValue]:
    return {**row.extra, "categoria": row.category}


def build_ref_item_data(row: ParsedRow) -> RefItemData:
    """
    Project a parsed SIMPRO row onto the `ref_item` columns.

    SIMPRO has no TISS column and no manufacturer code, so both stay None.
    """
    units = extract_unit_and_quantity(row)
    tuss = row.extra.get("cd_tuss")
    return RefItemData(
        product_name=row.description or row.code,
        presentation=extract_presentation(row),
        concentration=extract_concentration(row),
        entry_unit=units.entry_unit,
        base_unit=units.base_unit,
        quantity=units.quantity,
        tiss=None,
        tuss=str(tuss) if tuss else None,
        ean=row.ean,
        manufacturer_code=None,
        manufacturer_name=row.manufacturer or "",
        category=row.category or None,
        subcategory=None,
        extra_data=build_extra_data(row),
    )


def build_item_description(row: ParsedRow) -> str:
    """Legacy single-line description: "<description> • Fab: <manufacturer>"."""
    parts = []
    if row.description:
        parts.append(row.description)
    if row.manufacturer:
        parts.append(f"Fab: {row.manufacturer}")
    return " • ".join(parts) or row.code


def primary_ean(row: ParsedRow) -> Optional[str]:
    return row.ean
