from __future__ import annotations

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from simpro_importer.simpro.mapping import SIMPRO_PRICE_OPTIONS, PriceKind
from simpro_importer.simpro.result import ParsedRow, ParseResult, RefItemData, ValidationSummary


ExtraValueView = Union[bool, int, float, str, None]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PricesView(_CamelModel):
    pf: Optional[float] = None
    pmc: Optional[float] = None
    user: Optional[float] = None
    frac_fab: Optional[float] = Field(default=None, alias="fracFab")
    frac_sale: Optional[float] = Field(default=None, alias="fracSale")
    frac_user: Optional[float] = Field(default=None, alias="fracUser")


class ParsedRowView(_CamelModel):
    code: str
    secondary_code: Optional[str] = Field(default=None, alias="secondaryCode")
    description: str
    ean: Optional[str] = None
    manufacturer: str = ""
    category: str = "A"
    base_unit: Optional[str] = Field(default=None, alias="baseUnit")
    prices: PricesView
    extra: dict[str, ExtraValueView] = Field(default_factory=dict)


class RowErrorView(BaseModel):
    row: int
    message: str
    data: Optional[dict[str, Any]] = None


class StatsView(BaseModel):
    total: int
    parsed: int
    errors: int


class ParseResultView(_CamelModel):
    success: bool
    rows: list[ParsedRowView] = Field(default_factory=list)
    reference_date: Optional[str] = Field(default=None, alias="referenceDate")
    errors: list[RowErrorView] = Field(default_factory=list)
    stats: StatsView


class ValidationSummaryView(_CamelModel):
    is_valid: bool = Field(alias="isValid")
    success: bool
    row_count: int = Field(alias="rowCount")
    error_count: int = Field(alias="errorCount")
    file_size_kb: int = Field(alias="fileSizeKb")
    estimated_duration_seconds: int = Field(alias="estimatedDurationSeconds")
    message: str


class RefItemView(BaseModel):
    product_name: str
    presentation: Optional[str] = None
    concentration: Optional[str] = None
    entry_unit: Optional[str] = None
    base_unit: Optional[str] = None
    quantity: Optional[float] = None
    tiss: Optional[str] = None
    tuss: Optional[str] = None
    ean: Optional[str] = None
    manufacturer_code: Optional[str] = None
    manufacturer_name: str = ""
    category: Optional[str] = None
    subcategory: Optional[str] = None
    extra_data: dict[str, ExtraValueView] = Field(default_factory=dict)


class RefItemsResponse(_CamelModel):
    reference_date: Optional[str] = Field(default=None, alias="referenceDate")
    stats: StatsView
    errors: list[RowErrorView] = Field(default_factory=list)
    items: list[RefItemView] = Field(default_factory=list)


class PriceOptionView(BaseModel):
    value: str
    label: str


def to_row_view(row: ParsedRow) -> ParsedRowView:
    prices = {kind.value: row.prices.get(kind) for kind in PriceKind}
    return ParsedRowView(
        code=row.code,
        secondary_code=row.secondary_code,
        description=row.description,
        ean=row.ean,
        manufacturer=row.manufacturer,
        category=row.category,
        base_unit=row.base_unit,
        prices=PricesView.model_validate(prices),
        extra=dict(row.extra),
    )


def to_stats_view(result: ParseResult) -> StatsView:
    return StatsView(total=result.stats.total, parsed=result.stats.parsed, errors=result.stats.errors)


def to_error_views(result: ParseResult) -> list[RowErrorView]:
    return [RowErrorView(row=e.row, message=e.message, data=e.data) for e in result.errors]


def to_parse_result_view(result: ParseResult) -> ParseResultView:
    return ParseResultView(
        success=result.success,
        rows=[to_row_view(r) for r in result.rows],
        reference_date=result.reference_date,
        errors=to_error_views(result),
        stats=to_stats_view(result),
    )


def to_validation_view(summary: ValidationSummary) -> ValidationSummaryView:
    return ValidationSummaryView(
        is_valid=summary.is_valid,
        success=summary.success,
        row_count=summary.row_count,
        error_count=summary.error_count,
        file_size_kb=summary.file_size_kb,
        estimated_duration_seconds=summary.estimated_duration_seconds,
        message=summary.message,
    )


def to_ref_item_view(item: RefItemData) -> RefItemView:
    return RefItemView(
        product_name=item.product_name,
        presentation=item.presentation,
        concentration=item.concentration,
        entry_unit=item.entry_unit,
        base_unit=item.base_unit,
        quantity=item.quantity,
        tiss=item.tiss,
        tuss=item.tuss,
        ean=item.ean,
        manufacturer_code=item.manufacturer_code,
        manufacturer_name=item.manufacturer_name,
        category=item.category,
        subcategory=item.subcategory,
        extra_data=dict(item.extra_data),
    )


def price_option_views() -> list[PriceOptionView]:
    return [PriceOptionView(value=o.value, label=o.label) for o in SIMPRO_PRICE_OPTIONS]
