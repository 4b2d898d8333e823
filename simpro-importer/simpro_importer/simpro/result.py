from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Union

from simpro_importer.simpro.mapping import PriceKind


ExtraValue = Union[str, float, int, bool, None]


@dataclass(frozen=True)
class ParsedRow:
    code: str
    description: str
    ean: Optional[str]
    manufacturer: str
    category: str
    base_unit: Optional[str]
    prices: dict[PriceKind, Optional[float]]
    extra: dict[str, ExtraValue] = field(default_factory=dict)
    secondary_code: Optional[str] = None


@dataclass(frozen=True)
class RowError:
    row: int
    message: str
    data: Optional[dict[str, Any]] = None


@dataclass(frozen=True)
class ParseStats:
    total: int
    parsed: int
    errors: int


@dataclass(frozen=True)
class ParseResult:
    success: bool
    rows: list[ParsedRow]
    reference_date: Optional[str]
    errors: list[RowError]
    stats: ParseStats

    @property
    def is_usable(self) -> bool:
        # A file with some good rows can still be imported partially.
        return self.success or self.stats.parsed > 0

    @classmethod
    def structural_failure(cls, message: str) -> "ParseResult":
        return cls(
            success=False,
            rows=[],
            reference_date=None,
            errors=[RowError(row=0, message=message)],
            stats=ParseStats(total=0, parsed=0, errors=1),
        )

    @classmethod
    def collect(
        cls,
        rows: list[ParsedRow],
        errors: list[RowError],
        *,
        total: int,
        reference_date: Optional[str],
    ) -> "ParseResult":
        return cls(
            success=not errors,
            rows=rows,
            reference_date=reference_date,
            errors=errors,
            stats=ParseStats(total=total, parsed=len(rows), errors=len(errors)),
        )


@dataclass(frozen=True)
class RefItemData:
    """Catalog-import projection of one ParsedRow (a `ref_item` row)."""

    product_name: str
    presentation: Optional[str]
    concentration: Optional[str]
    entry_unit: Optional[str]
    base_unit: Optional[str]
    quantity: Optional[float]
    tiss: Optional[str]
    tuss: Optional[str]
    ean: Optional[str]
    manufacturer_code: Optional[str]
    manufacturer_name: str
    category: Optional[str]
    subcategory: Optional[str]
    extra_data: dict[str, ExtraValue]


@dataclass(frozen=True)
class ValidationSummary:
    is_valid: bool
    success: bool
    row_count: int
    error_count: int
    file_size_kb: int
    estimated_duration_seconds: int
    message: str


class RowDecodeError(ValueError):
    """A record is missing a required field; becomes a row-level error."""

    def __init__(self, message: str, data: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.data = data
