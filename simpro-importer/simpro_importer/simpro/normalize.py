from __future__ import annotations

import re
from typing import Iterable, Optional


_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_FILENAME_DATE_RE = re.compile(r"(\d{2})-(\d{2})-(\d{4})")
_HEADER_DATE_RE = re.compile(r"(\d{2})/(\d{2})/(\d{4})")

MIN_REFERENCE_YEAR = 2020
MAX_REFERENCE_YEAR = 2100


def parse_decimal(value: Optional[str]) -> Optional[float]:
    """
    Parse a Brazilian-formatted number ("1.234,56" -> 1234.56).

    Empty input is None, never 0. Only the leading numeric part counts ("10,50 R$" -> 10.5).
    """
    if not value:
        return None
    cleaned = str(value).strip().replace(".", "").replace(",", ".")
    m = _FLOAT_PREFIX_RE.match(cleaned)
    if not m:
        return None
    return float(m.group(0))


def clean_ean(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    cleaned = re.sub(r"\s+", "", value.strip()).replace("-", "")
    if not cleaned or cleaned == "-":
        return None
    return cleaned


def _iso_if_plausible(day: str, month: str, year: str) -> Optional[str]:
    d, m, y = int(day), int(month), int(year)
    if 1 <= d <= 31 and 1 <= m <= 12 and MIN_REFERENCE_YEAR <= y <= MAX_REFERENCE_YEAR:
        return f"{year}-{month}-{day}"
    return None


def extract_date_from_filename(filename: Optional[str]) -> Optional[str]:
    """mat_17-04-2024.pfb.xml -> 2024-04-17"""
    m = _FILENAME_DATE_RE.search(filename or "")
    if not m:
        return None
    return _iso_if_plausible(*m.groups())


def extract_reference_date(lines: Iterable[str], *, scan_lines: int = 10) -> Optional[str]:
    """Find the first plausible dd/mm/yyyy date in the metadata lines above a CSV header."""
    for i, line in enumerate(lines):
        if i >= scan_lines:
            break
        m = _HEADER_DATE_RE.search(line or "")
        if not m:
            continue
        iso = _iso_if_plausible(*m.groups())
        if iso:
            return iso
    return None
