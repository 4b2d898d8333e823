from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional, Union

from simpro_importer.config import settings
from simpro_importer.simpro.csv_decoder import parse_simpro_csv
from simpro_importer.simpro.result import ParseResult, ValidationSummary
from simpro_importer.simpro.xml_decoder import parse_simpro_xml


logger = logging.getLogger(__name__)

SourceFormat = Literal["csv", "xml"]

XML_MARKERS = ("<?xml", "<ITEM", "<item", "<Item")


@dataclass(frozen=True)
class SourceFile:
    """An uploaded SIMPRO file, already read into memory."""

    name: str
    content: Union[bytes, str]

    @property
    def size(self) -> int:
        if isinstance(self.content, bytes):
            return len(self.content)
        return len(self.content.encode("utf-8"))


def decode_content(raw: Union[bytes, str]) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("SIMPRO file is not UTF-8; decoding as cp1252")
        return raw.decode("cp1252", errors="replace")


def detect_format(filename: str, content: str) -> SourceFormat:
    name = (filename or "").lower()
    if name.endswith(".csv"):
        return "csv"
    if name.endswith(".xml"):
        return "xml"
    if any(marker in content for marker in XML_MARKERS):
        return "xml"
    return "csv"


def parse_file(source: SourceFile) -> ParseResult:
    content = decode_content(source.content)
    fmt = detect_format(source.name, content)
    logger.debug("SIMPRO file %s detected as %s", source.name, fmt)
    if fmt == "xml":
        return parse_simpro_xml(content, source.name)
    return parse_simpro_csv(content, source.name)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_count_pt_br(n: int) -> str:
    return f"{n:,}".replace(",", ".")


def validate_file(source: SourceFile, *, rows_per_second: Optional[int] = None) -> ValidationSummary:
    """
    Pre-import summary for the confirmation step: counts plus a rough
    duration estimate (the throughput includes the database writes done later).
    """
    file_size_kb = _round_half_up(source.size / 1024)
    try:
        result = parse_file(source)
        rate = rows_per_second or settings.rows_per_second
        row_count = result.stats.parsed
        error_count = result.stats.errors
        estimated = math.ceil(row_count / rate)
        is_valid = result.is_usable
        if is_valid:
            message = f"{_format_count_pt_br(row_count)} produtos, ~{estimated}s de processamento"
        else:
            message = f"{error_count} erros encontrados"
        return ValidationSummary(
            is_valid=is_valid,
            success=result.success,
            row_count=row_count,
            error_count=error_count,
            file_size_kb=file_size_kb,
            estimated_duration_seconds=estimated,
            message=message,
        )
    except Exception as exc:  # noqa: BLE001
        logger.exception("failed to validate SIMPRO file %s", source.name)
        return ValidationSummary(
            is_valid=False,
            success=False,
            row_count=0,
            error_count=1,
            file_size_kb=file_size_kb,
            estimated_duration_seconds=0,
            message=str(exc) or "Erro ao validar arquivo",
        )
