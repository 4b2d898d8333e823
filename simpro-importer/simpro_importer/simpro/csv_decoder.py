from __future__ import annotations

import io
import logging
from typing import Optional, Sequence

import pandas as pd

from simpro_importer.config import settings
from simpro_importer.simpro.lookup import ColumnIndex
from simpro_importer.simpro.mapping import CSV_EXTRA_FIELDS, CSV_PRICE_ALIASES, PriceKind
from simpro_importer.simpro.normalize import (
    clean_ean,
    extract_date_from_filename,
    extract_reference_date,
    parse_decimal,
)
from simpro_importer.simpro.result import ExtraValue, ParsedRow, ParseResult, RowDecodeError, RowError


logger = logging.getLogger(__name__)

EMPTY_FILE_MESSAGE = "Arquivo vazio ou sem dados"
MISSING_CODE_MESSAGE = "Código do produto não encontrado"
MISSING_DESCRIPTION_MESSAGE = "Descrição não encontrada"
HEADER_MARKERS = ("CÓDIGO", "DESCRICAO", "DESCRIÇÃO")
DELIMITER = ";"


def find_header_row(lines: Sequence[str], *, scan_lines: int) -> int:
    """Index of the first line naming a code/description column; 0 when none does."""
    for i, line in enumerate(lines[:scan_lines]):
        upper = line.upper()
        if any(marker in upper for marker in HEADER_MARKERS):
            return i
    return 0


def decode_line(columns: ColumnIndex, values: Sequence[str]) -> ParsedRow:
    code = columns.first(values, "CÓDIGO", "CÓDIGO SIMPRO")
    if not code:
        raise RowDecodeError(MISSING_CODE_MESSAGE, columns.row_dict(values))
    description = columns.first(values, "DESCRICAO", "DESCRIÇÃO")
    if not description:
        raise RowDecodeError(MISSING_DESCRIPTION_MESSAGE, columns.row_dict(values))

    prices = {
        kind: parse_decimal(columns.first(values, kind.source_column, *CSV_PRICE_ALIASES.get(kind, ())))
        for kind in PriceKind
    }
    extra: dict[str, ExtraValue] = {}
    for f in CSV_EXTRA_FIELDS:
        raw = columns.get(values, f.source)
        extra[f.key] = parse_decimal(raw) if f.decimal else raw

    return ParsedRow(
        code=code,
        secondary_code=columns.get(values, "CD_USUARIO"),
        description=description,
        ean=clean_ean(columns.first(values, "CD_BARRA", "EAN")),
        manufacturer=columns.first(values, "FABRICA", "FABRICANTE") or "",
        category=columns.get(values, "IDENTIF") or "A",
        base_unit=columns.first(values, "TP_FRACAO", "UNIDADE"),
        prices=prices,
        extra=extra,
    )


def _cell(value: object) -> str:
    return value.strip() if isinstance(value, str) else ""


def read_table(lines: Sequence[str]) -> list[list[str]]:
    """
    Tokenize the header line and everything after it.

    One output row per physical line: blank lines come back as all-empty rows
    so callers can keep 1-based line numbers. Quoted fields may hold ";".
    """
    width = max(line.count(DELIMITER) for line in lines) + 1
    df = pd.read_csv(
        io.StringIO("\n".join(lines)),
        sep=DELIMITER,
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
    )
    return [[_cell(v) for v in record] for record in df.itertuples(index=False, name=None)]


def parse_simpro_csv(content: str, filename: str = "", *, scan_lines: Optional[int] = None) -> ParseResult:
    """
    Parse a semicolon-delimited SIMPRO export.

    The header may be preceded by metadata lines (title, "Vigência: dd/mm/yyyy");
    the reference date is taken from those. Row numbers in errors are 1-based
    physical line numbers.
    """
    window = settings.header_scan_lines if scan_lines is None else scan_lines
    try:
        lines = (content or "").split("\n")
        if len(lines) < 2:
            logger.warning("empty SIMPRO CSV filename=%s", filename)
            return ParseResult.structural_failure(EMPTY_FILE_MESSAGE)

        header_index = find_header_row(lines, scan_lines=window)
        table = read_table([lines[header_index].lstrip("\ufeff"), *lines[header_index + 1 :]])
        headers = list(table[0])
        while headers and not headers[-1]:
            headers.pop()
        columns = ColumnIndex(headers)
    except Exception as exc:  # noqa: BLE001
        logger.exception("failed to read SIMPRO CSV filename=%s", filename)
        return ParseResult.structural_failure(f"Erro ao ler arquivo CSV: {exc}")

    logger.debug("SIMPRO CSV header at line %d: %s", header_index + 1, columns.headers)
    reference_date = extract_reference_date(lines[:header_index], scan_lines=window)
    if reference_date is None:
        reference_date = extract_date_from_filename(filename)

    rows: list[ParsedRow] = []
    errors: list[RowError] = []
    total = 0

    for offset, values in enumerate(table[1:], start=1):
        line_number = header_index + offset + 1
        if not any(values):
            continue
        total += 1
        try:
            rows.append(decode_line(columns, values))
        except RowDecodeError as exc:
            logger.debug("skipping line %d: %s", line_number, exc)
            errors.append(RowError(row=line_number, message=str(exc), data=exc.data))
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected error decoding line %d", line_number)
            errors.append(RowError(row=line_number, message=str(exc) or "Erro ao processar linha"))

    result = ParseResult.collect(rows, errors, total=total, reference_date=reference_date)
    logger.info(
        "parsed SIMPRO CSV filename=%s total=%d parsed=%d errors=%d",
        filename,
        result.stats.total,
        result.stats.parsed,
        result.stats.errors,
    )
    return result
