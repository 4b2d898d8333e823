from __future__ import annotations

import logging
import re

from lxml import etree

from simpro_importer.simpro.lookup import AttributeLookup
from simpro_importer.simpro.mapping import XML_EXTRA_FIELDS, PriceKind
from simpro_importer.simpro.normalize import clean_ean, extract_date_from_filename, parse_decimal
from simpro_importer.simpro.result import ExtraValue, ParsedRow, ParseResult, RowDecodeError, RowError


logger = logging.getLogger(__name__)

INVALID_XML_MESSAGE = "Erro ao parsear XML: Arquivo XML inválido"
NO_ITEMS_MESSAGE = "Nenhum produto encontrado no arquivo XML (ITEM elements)"
MISSING_CODE_MESSAGE = "Código do produto não encontrado (CD_SIMPRO ou CD_USUARIO)"
MISSING_DESCRIPTION_MESSAGE = "Descrição não encontrada"
ITEM_TAGS = ("ITEM", "item", "Item")

# lxml refuses str input that still carries an encoding declaration.
_XML_DECLARATION_RE = re.compile(r"^\s*<\?xml[^>]*\?>")


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)


def _find_items(root: etree._Element) -> list[etree._Element]:
    for tag in ITEM_TAGS:
        items = list(root.iter("{*}" + tag))
        if items:
            return items
    return []


def decode_item(attrs: AttributeLookup) -> ParsedRow:
    code = attrs.first("CD_SIMPRO", "CD_USUARIO")
    if not code:
        raise RowDecodeError(MISSING_CODE_MESSAGE, attrs.as_dict())
    description = attrs.get("DESCRICAO")
    if not description:
        raise RowDecodeError(MISSING_DESCRIPTION_MESSAGE, attrs.as_dict())

    prices = {kind: parse_decimal(attrs.get(kind.source_column)) for kind in PriceKind}
    extra: dict[str, ExtraValue] = {}
    for f in XML_EXTRA_FIELDS:
        raw = attrs.get(f.source)
        extra[f.key] = parse_decimal(raw) if f.decimal else raw

    return ParsedRow(
        code=code,
        secondary_code=attrs.get("CD_USUARIO"),
        description=description,
        ean=clean_ean(attrs.get("CD_BARRA")),
        manufacturer=attrs.get("FABRICA") or "",
        category=attrs.get("IDENTIF") or "A",
        base_unit=attrs.get("TP_FRACAO"),
        prices=prices,
        extra=extra,
    )


def parse_simpro_xml(content: str, filename: str = "") -> ParseResult:
    """
    Parse a SIMPRO XML dump: <PRODUTOS><ITEM CD_SIMPRO="..." DESCRICAO="..." .../></PRODUTOS>.

    Each ITEM resolves to a row or a row-level error; an unparseable document
    or one without ITEM elements is a single structural error.
    """
    try:
        text = _XML_DECLARATION_RE.sub("", _strip_bom(content or ""), count=1)
        try:
            root = etree.fromstring(text, parser=_parser())
        except etree.XMLSyntaxError as exc:
            logger.warning("invalid SIMPRO XML filename=%s: %s", filename, exc)
            return ParseResult.structural_failure(INVALID_XML_MESSAGE)

        items = _find_items(root)
        if not items:
            logger.warning("no ITEM elements in SIMPRO XML filename=%s", filename)
            return ParseResult.structural_failure(NO_ITEMS_MESSAGE)
    except Exception as exc:  # noqa: BLE001
        logger.exception("failed to read SIMPRO XML filename=%s", filename)
        return ParseResult.structural_failure(f"Erro ao ler arquivo XML: {exc}")

    reference_date = extract_date_from_filename(filename)
    rows: list[ParsedRow] = []
    errors: list[RowError] = []

    for i, item in enumerate(items):
        row_number = i + 1
        try:
            rows.append(decode_item(AttributeLookup(item.attrib)))
        except RowDecodeError as exc:
            logger.debug("skipping item %d: %s", row_number, exc)
            errors.append(RowError(row=row_number, message=str(exc), data=exc.data))
        except Exception as exc:  # noqa: BLE001
            logger.exception("unexpected error decoding item %d", row_number)
            errors.append(RowError(row=row_number, message=str(exc) or "Erro ao processar produto"))

    result = ParseResult.collect(rows, errors, total=len(items), reference_date=reference_date)
    logger.info(
        "parsed SIMPRO XML filename=%s total=%d parsed=%d errors=%d",
        filename,
        result.stats.total,
        result.stats.parsed,
        result.stats.errors,
    )
    return result
