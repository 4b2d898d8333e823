from __future__ import annotations

import io
import json
import logging
import re
import uuid
from dataclasses import asdict
from pathlib import Path
from typing import Any

import pandas as pd
from fastapi import FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse

from simpro_importer.config import settings
from simpro_importer.schema import (
    ParseResultView,
    PriceOptionView,
    RefItemsResponse,
    ValidationSummaryView,
    price_option_views,
    to_error_views,
    to_parse_result_view,
    to_ref_item_view,
    to_stats_view,
    to_validation_view,
)
from simpro_importer.simpro.assemble import build_ref_item_data
from simpro_importer.simpro.parser import SourceFile, parse_file, validate_file


logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "x-simpro-request-id"


def _request_id(request: Request) -> str:
    existing = request.headers.get(REQUEST_ID_HEADER) or request.headers.get("x-request-id")
    if existing:
        return existing
    return uuid.uuid4().hex[:12]


async def _read_upload(file: UploadFile) -> SourceFile:
    raw = await file.read()
    if not raw:
        raise HTTPException(status_code=400, detail="Empty upload.")
    limit = settings.max_upload_mb * 1024 * 1024
    if len(raw) > limit:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.max_upload_mb} MB.")
    return SourceFile(name=file.filename or "", content=raw)


app = FastAPI(title="SIMPRO Reference Importer", version="1.0.0")


@app.middleware("http")
async def _request_id_middleware(request: Request, call_next):  # type: ignore[no-untyped-def]
    rid = _request_id(request)
    request.state.request_id = rid  # type: ignore[attr-defined]
    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = rid
    return response


origins = settings.cors_origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if origins == ["*"] else origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True, "rows_per_second": settings.rows_per_second}


@app.get("/v1/simpro/price-options", response_model=list[PriceOptionView])
def price_options() -> list[PriceOptionView]:
    return price_option_views()


@app.post("/v1/simpro/parse", response_model=ParseResultView)
async def parse_upload(file: UploadFile = File(...)) -> ParseResultView:
    source = await _read_upload(file)
    return to_parse_result_view(parse_file(source))


@app.post("/v1/simpro/validate", response_model=ValidationSummaryView)
async def validate_upload(file: UploadFile = File(...)) -> ValidationSummaryView:
    source = await _read_upload(file)
    return to_validation_view(validate_file(source))


@app.post("/v1/simpro/ref-items", response_model=RefItemsResponse)
async def ref_items_upload(file: UploadFile = File(...)) -> RefItemsResponse:
    source = await _read_upload(file)
    result = parse_file(source)
    return RefItemsResponse(
        reference_date=result.reference_date,
        stats=to_stats_view(result),
        errors=to_error_views(result),
        items=[to_ref_item_view(build_ref_item_data(row)) for row in result.rows],
    )


def _ref_items_frame(source: SourceFile) -> pd.DataFrame:
    result = parse_file(source)
    records = []
    for row in result.rows:
        item = asdict(build_ref_item_data(row))
        item["code"] = row.code
        item["extra_data"] = json.dumps(item["extra_data"], ensure_ascii=False)
        records.append(item)
    return pd.DataFrame(records)


@app.post("/v1/simpro/export")
async def export_upload(file: UploadFile = File(...), format: str = Query(default="csv")):
    fmt = (format or "csv").strip().lower()
    if fmt not in {"csv", "xlsx"}:
        raise HTTPException(status_code=400, detail="format must be csv or xlsx")

    source = await _read_upload(file)
    df = _ref_items_frame(source)
    if df.empty:
        raise HTTPException(status_code=422, detail="No rows could be parsed from the file.")
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", Path(source.name).stem) or "simpro"
    logger.info("exporting %d SIMPRO ref items from %s as %s", len(df), source.name, fmt)

    if fmt == "csv":
        buf = io.StringIO()
        df.to_csv(buf, index=False)
        data = buf.getvalue().encode("utf-8")
        return StreamingResponse(
            io.BytesIO(data),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{stem}_ref_items.csv"'},
        )

    xbuf = io.BytesIO()
    with pd.ExcelWriter(xbuf, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="ref_items")
    xbuf.seek(0)
    return StreamingResponse(
        xbuf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{stem}_ref_items.xlsx"'},
    )
