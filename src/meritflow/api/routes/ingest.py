"""File ingestion endpoint. The upload is the raw request body."""

from __future__ import annotations

from fastapi import APIRouter, Query, Request
from fastapi.concurrency import run_in_threadpool

from meritflow.ingestion.parser import content_hash, parse_file
from meritflow.models.results import FileType, ParseResult

router = APIRouter(tags=["ingest"])


@router.post("/parse", response_model=ParseResult)
async def parse(
    request: Request,
    file_name: str = Query(..., min_length=1),
    expected_type: FileType = Query(FileType.UNKNOWN),
) -> ParseResult:
    data = await request.body()
    settings = request.app.state.settings
    file_cache = request.app.state.file_cache
    if data:
        cached = file_cache.get(content_hash(data), str(expected_type))
        if cached is not None:
            return cached.model_copy(update={"file_name": file_name})
    # CPU-bound (openpyxl, csv); runs on a worker thread
    result = await run_in_threadpool(parse_file, file_name, data, expected_type, settings.ingestion)
    file_cache.put(result, str(expected_type))
    return result
