"""Currency conversion endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from meritflow.core.exceptions import ConversionBatchError
from meritflow.models.currency import ConversionResult
from meritflow.models.money import Money

router = APIRouter(tags=["currency"])


class ConvertRequest(BaseModel):
    amounts: list[Money] = Field(default_factory=list)
    to_currency: str = "USD"


class ConvertResponse(BaseModel):
    results: list[ConversionResult]
    using_fallback: bool


@router.post("/convert", response_model=ConvertResponse)
async def convert(body: ConvertRequest, request: Request) -> ConvertResponse:
    converter = request.app.state.converter
    try:
        results = await converter.convert_batch(body.amounts, body.to_currency)
    except ConversionBatchError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ConvertResponse(results=results, using_fallback=converter.using_fallback)


@router.get("/supported")
async def supported(request: Request) -> dict[str, list[str]]:
    return {"currencies": request.app.state.converter.supported_currencies()}
