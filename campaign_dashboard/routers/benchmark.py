"""Benchmarks per vehicle / buying model."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from ..config import settings
from ..services.benchmark import (
    BENCHMARK_RANGE,
    benchmark_key,
    compare_to_benchmark,
    process_benchmark,
)
from ..services.sheets import SheetsClient, get_sheets_client
from .common import fetch_table

router = APIRouter(prefix="/benchmark", tags=["benchmark"])


@router.get("")
async def list_benchmarks(sheets: SheetsClient = Depends(get_sheets_client)):
    table = await fetch_table(sheets, BENCHMARK_RANGE, spreadsheet_id=settings.benchmark_spreadsheet_id)
    benchmarks = process_benchmark(table)
    return {"benchmarks": {key: b.to_dict() for key, b in benchmarks.items()}}


@router.get("/compare")
async def compare(
    vehicle: str,
    modality: str,
    cpm: Optional[float] = None,
    cpc: Optional[float] = None,
    ctr: Optional[float] = None,
    vtr: Optional[float] = None,
    sheets: SheetsClient = Depends(get_sheets_client),
):
    """Variation of the supplied metrics against the vehicle's benchmark."""
    table = await fetch_table(sheets, BENCHMARK_RANGE, spreadsheet_id=settings.benchmark_spreadsheet_id)
    benchmarks = process_benchmark(table)

    key = benchmark_key(vehicle, modality)
    benchmark = benchmarks.get(key)
    if benchmark is None:
        raise HTTPException(status_code=404, detail=f"No benchmark for {key}")

    variations = compare_to_benchmark(benchmark, {"cpm": cpm, "cpc": cpc, "ctr": ctr, "vtr": vtr})
    return {"benchmark": benchmark.to_dict(), "variations": variations}
