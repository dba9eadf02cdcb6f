"""Media benchmarks per vehicle/buying model and variation against them."""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Sequence

from .pipeline.columns import NOT_FOUND, find_containing
from .pipeline.normalize import parse_number
from .pipeline.table import RawTable

BENCHMARK_RANGE = "BENCHMARK"

COST_METRICS = {"cpm", "cpc", "cost"}
PERFORMANCE_METRICS = {"ctr", "vtr", "completion_rate"}


@dataclass(frozen=True)
class Benchmark:
    vehicle: str
    modality: str
    impressions: float
    clicks: float
    cost: float
    cpm: float
    cpc: float
    ctr: float
    vtr: float
    completion_rate: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def benchmark_key(vehicle: str, modality: str) -> str:
    return f"{str(vehicle).strip().upper()}_{str(modality).strip().lower()}"


def _value(table: RawTable, row: Sequence[Any], header: str, default_idx: int) -> Any:
    """Cell under the first header containing `header`, else the cell at a fixed position."""
    idx = find_containing(table.headers, header)
    if idx != NOT_FOUND and idx < len(row):
        return row[idx]
    return table.cell(row, default_idx)


def process_benchmark(table: RawTable) -> dict[str, Benchmark]:
    """
    Benchmark sheet → {"VEHICLE_modality": Benchmark}.

    Vehicle and buying model are the first two columns. When the sheet has no
    usable cost, it is rebuilt from CPM (preferred) or CPC.
    """
    benchmarks: dict[str, Benchmark] = {}
    for row in table.rows:
        vehicle = str(table.cell(row, 0) or "").strip()
        modality = str(table.cell(row, 1) or "").strip()
        if not vehicle or not modality:
            continue

        impressions = parse_number(_value(table, row, "impress", 4))
        clicks = parse_number(_value(table, row, "click", 5))
        cpm = parse_number(_value(table, row, "cpm", 2))
        cpc = parse_number(_value(table, row, "cpc", 3))

        cost = parse_number(_value(table, row, "cost", 6) or _value(table, row, "spent", 6))
        if cost == 0:
            if impressions > 0 and cpm > 0:
                cost = impressions * cpm / 1000
            elif clicks > 0 and cpc > 0:
                cost = clicks * cpc

        key = benchmark_key(vehicle, modality)
        benchmarks[key] = Benchmark(
            vehicle=vehicle.upper(),
            modality=modality.lower(),
            impressions=impressions,
            clicks=clicks,
            cost=cost,
            cpm=cpm,
            cpc=cpc,
            ctr=parse_number(_value(table, row, "ctr", 7)),
            vtr=parse_number(_value(table, row, "vtr", 8)),
            completion_rate=parse_number(_value(table, row, "completion", 8)),
        )
    return benchmarks


def calculate_variation(current: float, benchmark: float, kind: str) -> dict[str, Any]:
    """
    Difference to the benchmark, signed with two decimals.

    kind="cost": lower is better (CPM, CPC). kind="performance": higher is
    better (CTR, VTR). A zero benchmark has no meaningful comparison.
    """
    if kind not in ("cost", "performance"):
        raise ValueError(f"Unknown variation kind: {kind}")
    if benchmark == 0:
        return {"value": "-", "better": None}

    difference = current - benchmark
    better = difference < 0 if kind == "cost" else difference > 0
    sign = "+" if difference > 0 else ""
    return {"value": f"{sign}{difference:.2f}", "better": better}


def compare_to_benchmark(benchmark: Benchmark, current: dict[str, float]) -> dict[str, dict[str, Any]]:
    """Variation for each supplied metric the benchmark knows about."""
    result: dict[str, dict[str, Any]] = {}
    for metric, value in current.items():
        if value is None:
            continue
        if metric in COST_METRICS:
            kind = "cost"
        elif metric in PERFORMANCE_METRICS:
            kind = "performance"
        else:
            continue
        result[metric] = calculate_variation(value, getattr(benchmark, metric), kind)
    return result
