import pytest

from campaign_dashboard.services.benchmark import (
    benchmark_key,
    calculate_variation,
    compare_to_benchmark,
    process_benchmark,
)
from campaign_dashboard.services.pipeline import RawTable


def _benchmark_table():
    return RawTable.from_values(
        [
            ["Veículo", "Modelo", "CPM", "CPC", "Impressões", "Cliques", "Custo", "CTR", "VTR"],
            ["Meta", "CPM", "10,00", "0,50", "1.000.000", "20.000", "", "0,80", "25"],
            ["google", " CPC ", "", "1,20", "", "1.000", "", "3,5", ""],
            ["", "CPM", "1", "1", "1", "1", "1", "1", "1"],
        ]
    )


def test_process_benchmark_keys_and_values():
    benchmarks = process_benchmark(_benchmark_table())

    assert set(benchmarks) == {"META_cpm", "GOOGLE_cpc"}
    meta = benchmarks["META_cpm"]
    assert meta.vehicle == "META"
    assert meta.modality == "cpm"
    assert meta.impressions == 1_000_000
    assert meta.clicks == 20_000
    assert meta.ctr == pytest.approx(0.8)
    assert meta.vtr == pytest.approx(25.0)


def test_cost_is_rebuilt_from_cpm_then_cpc():
    benchmarks = process_benchmark(_benchmark_table())
    assert benchmarks["META_cpm"].cost == pytest.approx(10_000.0)
    assert benchmarks["GOOGLE_cpc"].cost == pytest.approx(1_200.0)


def test_benchmark_key():
    assert benchmark_key(" meta ", "CPM") == "META_cpm"


@pytest.mark.parametrize(
    "current, benchmark, kind, expected",
    [
        (12.0, 10.0, "cost", {"value": "+2.00", "better": False}),
        (8.0, 10.0, "cost", {"value": "-2.00", "better": True}),
        (1.0, 0.8, "performance", {"value": "+0.20", "better": True}),
        (0.5, 0.8, "performance", {"value": "-0.30", "better": False}),
        (5.0, 0.0, "cost", {"value": "-", "better": None}),
    ],
)
def test_calculate_variation(current, benchmark, kind, expected):
    assert calculate_variation(current, benchmark, kind) == expected


def test_calculate_variation_rejects_unknown_kind():
    with pytest.raises(ValueError):
        calculate_variation(1.0, 1.0, "reach")


def test_compare_to_benchmark_skips_unknown_metrics():
    meta = process_benchmark(_benchmark_table())["META_cpm"]
    result = compare_to_benchmark(meta, {"cpm": 12.0, "ctr": 1.0, "impressions": 5, "cpc": None})
    assert set(result) == {"cpm", "ctr"}
    assert result["cpm"]["better"] is False
    assert result["ctr"]["better"] is True


def test_first_header_containing_name_wins():
    table = RawTable.from_values(
        [
            ["Veículo", "Modelo", "CPM bruto", "CPC", "CPM"],
            ["Meta", "CPM", "12,00", "0,50", "10,00"],
        ]
    )
    assert process_benchmark(table)["META_cpm"].cpm == pytest.approx(12.0)
