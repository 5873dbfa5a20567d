import pytest

from fleetops.kpi.catalog import contributor_keys_for_kpi, label_for_metric, load_kpi_catalog
from fleetops.kpi.normalize import (
    build_ai_analysis_metric,
    build_breakdown,
    build_contributors,
    build_selected_metric,
    build_trend_rows,
    extract_history,
    history_point_label,
    metric_value,
    to_numeric,
)


AGGREGATED = {
    "otd": {
        "actual": "82",
        "expected": 90,
        "variance": None,
        "unitOfMeasurement": "%",
        "kpiDescription": "On-time delivery within ring 1",
        "formula": "ontime / total",
        "rankings": {"region": 3, "overall": "12"},
    },
    "otdCount": {"metricValue": 410, "expected": 450, "variance": -40},
    "totalCico": {"value": 12, "expected": 10},
    "ti": {"actual": None, "expected": None, "variance": None},
    "to": 0,
    "averageDistancePerTrip": {"score": 140.5, "expected": 120, "variance": 20.5, "unitOfMeasurement": "km"},
}

HISTORY = {
    "history": [
        {"calculationWindowStart": "2024-04-01T00:00:00", "metricValue": 88},
        {"period": "2024-04-08", "actual": "87"},
        {"date": "W3", "value": None},
        {"score": 82},
    ]
}


@pytest.mark.parametrize(
    "raw,expected",
    [(5, 5.0), (2.5, 2.5), (" 7.25 ", 7.25), ("", None), ("abc", None), (None, None), (True, None),
     (float("nan"), None), ("inf", None), ({"a": 1}, None), (10 ** 400, None),
     ("1_000", None), ("0x10", None)],
)
def test_to_numeric(raw, expected):
    assert to_numeric(raw) == expected


def test_metric_value_takes_first_present_field():
    assert metric_value({"actual": None, "metricValue": "3", "value": 9}) == 3.0
    # el primer campo presente gana aunque no sea numérico
    assert metric_value({"actual": "n/a", "value": 9}) is None
    assert metric_value(42) == 42.0


def test_history_labels():
    assert history_point_label({"calculationWindowStart": "2024-04-01T00:00:00"}, 0) == "04-01"
    assert history_point_label({"period": "W3"}, 2) == "W3"
    assert history_point_label({}, 4) == "5"


def test_extract_history_shapes():
    assert extract_history([1, 2]) == [1, 2]
    assert extract_history({"history": [3]}) == [3]
    assert extract_history({"history": None}) == []
    assert extract_history(None) == []


def test_selected_metric_from_aggregated_payload():
    selected = build_selected_metric(AGGREGATED, "otd")
    assert selected.title == "OTD Ring 1"
    assert selected.actual == 82.0
    assert selected.expected == 90.0
    assert selected.variance is None
    assert selected.unit == "%"
    assert selected.formula == "ontime / total"
    assert selected.rankings == {"region": 3, "overall": "12"}


def test_selected_metric_missing_or_blank():
    assert build_selected_metric(AGGREGATED, "availability") is None
    assert build_selected_metric(AGGREGATED, "to") is None
    assert build_selected_metric(None, "otd") is None


def test_contributors_follow_catalog_and_skip_empty():
    contributors = build_contributors(AGGREGATED, "OTD_RING_1")
    assert [c.key for c in contributors] == ["otdCount", "totalCico", "averageDistancePerTrip"]
    assert contributors[0].actual == 410.0
    assert contributors[2].unit == "km"
    assert contributors[1].unit is None


def test_trend_rows_zero_fill_missing_values():
    rows = build_trend_rows(HISTORY)
    assert [r.value for r in rows] == [88.0, 87.0, 0.0, 82.0]
    assert [r.raw_value for r in rows] == [88.0, 87.0, None, 82.0]
    assert [r.label for r in rows] == ["04-01", "04-08", "W3", "4"]


def test_ai_analysis_metric_defaults():
    selected = build_selected_metric({"otd": {"actual": 80}}, "otd")
    metric = build_ai_analysis_metric(selected)
    assert metric.expected == 0.0
    assert metric.variance == 80.0
    assert metric.description == "OTD Ring 1"
    assert build_ai_analysis_metric(build_selected_metric({"otd": {"expected": 80}}, "otd")) is None
    assert build_ai_analysis_metric(None) is None


def test_breakdown_builds_insight():
    breakdown = build_breakdown("OTD_RING_1", AGGREGATED, HISTORY)
    insight = breakdown.deterministic_insight
    assert breakdown.metric_key == "otd"
    assert insight.severity == "warning"
    assert insight.gap_to_target == -8
    # el punto sin valor entra como 0 y baja el baseline
    assert insight.trend_signal == "improving"
    assert [c.key for c in insight.top_contributors] == ["otdCount", "averageDistancePerTrip", "totalCico"]
    assert breakdown.ai_analysis_metric.variance == -8.0


def test_breakdown_keeps_nested_rankings():
    source = {"otd": {"actual": 82, "expected": 90, "rankings": {"national": {"rank": 3, "of": 40}}}}
    breakdown = build_breakdown("OTD_RING_1", source, [])
    assert breakdown.selected_metric.rankings == {"national": {"rank": 3, "of": 40}}
    assert breakdown.deterministic_insight.severity == "warning"


def test_breakdown_without_selected_metric():
    breakdown = build_breakdown("AVAILABILITY", AGGREGATED, [])
    assert breakdown.selected_metric is None
    assert breakdown.deterministic_insight is None
    assert breakdown.ai_analysis_metric is None


def test_catalog_helpers():
    assert label_for_metric("violationRate") == "Violation Rate"
    assert label_for_metric("SOME_NEW_KEY") == "Some New Key"
    assert contributor_keys_for_kpi("HRD")[0] == "highRiskDrivers"
    assert contributor_keys_for_kpi("UNKNOWN") == []


def test_catalog_fallback_when_file_missing(tmp_path):
    cat = load_kpi_catalog(tmp_path / "missing.yaml")
    assert "otd" in cat["metrics"]
