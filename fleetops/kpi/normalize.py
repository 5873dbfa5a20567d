# fleetops/kpi/normalize.py
"""
Normalización de payloads del backend de KPIs hacia la entrada del motor.

El backend devuelve números como number, string o null, y con nombres de
campo que cambian según el endpoint (actual / metricValue / value / score).
Aquí se reduce todo a `float | None`; nada en este módulo lanza por datos
mal formados: lo ilegible se convierte en None.
"""
from __future__ import annotations
from typing import Any, List, Mapping, Optional, Sequence
import logging
import math

from fleetops.insights.engine import build_deterministic_insight
from fleetops.insights.schema import ContributorMetric, InsightInput
from .catalog import contributor_keys_for_kpi, label_for_metric
from .routing import to_aggregated_metric_key
from .schema import AiAnalysisMetric, KpiBreakdown, SelectedMetric, TrendRow

logger = logging.getLogger(__name__)

_VALUE_KEYS = ("actual", "metricValue", "value", "score")
_HISTORY_VALUE_KEYS = ("metricValue", "actual", "value", "score")
_HISTORY_LABEL_KEYS = ("calculationWindowStart", "period", "date", "startDate", "windowStart")


def to_numeric(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
        return number if math.isfinite(number) else None
    if isinstance(value, str) and value.strip():
        # "1_000" es válido para float() pero no es un número del backend
        if "_" in value:
            return None
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def _first_present(obj: Mapping[str, Any], keys: Sequence[str]) -> Any:
    # primer campo no nulo, aunque no sea numérico (como `a ?? b ?? c`)
    for k in keys:
        if obj.get(k) is not None:
            return obj[k]
    return None


def _is_blank(raw: Any) -> bool:
    if raw is None:
        return True
    if isinstance(raw, (dict, list)):
        return False
    return not raw


def metric_value(metric: Any) -> Optional[float]:
    if not isinstance(metric, Mapping):
        return to_numeric(metric)
    return to_numeric(_first_present(metric, _VALUE_KEYS))


def expected_value(metric: Any) -> Optional[float]:
    if not isinstance(metric, Mapping):
        return None
    return to_numeric(metric.get("expected"))


def variance_value(metric: Any) -> Optional[float]:
    if not isinstance(metric, Mapping):
        return None
    return to_numeric(metric.get("variance"))


def _str_field(metric: Any, name: str) -> Optional[str]:
    if isinstance(metric, Mapping) and isinstance(metric.get(name), str):
        return metric[name]
    return None


def history_point_value(entry: Any) -> Optional[float]:
    if not isinstance(entry, Mapping):
        return None
    return to_numeric(_first_present(entry, _HISTORY_VALUE_KEYS))


def history_point_label(entry: Any, fallback_index: int) -> str:
    raw = _first_present(entry, _HISTORY_LABEL_KEYS) if isinstance(entry, Mapping) else None
    if isinstance(raw, str) and raw:
        # "2024-05-13T00:00:00" -> "05-13"
        return raw[5:10] if len(raw) >= 10 else raw
    return str(fallback_index + 1)


def extract_history(result: Any) -> List[Any]:
    if isinstance(result, list):
        return result
    if isinstance(result, Mapping) and isinstance(result.get("history"), list):
        return result["history"]
    return []


def build_selected_metric(metric_source: Optional[Mapping[str, Any]], metric_key: str) -> Optional[SelectedMetric]:
    if not isinstance(metric_source, Mapping):
        return None
    raw = metric_source.get(metric_key)
    if _is_blank(raw):
        return None

    rankings = raw.get("rankings") if isinstance(raw, Mapping) else None
    return SelectedMetric(
        key=metric_key,
        title=label_for_metric(metric_key),
        actual=metric_value(raw),
        expected=expected_value(raw),
        variance=variance_value(raw),
        unit=_str_field(raw, "unitOfMeasurement") or "",
        description=_str_field(raw, "kpiDescription") or "",
        formula=_str_field(raw, "formula") or "",
        rankings=rankings if isinstance(rankings, Mapping) else None,
    )


def build_contributors(metric_source: Optional[Mapping[str, Any]], kpi_type: str) -> List[ContributorMetric]:
    if not isinstance(metric_source, Mapping):
        return []

    out: List[ContributorMetric] = []
    for key in contributor_keys_for_kpi(kpi_type):
        raw = metric_source.get(key)
        if _is_blank(raw):
            continue
        actual, expected, variance = metric_value(raw), expected_value(raw), variance_value(raw)
        if actual is None and expected is None and variance is None:
            continue
        out.append(ContributorMetric(
            key=key,
            label=label_for_metric(key),
            actual=actual,
            expected=expected,
            variance=variance,
            unit=_str_field(raw, "unitOfMeasurement"),
            description=_str_field(raw, "kpiDescription"),
        ))
    return out


def build_trend_rows(history_result: Any) -> List[TrendRow]:
    rows: List[TrendRow] = []
    for i, entry in enumerate(extract_history(history_result)):
        raw_value = history_point_value(entry)
        rows.append(TrendRow(
            label=history_point_label(entry, i),
            # puntos sin valor se grafican como 0 y así entran a la tendencia
            value=raw_value if raw_value is not None else 0.0,
            raw_value=raw_value,
        ))
    return rows


def build_insight_input(
    selected: SelectedMetric,
    contributors: List[ContributorMetric],
    trend_rows: List[TrendRow],
) -> InsightInput:
    return InsightInput(
        metric_key=selected.key,
        metric_label=selected.title,
        actual=selected.actual,
        expected=selected.expected,
        contributors=contributors,
        trend_values=[row.value for row in trend_rows],
    )


def build_ai_analysis_metric(selected: Optional[SelectedMetric]) -> Optional[AiAnalysisMetric]:
    if selected is None or selected.actual is None:
        return None
    expected = selected.expected if selected.expected is not None else 0.0
    variance = selected.variance if selected.variance is not None else selected.actual - expected
    return AiAnalysisMetric(
        name=selected.key,
        description=selected.description or selected.title,
        actual=selected.actual,
        expected=expected,
        variance=variance,
        unit=selected.unit,
    )


def build_breakdown(kpi_type: str, metric_source: Optional[Mapping[str, Any]], history_result: Any) -> KpiBreakdown:
    """Arma selected metric, contribuyentes, serie e insight para un KPI."""
    metric_key = to_aggregated_metric_key(kpi_type)
    selected = build_selected_metric(metric_source, metric_key)
    contributors = build_contributors(metric_source, kpi_type)
    trend_rows = build_trend_rows(history_result)

    insight = None
    if selected is not None:
        insight = build_deterministic_insight(build_insight_input(selected, contributors, trend_rows))
    else:
        logger.info("Metric %s (%s) missing from aggregated payload", metric_key, kpi_type)

    return KpiBreakdown(
        kpi_type=kpi_type,
        metric_key=metric_key,
        selected_metric=selected,
        contributors=contributors,
        trend_rows=trend_rows,
        deterministic_insight=insight,
        ai_analysis_metric=build_ai_analysis_metric(selected),
    )
