# fleetops/insights/engine.py
"""
Motor determinístico de insights de KPI.

Dado un KPI (actual vs esperado), sus métricas contribuyentes y una serie
histórica corta, calcula severidad, señal de tendencia, top contribuyentes y
acciones recomendadas. Es puro: sin I/O, sin reloj, sin aleatoriedad; la
misma entrada produce siempre la misma salida.
"""
from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Tuple
import math

from .config import (
    SEVERITY_HEALTHY_MAX, SEVERITY_WARNING_MAX, TREND_STABLE_PCT, TREND_BASELINE_POINTS,
    TOP_CONTRIBUTORS, SEVERITY_LABELS, TREND_TEXT, ACTION_COPY,
)
from .direction import get_metric_direction, get_metric_family
from .schema import (
    ContributorMetric, DeterministicInsight, InsightInput, RecommendedAction,
    Severity, TrendSignal,
)


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def format_number(value: Optional[float]) -> str:
    if not _is_finite(value):
        return "-"
    if float(value).is_integer():
        return str(int(value))
    # redondeo half-up sobre el valor binario exacto (como toFixed)
    return str(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _contributor_score(item: ContributorMetric) -> float:
    if _is_finite(item.variance):
        return abs(item.variance)
    if _is_finite(item.actual) and _is_finite(item.expected):
        return abs(item.actual - item.expected)
    return 0.0


def top_contributors(contributors: Sequence[ContributorMetric]) -> List[ContributorMetric]:
    candidates = [c for c in contributors if not c.is_empty()]
    # sorted() es estable: los empates conservan el orden original
    ranked = sorted(candidates, key=_contributor_score, reverse=True)
    return ranked[:TOP_CONTRIBUTORS]


def resolve_trend_signal(metric_key: str, trend_values: Sequence[float]) -> Tuple[TrendSignal, Optional[float]]:
    """
    Compara el último valor contra el promedio de los primeros puntos de la
    serie (no es una ventana móvil: series largas se comparan contra el
    periodo inicial).
    """
    if len(trend_values) < 2:
        return "insufficient_data", None

    baseline = list(trend_values[:min(TREND_BASELINE_POINTS, len(trend_values))])
    baseline_avg = sum(baseline) / len(baseline)
    latest = trend_values[-1]
    delta_pct = ((latest - baseline_avg) / max(abs(baseline_avg), 1)) * 100

    if abs(delta_pct) <= TREND_STABLE_PCT:
        return "stable", delta_pct

    direction = get_metric_direction(metric_key)
    improving = (
        (direction == "higher_is_better" and delta_pct > 0)
        or (direction == "lower_is_better" and delta_pct < 0)
    )
    return ("improving" if improving else "declining"), delta_pct


def resolve_severity(
    actual: Optional[float], expected: Optional[float]
) -> Tuple[Severity, Optional[float], Optional[float]]:
    if actual is None or expected is None:
        return "unknown", None, None

    gap = actual - expected
    # max(|expected|, 1) evita dividir por ~0
    ratio = abs(gap) / max(abs(expected), 1)

    if ratio < SEVERITY_HEALTHY_MAX:
        return "healthy", gap, ratio
    if ratio <= SEVERITY_WARNING_MAX:
        return "warning", gap, ratio
    return "critical", gap, ratio


def build_actions(metric_key: str) -> List[RecommendedAction]:
    family = get_metric_family(metric_key)
    return [
        RecommendedAction(id=f"{family}-{i}", title=f"Action {i}", description=text)
        for i, text in enumerate(ACTION_COPY[family], start=1)
    ]


def build_summary(
    metric_label: str,
    actual: Optional[float],
    expected: Optional[float],
    gap_to_target: Optional[float],
    trend_signal: TrendSignal,
) -> str:
    if actual is None:
        return f"{metric_label} has no current value for this date range."

    if expected is None or gap_to_target is None:
        return f"{metric_label} is at {format_number(actual)} with no configured target baseline."

    direction_word = "above" if gap_to_target >= 0 else "below"
    return (
        f"{metric_label} is {format_number(abs(gap_to_target))} {direction_word} target "
        f"({format_number(actual)} vs {format_number(expected)}). {TREND_TEXT[trend_signal]}"
    )


def build_deterministic_insight(data: InsightInput) -> DeterministicInsight:
    contributors = top_contributors(data.contributors)
    trend_signal, trend_delta = resolve_trend_signal(data.metric_key, data.trend_values)
    severity, gap, ratio = resolve_severity(data.actual, data.expected)
    actions = build_actions(data.metric_key)
    summary = build_summary(data.metric_label, data.actual, data.expected, gap, trend_signal)

    return DeterministicInsight(
        severity=severity,
        trend_signal=trend_signal,
        headline=f"{SEVERITY_LABELS[severity]} {data.metric_label}",
        summary=summary,
        gap_to_target=gap,
        gap_ratio=ratio,
        trend_delta_percent=trend_delta,
        top_contributors=contributors,
        actions=actions,
    )
