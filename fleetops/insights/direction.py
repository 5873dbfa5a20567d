# fleetops/insights/direction.py
from __future__ import annotations

from .config import LOWER_IS_BETTER_KEYS, METRIC_FAMILY_MAP, DEFAULT_FAMILY
from .schema import MetricDirection, MetricFamily


def get_metric_direction(metric_key: str) -> MetricDirection:
    return "lower_is_better" if metric_key in LOWER_IS_BETTER_KEYS else "higher_is_better"


def get_metric_family(metric_key: str) -> MetricFamily:
    """Familia de la métrica; claves desconocidas caen en 'productivity'."""
    return METRIC_FAMILY_MAP.get(metric_key, DEFAULT_FAMILY)
