# fleetops/kpi/catalog.py
from __future__ import annotations
from typing import Dict, List
from pathlib import Path
import logging
import yaml

from fleetops.config import CATALOG_PATH
from .routing import format_kpi_type

logger = logging.getLogger(__name__)


def load_kpi_catalog(path: Path = CATALOG_PATH) -> Dict:
    if not path.exists():
        # Fallback mínimo si el YAML no está (no rompe el motor)
        logger.warning("KPI catalog not found at %s, using built-in fallback", path)
        return {
            "version": 1,
            "metrics": {"otd": {"label": "OTD Ring 1"}},
            "contributors": {"OTD_RING_1": ["otdCount", "totalCico", "ti", "to"]},
        }
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    return data or {}


CAT = load_kpi_catalog()

# Índices rápidos
KPI_METRIC_LABELS: Dict[str, str] = {
    key: meta.get("label", key)
    for key, meta in (CAT.get("metrics") or {}).items()
}
_CONTRIBUTORS_BY_KPI: Dict[str, List[str]] = {
    kpi: list(keys or [])
    for kpi, keys in (CAT.get("contributors") or {}).items()
}


def label_for_metric(metric_key: str) -> str:
    return KPI_METRIC_LABELS.get(metric_key) or format_kpi_type(metric_key)


def contributor_keys_for_kpi(kpi_type: str) -> List[str]:
    return list(_CONTRIBUTORS_BY_KPI.get(kpi_type, []))
