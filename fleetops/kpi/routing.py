# fleetops/kpi/routing.py
from __future__ import annotations
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple, Union
import calendar
import math
import re

KPI_TYPES: List[str] = [
    "DISPATCH_VOLUME",
    "GIGO",
    "CICO_CUSTOMER",
    "BACKHAUL",
    "LEAD_TIME",
    "OTD_RING_1",
    "AVG_DISTANCE_PER_TRIP",
    "TRIPS_PER_TRUCK_PER_WEEK",
    "TI",
    "TO",
    "AVERAGE_SCORE_CARD",
    "AVAILABILITY",
    "TOTAL_TRUCKS",
    "VIOLATION_RATE",
    "SKMD",
    "HRD",
]

# KPI de ranking -> clave de la métrica en el payload agregado v2
KPI_TYPE_TO_V2_KEY: Dict[str, str] = {
    "DISPATCH_VOLUME": "volumeMoved",
    "GIGO": "totalCico",
    "CICO_CUSTOMER": "totalCico",
    "BACKHAUL": "backhaulVolume",
    "LEAD_TIME": "averageDistancePerTrip",
    "OTD_RING_1": "otd",
    "AVG_DISTANCE_PER_TRIP": "averageDistancePerTrip",
    "TRIPS_PER_TRUCK_PER_WEEK": "tripsPerTruck",
    "TI": "ti",
    "TO": "to",
    "AVERAGE_SCORE_CARD": "averageScoreCard",
    "AVAILABILITY": "availability",
    "TOTAL_TRUCKS": "totalTrucks",
    "VIOLATION_RATE": "violationRate",
    "SKMD": "skmd",
    "HRD": "hrd",
}

KPI_DISPLAY_NAMES: Dict[str, str] = {
    "DISPATCH_VOLUME": "Dispatch Volume",
    "GIGO": "Gate In / Gate Out",
    "CICO_CUSTOMER": "Check In / Check Out",
    "BACKHAUL": "Backhaul",
    "LEAD_TIME": "Lead Time",
    "OTD_RING_1": "OTD Ring 1",
    "AVG_DISTANCE_PER_TRIP": "Avg Distance/Trip",
    "TRIPS_PER_TRUCK_PER_WEEK": "Trips/Truck/Week",
    "TI": "Turnaround In",
    "TO": "Turnaround Out",
    "AVERAGE_SCORE_CARD": "Avg Score Card",
    "AVAILABILITY": "Availability",
    "TOTAL_TRUCKS": "Total Trucks",
    "VIOLATION_RATE": "Violation Rate",
    "SKMD": "SKMD",
    "HRD": "HRD",
}

PERIOD_OPTIONS: Dict[str, str] = {
    "custom": "Custom",
    "annual": "Annual",
    "last_six_months": "Last 6 months",
    "last_three_months": "Last 3 months",
    "monthly": "Monthly",
}
_PERIOD_MONTHS = {"annual": 12, "last_six_months": 6, "last_three_months": 3, "monthly": 1}


def _normalize(value: str) -> str:
    return re.sub(r"[^a-z0-9]", "", value, flags=re.IGNORECASE).lower()


def to_aggregated_metric_key(kpi_type: str) -> str:
    return KPI_TYPE_TO_V2_KEY.get(kpi_type, kpi_type.lower())


def to_history_kpi_type(kpi_type: str) -> str:
    # El endpoint de historial usa el mismo KPI de ranking
    return kpi_type


def parse_metric_type_param(raw: Union[str, Sequence[str], None]) -> Optional[str]:
    """
    Resuelve un parámetro de URL a un KPI conocido:
      1) coincidencia exacta ("OTD_RING_1")
      2) KPI normalizado ("otd-ring-1", "otdring1")
      3) clave agregada normalizada ("otd", "violation_rate")
    """
    if raw is not None and not isinstance(raw, str):
        raw = raw[0] if raw else None
    if not raw:
        return None

    if raw in KPI_TYPES:
        return raw

    q = _normalize(raw)
    for kpi in KPI_TYPES:
        if _normalize(kpi) == q:
            return kpi
    for kpi in KPI_TYPES:
        if _normalize(to_aggregated_metric_key(kpi)) == q:
            return kpi
    return None


def format_kpi_type(kpi_type: str) -> str:
    if kpi_type in KPI_DISPLAY_NAMES:
        return KPI_DISPLAY_NAMES[kpi_type]
    words = kpi_type.replace("_", " ").lower()
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), words)


def get_kpi_color(score: float, target: float = 100) -> str:
    if target == 0:
        # sin meta: positivo cuenta como cumplido, cero o negativo como rojo
        ratio = math.inf if score > 0 else -math.inf
    else:
        ratio = score / target
    if ratio >= 0.9:
        return "#0D9F6E"
    if ratio >= 0.7:
        return "#F59E0B"
    return "#EF4444"


def _parse_date(value: Optional[str]) -> date:
    try:
        return date.fromisoformat(value or "")
    except ValueError:
        return date.today()


def _minus_months(d: date, months: int) -> date:
    total = d.year * 12 + (d.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    # día acotado al fin de mes (31-ago menos 6 meses -> 28/29-feb)
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def resolve_date_range(period: str, start_date: str, end_date: str) -> Tuple[str, str]:
    """Devuelve (start, end) ISO para el periodo elegido, anclado en end_date."""
    if period == "custom":
        return start_date, end_date

    end = _parse_date(end_date)
    months = _PERIOD_MONTHS.get(period, 0)
    start = _minus_months(end, months)

    if start > end:
        return end.isoformat(), end.isoformat()
    return start.isoformat(), end.isoformat()
