# fleetops/insights/config.py
from typing import Dict, FrozenSet, Tuple

# Métricas donde un valor más bajo es mejor (el resto: más alto es mejor).
# Las claves son las del backend tal cual; no inferir por patrón.
LOWER_IS_BETTER_KEYS: FrozenSet[str] = frozenset({
    "ti",
    "to",
    "totalTimeIn",
    "totalTimeOut",
    "averageDistancePerTrip",
    "violationRate",
    "highRiskDrivers",
    "hrd",
    "fatalIncidents",
    "totalFreightCost",
    "freightCostPerTon",
    "redDrivers",
    "rta",
})

# Familia de cada métrica (solo se usa para elegir acciones recomendadas)
METRIC_FAMILY_MAP: Dict[str, str] = {
    "otd": "delivery",
    "otdCount": "delivery",
    "volumeMoved": "delivery",
    "totalTrips": "delivery",
    "backhaulVolume": "delivery",
    "backhaulCount": "delivery",
    "totalCico": "delivery",
    "timeInCount": "delivery",
    "timeOutCount": "delivery",

    "skmd": "safety",
    "violationRate": "safety",
    "hrd": "safety",
    "highRiskDrivers": "safety",
    "fatalIncidents": "safety",
    "totalSafetyScore": "safety",
    "redDrivers": "safety",
    "greenDriversKm": "safety",
    "rta": "safety",

    "ti": "turnaround",
    "to": "turnaround",
    "totalTimeIn": "turnaround",
    "totalTimeOut": "turnaround",
    "averageDistancePerTrip": "turnaround",
    "averageDistance": "turnaround",

    "availability": "utilization",
    "totalTrucks": "utilization",
    "tripsPerTruck": "utilization",
    "payloadCount": "utilization",

    "totalFreightCost": "cost",
    "freightCostPerTon": "cost",

    "averagePayload": "productivity",
    "totalPayload": "productivity",
    "totalDistance": "productivity",
    "totalDrivers": "productivity",
    "averageScoreCard": "productivity",
}
DEFAULT_FAMILY = "productivity"

# Umbrales globales (sin ajuste por métrica)
SEVERITY_HEALTHY_MAX = 0.05    # gap ratio < 5%  -> healthy
SEVERITY_WARNING_MAX = 0.15    # gap ratio <= 15% -> warning; mayor -> critical
TREND_STABLE_PCT = 3.0         # |delta%| <= 3 -> stable
TREND_BASELINE_POINTS = 3      # baseline = promedio de los primeros N puntos
TOP_CONTRIBUTORS = 3

SEVERITY_LABELS: Dict[str, str] = {
    "healthy": "Healthy",
    "warning": "Watch",
    "critical": "Needs Attention",
    "unknown": "Info",
}

TREND_TEXT: Dict[str, str] = {
    "improving": "Trend is improving.",
    "declining": "Trend is declining.",
    "stable": "Trend is stable.",
    "insufficient_data": "Trend data is limited.",
}

# Acciones base por familia (plantillas fijas, exactamente 3 por familia)
ACTION_COPY: Dict[str, Tuple[str, str, str]] = {
    "delivery": (
        "Prioritize delayed lanes and dispatch windows with late start times first.",
        "Set early escalation for trips crossing the midpoint without milestone updates.",
        "Review plant-to-customer handoff delays and fix top recurring blockers this week.",
    ),
    "safety": (
        "Coach high-risk operators first and track daily behavior change on flagged routes.",
        "Run safety compliance checks at shift start and resolve missing requirements immediately.",
        "Open root-cause actions for recurring violations and close owners with due dates.",
    ),
    "turnaround": (
        "Reduce queue time at loading and offloading points using time-slice scheduling.",
        "Track dwell-time exceptions every shift and assign owners to the top 3 bottlenecks.",
        "Align gate, dispatch, and yard teams on a shared turnaround SLA for this metric.",
    ),
    "utilization": (
        "Rebalance truck assignment toward low-utilization assets before adding new capacity.",
        "Increase trip density by pairing outbound and return loads on compatible lanes.",
        "Track idle windows daily and convert long idle blocks into scheduled movements.",
    ),
    "cost": (
        "Review high-cost lanes and apply route or load-consolidation corrections immediately.",
        "Set variance guardrails for freight spend and trigger approval on outlier trips.",
        "Pair cost tracking with payload and trip efficiency to reduce spend per delivered unit.",
    ),
    "productivity": (
        "Focus operational reviews on the lowest-performing depots or route clusters first.",
        "Standardize loading and movement practices from top-performing teams across shifts.",
        "Set a weekly target uplift for this KPI and monitor progress in daily huddles.",
    ),
}
