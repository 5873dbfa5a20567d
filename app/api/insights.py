# app/api/insights.py
import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Query, HTTPException

from fleetops.insights.engine import build_deterministic_insight
from fleetops.insights.report import save_report
from fleetops.insights.schema import InsightInput
from fleetops.kpi.client import KpiClient, KpiClientError
from fleetops.kpi.normalize import build_breakdown
from fleetops.kpi.routing import parse_metric_type_param, resolve_date_range, to_history_kpi_type, PERIOD_OPTIONS
from fleetops.kpi.schema import BreakdownRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/insights", tags=["insights"])

VALID_REGIONS = {"NORTH", "WEST", "EAST", "LAGOS"}


def get_client() -> KpiClient:
    return KpiClient()


def _save(payload: dict) -> dict:
    try:
        return save_report([payload])
    except OSError as e:
        raise HTTPException(status_code=400, detail=f"Report error: {e!r}")


@router.post("/kpi")
def kpi_insight(body: InsightInput, save: bool = Query(default=False)):
    insight = build_deterministic_insight(body)
    payload = insight.model_dump(by_alias=True)
    paths = _save(payload) if save else None
    return {"insight": payload, "files": paths}


@router.post("/kpi/breakdown")
def kpi_breakdown(body: BreakdownRequest):
    kpi_type = parse_metric_type_param(body.metric_type)
    if kpi_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown KPI type: {body.metric_type}")
    return build_breakdown(kpi_type, body.metric_source, body.history).model_dump(by_alias=True)


@router.get("/kpi/{metric_type}")
def kpi_live(metric_type: str,
             transporter_number: str = Query(...),
             start_date: str = Query(...),
             end_date: Optional[str] = Query(default=None),
             period: str = Query(default="custom"),
             region: Optional[str] = Query(default=None),
             save: bool = Query(default=False)):
    kpi_type = parse_metric_type_param(metric_type)
    if kpi_type is None:
        raise HTTPException(status_code=404, detail=f"Unknown KPI type: {metric_type}")
    if period not in PERIOD_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown period: {period}")

    end_date = end_date or date.today().isoformat()
    hist_start, hist_end = resolve_date_range(period, start_date, end_date)
    regions = [region.upper()] if region and region.upper() in VALID_REGIONS else None

    client = get_client()
    try:
        metric_source = client.get_aggregated(start_date, end_date,
                                              transporter_numbers=[transporter_number], regions=regions)
        history = client.get_history(transporter_number, to_history_kpi_type(kpi_type), hist_start, hist_end)
    except KpiClientError as e:
        raise HTTPException(status_code=502, detail=f"KPI backend error: {e}")

    payload = build_breakdown(kpi_type, metric_source, history).model_dump(by_alias=True)
    payload["range"] = {"startDate": hist_start, "endDate": hist_end}
    if save and payload.get("deterministicInsight"):
        payload["files"] = _save(payload["deterministicInsight"])
    return payload
