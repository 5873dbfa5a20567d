# fleetops/kpi/client.py
from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import requests

from fleetops.config import KPI_API_BASE_URL, KPI_API_TOKEN, KPI_API_TIMEOUT, KPI_AGGREGATED_PATH

logger = logging.getLogger(__name__)


class KpiClientError(RuntimeError):
    """Fallo HTTP o respuesta con isSuccessful=false del backend de KPIs."""


class KpiClient:
    """
    Cliente mínimo del backend de KPIs. Sin reintentos ni refresh de token:
    eso queda en la capa de transporte de quien lo use.
    """

    def __init__(self, base_url: str = KPI_API_BASE_URL, token: Optional[str] = KPI_API_TOKEN,
                 timeout: float = KPI_API_TIMEOUT, session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Content-Type"] = "application/json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
            body = r.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("KPI backend %s %s failed: %r", method, path, e)
            raise KpiClientError(f"{method} {path} failed: {e}") from e

        if isinstance(body, dict) and body.get("isSuccessful") is False:
            raise KpiClientError(body.get("message") or "Request failed")
        return body.get("result") if isinstance(body, dict) else body

    def get_aggregated(self, start_date: str, end_date: str,
                       transporter_numbers: Optional[List[str]] = None,
                       regions: Optional[List[str]] = None) -> Dict[str, Any]:
        """Devuelve kpiMetrics del agregado v2 ({} si no viene)."""
        payload: Dict[str, Any] = {"startDate": start_date, "endDate": end_date}
        if transporter_numbers:
            payload["transporterNumbers"] = transporter_numbers
        if regions:
            payload["regions"] = regions
        result = self._request("POST", KPI_AGGREGATED_PATH, json=payload)
        metrics = result.get("kpiMetrics") if isinstance(result, dict) else None
        return metrics if isinstance(metrics, dict) else {}

    def get_history(self, transporter_number: str, kpi_type: str, start_date: str, end_date: str,
                    region: Optional[str] = None, window_days: Optional[int] = None) -> Any:
        params: Dict[str, Any] = {"kpiType": kpi_type, "startDate": start_date, "endDate": end_date}
        if region:
            params["region"] = region
        if window_days is not None:
            params["windowDays"] = window_days
        return self._request("GET", f"/api/v1/kpi/rankings/{transporter_number}/history", params=params)
