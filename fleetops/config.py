import os
from pathlib import Path
from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parents[1]
load_dotenv(BASE_DIR / ".env")

ENV = os.getenv("ENV", "dev")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Backend de KPIs (agregados v2 + historial de rankings)
KPI_API_BASE_URL = os.getenv("KPI_API_BASE_URL", "https://staging-812204315267.us-central1.run.app")
KPI_API_TOKEN = os.getenv("KPI_API_TOKEN", "")
KPI_API_TIMEOUT = float(os.getenv("KPI_API_TIMEOUT", "30"))
KPI_AGGREGATED_PATH = os.getenv("KPI_AGGREGATED_PATH", "/api/v2/kpi/aggregated")

REPORTS_DIR = Path(os.getenv("REPORTS_DIR", str(BASE_DIR / "reports")))
CATALOG_PATH = Path(__file__).resolve().parent / "catalog" / "kpi_metrics.yaml"
