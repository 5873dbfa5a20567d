# app/api/main.py
import logging
from fastapi import FastAPI

from fleetops.config import LOG_LEVEL

# importa el router de insights
from app.api.insights import router as insights_router

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# 1) crea la app primero
app = FastAPI(title="Fleet Ops KPI Insights - API")

# 2) registra routers después de crear la app
app.include_router(insights_router)


@app.get("/health")
def health():
    return {"status": "ok"}
