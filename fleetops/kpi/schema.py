# fleetops/kpi/schema.py
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fleetops.insights.schema import ContributorMetric, DeterministicInsight


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SelectedMetric(_WireModel):
    key: str
    title: str
    actual: Optional[float] = None
    expected: Optional[float] = None
    variance: Optional[float] = None
    unit: str = ""
    description: str = ""
    formula: str = ""
    # el backend puede anidar objetos dentro de rankings
    rankings: Optional[Dict[str, Any]] = None


class TrendRow(_WireModel):
    label: str
    value: float
    raw_value: Optional[float] = None


class AiAnalysisMetric(_WireModel):
    """Payload para el análisis opcional con IA (el análisis en sí es externo)."""
    name: str
    description: str
    actual: float
    expected: float
    variance: float
    unit: str = ""


class KpiBreakdown(_WireModel):
    kpi_type: str
    metric_key: str
    selected_metric: Optional[SelectedMetric] = None
    contributors: List[ContributorMetric] = Field(default_factory=list)
    trend_rows: List[TrendRow] = Field(default_factory=list)
    deterministic_insight: Optional[DeterministicInsight] = None
    ai_analysis_metric: Optional[AiAnalysisMetric] = None


class BreakdownRequest(_WireModel):
    metric_type: str
    # kpiMetrics del endpoint agregado v2 (clave -> objeto métrica)
    metric_source: Optional[Dict[str, Any]] = None
    # result del endpoint de historial: lista o {"history": [...]}
    history: Any = None
