# fleetops/insights/schema.py
from typing import List, Optional, Literal
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MetricDirection = Literal["higher_is_better", "lower_is_better"]
MetricFamily = Literal["delivery", "safety", "turnaround", "utilization", "cost", "productivity"]
Severity = Literal["healthy", "warning", "critical", "unknown"]
TrendSignal = Literal["improving", "declining", "stable", "insufficient_data"]


class _WireModel(BaseModel):
    # El backend y la app hablan camelCase; en Python usamos snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class ContributorMetric(_WireModel):
    # NaN/Infinity no son valores válidos: se rechazan al validar
    model_config = ConfigDict(allow_inf_nan=False)

    key: str
    label: str
    actual: Optional[float] = None
    expected: Optional[float] = None
    variance: Optional[float] = None
    unit: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return self.actual is None and self.expected is None and self.variance is None


class InsightInput(_WireModel):
    model_config = ConfigDict(allow_inf_nan=False)

    metric_key: str
    metric_label: str
    actual: Optional[float] = None
    expected: Optional[float] = None
    contributors: List[ContributorMetric] = Field(default_factory=list)
    # Orden cronológico, el más antiguo primero
    trend_values: List[float] = Field(default_factory=list)


class RecommendedAction(_WireModel):
    id: str
    title: str
    description: str


class DeterministicInsight(_WireModel):
    severity: Severity
    trend_signal: TrendSignal
    headline: str
    summary: str
    gap_to_target: Optional[float] = None
    gap_ratio: Optional[float] = None
    trend_delta_percent: Optional[float] = None
    top_contributors: List[ContributorMetric] = Field(default_factory=list)
    actions: List[RecommendedAction] = Field(default_factory=list)
