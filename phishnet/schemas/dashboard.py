"""Dashboard widget schemas."""

from phishnet.schemas.common import CamelModel


class DashboardStats(CamelModel):
    active_campaigns: int
    campaign_change: int
    success_rate: float
    success_rate_change: float
    total_users: int
    new_users: int
    training_completion: int
    training_completion_change: int


class MetricPoint(CamelModel):
    date: str
    rate: int


class Threat(CamelModel):
    id: int
    name: str
    description: str
    level: str  # high | medium | low


class RiskUser(CamelModel):
    id: int
    name: str
    department: str
    risk_level: str


class TrainingModule(CamelModel):
    id: int
    name: str
    progress: int
    icon: str
