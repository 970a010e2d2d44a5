"""Dashboard router - API endpoints for dashboard widgets."""

from fastapi import APIRouter, Depends

from phishnet.core.deps import get_current_session, get_org_scope, get_store
from phishnet.schemas.dashboard import DashboardStats, MetricPoint, RiskUser, Threat, TrainingModule
from phishnet.services import dashboard_service
from phishnet.storage import Storage

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(get_current_session)],
)


@router.get("/stats", response_model=DashboardStats)
def get_stats(
    org_id: int = Depends(get_org_scope),
    store: Storage = Depends(get_store),
):
    """Headline numbers: active campaigns and users are live counts."""
    return dashboard_service.get_dashboard_stats(store, org_id)


@router.get("/metrics", response_model=list[MetricPoint])
def get_metrics():
    return dashboard_service.get_metrics()


@router.get("/threats", response_model=list[Threat])
def get_threats():
    return dashboard_service.get_threats()


@router.get("/risk-users", response_model=list[RiskUser])
def get_risk_users():
    return dashboard_service.get_risk_users()


@router.get("/training", response_model=list[TrainingModule])
def get_training():
    return dashboard_service.get_training()
