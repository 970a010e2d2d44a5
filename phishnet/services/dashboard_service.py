"""Dashboard service - widget data for the organization overview.

Only the active campaign count and the user count are computed from stored
data. Everything else is a fixed placeholder until real training and
analytics data exists; the response shapes are the contract.
"""

from phishnet.schemas.dashboard import (
    DashboardStats,
    MetricPoint,
    RiskUser,
    Threat,
    TrainingModule,
)
from phishnet.storage import Storage


# =============================================================================
# Placeholder Values
# =============================================================================

PLACEHOLDER_STATS = {
    "campaign_change": 12,
    "success_rate": 32.8,
    "success_rate_change": 5.2,
    "new_users": 3,
    "training_completion": 78,
    "training_completion_change": 8,
}

PLACEHOLDER_METRICS = (
    ("Jan", 42),
    ("Feb", 38),
    ("Mar", 45),
    ("Apr", 39),
    ("May", 33),
    ("Jun", 28),
    ("Jul", 32),
)

PLACEHOLDER_THREATS = (
    (
        "Credential Phishing",
        "Recent campaigns target Microsoft 365 users with fake login pages.",
        "high",
    ),
    (
        "Invoice Fraud",
        "Finance departments targeted with fake invoice attachments containing malware.",
        "medium",
    ),
    (
        "CEO Fraud",
        "Impersonation attacks requesting urgent wire transfers or gift card purchases.",
        "medium",
    ),
)

PLACEHOLDER_RISK_USERS = (
    ("Mike Miller", "Finance Department", "High Risk"),
    ("Sarah Johnson", "Marketing Team", "Medium Risk"),
    ("Tom Parker", "Executive Team", "Medium Risk"),
)

PLACEHOLDER_TRAINING = (
    ("Phishing Awareness", 65, "shield"),
    ("Password Security", 82, "lock"),
    ("Mobile Device Security", 43, "smartphone"),
)


# =============================================================================
# Widgets
# =============================================================================

def get_dashboard_stats(store: Storage, org_id: int) -> DashboardStats:
    return DashboardStats(
        active_campaigns=store.count_active_campaigns(org_id),
        total_users=store.count_users(org_id),
        **PLACEHOLDER_STATS,
    )


def get_metrics() -> list[MetricPoint]:
    """Monthly phish-prone rate series."""
    return [MetricPoint(date=month, rate=rate) for month, rate in PLACEHOLDER_METRICS]


def get_threats() -> list[Threat]:
    return [
        Threat(id=i, name=name, description=description, level=level)
        for i, (name, description, level) in enumerate(PLACEHOLDER_THREATS, start=1)
    ]


def get_risk_users() -> list[RiskUser]:
    return [
        RiskUser(id=i, name=name, department=department, risk_level=risk_level)
        for i, (name, department, risk_level) in enumerate(PLACEHOLDER_RISK_USERS, start=1)
    ]


def get_training() -> list[TrainingModule]:
    return [
        TrainingModule(id=i, name=name, progress=progress, icon=icon)
        for i, (name, progress, icon) in enumerate(PLACEHOLDER_TRAINING, start=1)
    ]
