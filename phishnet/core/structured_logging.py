"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any

from phishnet.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=(level or settings.LOG_LEVEL).upper(), format=LOG_FORMAT)


def build_log_context(
    *,
    user_id: int | str | None = None,
    org_id: int | str | None = None,
    request_id: str | None = None,
    route: str | None = None,
    method: str | None = None,
    status_code: int | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict containing only the provided fields."""
    context: dict[str, Any] = {}
    if user_id:
        context["user_id"] = str(user_id)
    if org_id:
        context["org_id"] = str(org_id)
    if request_id:
        context["request_id"] = request_id
    if route:
        context["route"] = route
    if method:
        context["method"] = method
    if status_code:
        context["status_code"] = status_code
    return context


def format_log_context(context: dict[str, Any]) -> str:
    """Render a context dict as space-separated key=value pairs."""
    return " ".join(f"{key}={value}" for key, value in context.items())
