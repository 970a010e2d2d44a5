"""FastAPI dependencies for authentication, CSRF and store access."""

from fastapi import Depends, HTTPException, Request

from phishnet.schemas.auth import UserSession
from phishnet.services import auth_service
from phishnet.storage import Storage


# Cookie and header names
COOKIE_NAME = "phishnet_session"
CSRF_HEADER = "X-Requested-With"
CSRF_HEADER_VALUE = "XMLHttpRequest"


def get_store(request: Request) -> Storage:
    """
    Store dependency.

    The store is built once by create_app() and lives on app.state.
    """
    return request.app.state.store


def get_current_session(
    request: Request,
    store: Storage = Depends(get_store),
) -> UserSession:
    """
    Get session context from the session cookie.

    This is the PRIMARY auth dependency for most endpoints.

    Raises:
        AuthenticationError (403): missing, invalid or revoked session
    """
    user = auth_service.resolve_session(store, request.cookies.get(COOKIE_NAME))
    session = UserSession(
        user_id=user.id,
        org_id=user.organization_id,
        email=user.email,
        is_admin=user.is_admin,
    )
    # Picked up by the request logging middleware
    request.state.user_id = session.user_id
    request.state.org_id = session.org_id
    return session


def get_org_scope(session: UserSession = Depends(get_current_session)) -> int:
    """
    Get org_id for query scoping.

    Every list/detail query MUST filter by this value
    to ensure proper tenant isolation.
    """
    return session.org_id


def require_csrf_header(request: Request) -> None:
    """
    Verify CSRF header on mutations.

    Apply to state-changing endpoints (POST, PUT, DELETE).

    Raises:
        HTTPException 403: Missing or invalid CSRF header
    """
    if request.headers.get(CSRF_HEADER) != CSRF_HEADER_VALUE:
        raise HTTPException(
            status_code=403,
            detail=f"Missing CSRF header. Include '{CSRF_HEADER}: {CSRF_HEADER_VALUE}'"
        )
