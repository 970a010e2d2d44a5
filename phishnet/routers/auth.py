"""Authentication router - registration, password login and session cookie."""

import logging

from fastapi import APIRouter, Depends, Request, Response, status

from phishnet.core.config import settings
from phishnet.core.deps import COOKIE_NAME, get_current_session, get_store, require_csrf_header
from phishnet.core.errors import InvalidCredentialsError
from phishnet.core.rate_limit import auth_limit, limiter
from phishnet.schemas.auth import LoginRequest, RegisterRequest, UserRead, UserRecord, UserSession
from phishnet.services import auth_service
from phishnet.storage import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


def _set_session_cookie(response: Response, user: UserRecord) -> None:
    response.set_cookie(
        key=COOKIE_NAME,
        value=auth_service.issue_session_token(user),
        max_age=settings.JWT_EXPIRES_HOURS * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
    )


# =============================================================================
# Session Endpoints
# =============================================================================

@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_csrf_header)],
)
@limiter.limit(auth_limit)
def register(
    request: Request,
    response: Response,
    data: RegisterRequest,
    store: Storage = Depends(get_store),
):
    """
    Create an organization and its first (admin) user, then sign them in.

    Registering into an existing organization name is rejected with 409.
    """
    user = auth_service.register(store, data)
    _set_session_cookie(response, user)
    return user


@router.post("/login", response_model=UserRead, dependencies=[Depends(require_csrf_header)])
@limiter.limit(auth_limit)
def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    store: Storage = Depends(get_store),
):
    """Verify email and password, then set the session cookie."""
    try:
        user = auth_service.authenticate(store, data.email, data.password)
    except InvalidCredentialsError:
        logger.info("Failed login attempt")
        raise
    _set_session_cookie(response, user)
    return user


@router.post("/logout", dependencies=[Depends(require_csrf_header)])
def logout(response: Response):
    """
    Clear session cookie.

    Requires X-Requested-With header for CSRF protection.
    """
    response.delete_cookie(COOKIE_NAME, path="/")
    return {"status": "logged_out"}


@router.get("/user", response_model=UserRead)
def get_user(
    session: UserSession = Depends(get_current_session),
    store: Storage = Depends(get_store),
):
    """Get the currently authenticated user."""
    return store.get_user(session.user_id)
