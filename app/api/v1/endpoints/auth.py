"""
Authentication endpoints.

PIN login for members and the monthly visit summary shown on their dashboard.
"""

import logging

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_auth_service
from app.middleware.rate_limit import limiter, rate_limit_exempt, LOGIN_RATE_LIMIT
from app.schemas.auth import LoginRequest, LoginResponse, UserVisitSummary
from services.auth_service import AuthService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log in with a PIN",
    description="Authenticate a member by numeric PIN and record the visit"
)
@limiter.limit(LOGIN_RATE_LIMIT, exempt_when=rate_limit_exempt)
async def login(
    request: Request,
    credentials: LoginRequest,
    auth: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    """
    Authenticate a member.

    Returns 400 when the PIN is missing and 401 when it matches no user.
    Visit logging failures do not fail the login.
    """
    user = auth.login(credentials.pin)
    logger.info(f"User {user.id} logged in")
    return LoginResponse(id=user.id, username=user.username, designation=user.designation, pin=user.pin)


@router.get("/user_visits/{user_id}", response_model=UserVisitSummary)
async def get_user_visits(user_id: int, auth: AuthService = Depends(get_auth_service)):
    """
    Get the latest visit and the number of visits in the current month.
    """
    return UserVisitSummary(**auth.visit_summary(user_id))
