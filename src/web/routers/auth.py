"""
Authentication Routes

Routes:
- POST /api/auth/login - Exchange email and password for a bearer token
- GET /api/auth/profile - Current user's profile
"""

import logging

from fastapi import APIRouter, Depends

from database.unit_of_work import get_store
from rbac.context import AuthContext
from rbac.dependencies import require_auth
from rbac.jwt import create_access_token
from rbac.password import verify_password
from security.api_errors import APIError, ErrorCode
from staffing.errors import NotFound
from staffing.interfaces import IStaffingStore

from ..schemas import LoginRequest, LoginResponse, ProfileResponse, UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, store: IStaffingStore = Depends(get_store)):
    user = await store.users.get_by_email(body.email.strip().lower())

    if user is None or not verify_password(body.password, user.password_hash or ""):
        logger.info("Login rejected: invalid credentials")
        raise APIError(
            code=ErrorCode.AUTH_INVALID_CREDENTIALS,
            message="Invalid credentials.",
            log_error=False,
        )

    logger.info(f"User {user.id} logged in ({user.role.value})")
    return LoginResponse(
        token=create_access_token(user),
        user=UserSummary(id=user.id, name=user.name, email=user.email, role=user.role),
    )


@router.get("/profile", response_model=ProfileResponse)
async def profile(
    ctx: AuthContext = Depends(require_auth),
    store: IStaffingStore = Depends(get_store),
):
    user = await store.users.get(ctx.user_id)
    if user is None:
        raise NotFound("User not found.")
    return ProfileResponse.from_user(user)
