"""Account routes: sign-up, login, token refresh, profile and host upgrade.

Registration conflicts surface as ``ConflictError`` (409). Credential and
token failures are answered here directly with 401, or 403 for a disabled
account.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from stayfinder.api.deps import get_current_active_user, get_db
from stayfinder.auth.jwt import create_token_pair, subject_from_token
from stayfinder.models.user import User
from stayfinder.schemas.auth import (
    AuthResponse,
    LoginRequest,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from stayfinder.services import account_service

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _signed_in(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        tokens=TokenResponse(**create_token_pair(user.id, user.role)),
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a guest or host account",
)
async def register(body: RegisterRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    return _signed_in(await account_service.register_user(db, body))


@router.post("/login", response_model=AuthResponse, summary="Sign in with email and password")
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)) -> AuthResponse:
    user = await account_service.authenticate(db, body.email, body.password)
    if user is None:
        raise _unauthorized("Invalid email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return _signed_in(user)


@router.post("/refresh", response_model=TokenResponse, summary="Trade a refresh token for a new pair")
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)) -> TokenResponse:
    user_id = subject_from_token(body.refresh_token, "refresh")
    if user_id is None:
        raise _unauthorized("Invalid or expired refresh token")

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _unauthorized("User not found or inactive")

    return TokenResponse(**create_token_pair(user.id, user.role))


@router.get("/me", response_model=UserResponse, summary="Current account")
async def me(current_user: User = Depends(get_current_active_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/me", response_model=UserResponse, summary="Edit name, phone or avatar")
async def update_me(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UserResponse:
    user = await account_service.update_profile(db, current_user, body)
    return UserResponse.model_validate(user)


@router.post("/become-host", response_model=AuthResponse, summary="Upgrade a guest account to host")
async def become_host(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> AuthResponse:
    """Tokens are reissued so the role claim matches the new role."""
    user = await account_service.promote_to_host(db, current_user)
    return _signed_in(user)
