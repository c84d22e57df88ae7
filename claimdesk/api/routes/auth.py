"""
Authentication Routes
JWT-based authentication endpoints
Source: https://fastapi.tiangolo.com/tutorial/security/oauth2-jwt/
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from claimdesk.api.deps import get_user_service
from claimdesk.core.exceptions import ClaimDeskError, UserNotFoundError
from claimdesk.db.unit_of_work import UnitOfWork, get_uow
from claimdesk.models.user import User
from claimdesk.schemas.auth import LoginRequest, RefreshTokenRequest, Token
from claimdesk.schemas.user import UserCreate, UserResponse
from claimdesk.services.user_service import UserService
from claimdesk.utils.auth import create_access_token, create_refresh_token, decode_token
from claimdesk.utils.errors import AuthenticationError, to_http_exception
from claimdesk.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_tokens(user: User) -> Token:
    return Token(
        access_token=create_access_token(data={"sub": str(user.id), "role": user.role.value}),
        refresh_token=create_refresh_token(data={"sub": str(user.id)}),
        token_type="bearer",  # nosec B106
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> User:
    """
    Register a new customer account.

    Source: https://cheatsheetseries.owasp.org/cheatsheets/Authentication_Cheat_Sheet.html
    """
    try:
        user = await service.register(user_data)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    logger.info(f"New user registered: {user.username} ({user.email})")
    return user


@router.post("/login", response_model=Token)
async def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Token:
    """
    Login with username (or email) and password.

    Source: https://datatracker.ietf.org/doc/html/rfc6749#section-4.3
    """
    try:
        user = await service.authenticate(form_data.username, form_data.password)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    return _issue_tokens(user)


@router.post("/login/json", response_model=Token)
async def login_json(
    login_data: LoginRequest,
    service: UserService = Depends(get_user_service),
    uow: UnitOfWork = Depends(get_uow),
) -> Token:
    """Login with JSON body (alternative to form data)."""
    try:
        user = await service.authenticate(login_data.login, login_data.password)
        await uow.commit()
    except ClaimDeskError as err:
        raise to_http_exception(err) from err

    return _issue_tokens(user)


@router.post("/refresh", response_model=Token)
async def refresh_token(
    refresh_data: RefreshTokenRequest,
    service: UserService = Depends(get_user_service),
) -> Token:
    """
    Exchange a refresh token for a new token pair.

    Source: https://auth0.com/blog/refresh-tokens-what-are-they-and-when-to-use-them/
    """
    payload = decode_token(refresh_data.refresh_token)
    if payload is None or payload.get("type") != "refresh":
        raise AuthenticationError("Invalid refresh token")

    try:
        user = await service.get(UUID(payload.get("sub") or ""))
    except (ValueError, UserNotFoundError) as err:
        raise AuthenticationError("Invalid token payload") from err

    if not user.enabled:
        raise AuthenticationError("User account is disabled")

    logger.info(f"Tokens refreshed for user: {user.username}")
    return _issue_tokens(user)
