from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from services.auth_service.models import ROLE_ADMIN
from services.auth_service.repository import UserRepository
from shared.config.database import get_db
from shared.config.settings import Settings
from .jwt_handler import verify_access_token

# Defines the expected header format (Bearer <token>)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)


@dataclass(frozen=True)
class AuthenticatedUser:
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_id_from_token(settings: Settings, token: str) -> int | None:
    payload = verify_access_token(settings, token)
    if payload is None:
        return None
    sub = payload.get("sub")
    if sub is None or not str(sub).isdigit():
        return None
    return int(sub)


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser:
    """
    Dependency to validate the JWT and return the caller.

    The account is re-read on every request: deleted users are rejected and
    disabled ones are refused even while their token is unexpired. Role comes
    from the account, not the token.
    """
    if not token:
        raise _credentials_exception()

    user_id = _user_id_from_token(settings, token)
    if user_id is None:
        raise _credentials_exception()

    account = await UserRepository.get_by_id(db, user_id)
    if account is None:
        raise _credentials_exception()
    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is disabled")
    user = AuthenticatedUser(id=account.id, email=account.email, role=account.role)

    # Store in request state for downstream use (like rate limiting)
    request.state.user_id = user.id
    return user


async def get_optional_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
) -> AuthenticatedUser | None:
    """Like get_current_user, but guests (no Authorization header) get None."""
    if not token:
        return None
    return await get_current_user(request, token, settings, db)


async def require_admin(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return user
