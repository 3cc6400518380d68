from datetime import datetime, timezone

from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.config.settings import Settings
from shared.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import TokenResponse, UserCreate, UserLogin

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        existing = await UserRepository.get_by_email(db, data.email)
        if existing:
            raise ConflictError("Email already registered")
        user = User(
            email=data.email.strip().lower(),
            name=data.name.strip(),
            hashed_password=AuthService.hash_password(data.password),
        )
        return await UserRepository.create(db, user)

    @staticmethod
    async def login(db: AsyncSession, settings: Settings, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email)
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise UnauthorizedError("Incorrect email or password")
        if not user.is_active:
            raise ForbiddenError("Account is disabled")

        user.last_login = datetime.now(timezone.utc)
        await UserRepository.save(db, user)

        token = create_access_token(
            settings,
            data={"sub": str(user.id), "email": user.email, "role": user.role},
        )
        return TokenResponse(access_token=token)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user
