import os
from dataclasses import dataclass

from dotenv import load_dotenv


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _default_database_url() -> str:
    user = os.getenv("POSTGRES_USER", "postgres")
    password = os.getenv("POSTGRES_PASSWORD", "postgres")
    host = os.getenv("POSTGRES_HOST", "localhost")  # In Docker, this will be 'postgres'
    port = os.getenv("POSTGRES_PORT", "5433")
    name = os.getenv("POSTGRES_DB", "poster_shop")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


@dataclass(frozen=True)
class Settings:
    """
    Application configuration, built once at startup and handed to the
    components that need it (engine, JWT helpers, payment gateway).
    """
    jwt_secret_key: str
    database_url: str = ""
    db_echo: bool = False
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    service_name: str = "poster_shop"
    log_level: str = "INFO"
    otlp_endpoint: str = "http://localhost:4317"
    tracing_enabled: bool = True
    metrics_enabled: bool = True
    rate_limit_enabled: bool = True

    def __post_init__(self):
        if not self.jwt_secret_key:
            raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")
        # Gateway credentials are mandatory; signatures are keyed by the secret
        if not self.razorpay_key_id or not self.razorpay_key_secret:
            raise ValueError("FATAL ERROR: RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET must be set in the environment!")
        if not self.database_url:
            object.__setattr__(self, "database_url", _default_database_url())

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            jwt_secret_key=os.getenv("JWT_SECRET_KEY", ""),
            database_url=os.getenv("DATABASE_URL", ""),
            db_echo=_flag("DB_ECHO", False),
            jwt_expire_minutes=int(os.getenv("JWT_EXPIRE_MINUTES", "60")),
            razorpay_key_id=os.getenv("RAZORPAY_KEY_ID", ""),
            razorpay_key_secret=os.getenv("RAZORPAY_KEY_SECRET", ""),
            razorpay_base_url=os.getenv("RAZORPAY_BASE_URL", "https://api.razorpay.com/v1"),
            service_name=os.getenv("SERVICE_NAME", "poster_shop"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            otlp_endpoint=os.getenv("OTLP_ENDPOINT", "http://localhost:4317"),
            tracing_enabled=_flag("TRACING_ENABLED", True),
            metrics_enabled=_flag("METRICS_ENABLED", True),
            rate_limit_enabled=_flag("RATE_LIMIT_ENABLED", True),
        )
