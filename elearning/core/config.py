import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

DEFAULT_JWT_SECRET_KEY = "change-me"
TOKEN_BLACKLIST_BACKENDS = {"memory", "database"}


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: tuple[str, ...] = ()) -> tuple[str, ...]:
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    debug: bool = False
    database_url: str = "sqlite:///./elearning.db"

    jwt_secret_key: str = DEFAULT_JWT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expires_minutes: int = 60

    host: str = "0.0.0.0"
    port: int = 3000
    upload_dir: str = "uploads"
    cors_origins: tuple[str, ...] = field(default_factory=lambda: ("http://localhost:3001",))

    token_blacklist_backend: str = "database"


def load_settings() -> Settings:
    load_dotenv()
    return Settings(
        app_env=os.getenv("APP_ENV", "development"),
        debug=_get_bool(os.getenv("DEBUG"), default=False),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./elearning.db"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_minutes=int(os.getenv("JWT_EXPIRES_MINUTES", "60")),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        upload_dir=os.getenv("UPLOAD_DIR", "uploads"),
        cors_origins=_get_list(os.getenv("CORS_ORIGINS"), default=("http://localhost:3001",)),
        token_blacklist_backend=os.getenv("TOKEN_BLACKLIST_BACKEND", "database").strip().lower(),
    )


settings = load_settings()


def validate_runtime_config(current: Settings = settings) -> None:
    if current.app_env.lower() == "production" and current.jwt_secret_key == DEFAULT_JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")
    if current.token_blacklist_backend not in TOKEN_BLACKLIST_BACKENDS:
        raise RuntimeError(
            f"TOKEN_BLACKLIST_BACKEND must be one of {sorted(TOKEN_BLACKLIST_BACKENDS)}."
        )
