import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            value = default
    if min_value is not None:
        return max(min_value, value)
    return value


@dataclass(frozen=True)
class Settings:
    app_name: str
    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    remember_me_expire_minutes: int
    issuer: str
    cors_origins: tuple[str, ...]
    api_prefix: str
    database_url: str
    database_sslmode: str
    database_auto_create: bool
    log_level: str
    log_format: str


settings = Settings(
    app_name=os.getenv("APP_NAME", "HPP Accounting API"),
    secret_key=os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION_32_CHAR_MIN_SECRET_KEY"),
    algorithm=os.getenv("ALGORITHM", "HS256"),
    access_token_expire_minutes=_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 60, min_value=1),
    remember_me_expire_minutes=_env_int("REMEMBER_ME_EXPIRE_MINUTES", 60 * 24 * 14, min_value=1),
    issuer=os.getenv("TOKEN_ISSUER", "hpp-accounting-api"),
    cors_origins=tuple(
        origin.strip().rstrip("/")
        for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ),
    api_prefix=os.getenv("API_PREFIX", "/api").rstrip("/"),
    database_url=os.getenv("DATABASE_URL", "sqlite:///./hpp.db"),
    database_sslmode=os.getenv("DATABASE_SSLMODE", "prefer"),
    database_auto_create=_env_bool("DATABASE_AUTO_CREATE", False),
    log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    log_format=os.getenv("LOG_FORMAT", "text").lower(),
)
