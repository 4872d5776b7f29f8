import secrets
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def token_lifetime_minutes(remember_me: bool = False) -> int:
    if remember_me:
        return settings.remember_me_expire_minutes
    return settings.access_token_expire_minutes


def create_access_token(subject: str, role: str, remember_me: bool = False) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(minutes=token_lifetime_minutes(remember_me))
    payload = {
        "sub": subject,
        "role": role,
        "type": "access",
        "jti": generate_token_id(),
        "iss": settings.issuer,
        "exp": expires_at,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm], issuer=settings.issuer)


def generate_token_id() -> str:
    return secrets.token_urlsafe(24)
