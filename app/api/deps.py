from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.security import decode_token
from app.db.database import get_db
from app.models.security import RevokedToken
from app.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_prefix}/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_claims(
    token: str | None = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> dict:
    if not token:
        raise _unauthorized("Authorization token not found")

    try:
        claims = decode_token(token.strip())
    except JWTError:
        raise _unauthorized("Invalid authentication credentials")

    if claims.get("type") != "access" or claims.get("sub") is None or not claims.get("jti"):
        raise _unauthorized("Invalid authentication credentials")
    if db.get(RevokedToken, claims["jti"]) is not None:
        raise _unauthorized("Token has been revoked")
    return claims


def get_current_user(
    claims: dict = Depends(get_token_claims),
    db: Session = Depends(get_db),
) -> User:
    try:
        user_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Invalid authentication credentials")

    user = db.get(User, user_id)
    if not user:
        raise _unauthorized("Invalid authentication credentials")
    return user
