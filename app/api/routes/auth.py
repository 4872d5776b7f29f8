from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_token_claims
from app.core.exceptions import FieldValidationError
from app.core.logging import get_logger
from app.core.security import create_access_token, hash_password, token_lifetime_minutes, verify_password
from app.db.database import get_db
from app.models.security import RevokedToken
from app.models.user import User, UserRole
from app.schemas.auth import AuthorizationOut, LoginRequest, LoginResponse, RegisterData, RegisterRequest
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.user import UserProfileOut

router = APIRouter(tags=["Authentication"])

logger = get_logger("auth")

EMAIL_TAKEN = "The email has already been taken."


@router.post("/register", response_model=ApiResponse[RegisterData], status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    existing = db.scalar(select(User.id).where(func.lower(User.email) == payload.email))
    if existing is not None:
        raise FieldValidationError("email", EMAIL_TAKEN)

    user = User(
        name=payload.name,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=UserRole.USER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise FieldValidationError("email", EMAIL_TAKEN) from exc
    db.refresh(user)
    logger.info("Registered user %s", user.id)

    token = create_access_token(subject=str(user.id), role=user.role.value)
    return {
        "success": True,
        "message": "User registered successfully",
        "data": {"user": user, "token": token},
    }


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(func.lower(User.email) == payload.email))
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login attempt for %s", payload.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = create_access_token(subject=str(user.id), role=user.role.value, remember_me=payload.remember_me)
    return LoginResponse(
        message="Login successful",
        user=UserProfileOut.from_user(user),
        authorization=AuthorizationOut(
            token=token,
            expires_in=token_lifetime_minutes(payload.remember_me) * 60,
            remember_me=payload.remember_me,
        ),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    claims: dict = Depends(get_token_claims),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc).replace(tzinfo=None)
    db.add(RevokedToken(jti=claims["jti"], user_id=current_user.id, expires_at=expires_at))
    db.commit()
    logger.info("User %s logged out", current_user.id)
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=ApiResponse[UserProfileOut])
def get_me(current_user: User = Depends(get_current_user)):
    return {"success": True, "data": UserProfileOut.from_user(current_user)}
