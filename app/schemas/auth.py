from pydantic import BaseModel, Field, StrictBool, ValidationInfo, field_validator

from app.schemas.user import UserOut, UserProfileOut

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=5, max_length=320, pattern=EMAIL_PATTERN)
    # Declared before ``password`` so the password validator can see it.
    password_confirmation: str | None = None
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("name must not be empty")
        return normalized

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("password")
    @classmethod
    def password_matches_confirmation(cls, value: str, info: ValidationInfo) -> str:
        if value != info.data.get("password_confirmation"):
            raise ValueError("password confirmation does not match")
        return value


class RegisterData(BaseModel):
    user: UserOut
    token: str


class LoginRequest(BaseModel):
    email: str = Field(min_length=5, max_length=320, pattern=EMAIL_PATTERN)
    password: str = Field(min_length=1, max_length=128)
    remember_me: StrictBool = False

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class AuthorizationOut(BaseModel):
    token: str
    type: str = "Bearer"
    expires_in: int
    remember_me: bool


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    user: UserProfileOut
    authorization: AuthorizationOut
