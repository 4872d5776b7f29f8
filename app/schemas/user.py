from datetime import datetime

from pydantic import BaseModel


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserProfileOut(BaseModel):
    id: int
    name: str
    email: str
    roles: list[str]
    is_admin: bool

    @classmethod
    def from_user(cls, user) -> "UserProfileOut":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            roles=[user.role.value],
            is_admin=user.is_admin,
        )
