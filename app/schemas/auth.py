from pydantic import Field

from app.models.user import Role
from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    password: str = Field(min_length=8, max_length=128)


class LoginRequest(CamelModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class Principal(CamelModel):
    id: int
    username: str
    role: Role
    discord_id: str | None = None
    discord_username: str | None = None
    avatar: str | None = None


class TokenResponse(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: Principal


class ProfileUpdateRequest(CamelModel):
    username: str | None = Field(default=None, min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    avatar: str | None = Field(default=None, max_length=255)
    current_password: str | None = None
    new_password: str | None = Field(default=None, min_length=8, max_length=128)
