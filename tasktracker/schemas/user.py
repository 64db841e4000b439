from pydantic import AfterValidator, BaseModel, EmailStr, Field
from datetime import datetime
from typing import Annotated, Optional

from tasktracker.core.security import MAX_PASSWORD_BYTES
from tasktracker.models.role import Role
from tasktracker.schemas.common import CamelModel


def _check_password_size(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=1), AfterValidator(_check_password_size)]


class RegisterRequest(BaseModel):
    # un éventuel "role" envoyé ici est ignoré : l'inscription crée toujours un USER
    email: EmailStr
    password: Password
    name: str = Field(min_length=1)

class LoginRequest(BaseModel):
    # str et pas EmailStr : un email mal formé doit donner 401, pas 400
    email: str
    password: str

class TokenResponse(BaseModel):
    token: str
    role: Role

class UserResponse(CamelModel):
    id: int
    email: str
    name: str
    role: Role
    created_at: datetime
    updated_at: datetime

class ProfileUpdate(BaseModel):
    """Champs modifiables du profil, les autres clés sont ignorées"""
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    password: Optional[Password] = None
    role: Optional[Role] = None

class Principal(BaseModel):
    """Identité authentifiée attachée à la requête (rôle issu du token)"""
    id: int
    name: str
    email: str
    role: Role
