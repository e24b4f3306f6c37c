from datetime import datetime
from pydantic import BaseModel, EmailStr
from modules.auth.models.user import Role


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str
    user_id: int
    user_name: str
    user_role: str


class UserCreate(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: Role


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: Role
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
