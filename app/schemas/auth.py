"""Pydantic schemas for account endpoints."""

from datetime import datetime

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str
    remember_me: bool = False


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    token: str
    user: UserResponse
    remember_expires_at: datetime | None = None


class ActivationResponse(BaseModel):
    activated: bool


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    token: str
    password: str


class ProfileUpdateRequest(BaseModel):
    name: str
    email: str
    password: str = ""
