"""
Pydantic schemas for the authenticated user and persisted session.
"""

from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field

from smartfarm.core.ids import Identifier

LoginMethod = Literal["email", "facebook", "google"]


class User(BaseModel):
    id: Identifier = Field(validation_alias=AliasChoices("id", "_id"))
    name: str
    email: str
    phone: Optional[str] = None
    profile_picture: Optional[str] = Field(
        None, validation_alias=AliasChoices("profilePicture", "profile_picture")
    )
    login_method: LoginMethod = Field(
        "email", validation_alias=AliasChoices("loginMethod", "login_method")
    )
    role: Optional[str] = None

    model_config = {"extra": "ignore"}


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class AuthData(BaseModel):
    user: User
    token: Optional[str] = None


class AuthResponse(BaseModel):
    """Envelope returned by /api/auth/login and /api/auth/me."""

    success: bool = True
    message: Optional[str] = None
    data: AuthData


class StoredSession(BaseModel):
    user: User
    token: str
