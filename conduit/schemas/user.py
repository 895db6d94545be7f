"""
User account schemas.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from conduit.schemas.common import CamelModel


class NewUser(CamelModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=1024)


class LoginUser(CamelModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateUser(CamelModel):
    """Partial account update; omitted fields stay as they are."""

    username: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=1, max_length=1024)
    bio: Optional[str] = None
    image: Optional[str] = Field(None, max_length=1024)


class UserWithToken(CamelModel):
    email: str
    token: str
    username: str
    bio: str
    image: Optional[str] = None


class NewUserBody(BaseModel):
    user: NewUser


class LoginUserBody(BaseModel):
    user: LoginUser


class UpdateUserBody(BaseModel):
    user: UpdateUser


class UserBody(BaseModel):
    user: UserWithToken
