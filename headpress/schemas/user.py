from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from headpress.models.user import UserRole


class UserLogin(BaseModel):
    """
    Login body; `username` accepts a username or an email address.
    """
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class UserCreate(BaseModel):
    username: str = Field(min_length=1, max_length=60, pattern=r"^[A-Za-z0-9_.@-]+$")
    email: EmailStr
    password: str = Field(min_length=6)
    display_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class AdminUserCreate(UserCreate):
    """
    Accounts created by an administrator may carry any role.
    """
    role: UserRole = UserRole.subscriber


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6)
    display_name: Optional[str] = None
    bio: Optional[str] = Field(default=None, alias="description")
    avatar_url: Optional[str] = None
    role: Optional[UserRole] = None

    model_config = {"populate_by_name": True}
