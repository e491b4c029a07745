from typing import Optional

from pydantic import BaseModel, ConfigDict


class TokenPayload(BaseModel):
    """
    Claims carried by an access token.
    """
    model_config = ConfigDict(extra="ignore")

    userId: int
    username: str
    email: str
    role: str
    exp: Optional[int] = None


class AuthResponse(BaseModel):
    """
    Body returned by login and register.
    """
    token: str
    user: dict
    user_email: str
    user_nicename: str
    user_display_name: str
