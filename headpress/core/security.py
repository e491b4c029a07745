# headpress/core/security.py
from datetime import datetime, timedelta, timezone
from typing import Optional, TYPE_CHECKING
import bcrypt

from jose import JWTError, jwt
from pydantic import ValidationError

from headpress.core.config import settings
from headpress.schemas.token import TokenPayload

if TYPE_CHECKING:
    from headpress.models.user import User


def create_access_token(user: "User", expires_delta: timedelta = None) -> str:
    """
    Issues a signed JWT carrying the user's identity and role.
    """
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "userId": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenPayload]:
    """
    Returns the decoded claims, or None when the token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        return TokenPayload(**payload)
    except (JWTError, ValidationError):
        return None


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Checks a password against its bcrypt hash.
    The password is truncated to 72 bytes (bcrypt limit).
    """
    password_bytes = plain_password.encode('utf-8')[:72]
    hashed_bytes = hashed_password.encode('utf-8')

    try:
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # malformed hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hashes a password with bcrypt (truncated to 72 bytes).
    """
    password_bytes = password.encode('utf-8')[:72]
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')
