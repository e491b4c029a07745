# headpress/models/user.py
import enum
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func
from sqlalchemy.orm import relationship

from headpress.db.base import Base, utcnow


class UserRole(str, enum.Enum):
    administrator = "administrator"
    editor = "editor"
    author = "author"
    contributor = "contributor"
    subscriber = "subscriber"


class UserStatus(str, enum.Enum):
    active = "active"
    inactive = "inactive"


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True)
    username = Column(String(60), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(250))
    role = Column(String(20), nullable=False, server_default=UserRole.subscriber.value)
    status = Column(String(20), nullable=False, server_default=UserStatus.active.value)
    registered_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    last_login = Column(TIMESTAMP(timezone=True))
    avatar_url = Column(String(500))
    bio = Column(Text)
    posts = relationship("Post", back_populates="author", passive_deletes=True)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.active.value
