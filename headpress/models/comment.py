# headpress/models/comment.py
import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, func

from headpress.db.base import Base, utcnow


class CommentStatus(str, enum.Enum):
    approved = "approved"
    pending = "pending"
    spam = "spam"
    trash = "trash"


class Comment(Base):
    __tablename__ = 'comments'
    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey('posts.id', ondelete='CASCADE'), nullable=False, index=True)
    # 0 means top-level
    parent_id = Column(Integer, nullable=False, default=0, server_default='0')
    author_name = Column(String(255), nullable=False)
    author_email = Column(String(255), nullable=False)
    author_url = Column(String(500))
    author_ip = Column(String(100))
    content = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, server_default=CommentStatus.pending.value, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'))
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
