# headpress/models/moment.py
import enum
from sqlalchemy import Column, Integer, Text, String, ForeignKey, JSON, TIMESTAMP, func
from sqlalchemy.orm import relationship

from headpress.db.base import Base, utcnow


class MomentStatus(str, enum.Enum):
    publish = "publish"
    draft = "draft"
    trash = "trash"


class Moment(Base):
    __tablename__ = 'moments'
    id = Column(Integer, primary_key=True)
    content = Column(Text, nullable=False)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    status = Column(String(20), nullable=False, server_default=MomentStatus.publish.value, index=True)
    # ordered list of URLs
    media_urls = Column(JSON, nullable=False, default=list)
    view_count = Column(Integer, nullable=False, default=0, server_default='0')
    like_count = Column(Integer, nullable=False, default=0, server_default='0')
    comment_count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    author = relationship("User")
