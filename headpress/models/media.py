# headpress/models/media.py
from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, func

from headpress.db.base import Base, utcnow


class Media(Base):
    __tablename__ = 'media'
    id = Column(Integer, primary_key=True)
    title = Column(String(500), nullable=False)
    filename = Column(String(255), nullable=False)
    file_type = Column(String(20), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False, index=True)
    storage_key = Column(String(500), unique=True, nullable=False)
    url = Column(String(1000), nullable=False)
    alt_text = Column(Text)
    caption = Column(Text)
    description = Column(Text)
    width = Column(Integer)
    height = Column(Integer)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
