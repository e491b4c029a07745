# headpress/models/taxonomy.py
from sqlalchemy import Column, Integer, String, Text, TIMESTAMP, func

from headpress.db.base import Base, utcnow

# Default category, always present and never deletable.
DEFAULT_CATEGORY_ID = 1


class Category(Base):
    __tablename__ = 'categories'
    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, nullable=False)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(Text)
    parent_id = Column(Integer, nullable=False, default=0, server_default='0')
    count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)


class Tag(Base):
    __tablename__ = 'tags'
    id = Column(Integer, primary_key=True)
    name = Column(String(200), unique=True, nullable=False)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(Text)
    count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
