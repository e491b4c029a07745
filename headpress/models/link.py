# headpress/models/link.py
import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship

from headpress.db.base import Base, utcnow

DEFAULT_LINK_CATEGORY_ID = 1


class LinkVisibility(str, enum.Enum):
    yes = "yes"
    no = "no"


class LinkTarget(str, enum.Enum):
    blank = "_blank"
    self = "_self"


class LinkCategory(Base):
    __tablename__ = 'link_categories'
    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False)
    description = Column(Text)
    count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    links = relationship("Link", back_populates="category")


class Link(Base):
    __tablename__ = 'links'
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    url = Column(String(1000), nullable=False)
    description = Column(Text)
    avatar = Column(String(1000))
    category_id = Column(
        Integer, ForeignKey('link_categories.id', ondelete='SET DEFAULT'),
        nullable=False, default=DEFAULT_LINK_CATEGORY_ID, server_default='1', index=True
    )
    target = Column(String(10), nullable=False, server_default=LinkTarget.blank.value)
    visible = Column(String(3), nullable=False, server_default=LinkVisibility.yes.value, index=True)
    rating = Column(Integer, nullable=False, default=0, server_default='0')
    sort_order = Column(Integer, nullable=False, default=0, server_default='0', index=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    category = relationship("LinkCategory", back_populates="links")
