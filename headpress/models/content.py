# headpress/models/content.py
import enum
from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, Table,
    TIMESTAMP, func
)
from sqlalchemy.orm import relationship

from headpress.db.base import Base, utcnow


class PostStatus(str, enum.Enum):
    publish = "publish"
    draft = "draft"
    pending = "pending"
    private = "private"
    trash = "trash"


class PostType(str, enum.Enum):
    post = "post"
    page = "page"


class DiscussionStatus(str, enum.Enum):
    open = "open"
    closed = "closed"


post_categories = Table(
    'post_categories',
    Base.metadata,
    Column('post_id', Integer, ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
    Column('category_id', Integer, ForeignKey('categories.id', ondelete='CASCADE'), primary_key=True),
)

post_tags = Table(
    'post_tags',
    Base.metadata,
    Column('post_id', Integer, ForeignKey('posts.id', ondelete='CASCADE'), primary_key=True),
    Column('tag_id', Integer, ForeignKey('tags.id', ondelete='CASCADE'), primary_key=True),
)


class Post(Base):
    """Posts and pages share this table, discriminated by post_type."""
    __tablename__ = 'posts'
    id = Column(Integer, primary_key=True)
    title = Column(String(500), nullable=False)
    content = Column(Text)
    excerpt = Column(Text)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    status = Column(String(20), nullable=False, server_default=PostStatus.draft.value, index=True)
    post_type = Column(String(20), nullable=False, server_default=PostType.post.value, index=True)
    author_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    parent_id = Column(Integer, nullable=False, default=0, server_default='0')
    featured_media_id = Column(Integer, ForeignKey('media.id', ondelete='SET NULL'))
    featured_image_url = Column(String(1000))
    comment_status = Column(String(10), nullable=False, server_default=DiscussionStatus.open.value)
    comment_count = Column(Integer, nullable=False, default=0, server_default='0')
    view_count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False)
    published_at = Column(TIMESTAMP(timezone=True), index=True)
    author = relationship("User", back_populates="posts")


class PostMeta(Base):
    __tablename__ = 'post_meta'
    id = Column(Integer, primary_key=True)
    post_id = Column(Integer, ForeignKey('posts.id', ondelete='CASCADE'), nullable=False, index=True)
    meta_key = Column(String(255), nullable=False)
    meta_value = Column(Text)
