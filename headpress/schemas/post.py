from typing import List, Optional

from pydantic import BaseModel, Field

from headpress.models.content import DiscussionStatus, PostStatus


class PostBase(BaseModel):
    """
    Fields shared by post and page payloads.
    """
    content: Optional[str] = None
    excerpt: Optional[str] = None
    slug: Optional[str] = None
    featured_media: Optional[int] = None
    featured_image_url: Optional[str] = None
    comment_status: Optional[DiscussionStatus] = None


class PostCreate(PostBase):
    title: str = Field(min_length=1)
    status: PostStatus = PostStatus.draft
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None


class PostUpdate(PostBase):
    """
    Partial update: only fields present in the body change.
    """
    title: Optional[str] = Field(default=None, min_length=1)
    status: Optional[PostStatus] = None
    categories: Optional[List[int]] = None
    tags: Optional[List[int]] = None


class PageCreate(PostBase):
    title: str = Field(min_length=1)
    status: PostStatus = PostStatus.draft
    parent: int = 0


class PageUpdate(PostBase):
    title: Optional[str] = Field(default=None, min_length=1)
    status: Optional[PostStatus] = None
    parent: Optional[int] = None
