from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field

from headpress.models.comment import CommentStatus


class CommentCreate(BaseModel):
    post: int = Field(validation_alias=AliasChoices("post", "post_id"))
    author_name: str = Field(min_length=1)
    author_email: EmailStr
    author_url: Optional[str] = None
    content: str = Field(min_length=1)
    parent: int = Field(default=0, validation_alias=AliasChoices("parent", "parent_id"))


class CommentUpdate(BaseModel):
    content: Optional[str] = Field(default=None, min_length=1)
    author_name: Optional[str] = None
    author_email: Optional[EmailStr] = None
    author_url: Optional[str] = None
    status: Optional[CommentStatus] = None
