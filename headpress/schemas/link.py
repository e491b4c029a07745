from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from headpress.models.link import DEFAULT_LINK_CATEGORY_ID, LinkTarget, LinkVisibility


class LinkCreate(BaseModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    description: Optional[str] = None
    avatar: Optional[str] = None
    category_id: int = Field(
        default=DEFAULT_LINK_CATEGORY_ID,
        validation_alias=AliasChoices("category_id", "category"),
    )
    target: LinkTarget = LinkTarget.blank
    visible: LinkVisibility = LinkVisibility.yes
    rating: int = 0
    sort_order: int = 0


class LinkUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    avatar: Optional[str] = None
    category_id: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("category_id", "category"),
    )
    target: Optional[LinkTarget] = None
    visible: Optional[LinkVisibility] = None
    rating: Optional[int] = None
    sort_order: Optional[int] = None


class LinkCategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None


class LinkCategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
