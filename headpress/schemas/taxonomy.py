from typing import Optional

from pydantic import BaseModel, Field


class TermCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    slug: Optional[str] = None
    description: Optional[str] = None


class TermUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    slug: Optional[str] = None
    description: Optional[str] = None


class CategoryCreate(TermCreate):
    parent: int = 0


class CategoryUpdate(TermUpdate):
    parent: Optional[int] = None
