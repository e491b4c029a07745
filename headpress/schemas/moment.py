from typing import List, Optional

from pydantic import BaseModel, Field

from headpress.models.moment import MomentStatus


class MomentCreate(BaseModel):
    content: str = Field(min_length=1)
    status: MomentStatus = MomentStatus.publish
    media_urls: List[str] = []


class MomentUpdate(BaseModel):
    content: Optional[str] = Field(default=None, min_length=1)
    status: Optional[MomentStatus] = None
    media_urls: Optional[List[str]] = None
