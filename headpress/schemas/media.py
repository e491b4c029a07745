from typing import Optional

from pydantic import BaseModel


class MediaUpdate(BaseModel):
    title: Optional[str] = None
    alt_text: Optional[str] = None
    caption: Optional[str] = None
    description: Optional[str] = None
