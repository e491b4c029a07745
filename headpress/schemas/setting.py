from typing import Any

from pydantic import BaseModel


class SettingValue(BaseModel):
    value: Any
