from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class TemplateCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    category: str = "general"
    description: str = ""
    content: str = Field(min_length=1)
    is_default: bool = False


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    is_default: Optional[bool] = None


class TemplateResponse(BaseModel):
    id: int
    name: str
    category: str
    description: Optional[str]
    content: str
    is_default: bool
    created_by: Optional[int]
    created_at: datetime
    updated_at: datetime
    placeholders: List[str] = []

    model_config = {"from_attributes": True}
