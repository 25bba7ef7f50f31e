from datetime import datetime
from typing import Optional
from uuid import UUID

from ninja import Schema


class CategoryIn(Schema):
    name: Optional[str] = None
    description: Optional[str] = None


class CategoryUpdateIn(Schema):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryOut(Schema):
    id: UUID
    name: str
    description: str
    is_active: bool
    image_url: Optional[str] = None
    image_preview_url: Optional[str] = None
    created_by_id: Optional[UUID] = None
    updated_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


def category_payload(category) -> dict:
    return CategoryOut.from_orm(category).model_dump()
