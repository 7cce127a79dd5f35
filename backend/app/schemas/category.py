"""
Pydantic schemas for category endpoints.
"""
import uuid
from typing import Annotated, Optional

from app.schemas.common import RequestModel, slug_type, text

CategoryName = Annotated[str, text(2, 100, "Category name must be between 2 and 100 characters")]
CategoryDescription = Annotated[str, text(0, 500, "Description must not exceed 500 characters")]
CategorySlug = slug_type(100)


class CategoryCreateIn(RequestModel):
    name: CategoryName
    description: Optional[CategoryDescription] = None
    parentId: Optional[uuid.UUID] = None
    slug: Optional[CategorySlug] = None  # Derived from name when omitted
    isActive: bool = True


class CategoryUpdateIn(RequestModel):
    """
    Partial update. `parentId: null` moves the category to the root,
    `description: null` clears it.
    """
    name: Optional[CategoryName] = None
    description: Optional[CategoryDescription] = None
    parentId: Optional[uuid.UUID] = None
    slug: Optional[CategorySlug] = None
    isActive: Optional[bool] = None
