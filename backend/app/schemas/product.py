"""
Pydantic schemas for product endpoints.

Product bodies arrive either as JSON or as multipart form data (when images
are uploaded in the same request). Form fields are plain strings, so object
and list fields also accept their JSON-encoded form.
"""
import json
import uuid
from typing import Annotated, Any, Optional

from pydantic import BaseModel, Field, field_validator

from app.schemas.common import SKU_RULE, RequestModel, at_most, matches, non_negative, slug_type, text

# Upper bounds of the DecimalField(10, 2) / (8, 2) columns
MAX_PRICE = 99999999.99
MAX_WEIGHT = 999999.99

ProductName = Annotated[str, text(2, 200, "Product name must be between 2 and 200 characters")]
ProductDescription = Annotated[str, text(0, 2000, "Description must not exceed 2000 characters")]
Price = Annotated[
    float,
    Field(allow_inf_nan=False),
    non_negative("Price must be a positive number"),
    at_most(MAX_PRICE, f"Price must not exceed {MAX_PRICE}"),
]
Sku = Annotated[
    str,
    text(3, 50, "SKU must be between 3 and 50 characters"),
    matches(SKU_RULE, "SKU can only contain letters, numbers, hyphens, and underscores"),
]
Stock = Annotated[int, non_negative("Stock must be a non-negative integer")]
Weight = Annotated[
    float,
    Field(allow_inf_nan=False),
    non_negative("Weight must be a positive number"),
    at_most(MAX_WEIGHT, f"Weight must not exceed {MAX_WEIGHT}"),
]
MetaTitle = Annotated[str, text(0, 60, "Meta title must not exceed 60 characters")]
MetaDescription = Annotated[str, text(0, 160, "Meta description must not exceed 160 characters")]
ProductSlug = slug_type(200)
Measure = Annotated[float, Field(allow_inf_nan=False), non_negative("Dimensions must be non-negative numbers")]


class Dimensions(BaseModel):
    length: Measure
    width: Measure
    height: Measure


class _ProductFields(RequestModel):
    @field_validator("dimensions", "options", "categoryIds", "images", mode="before", check_fields=False)
    @classmethod
    def _decode_json_string(cls, value: Any) -> Any:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith(("{", "[")):
                try:
                    return json.loads(stripped)
                except ValueError:
                    raise ValueError("Must be valid JSON")
            if stripped == "":
                return None
        return value


class ProductCreateIn(_ProductFields):
    name: ProductName
    description: Optional[ProductDescription] = None
    price: Price
    sku: Sku
    stock: Stock = 0
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None
    options: dict[str, list[Any]] = {}
    categoryIds: Optional[list[uuid.UUID]] = None
    isFeatured: bool = False
    isActive: bool = True
    metaTitle: Optional[MetaTitle] = None
    metaDescription: Optional[MetaDescription] = None
    slug: Optional[ProductSlug] = None  # Derived from name when omitted

    @field_validator("options", mode="before")
    @classmethod
    def _options_default(cls, value: Any) -> Any:
        return {} if value is None else value


class ProductUpdateIn(_ProductFields):
    """
    Partial update: omitted fields keep their current values.

    `images` (optional) replaces the image list with the given subset of the
    product's current image paths; files dropped from the list are deleted.
    Files uploaded with the request are appended after that.
    """
    name: Optional[ProductName] = None
    description: Optional[ProductDescription] = None
    price: Optional[Price] = None
    sku: Optional[Sku] = None
    stock: Optional[Stock] = None
    weight: Optional[Weight] = None
    dimensions: Optional[Dimensions] = None
    options: Optional[dict[str, list[Any]]] = None
    categoryIds: Optional[list[uuid.UUID]] = None
    images: Optional[list[str]] = None
    isFeatured: Optional[bool] = None
    isActive: Optional[bool] = None
    metaTitle: Optional[MetaTitle] = None
    metaDescription: Optional[MetaDescription] = None
    slug: Optional[ProductSlug] = None


class RemoveImageIn(RequestModel):
    imageIndex: int
