# app/api/v1/serializers.py
"""
Model -> JSON dict conversion shared by the routers.

Keys are camelCase on the wire. The password hash is never part of any output.
"""
import datetime as dt
from decimal import Decimal
from typing import Iterable, Optional

from app.models.category import Category
from app.models.product import Product
from app.models.user import User


def _iso(value: Optional[dt.datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _number(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def user_to_dict(u: User) -> dict:
    return {
        "id": str(u.id),
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "isActive": u.is_active,
        "lastLogin": _iso(u.last_login),
        "createdAt": _iso(u.created_at),
        "updatedAt": _iso(u.updated_at),
    }


def category_summary(c: Category, with_status: bool = False) -> dict:
    data = {"id": str(c.id), "name": c.name, "slug": c.slug}
    if with_status:
        data["isActive"] = c.is_active
    return data


def category_to_dict(
    c: Category,
    parent: Optional[Category] = None,
    include_parent: bool = False,
    children: Optional[Iterable[Category]] = None,
    products: Optional[Iterable[Product]] = None,
    product_images: bool = False,
) -> dict:
    data = {
        "id": str(c.id),
        "name": c.name,
        "description": c.description,
        "slug": c.slug,
        "isActive": c.is_active,
        "parentId": str(c.parent_id) if c.parent_id else None,
        "createdAt": _iso(c.created_at),
        "updatedAt": _iso(c.updated_at),
    }
    if include_parent:
        data["parent"] = category_summary(parent) if parent else None
    if children is not None:
        data["children"] = [category_summary(ch, with_status=True) for ch in children]
    if products is not None:
        items = []
        for p in products:
            item = {
                "id": str(p.id),
                "name": p.name,
                "price": _number(p.price),
                "stock": p.stock,
                "isActive": p.is_active,
            }
            if product_images:
                item["images"] = list(p.images or [])
            items.append(item)
        data["products"] = items
    return data


def product_to_dict(p: Product, categories: Optional[Iterable[Category]] = None) -> dict:
    data = {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "price": _number(p.price),
        "sku": p.sku,
        "stock": p.stock,
        "images": list(p.images or []),
        "options": p.options or {},
        "slug": p.slug,
        "isActive": p.is_active,
        "isFeatured": p.is_featured,
        "weight": _number(p.weight),
        "dimensions": p.dimensions,
        "metaTitle": p.meta_title,
        "metaDescription": p.meta_description,
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }
    if categories is not None:
        data["categories"] = [category_summary(c) for c in categories]
    return data
