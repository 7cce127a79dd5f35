# app/api/v1/routers/categories.py
import logging
import uuid
from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.v1.deps import require_admin
from app.api.v1.serializers import category_to_dict
from app.core.errors import BadRequest, Conflict, NotFound
from app.models.category import Category
from app.models.product import Product
from app.schemas.category import CategoryCreateIn, CategoryUpdateIn
from app.services.catalog_query import CatalogQuery

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/categories", tags=["categories"])


# ===== Helpers =====
async def _get_category_or_404(category_id) -> Category:
    c = await Category.get_or_none(id=category_id)
    if not c:
        raise NotFound("Category not found")
    return c


async def _ensure_unique(name: Optional[str] = None, slug: Optional[str] = None, exclude_id=None) -> None:
    if name is not None:
        qs = Category.filter(name=name)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Category with this name already exists")
    if slug is not None:
        qs = Category.filter(slug=slug)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Category with this slug already exists")


async def _get_parent_or_404(parent_id) -> Category:
    parent = await Category.get_or_none(id=parent_id)
    if not parent:
        raise NotFound("Parent category not found")
    return parent


async def _creates_cycle(category_id, parent: Category) -> bool:
    """
    True when `parent` is `category_id` itself or one of its descendants.

    Walks up the ancestor chain of the proposed parent by parent id.
    """
    target = str(category_id)
    seen = set()
    node: Optional[Category] = parent
    while node is not None:
        node_id = str(node.id)
        if node_id == target:
            return True
        if node_id in seen or node.parent_id is None:
            return False
        seen.add(node_id)
        node = await Category.get_or_none(id=node.parent_id)
    return False


def _build_tree(categories: list[Category]) -> list[dict]:
    """Nest categories under their parents, starting from the roots."""
    by_parent: dict = defaultdict(list)
    for c in categories:
        by_parent[str(c.parent_id) if c.parent_id else None].append(c)

    def node(c: Category, seen: frozenset) -> dict:
        data = category_to_dict(c)
        key = str(c.id)
        data["children"] = [
            node(child, seen | {key})
            for child in by_parent.get(key, [])
            if str(child.id) not in seen
        ]
        return data

    return [node(root, frozenset()) for root in by_parent.get(None, [])]


# ===== Public routes =====
@router.get("")
async def list_categories(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(default=None, min_length=1, max_length=100),
    includeInactive: bool = Query(default=False),
):
    """
    Paginated category list ordered by name, with parent and children summaries.

    Inactive categories are hidden unless includeInactive=true.
    """
    query = CatalogQuery(
        page=page,
        limit=limit,
        search=search,
        is_active=None if includeInactive else True,
        search_fields=("name", "description"),
        default_sort="name",
    )
    rows, pagination = await query.fetch(Category.all(), "parent", "children")
    categories = [
        category_to_dict(c, parent=c.parent, include_parent=True, children=list(c.children))
        for c in rows
    ]
    return {"data": {"categories": categories, "pagination": pagination}}


@router.get("/tree")
async def category_tree(includeInactive: bool = Query(default=False)):
    """
    Hierarchical view: root categories with their nested children.

    Only active categories (and active descendants of active parents) are
    shown unless includeInactive=true.
    """
    qs = Category.all().order_by("name")
    if not includeInactive:
        qs = qs.filter(is_active=True)
    categories = await qs
    return {"data": {"categories": _build_tree(categories)}}


@router.get("/slug/{slug}")
async def get_category_by_slug(slug: str):
    """Category by slug, with parent, children and its active products."""
    c = await Category.get_or_none(slug=slug)
    if not c:
        raise NotFound("Category not found")
    await c.fetch_related("parent", "children")
    products = await c.products.filter(is_active=True)
    return {
        "data": {
            "category": category_to_dict(
                c,
                parent=c.parent,
                include_parent=True,
                children=list(c.children),
                products=products,
                product_images=True,
            )
        }
    }


@router.get("/{category_id}")
async def get_category(category_id: uuid.UUID):
    """Category by id, with parent, children and all associated products."""
    c = await _get_category_or_404(category_id)
    await c.fetch_related("parent", "children", "products")
    return {
        "data": {
            "category": category_to_dict(
                c,
                parent=c.parent,
                include_parent=True,
                children=list(c.children),
                products=list(c.products),
            )
        }
    }


# ===== Admin routes =====
@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_category(body: CategoryCreateIn):
    """
    Create a category (admin only).

    The slug is derived from the name unless given explicitly.

    Raises:
        Conflict (409): Name or slug already taken
        NotFound (404): Parent category not found
        BadRequest (400): No slug can be derived from the name
    """
    c = Category(description=body.description, is_active=body.isActive)
    c.set_name(body.name, body.slug)
    if not c.slug:
        raise BadRequest("Cannot derive a slug from this name; provide one explicitly")

    await _ensure_unique(name=c.name, slug=c.slug)
    if body.parentId:
        c.parent = await _get_parent_or_404(body.parentId)

    await c.save()
    logger.info("[categories] created id=%s slug=%s", c.id, c.slug)
    return {"message": "Category created successfully", "data": {"category": category_to_dict(c)}}


@router.put("/{category_id}", dependencies=[Depends(require_admin)])
async def update_category(category_id: uuid.UUID, body: CategoryUpdateIn):
    """
    Partially update a category (admin only).

    - name change re-derives the slug unless a slug is supplied
    - parentId: null moves the category to the root
    - a category cannot become its own parent or a child of its descendants

    Raises:
        NotFound (404): Category or parent not found
        Conflict (409): Name or slug already taken
        BadRequest (400): Invalid parent
    """
    c = await _get_category_or_404(category_id)
    patch = body.patch()

    if patch.get("name") and patch["name"] != c.name:
        await _ensure_unique(name=patch["name"], exclude_id=c.id)

    if "parentId" in patch:
        parent_id = patch["parentId"]
        if parent_id is None:
            c.parent_id = None
        else:
            if str(parent_id) == str(c.id):
                raise BadRequest("Category cannot be its own parent")
            parent = await _get_parent_or_404(parent_id)
            if await _creates_cycle(c.id, parent):
                raise BadRequest("Category cannot be moved under one of its own subcategories")
            c.parent_id = parent.id

    old_slug = c.slug
    if patch.get("name"):
        c.set_name(patch["name"], patch.get("slug"))
    elif patch.get("slug"):
        c.slug = patch["slug"]
    if not c.slug:
        raise BadRequest("Cannot derive a slug from this name; provide one explicitly")
    if c.slug != old_slug:
        await _ensure_unique(slug=c.slug, exclude_id=c.id)

    if "description" in patch:
        c.description = patch["description"]
    if isinstance(patch.get("isActive"), bool):
        c.is_active = patch["isActive"]

    await c.save()
    return {"message": "Category updated successfully", "data": {"category": category_to_dict(c)}}


@router.delete("/{category_id}", dependencies=[Depends(require_admin)])
async def delete_category(category_id: uuid.UUID):
    """
    Delete a leaf category without products (admin only).

    Raises:
        NotFound (404): Category not found
        BadRequest (400): Category has subcategories or associated products
    """
    c = await _get_category_or_404(category_id)
    if await Category.filter(parent_id=c.id).exists():
        raise BadRequest("Cannot delete category with subcategories")
    if await Product.filter(categories__id=c.id).exists():
        raise BadRequest("Cannot delete category with associated products")

    await c.delete()
    logger.info("[categories] deleted id=%s", category_id)
    return {"message": "Category deleted successfully"}


@router.patch("/{category_id}/toggle-status", dependencies=[Depends(require_admin)])
async def toggle_category_status(category_id: uuid.UUID):
    c = await _get_category_or_404(category_id)
    c.is_active = not c.is_active
    await c.save(update_fields=["is_active", "updated_at"])
    state = "activated" if c.is_active else "deactivated"
    return {"message": f"Category {state} successfully", "data": {"category": category_to_dict(c)}}
