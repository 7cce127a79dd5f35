# app/api/v1/routers/products.py
import json
import logging
import uuid
from decimal import Decimal
from typing import List, Literal, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile as StarletteUploadFile
from tortoise.transactions import in_transaction

from app.api.v1.deps import require_admin
from app.api.v1.serializers import product_to_dict
from app.core.errors import BadRequest, Conflict, NotFound
from app.models.category import Category
from app.models.product import Product
from app.schemas.product import MAX_PRICE, ProductCreateIn, ProductUpdateIn, RemoveImageIn
from app.services.catalog_query import CatalogQuery
from app.services.image_storage import ImageStorage, get_image_storage

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/products", tags=["products"])

FILE_FIELDS = ("images", "image")
LIST_FIELDS = ("categoryIds", "images")
SEARCH_FIELDS = ("name", "description", "sku")
SORT_FIELDS = {
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "name": "name",
    "price": "price",
    "stock": "stock",
}

M = TypeVar("M", bound=BaseModel)


# ===== Request parsing =====
async def _read_body(request: Request) -> tuple[dict, list]:
    """
    Read a product body sent as JSON or as multipart form data.

    Returns (fields, uploaded files). Multipart files are taken from the
    `images` (many) and `image` (single) fields.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        files = [
            value
            for key in FILE_FIELDS
            for value in form.getlist(key)
            if isinstance(value, StarletteUploadFile)
        ]
        data: dict = {}
        for key in set(form.keys()):
            values = [v for v in form.getlist(key) if not isinstance(v, StarletteUploadFile)]
            if not values:
                continue
            if key in LIST_FIELDS and not (len(values) == 1 and values[0].strip().startswith("[")):
                # repeated form fields, e.g. categoryIds=a&categoryIds=b
                data[key] = values
            else:
                data[key] = values[-1]
        return data, files

    raw = await request.body()
    if not raw.strip():
        return {}, []
    try:
        data = json.loads(raw)
    except ValueError:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
        )
    return data, []


def _validate(model: Type[M], data) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors())


# ===== Helpers =====
async def _get_product_or_404(product_id) -> Product:
    p = await Product.get_or_none(id=product_id)
    if not p:
        raise NotFound("Product not found")
    return p


async def _ensure_unique(sku: Optional[str] = None, slug: Optional[str] = None, exclude_id=None) -> None:
    if sku is not None:
        qs = Product.filter(sku=sku)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Product with this SKU already exists")
    if slug is not None:
        qs = Product.filter(slug=slug)
        if exclude_id is not None:
            qs = qs.exclude(id=exclude_id)
        if await qs.exists():
            raise Conflict("Product with this slug already exists")


async def _resolve_categories(category_ids: List[uuid.UUID]) -> List[Category]:
    """Load every requested category or fail without changing anything."""
    unique_ids = list(dict.fromkeys(category_ids))
    categories = await Category.filter(id__in=unique_ids) if unique_ids else []
    found = {str(c.id) for c in categories}
    missing = [str(cid) for cid in unique_ids if str(cid) not in found]
    if missing:
        raise NotFound("Category not found", details={"categoryIds": missing})
    return categories


async def _with_categories(p: Product) -> dict:
    await p.fetch_related("categories")
    return product_to_dict(p, categories=list(p.categories))


def _money(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


# ===== Public routes =====
@router.get("")
async def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(default=None, min_length=1, max_length=100, description="Match name, description or SKU"),
    categoryId: Optional[uuid.UUID] = Query(default=None),
    minPrice: Optional[float] = Query(default=None, ge=0, le=MAX_PRICE, allow_inf_nan=False),
    maxPrice: Optional[float] = Query(default=None, ge=0, le=MAX_PRICE, allow_inf_nan=False),
    isActive: Optional[bool] = Query(default=None),
    isFeatured: Optional[bool] = Query(default=None),
    sortBy: Literal["createdAt", "updatedAt", "name", "price", "stock"] = Query(default="createdAt"),
    sortOrder: Literal["ASC", "DESC", "asc", "desc"] = Query(default="DESC"),
):
    """
    Search, filter, sort and paginate products.

    Filters combine with AND; `search` matches name OR description OR SKU.
    """
    query = CatalogQuery(
        page=page,
        limit=limit,
        search=search,
        price_min=minPrice,
        price_max=maxPrice,
        is_active=isActive,
        is_featured=isFeatured,
        category_id=categoryId,
        sort_by=sortBy,
        sort_order=sortOrder,
        search_fields=SEARCH_FIELDS,
        sort_fields=SORT_FIELDS,
    )
    rows, pagination = await query.fetch(Product.all(), "categories")
    products = [product_to_dict(p, categories=list(p.categories)) for p in rows]
    return {"data": {"products": products, "pagination": pagination}}


@router.get("/featured")
async def featured_products(limit: int = Query(10, ge=1, le=100)):
    """Active, featured products, newest first."""
    rows = await (
        Product.filter(is_active=True, is_featured=True)
        .order_by("-created_at")
        .limit(limit)
        .prefetch_related("categories")
    )
    return {"data": {"products": [product_to_dict(p, categories=list(p.categories)) for p in rows]}}


@router.get("/slug/{slug}")
async def get_product_by_slug(slug: str):
    """Active product by slug."""
    p = await Product.get_or_none(slug=slug, is_active=True)
    if not p:
        raise NotFound("Product not found")
    return {"data": {"product": await _with_categories(p)}}


@router.get("/{product_id}")
async def get_product(product_id: uuid.UUID):
    p = await _get_product_or_404(product_id)
    return {"data": {"product": await _with_categories(p)}}


# ===== Admin routes =====
@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_admin)])
async def create_product(request: Request, storage: ImageStorage = Depends(get_image_storage)):
    """
    Create a product (admin only), from JSON or multipart form data.

    Multipart requests may carry up to MAX_FILES images in `images`; they are
    validated before anything is stored. `categoryIds` sets the initial
    category associations.

    Raises:
        Conflict (409): SKU or slug already taken
        NotFound (404): One of the categories does not exist
        BadRequest (400): Upload limits violated
    """
    data, files = await _read_body(request)
    body = _validate(ProductCreateIn, data)
    pending = await storage.validate(files)

    p = Product(
        description=body.description,
        price=_money(body.price),
        sku=body.sku,
        stock=body.stock,
        weight=_money(body.weight),
        dimensions=body.dimensions.model_dump() if body.dimensions else None,
        options=body.options,
        is_featured=body.isFeatured,
        is_active=body.isActive,
        meta_title=body.metaTitle,
        meta_description=body.metaDescription,
        images=[],
    )
    p.set_name(body.name, body.slug)
    if not p.slug:
        raise BadRequest("Cannot derive a slug from this name; provide one explicitly")
    await _ensure_unique(sku=p.sku, slug=p.slug)

    categories = await _resolve_categories(body.categoryIds) if body.categoryIds else []

    stored = storage.save(pending)
    p.images = stored
    try:
        async with in_transaction() as conn:
            await p.save(using_db=conn)
            if categories:
                await p.categories.add(*categories, using_db=conn)
    except Exception:
        storage.delete_many(stored)
        raise

    logger.info("[products] created id=%s sku=%s images=%d", p.id, p.sku, len(stored))
    return {"message": "Product created successfully", "data": {"product": await _with_categories(p)}}


@router.put("/{product_id}", dependencies=[Depends(require_admin)])
async def update_product(
    product_id: uuid.UUID,
    request: Request,
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Partially update a product (admin only), from JSON or multipart form data.

    - omitted fields keep their values; explicit null clears nullable fields
    - `categoryIds` replaces the whole category set
    - `images` replaces the image list with a subset of the current paths
      (dropped files are deleted); uploaded files are appended

    Raises:
        NotFound (404): Product or category not found
        Conflict (409): SKU or slug already taken
        BadRequest (400): Unknown image path or upload limits violated
    """
    p = await _get_product_or_404(product_id)
    data, files = await _read_body(request)
    patch = _validate(ProductUpdateIn, data).patch()
    pending = await storage.validate(files)

    if patch.get("sku") and patch["sku"] != p.sku:
        await _ensure_unique(sku=patch["sku"], exclude_id=p.id)
        p.sku = patch["sku"]

    old_slug = p.slug
    if patch.get("name"):
        p.set_name(patch["name"], patch.get("slug"))
    elif patch.get("slug"):
        p.slug = patch["slug"]
    if not p.slug:
        raise BadRequest("Cannot derive a slug from this name; provide one explicitly")
    if p.slug != old_slug:
        await _ensure_unique(slug=p.slug, exclude_id=p.id)

    if "description" in patch:
        p.description = patch["description"]
    if patch.get("price") is not None:
        p.price = _money(patch["price"])
    if patch.get("stock") is not None:
        p.stock = patch["stock"]
    if "weight" in patch:
        p.weight = _money(patch["weight"])
    if "dimensions" in patch:
        p.dimensions = patch["dimensions"]
    if "options" in patch:
        p.options = patch["options"] or {}
    if isinstance(patch.get("isFeatured"), bool):
        p.is_featured = patch["isFeatured"]
    if isinstance(patch.get("isActive"), bool):
        p.is_active = patch["isActive"]
    if "metaTitle" in patch:
        p.meta_title = patch["metaTitle"]
    if "metaDescription" in patch:
        p.meta_description = patch["metaDescription"]

    current_images = list(p.images or [])
    kept_images = current_images
    if patch.get("images") is not None:
        unknown = [path for path in patch["images"] if path not in current_images]
        if unknown:
            raise BadRequest("Unknown image path", details={"images": unknown})
        kept_images = list(patch["images"])
    dropped_images = [path for path in current_images if path not in kept_images]

    categories = None
    if patch.get("categoryIds") is not None:
        categories = await _resolve_categories(patch["categoryIds"])

    stored = storage.save(pending)
    p.images = kept_images + stored
    try:
        async with in_transaction() as conn:
            await p.save(using_db=conn)
            if categories is not None:
                await p.categories.clear(using_db=conn)
                if categories:
                    await p.categories.add(*categories, using_db=conn)
    except Exception:
        storage.delete_many(stored)
        raise

    storage.delete_many(dropped_images)
    return {"message": "Product updated successfully", "data": {"product": await _with_categories(p)}}


@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
async def delete_product(product_id: uuid.UUID, storage: ImageStorage = Depends(get_image_storage)):
    """Delete a product and every image file it references (admin only)."""
    p = await _get_product_or_404(product_id)
    storage.delete_many(list(p.images or []))
    async with in_transaction() as conn:
        await p.categories.clear(using_db=conn)
        await p.delete(using_db=conn)
    logger.info("[products] deleted id=%s", product_id)
    return {"message": "Product deleted successfully"}


@router.post("/{product_id}/images", dependencies=[Depends(require_admin)])
async def upload_product_images(
    product_id: uuid.UUID,
    images: List[UploadFile] = File(default=[]),
    image: Optional[UploadFile] = File(default=None),
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Append uploaded images to a product (admin only).

    Raises:
        NotFound (404): Product not found
        BadRequest (400): No images uploaded, or upload limits violated
    """
    p = await _get_product_or_404(product_id)
    files = list(images) + ([image] if image is not None else [])
    if not files:
        raise BadRequest("No images uploaded")
    pending = await storage.validate(files)

    stored = storage.save(pending)
    p.images = list(p.images or []) + stored
    try:
        await p.save(update_fields=["images", "updated_at"])
    except Exception:
        storage.delete_many(stored)
        raise
    return {"message": "Images uploaded successfully", "data": {"images": p.images}}


@router.delete("/{product_id}/images", dependencies=[Depends(require_admin)])
async def remove_product_image(
    product_id: uuid.UUID,
    body: RemoveImageIn,
    storage: ImageStorage = Depends(get_image_storage),
):
    """
    Remove one image by zero-based index (admin only).

    The stored file is deleted and the entry is spliced out of the list.

    Raises:
        NotFound (404): Product not found
        BadRequest (400): No images, or index out of range
    """
    p = await _get_product_or_404(product_id)
    current = list(p.images or [])
    if not current:
        raise BadRequest("No images found")
    if not 0 <= body.imageIndex < len(current):
        raise BadRequest("Invalid image index")

    removed = current.pop(body.imageIndex)
    p.images = current
    await p.save(update_fields=["images", "updated_at"])
    storage.delete(removed)
    return {"message": "Image removed successfully", "data": {"images": current}}


@router.patch("/{product_id}/toggle-status", dependencies=[Depends(require_admin)])
async def toggle_product_status(product_id: uuid.UUID):
    p = await _get_product_or_404(product_id)
    p.is_active = not p.is_active
    await p.save(update_fields=["is_active", "updated_at"])
    state = "activated" if p.is_active else "deactivated"
    return {"message": f"Product {state} successfully", "data": {"product": product_to_dict(p)}}


@router.patch("/{product_id}/toggle-featured", dependencies=[Depends(require_admin)])
async def toggle_product_featured(product_id: uuid.UUID):
    p = await _get_product_or_404(product_id)
    p.is_featured = not p.is_featured
    await p.save(update_fields=["is_featured", "updated_at"])
    state = "marked as featured" if p.is_featured else "unmarked as featured"
    return {"message": f"Product {state} successfully", "data": {"product": product_to_dict(p)}}
