"""
Services Module

Catalog building blocks used by the routers:
- Query builder: search, filter, sort and paginate list endpoints
- Image storage: validate, store and delete uploaded product images
"""

from .catalog_query import (
    CatalogQuery,
    paginate,
    pagination_meta,
)
from .image_storage import (
    ImageStorage,
    PendingImage,
    get_image_storage,
)

__all__ = [
    # Query builder
    "CatalogQuery",
    "paginate",
    "pagination_meta",
    # Image storage
    "ImageStorage",
    "PendingImage",
    "get_image_storage",
]
