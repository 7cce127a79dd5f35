# app/models/base.py
"""
Shared model mixins.

- TimestampMixin: created_at / updated_at columns maintained by Tortoise
- SluggedMixin: explicit name/slug assignment used by Category and Product
"""
from tortoise import fields

from app.core.slug import slugify


class TimestampMixin:
    created_at = fields.DatetimeField(auto_now_add=True)  # Set once on insert
    updated_at = fields.DatetimeField(auto_now=True)      # Refreshed on every save


class SluggedMixin:
    """
    Keeps `slug` in step with `name`.

    The slug is derived from the name when the entity is first named, and
    re-derived when the name changes, unless the caller supplies a slug
    explicitly. Renaming to the same name leaves the slug untouched.
    """

    def set_name(self, name: str, slug: str | None = None) -> None:
        renamed = name != getattr(self, "name", None)
        self.name = name
        if slug:
            self.slug = slug
        elif renamed or not getattr(self, "slug", None):
            self.slug = slugify(name)
