"""
Database model for product categories.

Categories form a tree through a nullable self-referencing `parent` foreign key.
Children are looked up by parent id (reverse relation `children`); there is no
in-memory pointer graph.
"""
import uuid
from tortoise import fields, models

from app.models.base import SluggedMixin, TimestampMixin


class Category(SluggedMixin, TimestampMixin, models.Model):
    """
    Category database model.

    Relationships:
    - Belongs to an optional parent Category (many-to-one, null for root categories)
    - Has many child Categories (via related_name="children")
    - Has many Products (many-to-many, via related_name="products" on Product.categories)
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=100, unique=True)
    description = fields.TextField(null=True)
    slug = fields.CharField(max_length=100, unique=True, index=True)
    is_active = fields.BooleanField(default=True)
    parent = fields.ForeignKeyField(
        "models.Category",
        related_name="children",
        null=True,
        on_delete=fields.RESTRICT,
    )  # Deletion is guarded in the router; RESTRICT is the store-level backstop

    class Meta:
        table = "categories"

    def __str__(self) -> str:
        return self.name
