"""
Database model for products.
"""
import uuid
from tortoise import fields, models

from app.models.base import SluggedMixin, TimestampMixin


class Product(SluggedMixin, TimestampMixin, models.Model):
    """
    Product database model.

    Relationships:
    - Belongs to many Categories through the `product_categories` join table
      (unique per product/category pair)

    Storage notes:
    - images: ordered list of "/uploads/<file>" paths, files live in UPLOAD_DIR
    - options: free-form mapping such as {"colors": ["Black", "White"]}
    - dimensions: {"length": .., "width": .., "height": ..} or null
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    name = fields.CharField(max_length=200)
    description = fields.TextField(null=True)
    price = fields.DecimalField(max_digits=10, decimal_places=2)
    sku = fields.CharField(max_length=50, unique=True, index=True)
    stock = fields.IntField(default=0)
    images = fields.JSONField(default=list)
    options = fields.JSONField(default=dict)
    slug = fields.CharField(max_length=200, unique=True, index=True)
    is_active = fields.BooleanField(default=True)
    is_featured = fields.BooleanField(default=False)
    weight = fields.DecimalField(max_digits=8, decimal_places=2, null=True)
    dimensions = fields.JSONField(null=True)
    meta_title = fields.CharField(max_length=60, null=True)
    meta_description = fields.CharField(max_length=160, null=True)

    categories: fields.ManyToManyRelation["Category"] = fields.ManyToManyField(
        "models.Category",
        related_name="products",
        through="product_categories",
        forward_key="category_id",
        backward_key="product_id",
    )

    class Meta:
        table = "products"

    def __str__(self) -> str:
        return f"{self.name} ({self.sku})"
