"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Category: Hierarchical product category (self-referencing tree)
- Product: Catalog product, linked to categories through product_categories
"""
from .user import User
from .category import Category
from .product import Product
