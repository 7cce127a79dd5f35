# app/core/seed.py
"""
Sample catalog data for development.

Run from the backend directory:
    python -m app.core.seed

Creates an admin, a regular user, a small category tree and three products.
Does nothing when users already exist, so it is safe to run twice.
"""
import asyncio
import logging
from decimal import Decimal

from tortoise.transactions import in_transaction

from app.core.db import init_db, close_db
from app.models.category import Category
from app.models.product import Product
from app.models.user import User

logger = logging.getLogger("uvicorn.error")

USERS = [
    {"name": "Administrator", "email": "admin@example.com", "password": "Admin123!", "role": "admin"},
    {"name": "Test User", "email": "user@example.com", "password": "User123!", "role": "user"},
]

# (name, description, parent name)
CATEGORIES = [
    ("Electronics", "Electronic products and gadgets", None),
    ("Smartphones", "Mobile phones and smartphones", "Electronics"),
    ("Computers", "Computers, notebooks and accessories", "Electronics"),
    ("Clothing", "Clothes, shoes and accessories", None),
]

PRODUCTS = [
    {
        "category": "Smartphones",
        "name": "Smartphone Galaxy S23",
        "description": 'Samsung Galaxy S23 smartphone with 128GB, 6.1" display and triple camera',
        "price": Decimal("3999.99"),
        "sku": "SAMSUNG-S23-128",
        "stock": 25,
        "is_featured": True,
        "weight": Decimal("0.17"),
        "dimensions": {"length": 15.0, "width": 7.0, "height": 0.8},
        "options": {"colors": ["Black", "White", "Green"], "storage": ["128GB", "256GB", "512GB"]},
        "meta_title": "Smartphone Galaxy S23 - Samsung",
        "meta_description": "Samsung Galaxy S23 with advanced technology and a professional camera",
    },
    {
        "category": "Computers",
        "name": "Notebook Dell Inspiron 15",
        "description": 'Dell Inspiron 15" notebook with Intel i5, 8GB RAM and 256GB SSD',
        "price": Decimal("3499.99"),
        "sku": "DELL-INSPIRON-15",
        "stock": 15,
        "weight": Decimal("2.10"),
        "dimensions": {"length": 35.8, "width": 24.2, "height": 1.9},
        "options": {
            "processor": ["Intel i5", "Intel i7"],
            "ram": ["8GB", "16GB"],
            "storage": ["256GB SSD", "512GB SSD", "1TB HDD"],
        },
        "meta_title": "Notebook Dell Inspiron 15 - Intel i5",
        "meta_description": "Dell Inspiron 15 with an Intel i5 processor and SSD storage",
    },
    {
        "category": "Clothing",
        "name": "Basic Cotton T-Shirt",
        "description": "Basic 100% cotton t-shirt, available in several colors and sizes",
        "price": Decimal("29.99"),
        "sku": "TSHIRT-BASIC-001",
        "stock": 100,
        "weight": Decimal("0.15"),
        "dimensions": {"length": 30, "width": 20, "height": 1},
        "options": {"colors": ["White", "Black", "Blue", "Red", "Green"], "sizes": ["S", "M", "L", "XL"]},
        "meta_title": "Basic Cotton T-Shirt - Comfortable",
        "meta_description": "Basic 100% cotton t-shirt, comfortable and durable",
    },
]


async def seed_initial_data() -> bool:
    """Insert the sample data. Returns False when the database was not empty."""
    if await User.all().exists():
        logger.info("[seed] users already present -> skip seeding")
        return False

    async with in_transaction() as conn:
        for row in USERS:
            u = User(name=row["name"], email=row["email"], role=row["role"])
            u.set_password(row["password"])
            await u.save(using_db=conn)

        categories: dict[str, Category] = {}
        for name, description, parent_name in CATEGORIES:
            c = Category(description=description, is_active=True)
            c.set_name(name)
            if parent_name:
                c.parent_id = categories[parent_name].id
            await c.save(using_db=conn)
            categories[name] = c

        for row in PRODUCTS:
            fields = dict(row)
            category = categories[fields.pop("category")]
            p = Product(**fields)
            p.set_name(fields["name"])
            await p.save(using_db=conn)
            await p.categories.add(category, using_db=conn)

    logger.info(
        "[seed] created %d users, %d categories, %d products (admin: %s)",
        len(USERS), len(CATEGORIES), len(PRODUCTS), USERS[0]["email"],
    )
    return True


async def main() -> None:
    await init_db()
    try:
        await seed_initial_data()
    finally:
        await close_db()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
