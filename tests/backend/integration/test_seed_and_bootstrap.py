import pytest

from app.core.bootstrap import ensure_default_admin
from app.core.seed import seed_initial_data
from app.models.category import Category
from app.models.product import Product
from app.models.user import User


pytestmark = pytest.mark.asyncio


async def test_seed_creates_sample_catalog_once(db):
    assert await seed_initial_data() is True

    assert await User.filter(role="admin").count() == 1
    assert await User.filter(role="user").count() == 1
    assert await Category.all().count() == 4
    assert await Product.all().count() == 3

    smartphones = await Category.get(slug="smartphones").prefetch_related("parent")
    assert smartphones.parent.slug == "electronics"

    galaxy = await Product.get(sku="SAMSUNG-S23-128").prefetch_related("categories")
    assert galaxy.slug == "smartphone-galaxy-s23"
    assert [c.slug for c in galaxy.categories] == ["smartphones"]

    admin = await User.get(email="admin@example.com")
    assert admin.check_password("Admin123!")

    assert await seed_initial_data() is False
    assert await Product.all().count() == 3


async def test_default_admin_created_from_env(db, monkeypatch):
    monkeypatch.setenv("ADMIN_PASSWORD", "BootPass123")
    monkeypatch.setenv("ADMIN_EMAIL", " Boot@Example.com ")
    monkeypatch.setenv("ADMIN_NAME", "Boot Admin")

    await ensure_default_admin()
    admin = await User.get(email="boot@example.com")
    assert admin.is_admin
    assert admin.name == "Boot Admin"
    assert admin.check_password("BootPass123")

    # Runs again without creating a second admin
    await ensure_default_admin()
    assert await User.filter(role="admin").count() == 1


async def test_default_admin_skipped_without_password(db, monkeypatch):
    monkeypatch.delenv("ADMIN_PASSWORD", raising=False)
    await ensure_default_admin()
    assert await User.all().count() == 0


async def test_existing_account_promoted(db, monkeypatch):
    user = User(name="Regular", email="owner@example.com", role="user", is_active=False)
    user.set_password("Owner123")
    await user.save()

    monkeypatch.setenv("ADMIN_PASSWORD", "Whatever123")
    monkeypatch.setenv("ADMIN_EMAIL", "owner@example.com")
    await ensure_default_admin()

    await user.refresh_from_db()
    assert user.role == "admin"
    assert user.is_active is True
    assert user.check_password("Owner123")
