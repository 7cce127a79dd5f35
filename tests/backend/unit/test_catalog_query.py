"""
Unit tests for the list query builder: filter clauses, sort allow-list and
pagination metadata.
"""
from decimal import Decimal

from tortoise.expressions import Q

from app.services.catalog_query import CatalogQuery, pagination_meta


SORT_FIELDS = {"createdAt": "created_at", "name": "name", "price": "price"}


class TestClauses:
    def test_no_filters_means_no_clauses(self):
        assert CatalogQuery().clauses() == []

    def test_search_is_or_across_fields(self):
        query = CatalogQuery(search="phone", search_fields=("name", "description", "sku"))
        clauses = query.clauses()
        assert len(clauses) == 1
        search = clauses[0]
        assert search.join_type == Q.OR
        assert len(search.children) == 3
        assert [child.filters for child in search.children] == [
            {"name__icontains": "phone"},
            {"description__icontains": "phone"},
            {"sku__icontains": "phone"},
        ]

    def test_blank_search_is_ignored(self):
        assert CatalogQuery(search="   ", search_fields=("name",)).clauses() == []

    def test_price_bounds_are_inclusive_decimals(self):
        clauses = CatalogQuery(price_min=10, price_max=30.5).clauses()
        assert [c.filters for c in clauses] == [
            {"price__gte": Decimal("10")},
            {"price__lte": Decimal("30.5")},
        ]

    def test_flags_combine_with_and(self):
        clauses = CatalogQuery(is_active=True, is_featured=False).clauses()
        assert [c.filters for c in clauses] == [{"is_active": True}, {"is_featured": False}]

    def test_extra_filters_skip_missing_values(self):
        clauses = CatalogQuery(extra={"role": "admin", "other": None}).clauses()
        assert [c.filters for c in clauses] == [{"role": "admin"}]


class TestOrdering:
    def test_default_sort_when_unset(self):
        assert CatalogQuery(sort_fields=SORT_FIELDS).ordering() == "-created_at"

    def test_ascending_and_descending(self):
        assert CatalogQuery(sort_by="price", sort_order="ASC", sort_fields=SORT_FIELDS).ordering() == "price"
        assert CatalogQuery(sort_by="price", sort_order="desc", sort_fields=SORT_FIELDS).ordering() == "-price"

    def test_unknown_sort_field_falls_back(self):
        query = CatalogQuery(sort_by="password_hash", sort_fields=SORT_FIELDS, default_sort="name")
        assert query.ordering() == "name"


class TestPaginationMeta:
    def test_middle_page(self):
        assert pagination_meta(2, 10, 35) == {
            "page": 2,
            "limit": 10,
            "total": 35,
            "totalPages": 4,
            "hasNext": True,
            "hasPrev": True,
        }

    def test_last_page(self):
        meta = pagination_meta(4, 10, 35)
        assert meta["hasNext"] is False
        assert meta["hasPrev"] is True

    def test_empty_result(self):
        meta = pagination_meta(1, 10, 0)
        assert meta["totalPages"] == 0
        assert meta["hasNext"] is False
        assert meta["hasPrev"] is False

    def test_exact_multiple(self):
        assert pagination_meta(1, 5, 10)["totalPages"] == 2
