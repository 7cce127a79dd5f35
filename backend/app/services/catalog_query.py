# backend/app/services/catalog_query.py
"""
Catalog Query Builder

Turns optional list parameters (search, price range, flags, category, sort,
page/limit) into a single filtered, sorted and paginated Tortoise queryset.

- Every recognized filter is independent and optional; present filters are
  combined with AND
- `search` expands to an OR of case-insensitive substring matches across the
  resource's search fields
- Sort fields are restricted to an allow-list (camelCase name -> column)
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from tortoise.expressions import Q
from tortoise.queryset import QuerySet

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class CatalogQuery:
    """
    Configuration for one list request.

    search_fields / sort_fields are set per resource by the router; the rest
    comes from query parameters.
    """
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    search: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    category_id: Optional[Any] = None
    sort_by: Optional[str] = None
    sort_order: str = "DESC"
    search_fields: Sequence[str] = ()
    sort_fields: Dict[str, str] = field(default_factory=dict)
    default_sort: str = "-created_at"
    extra: Dict[str, Any] = field(default_factory=dict)  # exact-match filters, e.g. {"role": "admin"}

    def clauses(self) -> List[Q]:
        """Accumulate one Q clause per present filter."""
        clauses: List[Q] = []

        term = (self.search or "").strip()
        if term and self.search_fields:
            clauses.append(
                Q(*[Q(**{f"{name}__icontains": term}) for name in self.search_fields], join_type=Q.OR)
            )
        if self.price_min is not None:
            clauses.append(Q(price__gte=Decimal(str(self.price_min))))
        if self.price_max is not None:
            clauses.append(Q(price__lte=Decimal(str(self.price_max))))
        if self.is_active is not None:
            clauses.append(Q(is_active=self.is_active))
        if self.is_featured is not None:
            clauses.append(Q(is_featured=self.is_featured))
        for name, value in self.extra.items():
            if value is not None:
                clauses.append(Q(**{name: value}))
        return clauses

    def ordering(self) -> str:
        column = self.sort_fields.get(self.sort_by or "")
        if not column:
            return self.default_sort
        return column if self.sort_order.upper() == "ASC" else f"-{column}"

    def apply(self, qs: QuerySet) -> QuerySet:
        clauses = self.clauses()
        if clauses:
            qs = qs.filter(*clauses)
        if self.category_id is not None:
            # Join through product_categories; the pair is unique so rows are not repeated
            qs = qs.filter(categories__id=self.category_id)
        return qs.order_by(self.ordering())

    async def fetch(self, qs: QuerySet, *prefetch: str) -> Tuple[list, dict]:
        """Apply filters and sorting, then return (rows, pagination)."""
        return await paginate(self.apply(qs), self.page, self.limit, *prefetch)


def pagination_meta(page: int, limit: int, total: int) -> dict:
    """
    Pagination block reported by every list endpoint.

    totalPages = ceil(total / limit); hasNext = page < totalPages; hasPrev = page > 1
    """
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


async def paginate(qs: QuerySet, page: int, limit: int, *prefetch: str) -> Tuple[list, dict]:
    page = max(page, 1)
    limit = min(max(limit, 1), MAX_LIMIT)
    total = await qs.count()
    rows_qs = qs.offset((page - 1) * limit).limit(limit)
    if prefetch:
        rows_qs = rows_qs.prefetch_related(*prefetch)
    rows = await rows_qs
    return rows, pagination_meta(page, limit, total)
