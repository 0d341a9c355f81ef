"""Product search with composable filters and pagination."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Generic, TypeVar

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import Product
from app.catalog.repository import ProductRepository
from app.domain.exceptions import ValidationError

logger = structlog.get_logger()

T = TypeVar("T")

SORT_DIRECTIONS = ("asc", "desc")


@dataclass
class ProductFilter:
    """Filter parameters for product search.

    Every field is optional; a None field imposes no constraint and
    supplied fields are combined with AND.

    Attributes:
        name: Case-insensitive substring of the product name.
        category_id: Filter by category ID.
        min_price: Inclusive minimum price.
        max_price: Inclusive maximum price.
        is_active: Filter by active flag.
        is_visible: Filter by visible flag.
    """

    name: str | None = None
    category_id: str | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    is_visible: bool | None = None


@dataclass
class PaginationParams:
    """Pagination parameters.

    Attributes:
        page: Page number (0-indexed).
        size: Items per page.
        sort_by: Sort field.
        direction: Sort direction, "asc" or "desc" in any case.
    """

    page: int = 0
    size: int = 20
    sort_by: str = "id"
    direction: str = "ASC"

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValidationError("page", "must not be negative")
        if self.size < 1:
            raise ValidationError("size", "must be at least 1")
        if self.direction.lower() not in SORT_DIRECTIONS:
            raise ValidationError("direction", f"must be ASC or DESC, got {self.direction!r}")

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return self.page * self.size

    @property
    def limit(self) -> int:
        """Get limit (alias for size)."""
        return self.size

    @property
    def sort_order(self) -> str:
        """Normalized sort direction."""
        return self.direction.lower()


@dataclass
class PaginatedResult(Generic[T]):
    """Paginated result container.

    Attributes:
        items: List of items.
        total: Total count.
        page: Current page (0-indexed).
        size: Items per page.
    """

    items: list[T]
    total: int
    page: int
    size: int

    @property
    def total_pages(self) -> int:
        """Calculate total pages."""
        return (self.total + self.size - 1) // self.size

    @property
    def has_next(self) -> bool:
        """Check if there's a next page."""
        return self.page + 1 < self.total_pages

    @property
    def has_previous(self) -> bool:
        """Check if there's a previous page."""
        return self.page > 0


class ProductSearch:
    """Runs filtered, paginated product queries.

    Example usage:
        search = ProductSearch(session)
        results = await search.search(
            ProductFilter(name="shoe", min_price=Decimal("10")),
            PaginationParams(page=0, sort_by="price"),
        )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize search with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.repository = ProductRepository(session)

    async def search(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
    ) -> PaginatedResult[Product]:
        """Search products with filters and pagination.

        Args:
            filters: Filter parameters.
            pagination: Pagination parameters.

        Returns:
            Paginated product results.
        """
        logger.info(
            "Searching products",
            name=filters.name,
            category_id=filters.category_id,
            min_price=str(filters.min_price) if filters.min_price is not None else None,
            max_price=str(filters.max_price) if filters.max_price is not None else None,
            is_active=filters.is_active,
            is_visible=filters.is_visible,
        )

        products = await self.repository.find_all(
            name=filters.name,
            category_id=filters.category_id,
            min_price=filters.min_price,
            max_price=filters.max_price,
            is_active=filters.is_active,
            is_visible=filters.is_visible,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order,
            limit=pagination.limit,
            offset=pagination.offset,
        )

        total = await self.repository.count(
            name=filters.name,
            category_id=filters.category_id,
            min_price=filters.min_price,
            max_price=filters.max_price,
            is_active=filters.is_active,
            is_visible=filters.is_visible,
        )

        return PaginatedResult(
            items=list(products),
            total=total,
            page=pagination.page,
            size=pagination.size,
        )
