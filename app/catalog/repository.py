"""Catalog repositories for database operations.

Provide session-scoped query helpers for categories and products.
Repositories only flush; committing is the caller's decision.
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import Category, Product


class CategoryRepository:
    """Repository for Category database operations.

    Example usage:
        async with async_session_factory() as session:
            repo = CategoryRepository(session)
            roots = await repo.find_roots()
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, category: Category) -> Category:
        """Add a category to the session and flush it.

        Args:
            category: Category to save.

        Returns:
            Saved category.
        """
        self.session.add(category)
        await self.session.flush()
        return category

    async def delete(self, category: Category) -> None:
        """Delete a category."""
        await self.session.delete(category)
        await self.session.flush()

    async def get_by_id(self, category_id: str) -> Category | None:
        """Get category by ID.

        Args:
            category_id: Category ID.

        Returns:
            Category if found, None otherwise.
        """
        result = await self.session.execute(
            select(Category)
            .where(Category.id == category_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Category | None:
        """Get category by exact name, regardless of active state."""
        result = await self.session.execute(
            select(Category).where(Category.name == name)
        )
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Category | None:
        """Get the first category carrying a slug.

        Slugs are not unique, so the first match in store order wins.
        """
        result = await self.session.execute(
            select(Category).where(Category.slug == slug).limit(1)
        )
        return result.scalars().first()

    async def find_active(self) -> Sequence[Category]:
        """Get all active categories."""
        result = await self.session.execute(
            select(Category).where(Category.is_active.is_(True))
        )
        return result.scalars().all()

    async def find_roots(self) -> Sequence[Category]:
        """Get active categories without a parent."""
        result = await self.session.execute(
            select(Category).where(
                and_(
                    Category.parent_id.is_(None),
                    Category.is_active.is_(True),
                )
            )
        )
        return result.scalars().all()

    async def find_children(
        self,
        parent_id: str,
        active_only: bool = False,
    ) -> Sequence[Category]:
        """Get direct children of a category.

        Args:
            parent_id: Parent category ID.
            active_only: Whether to skip inactive children.

        Returns:
            Child categories in store order.
        """
        query = select(Category).where(Category.parent_id == parent_id)
        if active_only:
            query = query.where(Category.is_active.is_(True))
        result = await self.session.execute(query)
        return result.scalars().all()

    async def count_children(self, parent_id: str) -> int:
        """Count direct children, active or not."""
        result = await self.session.execute(
            select(func.count(Category.id)).where(Category.parent_id == parent_id)
        )
        return result.scalar_one()


class ProductRepository:
    """Repository for Product database operations.

    Handles all database interactions for products including
    filtering, sorting, and pagination.

    Example usage:
        async with async_session_factory() as session:
            repo = ProductRepository(session)
            products = await repo.find_all(
                category_id=category.id,
                is_active=True,
                limit=20,
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session

    async def save(self, product: Product) -> Product:
        """Save a product to database.

        Args:
            product: Product to save.

        Returns:
            Saved product.
        """
        self.session.add(product)
        await self.session.flush()
        return product

    async def delete(self, product: Product) -> None:
        """Delete a product together with its attributes and images."""
        await self.session.delete(product)
        await self.session.flush()

    async def get_by_id(self, product_id: str) -> Product | None:
        """Get product by ID.

        Args:
            product_id: Product ID.

        Returns:
            Product if found, None otherwise.
        """
        result = await self.session.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_sku(self, sku: str) -> Product | None:
        """Get product by SKU.

        Args:
            sku: Product SKU.

        Returns:
            Product if found, None otherwise.
        """
        result = await self.session.execute(select(Product).where(Product.sku == sku))
        return result.scalar_one_or_none()

    async def find_all(
        self,
        name: str | None = None,
        category_id: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        is_active: bool | None = None,
        is_visible: bool | None = None,
        sort_by: str = "id",
        sort_order: str = "asc",
        limit: int = 20,
        offset: int = 0,
    ) -> Sequence[Product]:
        """Find products with filtering, sorting, and pagination.

        Every filter left as None imposes no constraint.

        Args:
            name: Case-insensitive substring of the product name.
            category_id: Filter by exact category ID.
            min_price: Inclusive lower price bound.
            max_price: Inclusive upper price bound.
            is_active: Filter by active flag.
            is_visible: Filter by visible flag.
            sort_by: Sort field (id, sku, name, price, created_at, updated_at).
            sort_order: Sort order (asc, desc).
            limit: Maximum results.
            offset: Result offset for pagination.

        Returns:
            Sequence of matching products.
        """
        query = select(Product)

        conditions = self._build_conditions(
            name=name,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            is_active=is_active,
            is_visible=is_visible,
        )
        if conditions:
            query = query.where(and_(*conditions))

        # Sorting, with id as tie-breaker so pages are stable
        sort_column = self._get_sort_column(sort_by)
        if sort_order.lower() == "desc":
            query = query.order_by(sort_column.desc(), Product.id.desc())
        else:
            query = query.order_by(sort_column.asc(), Product.id.asc())

        query = query.limit(limit).offset(offset)

        result = await self.session.execute(query)
        return result.scalars().all()

    async def count(
        self,
        name: str | None = None,
        category_id: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        is_active: bool | None = None,
        is_visible: bool | None = None,
    ) -> int:
        """Count products matching filters.

        Accepts the same filters as ``find_all``.

        Returns:
            Count of matching products.
        """
        query = select(func.count(Product.id))

        conditions = self._build_conditions(
            name=name,
            category_id=category_id,
            min_price=min_price,
            max_price=max_price,
            is_active=is_active,
            is_visible=is_visible,
        )
        if conditions:
            query = query.where(and_(*conditions))

        result = await self.session.execute(query)
        return result.scalar_one()

    async def unlink_category(self, category_id: str) -> int:
        """Clear the category link of every product in a category.

        Args:
            category_id: Category being removed.

        Returns:
            Number of products unlinked.
        """
        result = await self.session.execute(
            select(Product).where(Product.category_id == category_id)
        )
        products = result.scalars().all()
        for product in products:
            product.category = None
        await self.session.flush()
        return len(products)

    def _build_conditions(
        self,
        name: str | None,
        category_id: str | None,
        min_price: Decimal | None,
        max_price: Decimal | None,
        is_active: bool | None,
        is_visible: bool | None,
    ) -> list[Any]:
        """Translate optional filters into SQL conditions."""
        conditions = []

        if name:
            conditions.append(Product.name.ilike(f"%{_escape_like(name)}%", escape="\\"))

        if category_id is not None:
            conditions.append(Product.category_id == category_id)

        if min_price is not None:
            conditions.append(Product.price >= min_price)

        if max_price is not None:
            conditions.append(Product.price <= max_price)

        if is_active is not None:
            conditions.append(Product.is_active.is_(is_active))

        if is_visible is not None:
            conditions.append(Product.is_visible.is_(is_visible))

        return conditions

    def _get_sort_column(self, sort_by: str) -> Any:
        """Get SQLAlchemy column for sorting.

        Args:
            sort_by: Sort field name (snake_case or camelCase).

        Returns:
            SQLAlchemy column.
        """
        columns = {
            "id": Product.id,
            "sku": Product.sku,
            "name": Product.name,
            "price": Product.price,
            "created_at": Product.created_at,
            "createdAt": Product.created_at,
            "updated_at": Product.updated_at,
            "updatedAt": Product.updated_at,
        }
        return columns.get(sort_by, Product.id)


def _escape_like(fragment: str) -> str:
    """Escape LIKE wildcards so the fragment matches literally."""
    return fragment.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
