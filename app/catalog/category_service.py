"""Category registry.

Owns category create/update/delete/deactivate and the name-uniqueness
and parent-link invariants.

Name uniqueness is checked across active and inactive categories while
listings only return active ones, so the name of a deactivated category
stays reserved until that category is hard-deleted.
"""

from collections.abc import Sequence

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import Category
from app.catalog.repository import CategoryRepository, ProductRepository
from app.catalog.slug import slugify
from app.domain.exceptions import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from app.infrastructure.database import transaction

logger = structlog.get_logger()


class CategoryRegistry:
    """Service for category operations.

    Example usage:
        async with async_session_factory() as session:
            registry = CategoryRegistry(session)
            shoes = await registry.create("Shoes", "All footwear")
            running = await registry.create(
                "Running Shoes", None, parent_id=shoes.id
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize registry with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = CategoryRepository(session)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, category_id: str) -> Category:
        """Get category by ID.

        Raises:
            NotFoundError: If no category has this ID.
        """
        logger.info("Fetching category", category_id=category_id)
        category = await self.repository.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", "id", category_id)
        return category

    async def get_by_slug(self, slug: str) -> Category:
        """Get category by slug.

        Raises:
            NotFoundError: If no category has this slug.
        """
        logger.info("Fetching category", slug=slug)
        category = await self.repository.get_by_slug(slug)
        if category is None:
            raise NotFoundError("Category", "slug", slug)
        return category

    async def list_all(self) -> Sequence[Category]:
        """List all active categories."""
        logger.info("Fetching all active categories")
        return await self.repository.find_active()

    async def list_roots(self) -> Sequence[Category]:
        """List active categories without a parent."""
        logger.info("Fetching root categories")
        return await self.repository.find_roots()

    async def list_children(
        self,
        category_id: str,
        active_only: bool = False,
    ) -> Sequence[Category]:
        """List direct children of a category."""
        return await self.repository.find_children(category_id, active_only=active_only)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        name: str,
        description: str | None,
        slug: str | None = None,
        parent_id: str | None = None,
    ) -> Category:
        """Create a category.

        Args:
            name: Category name, unique across all categories.
            description: Optional description.
            slug: Explicit slug; derived from the name when absent or empty.
            parent_id: Parent category ID; the category is a root when None.

        Returns:
            The created category.

        Raises:
            ValidationError: If the name is blank.
            ConflictError: If the name is already taken.
            NotFoundError: If the parent does not exist.
        """
        _require_name(name)
        logger.info("Creating category", name=name, parent_id=parent_id)

        if await self.repository.get_by_name(name) is not None:
            raise ConflictError("Category", "name", name)

        parent = None
        if parent_id is not None:
            parent = await self._get_parent(parent_id)

        category = Category(
            name=name,
            description=description,
            slug=slug if slug else slugify(name),
            parent_id=parent.id if parent else None,
            is_active=True,
            display_order=0,
        )
        try:
            async with transaction(self.session):
                await self.repository.save(category)
        except IntegrityError:
            await self._raise_if_name_taken(name)
            raise

        logger.info("Category created", category_id=category.id, slug=category.slug)
        return category

    async def update(
        self,
        category_id: str,
        name: str,
        description: str | None,
        slug: str | None = None,
        parent_id: str | None = None,
    ) -> Category:
        """Update a category.

        A changed name regenerates the slug and ignores ``slug``; an
        unchanged name lets a non-empty ``slug`` overwrite the stored one.
        The parent link is replaced on every call, so ``parent_id=None``
        turns the category into a root.

        Raises:
            ValidationError: If the name is blank.
            NotFoundError: If the category or the new parent does not exist.
            ConflictError: If the new name belongs to another category.
            InvalidStateError: If the new parent lies inside this category's subtree.
        """
        _require_name(name)
        logger.info("Updating category", category_id=category_id)

        category = await self.get_by_id(category_id)

        name_changed = category.name != name
        if name_changed and await self.repository.get_by_name(name) is not None:
            raise ConflictError("Category", "name", name)

        parent = None
        if parent_id is not None:
            parent = await self._get_parent(parent_id)
            await self._ensure_not_in_subtree(category, parent)

        try:
            async with transaction(self.session):
                category.name = name
                category.description = description
                if name_changed:
                    category.slug = slugify(name)
                elif slug:
                    category.slug = slug
                category.parent_id = parent.id if parent else None
                await self.repository.save(category)
        except IntegrityError:
            await self._raise_if_name_taken(name, category_id)
            raise

        logger.info("Category updated", category_id=category.id, slug=category.slug)
        return category

    async def delete(self, category_id: str) -> None:
        """Hard-delete a childless category.

        Products linked to the category keep existing without a category.

        Raises:
            NotFoundError: If the category does not exist.
            InvalidStateError: If the category still has subcategories.
        """
        logger.info("Deleting category", category_id=category_id)

        category = await self.get_by_id(category_id)
        if await self.repository.count_children(category.id) > 0:
            raise InvalidStateError(
                "Cannot delete category with subcategories. "
                "Please delete or move subcategories first.",
                details={"category_id": category.id},
            )

        async with transaction(self.session):
            unlinked = await ProductRepository(self.session).unlink_category(category.id)
            await self.repository.delete(category)

        logger.info("Category deleted", category_id=category_id, products_unlinked=unlinked)

    async def deactivate(self, category_id: str) -> None:
        """Soft-delete a category; its children and products are untouched.

        Raises:
            NotFoundError: If the category does not exist.
        """
        logger.info("Deactivating category", category_id=category_id)

        category = await self.get_by_id(category_id)
        async with transaction(self.session):
            category.is_active = False
            await self.repository.save(category)

        logger.info("Category deactivated", category_id=category_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _raise_if_name_taken(self, name: str, category_id: str | None = None) -> None:
        """Turn a unique-constraint failure on a rolled-back write into a conflict."""
        existing = await self.repository.get_by_name(name)
        if existing is not None and existing.id != category_id:
            raise ConflictError("Category", "name", name)

    async def _get_parent(self, parent_id: str) -> Category:
        parent = await self.repository.get_by_id(parent_id)
        if parent is None:
            raise NotFoundError("Parent category", "id", parent_id)
        return parent

    async def _ensure_not_in_subtree(self, category: Category, parent: Category) -> None:
        """Reject a parent that is the category itself or one of its descendants."""
        seen: set[str] = set()
        current: Category | None = parent
        while current is not None and current.id not in seen:
            if current.id == category.id:
                raise InvalidStateError(
                    f"Category {category.id} cannot be moved under its own subtree",
                    details={"category_id": category.id, "parent_id": parent.id},
                )
            seen.add(current.id)
            if current.parent_id is None:
                break
            current = await self.repository.get_by_id(current.parent_id)


def _require_name(name: str | None) -> None:
    if name is None or not name.strip():
        raise ValidationError("name", "must not be blank")
