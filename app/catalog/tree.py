"""Category tree assembly.

Builds read-only views of a category and its active descendants by
walking the ``parent_id`` index depth-first. Each call produces a fresh
tree of ``CategoryView`` values.
"""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import Category
from app.catalog.repository import CategoryRepository


@dataclass
class CategoryView:
    """Category projection with its visible subcategories."""

    id: str
    name: str
    slug: str
    description: str | None
    is_active: bool
    display_order: int
    parent_id: str | None
    parent_name: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    sub_categories: list["CategoryView"] = field(default_factory=list)


class CategoryTreeBuilder:
    """Assembles category trees from the category store.

    Only active children are descended into. An inactive child is dropped
    together with everything beneath it, even if some of its descendants
    are active. Children keep store order; ``display_order`` is not applied.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize builder with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.repository = CategoryRepository(session)

    async def build_tree(self, category: Category) -> CategoryView:
        """Build the view tree rooted at ``category``.

        The root itself is shown whatever its active flag; the filter
        applies to its descendants.
        """
        parent_name = None
        if category.parent_id is not None:
            parent = await self.repository.get_by_id(category.parent_id)
            parent_name = parent.name if parent else None
        return await self._build(category, parent_name)

    async def build_trees(self, categories: list[Category]) -> list[CategoryView]:
        """Build one tree per category, in input order."""
        return [await self.build_tree(category) for category in categories]

    async def _build(self, category: Category, parent_name: str | None) -> CategoryView:
        view = to_view(category, parent_name)
        children = await self.repository.find_children(category.id, active_only=True)
        for child in children:
            view.sub_categories.append(await self._build(child, category.name))
        return view


def to_view(category: Category, parent_name: str | None = None) -> CategoryView:
    """Flat view of a category without subcategories."""
    return CategoryView(
        id=category.id,
        name=category.name,
        slug=category.slug,
        description=category.description,
        is_active=category.is_active,
        display_order=category.display_order,
        parent_id=category.parent_id,
        parent_name=parent_name,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )
