"""Tests for category tree assembly."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.category_service import CategoryRegistry
from app.catalog.tree import CategoryTreeBuilder, CategoryView
from app.domain.exceptions import ConflictError


def collect_ids(view: CategoryView) -> list[str]:
    """Depth-first IDs of a view tree."""
    ids = [view.id]
    for child in view.sub_categories:
        ids.extend(collect_ids(child))
    return ids


@pytest.fixture
def registry(session: AsyncSession) -> CategoryRegistry:
    """Category registry on the test session."""
    return CategoryRegistry(session)


@pytest.fixture
def builder(session: AsyncSession) -> CategoryTreeBuilder:
    """Tree builder on the test session."""
    return CategoryTreeBuilder(session)


class TestBuildTree:
    """Tests for CategoryTreeBuilder.build_tree."""

    @pytest.mark.asyncio
    async def test_tree_contains_active_descendants(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """Active children and grandchildren are nested under their parent."""
        shoes = await registry.create("Shoes", None)
        running = await registry.create("Running Shoes", None, parent_id=shoes.id)
        trail = await registry.create("Trail Running", None, parent_id=running.id)
        boots = await registry.create("Boots", None, parent_id=shoes.id)

        tree = await builder.build_tree(shoes)

        assert tree.id == shoes.id
        assert tree.parent_name is None
        assert [c.id for c in tree.sub_categories] == [running.id, boots.id]
        running_view = tree.sub_categories[0]
        assert running_view.parent_id == shoes.id
        assert running_view.parent_name == "Shoes"
        assert [c.id for c in running_view.sub_categories] == [trail.id]
        assert running_view.sub_categories[0].parent_name == "Running Shoes"

    @pytest.mark.asyncio
    async def test_inactive_child_prunes_subtree(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """An inactive child hides itself and its active descendants."""
        shoes = await registry.create("Shoes", None)
        running = await registry.create("Running Shoes", None, parent_id=shoes.id)
        trail = await registry.create("Trail Running", None, parent_id=running.id)
        boots = await registry.create("Boots", None, parent_id=shoes.id)
        await registry.deactivate(running.id)

        tree = await builder.build_tree(shoes)

        ids = collect_ids(tree)
        assert running.id not in ids
        assert trail.id not in ids
        assert ids == [shoes.id, boots.id]

    @pytest.mark.asyncio
    async def test_tree_of_child_names_parent(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """The root of a subtree reports its own parent's name."""
        shoes = await registry.create("Shoes", None)
        running = await registry.create("Running Shoes", None, parent_id=shoes.id)

        tree = await builder.build_tree(running)

        assert tree.parent_id == shoes.id
        assert tree.parent_name == "Shoes"
        assert tree.sub_categories == []

    @pytest.mark.asyncio
    async def test_each_call_builds_fresh_tree(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """Mutating one result does not affect the next."""
        shoes = await registry.create("Shoes", None)
        await registry.create("Running Shoes", None, parent_id=shoes.id)

        first = await builder.build_tree(shoes)
        first.sub_categories.clear()
        second = await builder.build_tree(shoes)

        assert len(second.sub_categories) == 1
        assert first is not second

    @pytest.mark.asyncio
    async def test_build_trees_keeps_input_order(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """Each input category gets its own tree, in order."""
        shoes = await registry.create("Shoes", None)
        bags = await registry.create("Bags", None)
        await registry.create("Backpacks", None, parent_id=bags.id)

        trees = await builder.build_trees([bags, shoes])

        assert [t.id for t in trees] == [bags.id, shoes.id]
        assert [c.name for c in trees[0].sub_categories] == ["Backpacks"]
        assert trees[1].sub_categories == []


class TestCategoryScenario:
    """Create, nest and deactivate categories end to end."""

    @pytest.mark.asyncio
    async def test_shoes_scenario(
        self,
        registry: CategoryRegistry,
        builder: CategoryTreeBuilder,
    ) -> None:
        """A deactivated subcategory leaves the tree but stays retrievable."""
        shoes = await registry.create("Shoes", None)
        assert shoes.slug == "shoes"

        with pytest.raises(ConflictError):
            await registry.create("Shoes", None)

        running = await registry.create("Running Shoes", None, parent_id=shoes.id)
        tree = await builder.build_tree(shoes)
        assert [c.id for c in tree.sub_categories] == [running.id]

        await registry.deactivate(running.id)
        tree = await builder.build_tree(shoes)
        assert tree.sub_categories == []

        fetched = await registry.get_by_id(running.id)
        assert fetched.is_active is False
