"""Category API endpoints.

Provides endpoints for browsing the category tree and managing
categories.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import CategoryRequest, CategoryResponse, ErrorResponse
from app.catalog.category_service import CategoryRegistry
from app.catalog.tree import CategoryTreeBuilder, CategoryView, to_view
from app.infrastructure.database import get_session

router = APIRouter(prefix="/api/categories", tags=["Categories"])


# ============================================================================
# Dependencies
# ============================================================================


def get_registry(session: Annotated[AsyncSession, Depends(get_session)]) -> CategoryRegistry:
    """Get category registry bound to the request session."""
    return CategoryRegistry(session)


def get_tree_builder(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CategoryTreeBuilder:
    """Get tree builder bound to the request session."""
    return CategoryTreeBuilder(session)


Registry = Annotated[CategoryRegistry, Depends(get_registry)]
TreeBuilder = Annotated[CategoryTreeBuilder, Depends(get_tree_builder)]


# ============================================================================
# Converters
# ============================================================================


def view_to_response(view: CategoryView) -> CategoryResponse:
    """Convert a category view (and its subtree) to a response schema."""
    return CategoryResponse(
        id=view.id,
        name=view.name,
        description=view.description,
        slug=view.slug,
        parent_category_id=view.parent_id,
        parent_category_name=view.parent_name,
        is_active=view.is_active,
        display_order=view.display_order,
        created_at=view.created_at,
        updated_at=view.updated_at,
        sub_categories=[view_to_response(child) for child in view.sub_categories],
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
    description="List all active categories without their subcategories.",
)
async def list_categories(registry: Registry) -> list[CategoryResponse]:
    """List active categories as a flat list."""
    categories = await registry.list_all()
    return [view_to_response(to_view(category)) for category in categories]


@router.get(
    "/roots",
    response_model=list[CategoryResponse],
    summary="List root categories",
    description="List active root categories, each with its active subtree.",
)
async def list_root_categories(
    registry: Registry,
    trees: TreeBuilder,
) -> list[CategoryResponse]:
    """List root categories as trees."""
    roots = await registry.list_roots()
    return [view_to_response(view) for view in await trees.build_trees(list(roots))]


@router.get(
    "/slug/{slug}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category by slug",
)
async def get_category_by_slug(
    slug: str,
    registry: Registry,
    trees: TreeBuilder,
) -> CategoryResponse:
    """Get a category tree by slug."""
    category = await registry.get_by_slug(slug)
    return view_to_response(await trees.build_tree(category))


@router.get(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get category",
)
async def get_category(
    category_id: str,
    registry: Registry,
    trees: TreeBuilder,
) -> CategoryResponse:
    """Get a category tree by ID."""
    category = await registry.get_by_id(category_id)
    return view_to_response(await trees.build_tree(category))


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create category",
)
async def create_category(
    body: CategoryRequest,
    registry: Registry,
    trees: TreeBuilder,
) -> CategoryResponse:
    """Create a category.

    Raises:
        ValidationError: If the name is blank.
        ConflictError: If the name is taken.
        NotFoundError: If the parent does not exist.
    """
    category = await registry.create(
        name=body.name,
        description=body.description,
        slug=body.slug,
        parent_id=body.parent_category_id,
    )
    return view_to_response(await trees.build_tree(category))


@router.put(
    "/{category_id}",
    response_model=CategoryResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        412: {"model": ErrorResponse},
    },
    summary="Update category",
)
async def update_category(
    category_id: str,
    body: CategoryRequest,
    registry: Registry,
    trees: TreeBuilder,
) -> CategoryResponse:
    """Update a category; the parent link is replaced by the request's."""
    category = await registry.update(
        category_id,
        name=body.name,
        description=body.description,
        slug=body.slug,
        parent_id=body.parent_category_id,
    )
    return view_to_response(await trees.build_tree(category))


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        404: {"model": ErrorResponse},
        412: {"model": ErrorResponse},
    },
    summary="Delete category",
)
async def delete_category(category_id: str, registry: Registry) -> Response:
    """Hard-delete a category without subcategories."""
    await registry.delete(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{category_id}/deactivate",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Deactivate category",
)
async def deactivate_category(category_id: str, registry: Registry) -> Response:
    """Soft-delete a category."""
    await registry.deactivate(category_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
