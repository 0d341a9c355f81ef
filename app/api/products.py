"""Product API endpoints.

Provides endpoints for browsing, searching and managing products.
Every product in a response carries its live available quantity.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.schemas import (
    ErrorResponse,
    ProductAttributeSchema,
    ProductImageSchema,
    ProductPageResponse,
    ProductRequest,
    ProductResponse,
)
from app.catalog.enrichment import InventoryEnrichment, get_inventory_enrichment
from app.catalog.facade import CatalogFacade, ProductView
from app.catalog.product_service import (
    AttributeCommand,
    CreateProductCommand,
    ImageCommand,
    ProductRegistry,
    UpdateProductCommand,
)
from app.catalog.search import PaginatedResult, PaginationParams, ProductFilter
from app.infrastructure.database import get_session

router = APIRouter(prefix="/api/products", tags=["Products"])


# ============================================================================
# Dependencies
# ============================================================================


def get_facade(
    session: Annotated[AsyncSession, Depends(get_session)],
    enrichment: Annotated[InventoryEnrichment, Depends(get_inventory_enrichment)],
) -> CatalogFacade:
    """Get catalog facade bound to the request session."""
    return CatalogFacade(session, enrichment)


def get_registry(session: Annotated[AsyncSession, Depends(get_session)]) -> ProductRegistry:
    """Get product registry bound to the request session."""
    return ProductRegistry(session)


def get_pagination(
    page: Annotated[int, Query(description="Page number (0-based)")] = 0,
    size: Annotated[int, Query(description="Items per page")] = 20,
    sort_by: Annotated[str, Query(alias="sortBy", description="Sort field")] = "id",
    direction: Annotated[str, Query(description="ASC or DESC")] = "ASC",
) -> PaginationParams:
    """Build pagination from query parameters.

    Raises:
        ValidationError: On negative page, non-positive size or unknown direction.
    """
    return PaginationParams(page=page, size=size, sort_by=sort_by, direction=direction)


Facade = Annotated[CatalogFacade, Depends(get_facade)]
Registry = Annotated[ProductRegistry, Depends(get_registry)]
Pagination = Annotated[PaginationParams, Depends(get_pagination)]


# ============================================================================
# Converters
# ============================================================================


def view_to_response(view: ProductView) -> ProductResponse:
    """Convert product view to response schema."""
    return ProductResponse(
        id=view.id,
        sku=view.sku,
        name=view.name,
        description=view.description,
        price=view.price,
        category_id=view.category_id,
        category_name=view.category_name,
        inventory_id=view.inventory_id,
        available_quantity=view.available_quantity,
        is_active=view.is_active,
        is_visible=view.is_visible,
        attributes=[
            ProductAttributeSchema(
                id=attribute.id,
                name=attribute.name,
                value=attribute.value,
                display_order=attribute.display_order,
            )
            for attribute in view.attributes
        ],
        images=[
            ProductImageSchema(
                id=image.id,
                image_url=image.image_url,
                alt_text=image.alt_text,
                is_primary=image.is_primary,
                display_order=image.display_order,
            )
            for image in view.images
        ],
        created_at=view.created_at,
        updated_at=view.updated_at,
    )


def page_to_response(page: PaginatedResult[ProductView]) -> ProductPageResponse:
    """Convert a page of product views to response schema."""
    return ProductPageResponse(
        content=[view_to_response(view) for view in page.items],
        total_elements=page.total,
        total_pages=page.total_pages,
        page=page.page,
        size=page.size,
        has_next=page.has_next,
        has_previous=page.has_previous,
    )


def _attribute_commands(body: ProductRequest) -> list[AttributeCommand] | None:
    if body.attributes is None:
        return None
    return [
        AttributeCommand(
            name=attribute.name,
            value=attribute.value,
            display_order=attribute.display_order,
        )
        for attribute in body.attributes
    ]


def _image_commands(body: ProductRequest) -> list[ImageCommand] | None:
    if body.images is None:
        return None
    return [
        ImageCommand(
            image_url=image.image_url,
            alt_text=image.alt_text,
            is_primary=image.is_primary,
            display_order=image.display_order,
        )
        for image in body.images
    ]


def request_to_create(body: ProductRequest) -> CreateProductCommand:
    """Convert request body to a create command."""
    return CreateProductCommand(
        sku=body.sku,
        name=body.name,
        price=body.price,
        description=body.description,
        category_id=body.category_id,
        inventory_id=body.inventory_id,
        is_active=body.is_active,
        is_visible=body.is_visible,
        attributes=_attribute_commands(body),
        images=_image_commands(body),
    )


def request_to_update(body: ProductRequest) -> UpdateProductCommand:
    """Convert request body to an update command."""
    return UpdateProductCommand(
        sku=body.sku,
        name=body.name,
        price=body.price,
        description=body.description,
        category_id=body.category_id,
        inventory_id=body.inventory_id,
        is_active=body.is_active,
        is_visible=body.is_visible,
        attributes=_attribute_commands(body),
        images=_image_commands(body),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductPageResponse,
    responses={400: {"model": ErrorResponse}},
    summary="List products",
    description="List active, visible products with availability.",
)
async def list_products(facade: Facade, pagination: Pagination) -> ProductPageResponse:
    """List active, visible products."""
    return page_to_response(await facade.list_products(pagination))


@router.get(
    "/search",
    response_model=ProductPageResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Search products",
    description=(
        "Search products by name substring, category, price range and flags. "
        "Omitted filters impose no constraint."
    ),
)
async def search_products(
    facade: Facade,
    pagination: Pagination,
    name: Annotated[str | None, Query(description="Name substring, case-insensitive")] = None,
    category_id: Annotated[str | None, Query(alias="categoryId")] = None,
    min_price: Annotated[Decimal | None, Query(alias="minPrice")] = None,
    max_price: Annotated[Decimal | None, Query(alias="maxPrice")] = None,
    is_active: Annotated[bool | None, Query(alias="isActive")] = None,
    is_visible: Annotated[bool | None, Query(alias="isVisible")] = None,
) -> ProductPageResponse:
    """Search products with optional filters."""
    filters = ProductFilter(
        name=name,
        category_id=category_id,
        min_price=min_price,
        max_price=max_price,
        is_active=is_active,
        is_visible=is_visible,
    )
    return page_to_response(await facade.search_products(filters, pagination))


@router.get(
    "/sku/{sku}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product by SKU",
)
async def get_product_by_sku(sku: str, facade: Facade) -> ProductResponse:
    """Get a product by SKU."""
    return view_to_response(await facade.get_product_by_sku(sku))


@router.get(
    "/category/{category_id}",
    response_model=ProductPageResponse,
    responses={400: {"model": ErrorResponse}},
    summary="List products of a category",
)
async def list_products_by_category(
    category_id: str,
    facade: Facade,
    pagination: Pagination,
) -> ProductPageResponse:
    """List active, visible products of a category."""
    return page_to_response(await facade.list_products_by_category(category_id, pagination))


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(product_id: str, facade: Facade) -> ProductResponse:
    """Get a product by ID."""
    return view_to_response(await facade.get_product(product_id))


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Create product",
)
async def create_product(body: ProductRequest, facade: Facade) -> ProductResponse:
    """Create a product with its attributes and images."""
    return view_to_response(await facade.create_product(request_to_create(body)))


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
    summary="Update product",
)
async def update_product(
    product_id: str,
    body: ProductRequest,
    facade: Facade,
) -> ProductResponse:
    """Update a product."""
    return view_to_response(await facade.update_product(product_id, request_to_update(body)))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Delete product",
)
async def delete_product(product_id: str, registry: Registry) -> Response:
    """Delete a product with its attributes and images."""
    await registry.delete(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch(
    "/{product_id}/deactivate",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
    summary="Deactivate product",
)
async def deactivate_product(product_id: str, registry: Registry) -> Response:
    """Soft-delete a product."""
    await registry.deactivate(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
