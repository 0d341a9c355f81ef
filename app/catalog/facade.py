"""Catalog facade.

Joins product registry and search results with inventory enrichment and
returns read-only product views for the HTTP layer.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.enrichment import InventoryEnrichment
from app.catalog.models import Product
from app.catalog.product_service import (
    CreateProductCommand,
    ProductRegistry,
    UpdateProductCommand,
)
from app.catalog.search import PaginatedResult, PaginationParams, ProductFilter, ProductSearch

logger = structlog.get_logger()


@dataclass
class AttributeView:
    """Attribute as shown to catalog clients."""

    id: str
    name: str
    value: str | None
    display_order: int


@dataclass
class ImageView:
    """Image as shown to catalog clients."""

    id: str
    image_url: str
    alt_text: str | None
    is_primary: bool
    display_order: int


@dataclass
class ProductView:
    """Product projection with live availability.

    ``available_quantity`` is None when the product has no inventory ID
    or the inventory service could not provide a quantity.
    """

    id: str
    sku: str
    name: str
    description: str | None
    price: Decimal
    category_id: str | None
    category_name: str | None
    inventory_id: str | None
    is_active: bool
    is_visible: bool
    available_quantity: int | None = None
    attributes: list[AttributeView] = field(default_factory=list)
    images: list[ImageView] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


def to_product_view(product: Product, available_quantity: int | None = None) -> ProductView:
    """Copy a product and its owned rows into a view."""
    category = product.category
    return ProductView(
        id=product.id,
        sku=product.sku,
        name=product.name,
        description=product.description,
        price=product.price,
        category_id=category.id if category else None,
        category_name=category.name if category else None,
        inventory_id=product.inventory_id,
        is_active=product.is_active,
        is_visible=product.is_visible,
        available_quantity=available_quantity,
        attributes=[
            AttributeView(
                id=attribute.id,
                name=attribute.name,
                value=attribute.value,
                display_order=attribute.display_order,
            )
            for attribute in product.attributes
        ],
        images=[
            ImageView(
                id=image.id,
                image_url=image.image_url,
                alt_text=image.alt_text,
                is_primary=image.is_primary,
                display_order=image.display_order,
            )
            for image in product.images
        ],
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class CatalogFacade:
    """Read and write entry point that returns enriched product views.

    Example usage:
        facade = CatalogFacade(session, get_inventory_enrichment())
        page = await facade.list_products(PaginationParams(size=10))
    """

    def __init__(self, session: AsyncSession, enrichment: InventoryEnrichment) -> None:
        """Initialize facade.

        Args:
            session: Async SQLAlchemy session.
            enrichment: Inventory enrichment used for every product view.
        """
        self.products = ProductRegistry(session)
        self.search = ProductSearch(session)
        self.enrichment = enrichment

    async def present(self, product: Product) -> ProductView:
        """Build the enriched view of one product."""
        quantity = await self.enrichment.lookup(product.inventory_id)
        return to_product_view(product, quantity)

    async def present_page(
        self,
        page: PaginatedResult[Product],
    ) -> PaginatedResult[ProductView]:
        """Enrich every product of a page, keeping order and page metadata."""
        quantities = await self.enrichment.lookup_many(
            [product.inventory_id for product in page.items]
        )
        views = [
            to_product_view(
                product,
                quantities.get(product.inventory_id) if product.inventory_id else None,
            )
            for product in page.items
        ]
        unknown = sum(
            1 for view in views if view.inventory_id and view.available_quantity is None
        )
        if unknown:
            logger.info(
                "Products without known availability",
                product_count=len(views),
                unknown_count=unknown,
            )
        return PaginatedResult(
            items=views,
            total=page.total,
            page=page.page,
            size=page.size,
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_product(self, product_id: str) -> ProductView:
        """Get one enriched product by ID."""
        return await self.present(await self.products.get_by_id(product_id))

    async def get_product_by_sku(self, sku: str) -> ProductView:
        """Get one enriched product by SKU."""
        return await self.present(await self.products.get_by_sku(sku))

    async def list_products(
        self,
        pagination: PaginationParams,
    ) -> PaginatedResult[ProductView]:
        """List active, visible products."""
        return await self.present_page(await self.products.list_active_visible(pagination))

    async def list_products_by_category(
        self,
        category_id: str,
        pagination: PaginationParams,
    ) -> PaginatedResult[ProductView]:
        """List active, visible products of one category."""
        return await self.present_page(
            await self.products.list_by_category(category_id, pagination)
        )

    async def search_products(
        self,
        filters: ProductFilter,
        pagination: PaginationParams,
    ) -> PaginatedResult[ProductView]:
        """Run a filtered search and enrich the resulting page."""
        return await self.present_page(await self.search.search(filters, pagination))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_product(self, command: CreateProductCommand) -> ProductView:
        """Create a product and return its enriched view."""
        return await self.present(await self.products.create(command))

    async def update_product(
        self,
        product_id: str,
        command: UpdateProductCommand,
    ) -> ProductView:
        """Update a product and return its enriched view."""
        return await self.present(await self.products.update(product_id, command))
