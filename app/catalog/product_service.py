"""Product registry.

Owns product create/update/delete/deactivate, SKU uniqueness, category
linkage and replacement of the attributes and images a product owns.
"""

from dataclasses import dataclass
from decimal import Decimal

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.catalog.models import Category, Product, ProductAttribute, ProductImage
from app.catalog.repository import CategoryRepository, ProductRepository
from app.catalog.search import PaginatedResult, PaginationParams
from app.domain.exceptions import ConflictError, NotFoundError, ValidationError
from app.infrastructure.database import transaction

logger = structlog.get_logger()


# ============================================================================
# Commands
# ============================================================================


@dataclass
class AttributeCommand:
    """Attribute entry of a product command."""

    name: str
    value: str | None = None
    display_order: int = 0


@dataclass
class ImageCommand:
    """Image entry of a product command."""

    image_url: str
    alt_text: str | None = None
    is_primary: bool = False
    display_order: int = 0


@dataclass
class CreateProductCommand:
    """Input for creating a product.

    ``is_active`` and ``is_visible`` default to True when None.
    """

    sku: str
    name: str
    price: Decimal
    description: str | None = None
    category_id: str | None = None
    inventory_id: str | None = None
    is_active: bool | None = None
    is_visible: bool | None = None
    attributes: list[AttributeCommand] | None = None
    images: list[ImageCommand] | None = None


@dataclass
class UpdateProductCommand:
    """Input for updating a product.

    None has different meanings per field:

    * ``is_active`` / ``is_visible``: leave the stored flag unchanged.
    * ``category_id``: clear the category link.
    * ``attributes`` / ``images``: leave the owned collection untouched;
      any list, including an empty one, replaces it.
    """

    sku: str
    name: str
    price: Decimal
    description: str | None = None
    category_id: str | None = None
    inventory_id: str | None = None
    is_active: bool | None = None
    is_visible: bool | None = None
    attributes: list[AttributeCommand] | None = None
    images: list[ImageCommand] | None = None


ProductCommand = CreateProductCommand | UpdateProductCommand

# Matches the Numeric(12, 2) price column.
PRICE_SCALE = 2
PRICE_LIMIT = Decimal(10) ** (12 - PRICE_SCALE)


def validate_command(command: ProductCommand) -> None:
    """Reject malformed product input before the store is touched.

    Raises:
        ValidationError: On blank SKU, name, attribute name or image URL,
            or a missing, non-positive or unstorable price.
    """
    if not command.sku or not command.sku.strip():
        raise ValidationError("sku", "must not be blank")
    if not command.name or not command.name.strip():
        raise ValidationError("name", "must not be blank")
    if command.price is None:
        raise ValidationError("price", "is required")
    price = Decimal(str(command.price))
    if not price.is_finite():
        raise ValidationError("price", "must be a number")
    if price <= 0:
        raise ValidationError("price", "must be positive")
    if price.normalize().as_tuple().exponent < -PRICE_SCALE:
        raise ValidationError("price", f"must have at most {PRICE_SCALE} decimal places")
    if price >= PRICE_LIMIT:
        raise ValidationError("price", f"must be less than {PRICE_LIMIT}")
    for attribute in command.attributes or []:
        if not attribute.name or not attribute.name.strip():
            raise ValidationError("attributes.name", "must not be blank")
    for image in command.images or []:
        if not image.image_url or not image.image_url.strip():
            raise ValidationError("images.image_url", "must not be blank")


def _build_attributes(entries: list[AttributeCommand]) -> list[ProductAttribute]:
    return [
        ProductAttribute(
            name=entry.name,
            value=entry.value,
            display_order=entry.display_order,
        )
        for entry in entries
    ]


def _build_images(entries: list[ImageCommand]) -> list[ProductImage]:
    return [
        ProductImage(
            image_url=entry.image_url,
            alt_text=entry.alt_text,
            is_primary=entry.is_primary,
            display_order=entry.display_order,
        )
        for entry in entries
    ]


def _apply_update(
    product: Product,
    command: UpdateProductCommand,
    category: Category | None,
) -> None:
    product.sku = command.sku
    product.name = command.name
    product.description = command.description
    product.price = Decimal(str(command.price))
    product.inventory_id = command.inventory_id
    if command.is_active is not None:
        product.is_active = command.is_active
    if command.is_visible is not None:
        product.is_visible = command.is_visible

    if category is not None:
        product.category = category
    elif product.category_id is not None:
        product.category = None

    if command.attributes is not None:
        product.attributes = _build_attributes(command.attributes)
    if command.images is not None:
        product.images = _build_images(command.images)


# ============================================================================
# Product Registry
# ============================================================================


class ProductRegistry:
    """Service for product operations.

    Every write validates and resolves its references first and only then
    mutates, inside a single transaction.

    Example usage:
        async with async_session_factory() as session:
            registry = ProductRegistry(session)
            product = await registry.create(
                CreateProductCommand(sku="SKU-1", name="Trail Runner", price=Decimal("89.90"))
            )
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize registry with database session.

        Args:
            session: Async SQLAlchemy session.
        """
        self.session = session
        self.repository = ProductRepository(session)
        self.categories = CategoryRepository(session)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, product_id: str) -> Product:
        """Get product by ID.

        Raises:
            NotFoundError: If no product has this ID.
        """
        logger.info("Fetching product", product_id=product_id)
        product = await self.repository.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Product", "id", product_id)
        return product

    async def get_by_sku(self, sku: str) -> Product:
        """Get product by SKU.

        Raises:
            NotFoundError: If no product has this SKU.
        """
        logger.info("Fetching product", sku=sku)
        product = await self.repository.get_by_sku(sku)
        if product is None:
            raise NotFoundError("Product", "sku", sku)
        return product

    async def list_active_visible(
        self,
        pagination: PaginationParams,
    ) -> PaginatedResult[Product]:
        """List products that are both active and visible."""
        logger.info("Fetching active products", page=pagination.page, size=pagination.size)
        return await self._page(pagination, is_active=True, is_visible=True)

    async def list_by_category(
        self,
        category_id: str,
        pagination: PaginationParams,
    ) -> PaginatedResult[Product]:
        """List active and visible products of one category."""
        logger.info("Fetching products for category", category_id=category_id)
        return await self._page(
            pagination,
            category_id=category_id,
            is_active=True,
            is_visible=True,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, command: CreateProductCommand) -> Product:
        """Create a product with its attributes and images.

        Raises:
            ValidationError: If the command is malformed.
            ConflictError: If the SKU is already in use.
            NotFoundError: If the category does not exist.
        """
        validate_command(command)
        logger.info("Creating product", sku=command.sku)

        if await self.repository.get_by_sku(command.sku) is not None:
            raise ConflictError("Product", "SKU", command.sku)

        category = None
        if command.category_id is not None:
            category = await self._get_category(command.category_id)

        product = Product(
            sku=command.sku,
            name=command.name,
            description=command.description,
            price=Decimal(str(command.price)),
            inventory_id=command.inventory_id,
            is_active=command.is_active if command.is_active is not None else True,
            is_visible=command.is_visible if command.is_visible is not None else True,
            category=category,
            attributes=_build_attributes(command.attributes or []),
            images=_build_images(command.images or []),
        )
        try:
            async with transaction(self.session):
                await self.repository.save(product)
        except IntegrityError:
            await self._raise_if_sku_taken(command.sku)
            raise

        logger.info("Product created", product_id=product.id, sku=product.sku)
        return product

    async def update(self, product_id: str, command: UpdateProductCommand) -> Product:
        """Update a product.

        Scalar fields are overwritten unconditionally; flags, category and
        owned collections follow the None rules of ``UpdateProductCommand``.

        Raises:
            ValidationError: If the command is malformed.
            NotFoundError: If the product or the category does not exist.
            ConflictError: If the new SKU belongs to another product.
        """
        validate_command(command)
        logger.info("Updating product", product_id=product_id)

        product = await self.get_by_id(product_id)

        if product.sku != command.sku and await self.repository.get_by_sku(command.sku) is not None:
            raise ConflictError("Product", "SKU", command.sku)

        category = None
        if command.category_id is not None:
            category = await self._get_category(command.category_id)

        try:
            async with transaction(self.session):
                _apply_update(product, command, category)
                await self.repository.save(product)
        except IntegrityError:
            await self._raise_if_sku_taken(command.sku, product_id)
            raise

        logger.info("Product updated", product_id=product.id, sku=product.sku)
        return product

    async def delete(self, product_id: str) -> None:
        """Delete a product and the attributes and images it owns.

        Raises:
            NotFoundError: If the product does not exist.
        """
        logger.info("Deleting product", product_id=product_id)

        product = await self.get_by_id(product_id)
        async with transaction(self.session):
            await self.repository.delete(product)

        logger.info("Product deleted", product_id=product_id)

    async def deactivate(self, product_id: str) -> None:
        """Soft-delete a product.

        Raises:
            NotFoundError: If the product does not exist.
        """
        logger.info("Deactivating product", product_id=product_id)

        product = await self.get_by_id(product_id)
        async with transaction(self.session):
            product.is_active = False
            await self.repository.save(product)

        logger.info("Product deactivated", product_id=product_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _raise_if_sku_taken(self, sku: str, product_id: str | None = None) -> None:
        """Turn a unique-constraint failure on a rolled-back write into a conflict."""
        existing = await self.repository.get_by_sku(sku)
        if existing is not None and existing.id != product_id:
            raise ConflictError("Product", "SKU", sku)

    async def _get_category(self, category_id: str) -> Category:
        category = await self.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", "id", category_id)
        return category

    async def _page(
        self,
        pagination: PaginationParams,
        category_id: str | None = None,
        is_active: bool | None = None,
        is_visible: bool | None = None,
    ) -> PaginatedResult[Product]:
        products = await self.repository.find_all(
            category_id=category_id,
            is_active=is_active,
            is_visible=is_visible,
            sort_by=pagination.sort_by,
            sort_order=pagination.sort_order,
            limit=pagination.limit,
            offset=pagination.offset,
        )
        total = await self.repository.count(
            category_id=category_id,
            is_active=is_active,
            is_visible=is_visible,
        )
        return PaginatedResult(
            items=list(products),
            total=total,
            page=pagination.page,
            size=pagination.size,
        )
