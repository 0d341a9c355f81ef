"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
JSON bodies use camelCase field names; snake_case is accepted on input.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Prices go out as JSON numbers rather than strings
Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: Any = Field(default_factory=list, description="Additional error details")
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class PageResponse(CamelModel):
    """Page metadata shared by paginated responses (page is 0-based)."""

    total_elements: int = Field(..., description="Total number of matching items")
    total_pages: int = Field(..., description="Total number of pages")
    page: int = Field(..., description="Current page number")
    size: int = Field(..., description="Items per page")
    has_next: bool = Field(..., description="Whether a next page exists")
    has_previous: bool = Field(..., description="Whether a previous page exists")


# ============================================================================
# Category Schemas
# ============================================================================


class CategoryRequest(CamelModel):
    """Request to create or update a category.

    On update ``parentCategoryId`` replaces the current parent; omitting
    it makes the category a root.
    """

    name: str | None = Field(default=None, description="Category name, unique")
    description: str | None = Field(default=None, description="Category description")
    slug: str | None = Field(
        default=None, description="URL slug; derived from the name when empty"
    )
    parent_category_id: str | None = Field(default=None, description="Parent category ID")


class CategoryResponse(CamelModel):
    """Category with its active subcategories."""

    id: str = Field(..., description="Category identifier")
    name: str = Field(..., description="Category name")
    description: str | None = Field(default=None, description="Category description")
    slug: str = Field(..., description="URL slug")
    parent_category_id: str | None = Field(default=None, description="Parent category ID")
    parent_category_name: str | None = Field(
        default=None, description="Parent category name"
    )
    is_active: bool = Field(..., description="Whether the category is active")
    display_order: int = Field(default=0, description="Display order hint")
    created_at: datetime | None = Field(default=None, description="When the category was created")
    updated_at: datetime | None = Field(
        default=None, description="When the category was last updated"
    )
    sub_categories: list["CategoryResponse"] = Field(
        default_factory=list, description="Active subcategories"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductAttributeSchema(CamelModel):
    """Product attribute (e.g., Color: Red)."""

    id: str | None = Field(default=None, description="Attribute identifier")
    name: str | None = Field(default=None, description="Attribute name")
    value: str | None = Field(default=None, description="Attribute value")
    display_order: int = Field(default=0, description="Display order")


class ProductImageSchema(CamelModel):
    """Product image."""

    id: str | None = Field(default=None, description="Image identifier")
    image_url: str | None = Field(default=None, description="Image URL")
    alt_text: str | None = Field(default=None, description="Alternative text")
    is_primary: bool = Field(default=False, description="Whether this is the main image")
    display_order: int = Field(default=0, description="Display order")


class ProductRequest(CamelModel):
    """Request to create or update a product.

    On update, ``isActive``/``isVisible`` left out keep their stored
    values, ``categoryId`` left out clears the category, and
    ``attributes``/``images`` left out keep the current rows while any
    list replaces them.
    """

    sku: str | None = Field(default=None, description="Stock keeping unit, unique")
    name: str | None = Field(default=None, description="Product name")
    description: str | None = Field(default=None, description="Product description")
    price: Decimal | None = Field(default=None, description="Unit price, positive")
    category_id: str | None = Field(default=None, description="Category ID")
    inventory_id: str | None = Field(default=None, description="Inventory service ID")
    is_active: bool | None = Field(default=None, description="Active flag")
    is_visible: bool | None = Field(default=None, description="Visibility flag")
    attributes: list[ProductAttributeSchema] | None = Field(
        default=None, description="Product attributes"
    )
    images: list[ProductImageSchema] | None = Field(default=None, description="Product images")


class ProductResponse(CamelModel):
    """Product with live availability."""

    id: str = Field(..., description="Product identifier")
    sku: str = Field(..., description="Stock keeping unit")
    name: str = Field(..., description="Product name")
    description: str | None = Field(default=None, description="Product description")
    price: Price = Field(..., description="Unit price")
    category_id: str | None = Field(default=None, description="Category ID")
    category_name: str | None = Field(default=None, description="Category name")
    inventory_id: str | None = Field(default=None, description="Inventory service ID")
    available_quantity: int | None = Field(
        default=None, description="Available stock; null when unknown"
    )
    is_active: bool = Field(..., description="Active flag")
    is_visible: bool = Field(..., description="Visibility flag")
    attributes: list[ProductAttributeSchema] = Field(
        default_factory=list, description="Product attributes"
    )
    images: list[ProductImageSchema] = Field(default_factory=list, description="Product images")
    created_at: datetime | None = Field(default=None, description="When the product was created")
    updated_at: datetime | None = Field(
        default=None, description="When the product was last updated"
    )


class ProductPageResponse(PageResponse):
    """Paginated list of products."""

    content: list[ProductResponse] = Field(..., description="Products on this page")
