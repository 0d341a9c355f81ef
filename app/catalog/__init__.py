"""Product Catalog.

Category taxonomy, product registry, filtered search and inventory
enrichment of product views.
"""

from app.catalog.category_service import CategoryRegistry
from app.catalog.enrichment import InventoryEnrichment, get_inventory_enrichment
from app.catalog.facade import CatalogFacade, ProductView
from app.catalog.models import Category, Product, ProductAttribute, ProductImage
from app.catalog.product_service import (
    AttributeCommand,
    CreateProductCommand,
    ImageCommand,
    ProductRegistry,
    UpdateProductCommand,
)
from app.catalog.repository import CategoryRepository, ProductRepository
from app.catalog.search import PaginatedResult, PaginationParams, ProductFilter, ProductSearch
from app.catalog.slug import slugify
from app.catalog.tree import CategoryTreeBuilder, CategoryView

__all__ = [
    # Models
    "Category",
    "Product",
    "ProductAttribute",
    "ProductImage",
    # Repositories
    "CategoryRepository",
    "ProductRepository",
    # Categories
    "CategoryRegistry",
    "CategoryTreeBuilder",
    "CategoryView",
    "slugify",
    # Products
    "AttributeCommand",
    "CreateProductCommand",
    "ImageCommand",
    "ProductRegistry",
    "UpdateProductCommand",
    # Search
    "PaginatedResult",
    "PaginationParams",
    "ProductFilter",
    "ProductSearch",
    # Enrichment
    "CatalogFacade",
    "InventoryEnrichment",
    "ProductView",
    "get_inventory_enrichment",
]
