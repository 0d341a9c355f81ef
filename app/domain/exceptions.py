"""Domain exceptions.

All domain-level errors that represent catalog rule violations.
These exceptions are raised by the registries when invariants are
violated or a referenced record does not exist. The API layer maps
each family to an HTTP status through ``http_status`` and ``error_code``.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    http_status: int = 400
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when a referenced category or product does not exist."""

    http_status = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, field: str, value: Any) -> None:
        """Initialize not found error.

        Args:
            entity_type: Type of entity (e.g., "Category", "Product").
            field: Lookup field (e.g., "id", "slug", "sku").
            value: The value that was not found.
        """
        super().__init__(
            f"{entity_type} not found with {field}: {value}",
            details={"entity_type": entity_type, "field": field, "value": str(value)},
        )


# ============================================================================
# State Errors
# ============================================================================


class ConflictError(DomainError):
    """Raised when a write collides with existing state (duplicate name or SKU)."""

    http_status = 409
    error_code = "CONFLICT"

    def __init__(self, entity_type: str, field: str, value: Any) -> None:
        """Initialize conflict error.

        Args:
            entity_type: Type of entity.
            field: The unique field that collided.
            value: The colliding value.
        """
        super().__init__(
            f"{entity_type} with {field} {value} already exists",
            details={"entity_type": entity_type, "field": field, "value": str(value)},
        )


class InvalidStateError(DomainError):
    """Raised when an operation's precondition does not hold.

    Examples are deleting a category that still has subcategories, or
    relinking a category underneath its own subtree.
    """

    http_status = 412
    error_code = "PRECONDITION_FAILED"


class ValidationError(DomainError):
    """Raised when input is rejected before any store mutation."""

    http_status = 400
    error_code = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str) -> None:
        """Initialize validation error.

        Args:
            field: Name of the invalid field.
            reason: Explanation of why the value is invalid.
        """
        super().__init__(
            f"Invalid {field}: {reason}",
            details={"field": field, "reason": reason},
        )


# ============================================================================
# Upstream Errors
# ============================================================================


class UpstreamUnavailableError(DomainError):
    """Raised when the inventory service cannot answer.

    Contained within inventory enrichment and downgraded to an unknown
    quantity there; it never reaches API callers.
    """

    http_status = 503
    error_code = "UPSTREAM_UNAVAILABLE"

    def __init__(self, service: str, reason: str) -> None:
        """Initialize upstream unavailable error.

        Args:
            service: Name of the upstream service.
            reason: Failure description.
        """
        super().__init__(
            f"{service} unavailable: {reason}",
            details={"service": service, "reason": reason},
        )
