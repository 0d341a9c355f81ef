"""Domain layer - catalog errors.

Example usage:
    from app.domain import NotFoundError

    raise NotFoundError("Category", "id", category_id)
"""

from app.domain.exceptions import (
    ConflictError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)

__all__ = [
    "ConflictError",
    "DomainError",
    "InvalidStateError",
    "NotFoundError",
    "UpstreamUnavailableError",
    "ValidationError",
]
