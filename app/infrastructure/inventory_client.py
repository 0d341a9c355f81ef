"""Inventory HTTP client for the external inventory service.

Provides typed access to stock levels by inventory ID, by SKU and in
batches.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from app.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Response Models
# ============================================================================


@dataclass
class InventoryItem:
    """Stock record from the inventory service.

    Only ``available_quantity`` feeds catalog views; the other fields are
    informational.
    """

    inventory_id: str
    sku: str | None
    available_quantity: int | None
    reserved_quantity: int | None
    total_quantity: int | None
    in_stock: bool | None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "InventoryItem":
        """Create from inventory API response.

        Args:
            data: API response data (camelCase keys).

        Returns:
            InventoryItem instance.
        """
        available = data.get("availableQuantity")
        return cls(
            inventory_id=str(data["inventoryId"]),
            sku=data.get("sku"),
            available_quantity=int(available) if available is not None else None,
            reserved_quantity=data.get("reservedQuantity"),
            total_quantity=data.get("totalQuantity"),
            in_stock=data.get("inStock"),
        )


class InventoryClientError(Exception):
    """Error from inventory API call."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(f"[inventory] {message}")


# ============================================================================
# Inventory HTTP Client
# ============================================================================


class InventoryClient:
    """HTTP client for the inventory service.

    Provides methods for calling inventory endpoints with
    error handling and response normalization.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize inventory client.

        Args:
            base_url: Inventory service base URL.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "InventoryClient":
        """Context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Context manager exit."""
        await self.close()

    async def get_by_id(self, inventory_id: str) -> InventoryItem | None:
        """Get stock for an inventory ID.

        Args:
            inventory_id: Inventory identifier.

        Returns:
            InventoryItem if found, None otherwise.

        Raises:
            InventoryClientError: On API error (except 404).
        """
        return await self._get_one(
            f"/api/inventory/{inventory_id}",
            log_context={"inventory_id": inventory_id},
        )

    async def get_by_sku(self, sku: str) -> InventoryItem | None:
        """Get stock for a SKU.

        Args:
            sku: Product SKU.

        Returns:
            InventoryItem if found, None otherwise.

        Raises:
            InventoryClientError: On API error (except 404).
        """
        return await self._get_one(
            f"/api/inventory/sku/{sku}",
            log_context={"sku": sku},
        )

    async def get_batch(self, inventory_ids: list[str]) -> list[InventoryItem]:
        """Get stock for several inventory IDs in one call.

        Unknown IDs are simply absent from the result.

        Args:
            inventory_ids: Inventory identifiers.

        Returns:
            Inventory records returned by the service.

        Raises:
            InventoryClientError: On API error.
        """
        if not inventory_ids:
            return []

        try:
            client = await self._get_client()
            response = await client.get(
                "/api/inventory/batch",
                params={"inventoryIds": ",".join(inventory_ids)},
            )

            if response.status_code != 200:
                raise InventoryClientError(
                    f"Failed to get inventory batch: {response.text}",
                    response.status_code,
                )

            return [InventoryItem.from_api_response(item) for item in response.json()]

        except httpx.RequestError as e:
            logger.error(
                "Inventory batch request failed",
                inventory_count=len(inventory_ids),
                error=str(e),
            )
            raise InventoryClientError(f"Batch request failed: {str(e)}") from e

    async def _get_one(
        self,
        path: str,
        log_context: dict[str, Any],
    ) -> InventoryItem | None:
        try:
            client = await self._get_client()
            response = await client.get(path)

            if response.status_code == 404:
                return None

            if response.status_code != 200:
                raise InventoryClientError(
                    f"Failed to get inventory: {response.text}",
                    response.status_code,
                )

            return InventoryItem.from_api_response(response.json())

        except httpx.RequestError as e:
            logger.error(
                "Inventory request failed",
                error=str(e),
                **log_context,
            )
            raise InventoryClientError(f"Request failed: {str(e)}") from e


# Global client instance
_inventory_client: InventoryClient | None = None


def get_inventory_client() -> InventoryClient:
    """Get the inventory client singleton.

    Returns:
        InventoryClient configured from settings.
    """
    global _inventory_client
    if _inventory_client is None:
        _inventory_client = InventoryClient(
            base_url=settings.inventory_service_url,
            timeout=settings.inventory_timeout_seconds,
        )
    return _inventory_client


async def close_inventory_client() -> None:
    """Close and drop the inventory client singleton."""
    global _inventory_client
    if _inventory_client is not None:
        await _inventory_client.close()
        _inventory_client = None
