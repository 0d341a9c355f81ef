"""Best-effort inventory enrichment.

Turns a product's ``inventory_id`` into a live available quantity. Any
inventory failure degrades to an unknown quantity (None) and a warning
log; catalog reads never fail because of the inventory service.
"""

import asyncio

import structlog

from app.domain.exceptions import UpstreamUnavailableError
from app.infrastructure.config import settings
from app.infrastructure.inventory_client import (
    InventoryClient,
    InventoryClientError,
    get_inventory_client,
)

logger = structlog.get_logger()


class InventoryEnrichment:
    """Looks up available quantities for inventory IDs.

    Example usage:
        enrichment = InventoryEnrichment(get_inventory_client(), timeout=2.0)
        quantity = await enrichment.lookup("INV-001")
        quantities = await enrichment.lookup_many(["INV-001", "INV-002"])
    """

    def __init__(
        self,
        client: InventoryClient,
        timeout: float = 2.0,
        max_concurrency: int = 8,
        batch_lookup: bool = False,
    ) -> None:
        """Initialize enrichment.

        Args:
            client: Inventory service client.
            timeout: Upper bound in seconds for a single inventory call.
            max_concurrency: Maximum in-flight single lookups.
            batch_lookup: Try the batch endpoint before single lookups.
        """
        self.client = client
        self.timeout = timeout
        self.max_concurrency = max(1, max_concurrency)
        self.batch_lookup = batch_lookup

    async def lookup(self, inventory_id: str | None) -> int | None:
        """Get the available quantity for one inventory ID.

        Returns None without calling out when ``inventory_id`` is empty,
        and None when the item is unknown or the call fails.
        """
        if not inventory_id:
            return None

        try:
            return await self._fetch(inventory_id)
        except UpstreamUnavailableError as e:
            logger.warning(
                "Inventory lookup failed",
                inventory_id=inventory_id,
                error=e.message,
            )
        except Exception as e:
            logger.warning(
                "Inventory lookup returned unusable data",
                inventory_id=inventory_id,
                error=str(e),
                error_type=type(e).__name__,
            )
        return None

    async def lookup_many(self, inventory_ids: list[str | None]) -> dict[str, int | None]:
        """Get available quantities for several inventory IDs.

        Empty IDs are skipped and duplicates are looked up once. Each ID
        is isolated: one failure only blanks that ID's quantity.

        Returns:
            Mapping of inventory ID to quantity (None when unknown).
        """
        distinct = list(dict.fromkeys(i for i in inventory_ids if i))
        if not distinct:
            return {}

        if self.batch_lookup:
            quantities = await self._fetch_batch(distinct)
            if quantities is not None:
                return quantities

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def bounded(inventory_id: str) -> int | None:
            async with semaphore:
                return await self.lookup(inventory_id)

        results = await asyncio.gather(*(bounded(i) for i in distinct))
        return dict(zip(distinct, results))

    async def _fetch(self, inventory_id: str) -> int | None:
        try:
            item = await asyncio.wait_for(
                self.client.get_by_id(inventory_id),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise UpstreamUnavailableError(
                "inventory", f"timed out after {self.timeout}s"
            ) from e
        except InventoryClientError as e:
            raise UpstreamUnavailableError("inventory", e.message) from e

        if item is None:
            logger.debug("Inventory item not found", inventory_id=inventory_id)
            return None
        return item.available_quantity

    async def _fetch_batch(self, inventory_ids: list[str]) -> dict[str, int | None] | None:
        """Batch lookup; None means the caller should fall back to single lookups."""
        try:
            items = await asyncio.wait_for(
                self.client.get_batch(inventory_ids),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(
                "Inventory batch lookup failed, falling back to single lookups",
                inventory_count=len(inventory_ids),
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        found = {item.inventory_id: item.available_quantity for item in items}
        return {inventory_id: found.get(inventory_id) for inventory_id in inventory_ids}


def get_inventory_enrichment() -> InventoryEnrichment:
    """Build enrichment over the shared inventory client using settings."""
    return InventoryEnrichment(
        get_inventory_client(),
        timeout=settings.inventory_timeout_seconds,
        max_concurrency=settings.inventory_max_concurrency,
        batch_lookup=settings.inventory_batch_lookup,
    )
