"""Tests for Product API endpoints."""

import httpx
import pytest


async def create_product(client: httpx.AsyncClient, **overrides) -> dict:
    """Create a product and return the response body."""
    body = {"sku": "SKU-1", "name": "Trail Runner", "price": 10.00}
    body.update(overrides)
    response = await client.post("/api/products", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateProduct:
    """Tests for POST /api/products."""

    @pytest.mark.asyncio
    async def test_create_product(self, client: httpx.AsyncClient, inventory_client) -> None:
        """The created product is returned with availability."""
        inventory_client.quantities["INV-1"] = 4

        data = await create_product(
            client,
            description="Light",
            inventoryId="INV-1",
            attributes=[{"name": "Color", "value": "Red", "displayOrder": 0}],
            images=[{"imageUrl": "https://img/1.png", "isPrimary": True}],
        )

        assert data["sku"] == "SKU-1"
        assert data["price"] == 10.0
        assert data["availableQuantity"] == 4
        assert data["isActive"] is True
        assert data["isVisible"] is True
        assert data["attributes"][0]["name"] == "Color"
        assert data["images"][0]["imageUrl"] == "https://img/1.png"
        assert data["images"][0]["isPrimary"] is True

    @pytest.mark.asyncio
    async def test_create_with_category(self, client: httpx.AsyncClient) -> None:
        """The category name is joined into the response."""
        category = (await client.post("/api/categories", json={"name": "Shoes"})).json()

        data = await create_product(client, categoryId=category["id"])

        assert data["categoryId"] == category["id"]
        assert data["categoryName"] == "Shoes"

    @pytest.mark.asyncio
    async def test_duplicate_sku(self, client: httpx.AsyncClient) -> None:
        """A duplicate SKU is a 409."""
        await create_product(client)

        response = await client.post(
            "/api/products",
            json={"sku": "SKU-1", "name": "Other", "price": 5},
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"sku": "SKU-1", "name": "Runner", "price": 0},
            {"sku": "SKU-1", "name": "Runner", "price": -1},
            {"sku": "SKU-1", "name": "Runner", "price": 0.001},
            {"sku": "SKU-1", "name": "Runner", "price": 1e10},
            {"sku": "SKU-1", "name": "Runner"},
            {"sku": "", "name": "Runner", "price": 1},
            {"sku": "SKU-1", "name": "Runner", "price": 1, "attributes": [{"value": "x"}]},
        ],
    )
    async def test_invalid_body(self, client: httpx.AsyncClient, body: dict) -> None:
        """Invalid input is a 400 with the validation envelope."""
        response = await client.post("/api/products", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_category(self, client: httpx.AsyncClient) -> None:
        """An unknown category is a 404."""
        response = await client.post(
            "/api/products",
            json={"sku": "SKU-1", "name": "Runner", "price": 1, "categoryId": "missing"},
        )

        assert response.status_code == 404


class TestReadProducts:
    """Tests for product reads."""

    @pytest.mark.asyncio
    async def test_get_by_id_and_sku(self, client: httpx.AsyncClient) -> None:
        """Products can be read by ID and by SKU."""
        created = await create_product(client)

        by_id = await client.get(f"/api/products/{created['id']}")
        by_sku = await client.get("/api/products/sku/SKU-1")

        assert by_id.json()["id"] == created["id"]
        assert by_sku.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_get_unknown(self, client: httpx.AsyncClient) -> None:
        """Unknown products are 404s."""
        assert (await client.get("/api/products/missing")).status_code == 404
        assert (await client.get("/api/products/sku/missing")).status_code == 404

    @pytest.mark.asyncio
    async def test_list_page(self, client: httpx.AsyncClient, inventory_client) -> None:
        """Listing pages active, visible products with availability."""
        inventory_client.quantities.update({"INV-1": 1, "INV-3": 3})
        inventory_client.failing.add("INV-2")
        for i in (1, 2, 3):
            await create_product(client, sku=f"SKU-{i}", price=i * 10, inventoryId=f"INV-{i}")
        await create_product(client, sku="SKU-hidden", isVisible=False)

        response = await client.get(
            "/api/products",
            params={"page": 0, "size": 2, "sortBy": "price", "direction": "desc"},
        )

        assert response.status_code == 200
        data = response.json()
        assert [p["sku"] for p in data["content"]] == ["SKU-3", "SKU-2"]
        assert [p["availableQuantity"] for p in data["content"]] == [3, None]
        assert data["totalElements"] == 3
        assert data["totalPages"] == 2
        assert data["hasNext"] is True

    @pytest.mark.asyncio
    async def test_bad_direction(self, client: httpx.AsyncClient) -> None:
        """An unknown sort direction is a 400."""
        response = await client.get("/api/products", params={"direction": "sideways"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_search_price_range(self, client: httpx.AsyncClient) -> None:
        """minPrice/maxPrice bounds are inclusive."""
        for sku, price in (("A", 5), ("B", 10), ("C", 15), ("D", 20), ("E", 25)):
            await create_product(client, sku=sku, price=price)

        response = await client.get(
            "/api/products/search",
            params={"minPrice": 10, "maxPrice": 20, "sortBy": "price"},
        )

        assert [p["sku"] for p in response.json()["content"]] == ["B", "C", "D"]

    @pytest.mark.asyncio
    async def test_search_flags_and_name(self, client: httpx.AsyncClient) -> None:
        """Flag filters and the name filter combine."""
        await create_product(client, sku="A", name="Trail Runner")
        await create_product(client, sku="B", name="Road Runner", isActive=False)
        await create_product(client, sku="C", name="Tote")

        response = await client.get(
            "/api/products/search",
            params={"name": "runner", "isActive": "true"},
        )

        assert [p["sku"] for p in response.json()["content"]] == ["A"]

    @pytest.mark.asyncio
    async def test_list_by_category(self, client: httpx.AsyncClient) -> None:
        """Category listing is scoped to the category."""
        category = (await client.post("/api/categories", json={"name": "Shoes"})).json()
        await create_product(client, sku="A", categoryId=category["id"])
        await create_product(client, sku="B")

        response = await client.get(f"/api/products/category/{category['id']}")

        assert [p["sku"] for p in response.json()["content"]] == ["A"]


class TestModifyProducts:
    """Tests for product updates and removal."""

    @pytest.mark.asyncio
    async def test_update_keeps_flags_and_collections_when_omitted(
        self,
        client: httpx.AsyncClient,
    ) -> None:
        """Omitted flags and lists keep their stored values."""
        created = await create_product(
            client,
            isVisible=False,
            attributes=[{"name": "Color", "value": "Red"}],
        )

        response = await client.put(
            f"/api/products/{created['id']}",
            json={"sku": "SKU-1", "name": "Renamed", "price": 12.5},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Renamed"
        assert data["price"] == 12.5
        assert data["isVisible"] is False
        assert [a["name"] for a in data["attributes"]] == ["Color"]

    @pytest.mark.asyncio
    async def test_update_replaces_attributes(self, client: httpx.AsyncClient) -> None:
        """A supplied attribute list replaces the old one."""
        created = await create_product(
            client,
            attributes=[{"name": "Color", "value": "Red"}, {"name": "Size", "value": "42"}],
        )

        response = await client.put(
            f"/api/products/{created['id']}",
            json={
                "sku": "SKU-1",
                "name": "Trail Runner",
                "price": 10,
                "attributes": [{"name": "Material", "value": "Mesh"}],
            },
        )

        assert [a["name"] for a in response.json()["attributes"]] == ["Material"]

    @pytest.mark.asyncio
    async def test_negative_price_update_is_rejected(self, client: httpx.AsyncClient) -> None:
        """A rejected update leaves the stored price at 10.00."""
        created = await create_product(client, sku="SKU-1", price=10.00)

        response = await client.put(
            f"/api/products/{created['id']}",
            json={"sku": "SKU-1", "name": "Trail Runner", "price": -5},
        )

        assert response.status_code == 400
        stored = (await client.get(f"/api/products/{created['id']}")).json()
        assert stored["price"] == 10.0

    @pytest.mark.asyncio
    async def test_delete_and_deactivate(self, client: httpx.AsyncClient) -> None:
        """Deactivation hides the product; deletion removes it."""
        first = await create_product(client, sku="A")
        second = await create_product(client, sku="B")

        deactivated = await client.patch(f"/api/products/{first['id']}/deactivate")
        deleted = await client.delete(f"/api/products/{second['id']}")

        assert deactivated.status_code == 204
        assert deleted.status_code == 204
        assert (await client.get("/api/products")).json()["content"] == []
        assert (await client.get(f"/api/products/{first['id']}")).json()["isActive"] is False
        assert (await client.get(f"/api/products/{second['id']}")).status_code == 404
