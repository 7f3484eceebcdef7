import pytest
from httpx import ASGITransport, AsyncClient
from kitchen.api.api_run import app


@pytest.mark.asyncio
async def test_create_and_fetch_recipe(data_files):
    """Create a recipe and read it back over an async client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        created = await ac.post("/api/recipes", json={
            "name": "Buttered Fettuccine",
            "servings": 2,
            "ingredients": [{"foodSupplyId": "fs-2", "quantity": 200, "wastePercentage": 5}],
        })
        assert created.status_code == 201, created.text
        recipe_id = created.json()["id"]

        resp = await ac.get(f"/api/recipes/{recipe_id}")
    assert resp.status_code == 200
    data = resp.json()
    # 200 * 0.0125 = 2.5 plus 5% waste
    assert data["total_cost"] == pytest.approx(2.625)
    assert data["cost_per_serving"] == pytest.approx(1.3125)
    assert data["ingredients"][0]["type"] == "food"
