import json
from concurrent.futures import ThreadPoolExecutor
import pytest
from fastapi.testclient import TestClient
from kitchen.api.api_run import app
from kitchen.api.routes.recipes import use_recipe_endpoint


@pytest.fixture
def client(data_files):
    with TestClient(app) as c:
        yield c


def _alfredo_payload(**overrides):
    body = {
        "name": "Chicken Alfredo Pasta",
        "servings": 4,
        "prepTime": 30,
        "sellingPrice": 45,
        "ingredients": [
            {"type": "food", "foodSupplyId": "fs-1", "quantity": 500},
            {"type": "food", "foodSupplyId": "fs-2", "quantity": 400},
            {"type": "food", "foodSupplyId": "fs-3", "quantity": 250},
            {"type": "food", "foodSupplyId": "fs-4", "quantity": 100},
        ],
    }
    body.update(overrides)
    return body


def _create_sauce(client, **overrides):
    body = {
        "name": "Alfredo Sauce", "servings": 4, "isSubrecipe": True,
        "ingredients": [
            {"type": "food", "foodSupplyId": "fs-3", "quantity": 250, "wastePercentage": 20},
            {"type": "food", "foodSupplyId": "fs-4", "quantity": 100},
        ],
    }
    body.update(overrides)
    resp = client.post("/api/recipes", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_recipe_stores_cost_snapshot(client, data_files):
    resp = client.post("/api/recipes", json=_alfredo_payload())
    assert resp.status_code == 201, resp.text
    data = resp.json()
    assert data["total_cost"] == pytest.approx(35.0)
    assert data["cost_per_serving"] == pytest.approx(8.75)
    assert data["ingredients"][0]["name"] == "Chicken Breast"

    stored = json.loads(data_files["recipes"].read_text(encoding="utf-8"))
    assert stored[0]["id"] == data["id"]
    assert stored[0]["total_cost"] == pytest.approx(35.0)


def test_waste_percentage_is_clamped_on_save(client):
    body = _alfredo_payload(ingredients=[{"type": "food", "foodSupplyId": "fs-1", "quantity": 500,
                                          "wastePercentage": 250}])
    data = client.post("/api/recipes", json=body).json()
    assert data["ingredients"][0]["waste_percentage"] == 100
    assert data["total_cost"] == pytest.approx(30.0)


def test_missing_fields_is_400(client):
    resp = client.post("/api/recipes", json={"name": "No ingredients", "servings": 2, "ingredients": []})
    assert resp.status_code == 400
    assert resp.json()["detail"]["error"] == "Missing required fields"


def test_unknown_references_are_404(client):
    body = _alfredo_payload(ingredients=[{"type": "food", "foodSupplyId": "fs-404", "quantity": 1}])
    resp = client.post("/api/recipes", json=body)
    assert resp.status_code == 404
    assert "fs-404" in resp.json()["detail"]

    body = _alfredo_payload(ingredients=[{"type": "subrecipe", "subRecipeId": "ghost", "quantity": 1}])
    assert client.post("/api/recipes", json=body).status_code == 404


def test_only_flagged_subrecipes_can_be_nested(client):
    plain = client.post("/api/recipes", json=_alfredo_payload()).json()
    body = _alfredo_payload(name="Nested", ingredients=[{"type": "subrecipe", "subRecipeId": plain["id"]}])
    resp = client.post("/api/recipes", json=body)
    assert resp.status_code == 400
    assert "not a subrecipe" in resp.json()["detail"]


def test_subrecipe_cost_and_detail_breakdown(client):
    sauce = _create_sauce(client)
    # cream 8 + 1.6 waste, parmesan 7 -> 16.6 / 4
    assert sauce["cost_per_serving"] == pytest.approx(4.15)

    bowl = client.post("/api/recipes", json={
        "name": "Chicken Pasta Bowl", "servings": 2, "sellingPrice": 30,
        "ingredients": [
            {"type": "food", "foodSupplyId": "fs-1", "quantity": 500, "wastePercentage": 10},
            {"type": "subrecipe", "subRecipeId": sauce["id"], "quantity": 2},
        ],
    }).json()
    assert bowl["total_cost"] == pytest.approx(16.5 + 8.3)

    detail = client.get(f"/api/recipes/{bowl['id']}").json()
    assert detail["total_waste_amount"] == pytest.approx(1.5 + 3.2)
    assert detail["net_after_waste"] == pytest.approx(30 - 4.7)
    assert detail["profit"] == pytest.approx(30 - 24.8)
    assert detail["usage_count"] == 0
    assert detail["current_costs"]["cost_per_serving"] == pytest.approx(12.4)
    assert [row["depth"] for row in detail["flattened_ingredients"]] == [0, 0, 1, 1]


def test_list_filters_subrecipes(client):
    _create_sauce(client)
    client.post("/api/recipes", json=_alfredo_payload())
    assert len(client.get("/api/recipes").json()) == 2
    only = client.get("/api/recipes", params={"subrecipes_only": "true"}).json()
    assert [r["name"] for r in only] == ["Alfredo Sauce"]
    assert "total_waste_amount" in only[0]


def test_update_rejects_cycles(client):
    sauce = _create_sauce(client)
    base = _create_sauce(client, name="Base", ingredients=[{"type": "subrecipe", "subRecipeId": sauce["id"]}])
    resp = client.put(f"/api/recipes/{sauce['id']}", json={
        "name": "Alfredo Sauce", "servings": 4, "isSubrecipe": True,
        "ingredients": [{"type": "subrecipe", "subRecipeId": base["id"]}],
    })
    assert resp.status_code == 400
    assert "Circular reference detected" in resp.json()["detail"]


def test_snapshot_is_kept_until_refresh(client):
    recipe = client.post("/api/recipes", json=_alfredo_payload()).json()
    assert client.put("/api/food-supply/fs-1", json={"pricePerUnit": 0.05}).status_code == 200

    detail = client.get(f"/api/recipes/{recipe['id']}").json()
    assert detail["total_cost"] == pytest.approx(35.0)
    assert detail["current_costs"]["total_cost"] == pytest.approx(45.0)

    refreshed = client.post(f"/api/recipes/{recipe['id']}/refresh-costs").json()
    assert refreshed["total_cost"] == pytest.approx(45.0)
    assert refreshed["cost_per_serving"] == pytest.approx(11.25)


def test_cost_preview_for_unsaved_form(client):
    resp = client.post("/api/recipes/cost-preview", json={
        "servings": 0, "sellingPrice": 20,
        "ingredients": [
            {"type": "food", "foodSupplyId": "fs-1", "quantity": 500, "wastePercentage": 10},
            {"type": "food", "foodSupplyId": "missing", "quantity": 3},
        ],
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_cost"] == pytest.approx(16.5)
    assert data["cost_per_serving"] == pytest.approx(16.5)
    assert data["net_after_waste"] == pytest.approx(18.5)
    assert data["unresolved"] == [{"type": "food", "id": "missing"}]


def test_use_recipe_deducts_stock_and_tracks_popularity(client):
    recipe = client.post("/api/recipes", json=_alfredo_payload()).json()
    resp = client.post(f"/api/recipes/{recipe['id']}/use", json={"servingsUsed": 2, "kitchenId": "main"})
    assert resp.status_code == 200, resp.text
    usage = resp.json()["recipe_usage"]
    assert usage["cost"] == pytest.approx(70.0)
    assert usage["selling_price"] == pytest.approx(90.0)
    assert usage["profit"] == pytest.approx(20.0)

    chicken = client.get("/api/food-supply/fs-1").json()
    assert chicken["quantity"] == pytest.approx(4000)

    popular = client.get("/api/recipes", params={"popular": "true"}).json()
    assert popular[0]["id"] == recipe["id"]
    assert popular[0]["usage_count"] == 1


def test_use_recipe_reports_shortages(client):
    recipe = client.post("/api/recipes", json=_alfredo_payload()).json()
    resp = client.post(f"/api/recipes/{recipe['id']}/use", json={"servingsUsed": 20})
    assert resp.status_code == 400
    names = {row["name"] for row in resp.json()["detail"]["insufficient_ingredients"]}
    assert names == {"Chicken Breast", "Fettuccine", "Heavy Cream", "Parmesan"}

    forced = client.post(f"/api/recipes/{recipe['id']}/use", json={"servingsUsed": 20, "forceUse": True})
    assert forced.status_code == 200
    assert client.get("/api/food-supply/fs-4").json()["quantity"] == 0


def test_delete_blocked_while_used_as_subrecipe(client):
    sauce = _create_sauce(client)
    bowl = client.post("/api/recipes", json=_alfredo_payload(
        name="Bowl", ingredients=[{"type": "subrecipe", "subRecipeId": sauce["id"]}])).json()
    assert client.delete(f"/api/recipes/{sauce['id']}").status_code == 400
    assert client.delete(f"/api/recipes/{bowl['id']}").status_code == 200
    assert client.delete(f"/api/recipes/{sauce['id']}").status_code == 200
    assert client.get(f"/api/recipes/{sauce['id']}").status_code == 404


def test_subrecipe_has_no_selling_price_or_profit(client, data_files):
    sauce = _create_sauce(client, sellingPrice=20, ingredients=[
        {"type": "food", "foodSupplyId": "fs-3", "quantity": 250, "wastePercentage": 10},
    ])
    assert sauce["selling_price"] is None
    stored = json.loads(data_files["recipes"].read_text(encoding="utf-8"))
    assert stored[0]["selling_price"] is None

    detail = client.get(f"/api/recipes/{sauce['id']}").json()
    assert detail["total_cost"] == pytest.approx(8.8)
    assert detail["total_waste_amount"] == pytest.approx(0.8)
    assert detail["net_after_waste"] is None
    assert detail["profit"] is None
    assert detail["current_costs"]["profit"] is None

    preview = client.post("/api/recipes/cost-preview", json={
        "isSubrecipe": True, "sellingPrice": 20,
        "ingredients": [{"type": "food", "foodSupplyId": "fs-3", "quantity": 250, "wastePercentage": 10}],
    }).json()
    assert preview["total_cost"] == pytest.approx(8.8)
    assert preview["net_after_waste"] is None
    assert preview["profit"] is None

    usage = client.post(f"/api/recipes/{sauce['id']}/use", json={"servingsUsed": 1}).json()["recipe_usage"]
    assert usage["selling_price"] == 0
    assert usage["profit"] == pytest.approx(-8.8)


def test_concurrent_uses_keep_every_deduction(client, data_files):
    recipe = client.post("/api/recipes", json=_alfredo_payload()).json()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: use_recipe_endpoint(recipe["id"], {"servingsUsed": 1}), range(8)))

    assert all(r["success"] for r in results)
    assert client.get("/api/food-supply/fs-1").json()["quantity"] == pytest.approx(5000 - 8 * 500)
    assert client.get("/api/food-supply/fs-3").json()["quantity"] == pytest.approx(0)
    usages = json.loads(data_files["usages"].read_text(encoding="utf-8"))
    assert len(usages) == 8
