from sqlalchemy import func, select

from conftest import auth_headers
from food_ordering.models import AuditLog, FoodItem


FOOD_PAYLOAD = {
    "name": "Paneer Tikka",
    "description": "Grilled cottage cheese",
    "category": "Starters",
    "price": 249.0,
    "prepTime": "20 min",
    "ingredients": ["paneer", "yogurt", "spices"],
}


async def _count_foods(session_factory):
    async with session_factory() as session:
        return await session.scalar(select(func.count(FoodItem.id)))


async def test_list_foods_is_public(client, make_food):
    await make_food("Margherita", "100.00")
    await make_food("Cola", "50.00", category="Drinks", is_available=False)

    resp = await client.get("/foods/")

    assert resp.status_code == 200
    assert [f["name"] for f in resp.json()] == ["Margherita", "Cola"]

    drinks = await client.get("/foods/", params={"category": "Drinks"})
    assert [f["name"] for f in drinks.json()] == ["Cola"]

    available = await client.get("/foods/", params={"available": "true"})
    assert [f["name"] for f in available.json()] == ["Margherita"]


async def test_get_food(client, make_food):
    food = await make_food("Margherita", "100.00")

    resp = await client.get(f"/foods/{food.id}")

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == food.id
    assert body["price"] == 100
    assert body["rating"] == 0
    assert body["reviews"] == 0
    assert body["isAvailable"] is True


async def test_get_food_not_found_vs_invalid_id(client):
    missing = await client.get("/foods/12345")
    assert missing.status_code == 404
    assert missing.json() == {"message": "Food item not found"}

    malformed = await client.get("/foods/not-an-id")
    assert malformed.status_code == 400
    assert malformed.json() == {"message": "Invalid food ID"}


async def test_create_food(client, admin, audit, session_factory):
    resp = await client.post("/foods/", json=FOOD_PAYLOAD, headers=auth_headers(admin))

    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Food item added successfully!"
    assert body["food"]["name"] == "Paneer Tikka"
    assert body["food"]["prepTime"] == "20 min"
    assert body["food"]["ingredients"] == ["paneer", "yogurt", "spices"]

    await audit.drain()
    async with session_factory() as session:
        entry = (await session.execute(select(AuditLog))).scalars().one()
    assert entry.action == "Add Food"
    assert entry.user_id == admin.id


async def test_create_food_missing_price(client, admin, session_factory):
    payload = {k: v for k, v in FOOD_PAYLOAD.items() if k != "price"}

    resp = await client.post("/foods/", json=payload, headers=auth_headers(admin))

    assert resp.status_code == 400
    assert "price" in resp.json()["message"]
    assert await _count_foods(session_factory) == 0


async def test_create_food_requires_admin(client, customer, session_factory):
    resp = await client.post("/foods/", json=FOOD_PAYLOAD, headers=auth_headers(customer))

    assert resp.status_code == 403
    assert await _count_foods(session_factory) == 0


async def test_update_food_partial(client, admin, make_food):
    food = await make_food("Margherita", "100.00")

    resp = await client.put(
        f"/foods/{food.id}", json={"price": 120, "isAvailable": False}, headers=auth_headers(admin)
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 120
    assert body["isAvailable"] is False
    assert body["name"] == "Margherita"


async def test_update_missing_food(client, admin):
    resp = await client.put("/foods/999", json={"price": 120}, headers=auth_headers(admin))

    assert resp.status_code == 404


async def test_delete_food(client, admin, make_food, session_factory):
    food = await make_food()

    resp = await client.delete(f"/foods/{food.id}", headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.json() == {"message": "Food deleted successfully"}
    assert await _count_foods(session_factory) == 0

    again = await client.delete(f"/foods/{food.id}", headers=auth_headers(admin))
    assert again.status_code == 404

    malformed = await client.delete("/foods/abc", headers=auth_headers(admin))
    assert malformed.status_code == 400


async def test_review_updates_mean_rating(client, make_user, make_food):
    food = await make_food()
    first, second, third = [await make_user(name) for name in ("Ann", "Ben", "Cat")]

    resp = await client.post(
        f"/foods/{food.id}/review", json={"rating": 4, "comment": "Good"}, headers=auth_headers(first)
    )
    assert resp.status_code == 201
    assert resp.json()["averageRating"] == 4

    resp = await client.post(f"/foods/{food.id}/review", json={"rating": 5}, headers=auth_headers(second))
    assert resp.json()["averageRating"] == 4.5

    resp = await client.post(f"/foods/{food.id}/review", json={"rating": 3}, headers=auth_headers(third))
    body = resp.json()
    assert body["averageRating"] == 4.0
    assert [r["rating"] for r in body["reviews"]] == [4, 5, 3]
    assert body["reviews"][0]["userName"] == "Ann"

    detail = (await client.get(f"/foods/{food.id}")).json()
    assert detail["reviews"] == 3
    assert detail["rating"] == 4.0


async def test_duplicate_review_is_conflict(client, customer, make_food):
    food = await make_food()
    await client.post(f"/foods/{food.id}/review", json={"rating": 5}, headers=auth_headers(customer))

    resp = await client.post(f"/foods/{food.id}/review", json={"rating": 1}, headers=auth_headers(customer))

    assert resp.status_code == 409
    assert resp.json() == {"message": "You have already reviewed this food."}
    detail = (await client.get(f"/foods/{food.id}")).json()
    assert detail["reviews"] == 1
    assert detail["rating"] == 5


async def test_review_validation_and_missing_food(client, customer, make_food):
    food = await make_food()

    out_of_range = await client.post(
        f"/foods/{food.id}/review", json={"rating": 6}, headers=auth_headers(customer)
    )
    assert out_of_range.status_code == 400

    missing = await client.post("/foods/999/review", json={"rating": 4}, headers=auth_headers(customer))
    assert missing.status_code == 404

    anonymous = await client.post(f"/foods/{food.id}/review", json={"rating": 4})
    assert anonymous.status_code == 401


async def test_list_reviews(client, customer, make_food):
    food = await make_food()
    await client.post(f"/foods/{food.id}/review", json={"rating": 2, "comment": "Cold"}, headers=auth_headers(customer))

    resp = await client.get(f"/foods/{food.id}/reviews")

    assert resp.status_code == 200
    assert [(r["rating"], r["comment"], r["userId"]) for r in resp.json()] == [(2, "Cold", customer.id)]


async def test_update_food_clears_optional_fields(client, admin, make_food):
    food = await make_food("Margherita", "100.00", image="/img/margherita.png", nutrition_info={"kcal": 800})
    headers = auth_headers(admin)

    resp = await client.put(f"/foods/{food.id}", json={"image": None, "nutritionInfo": None}, headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["image"] is None
    assert body["nutritionInfo"] is None
    assert body["name"] == "Margherita"

    required = await client.put(f"/foods/{food.id}", json={"name": None}, headers=headers)
    assert required.status_code == 400
    assert required.json() == {"message": "Fields cannot be empty: name"}
    assert (await client.get(f"/foods/{food.id}")).json()["name"] == "Margherita"
