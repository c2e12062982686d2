from datetime import timedelta

from fastapi.testclient import TestClient

from app.services.schedules import CurrentWeekStartDate


def _create_household(client):
    alex = client.post("/api/grocery/createUser", json={"Name": "Alex", "Email": "alex@couple.net"})
    sam = client.post("/api/grocery/createUser", json={"Name": "Sam", "Email": "sam@couple.net"})
    assert alex.status_code == 201
    assert sam.status_code == 201
    couple = client.post(
        "/api/grocery/createCouple",
        json={"User1Id": alex.json()["Id"], "User2Id": sam.json()["Id"]},
    )
    assert couple.status_code == 201
    produce = client.post("/api/grocery/createCategory", json={"Name": "Produce"})
    assert produce.status_code == 201
    return alex.json(), sam.json(), couple.json(), produce.json()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["Status"] == "ok"
    assert payload["Timestamp"]
    assert response.headers["X-Request-Id"]


def test_request_id_is_echoed(client):
    response = client.get("/api/health", headers={"X-Request-Id": "abc-123"})
    assert response.headers["X-Request-Id"] == "abc-123"


def test_create_user_duplicate_email_conflict(client):
    client.post("/api/grocery/createUser", json={"Name": "Alex", "Email": "alex@couple.net"})
    response = client.post(
        "/api/grocery/createUser",
        json={"Name": "Alex Again", "Email": "alex@couple.net"},
    )
    assert response.status_code == 409
    assert "unique" in response.json()["detail"].lower()


def test_create_user_rejects_invalid_email(client):
    response = client.post("/api/grocery/createUser", json={"Name": "Alex", "Email": "not-an-email"})
    assert response.status_code == 422


def test_create_couple_missing_user(client):
    response = client.post("/api/grocery/createCouple", json={"User1Id": 1, "User2Id": 2})
    assert response.status_code == 404
    assert response.json()["detail"] == "User with id 1 does not exist"


def test_categories_round_trip(client):
    client.post("/api/grocery/createCategory", json={"Name": "Produce"})
    client.post("/api/grocery/createCategory", json={"Name": "Dairy"})
    response = client.get("/api/grocery/getCategories")
    assert response.status_code == 200
    assert [entry["Name"] for entry in response.json()] == ["Produce", "Dairy"]


def test_add_item_and_read_current_week(client):
    alex, sam, couple, produce = _create_household(client)

    added = client.post(
        "/api/grocery/addGroceryItem",
        json={
            "CategoryId": produce["Id"],
            "Name": "Bananas",
            "Quantity": "6",
            "AddedByUserId": sam["Id"],
        },
    )
    assert added.status_code == 201
    item = added.json()
    assert item["IsCompleted"] is False
    assert item["CompletedByUserId"] is None

    lists = client.get("/api/grocery/getGroceryLists", params={"coupleId": couple["Id"]})
    assert lists.status_code == 200
    assert len(lists.json()) == 1
    assert lists.json()[0]["WeekStart"] == CurrentWeekStartDate().isoformat()
    assert lists.json()[0]["Id"] == item["ListId"]

    week = client.get("/api/grocery/getCurrentWeekList", params={"coupleId": couple["Id"]})
    assert week.status_code == 200
    entries = week.json()
    assert len(entries) == 1
    assert entries[0]["Name"] == "Bananas"
    assert entries[0]["Category"]["Name"] == "Produce"


def test_add_item_unknown_user(client):
    _, _, _, produce = _create_household(client)
    response = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "Bread", "AddedByUserId": 999},
    )
    assert response.status_code == 404
    assert "999" in response.json()["detail"]


def test_add_item_user_without_couple_conflict(client):
    _, _, _, produce = _create_household(client)
    single = client.post("/api/grocery/createUser", json={"Name": "Jo", "Email": "jo@couple.net"}).json()
    response = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "Bread", "AddedByUserId": single["Id"]},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == f"User with id {single['Id']} is not part of any couple"


def test_add_item_empty_name_is_invalid(client):
    _, sam, _, produce = _create_household(client)
    response = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "", "AddedByUserId": sam["Id"]},
    )
    assert response.status_code == 422


def test_add_item_whitespace_name_is_bad_request(client):
    _, sam, _, produce = _create_household(client)
    response = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "   ", "AddedByUserId": sam["Id"]},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Name is required"


def test_create_grocery_list_is_idempotent(client):
    _, _, couple, _ = _create_household(client)
    next_week = (CurrentWeekStartDate() + timedelta(days=7)).isoformat()
    first = client.post(
        "/api/grocery/createGroceryList",
        json={"CoupleId": couple["Id"], "WeekStart": next_week},
    )
    second = client.post(
        "/api/grocery/createGroceryList",
        json={"CoupleId": couple["Id"], "WeekStart": next_week},
    )
    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["Id"] == second.json()["Id"]
    assert first.json()["WeekStart"] == next_week


def test_create_grocery_list_unknown_couple(client):
    response = client.post(
        "/api/grocery/createGroceryList",
        json={"CoupleId": 8, "WeekStart": "2026-10-12"},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Couple with id 8 does not exist"


def test_toggle_and_remove(client):
    alex, sam, couple, produce = _create_household(client)
    item = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "Kiwi", "AddedByUserId": alex["Id"]},
    ).json()

    done = client.post(
        "/api/grocery/toggleItemCompletion",
        json={"ItemId": item["Id"], "UserId": sam["Id"]},
    )
    assert done.status_code == 200
    assert done.json()["IsCompleted"] is True
    assert done.json()["CompletedByUserId"] == sam["Id"]
    assert done.json()["CompletedAt"] is not None

    undone = client.post(
        "/api/grocery/toggleItemCompletion",
        json={"ItemId": item["Id"], "UserId": alex["Id"]},
    )
    assert undone.json()["IsCompleted"] is False
    assert undone.json()["CompletedByUserId"] is None
    assert undone.json()["CompletedAt"] is None

    removed = client.post("/api/grocery/removeGroceryItem", json={"ItemId": item["Id"]})
    assert removed.status_code == 200
    assert removed.json() == {"Success": True}

    again = client.post("/api/grocery/removeGroceryItem", json={"ItemId": item["Id"]})
    assert again.json() == {"Success": False}

    week = client.get("/api/grocery/getCurrentWeekList", params={"coupleId": couple["Id"]})
    assert week.json() == []


def test_toggle_unknown_item(client):
    alex, _, _, _ = _create_household(client)
    response = client.post(
        "/api/grocery/toggleItemCompletion",
        json={"ItemId": 41, "UserId": alex["Id"]},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Grocery item with id 41 not found"


def test_toggle_by_unknown_user_is_not_found(client):
    alex, _, couple, produce = _create_household(client)
    item = client.post(
        "/api/grocery/addGroceryItem",
        json={"CategoryId": produce["Id"], "Name": "Kiwi", "AddedByUserId": alex["Id"]},
    ).json()

    response = client.post(
        "/api/grocery/toggleItemCompletion",
        json={"ItemId": item["Id"], "UserId": 999},
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "User with id 999 does not exist"

    week = client.get("/api/grocery/getCurrentWeekList", params={"coupleId": couple["Id"]})
    assert week.json()[0]["IsCompleted"] is False


def test_add_item_with_zero_list_id_uses_current_week(client):
    _, sam, couple, produce = _create_household(client)
    response = client.post(
        "/api/grocery/addGroceryItem",
        json={"ListId": 0, "CategoryId": produce["Id"], "Name": "Bread", "AddedByUserId": sam["Id"]},
    )
    assert response.status_code == 201
    lists = client.get("/api/grocery/getGroceryLists", params={"coupleId": couple["Id"]}).json()
    assert [entry["Id"] for entry in lists] == [response.json()["ListId"]]


def test_response_shape_errors_are_not_client_errors(client, monkeypatch):
    from app.modules.grocery import router as grocery_router

    def _wrong_shape(db, name):
        return object()

    monkeypatch.setattr(grocery_router, "CreateCategory", _wrong_shape)
    test_client = TestClient(client.app, raise_server_exceptions=False)
    response = test_client.post("/api/grocery/createCategory", json={"Name": "Bakery"})
    assert response.status_code == 500


def test_current_week_requires_couple_id(client):
    response = client.get("/api/grocery/getCurrentWeekList")
    assert response.status_code == 422


def test_storage_errors_map_to_service_unavailable(client, monkeypatch):
    from sqlalchemy.exc import OperationalError

    from app.modules.grocery import router as grocery_router

    def _broken(db):
        raise OperationalError("SELECT 1", {}, Exception("no such table: categories"))

    monkeypatch.setattr(grocery_router, "ListCategories", _broken)
    response = client.get("/api/grocery/getCategories")
    assert response.status_code == 503
    assert "alembic upgrade head" in response.json()["detail"]
