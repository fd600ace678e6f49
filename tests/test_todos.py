from datetime import datetime, timedelta, timezone

from todo_api.models import Todo


def _parsed(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _create(client, user, text="Buy milk"):
    res = client.post("/api/todos", json={"text": text}, headers=user["headers"])
    assert res.status_code == 201, res.text
    return res.json()


def _stats(client, user):
    return client.get("/api/todos/stats", headers=user["headers"]).json()


def test_create_sanitizes_and_defaults(client, alice):
    todo = _create(client, alice, "   Buy milk  ")

    assert todo["text"] == "Buy milk"
    assert todo["is_completed"] is False
    assert todo["user_id"] == alice["id"]
    assert todo["created_at"] == todo["updated_at"]


def test_created_todo_is_only_visible_to_its_owner(client, alice, bob):
    todo = _create(client, alice)

    alice_ids = [t["id"] for t in client.get("/api/todos", headers=alice["headers"]).json()]
    bob_ids = [t["id"] for t in client.get("/api/todos", headers=bob["headers"]).json()]

    assert todo["id"] in alice_ids
    assert todo["id"] not in bob_ids


def test_list_is_newest_first(client, alice, db):
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    for i, text in enumerate(["first", "second", "third"]):
        stamp = base + timedelta(minutes=i)
        db.add(Todo(user_id=alice["id"], text=text, created_at=stamp, updated_at=stamp))
    db.commit()

    texts = [t["text"] for t in client.get("/api/todos", headers=alice["headers"]).json()]

    assert texts == ["third", "second", "first"]


def test_list_by_status(client, alice):
    done = _create(client, alice, "done")
    _create(client, alice, "pending")
    client.patch(f"/api/todos/{done['id']}/toggle", headers=alice["headers"])

    completed = client.get("/api/todos", params={"completed": "true"}, headers=alice["headers"]).json()
    active = client.get("/api/todos", params={"completed": "false"}, headers=alice["headers"]).json()

    assert [t["text"] for t in completed] == ["done"]
    assert [t["text"] for t in active] == ["pending"]


def test_stats_follow_toggle(client, alice):
    todo = _create(client, alice, "Buy milk")
    assert _stats(client, alice) == {"total": 1, "completed": 0, "active": 1}

    client.patch(f"/api/todos/{todo['id']}/toggle", headers=alice["headers"])

    assert _stats(client, alice) == {"total": 1, "completed": 1, "active": 0}


def test_double_toggle_restores_state_and_bumps_updated_at(client, alice):
    todo = _create(client, alice)

    first = client.patch(f"/api/todos/{todo['id']}/toggle", headers=alice["headers"]).json()
    second = client.patch(f"/api/todos/{todo['id']}/toggle", headers=alice["headers"]).json()

    assert first["is_completed"] is True
    assert second["is_completed"] is False
    stamps = [_parsed(t["updated_at"]) for t in (todo, first, second)]
    assert stamps[0] < stamps[1] < stamps[2]


def test_update_text(client, alice):
    todo = _create(client, alice)

    res = client.patch(f"/api/todos/{todo['id']}", json={"text": "  Buy oat milk "}, headers=alice["headers"])

    assert res.status_code == 200
    assert res.json()["text"] == "Buy oat milk"
    assert _parsed(res.json()["updated_at"]) > _parsed(todo["updated_at"])


def test_invalid_text_is_rejected(client, alice):
    todo = _create(client, alice)

    for res in (
        client.post("/api/todos", json={"text": "   "}, headers=alice["headers"]),
        client.post("/api/todos", json={"text": "x" * 501}, headers=alice["headers"]),
        client.patch(f"/api/todos/{todo['id']}", json={"text": ""}, headers=alice["headers"]),
    ):
        assert res.status_code == 400
        assert res.json()["error"]["code"] == "INVALID_ARGUMENT"
        assert res.json()["error"]["field"] == "text"


def test_missing_body_field_is_invalid_argument(client, alice):
    res = client.post("/api/todos", json={}, headers=alice["headers"])

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_ARGUMENT"


def test_remove(client, alice):
    todo = _create(client, alice)

    res = client.delete(f"/api/todos/{todo['id']}", headers=alice["headers"])

    assert res.status_code == 204
    assert client.get("/api/todos", headers=alice["headers"]).json() == []


def test_other_users_cannot_mutate(client, alice, bob):
    todo = _create(client, alice)
    url = f"/api/todos/{todo['id']}"

    for res in (
        client.patch(f"{url}/toggle", headers=bob["headers"]),
        client.patch(url, json={"text": "hijacked"}, headers=bob["headers"]),
        client.delete(url, headers=bob["headers"]),
    ):
        assert res.status_code == 403
        assert res.json()["error"]["code"] == "FORBIDDEN"

    [after] = client.get("/api/todos", headers=alice["headers"]).json()
    assert after == todo


def test_unknown_id_is_not_found(client, alice):
    res = client.patch("/api/todos/does-not-exist/toggle", headers=alice["headers"])

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


def test_requires_authentication(client):
    assert client.get("/api/todos").status_code == 401
    assert client.post("/api/todos", json={"text": "x"}).status_code == 401


def test_create_is_rate_limited_after_burst(client, alice):
    for i in range(5):
        _create(client, alice, f"todo {i}")

    res = client.post("/api/todos", json={"text": "one too many"}, headers=alice["headers"])

    assert res.status_code == 429
    error = res.json()["error"]
    assert error["code"] == "RATE_LIMITED"
    assert error["retry_after_ms"] > 0
    assert res.headers["Retry-After"] == "3"
    assert _stats(client, alice)["total"] == 5


def test_rate_limit_is_per_user(client, alice, bob):
    for i in range(5):
        _create(client, alice, f"todo {i}")

    assert client.post("/api/todos", json={"text": "mine"}, headers=bob["headers"]).status_code == 201


def test_failed_requests_do_not_spend_tokens(client, alice):
    # update_todo allows a burst of 10
    for _ in range(12):
        assert client.patch("/api/todos/missing/toggle", headers=alice["headers"]).status_code == 404

    todo = _create(client, alice)
    res = client.patch(f"/api/todos/{todo['id']}/toggle", headers=alice["headers"])

    assert res.status_code == 200
