import datetime as dt

import pytest
from fastapi.testclient import TestClient

from talks.main import create_app


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))


def login(client: TestClient, identifier: str = "GhostRoot", password: str = "x"):
    response = client.post("/api/auth/login", json={"identifier": identifier, "password": password})
    assert response.status_code == 200
    return response.json()


def test_health(client):
    assert client.get("/healthz").json() == {"status": "ok"}


def test_explorer_defaults_to_first_upcoming_page(client):
    response = client.get("/api/meetings")
    assert response.status_code == 200
    data = response.json()
    assert data["tab"] == "UPCOMING"
    assert data["total"] == 55
    assert data["total_pages"] == 6
    assert data["page"] == 0
    assert [m["id"] for m in data["items"]] == [f"upcoming-{i}" for i in range(10)]


def test_explorer_out_of_range_page_stays_on_first(client):
    data = client.get("/api/meetings", params={"tab": "PAST", "page": 6}).json()
    assert data["page"] == 0
    data = client.get("/api/meetings", params={"tab": "PAST", "page": 5}).json()
    assert data["page"] == 5
    assert (data["first"], data["last"], data["total"]) == (51, 60, 60)


def test_explorer_filters_inside_tab(client):
    data = client.get("/api/meetings", params={"tab": "LIVE", "q": "cloud"}).json()
    assert data["total"] > 0
    assert all(m["status"] == "LIVE" for m in data["items"])
    assert all(
        "cloud" in m["title"].lower() or any("cloud" in t.lower() for t in m["tags"])
        for m in data["items"]
    )


def test_featured_window(client):
    data = client.get("/api/meetings/featured").json()
    assert [m["id"] for m in data["items"]] == [f"upcoming-{i}" for i in range(4)]
    assert data["has_prev"] is False

    data = client.get("/api/meetings/featured", params={"offset": 51}).json()
    assert data["offset"] == 51
    assert data["has_next"] is False

    data = client.get("/api/meetings/featured", params={"offset": 52}).json()
    assert data["offset"] == 0


def test_get_meeting_not_found(client):
    response = client.get("/api/meetings/does-not-exist")
    assert response.status_code == 404
    assert response.json()["detail"] == "Meeting not found"


def test_get_meeting_includes_capacity(client):
    data = client.get("/api/meetings/live-0").json()
    assert data["capacity_percent"] == 80
    assert data["can_book"] is False


def test_booking_requires_login(client):
    assert client.post("/api/meetings/upcoming-0/book").status_code == 403


def test_booking_increments_until_full(client):
    login(client)
    start = client.get("/api/meetings/upcoming-0").json()["booked_slots"]

    for expected in range(start + 1, 16):
        assert client.post("/api/meetings/upcoming-0/book").json()["booked_slots"] == expected

    data = client.post("/api/meetings/upcoming-0/book").json()
    assert data["booked_slots"] == 15
    assert data["is_full"] is True
    assert data["can_book"] is False


def test_booking_past_meeting_is_noop(client):
    login(client)
    data = client.post("/api/meetings/past-0/book").json()
    assert data["booked_slots"] == 15


def test_create_meeting_in_past_is_rejected(client):
    login(client)
    yesterday = (dt.date.today() - dt.timedelta(days=1)).isoformat()
    response = client.post(
        "/api/meetings",
        json={"title": "Yesterday's news", "date": yesterday, "start_time": "10:00"},
    )
    assert response.status_code == 400
    titles = [m["title"] for m in client.get("/api/meetings", params={"q": "Yesterday"}).json()["items"]]
    assert titles == []


def test_create_meeting_is_listed_first(client):
    login(client)
    tomorrow = (dt.date.today() + dt.timedelta(days=1)).isoformat()
    response = client.post(
        "/api/meetings",
        json={
            "title": "Fuzzing Firmware",
            "description": "AFL++ on embedded targets",
            "date": tomorrow,
            "start_time": "10:00",
            "max_slots": 6,
            "tags": "Hardware, Fuzzing",
        },
    )
    assert response.status_code == 201
    created = response.json()
    assert created["booked_slots"] == 1
    assert created["host"] == "Alex Rivers"
    assert created["host_id"] == "u1"

    first = client.get("/api/meetings").json()["items"][0]
    assert first["id"] == created["id"]

    hosted = client.get("/api/users/GhostRoot/meetings").json()
    assert created["id"] in [m["id"] for m in hosted]


def test_draft_session(client, advisor):
    login(client)
    data = client.post("/api/meetings/draft", json={"topic": "Heap Exploits"}).json()
    assert data["title"].startswith("Heap Exploits")
    assert data["tags"] == ["Binary", "Exploit Dev"]


def test_draft_session_failure_is_reported(client, advisor):
    login(client)
    advisor.fail = True
    response = client.post("/api/meetings/draft", json={"topic": "Heap Exploits"})
    assert response.status_code == 502


def test_room_chat_with_ai(client, advisor):
    login(client)
    joined = client.post("/api/rooms/upcoming-0/join").json()
    assert joined["content"] == "WHITEBOARD"
    assert joined["is_host"] is True

    posted = client.post("/api/rooms/upcoming-0/messages", json={"text": "/ai What is a buffer overflow?"}).json()
    assert posted["message"]["sender"] == "You"
    assert posted["ai_pending"] is True

    state = client.get("/api/rooms/upcoming-0").json()
    assert [m["sender"] for m in state["messages"]] == ["System", "You", "Nexus AI"]
    assert state["ai_thinking"] is False
    assert advisor.queries == ["What is a buffer overflow?"]


def test_room_ai_failure_keeps_only_user_message(client, advisor):
    advisor.fail = True
    client.post("/api/rooms/live-0/join")
    client.post("/api/rooms/live-0/messages", json={"text": "/ai hello"})
    state = client.get("/api/rooms/live-0").json()
    assert [m["sender"] for m in state["messages"]] == ["System", "You"]


def test_room_non_host_cannot_share_screen(client):
    login(client, "admin", "adminpassword123")
    client.post("/api/rooms/upcoming-0/join")
    state = client.post("/api/rooms/upcoming-0/screen-share").json()
    assert state["content"] == "WHITEBOARD"
    assert state["controls_enabled"] is False


def test_room_host_screen_share_lifecycle(client):
    login(client)
    client.post("/api/rooms/upcoming-0/join")
    assert client.post("/api/rooms/upcoming-0/screen-share").json()["content"] == "SCREEN_SHARE"
    assert client.post("/api/rooms/upcoming-0/screen-share/ended").json()["content"] == "WHITEBOARD"
    assert client.post("/api/rooms/upcoming-0/content", json={"content": "CAMERA"}).json()["content"] == "CAMERA"
    assert client.post("/api/rooms/upcoming-0/content", json={"content": "SCREEN_SHARE"}).status_code == 400


def test_room_must_be_joined(client):
    assert client.get("/api/rooms/live-0").status_code == 404
    assert client.post("/api/rooms/missing/join").status_code == 404


def test_leaving_room_discards_state(client):
    client.post("/api/rooms/live-0/join")
    client.post("/api/rooms/live-0/messages", json={"text": "hi"})
    assert client.delete("/api/rooms/live-0").status_code == 204
    state = client.post("/api/rooms/live-0/join").json()
    assert [m["sender"] for m in state["messages"]] == ["System"]


def test_user_search_and_profile(client):
    assert client.get("/api/users/search", params={"q": ""}).json() == []
    assert [u["username"] for u in client.get("/api/users/search", params={"q": "alex"}).json()] == ["GhostRoot"]
    assert client.get("/api/users/GhostRoot").json()["real_name"] == "Alex Rivers"
    assert client.get("/api/users/nobody").status_code == 404


def test_signup_validation(client):
    response = client.post(
        "/api/auth/signup", json={"username": "neo", "email": "bad", "password": "longenough"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid email format."
    assert client.get("/api/auth/me").status_code == 401


def test_signup_then_me_then_logout(client):
    response = client.post(
        "/api/auth/signup", json={"username": "neo", "email": "neo@z.io", "password": "longenough"}
    )
    assert response.status_code == 201
    assert client.get("/api/auth/me").json()["username"] == "neo"
    assert client.post("/api/auth/logout").status_code == 204
    assert client.get("/api/auth/me").status_code == 401


def test_admin_endpoints_require_admin(client):
    assert client.get("/api/admin/users").status_code == 403
    login(client)
    assert client.get("/api/admin/users").status_code == 403


def test_admin_role_is_protected(client):
    login(client, "admin", "adminpassword123")
    response = client.put("/api/admin/users/admin-001", json={"role": "NORMAL"})
    assert response.status_code == 409
    assert client.delete("/api/admin/users/admin-001").status_code == 409

    promoted = client.put("/api/admin/users/u1", json={"role": "MANAGER"}).json()
    assert promoted["role"] == "MANAGER"

    created = client.post("/api/admin/users", json={"username": "analyst", "role": "PREMIUM"})
    assert created.status_code == 201
    assert len(client.get("/api/admin/users").json()) == 3
    assert len(client.get("/api/admin/users/u1/activities").json()) == 4


def test_admin_editing_own_account_refreshes_me(client):
    login(client, "admin", "adminpassword123")
    client.put("/api/admin/users/admin-001", json={"bio": "Rotated keys."})
    assert client.get("/api/auth/me").json()["bio"] == "Rotated keys."

    client.post("/api/admin/users", json={"username": "root2", "role": "ADMIN"})
    assert client.delete("/api/admin/users/admin-001").status_code == 204
    assert client.get("/api/auth/me").status_code == 401


def test_admin_rename_to_blank_is_rejected(client):
    login(client, "admin", "adminpassword123")
    response = client.put("/api/admin/users/u1", json={"username": "  "})
    assert response.status_code == 400
    assert client.get("/api/users/GhostRoot").status_code == 200
