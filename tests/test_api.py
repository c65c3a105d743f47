"""HTTP tests for the v1 API against an in-memory database."""
import pytest
from httpx import ASGITransport, AsyncClient

from meetspot.infra.db.session import get_db
from meetspot.infra.messaging.notify import get_notifier
from meetspot.infra.security.jwt import create_access_token
from meetspot.main import app
from meetspot.settings import get_config_store, get_settings


def auth(user_id: str, is_moderator: bool = False) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user_id, is_moderator=is_moderator)}"}


HOST = auth("host")
ALICE = auth("alice")
MOD = auth("mod-1", is_moderator=True)


@pytest.fixture
async def client(session_factory, notifier):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_password():
    store = get_config_store()
    store.update({"admin_password": "s3cret"})
    yield "s3cret"
    store.clear_overrides()


async def _create_activity(client, **body) -> dict:
    payload = {"title": "Climbing", "latitude": 47.0, "longitude": 8.0}
    payload.update(body)
    response = await client.post("/v1/activities", json=payload, headers=HOST)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_missing_or_bad_token(client):
    assert (await client.get("/v1/friends")).status_code == 401
    response = await client.get("/v1/friends", headers={"Authorization": "Bearer nonsense"})
    assert response.status_code == 401


async def test_private_activity_without_password_is_closed(client):
    activity = await _create_activity(client, visibility="private")
    assert activity["has_password"] is False
    assert "password" not in activity

    check = await client.post(
        f"/v1/activities/{activity['id']}/check-access", json={"password": "x"}, headers=ALICE
    )
    assert check.json() == {"can_join": False, "reason": "requiresPassword", "requires_password": False}

    join = await client.post(f"/v1/activities/{activity['id']}/join", json={}, headers=ALICE)
    assert join.status_code == 403
    assert join.json()["reason"] == "requiresPassword"

    host_join = await client.post(f"/v1/activities/{activity['id']}/join", json={}, headers=HOST)
    assert host_join.status_code == 200


async def test_friends_only_flow(client):
    activity = await _create_activity(client, visibility="friends")
    url = f"/v1/activities/{activity['id']}/join"

    denied = await client.post(url, json={}, headers=ALICE)
    assert denied.status_code == 403
    assert denied.json()["reason"] == "requiresFriendship"

    sent = await client.post("/v1/friends/requests", json={"user_id": "host"}, headers=ALICE)
    assert sent.status_code == 201
    assert sent.json()["status"] == "pending"

    duplicate = await client.post("/v1/friends/requests", json={"user_id": "alice"}, headers=HOST)
    assert duplicate.status_code == 400

    accepted = await client.post("/v1/friends/requests/alice/accept", headers=HOST)
    assert accepted.status_code == 200
    assert accepted.json()["user_id"] == "alice"

    status_view = await client.get("/v1/friends/host/status", headers=ALICE)
    assert status_view.json()["are_friends"] is True

    joined = await client.post(url, json={}, headers=ALICE)
    assert joined.status_code == 200
    assert joined.json()["joined_user_ids"] == ["alice"]


async def test_capacity_and_closing(client):
    activity = await _create_activity(client, capacity=1, password="pw")
    url = f"/v1/activities/{activity['id']}"

    assert (await client.post(f"{url}/join", json={"password": "pw"}, headers=ALICE)).status_code == 200
    full = await client.post(f"{url}/join", json={"password": "pw"}, headers=auth("bob"))
    assert full.status_code == 409

    assert (await client.post(f"{url}/close", headers=ALICE)).status_code == 403
    closed = await client.post(f"{url}/close", headers=HOST)
    assert closed.json()["is_closed"] is True

    assert (await client.delete(url, headers=MOD)).status_code == 204
    assert (await client.get(url, headers=HOST)).status_code == 404


async def test_invalid_activity_input(client):
    response = await client.post(
        "/v1/activities",
        json={"title": "X", "latitude": 0, "longitude": 0, "visibility": "secret"},
        headers=HOST,
    )
    assert response.status_code == 422
    response = await client.post("/v1/activities", json={"title": "X"}, headers=HOST)
    assert response.status_code == 422


async def test_verification_review_flow(client, notifier):
    age = await client.post("/v1/verification/age", json={"birth_date": "1990-05-01"}, headers=ALICE)
    assert age.json()["trust_level"] == "basic"

    submitted = await client.post("/v1/verification/id", json={"image_ref": "blob://id"}, headers=ALICE)
    assert submitted.json()["id_document"]["status"] == "pending"

    assert (await client.get("/v1/admin/verifications", headers=ALICE)).status_code == 403
    queue = await client.get("/v1/admin/verifications", headers=MOD)
    assert [r["user_id"] for r in queue.json()] == ["alice"]

    no_reason = await client.post(
        "/v1/admin/verifications/alice/id", json={"decision": "reject"}, headers=MOD
    )
    assert no_reason.status_code == 422

    verified = await client.post(
        "/v1/admin/verifications/alice/id", json={"decision": "verify"}, headers=MOD
    )
    assert verified.json()["trust_level"] == "id_verified"

    again = await client.post(
        "/v1/admin/verifications/alice/id", json={"decision": "verify"}, headers=MOD
    )
    assert again.status_code == 409

    me = await client.get("/v1/verification/me", headers=ALICE)
    assert me.json()["trust_level"] == "id_verified"
    assert [n[2]["trust_level"] for n in notifier.of_type("trust_level_changed")] == [
        "basic",
        "id_verified",
    ]


async def test_underage_submission(client):
    response = await client.post(
        "/v1/verification/age", json={"birth_date": "2020-01-01"}, headers=ALICE
    )
    assert response.status_code == 422


async def test_reports_and_business(client, notifier):
    report = await client.post(
        "/v1/reports", json={"reported_user_id": "troll", "reason": "spam"}, headers=ALICE
    )
    assert report.status_code == 201
    report_id = report.json()["id"]

    assert (await client.get("/v1/admin/reports", headers=ALICE)).status_code == 403
    moved = await client.patch(
        f"/v1/admin/reports/{report_id}", json={"status": "dismissed"}, headers=MOD
    )
    assert moved.json()["status"] == "dismissed"
    assert notifier.of_type("report_status_changed")[0][0] == "alice"

    business = await client.post("/v1/business", json={"business_name": "Cafe"}, headers=HOST)
    assert business.status_code == 201
    business_id = business.json()["id"]
    assert (await client.post("/v1/business", json={"business_name": "Cafe 2"}, headers=HOST)).status_code == 409

    verified = await client.post(
        f"/v1/admin/businesses/{business_id}/status", json={"status": "verified"}, headers=MOD
    )
    body = verified.json()
    assert body["status"] == "verified"
    assert body["verified_by"] == "mod-1"
    assert body["can_promote_activities"] is False

    credits = await client.post(
        f"/v1/business/{business_id}/credits", json={"amount": 3}, headers=HOST
    )
    assert credits.json()["promotion_credits"] == 3
    bad = await client.post(f"/v1/business/{business_id}/credits", json={"amount": 0}, headers=HOST)
    assert bad.status_code == 422

    logs = await client.get("/v1/admin/logs", params={"log_type": "CREDITS_PURCHASED"}, headers=MOD)
    assert [entry["metadata"]["amount"] for entry in logs.json()] == [3]


async def test_admin_login_disabled_without_password(client):
    response = await client.post("/v1/admin/auth", json={"user_id": "mod-1", "password": "x"})
    assert response.status_code == 503


async def test_admin_login(client, admin_password):
    wrong = await client.post("/v1/admin/auth", json={"user_id": "mod-1", "password": "nope"})
    assert wrong.status_code == 401

    response = await client.post(
        "/v1/admin/auth", json={"user_id": "mod-1", "password": admin_password}
    )
    assert response.status_code == 200
    token = response.json()["access_token"]

    reports = await client.get("/v1/admin/reports", headers={"Authorization": f"Bearer {token}"})
    assert reports.status_code == 200
    assert reports.json() == []


@pytest.fixture
def restore_config():
    yield
    get_config_store().clear_overrides()


async def test_config_push_needs_moderator(client, restore_config):
    for path in ("/v1/admin/config", "/v1/admin/config/reload", "/v1/admin/config/clear-overrides"):
        response = await client.post(path, json={"join_max_attempts": 9}, headers=ALICE)
        assert response.status_code == 403, path
    assert get_settings().join_max_attempts != 9


async def test_config_push_reload_and_clear(client, restore_config):
    default = get_settings().moderator_token_expire_minutes

    pushed = await client.post(
        "/v1/admin/config", json={"moderator_token_expire_minutes": default + 30}, headers=MOD
    )
    assert pushed.status_code == 200
    assert get_settings().moderator_token_expire_minutes == default + 30

    bad = await client.post(
        "/v1/admin/config", json={"moderator_token_expire_minutes": "soon"}, headers=MOD
    )
    assert bad.status_code == 400
    assert get_settings().moderator_token_expire_minutes == default + 30

    reloaded = await client.post("/v1/admin/config/reload", headers=MOD)
    assert reloaded.status_code == 200
    assert get_settings().moderator_token_expire_minutes == default + 30

    cleared = await client.post("/v1/admin/config/clear-overrides", headers=MOD)
    assert cleared.status_code == 200
    assert get_settings().moderator_token_expire_minutes == default
