# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Tests for the Member Service HTTP API.
Run: pytest test_main.py -v
"""
import pytest
from httpx import AsyncClient

from main import app
from member_service.core.dependencies import get_member_service
from member_service.middleware import normalize_path
from member_service.repositories.memory_repository import InMemoryMemberRepository
from member_service.services.member_service import MemberService

pytestmark = pytest.mark.anyio

BASE = "/api/v1/members"


async def _create(client, name, n, upline_id=None):
    body = {"name": name, "phone": f"+1555{n:07d}", "email": f"{name.lower()}@example.com"}
    if upline_id is not None:
        body["uplineId"] = upline_id
    resp = await client.post(BASE, json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ── Health & Metrics ──────────────────────────────────────────────────────

class TestSystem:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.json()["service"] == "member-service"

    async def test_readiness_reports_store(self, client: AsyncClient):
        await _create(client, "Alice", 1)
        resp = await client.get("/health/ready")
        assert resp.status_code == 200
        assert resp.json()["members"] == 1

    async def test_readiness_fails_when_store_down(self, client: AsyncClient, repo, monkeypatch):
        async def boom():
            raise ConnectionError("store offline")

        monkeypatch.setattr(repo, "verify_connection", boom)
        resp = await client.get("/health/ready")
        assert resp.status_code == 503

    async def test_metrics_endpoint(self, client: AsyncClient):
        await _create(client, "Alice", 1)
        resp = await client.get("/metrics")
        assert resp.status_code == 200
        assert "members_created_total" in resp.text

    async def test_request_id_propagated(self, client: AsyncClient):
        resp = await client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert resp.headers["X-Request-ID"] == "abc-123"

    async def test_request_id_generated(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.headers["X-Request-ID"]


def test_normalize_path():
    assert normalize_path("/api/v1/members/42") == "/api/v1/members/{param}"
    assert normalize_path("/api/v1/members/cascade/7") == "/api/v1/members/cascade/{param}"
    assert normalize_path("/") == "/"


# ── Create ────────────────────────────────────────────────────────────────

class TestCreate:
    async def test_create_root(self, client: AsyncClient):
        resp = await client.post(BASE, json={
            "name": " Alice ", "phone": "+15550001", "email": "Alice@Example.com",
        })
        assert resp.status_code == 201
        assert resp.json() == {
            "id": 1, "name": "Alice", "address": "", "phone": "+15550001",
            "email": "alice@example.com", "uplineId": None,
        }

    async def test_scenario_spills_to_first_downline(self, client: AsyncClient):
        a = await _create(client, "A", 1)
        b = await _create(client, "B", 2, a["id"])
        c = await _create(client, "C", 3, a["id"])
        d = await _create(client, "D", 4, a["id"])
        assert b["uplineId"] == a["id"]
        assert c["uplineId"] == a["id"]
        assert d["uplineId"] == b["id"]

    async def test_duplicate_is_400(self, client: AsyncClient):
        await _create(client, "Alice", 1)
        resp = await client.post(BASE, json={
            "name": "Other", "phone": "+15550000001", "email": "x@example.com",
        })
        assert resp.status_code == 400

    async def test_unknown_upline_is_400(self, client: AsyncClient):
        resp = await client.post(BASE, json={
            "name": "Bob", "phone": "1", "email": "bob@example.com", "uplineId": 99,
        })
        assert resp.status_code == 400

    async def test_missing_fields_is_422(self, client: AsyncClient):
        resp = await client.post(BASE, json={"name": "Bob"})
        assert resp.status_code == 422

    async def test_bad_email_is_422(self, client: AsyncClient):
        resp = await client.post(BASE, json={"name": "Bob", "phone": "1", "email": "nope"})
        assert resp.status_code == 422


# ── Update ────────────────────────────────────────────────────────────────

class TestUpdate:
    async def test_update_fields(self, client: AsyncClient):
        alice = await _create(client, "Alice", 1)
        resp = await client.put(f"{BASE}/{alice['id']}", json={"address": "1 Main St"})
        assert resp.status_code == 200
        assert resp.json() == {**alice, "address": "1 Main St"}

    async def test_update_missing_is_404(self, client: AsyncClient):
        resp = await client.put(f"{BASE}/12", json={"name": "Ghost"})
        assert resp.status_code == 404

    async def test_self_upline_is_400(self, client: AsyncClient):
        alice = await _create(client, "Alice", 1)
        resp = await client.put(f"{BASE}/{alice['id']}", json={"uplineId": alice["id"]})
        assert resp.status_code == 400

    async def test_explicit_null_upline_detaches(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        kid = await _create(client, "Kid", 2, root["id"])
        resp = await client.put(f"{BASE}/{kid['id']}", json={"uplineId": None})
        assert resp.status_code == 200
        assert resp.json()["uplineId"] is None

    async def test_blank_name_is_422(self, client: AsyncClient):
        alice = await _create(client, "Alice", 1)
        resp = await client.put(f"{BASE}/{alice['id']}", json={"name": "   "})
        assert resp.status_code == 422

    async def test_name_and_phone_are_stripped(self, client: AsyncClient):
        alice = await _create(client, "Alice", 1)
        resp = await client.put(f"{BASE}/{alice['id']}", json={"name": " Alicia ", "phone": " +15559990000 "})
        assert resp.status_code == 200
        assert resp.json()["name"] == "Alicia"
        assert resp.json()["phone"] == "+15559990000"

    async def test_padded_phone_of_other_member_is_400(self, client: AsyncClient):
        alice = await _create(client, "Alice", 1)
        bob = await _create(client, "Bob", 2)
        resp = await client.put(f"{BASE}/{bob['id']}", json={"phone": f"  {alice['phone']} "})
        assert resp.status_code == 400
        [hit] = (await client.get(BASE, params={"q": "bob"})).json()
        assert hit["phone"] == bob["phone"]


# ── Tree & Search ─────────────────────────────────────────────────────────

class TestTreeAndSearch:
    async def test_empty_tree(self, client: AsyncClient):
        resp = await client.get(f"{BASE}/tree")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_tree_shape(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        kid = await _create(client, "Kid", 2, root["id"])
        resp = await client.get(f"{BASE}/tree")
        [tree] = resp.json()
        assert tree["id"] == root["id"]
        assert tree["attributes"] == {
            "email": "root@example.com", "phone": root["phone"], "uplineId": None,
        }
        assert tree["children"][0]["id"] == kid["id"]
        assert "children" not in tree["children"][0]

    async def test_search(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        await _create(client, "Kid", 2, root["id"])
        resp = await client.get(BASE, params={"q": "KID"})
        assert resp.status_code == 200
        [hit] = resp.json()
        assert hit["upline"] == {"id": root["id"], "name": "Root"}
        assert hit["downlines"] == []


# ── Delete ────────────────────────────────────────────────────────────────

class TestDelete:
    async def test_delete_with_downlines_is_409(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        await _create(client, "Kid", 2, root["id"])
        resp = await client.delete(f"{BASE}/{root['id']}")
        assert resp.status_code == 409
        assert len((await client.get(BASE)).json()) == 2

    async def test_delete_leaf(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        kid = await _create(client, "Kid", 2, root["id"])
        resp = await client.delete(f"{BASE}/{kid['id']}")
        assert resp.status_code == 200
        assert resp.json() == kid

    async def test_delete_missing_is_404(self, client: AsyncClient):
        resp = await client.delete(f"{BASE}/3")
        assert resp.status_code == 404

    async def test_cascade(self, client: AsyncClient):
        root = await _create(client, "Root", 1)
        for n, name in enumerate(("A", "B", "C", "D"), start=2):
            await _create(client, name, n, root["id"])
        resp = await client.delete(f"{BASE}/cascade/{root['id']}")
        assert resp.status_code == 200
        assert resp.json() == {"deleted": root["id"], "count": 5}
        assert (await client.get(f"{BASE}/tree")).json() == []

    async def test_cascade_missing_is_404(self, client: AsyncClient):
        resp = await client.delete(f"{BASE}/cascade/8")
        assert resp.status_code == 404

    async def test_cascade_racing_new_downline_is_409(self, client: AsyncClient):
        repo = LateDownlineRepository(hidden_under=2)
        service = MemberService(repo)
        app.dependency_overrides[get_member_service] = lambda: service
        root = await service.create_member(name="Root", phone="1", email="root@example.com")
        kid = await service.create_member(name="Kid", phone="2", email="kid@example.com",
                                          upline_id=root["id"])
        await service.create_member(name="Late", phone="3", email="late@example.com",
                                    upline_id=kid["id"])

        resp = await client.delete(f"{BASE}/cascade/{root['id']}")
        assert resp.status_code == 409
        assert await repo.get(kid["id"]) is not None


class LateDownlineRepository(InMemoryMemberRepository):
    """Hides one member's downlines from listings, as if they arrived after the cascade read them."""

    def __init__(self, hidden_under):
        super().__init__()
        self._hidden_under = hidden_under

    async def list_downlines(self, upline_id):
        if upline_id == self._hidden_under:
            return []
        return await super().list_downlines(upline_id)
