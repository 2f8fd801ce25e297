"""Client SDK: HTTP wrapper, response normalisation, caching and stores."""
from datetime import datetime

import pytest

from lexdesk.sdk.api import ApiClient, ApiClientError
from lexdesk.sdk.cache import TTLCache
from lexdesk.sdk.dashboard import summarize_dashboard
from lexdesk.sdk.normalize import normalize_collection, unwrap
from lexdesk.sdk.stores import ClientStore, InvoiceStore, NotificationStore, TaskStore, TeamMemberStore


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class FakeApi:
    """Stands in for ApiClient; ``responses`` are returned or raised in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _next(self, method, path, **kwargs):
        self.calls.append((method, path, kwargs))
        response = self.responses.pop(0)
        if callable(response):
            response = response()
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, path, params=None):
        return self._next("GET", path, params=params)

    def request(self, method, path, **kwargs):
        return self._next(method, path, **kwargs)

    def post(self, path, json=None, **kwargs):
        return self._next("POST", path, json=json)

    def put(self, path, json=None, **kwargs):
        return self._next("PUT", path, json=json)

    def patch(self, path, json=None):
        return self._next("PATCH", path, json=json)

    def delete(self, path, params=None):
        return self._next("DELETE", path, params=params)


@pytest.fixture
def api(client):
    api = ApiClient(base_url="http://testserver", session=client)
    api.register("Alice Lawyer", "lawyer@example.com", "secret123", "lawyer")
    return api

# =====================================================
# NORMALISATION & CACHE
# =====================================================

@pytest.mark.parametrize("body, key, expected", [
    ([{"id": 1}], None, [{"id": 1}]),
    ({"success": True, "data": [{"id": 1}]}, None, [{"id": 1}]),
    ({"success": True, "data": {"clients": [{"id": 1}], "total": 1}}, "clients", [{"id": 1}]),
    ({"items": [{"id": 1}], "total": 1}, None, [{"id": 1}]),
    ({"a": {"id": "a"}, "b": {"id": "b"}}, None, [{"id": "a"}, {"id": "b"}]),
    ({"total": 3}, None, []),
    (None, None, []),
    ("oops", None, []),
])
def test_normalize_collection(body, key, expected):
    assert normalize_collection(body, key) == expected


def test_unwrap():
    assert unwrap({"success": True, "message": "ok", "data": {"id": 1}}) == {"id": 1}
    assert unwrap({"id": 1, "data": "payload"}) == {"id": 1, "data": "payload"}


def test_ttl_cache_expiry():
    clock = FakeClock()
    cache = TTLCache(default_ttl=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2, ttl=30)

    clock.now = 9.9
    assert cache.get("a") == 1
    clock.now = 10
    assert cache.get("a") is None
    assert "a" not in cache
    assert "b" in cache

    cache.clear()
    assert cache.get("b", "gone") == "gone"

# =====================================================
# API CLIENT
# =====================================================

def test_api_client_raises_envelope_message(api):
    with pytest.raises(ApiClientError) as exc:
        api.get("/api/clients/not-an-id")
    assert exc.value.status == 400
    assert exc.value.message == "Invalid Client ID"
    assert not exc.value.retryable


def test_api_client_without_token_is_unauthorized(api):
    api.logout()
    with pytest.raises(ApiClientError) as exc:
        api.get("/api/clients")
    assert exc.value.status == 401


def test_retryable_statuses():
    assert ApiClientError(0, "down").retryable
    assert ApiClientError(503, "busy").retryable
    assert not ApiClientError(409, "taken").retryable

# =====================================================
# STORES
# =====================================================

def test_client_store_round_trip(api):
    cache = TTLCache()
    store = ClientStore(api, cache=cache)

    created = store.create({"name": "Acme Ltd", "email": "acme@example.com"})
    assert [item["id"] for item in store.items] == [created["id"]]

    store.update(created["id"], {"company": "Acme Holdings"})
    assert store.items[0]["company"] == "Acme Holdings"

    assert store.fetch() == store.items
    assert cache.get(store.cache_key) == store.items
    assert store.get_status(created["id"]) == {"is_approved": True, "status": "active"}

    store.delete(created["id"], soft=True)
    assert [(item["id"], item["status"]) for item in store.items] == [(created["id"], False)]
    assert store.get(created["id"])["status"] is False

    store.delete(created["id"])
    assert store.items == []


def test_failed_soft_delete_restores_client():
    acme = {"id": "c1", "name": "Acme Ltd", "status": True}

    def refused():
        assert store.items == [{**acme, "status": False}]
        return ApiClientError(403, "Forbidden - insufficient role")

    api = FakeApi(refused, {"success": True, "data": {"clients": [acme], "total": 1}})
    store = ClientStore(api)
    store.items = [dict(acme)]

    with pytest.raises(ApiClientError):
        store.delete("c1", soft=True)
    assert api.calls[0] == ("DELETE", "/api/clients/c1", {"params": {"soft": "true"}})
    assert store.items == [acme]
    assert store.error == "Forbidden - insufficient role"


def test_failed_optimistic_create_rolls_back(api):
    store = ClientStore(api)
    store.create({"name": "Acme Ltd", "email": "acme@example.com"})

    with pytest.raises(ApiClientError) as exc:
        store.create({"name": "Copy", "email": "acme@example.com"})
    assert exc.value.status == 409
    assert store.error == "Email already exists"
    assert [item["name"] for item in store.items] == ["Acme Ltd"]


def test_fetch_with_retry_falls_back_to_cache():
    cache = TTLCache()
    outage = ApiClientError(503, "Service Unavailable")
    store = ClientStore(FakeApi(outage, outage, outage), cache=cache)
    cache.set(store.cache_key, [{"id": "c1", "name": "Cached"}])
    sleeps = []

    items = store.fetch_with_retry(attempts=3, delay=0.5, sleep=sleeps.append)
    assert items == [{"id": "c1", "name": "Cached"}]
    assert sleeps == [0.5, 0.5]
    assert store.error == "Service Unavailable"


def test_fetch_with_retry_does_not_retry_client_errors():
    store = ClientStore(FakeApi(ApiClientError(401, "Token expired")))
    sleeps = []
    with pytest.raises(ApiClientError):
        store.fetch_with_retry(sleep=sleeps.append)
    assert sleeps == []


def test_invoice_create_retries_number_collision():
    invoice = {"id": "i1", "invoice_no": "INV-000002"}
    api = FakeApi(
        ApiClientError(409, "Invoice number already taken, please retry"),
        {"success": True, "data": []},
        {"success": True, "data": invoice},
    )
    store = InvoiceStore(api)
    assert store.create({"client_id": "c1"}) == invoice
    assert [call[0] for call in api.calls] == ["POST", "GET", "POST"]
    assert store.items == [invoice]


def test_task_toggle_is_optimistic():
    task = {"id": "t1", "completed": False, "status": "Pending"}

    def server_toggle():
        # The local copy has already flipped by the time the request is sent
        assert store.items[0]["completed"] is True
        assert store.items[0]["status"] == "Completed"
        return {"success": True, "data": {**task, "completed": True, "status": "Completed"}}

    store = TaskStore(FakeApi(server_toggle))
    store.items = [dict(task)]
    toggled = store.toggle("t1")
    assert toggled["status"] == "Completed"


def test_team_member_store_uploads_image(api):
    store = TeamMemberStore(api)
    member = store.create(
        {"name": "Dana", "email": "dana@example.com", "position": "Associate", "role": "Attorney",
         "specializations": ["Tax", "Probate"]},
        image=("dana.png", b"\x89PNG\r\n\x1a\n", "image/png"),
    )
    assert member["specializations"] == ["Tax", "Probate"]
    assert member["profile_image_url"].startswith("/uploads/profile-images/")
    assert store.by_role("Attorney")[0]["id"] == member["id"]


def test_notification_store_against_api(api):
    for title in ("One", "Two"):
        api.post("/api/notifications", json={"title": title, "message": "m", "type": "system"})

    store = NotificationStore(api)
    store.fetch()
    assert len(store.items) == 2
    assert store.unread_count == 2

    store.mark_read(store.items[0]["id"])
    assert store.unread_count == 1
    assert store.mark_all_read() == 1
    assert store.unread_count == 0
    assert store.clear_read() == 2
    assert store.items == []


def test_notification_store_discards_stale_poll():
    fresh = {"success": True, "data": {"notifications": [{"id": "new"}], "unread_count": 1}}
    stale = {"success": True, "data": {"notifications": [{"id": "old"}], "unread_count": 5}}

    def slow_response():
        # A later poll starts and finishes while this one is in flight
        store.fetch()
        return stale

    store = NotificationStore(FakeApi(slow_response, fresh))
    store.fetch()
    assert store.items == [{"id": "new"}]
    assert store.unread_count == 1

# =====================================================
# DASHBOARD
# =====================================================

def test_summarize_dashboard():
    now = datetime(2030, 1, 15, 12, 0)
    summary = summarize_dashboard(
        clients=[{"status": True}, {"status": False}],
        cases=[
            {"is_important": True, "status": "Pending"},
            {"status": "Completed", "is_archived": True},
        ],
        tasks=[
            {"completed": False, "due_date": "2030-01-10T00:00:00Z"},
            {"completed": False, "due_date": "2030-02-01T00:00:00"},
            {"completed": True, "due_date": "2029-01-01T00:00:00"},
        ],
        appointments=[
            {"status": "Scheduled", "date_time": "2030-01-20T09:00:00"},
            {"status": "Scheduled", "date_time": "2030-01-01T09:00:00"},
            {"status": "Cancelled", "date_time": "2030-01-20T09:00:00"},
        ],
        invoices=[
            {"status": "Paid", "balance_due": 0},
            {"status": "Partially Paid", "balance_due": 150.5},
            {"status": "Overdue", "balance_due": 100},
        ],
        now=now,
    )
    assert summary == {
        "total_clients": 2,
        "active_clients": 1,
        "total_cases": 2,
        "important_cases": 1,
        "completed_cases": 1,
        "archived_cases": 1,
        "open_tasks": 2,
        "overdue_tasks": 1,
        "upcoming_appointments": 1,
        "outstanding_invoices": 2,
        "outstanding_balance": 250.5,
    }
