from fastapi.testclient import TestClient

from auction.config import MAX_U64
import auction.main
from auction.main import create_app
from auction.schemas import Item
from auction.services.auction import AuctionService


def create(client, headers, item_id, description="desc", is_active=True):
    return client.put(
        f"/api/items/{item_id}",
        json={"description": description, "is_active": is_active},
        headers=headers,
    )


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_whoami_uses_header(client, as_caller):
    response = client.get("/api/whoami", headers=as_caller("alice"))

    assert response.json() == {"caller": "alice"}


def test_mutations_require_caller_header(client):
    response = client.put("/api/items/1", json={"description": "desc"})

    assert response.status_code == 401


def test_owner_comes_from_header_not_payload(client, as_caller):
    client.put(
        "/api/items/1",
        json={"description": "desc", "is_active": True, "owner": "mallory"},
        headers=as_caller("alice"),
    )

    assert client.get("/api/items/1").json()["owner"] == "alice"


def test_create_returns_previous(client, as_caller):
    first = create(client, as_caller("alice"), 1, "first")
    second = create(client, as_caller("alice"), 1, "second")

    assert first.json() == {"previous": None}
    assert second.json()["previous"]["description"] == "first"


def test_get_missing_item_is_404(client):
    assert client.get("/api/items/5").status_code == 404


def test_item_id_must_be_u64(client, as_caller):
    assert create(client, as_caller("alice"), -1).status_code == 422
    assert create(client, as_caller("alice"), MAX_U64 + 1).status_code == 422
    assert create(client, as_caller("alice"), MAX_U64).status_code == 200


def test_bid_flow_and_error_codes(client, as_caller):
    create(client, as_caller("owner"), 1)

    assert client.post("/api/items/1/bids", json={"amount": 50}, headers=as_caller("x")).status_code == 200
    response = client.post("/api/items/1/bids", json={"amount": 80}, headers=as_caller("y"))
    assert response.json()["bids"] == {"x": 50, "y": 80}

    rejected = client.post("/api/items/1/bids", json={"amount": 60}, headers=as_caller("z"))
    assert rejected.status_code == 409
    assert rejected.json()["detail"]["error"] == "InvalidBid"

    missing = client.post("/api/items/2/bids", json={"amount": 60}, headers=as_caller("z"))
    assert missing.status_code == 404
    assert missing.json()["detail"]["error"] == "NoSuchItem"


def test_edit_by_other_caller_is_forbidden(client, as_caller):
    create(client, as_caller("a"), 2, "old")

    rejected = client.patch("/api/items/2", json={"description": "new"}, headers=as_caller("b"))
    accepted = client.patch("/api/items/2", json={"description": "new"}, headers=as_caller("a"))

    assert rejected.status_code == 403
    assert rejected.json()["detail"]["error"] == "AccessRejected"
    assert accepted.json()["description"] == "new"


def test_stop_then_bid_is_rejected(client, as_caller):
    create(client, as_caller("owner"), 3)
    client.post("/api/items/3/bids", json={"amount": 20}, headers=as_caller("x"))
    client.post("/api/items/3/bids", json={"amount": 30}, headers=as_caller("y"))

    stopped = client.post("/api/items/3/stop", headers=as_caller("owner"))
    assert stopped.json()["is_active"] is False
    assert stopped.json()["new_owner"] == "y"

    late = client.post("/api/items/3/bids", json={"amount": 40}, headers=as_caller("z"))
    assert late.status_code == 409
    assert late.json()["detail"]["error"] == "ItemIsNotActive"


def test_listing_count_and_stats(client, as_caller):
    assert client.get("/api/items/stats/sold-for-the-most").json() is None
    assert client.get("/api/items/stats/bid-on-the-most").json() is None

    for item_id, amount in ((1, 30), (2, 50)):
        create(client, as_caller("owner"), item_id, f"item {item_id}")
        client.post(f"/api/items/{item_id}/bids", json={"amount": amount}, headers=as_caller("x"))
        client.post(f"/api/items/{item_id}/stop", headers=as_caller("owner"))
    create(client, as_caller("owner"), 3, "item 3")
    for amount in (1, 2, 3):
        client.post("/api/items/3/bids", json={"amount": amount}, headers=as_caller("y"))

    assert client.get("/api/items/count").json() == {"count": 3}
    assert sorted(client.get("/api/items/").json()) == ["1", "2", "3"]
    assert client.get("/api/items/stats/sold-for-the-most").json()["description"] == "item 2"
    assert client.get("/api/items/stats/bid-on-the-most").json()["description"] == "item 3"


def test_storage_failure_maps_to_507(client, store, as_caller):
    store.max_item_bytes = 100

    response = create(client, as_caller("alice"), 1, "x" * 500)

    assert response.status_code == 507
    assert response.json()["detail"]["error"] == "StorageError"


def test_stop_by_other_caller_is_forbidden(client, as_caller):
    create(client, as_caller("owner"), 3)
    client.post("/api/items/3/bids", json={"amount": 20}, headers=as_caller("x"))

    response = client.post("/api/items/3/stop", headers=as_caller("x"))

    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "AccessRejected"


def test_duplicate_create_conflict_when_rejecting(store, as_caller):
    app = create_app(store)
    app.state.auction_service = AuctionService(store, reject_duplicate_ids=True)
    client = TestClient(app)
    create(client, as_caller("alice"), 1, "first")

    response = create(client, as_caller("bob"), 1, "second")

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "AlreadyExists"
    assert client.get("/api/items/1").json()["owner"] == "alice"


def test_closed_item_without_bids_breaks_sold_for_the_most(client, store):
    store.put(5, Item(description="broken", is_active=False, owner="owner", new_owner="x", bids={}))

    response = client.get("/api/items/stats/sold-for-the-most")

    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "NoSuchItem"


def test_overlong_caller_header_is_rejected(client, as_caller):
    response = client.get("/api/whoami", headers=as_caller("a" * 129))

    assert response.status_code == 400


def test_app_module_import_builds_no_default_app():
    assert not hasattr(auction.main, "app")
