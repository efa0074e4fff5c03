import pytest
from fastapi.testclient import TestClient

from gacha_api.config import Settings
from gacha_api.drop_engine import DrawMode
from gacha_api.main import app
from gacha_api.services.state import build_state, get_state

from conftest import FixedRng


def _client(**settings_kwargs):
    state = build_state(Settings(**settings_kwargs), rng=FixedRng(0.0))
    app.dependency_overrides[get_state] = lambda: state
    return TestClient(app), state


@pytest.fixture
def client():
    client, _ = _client()
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _clear_overrides():
    yield
    app.dependency_overrides.clear()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_info(client):
    body = client.get("/info").json()
    assert body["gacha_id"] == "wardrobe-gacha"
    assert body["item_count"] == 6
    assert body["pull_cost"] == 1000
    assert body["draw_mode"] == "cumulative"


def test_get_gacha_uses_camel_case(client):
    body = client.get("/gacha").json()
    assert body["pullCost"] == 1000
    assert body["refundPercent"] == 0.5
    assert body["rarityMapping"] == {"common": 10, "rare": 5, "ultraRare": 1}
    assert body["itemPool"][0]["id"] == "outfit-overalls"


def test_register_and_pull(client):
    response = client.post("/requesters/ana", json={"currency": 5000})
    assert response.status_code == 201
    assert response.json()["currency"] == 5000

    first = client.post("/requesters/ana/pull").json()
    assert first["requesterId"] == "ana"
    assert first["item"]["id"] == "outfit-overalls"
    assert first["isDuplicate"] is False
    assert first["wardrobe"]["currency"] == 4000

    second = client.post("/requesters/ana/pull").json()
    assert second["isDuplicate"] is True
    assert second["refund"] == 500
    assert second["wardrobe"]["currency"] == 3500

    wardrobe = client.get("/requesters/ana").json()
    assert wardrobe["currency"] == 3500
    assert [i["id"] for i in wardrobe["inventory"]] == ["outfit-overalls"]

    events = client.get("/events").json()
    assert [e["wardrobe"]["currency"] for e in events] == [4000, 3500]


def test_register_uses_starting_currency(client):
    response = client.post("/requesters/bo")
    assert response.status_code == 201
    assert response.json()["currency"] == 5000

    assert client.post("/requesters/bo").status_code == 409


def test_unknown_requester(client):
    assert client.get("/requesters/ghost").status_code == 404
    assert client.post("/requesters/ghost/pull").status_code == 404


def test_pull_on_empty_pool():
    client, state = _client()
    state.picker.item_pool = []
    client.post("/requesters/ana", json={"currency": 100})

    response = client.post("/requesters/ana/pull")

    assert response.status_code == 400
    assert client.get("/requesters/ana").json()["currency"] == 100


def test_insufficient_funds_under_strict_policy():
    client, _ = _client(allow_negative_currency=False)
    client.post("/requesters/ana", json={"currency": 500})

    response = client.post("/requesters/ana/pull")

    assert response.status_code == 409
    assert client.get("/requesters/ana").json()["currency"] == 500


def test_add_item(client):
    response = client.post("/gacha/items", json={"id": "hat", "rarity": "rare", "name": "Hat"})
    assert response.status_code == 200
    assert response.json()["itemPool"][-1]["id"] == "hat"

    duplicate = client.post("/gacha/items", json={"id": "hat", "rarity": "common"})
    assert duplicate.status_code == 409

    unknown = client.post("/gacha/items", json={"id": "x", "rarity": "mythic"})
    assert unknown.status_code == 422


def test_add_item_with_unweighted_rarity():
    client, state = _client()
    state.picker.apply_model(
        state.picker.to_gacha_model().model_copy(update={
            "item_pool": [i for i in state.picker.item_pool if i.rarity.value == "common"],
            "rarity_mapping": {"common": 10},
        })
    )

    response = client.post("/gacha/items", json={"id": "star", "rarity": "ultraRare"})

    assert response.status_code == 400
    assert all(i["id"] != "star" for i in client.get("/gacha").json()["itemPool"])


def test_replace_gacha(client):
    payload = {
        "id": "event-gacha",
        "pullCost": 300,
        "refundPercent": 1,
        "rarityMapping": {"common": 1},
        "itemPool": [{"id": "only", "rarity": "common", "name": "Only"}],
    }

    response = client.put("/gacha", json=payload)

    assert response.status_code == 200
    assert response.json()["id"] == "event-gacha"

    client.post("/requesters/ana", json={"currency": 300})
    client.post("/requesters/ana/pull")
    dup = client.post("/requesters/ana/pull").json()
    assert dup["isDuplicate"] is True
    assert dup["wardrobe"]["currency"] == 0


def test_replace_gacha_rejects_invalid(client):
    response = client.put("/gacha", json={"id": "x", "pullCost": 0})

    assert response.status_code == 400
    assert client.get("/gacha").json()["id"] == "wardrobe-gacha"


def test_validate_endpoint(client):
    report = client.post("/gacha/validate", json={"id": "x"}).json()
    assert report["valid"] is False


def test_simulate(client):
    response = client.post("/simulate", json={"simulations": 2000, "seed": 5})
    body = response.json()

    assert response.status_code == 200
    assert body["simulations"] == 2000
    assert body["mode"] == "cumulative"
    assert set(body["rarity_distribution"]) <= {"common", "rare", "ultraRare"}
    assert sum(count for _, count in body["top_items_overall"]) == 2000


def test_simulate_legacy_mode_warns_about_unreached_items(client):
    body = client.post("/simulate", json={"simulations": 500, "seed": 1, "mode": "legacy"}).json()

    # the first common out-weighs every later item
    assert body["mode"] == "legacy"
    assert body["top_items_overall"] == [["outfit-overalls", 500]]
    assert any("never drawn" in w for w in body["warnings"])


def test_simulate_limit(client):
    assert client.post("/simulate", json={"simulations": 100_001}).status_code == 422


def test_balance_overview(client):
    body = client.get("/balance/overview").json()

    assert body["mode"] == "cumulative"
    assert body["duplicate_refund"] == 500
    assert sum(body["rarity_probability"].values()) == pytest.approx(100, abs=0.01)
    # 3 commons * 10, 2 rares * 5, 1 ultra * 1 = 41
    assert body["rarity_probability"]["ultraRare"] == pytest.approx(100 / 41, abs=0.001)
    assert body["warnings"] == []


def test_balance_overview_legacy():
    client, _ = _client(draw_mode=DrawMode.legacy)
    body = client.get("/balance/overview").json()

    assert body["mode"] == "legacy"
    assert body["items"][0]["probability"] == pytest.approx(100)
    assert body["warnings"]


def test_simulate_skips_ultra_rare_warning_without_ultra_rare_items(client):
    client.put("/gacha", json={
        "id": "commons",
        "pullCost": 100,
        "refundPercent": 0.5,
        "rarityMapping": {"common": 1},
        "itemPool": [{"id": "a", "rarity": "common"}, {"id": "b", "rarity": "common"}],
    })

    body = client.post("/simulate", json={"simulations": 1000, "seed": 3}).json()

    assert not any("Ultra rare" in w for w in body["warnings"])


def test_simulate_warns_when_ultra_rare_items_are_scarce(client):
    body = client.post("/simulate", json={"simulations": 500, "seed": 1, "mode": "legacy"}).json()

    assert any("Ultra rare" in w for w in body["warnings"])
