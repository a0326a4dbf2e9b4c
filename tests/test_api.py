"""HTTP tests for the garden API, run in-process through httpx."""

import httpx
import pytest
from gardenplots import ConcurrentUpdateError

from conftest import ADMIN_PROFILE, FakeClock, RecordingGateway
from services.garden.store import GardenStateStore


def _query(profile_id: str = "profile-1", asset_id: str = "plot-a") -> dict[str, str]:
    return {
        "visitorId": f"visitor-{profile_id}",
        "urlSlug": "garden-town",
        "profileId": profile_id,
        "displayName": "Alex",
        "assetId": asset_id,
    }


class TestHealth:
    async def test_health(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/system/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "OK"
        assert body["appVersion"] == "0.1.0"
        assert "serverStartDate" in body


class TestHomeInstructions:
    async def test_no_credentials_needed(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/home-instructions")
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert "Welcome to the Garden Game" in body["data"]["instructions"]


class TestCredentials:
    async def test_missing_credentials_is_400(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/game-state", params={"urlSlug": "garden-town"})
        assert resp.status_code == 400
        body = resp.json()
        assert body["success"] is False
        assert "visitorId" in body["error"]


class TestGameFlow:
    async def test_new_visitor_state(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/game-state", params=_query())
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["visitorData"]["coinsAvailable"] == 10
        assert body["visitorData"]["ownedPlot"] is None
        assert len(body["availableSeeds"]) == 2

    async def test_claim_plant_harvest(self, http_client: httpx.AsyncClient, clock: FakeClock):
        resp = await http_client.post("/plot/claim", params=_query())
        assert resp.status_code == 200
        assert resp.json()["data"]["plotAssetId"] == "plot-a"

        resp = await http_client.post(
            "/plant/drop", params=_query(), json={"seedId": 1, "squareIndex": 0}
        )
        assert resp.status_code == 200
        plant_id = resp.json()["data"]["droppedAssetId"]

        clock.advance(30)
        resp = await http_client.post(
            "/plant/harvest", params=_query(), json={"droppedAssetId": plant_id}
        )
        assert resp.status_code == 400
        assert "not ready" in resp.json()["error"]

        clock.advance(30)
        resp = await http_client.post(
            "/plant/harvest", params=_query(), json={"droppedAssetId": plant_id}
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["coinsEarned"] == 2
        assert data["totalCoins"] == 2

    async def test_second_claim_is_400(self, http_client: httpx.AsyncClient):
        await http_client.post("/plot/claim", params=_query())
        resp = await http_client.post("/plot/claim", params=_query(asset_id="plot-b"))
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    async def test_purchase_and_menu(self, http_client: httpx.AsyncClient):
        resp = await http_client.post("/seed/purchase", params=_query(), json={"seedId": 4})
        assert resp.status_code == 200
        assert resp.json()["data"]["coinsAvailable"] == 0

        resp = await http_client.get("/seed/menu", params=_query())
        assert resp.json()["data"]["coinsAvailable"] == 0

        resp = await http_client.post("/seed/purchase", params=_query(), json={"seedId": 4})
        assert resp.status_code == 400

    async def test_update_growth_levels(self, http_client: httpx.AsyncClient, clock: FakeClock):
        await http_client.post("/plot/claim", params=_query())
        await http_client.post("/plant/drop", params=_query(), json={"seedId": 1, "squareIndex": 3})
        clock.advance(12)
        resp = await http_client.post("/update-growth-levels", params=_query())
        assert resp.status_code == 200
        [update] = resp.json()["updatedPlants"]
        assert update["previousLevel"] == 0
        assert update["newLevel"] == 2


class TestValidation:
    async def test_missing_body_field(self, http_client: httpx.AsyncClient):
        resp = await http_client.post("/plant/drop", params=_query(), json={"seedId": 1})
        assert resp.status_code == 400
        assert "squareIndex" in resp.json()["error"]

    async def test_wrong_type(self, http_client: httpx.AsyncClient):
        resp = await http_client.post("/seed/purchase", params=_query(), json={"seedId": "lots"})
        assert resp.status_code == 400

    async def test_out_of_range_square_is_rule_error(self, http_client: httpx.AsyncClient):
        await http_client.post("/plot/claim", params=_query())
        resp = await http_client.post(
            "/plant/drop", params=_query(), json={"seedId": 1, "squareIndex": 16}
        )
        assert resp.status_code == 400
        assert "Square 16" in resp.json()["error"]


class TestStatusCodes:
    async def test_remove_all_plants_needs_admin(self, http_client: httpx.AsyncClient):
        resp = await http_client.post("/remove-all-plants", params=_query())
        assert resp.status_code == 403

    async def test_admin_can_remove_all_plants(self, http_client: httpx.AsyncClient):
        params = _query(profile_id=ADMIN_PROFILE)
        await http_client.post("/plot/claim", params=params)
        await http_client.post("/plant/drop", params=params, json={"seedId": 1, "squareIndex": 0})
        resp = await http_client.post("/remove-all-plants", params=params)
        assert resp.status_code == 200
        assert resp.json()["removedCount"] == 1

    async def test_admin_flag_in_state(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/game-state", params=_query(profile_id=ADMIN_PROFILE))
        assert resp.json()["isAdmin"] is True

    async def test_unknown_plant_details_is_404(self, http_client: httpx.AsyncClient):
        resp = await http_client.get("/plant/details", params={**_query(), "plantId": "nope"})
        assert resp.status_code == 404

    async def test_unknown_plant_harvest_is_400(self, http_client: httpx.AsyncClient):
        resp = await http_client.post(
            "/plant/harvest", params=_query(), json={"droppedAssetId": "nope"}
        )
        assert resp.status_code == 400

    async def test_conflict_is_409(
        self, http_client: httpx.AsyncClient, store: GardenStateStore, monkeypatch: pytest.MonkeyPatch
    ):
        async def conflicting_save(*args, **kwargs):
            raise ConcurrentUpdateError("changed")

        monkeypatch.setattr(store, "save", conflicting_save)
        resp = await http_client.post("/seed/purchase", params=_query(), json={"seedId": 4})
        assert resp.status_code == 409
        body = resp.json()
        assert body["success"] is False
        assert body["retryable"] is True

    async def test_growth_conflict_on_read_is_200(
        self,
        http_client: httpx.AsyncClient,
        clock: FakeClock,
        store: GardenStateStore,
        monkeypatch: pytest.MonkeyPatch,
    ):
        await http_client.post("/plot/claim", params=_query())
        await http_client.post("/plant/drop", params=_query(), json={"seedId": 1, "squareIndex": 0})
        clock.advance(60)

        async def conflicting_save(*args, **kwargs):
            raise ConcurrentUpdateError("changed")

        monkeypatch.setattr(store, "save", conflicting_save)
        resp = await http_client.get("/game-state", params=_query())
        assert resp.status_code == 200
        assert resp.json()["success"] is True

    async def test_store_failure_is_500(
        self, http_client: httpx.AsyncClient, store: GardenStateStore, monkeypatch: pytest.MonkeyPatch
    ):
        async def broken_load(*args, **kwargs):
            raise ConnectionError("store offline")

        monkeypatch.setattr(store, "load", broken_load)
        resp = await http_client.get("/game-state", params=_query())
        assert resp.status_code == 500
        assert resp.json() == {"success": False, "error": "Internal server error"}

    async def test_side_effect_failure_is_still_200(
        self, http_client: httpx.AsyncClient, gateway: RecordingGateway
    ):
        gateway.fail = True
        resp = await http_client.post("/plot/claim", params=_query())
        assert resp.status_code == 200


class TestDetailsRoutes:
    async def test_plant_details(self, http_client: httpx.AsyncClient):
        await http_client.post("/plot/claim", params=_query())
        resp = await http_client.post(
            "/plant/drop", params=_query(), json={"seedId": 1, "squareIndex": 0}
        )
        plant_id = resp.json()["data"]["droppedAssetId"]
        resp = await http_client.get("/plant/details", params={**_query(), "plantId": plant_id})
        assert resp.status_code == 200
        assert resp.json()["data"]["seed"]["name"] == "Carrot"

    async def test_plot_details(self, http_client: httpx.AsyncClient):
        await http_client.post("/plot/claim", params=_query())
        resp = await http_client.get("/plot/details", params=_query(profile_id="profile-2"))
        data = resp.json()["data"]
        assert data["hasOwner"] is True
        assert data["isCurrentUserOwner"] is False
