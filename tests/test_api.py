"""HTTP API tests for notifications, events, user configs, push and analytics."""

from datetime import timedelta

import pytest

from conftest import T0


def _weather_payload(event_id: str = "w-api", severity: str = "extreme") -> dict:
    return {
        "kind": "weather",
        "id": event_id,
        "alertType": "hail",
        "severity": severity,
        "startTime": T0.isoformat(),
        "endTime": (T0 + timedelta(hours=6)).isoformat(),
        "affectedArea": "Pune district",
        "description": "Hailstorm expected this evening",
        "recommendations": ["Harvest ripe produce early"],
    }


def _price_payload(event_id: str = "p-api", pct: float = 12.0) -> dict:
    return {
        "kind": "price",
        "id": event_id,
        "commodity": "Wheat",
        "currentPrice": 2464,
        "previousPrice": 2200,
        "change": 264,
        "changePercentage": pct,
        "marketName": "Indore Mandi",
        "alertTrigger": "sudden-spike",
    }


# ===========================================================================
# Events
# ===========================================================================


class TestEvents:
    @pytest.mark.asyncio
    async def test_ingest_creates_notifications(self, client):
        response = await client.post(
            "/api/v1/events",
            json={"events": [_weather_payload(), _price_payload()]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["received"] == 2
        assert data["created"] == 2
        weather = data["notifications"][0]
        assert weather["id"] == "notif_w-api"
        assert weather["priority"] == "critical"
        assert weather["category"] == "alert"
        assert weather["data"]["alertType"] == "hail"

    @pytest.mark.asyncio
    async def test_unknown_kind_rejected(self, client):
        response = await client.post("/api/v1/events", json={"events": [{"kind": "disease", "id": "d1"}]})
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["trace_id"].startswith("trc_")

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, client):
        response = await client.post("/api/v1/events", json={"events": []})
        assert response.status_code == 400


# ===========================================================================
# Notifications
# ===========================================================================


class TestNotifications:
    @pytest.mark.asyncio
    async def test_list_filters(self, client):
        await client.post("/api/v1/events", json={"events": [_weather_payload(), _price_payload()]})

        all_items = (await client.get("/api/v1/notifications")).json()
        assert [n["id"] for n in all_items] == ["notif_p-api", "notif_w-api"]

        prices = (await client.get("/api/v1/notifications", params={"type": "price"})).json()
        assert [n["id"] for n in prices] == ["notif_p-api"]

        limited = (await client.get("/api/v1/notifications", params={"limit": 1})).json()
        assert len(limited) == 1

    @pytest.mark.asyncio
    async def test_invalid_filter(self, client):
        response = await client.get("/api/v1/notifications", params={"limit": 0})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_read_flow(self, client):
        await client.post("/api/v1/events", json={"events": [_weather_payload(), _price_payload()]})

        count = (await client.get("/api/v1/notifications/unread-count", params={"user_id": "u1"})).json()
        assert count["unread"] == 2

        response = await client.post("/api/v1/notifications/notif_p-api/read")
        assert response.json()["found"] is True
        missing = await client.post("/api/v1/notifications/nope/read")
        assert missing.status_code == 200
        assert missing.json()["found"] is False

        response = await client.post("/api/v1/notifications/read-all", params={"user_id": "u1"})
        assert response.json()["marked"] == 1

        unread = (await client.get("/api/v1/notifications", params={"is_read": "false"})).json()
        assert unread == []

    @pytest.mark.asyncio
    async def test_read_all_requires_user(self, client):
        response = await client.post("/api/v1/notifications/read-all")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete(self, client):
        await client.post("/api/v1/events", json={"events": [_price_payload()]})
        assert (await client.delete("/api/v1/notifications/notif_p-api")).status_code == 204
        assert (await client.delete("/api/v1/notifications/notif_p-api")).status_code == 204
        assert (await client.get("/api/v1/notifications")).json() == []

    @pytest.mark.asyncio
    async def test_cleanup(self, client, clock):
        await client.post("/api/v1/events", json={"events": [_weather_payload(), _price_payload()]})
        clock.advance(hours=7)
        response = await client.post("/api/v1/notifications/cleanup")
        assert response.json() == {"evicted": 1}

    @pytest.mark.asyncio
    async def test_cleanup_with_naive_deadline(self, client):
        update = {
            "kind": "government",
            "id": "g-naive",
            "scheme": "PM-KISAN",
            "updateType": "deadline-reminder",
            "title": "PM-KISAN: DEADLINE REMINDER",
            "description": "Complete your KYC verification",
            "deadline": "2026-07-10T00:00:00",
        }
        created = await client.post("/api/v1/events", json={"events": [update, _price_payload()]})
        assert created.status_code == 201
        assert created.json()["notifications"][0]["expiresAt"].startswith("2026-07-10T00:00:00")

        response = await client.post("/api/v1/notifications/cleanup")
        assert response.status_code == 200
        assert response.json() == {"evicted": 1}
        assert [n["id"] for n in (await client.get("/api/v1/notifications")).json()] == ["notif_p-api"]


# ===========================================================================
# Users
# ===========================================================================


class TestUsers:
    @pytest.mark.asyncio
    async def test_config_round_trip(self, client):
        body = {
            "crops": ["Wheat", "Mustard"],
            "location": {"latitude": 22.7, "longitude": 75.8, "state": "MP", "district": "Indore"},
            "priceThresholds": {"Wheat": {"min": 2000, "max": 2600}},
            "quietHours": {"enabled": True, "start": "21:30", "end": "05:30"},
        }
        response = await client.put("/api/v1/users/farmer-7/config", json=body)
        assert response.status_code == 200
        assert response.json()["persisted"] is True

        fetched = (await client.get("/api/v1/users/farmer-7/config")).json()
        assert fetched["userId"] == "farmer-7"
        assert fetched["crops"] == ["Wheat", "Mustard"]
        assert fetched["quietHours"]["start"] == "21:30"
        assert fetched["alertFrequency"] == "immediate"

    @pytest.mark.asyncio
    async def test_missing_config_is_404(self, client):
        response = await client.get("/api/v1/users/ghost/config")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"userId": "someone-else"},
            {"quietHours": {"start": "7pm"}},
            {"priceThresholds": {"Wheat": {"min": 3000, "max": 2000}}},
        ],
    )
    async def test_invalid_config(self, client, body):
        response = await client.put("/api/v1/users/farmer-7/config", json=body)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_push_subscription(self, client):
        registration = {
            "endpoint": "https://push.example/device-1",
            "keys": {"p256dh": "BPk", "auth": "x1"},
            "userAgent": "Mozilla/5.0 (Windows NT 10.0) Firefox/128.0",
        }
        response = await client.post("/api/v1/users/farmer-7/push-subscriptions", json=registration)
        assert response.json() == {"userId": "farmer-7", "subscribed": True}

        empty = await client.post("/api/v1/users/farmer-7/push-subscriptions")
        assert empty.json()["subscribed"] is False

    @pytest.mark.asyncio
    async def test_analytics(self, client):
        await client.post("/api/v1/events", json={"events": [_weather_payload(), _price_payload()]})
        await client.post("/api/v1/notifications/notif_w-api/read")

        response = await client.get("/api/v1/users/farmer-7/analytics", params={"timeframe": "day"})
        assert response.status_code == 200
        data = response.json()
        assert data["timeframe"] == "day"
        assert data["totalSent"] == 2
        assert data["deliveryRate"] == 100.0
        assert data["readRate"] == 50.0
        assert data["engagement"]["mostEngagingType"] == "weather"

    @pytest.mark.asyncio
    async def test_analytics_rejects_unknown_timeframe(self, client):
        response = await client.get("/api/v1/users/farmer-7/analytics", params={"timeframe": "year"})
        assert response.status_code == 400


# ===========================================================================
# Push permission
# ===========================================================================


class TestPushPermission:
    @pytest.mark.asyncio
    async def test_request_permission(self, client):
        response = await client.post("/api/v1/push/permission")
        assert response.json() == {"granted": True, "supported": True, "state": "granted"}

    @pytest.mark.asyncio
    async def test_push_delivered_after_permission(self, client):
        await client.post("/api/v1/push/permission")
        data = (await client.post("/api/v1/events", json={"events": [_price_payload()]})).json()
        channels = {c["channel"]: c for c in data["notifications"][0]["deliveryChannels"]}
        assert channels["push"]["delivered"] is True
        assert channels["in-app"]["delivered"] is True
