from __future__ import annotations

import asyncio
import json
import random

import httpx
import pytest

from agriinsight.client import AgriInsightClient, ApiError, DashboardController, RegionStatus
from agriinsight.client.dashboard import DASHBOARD_FAILED, LOGIN_FAILED
from agriinsight.main import create_app
from agriinsight.services.agronomy import RandomAgronomicDataProvider

BASE_URL = "https://testserver"

_provider = RandomAgronomicDataProvider(rng=random.Random(99))


def _feed(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    path = request.url.path
    if path == "/weather":
        model = _provider.weather(int(params["days"]))
    elif path == "/yield":
        model = _provider.crop_yield(params["crop"], int(params["days"]))
    elif path == "/soil":
        model = _provider.soil(params.get("crop"))
    elif path == "/market-prices":
        model = _provider.market_prices()
    elif path == "/auth/login":
        credentials = json.loads(request.content)
        if credentials["password"] != "pw1":
            return httpx.Response(401, json={"error": "Invalid credentials"})
        return httpx.Response(200, json={"message": "Logged in successfully"})
    elif path == "/auth/logout":
        return httpx.Response(200, json={"message": "Logged out successfully"})
    else:
        return httpx.Response(404, json={"error": "Not Found"})
    return httpx.Response(200, json=model.model_dump(mode="json", by_alias=True))


def _client(handler) -> AgriInsightClient:
    return AgriInsightClient(BASE_URL, transport=httpx.MockTransport(handler))


def test_login_loads_all_feeds():
    rendered = []

    async def scenario():
        async with _client(_feed) as api:
            controller = DashboardController(api, on_render=rendered.append)
            assert await controller.submit_login("alice", "pw1")
            return controller

    controller = asyncio.run(scenario())

    assert controller.dashboard_visible
    assert controller.regions["dashboard"].status is RegionStatus.READY
    assert rendered == [controller.snapshot]
    assert len(controller.snapshot.weather.dates) == controller.filters.days
    assert controller.snapshot.crop_yield.crop_type == "wheat"
    assert len(controller.snapshot.market.prices) == 3


def test_failed_login_shows_generic_error():
    async def scenario():
        async with _client(_feed) as api:
            controller = DashboardController(api)
            assert not await controller.submit_login("alice", "bad")
            return controller

    controller = asyncio.run(scenario())

    assert not controller.dashboard_visible
    assert controller.regions["login"].status is RegionStatus.ERROR
    assert controller.regions["login"].error == LOGIN_FAILED
    assert controller.snapshot is None


def test_one_failing_feed_fails_the_whole_dashboard():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/soil":
            return httpx.Response(500, json={"error": "Internal server error"})
        return _feed(request)

    rendered = []

    async def scenario():
        async with _client(handler) as api:
            controller = DashboardController(api, on_render=rendered.append)
            assert await controller.load() is None
            return controller

    controller = asyncio.run(scenario())

    assert controller.regions["dashboard"].status is RegionStatus.ERROR
    assert controller.regions["dashboard"].error == DASHBOARD_FAILED
    assert controller.snapshot is None
    assert rendered == []


def test_filter_change_refetches_every_feed():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.path)
        return _feed(request)

    async def scenario():
        async with _client(handler) as api:
            controller = DashboardController(api)
            await controller.load()
            return await controller.set_filters(days=14, crop="corn")

    snapshot = asyncio.run(scenario())

    assert sorted(seen) == sorted(["/weather", "/yield", "/soil", "/market-prices"] * 2)
    assert len(snapshot.weather.dates) == 14
    assert snapshot.crop_yield.crop_type == "corn"


def test_stale_batch_does_not_overwrite_newer_one():
    async def scenario():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params.get("days") == "7":
                await release.wait()
            return _feed(request)

        async with _client(handler) as api:
            controller = DashboardController(api)
            slow = asyncio.create_task(controller.load())
            await asyncio.sleep(0)
            fresh = await controller.set_filters(days=3)
            release.set()
            stale = await slow
            return controller, fresh, stale

    controller, fresh, stale = asyncio.run(scenario())

    assert stale is None
    assert controller.snapshot is fresh
    assert len(controller.snapshot.weather.dates) == 3
    assert controller.regions["dashboard"].status is RegionStatus.READY


def test_api_error_carries_server_message():
    async def scenario():
        async with _client(lambda request: httpx.Response(409, json={"error": "Username or email already exists"})) as api:
            await api.register("alice", "pw1", "a@x.com")

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 409
    assert excinfo.value.message == "Username or email already exists"


def test_logout_discards_batch_in_flight():
    rendered = []

    async def scenario():
        release = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/weather":
                await release.wait()
            return _feed(request)

        async with _client(handler) as api:
            controller = DashboardController(api, on_render=rendered.append)
            controller.dashboard_visible = True
            pending = asyncio.create_task(controller.load())
            await asyncio.sleep(0)
            assert await controller.logout()
            release.set()
            result = await pending
            return controller, result

    controller, result = asyncio.run(scenario())

    assert result is None
    assert not controller.dashboard_visible
    assert controller.snapshot is None
    assert controller.regions["dashboard"].status is RegionStatus.IDLE
    assert rendered == []


@pytest.mark.parametrize(
    "body",
    [
        {"content": b"<html>proxy error</html>", "headers": {"content-type": "text/html"}},
        {"json": {"nutrients": ["Nitrogen"]}},
    ],
    ids=["html", "wrong-shape"],
)
def test_unreadable_feed_fails_the_dashboard(body):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/soil":
            return httpx.Response(200, **body)
        return _feed(request)

    async def scenario():
        async with _client(handler) as api:
            controller = DashboardController(api)
            assert await controller.load() is None
            return controller

    controller = asyncio.run(scenario())

    assert controller.regions["dashboard"].status is RegionStatus.ERROR
    assert controller.regions["dashboard"].error == DASHBOARD_FAILED
    assert controller.snapshot is None


@pytest.mark.parametrize("payload", [["not", "a", "dict"], "plain string"])
def test_error_body_that_is_not_an_object(payload):
    async def scenario():
        async with _client(lambda request: httpx.Response(502, json=payload)) as api:
            await api.market_prices()

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(scenario())

    assert excinfo.value.status_code == 502
    assert excinfo.value.message == "Bad Gateway"


def test_dashboard_against_live_app(settings):
    async def scenario():
        app = create_app(settings)
        await app.state.database.connect()
        try:
            async with AgriInsightClient(BASE_URL, transport=httpx.ASGITransport(app=app)) as api:
                controller = DashboardController(api)
                assert await controller.submit_registration("alice", "pw1", "a@x.com")
                assert not await controller.submit_registration("alice", "pw1", "a@x.com")
                assert await controller.submit_login("alice", "pw1")
                snapshot = controller.snapshot
                assert (await api.me()).username == "alice"
                assert await controller.logout()
                with pytest.raises(ApiError) as excinfo:
                    await api.weather(5)
                return controller, snapshot, excinfo.value
        finally:
            await app.state.database.dispose()

    controller, snapshot, error = asyncio.run(scenario())

    assert controller.regions["register"].status is RegionStatus.ERROR
    assert len(snapshot.soil.levels) == 5
    assert not controller.dashboard_visible
    assert error.status_code == 403
