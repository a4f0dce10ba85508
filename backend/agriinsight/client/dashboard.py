"""Dashboard controller: login flow and concurrent refresh of the data feeds."""
from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable

from agriinsight.client.api import AgriInsightClient, ApiError
from agriinsight.schemas.dashboard import MarketPrices, SoilData, WeatherData, YieldData

logger = logging.getLogger(__name__)

LOGIN_FAILED = "Login failed. Please check your credentials and try again."
REGISTRATION_FAILED = "Registration failed. Please try again."
DASHBOARD_FAILED = "Failed to load dashboard data. Please try again later."
LOGOUT_FAILED = "Logout failed. Please try again."

LOGIN_REGION = "login"
REGISTER_REGION = "register"
DASHBOARD_REGION = "dashboard"


class RegionStatus(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(slots=True)
class RegionState:
    status: RegionStatus = RegionStatus.IDLE
    error: str | None = None


@dataclass(slots=True)
class DashboardFilters:
    days: int = 7
    crop: str = "wheat"


@dataclass(slots=True)
class DashboardSnapshot:
    filters: DashboardFilters
    weather: WeatherData
    crop_yield: YieldData
    soil: SoilData
    market: MarketPrices


@dataclass
class DashboardController:
    """Drive the login forms and the four-feed dashboard.

    Every refresh is tagged with a generation number. When filters change or
    the user logs out while a refresh is still in flight, the older batch is
    discarded on arrival instead of overwriting newer state.
    """

    client: AgriInsightClient
    filters: DashboardFilters = field(default_factory=DashboardFilters)
    on_render: Callable[[DashboardSnapshot], None] | None = None
    regions: dict[str, RegionState] = field(
        default_factory=lambda: {name: RegionState() for name in (LOGIN_REGION, REGISTER_REGION, DASHBOARD_REGION)}
    )
    snapshot: DashboardSnapshot | None = None
    dashboard_visible: bool = False
    _generation: int = 0

    def _start(self, region: str) -> None:
        self.regions[region] = RegionState(status=RegionStatus.LOADING)

    def _fail(self, region: str, message: str) -> None:
        self.regions[region] = RegionState(status=RegionStatus.ERROR, error=message)

    def _finish(self, region: str) -> None:
        self.regions[region] = RegionState(status=RegionStatus.READY)

    async def submit_login(self, username: str, password: str) -> bool:
        self._start(LOGIN_REGION)
        try:
            await self.client.login(username, password)
        except ApiError as exc:
            logger.info("Login failed: %s", exc.message)
            self._fail(LOGIN_REGION, LOGIN_FAILED)
            return False
        self._finish(LOGIN_REGION)
        self.dashboard_visible = True
        await self.load()
        return True

    async def submit_registration(self, username: str, password: str, email: str) -> bool:
        self._start(REGISTER_REGION)
        try:
            await self.client.register(username, password, email)
        except ApiError as exc:
            logger.info("Registration failed: %s", exc.message)
            self._fail(REGISTER_REGION, REGISTRATION_FAILED)
            return False
        self._finish(REGISTER_REGION)
        return True

    async def logout(self) -> bool:
        try:
            await self.client.logout()
        except ApiError:
            self._fail(DASHBOARD_REGION, LOGOUT_FAILED)
            return False
        # batches still in flight belong to the old session
        self._generation += 1
        self.dashboard_visible = False
        self.snapshot = None
        self.regions[DASHBOARD_REGION] = RegionState()
        return True

    async def load(self) -> DashboardSnapshot | None:
        """Fetch all four feeds concurrently and render them together.

        Returns the rendered snapshot, or ``None`` if any request failed or a
        newer refresh superseded this one.
        """
        self._generation += 1
        generation = self._generation
        filters = DashboardFilters(days=self.filters.days, crop=self.filters.crop)
        self._start(DASHBOARD_REGION)

        try:
            weather, crop_yield, soil, market = await asyncio.gather(
                self.client.weather(filters.days),
                self.client.crop_yield(filters.crop, filters.days),
                self.client.soil(filters.crop),
                self.client.market_prices(),
            )
        except ApiError as exc:
            if generation != self._generation:
                return None
            logger.warning("Dashboard refresh failed: %s", exc.message)
            self._fail(DASHBOARD_REGION, DASHBOARD_FAILED)
            return None

        if generation != self._generation:
            logger.debug("Discarding stale dashboard batch %d (current %d)", generation, self._generation)
            return None

        snapshot = DashboardSnapshot(filters=filters, weather=weather, crop_yield=crop_yield, soil=soil, market=market)
        self.snapshot = snapshot
        self._finish(DASHBOARD_REGION)
        if self.on_render is not None:
            self.on_render(snapshot)
        return snapshot

    async def set_filters(self, *, days: int | None = None, crop: str | None = None) -> DashboardSnapshot | None:
        if days is not None:
            self.filters.days = days
        if crop is not None:
            self.filters.crop = crop
        return await self.load()
