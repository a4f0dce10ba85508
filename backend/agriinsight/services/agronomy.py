"""Providers for the agronomic data shown on the dashboard."""
from __future__ import annotations

import abc
import random
from datetime import date, datetime, timedelta, timezone
from typing import Callable

from agriinsight.schemas.dashboard import (
    SOIL_NUTRIENTS,
    CropPrice,
    MarketPrices,
    SoilData,
    WeatherData,
    YieldData,
)

# (low, high) bounds of the synthetic samples
TEMPERATURE_RANGE = (10.0, 40.0)
RAINFALL_RANGE = (0.0, 50.0)
YIELD_RANGE = (50.0, 150.0)
SOIL_LEVEL_RANGES = {
    "Nitrogen": (0.0, 100.0),
    "Phosphorus": (0.0, 100.0),
    "Potassium": (0.0, 100.0),
    "pH": (0.0, 14.0),
    "Organic Matter": (0.0, 10.0),
}
MARKET_PRICE_RANGES = {
    "Wheat": (5.0, 15.0),
    "Corn": (3.0, 11.0),
    "Soybeans": (8.0, 23.0),
}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def date_window(start: date, days: int) -> list[date]:
    """Return ``days`` consecutive calendar dates beginning at ``start``."""

    return [start + timedelta(days=offset) for offset in range(days)]


class AgronomicDataProvider(abc.ABC):
    """Source of the four dashboard feeds."""

    @abc.abstractmethod
    def weather(self, days: int) -> WeatherData:
        ...

    @abc.abstractmethod
    def crop_yield(self, crop: str, days: int) -> YieldData:
        ...

    @abc.abstractmethod
    def soil(self, crop: str | None) -> SoilData:
        ...

    @abc.abstractmethod
    def market_prices(self) -> MarketPrices:
        ...


class RandomAgronomicDataProvider(AgronomicDataProvider):
    """Placeholder provider producing uniformly random samples."""

    def __init__(self, rng: random.Random | None = None, today: Callable[[], date] = utc_today) -> None:
        self._rng = rng or random.Random()
        self._today = today

    def _sample(self, bounds: tuple[float, float], count: int) -> list[float]:
        low, high = bounds
        return [self._rng.uniform(low, high) for _ in range(count)]

    def weather(self, days: int) -> WeatherData:
        return WeatherData(
            dates=date_window(self._today(), days),
            temperatures=self._sample(TEMPERATURE_RANGE, days),
            rainfall=self._sample(RAINFALL_RANGE, days),
        )

    def crop_yield(self, crop: str, days: int) -> YieldData:
        return YieldData(
            crop_type=crop,
            dates=date_window(self._today(), days),
            yield_values=self._sample(YIELD_RANGE, days),
        )

    def soil(self, crop: str | None) -> SoilData:
        # crop does not influence the samples yet
        levels = [self._rng.uniform(*SOIL_LEVEL_RANGES[name]) for name in SOIL_NUTRIENTS]
        return SoilData(nutrients=list(SOIL_NUTRIENTS), levels=levels)

    def market_prices(self) -> MarketPrices:
        return MarketPrices(
            prices=[
                CropPrice(crop_name=name, price_per_bushel=self._rng.uniform(low, high))
                for name, (low, high) in MARKET_PRICE_RANGES.items()
            ]
        )
