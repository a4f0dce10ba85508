"""Response schemas for the dashboard data feeds."""
from __future__ import annotations

from datetime import date

from pydantic import Field, model_validator

from .base import ApiModel

SOIL_NUTRIENTS = ("Nitrogen", "Phosphorus", "Potassium", "pH", "Organic Matter")


class WeatherData(ApiModel):
    dates: list[date]
    temperatures: list[float]
    rainfall: list[float]

    @model_validator(mode="after")
    def _aligned(self) -> "WeatherData":
        if not len(self.dates) == len(self.temperatures) == len(self.rainfall):
            raise ValueError("weather series must have equal length")
        return self


class YieldData(ApiModel):
    crop_type: str
    dates: list[date]
    yield_values: list[float]

    @model_validator(mode="after")
    def _aligned(self) -> "YieldData":
        if len(self.dates) != len(self.yield_values):
            raise ValueError("yield series must have equal length")
        return self


class SoilData(ApiModel):
    nutrients: list[str] = Field(..., min_length=len(SOIL_NUTRIENTS), max_length=len(SOIL_NUTRIENTS))
    levels: list[float] = Field(..., min_length=len(SOIL_NUTRIENTS), max_length=len(SOIL_NUTRIENTS))


class CropPrice(ApiModel):
    crop_name: str
    price_per_bushel: float = Field(..., ge=0)


class MarketPrices(ApiModel):
    prices: list[CropPrice]
