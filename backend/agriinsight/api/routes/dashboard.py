"""Protected data feeds rendered by the dashboard."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from agriinsight.core.dependencies import get_current_user_id, get_data_provider
from agriinsight.schemas.auth import ErrorResponse
from agriinsight.schemas.dashboard import MarketPrices, SoilData, WeatherData, YieldData
from agriinsight.services.agronomy import AgronomicDataProvider

router = APIRouter(
    tags=["dashboard"],
    dependencies=[Depends(get_current_user_id)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def _window(request: Request, days: int = Query(..., gt=0, description="Number of days ahead, starting today")) -> int:
    limit = request.app.state.settings.max_forecast_days
    if days > limit:
        raise HTTPException(
            status_code=422,
            detail=f"days must be at most {limit}",
        )
    return days


@router.get("/weather", response_model=WeatherData)
async def weather(
    days: int = Depends(_window),
    provider: AgronomicDataProvider = Depends(get_data_provider),
) -> WeatherData:
    return provider.weather(days)


@router.get("/yield", response_model=YieldData)
async def crop_yield(
    crop: str = Query(..., min_length=1, max_length=64),
    days: int = Depends(_window),
    provider: AgronomicDataProvider = Depends(get_data_provider),
) -> YieldData:
    return provider.crop_yield(crop, days)


@router.get("/soil", response_model=SoilData)
async def soil(
    crop: str | None = Query(default=None, max_length=64),
    provider: AgronomicDataProvider = Depends(get_data_provider),
) -> SoilData:
    return provider.soil(crop)


@router.get("/market-prices", response_model=MarketPrices)
async def market_prices(provider: AgronomicDataProvider = Depends(get_data_provider)) -> MarketPrices:
    return provider.market_prices()
