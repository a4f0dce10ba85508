"""HTTP client for the AgriInsight API."""
from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from agriinsight.schemas.auth import MessageResponse
from agriinsight.schemas.dashboard import MarketPrices, SoilData, WeatherData, YieldData
from agriinsight.schemas.user import UserRead

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:3000"

ModelT = TypeVar("ModelT", bound=BaseModel)


class ApiError(RuntimeError):
    """Raised for any non-2xx response, transport failure or unreadable body."""

    def __init__(self, status_code: int | None, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class AgriInsightClient:
    """Session-aware API client.

    The session lives only in the cookie jar of the underlying
    :class:`httpx.AsyncClient`; nothing else is stored on the client side.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self) -> "AgriInsightClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Request %s %s failed: %s", method, path, exc)
            raise ApiError(None, f"Request failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            message = (body.get("error") if isinstance(body, dict) else None) or response.reason_phrase
            logger.error("Request %s %s returned %s", method, path, response.status_code)
            raise ApiError(response.status_code, message)

        try:
            return response.json()
        except ValueError as exc:
            logger.error("Request %s %s returned a non-JSON body", method, path)
            raise ApiError(response.status_code, "Malformed response body") from exc

    async def _fetch(self, model: type[ModelT], method: str, path: str, **kwargs: Any) -> ModelT:
        data = await self._request(method, path, **kwargs)
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Response from %s does not match %s: %s", path, model.__name__, exc)
            raise ApiError(None, "Unexpected response shape") from exc

    async def register(self, username: str, password: str, email: str) -> str:
        payload = {"username": username, "password": password, "email": email}
        return (await self._fetch(MessageResponse, "POST", "/auth/register", json=payload)).message

    async def login(self, username: str, password: str) -> str:
        payload = {"username": username, "password": password}
        return (await self._fetch(MessageResponse, "POST", "/auth/login", json=payload)).message

    async def logout(self) -> str:
        return (await self._fetch(MessageResponse, "POST", "/auth/logout")).message

    async def me(self) -> UserRead:
        return await self._fetch(UserRead, "GET", "/auth/me")

    async def weather(self, days: int) -> WeatherData:
        return await self._fetch(WeatherData, "GET", "/weather", params={"days": days})

    async def crop_yield(self, crop: str, days: int) -> YieldData:
        return await self._fetch(YieldData, "GET", "/yield", params={"crop": crop, "days": days})

    async def soil(self, crop: str) -> SoilData:
        return await self._fetch(SoilData, "GET", "/soil", params={"crop": crop})

    async def market_prices(self) -> MarketPrices:
        return await self._fetch(MarketPrices, "GET", "/market-prices")
