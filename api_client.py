"""Asynchronous client for the storefront API."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_API_URL = "http://localhost:8181/api"

NETWORK_ERROR_MESSAGE = "Network error. Please check your connection."
TIMEOUT_MESSAGE = "Request timeout"
UNEXPECTED_MESSAGE = "An unexpected error occurred"


class ApiError(Exception):
    """A failed API call. ``status`` is the HTTP status, 0 for network failures."""

    def __init__(self, message: str, status: int, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def __repr__(self):
        return f"{type(self).__name__}({self.message!r}, status={self.status})"


class NetworkError(ApiError):
    def __init__(self, message: str = NETWORK_ERROR_MESSAGE):
        super().__init__(message, 0)


class ApiTimeoutError(ApiError):
    def __init__(self, message: str = TIMEOUT_MESSAGE):
        super().__init__(message, 408)


@dataclass
class ClientSettings:
    api_url: str = DEFAULT_API_URL
    checkout_url: str | None = None
    order_api_url: str | None = None
    admin_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, environ=None) -> "ClientSettings":
        env = os.environ if environ is None else environ
        api_url = (env.get("API_URL") or DEFAULT_API_URL).rstrip("/")
        return cls(
            api_url=api_url,
            checkout_url=env.get("CHECKOUT_URL") or f"{api_url}/v1/checkout",
            order_api_url=(env.get("ORDER_API_URL") or f"{api_url}/v1").rstrip("/"),
            admin_token=env.get("ADMIN_TOKEN") or None,
            timeout=float(env.get("API_TIMEOUT") or DEFAULT_TIMEOUT),
        )


class ApiClient:
    """JSON over HTTP with a fixed per-request timeout.

    Every failure surfaces as an ``ApiError``; ``asyncio.CancelledError``
    passes through untouched so callers can cancel in-flight requests.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        checkout_url: str | None = None,
        order_api_url: str | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.token = token
        self.checkout_url = checkout_url or f"{self.base_url}/v1/checkout"
        self.order_api_url = (order_api_url or f"{self.base_url}/v1").rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: ClientSettings, **kwargs) -> "ApiClient":
        kwargs.setdefault("token", settings.admin_token)
        return cls(
            settings.api_url,
            timeout=settings.timeout,
            checkout_url=settings.checkout_url,
            order_api_url=settings.order_api_url,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    # ---------------- Core request ----------------

    async def request(
        self,
        method: str,
        endpoint: str = "",
        data: Any = None,
        *,
        url: str | None = None,
        params: dict[str, Any] | None = None,
        fallback: str = "An error occurred",
        unexpected: str = UNEXPECTED_MESSAGE,
        authenticated: bool = True,
    ) -> Any:
        target = url or f"{self.base_url}{endpoint}"
        headers = {"Content-Type": "application/json"}
        if authenticated and self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self._client.request(
                method,
                target,
                json=data,
                params=params,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.warning("%s %s timed out: %s", method, target, exc)
            raise ApiTimeoutError() from exc
        except httpx.RequestError as exc:
            logger.warning("%s %s failed: %s", method, target, exc)
            raise NetworkError() from exc
        except Exception as exc:
            logger.exception("%s %s failed unexpectedly", method, target)
            raise ApiError(unexpected, 500) from exc

        if not response.is_success:
            try:
                body = response.json()
            except ValueError:
                body = None
            if not isinstance(body, dict):
                body = {"message": response.reason_phrase}
            raise ApiError(body.get("message") or fallback, response.status_code, body)

        if "application/json" not in response.headers.get("content-type", ""):
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(unexpected, 500) from exc

    async def get(self, endpoint: str, **kwargs) -> Any:
        return await self.request("GET", endpoint, **kwargs)

    async def post(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return await self.request("POST", endpoint, data, **kwargs)

    async def put(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PUT", endpoint, data, **kwargs)

    async def patch(self, endpoint: str, data: Any = None, **kwargs) -> Any:
        return await self.request("PATCH", endpoint, data, **kwargs)

    async def delete(self, endpoint: str, **kwargs) -> Any:
        return await self.request("DELETE", endpoint, **kwargs)

    # ---------------- Orders ----------------

    async def place_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self.request(
            "POST",
            data=payload,
            url=self.checkout_url,
            fallback="Failed to place order",
            unexpected="An unexpected error occurred while placing order",
            authenticated=False,
        )

    async def get_order_by_token(self, order_code: str, token: str) -> dict[str, Any]:
        return await self.request(
            "GET",
            url=f"{self.order_api_url}/orders/{order_code}",
            params={"token": token},
            fallback="Order not found",
            unexpected="Failed to fetch order details",
            authenticated=False,
        )

    async def track_order_by_email(self, order_code: str, email: str) -> dict[str, Any]:
        return await self.request(
            "POST",
            data={"orderCode": order_code, "email": email},
            url=f"{self.order_api_url}/orders/track",
            fallback="Order not found or email does not match",
            unexpected="Failed to track order",
            authenticated=False,
        )

    async def confirm_order_payment(self, order_code: str, token: str) -> dict[str, Any]:
        return await self.request(
            "POST",
            data={"token": token},
            url=f"{self.order_api_url}/orders/{order_code}/confirm-payment",
            fallback="Failed to confirm payment",
            unexpected="Failed to confirm payment",
            authenticated=False,
        )
