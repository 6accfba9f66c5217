"""
HTTP client for the storefront backend.

Every endpoint returns parsed model objects. Any failure (non-2xx status,
transport error, body that is not the expected JSON shape) is raised as
ApiError so the coordinators can classify it in one place.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from storefront.config import settings
from storefront.constants import CART_PATH, LOGIN_PATH, PRODUCTS_PATH, REGISTER_PATH, SEARCH_PATH
from storefront.errors import ApiError
from storefront.models import CartEntry, Product

logger = logging.getLogger(__name__)


def _error_message(resp: httpx.Response) -> Optional[str]:
    try:
        data = resp.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return None


def _parse_list(data: Any, parse) -> list:
    if not isinstance(data, list):
        raise ApiError(message="malformed response: expected a list")
    try:
        return [parse(row) for row in data]
    except (KeyError, TypeError, ValueError) as e:
        raise ApiError(message=f"malformed response: {e}") from e


class ApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.api_endpoint).rstrip("/"),
            timeout=timeout if timeout is not None else settings.request_timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: Optional[str] = None,
        params: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            resp = await self._client.request(method, path, params=params, json=json, headers=headers)
        except httpx.RequestError as e:
            logger.error("%s %s request failed: %s", method, path, e)
            raise ApiError(message=str(e)) from e

        if resp.is_error:
            logger.warning("%s %s HTTP %s", method, path, resp.status_code)
            raise ApiError(resp.status_code, _error_message(resp))

        try:
            return resp.json()
        except ValueError as e:
            logger.warning("%s %s returned invalid JSON", method, path)
            raise ApiError(message="invalid JSON") from e

    async def list_products(self) -> List[Product]:
        data = await self._request("GET", PRODUCTS_PATH)
        return _parse_list(data, Product.from_json)

    async def search_products(self, value: str) -> List[Product]:
        data = await self._request("GET", SEARCH_PATH, params={"value": value})
        return _parse_list(data, Product.from_json)

    async def get_cart(self, token: str) -> List[CartEntry]:
        data = await self._request("GET", CART_PATH, token=token)
        return _parse_list(data, CartEntry.from_json)

    async def set_cart_qty(self, token: str, product_id: str, qty: int) -> List[CartEntry]:
        """POST /cart. qty=0 removes the product; the response is the whole cart."""
        data = await self._request(
            "POST", CART_PATH, token=token, json={"productId": product_id, "qty": qty}
        )
        return _parse_list(data, CartEntry.from_json)

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", LOGIN_PATH, json={"username": username, "password": password})
        if not isinstance(data, dict):
            raise ApiError(message="malformed response: expected an object")
        return data

    async def register(self, username: str, password: str) -> Dict[str, Any]:
        data = await self._request("POST", REGISTER_PATH, json={"username": username, "password": password})
        if not isinstance(data, dict):
            raise ApiError(message="malformed response: expected an object")
        return data
