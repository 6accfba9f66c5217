"""Error kinds surfaced to the chat, plus the raw transport error they are built from."""

from __future__ import annotations

from typing import Optional

from storefront.constants import (
    MSG_ALREADY_IN_CART,
    MSG_BACKEND,
    MSG_GENERIC,
    MSG_LOGIN_REQUIRED,
    MSG_PRODUCT_NOT_FOUND,
)


class ApiError(Exception):
    """Failed HTTP round-trip. ``status`` is None for transport or decoding failures."""

    def __init__(self, status: Optional[int] = None, message: Optional[str] = None):
        super().__init__(message or f"HTTP {status}")
        self.status = status
        self.message = message

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500


class StorefrontError(Exception):
    """Base class for user-visible, non-fatal failures."""

    default_message = MSG_GENERIC

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(StorefrontError):
    default_message = MSG_LOGIN_REQUIRED


class AlreadyInCart(StorefrontError):
    default_message = MSG_ALREADY_IN_CART


class ProductNotFound(StorefrontError):
    default_message = MSG_PRODUCT_NOT_FOUND


class CatalogUnavailable(StorefrontError):
    pass


class SearchFailed(StorefrontError):
    default_message = MSG_BACKEND


class NetworkOrServerError(StorefrontError):
    default_message = MSG_BACKEND


def server_message(err: ApiError) -> Optional[str]:
    """Server text is shown verbatim only for 4xx responses."""
    if err.is_client_error and err.message:
        return err.message
    return None


def classify_cart_error(err: ApiError, fallback: Optional[str] = None) -> StorefrontError:
    if err.status == 401:
        return Unauthenticated(server_message(err))
    if err.status == 404:
        return ProductNotFound(server_message(err))
    return NetworkOrServerError(server_message(err) or fallback)


def classify_search_error(err: ApiError) -> SearchFailed:
    return SearchFailed(server_message(err))
