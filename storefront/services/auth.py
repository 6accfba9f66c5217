from __future__ import annotations

import logging

from storefront.constants import MSG_BACKEND, MSG_USERNAME_TAKEN
from storefront.errors import ApiError, NetworkOrServerError, Unauthenticated, server_message
from storefront.models import Session

logger = logging.getLogger(__name__)


async def login(api, username: str, password: str) -> Session:
    try:
        data = await api.login(username, password)
    except ApiError as e:
        raise Unauthenticated(server_message(e) or MSG_BACKEND) from e

    if not data.get("success") or not data.get("token"):
        raise Unauthenticated(str(data.get("message") or MSG_BACKEND))

    try:
        balance = float(data.get("balance") or 0)
    except (TypeError, ValueError):
        balance = 0.0
    logger.info("logged in as %s", data.get("username", username))
    return Session(token=str(data["token"]), username=str(data.get("username", username)), balance=balance)


async def register(api, username: str, password: str) -> None:
    try:
        data = await api.register(username, password)
    except ApiError as e:
        raise NetworkOrServerError(server_message(e) or MSG_BACKEND) from e

    if not data.get("success"):
        raise NetworkOrServerError(str(data.get("message") or MSG_USERNAME_TAKEN))
    logger.info("registered %s", username)
