"""HTTP Basic authentication request checker."""

import logging
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any

import aiohttp
from yarl import URL

from hdata_conformance.auth.base import DEFAULT_USER, RequestChecker

if TYPE_CHECKING:
    from hdata_conformance.context import Context

log = logging.getLogger(__name__)


class BasicAuthRequestChecker(RequestChecker):
    """Sends every request with Basic credentials of the active user."""

    def __init__(self) -> None:
        self._auth: aiohttp.BasicAuth | None = None

    def setup(self, context: "Context") -> None:
        credentials = context.config.users.get(DEFAULT_USER)
        if credentials is None:
            log.info("No %s credentials configured, sending anonymous requests", DEFAULT_USER)
            return
        self._auth = aiohttp.BasicAuth(
            credentials.email, credentials.password.get_secret_value()
        )

    def execute_request(
        self,
        context: "Context",
        session: aiohttp.ClientSession,
        method: str,
        url: URL,
        **kwargs: Any,
    ) -> AbstractAsyncContextManager[aiohttp.ClientResponse]:
        if self._auth is not None:
            kwargs.setdefault("auth", self._auth)
        return session.request(method, url, **kwargs)

    async def set_user(
        self, context: "Context", user_id: str, email: str, password: str
    ) -> None:
        log.info("Switching Basic credentials to user %s", user_id)
        self._auth = aiohttp.BasicAuth(email, password)

    def current_user(self, context: "Context") -> str | None:
        return self._auth.login if self._auth is not None else None
