"""Shared configuration and HTTP transport for test units."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiohttp
from yarl import URL

from hdata_conformance.auth.base import DEFAULT_USER, RequestChecker
from hdata_conformance.config import HarnessConfig
from hdata_conformance.errors import AuthenticationError
from hdata_conformance.loading import load_request_checker
from hdata_conformance.results import ResultAggregator

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class Context:
    """Configuration, transport and reporter shared by the units of a run.

    Configuration is read-only once loaded except for ``set_property`` and
    user switching, which is serialized.
    """

    config: HarnessConfig
    session: aiohttp.ClientSession = field(repr=False)
    request_checker: RequestChecker | None = None
    reporter: ResultAggregator = field(default_factory=ResultAggregator)
    user: str | None = None
    _properties: dict[str, str] = field(init=False, repr=False)
    _user_lock: asyncio.Lock = field(init=False, repr=False, default_factory=asyncio.Lock)

    def __post_init__(self) -> None:
        self._properties = dict(self.config.properties)

    @classmethod
    @asynccontextmanager
    async def from_config(cls, config: HarnessConfig) -> AsyncGenerator["Context", None]:
        """Create a context with managed session lifecycle.

        Raises:
            RequestCheckerNotFoundError: If the configured request checker is unknown

        """
        checker = (
            load_request_checker(config.request_checker)
            if config.request_checker
            else None
        )
        timeout = aiohttp.ClientTimeout(total=config.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            context = cls(config=config, session=session, request_checker=checker)
            if checker is not None:
                checker.setup(context)
                if checker.current_user(context) is not None:
                    context.user = DEFAULT_USER
            yield context

    @property
    def base_url(self) -> URL:
        return URL(self.config.base_url)

    def url(self, relative_path: str | None = None) -> URL:
        """Resolve a path against the base URL.

        Paths starting with "/" are relative to the base URL, not to the
        server root.
        """
        if relative_path is None or not relative_path.strip():
            return self.base_url
        return URL(self.config.base_url + relative_path.removeprefix("/"))

    def request(
        self, method: str, url: URL | str, **kwargs: Any
    ) -> AbstractAsyncContextManager[aiohttp.ClientResponse]:
        """Send a request through the request checker when one is configured."""
        if self.config.proxy:
            kwargs.setdefault("proxy", self.config.proxy)
        url = URL(url) if isinstance(url, str) else url
        log.debug("%s %s", method, url)
        if self.request_checker is not None:
            return self.request_checker.execute_request(
                self, self.session, method, url, **kwargs
            )
        return self.session.request(method, url, **kwargs)

    def get_string(self, key: str) -> str | None:
        return self._properties.get(key)

    def set_property(self, key: str, value: str) -> None:
        log.debug("Setting property %s=%s", key, value)
        self._properties[key] = value

    def get_user_property(
        self, user: str, prop: str, default: str | None = None
    ) -> str | None:
        """Get a user property stored as "<user>.<prop>"."""
        value = self.get_string(f"{user}.{prop}")
        return default if value is None else value

    def get_property_as_file(self, key: str) -> Path | None:
        """Return the property as an existing regular file, or None."""
        value = self.get_string(key)
        if value is None or not value.strip():
            log.debug("property %s not found or contains empty string", key)
            return None
        path = Path(value)
        if not path.is_file():
            log.info("file %s does not exist or isn't regular file", path)
            return None
        return path

    def get_property_as_url(self, key: str) -> URL | None:
        """Return the property as an absolute URL, or None."""
        value = self.get_string(key)
        if value is None or not value.strip():
            log.debug("property %s not found or contains empty string", key)
            return None
        try:
            url = URL(value)
        except ValueError as e:
            log.warning("property %s is not a valid URL: %s", key, e)
            return None
        if not url.is_absolute():
            log.warning("property %s is not an absolute URL: %s", key, value)
            return None
        return url

    async def set_user(self, user_id: str) -> bool:
        """Switch the active user identity.

        Returns:
            True if the request checker now acts as the given user

        """
        if self.request_checker is None:
            return False

        credentials = self.config.users.get(user_id)
        if credentials is None:
            log.warning("user %s credentials not found in config", user_id)
            return False

        async with self._user_lock:
            try:
                await self.request_checker.set_user(
                    self,
                    user_id,
                    credentials.email,
                    credentials.password.get_secret_value(),
                )
            except AuthenticationError as e:
                log.warning("failed to set user %s: %s", user_id, e)
                return False

            if self.request_checker.current_user(self) == credentials.email:
                self.user = user_id
                return True
        return False
