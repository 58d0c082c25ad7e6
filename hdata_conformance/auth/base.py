"""Abstract base class for request checkers."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Any

import aiohttp
from yarl import URL

if TYPE_CHECKING:
    from hdata_conformance.context import Context

DEFAULT_USER = "defaultUser"


class RequestChecker(ABC):
    """Hook that wraps every HTTP request sent to the server under test.

    Implementations handle server specific concerns such as authentication
    so that test units stay independent of them.
    """

    def setup(self, context: "Context") -> None:
        """Prepare the checker once the context is created."""

    @abstractmethod
    def execute_request(
        self,
        context: "Context",
        session: aiohttp.ClientSession,
        method: str,
        url: URL,
        **kwargs: Any,
    ) -> AbstractAsyncContextManager[aiohttp.ClientResponse]:
        """Send a request through the session on behalf of the current user."""

    @abstractmethod
    async def set_user(
        self, context: "Context", user_id: str, email: str, password: str
    ) -> None:
        """Switch the identity used for subsequent requests.

        Raises:
            AuthenticationError: If the server rejects the credentials

        """

    @abstractmethod
    def current_user(self, context: "Context") -> str | None:
        """Return the email of the active user, if any."""
