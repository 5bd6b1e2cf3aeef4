"""WebDriver service/client: one driver process plus the sessions opened on it."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import httpx

from ..config import settings
from ..core.exceptions import NavigatorError, ServiceError, ServiceNotStartedError
from .service import Service
from .session import Session

logger = logging.getLogger(__name__)


class WebDriver:
    """
    Controls a WebDriver process and opens sessions against it.

    Usable as an async context manager: the service is started (and waited
    for) on entry and stopped on exit.
    """

    def __init__(
        self,
        url_template: str,
        command_template: Sequence[str],
        timeout: Optional[float] = None,
        debug: Optional[bool] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.webdriver_timeout_seconds
        self.debug = debug if debug is not None else settings.debug
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        self.service = Service(url_template, command_template)
        self.sessions: List[Session] = []

    @property
    def url(self) -> str:
        """URL of the WebDriver service, or "" when it is not running."""
        return self.service.url

    async def open(self, capabilities: Optional[dict] = None) -> Session:
        """
        Open a session on the running service.

        Raises:
            ServiceNotStartedError: If the service has not been started
        """
        url = self.service.url
        if not url:
            raise ServiceNotStartedError()
        session = await Session.open(self.http_client, url, capabilities, self.debug)
        self.sessions.append(session)
        return session

    async def start(self) -> None:
        """
        Start the service and wait for it to boot.

        If the service does not boot within the timeout it is stopped again.
        """
        try:
            await self.service.start(debug=self.debug)
        except ServiceError as e:
            raise ServiceError(f"failed to start service: {e}") from e
        try:
            await self.service.wait_for_boot(self.timeout)
        except BaseException:
            try:
                await self.service.stop()
            except ServiceError as e:
                logger.warning(f"Error stopping service after failed boot: {e}")
            raise

    async def stop(self) -> None:
        """Close the window of every opened session, then stop the service."""
        for session in self.sessions:
            try:
                await session.delete_window()
            except NavigatorError as e:
                logger.warning(f"Error closing window of {session.url}: {e}")
        self.sessions.clear()
        try:
            await self.service.stop()
        except ServiceError as e:
            raise ServiceError(f"failed to stop service: {e}") from e

    async def aclose(self) -> None:
        """Release the HTTP client if this driver created it."""
        if self._owns_http_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "WebDriver":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        try:
            await self.stop()
        finally:
            await self.aclose()
