"""High-level driver: preset driver processes and page creation."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional, Sequence

from ..webdriver import client
from .capabilities import PageConfig
from .exceptions import ConfigurationError, NavigatorError, SessionError
from .page import Page

logger = logging.getLogger(__name__)


class WebDriver(client.WebDriver):
    """
    Controls a WebDriver process and opens pages on it.

    The url and command templates may use {Host} (local address to bind
    to), {Port} (a free port on it) and {Address} ("{Host}:{Port}"):

        WebDriver("http://{Address}/wd/hub", ["java", "-jar", "selenium-server.jar", "-port", "{Port}"])

    Page options given here become the defaults for every new_page() call.
    """

    def __init__(
        self,
        url_template: str,
        command_template: Sequence[str],
        config: Optional[PageConfig] = None,
        **options: Any,
    ):
        self.default_config = (config or PageConfig()).merged(**options)
        super().__init__(
            url_template,
            command_template,
            timeout=self.default_config.timeout,
            debug=self.default_config.debug,
            http_client=self.default_config.http_client,
        )

    async def new_page(self, **options: Any) -> Page:
        """
        Open a new session and return its page.

        Options override the driver's default page options; browser_name and
        chrome_options take precedence over desired capabilities. The
        http_client option is ignored here: pages always share the driver's
        client.

        Raises:
            SessionError: If the session cannot be opened
        """
        config = self.default_config.merged(**options)
        try:
            session = await self.open(config.capabilities())
        except NavigatorError as e:
            raise SessionError(f"failed to connect to WebDriver: {e}") from e
        logger.info(f"Opened page on {session.url}")
        return Page(session)


def _binary(name: str) -> str:
    return f"{name}.exe" if sys.platform == "win32" else name


def chrome_driver(config: Optional[PageConfig] = None, **options: Any) -> WebDriver:
    """
    A ChromeDriver-backed driver.

    New pages accept invalid SSL certificates unless reject_invalid_ssl is set.
    """
    command = [_binary("chromedriver"), "--port={Port}"]
    return WebDriver("http://{Address}", command, config, **options)


def gecko_driver(config: Optional[PageConfig] = None, **options: Any) -> WebDriver:
    """A geckodriver-backed driver for Gecko browsers such as Firefox."""
    command = [_binary("geckodriver"), "--port={Port}"]
    return WebDriver("http://{Address}", command, config, **options)


def edge_driver(config: Optional[PageConfig] = None, **options: Any) -> WebDriver:
    """
    A Microsoft WebDriver-backed driver for Edge.

    Raises:
        ConfigurationError: On any platform other than Windows
    """
    if sys.platform != "win32":
        raise ConfigurationError("not supported, windows only")
    command = ["MicrosoftWebDriver.exe", "--port={Port}"]
    # MicrosoftWebDriver only answers on localhost, not 127.0.0.1
    return WebDriver("http://localhost:{Port}", command, config, **options)
