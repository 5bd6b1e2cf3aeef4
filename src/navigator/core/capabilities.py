"""Desired capabilities and per-page configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import httpx


class Capabilities(dict):
    """
    Desired capabilities sent when a session is opened.

    The setters return the instance so calls can be chained:

        Capabilities().browser("firefox").without("javascriptEnabled")
    """

    def browser(self, name: str) -> "Capabilities":
        self["browserName"] = name
        return self

    def version(self, version: str) -> "Capabilities":
        self["version"] = version
        return self

    def platform(self, platform: str) -> "Capabilities":
        self["platform"] = platform
        return self

    def with_(self, feature: str) -> "Capabilities":
        """Enable a boolean feature."""
        self[feature] = True
        return self

    def without(self, feature: str) -> "Capabilities":
        """Disable a boolean feature."""
        self[feature] = False
        return self

    def json(self) -> str:
        return json.dumps(self)


@dataclass
class PageConfig:
    """
    Options for a driver and the pages it opens.

    Fields left as None fall back to the driver's settings; desired
    capabilities are overridden by the more specific browser_name and
    chrome_options fields.
    """

    timeout: Optional[float] = None
    debug: Optional[bool] = None
    http_client: Optional[httpx.AsyncClient] = None
    browser_name: str = ""
    reject_invalid_ssl: bool = False
    chrome_options: Optional[Dict[str, Any]] = None
    desired: Optional[Dict[str, Any]] = None

    def merged(self, **options: Any) -> "PageConfig":
        """Return a copy with the given options applied over this config."""
        unknown = set(options) - set(self.__dataclass_fields__)
        if unknown:
            raise TypeError(f"unknown page options: {sorted(unknown)}")
        return replace(self, **options)

    def with_chrome_option(self, option: str, value: Any) -> "PageConfig":
        """Return a copy with one more chromeOptions entry, eg. ("args", ["--headless"])."""
        chrome_options = dict(self.chrome_options or {})
        chrome_options[option] = value
        return replace(self, chrome_options=chrome_options)

    def capabilities(self) -> Capabilities:
        merged = Capabilities({"acceptSslCerts": True})
        merged.update(self.desired or {})
        if self.browser_name:
            merged.browser(self.browser_name)
        if self.chrome_options is not None:
            merged["chromeOptions"] = self.chrome_options
        if self.reject_invalid_ssl:
            merged.without("acceptSslCerts")
        return merged
