# dep_scout/net/fetcher.py
"""
Fetcher module: the HTTP transport of a scan. Owns the aiohttp session whose
connector resolves hosts through :class:`~dep_scout.net.resolver.Resolver`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from aiohttp import ClientSession, ClientTimeout, TCPConnector

from dep_scout.config import ScanOptions, proxy_url
from dep_scout.logger import get_logger
from dep_scout.net.resolver import Resolver


@dataclass(slots=True)
class FetchResponse:
    """Body and metadata of one fetched target."""

    url: str
    status: int
    text: str
    resolver: str


class Fetcher:
    """HTTP client for one run. TLS certificates are not verified."""

    def __init__(
        self,
        options: ScanOptions,
        logger: Optional[logging.Logger] = None,
        resolver: Optional[Resolver] = None,
    ) -> None:
        self.options = options
        self.logger = get_logger(logger)
        self.resolver = resolver or Resolver(options.resolvers, options.timeout, logger=self.logger)
        self.proxy = proxy_url(options.proxy, self.logger)
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> Fetcher:
        connector = TCPConnector(
            ssl=False,
            resolver=self.resolver,
            limit_per_host=self.options.concurrency,
        )
        headers = {"User-Agent": self.options.user_agent} if self.options.user_agent else None
        self.session = ClientSession(
            connector=connector,
            timeout=ClientTimeout(total=self.options.timeout),
            headers=headers,
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        await self.resolver.close()

    async def fetch(self, url: str) -> FetchResponse:
        """GET *url* and return its decoded body. Network errors propagate."""
        if not self.session:
            raise RuntimeError("Session not initialized")
        self.logger.debug("Fetching %s", url)
        async with self.session.get(url, proxy=self.proxy) as resp:
            text = await resp.text(errors="replace")
            return FetchResponse(url, resp.status, text, self.resolver_for(url))

    def resolver_for(self, url: str) -> str:
        """Resolver that served the host of *url* (``""`` if none was needed).

        Behind a proxy the connector only resolves the proxy host, so its
        resolver is reported for every target.
        """
        host = urlsplit(self.proxy or url).hostname or ""
        return self.resolver.used_for(host)
