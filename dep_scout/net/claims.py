# dep_scout/net/claims.py
"""
Registry claim checks: is a package name currently registered?
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional
from urllib.parse import quote

from aiohttp import ClientError, ClientSession

from dep_scout.config import DEFAULT_REGISTRY
from dep_scout.logger import get_logger
from dep_scout.models import Package

__all__ = ("ClaimChecker",)


class ClaimChecker:
    """Asks the registry about package names with metadata-only HEAD requests.

    Answers are cached for the lifetime of the checker. Failures are logged
    and count as "unclaimed"; they are not cached.
    """

    def __init__(
        self,
        session: ClientSession,
        registry_url: str = DEFAULT_REGISTRY,
        proxy: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.session = session
        self.registry_url = registry_url.rstrip("/")
        self.proxy = proxy
        self.logger = get_logger(logger)
        self._cache: Dict[str, bool] = {}

    def package_url(self, name: str) -> str:
        return f"{self.registry_url}/{quote(name, safe='@')}"

    async def is_claimed(self, name: str) -> bool:
        if name in self._cache:
            return self._cache[name]
        url = self.package_url(name)
        try:
            async with self.session.head(url, proxy=self.proxy, allow_redirects=True) as resp:
                claimed = 200 <= resp.status < 300
        except (ClientError, asyncio.TimeoutError, OSError) as exc:
            self.logger.warning("Claim check for %s failed: %s", name, exc)
            return False
        self._cache[name] = claimed
        self.logger.debug("Package %s claimed=%s", name, claimed)
        return claimed

    async def annotate(self, packages: Iterable[Package]) -> List[Package]:
        """Return *packages* with ``claimed`` filled in, order preserved."""
        pkgs = list(packages)
        flags = await asyncio.gather(*(self.is_claimed(pkg.name) for pkg in pkgs))
        return [replace(pkg, claimed=flag) for pkg, flag in zip(pkgs, flags)]
