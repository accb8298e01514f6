# dep_scout/net/resolver.py
"""
DNS resolution with a fallback chain: configured resolvers in order, then the
system resolver. Plugged into aiohttp's connector so every connection the
transport opens goes through it.
"""
from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Dict, List, Optional, Sequence, Tuple

import dns.asyncresolver
import dns.exception
from aiohttp.abc import AbstractResolver, ResolveResult
from aiohttp.resolver import ThreadedResolver

from dep_scout.logger import get_logger
from dep_scout.models import ResolutionResult

__all__ = ("SYSTEM", "Resolver", "parse_nameserver")

SYSTEM = "system"
DEFAULT_DNS_PORT = 53

Nameserver = Tuple[str, int, str]  # (ip, port, label as configured)


def parse_nameserver(value: str) -> Nameserver:
    """Parse ``ip``, ``ip:port``, ``[ipv6]:port`` or a bare IPv6 address."""
    label = value.strip()
    host, port = label, DEFAULT_DNS_PORT
    if label.startswith("["):
        host, _, rest = label[1:].partition("]")
        if rest:
            if not rest.startswith(":"):
                raise ValueError(f"malformed resolver address: {value!r}")
            port = int(rest[1:])
    elif label.count(":") == 1:
        host, _, port_text = label.partition(":")
        port = int(port_text)
    ipaddress.ip_address(host)
    if not 0 < port < 65536:
        raise ValueError(f"resolver port out of range: {value!r}")
    return host, port, label


def _is_ip(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return False
    return True


class Resolver(AbstractResolver):
    """Resolve hostnames through custom DNS servers with a system fallback.

    The resolver that answered is remembered per hostname so each result can
    report which DNS path served it.
    """

    def __init__(
        self,
        nameservers: Sequence[str] = (),
        timeout: float = 5.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = get_logger(logger)
        self.timeout = timeout
        self.nameservers: List[Nameserver] = []
        for value in nameservers:
            try:
                self.nameservers.append(parse_nameserver(value))
            except ValueError as exc:
                self.logger.warning("Ignoring resolver %r: %s", value, exc)
        self._system: Optional[ThreadedResolver] = None
        self._used: Dict[str, str] = {}

    async def resolve_host(self, host: str, family: int = socket.AF_UNSPEC) -> ResolutionResult:
        """Resolve *host*, trying each configured resolver before the system one."""
        if not self.nameservers:
            return await self._resolve_system(host, family)

        for ip, port, label in self.nameservers:
            try:
                ips = await self._query(host, ip, port)
            except (dns.exception.DNSException, OSError) as exc:
                self.logger.debug("DNS resolution of %s failed with resolver %s: %s", host, label, exc)
                continue
            if ips:
                return ResolutionResult(ips=ips, resolver=label)
            self.logger.debug("Resolver %s returned no A records for %s", label, host)

        self.logger.debug("All custom resolvers failed for %s, trying system DNS", host)
        result = await self._resolve_system(host, family)
        if result.error is not None:
            result.error = OSError(f"all resolvers failed, last error: {result.error}")
        return result

    async def _query(self, host: str, ip: str, port: int) -> List[str]:
        resolver = dns.asyncresolver.Resolver(configure=False)
        resolver.port = port
        resolver.nameservers = [ip]
        resolver.timeout = self.timeout
        resolver.lifetime = self.timeout
        answer = await resolver.resolve(host, "A")
        return [rdata.address for rdata in answer]

    async def _resolve_system(self, host: str, family: int) -> ResolutionResult:
        if self._system is None:
            self._system = ThreadedResolver()
        try:
            infos = await self._system.resolve(host, 0, family)
        except OSError as exc:
            return ResolutionResult(resolver=SYSTEM, error=exc)
        ips = list(dict.fromkeys(info["host"] for info in infos))
        return ResolutionResult(ips=ips, resolver=SYSTEM)

    async def resolve(
        self, host: str, port: int = 0, family: socket.AddressFamily = socket.AF_INET
    ) -> List[ResolveResult]:
        """aiohttp connector hook: addresses are tried by the connector in order."""
        if _is_ip(host):
            return [self._entry(host, host, port)]
        result = await self.resolve_host(host, family)
        if not result.ok:
            raise OSError(f"could not resolve {host}: {result.error or 'no addresses'}")
        self._used[host] = result.resolver
        self.logger.debug("Resolved %s to %s via %s", host, ", ".join(result.ips), result.resolver)
        return [self._entry(host, ip, port) for ip in result.ips]

    @staticmethod
    def _entry(hostname: str, ip: str, port: int) -> ResolveResult:
        family = socket.AF_INET6 if ipaddress.ip_address(ip).version == 6 else socket.AF_INET
        return ResolveResult(
            hostname=hostname,
            host=ip,
            port=port,
            family=family,
            proto=0,
            flags=socket.AI_NUMERICHOST,
        )

    def used_for(self, host: str) -> str:
        """Resolver that served *host*, or ``""`` when it never went through DNS."""
        return self._used.get(host, "")

    async def close(self) -> None:
        if self._system is not None:
            await self._system.close()
            self._system = None
