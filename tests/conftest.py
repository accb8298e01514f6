# File: tests/conftest.py
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from pathlib import Path
from typing import Dict, List, Tuple

import dns.message
import dns.rcode
import dns.rrset
import pytest
from aiohttp import web

from dep_scout.logger import LOGGER_NAME
from dep_scout.models import Package

FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def names(packages: Iterable[Package]) -> List[str]:
    return [pkg.name for pkg in packages]


@pytest.fixture(autouse=True)
def reset_project_logger():
    """Undo `logger.configure()` calls (the CLI makes them) so caplog keeps working."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.setLevel(logging.NOTSET)
    lg.propagate = True


async def serve_app(app: web.Application, port: int, host: str = "127.0.0.1") -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    try:
        yield f"http://{host}:{port}"
    finally:
        await runner.cleanup()


class FakeDNSServer(asyncio.DatagramProtocol):
    """Answers A queries from a fixed table; unknown names get NXDOMAIN."""

    def __init__(self, records: Dict[str, str]) -> None:
        self.records = {name.rstrip(".").lower(): ip for name, ip in records.items()}
        self.queries: List[str] = []
        self.transport: asyncio.DatagramTransport | None = None

    def connection_made(self, transport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        query = dns.message.from_wire(data)
        response = dns.message.make_response(query)
        question = query.question[0]
        name = question.name.to_text().rstrip(".").lower()
        self.queries.append(name)
        ip = self.records.get(name)
        if ip is None:
            response.set_rcode(dns.rcode.NXDOMAIN)
        else:
            response.answer.append(dns.rrset.from_text(question.name, 60, "IN", "A", ip))
        assert self.transport is not None
        self.transport.sendto(response.to_wire(), addr)


async def serve_dns(records: Dict[str, str], port: int) -> AsyncIterator[FakeDNSServer]:
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: FakeDNSServer(records), local_addr=("127.0.0.1", port)
    )
    try:
        yield protocol
    finally:
        transport.close()
