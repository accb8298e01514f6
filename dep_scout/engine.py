# dep_scout/engine.py
"""
dep_scout.engine: the scan scheduler and its result stream.

:class:`Runner` admits targets through the :class:`~dep_scout.frontier.Frontier`,
runs at most ``concurrency`` of them at once and yields one
:class:`~dep_scout.models.Result` per admitted target, in completion order.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from enum import Enum
from typing import AsyncIterator, Callable, Iterable, List, Optional, Set

from aiohttp import ClientError

from dep_scout.config import ScanOptions
from dep_scout.extract import extract
from dep_scout.frontier import Frontier
from dep_scout.logger import get_logger
from dep_scout.models import Result, unique_packages
from dep_scout.net import ClaimChecker, Fetcher

__all__ = ["NoTargetsError", "Runner", "TargetState", "start_scan"]

#: Errors that end a single target without affecting its siblings.
FETCH_ERRORS = (ClientError, TimeoutError, OSError)


class NoTargetsError(ValueError):
    """Raised when a scan is started without any target."""


class TargetState(str, Enum):
    PENDING = "pending"
    FETCHING = "fetching"
    EXTRACTING = "extracting"
    CHECKING = "checking"
    FAILED = "failed"
    DONE = "done"


class Runner:
    """Scheduler for one scan.

    Options are copied at construction. The stream is a queue of size one, so a
    task that finished its target waits (still holding its slot) until the
    consumer takes the previous result.
    """

    def __init__(self, options: Optional[ScanOptions] = None, logger: Optional[logging.Logger] = None) -> None:
        self.options = (options or ScanOptions()).model_copy()
        self.logger = get_logger(logger)
        self.frontier = Frontier(self.logger)

    async def run(self, *targets: str) -> AsyncIterator[Result]:
        """Scan *targets* and yield their results as they complete."""
        if not targets:
            raise NoTargetsError("no targets supplied")

        queue: asyncio.Queue[Optional[Result]] = asyncio.Queue(maxsize=1)
        producer = asyncio.create_task(self._produce(targets, queue))
        try:
            while True:
                result = await queue.get()
                if result is None:
                    break
                yield result
            await producer
        finally:
            if not producer.done():
                producer.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await producer

    async def _produce(self, targets: Iterable[str], queue: asyncio.Queue[Optional[Result]]) -> None:
        try:
            await self._dispatch(targets, queue)
        except asyncio.CancelledError:
            raise
        except Exception:
            await queue.put(None)
            raise
        await queue.put(None)

    async def _dispatch(self, targets: Iterable[str], queue: asyncio.Queue[Optional[Result]]) -> None:
        semaphore = asyncio.Semaphore(self.options.concurrency)
        tasks: Set[asyncio.Task[None]] = set()
        async with Fetcher(self.options, self.logger) as fetcher:
            if fetcher.session is None:
                raise RuntimeError("Session not initialized")
            claims = ClaimChecker(fetcher.session, self.options.registry_url, fetcher.proxy, self.logger)
            try:
                dispatched = 0
                for raw in targets:
                    url, ok = self.frontier.admit(raw)
                    if not ok:
                        continue
                    if dispatched:
                        await self._pause()
                    await semaphore.acquire()
                    self.logger.debug("Running on %s", url)
                    task = asyncio.create_task(self._process(url, fetcher, claims, queue, semaphore))
                    tasks.add(task)
                    task.add_done_callback(tasks.discard)
                    dispatched += 1
                if tasks:
                    await asyncio.gather(*tasks)
            finally:
                for task in tasks:
                    task.cancel()
                if tasks:
                    await asyncio.gather(*tasks, return_exceptions=True)

    async def _pause(self) -> None:
        delay = self.options.delay
        if self.options.delay_jitter > 0:
            delay += random.randrange(self.options.delay_jitter)
        if delay > 0:
            await asyncio.sleep(delay / 1000)

    async def _process(
        self,
        url: str,
        fetcher: Fetcher,
        claims: ClaimChecker,
        queue: asyncio.Queue[Optional[Result]],
        semaphore: asyncio.Semaphore,
    ) -> None:
        try:
            try:
                result = await self._scan(url, fetcher, claims)
            except Exception as exc:
                self.logger.exception("Unexpected error while scanning %s", url)
                self._transition(url, TargetState.FAILED)
                result = Result(url, resolver=fetcher.resolver_for(url), error=exc)
                self._transition(url, TargetState.DONE)
            await queue.put(result)
        finally:
            semaphore.release()

    def _transition(self, url: str, state: TargetState) -> None:
        self.logger.debug("%s -> %s", url, state.value)

    async def _scan(self, url: str, fetcher: Fetcher, claims: ClaimChecker) -> Result:
        """Fetch, extract and claim-check one target.

        Only the fetch runs under the per-target deadline; claim checks are
        bounded by the session timeout and degrade to "unclaimed".
        """
        self._transition(url, TargetState.PENDING)
        try:
            async with asyncio.timeout(self.options.timeout):
                self._transition(url, TargetState.FETCHING)
                response = await fetcher.fetch(url)
        except FETCH_ERRORS as exc:
            self._transition(url, TargetState.FAILED)
            self.logger.warning("Scanning %s failed: %s", url, str(exc) or type(exc).__name__)
            result = Result(url, resolver=fetcher.resolver_for(url), error=exc)
            self._transition(url, TargetState.DONE)
            return result

        self._transition(url, TargetState.EXTRACTING)
        packages = unique_packages(extract(url, response.text))

        self._transition(url, TargetState.CHECKING)
        annotated = await claims.annotate(packages)

        self._transition(url, TargetState.DONE)
        return Result(
            url,
            status_code=response.status,
            resolver=response.resolver,
            packages=tuple(annotated),
        )


async def start_scan(
    options: ScanOptions,
    targets: Iterable[str],
    on_result: Optional[Callable[[Result], None]] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Result]:
    """Run a scan to completion; *on_result* sees each result as it arrives."""
    runner = Runner(options, logger)
    results: List[Result] = []
    async for result in runner.run(*targets):
        if on_result is not None:
            on_result(result)
        results.append(result)
    return results
