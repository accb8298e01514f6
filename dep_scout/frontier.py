"""
Frontier: the gate in front of the scheduler that canonicalises targets and
lets each one through at most once.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from dep_scout.logger import get_logger
from dep_scout.utils import is_excluded_url, normalize_url, strip_query

__all__ = ("Frontier",)


class Frontier:
    """Tracks which normalised targets have already been admitted.

    Only the dispatch loop writes to :attr:`visited`, before any task for the
    admitted URL exists, so no locking is needed.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.visited: Dict[str, bool] = {}
        self.logger = get_logger(logger)

    def admit(self, raw_url: str) -> Tuple[str, bool]:
        """Return ``(normalized_url, ok)``; ``ok`` is False for unparsable,
        already-seen or excluded targets."""
        try:
            url = strip_query(normalize_url(raw_url))
        except ValueError as exc:
            self.logger.warning("Skipping %r: %s", raw_url, exc)
            return "", False

        if self.visited.get(url):
            self.logger.debug("Already admitted: %s", url)
            return url, False
        self.visited[url] = True

        if is_excluded_url(url):
            self.logger.debug("Excluded by extension: %s", url)
            return url, False
        return url, True

    def __contains__(self, url: str) -> bool:
        return self.visited.get(url, False)

    def __len__(self) -> int:
        return len(self.visited)
