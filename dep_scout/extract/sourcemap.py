"""
Source maps: ``sources`` paths and embedded ``sourcesContent``.
"""
from __future__ import annotations

import json
import re
from typing import Final, Iterator, List, Tuple

from dep_scout.extract import javascript
from dep_scout.extract.names import packages_from
from dep_scout.models import Package

_SOURCE_PATTERNS: Final[Tuple[re.Pattern[str], ...]] = (
    re.compile(r"webpack://[^/]*/(?:\.?/)?node_modules/((?:@[\w.-]+/)?[\w.-]+)"),
    re.compile(r"node_modules/((?:@[\w.-]+/)?[\w.-]+)/"),
    re.compile(r"/(@[\w.-]+/[\w.-]+)/"),
)


def _source_names(sources: List[str]) -> Iterator[str]:
    for source in sources:
        for pattern in _SOURCE_PATTERNS:
            yield from pattern.findall(source)


def extract(content: str) -> List[Package]:
    """Extract packages from a source map; anything that is not one yields nothing."""
    try:
        data = json.loads(content)
    except ValueError:
        return []
    if not isinstance(data, dict):
        return []

    sources = data.get("sources")
    if not isinstance(sources, list):
        sources = []
    packages = packages_from(_source_names([s for s in sources if isinstance(s, str)]))

    embedded_sources = data.get("sourcesContent")
    if not isinstance(embedded_sources, list):
        return packages
    for embedded in embedded_sources:
        if isinstance(embedded, str) and embedded:
            packages.extend(javascript.extract(embedded))
    return packages
