"""
Data models shared by the scanner, the extraction engine and the reports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple


@dataclass(slots=True, frozen=True)
class Package:
    """A candidate package reference.

    ``namespace`` is reserved and always blank; scoped names such as
    ``@scope/name`` stay whole in ``name``.
    """

    name: str
    namespace: str = ""
    claimed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "namespace": self.namespace, "claimed": self.claimed}


@dataclass(slots=True)
class ResolutionResult:
    """Outcome of resolving one hostname."""

    ips: List[str] = field(default_factory=list)
    resolver: str = ""
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.ips)


def unique_packages(packages: Iterable[Package]) -> Tuple[Package, ...]:
    """Drop repeated names, keeping the first occurrence of each."""
    seen: Dict[str, Package] = {}
    for pkg in packages:
        seen.setdefault(pkg.name, pkg)
    return tuple(seen.values())


@dataclass(slots=True, frozen=True)
class Result:
    """Outcome of scanning one target. Package names are unique within a Result."""

    request_url: str
    status_code: int = 0
    resolver: str = ""
    error: Optional[BaseException] = None
    packages: Tuple[Package, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "packages", unique_packages(self.packages))

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        error = None
        if self.error is not None:
            error = str(self.error) or type(self.error).__name__
        return {
            "request_url": self.request_url,
            "status_code": self.status_code,
            "resolver": self.resolver,
            "error": error,
            "packages": [pkg.to_dict() for pkg in self.packages],
        }
