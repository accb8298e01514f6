"""
Static tables and filters every candidate package name passes through.

Extend the tables here; extractors only call :func:`make_package` /
:func:`packages_from`.
"""
from __future__ import annotations

import re
from typing import Final, FrozenSet, Iterable, List, Optional

from dep_scout.models import Package

#: Node.js core modules. Never third-party packages.
BUILTIN_MODULES: Final[FrozenSet[str]] = frozenset({
    "assert", "async_hooks", "buffer", "child_process", "cluster", "console", "constants",
    "crypto", "dgram", "diagnostics_channel", "dns", "domain", "events", "fs", "http",
    "http2", "https", "inspector", "module", "net", "os", "path", "perf_hooks", "process",
    "punycode", "querystring", "readline", "repl", "stream", "string_decoder", "sys",
    "timers", "tls", "trace_events", "tty", "url", "util", "v8", "vm", "wasi",
    "worker_threads", "zlib",
})

#: Tokens that show up in the same syntactic positions as package names.
COMMON_TOKENS: Final[FrozenSet[str]] = frozenset({
    "name", "version", "main", "test", "start", "build", "dev", "prod", "src", "dist",
    "lib", "bin", "scripts", "config", "index", "node_modules",
})

_HAS_LETTER = re.compile(r"[A-Za-z]")
_VALID_NAME = re.compile(r"^(?:@[A-Za-z0-9][\w.~-]*/)?[A-Za-z0-9][\w.~-]*$")
_STRIP_CHARS = "\"'`,;()[]{}<>"


def is_builtin(name: str) -> bool:
    """True for core modules, including ``node:`` prefixed and subpath forms."""
    if name.startswith("node:"):
        return True
    return name.split("/", 1)[0] in BUILTIN_MODULES


def looks_like_package_name(name: str) -> bool:
    if len(name) < 2:
        return False
    if name.lower() in COMMON_TOKENS:
        return False
    return bool(_HAS_LETTER.search(name))


def package_root(specifier: str) -> Optional[str]:
    """Reduce an import specifier to the package it names.

    ``react@18/umd/react.js`` -> ``react``; ``@scope/pkg@1.0/sub`` -> ``@scope/pkg``.
    Relative, absolute and URL specifiers name no package.
    """
    spec = specifier.strip().strip(_STRIP_CHARS).rstrip(".:")
    if not spec or spec.startswith((".", "/", "-", "~", "#", "$")) or "://" in spec:
        return None
    if spec.startswith("@"):
        scope, _, rest = spec.partition("/")
        if not rest:
            return None
        name = rest.split("/", 1)[0].split("@", 1)[0]
        return f"{scope}/{name}" if name else None
    return spec.split("/", 1)[0].split("@", 1)[0] or None


def make_package(specifier: str) -> Optional[Package]:
    """Return a Package for *specifier*, or None when it fails a filter."""
    name = package_root(specifier)
    if name is None or is_builtin(name):
        return None
    if not _VALID_NAME.match(name) or not looks_like_package_name(name):
        return None
    return Package(name=name)


def packages_from(specifiers: Iterable[str]) -> List[Package]:
    """Filter *specifiers* into Packages, keeping order and repeats."""
    packages: List[Package] = []
    for spec in specifiers:
        pkg = make_package(spec)
        if pkg is not None:
            packages.append(pkg)
    return packages


__all__ = [
    "BUILTIN_MODULES",
    "COMMON_TOKENS",
    "is_builtin",
    "looks_like_package_name",
    "make_package",
    "package_root",
    "packages_from",
]
