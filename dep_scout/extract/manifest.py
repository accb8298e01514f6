"""
Manifests and lockfiles: package.json, package-lock.json and yarn.lock.

Valid JSON is read as package.json and package-lock.json; anything else is
scanned line by line as a yarn.lock.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Optional

from dep_scout.extract.names import make_package, packages_from
from dep_scout.models import Package

DEPENDENCY_FIELDS = ("dependencies", "devDependencies", "peerDependencies", "optionalDependencies")
BUNDLED_FIELDS = ("bundledDependencies", "bundleDependencies")

YARN_METADATA_KEYS = ("version", "resolved", "dependencies", "integrity")

_YARN_SCOPED_HEADER = re.compile(r'^"(@[^/"]+/[^@"]+)(?:@[^"]*)?":')
_YARN_HEADER = re.compile(r'^"([^@"]+)(?:@[^"]*)?":')
_YARN_DEPENDENCY = re.compile(r'^\s{4}"?(@?[A-Za-z0-9/@._-]+?)"?:?\s+"?[^"\s]+"?\s*$')


def _keys(mapping: Any) -> Iterator[str]:
    if isinstance(mapping, dict):
        yield from (key for key in mapping if isinstance(key, str))


def extract_package_json(data: Dict[str, Any]) -> List[Package]:
    names: List[str] = []
    for field in DEPENDENCY_FIELDS:
        names.extend(_keys(data.get(field)))
    for field in BUNDLED_FIELDS:
        bundled = data.get(field)
        if isinstance(bundled, list):
            names.extend(item for item in bundled if isinstance(item, str))
    return packages_from(names)


def _walk_v1_dependencies(deps: Any) -> Iterator[str]:
    """Lockfile v1 nests ``dependencies`` recursively and lists ``requires``."""
    if not isinstance(deps, dict):
        return
    for name, entry in deps.items():
        yield name
        if isinstance(entry, dict):
            yield from _keys(entry.get("requires"))
            yield from _walk_v1_dependencies(entry.get("dependencies"))


def extract_package_lock(data: Dict[str, Any]) -> List[Package]:
    names: List[str] = []
    packages = data.get("packages")
    if isinstance(packages, dict):
        for path, entry in packages.items():
            if "node_modules/" in path:
                names.append(path.rsplit("node_modules/", 1)[-1])
            if isinstance(entry, dict):
                names.extend(_keys(entry.get("dependencies")))
    if data.get("lockfileVersion") is not None:
        names.extend(_walk_v1_dependencies(data.get("dependencies")))
    return packages_from(names)


def _header_names(line: str) -> Iterator[str]:
    """Yield package specifiers from a top-level yarn.lock entry header."""
    scoped = _YARN_SCOPED_HEADER.match(line)
    if scoped:
        yield scoped.group(1)
        return
    plain = _YARN_HEADER.match(line)
    if plain:
        yield plain.group(1)
        return
    # unquoted or comma-separated headers: `lodash@^4.0.0, lodash@^4.17.0:`
    for spec in line[:-1].split(","):
        spec = spec.strip().strip('"')
        if spec.startswith("@"):
            yield spec
        elif "@" in spec:
            yield spec.split("@", 1)[0]


def _first_key(line: str) -> str:
    return line.split()[0].rstrip(":").strip('"')


def extract_yarn_lock(content: str) -> List[Package]:
    packages: List[Package] = []
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if not raw[:1].isspace() and line.endswith(":"):
            packages.extend(packages_from(_header_names(line)))
            continue

        if raw.startswith("    ") and _first_key(line) not in YARN_METADATA_KEYS:
            match = _YARN_DEPENDENCY.match(raw)
            if match:
                pkg = make_package(match.group(1))
                if pkg is not None:
                    packages.append(pkg)
    return packages


def _parse(content: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(content)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def extract_json(content: str) -> List[Package]:
    """package.json and package-lock.json extraction only; non-JSON yields nothing."""
    data = _parse(content)
    if data is None:
        return []
    return extract_package_json(data) + extract_package_lock(data)


def extract(content: str) -> List[Package]:
    """Extract dependency names from a manifest or lockfile body."""
    data = _parse(content)
    if data is None:
        if content.lstrip().startswith(("{", "[")):
            return []
        return extract_yarn_lock(content)
    return extract_package_json(data) + extract_package_lock(data)
