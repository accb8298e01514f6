"""
JavaScript-pattern extraction.

Applied to every fetched body regardless of its class: source files, bundles,
HTML pages with inline scripts and anything else that may mention modules.
"""
from __future__ import annotations

import json
import re
from typing import Final, FrozenSet, Iterator, List, Tuple

from bs4 import BeautifulSoup, ParserRejectedMarkup
from bs4.element import Tag

from dep_scout.extract.names import packages_from
from dep_scout.models import Package

# Patterns whose first group is a module specifier.
_SPECIFIER_PATTERNS: Final[Tuple[re.Pattern[str], ...]] = (
    re.compile(r"""\b(?:require|import)\s*\(?\s*['"]([^'"\n]+)['"]\s*\)?"""),
    re.compile(r"""\bfrom\s+['"]([^'"\n]+)['"]"""),
    re.compile(r"""\brequire\.resolve\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
    re.compile(r"""\bimport\s*\(\s*['"]([^'"\n]+)['"]\s*\)"""),
    re.compile(r"""\bparcel\$require\(\s*['"]([^'"\n]+)['"]\s*\)"""),
)

_AMD_DEPENDENCIES = re.compile(
    r"""\b(?:define|require)\s*\(\s*(?:['"][^'"]*['"]\s*,\s*)?\[([^\]]*)\]"""
)
_REQUIREJS_PATHS = re.compile(r"\bpaths\s*:\s*\{([^}]+)\}")
_REQUIREJS_PATH_KEY = re.compile(r"""['"]([^'"]+)['"]\s*:\s*['"][^'"]+['"]""")

_INLINE_INSTALL = re.compile(
    r"\b(?:npm\s+(?:install|i)|yarn\s+add)\s+(?:--?[\w-]+\s+)*(@?[\w./@-]+)"
)

_CDN_URL = re.compile(
    r"(?:https?:)?(?://)?(?:unpkg\.com|cdn\.jsdelivr\.net|cdnjs\.cloudflare\.com)"
    r"/(?!gh/)(?:npm/|ajax/libs/)?(@?[\w./-]+)"
)
_IMPORT_MAP_KEY = re.compile(r"""["'](@?[\w./-]+)["']\s*:\s*['"]https?://[^'"]+['"]""")

_EXTERNALS = re.compile(r"\bexternals\s*:\s*\{([^}]+)\}")
_QUOTED_KEY = re.compile(r"""['"](@?[\w./-]+)['"]\s*:""")
_BARE_KEY = re.compile(r"(?:^|[{,\s])([A-Za-z][\w$-]*)\s*:")

_UMD_INDEXED_GLOBAL = re.compile(
    r"""\b(?:window|global|globalThis|self)\[\s*['"](@?[\w/-]+)['"]\s*\]\s*=(?!=)"""
)
_UMD_GLOBAL_ASSIGN = re.compile(r"\b(?:window|global)\.([A-Za-z][\w$]*)\s*=(?!=)")
_UMD_FACTORY_CALL = re.compile(r"\bfactory\s*\(((?:[^()]|\([^()]*\))*)\)")
_QUOTED = re.compile(r"""['"]([^'"\n]+)['"]""")

_MINIFIED_CALL = re.compile(r"""\b[a-z]\(\s*['"](@?[\w/-]+)['"]""")

_WEBPACK_CHUNK = re.compile(r"/\*{3} WEBPACK CHUNK: (@?[\w./-]+) \*{3}/")
_NODE_MODULES_PATH = re.compile(r"node_modules/((?:@[\w.-]+/)?[\w.-]+)")

#: Keys that describe how an external is exposed, not which package it is.
EXTERNALS_TYPE_KEYS: Final[FrozenSet[str]] = frozenset({
    "root", "commonjs", "commonjs2", "amd", "var", "this", "window", "global",
    "umd", "module", "import", "promise",
})

#: ``window.X =`` targets that are browser APIs or analytics, not libraries.
IGNORED_GLOBALS: Final[FrozenSet[str]] = frozenset({
    "location", "name", "status", "console", "document", "navigator", "history",
    "localstorage", "sessionstorage", "datalayer", "gtag", "ga", "fetch", "settimeout",
    "setinterval", "requestanimationframe", "webpackjsonp", "opener", "parent", "top",
})


def _amd_dependencies(block: str) -> Iterator[str]:
    for part in block.replace(" ", "").split(","):
        part = part.strip().strip("'\"")
        if part:
            yield part


def _externals_keys(block: str) -> Iterator[str]:
    for key in _QUOTED_KEY.findall(block) + _BARE_KEY.findall(block):
        if key not in EXTERNALS_TYPE_KEYS:
            yield key


def _global_names(content: str) -> Iterator[str]:
    yield from _UMD_INDEXED_GLOBAL.findall(content)
    for name in _UMD_GLOBAL_ASSIGN.findall(content):
        name = name.lower()
        if name.startswith("on") or name in IGNORED_GLOBALS:
            continue
        yield name


def _factory_arguments(content: str) -> Iterator[str]:
    for args in _UMD_FACTORY_CALL.findall(content):
        yield from _QUOTED.findall(args)


def _script_tags(content: str) -> Iterator[str]:
    """CDN packages from ``<script src>`` and keys of ``<script type="importmap">``."""
    try:
        soup = BeautifulSoup(content, "html.parser")
    except ParserRejectedMarkup:
        # script-like strings inside JS, not markup
        return
    for tag in soup.find_all("script"):
        if not isinstance(tag, Tag):
            continue
        src = tag.get("src")
        if isinstance(src, str):
            yield from _CDN_URL.findall(src)
        if tag.get("type") == "importmap" and tag.string:
            try:
                data = json.loads(tag.string)
            except ValueError:
                continue
            if not isinstance(data, dict):
                continue
            imports = data.get("imports")
            if isinstance(imports, dict):
                yield from imports
            scopes = data.get("scopes")
            if isinstance(scopes, dict):
                for scoped in scopes.values():
                    if isinstance(scoped, dict):
                        yield from scoped


def specifiers(content: str) -> Iterator[str]:
    """Yield raw candidate specifiers in a fixed, deterministic order."""
    for pattern in _SPECIFIER_PATTERNS:
        yield from pattern.findall(content)

    for block in _AMD_DEPENDENCIES.findall(content):
        yield from _amd_dependencies(block)
    for block in _REQUIREJS_PATHS.findall(content):
        yield from _REQUIREJS_PATH_KEY.findall(block)

    yield from _INLINE_INSTALL.findall(content)

    if "<script" in content:
        yield from _script_tags(content)
    yield from _CDN_URL.findall(content)
    yield from _IMPORT_MAP_KEY.findall(content)

    yield from _WEBPACK_CHUNK.findall(content)
    yield from _NODE_MODULES_PATH.findall(content)

    yield from _global_names(content)
    yield from _factory_arguments(content)
    yield from _MINIFIED_CALL.findall(content)

    for block in _EXTERNALS.findall(content):
        yield from _externals_keys(block)


def extract(content: str) -> List[Package]:
    """Extract package references from JavaScript-like content."""
    return packages_from(specifiers(content))
