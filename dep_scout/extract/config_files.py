"""
Build, lint and type-checker configuration files.

``webpack.config.js``, ``.babelrc``, ``tsconfig.json``, ``.eslintrc`` and
friends name packages as loader strings, preset/plugin entries, ``extends``
targets and ``types`` lists.
"""
from __future__ import annotations

import re
from typing import Iterator, List

from dep_scout.extract import javascript, manifest
from dep_scout.extract.names import packages_from
from dep_scout.models import Package

_LOADER = re.compile(r"""\bloader['"]?\s*:\s*['"]([^'"]+)['"]""")
_STRING_LITERAL = re.compile(
    r"""['"](@[\w.-]+/[\w.-]+|[A-Za-z0-9]+(?:-[A-Za-z0-9]+)+)['"](?!\s*:)"""
)
_ARRAY_START = re.compile(r"""\b(?:use|presets?|plugins?)['"]?\s*:\s*\[""")
_EXTENDS = re.compile(r"""\bextends['"]?\s*:\s*(\[[^\]]*\]|['"][^'"]+['"])""")
_TYPES = re.compile(r"""\btypes['"]?\s*:\s*\[([^\]]*)\]""")
_ARRAY_STRING = re.compile(r"""['"]([^'"\n]+)['"](?!\s*:)""")
_QUOTED = re.compile(r"""['"]([^'"\n]+)['"]""")
_INNER_OBJECT = re.compile(r"\{[^{}]*\}")


def _loader_names(value: str) -> Iterator[str]:
    """``style-loader!css-loader?modules`` names two loaders."""
    for part in value.split("!"):
        part = part.split("?", 1)[0].strip()
        if part:
            yield part


def _bracketed(content: str, start: int) -> str:
    """Return the text between the ``[`` just before *start* and its match."""
    depth = 1
    pos = start
    while pos < len(content) and depth:
        char = content[pos]
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        pos += 1
    return content[start:pos - 1] if depth == 0 else content[start:]


def _array_entries(content: str) -> Iterator[str]:
    for match in _ARRAY_START.finditer(content):
        block = _bracketed(content, match.end())
        # drop option objects such as `["@babel/preset-env", {"targets": "defaults"}]`
        previous = None
        while previous != block:
            previous, block = block, _INNER_OBJECT.sub("", block)
        yield from _ARRAY_STRING.findall(block)


def _type_packages(content: str) -> Iterator[str]:
    for block in _TYPES.findall(content):
        for name in _QUOTED.findall(block):
            yield name if name.startswith("@") else f"@types/{name}"


def specifiers(content: str) -> Iterator[str]:
    for value in _LOADER.findall(content):
        yield from _loader_names(value)
    yield from _STRING_LITERAL.findall(content)
    yield from _array_entries(content)
    for value in _EXTENDS.findall(content):
        yield from _QUOTED.findall(value)
    yield from _type_packages(content)


def extract(content: str) -> List[Package]:
    """Extract package references from a configuration file."""
    packages: List[Package] = []
    if "{" in content and "}" in content:
        packages.extend(manifest.extract_json(content))
    packages.extend(javascript.extract(content))
    packages.extend(packages_from(specifiers(content)))
    return packages
