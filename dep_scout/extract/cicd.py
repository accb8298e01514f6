"""
CI/CD scripts: workflow YAML, Dockerfiles, Makefiles and shell scripts.
"""
from __future__ import annotations

import re
from typing import Dict, Final, Iterator, List, Tuple

from dep_scout.extract.names import packages_from
from dep_scout.models import Package

# Each command's arguments run until the next shell separator.
_ARGS = r"([^;&|<>\n`]*)"
_INSTALL_COMMANDS: Final[Tuple[re.Pattern[str], ...]] = (
    re.compile(r"\bnpm\s+(?:install|i|add)(?![\w-])" + _ARGS),
    re.compile(r"\byarn\s+(?:global\s+)?add(?![\w-])" + _ARGS),
    re.compile(r"\bpnpm\s+(?:install|add|i)(?![\w-])" + _ARGS),
)
_NPX = re.compile(r"\bnpx\s+" + _ARGS)

MAKE_MACROS: Final[Dict[str, str]] = {"$(NPM)": "npm", "$(YARN)": "yarn", "$(NPX)": "npx"}
CONTAINER_RUN_PREFIX: Final[str] = "RUN "


def _arguments(args: str) -> Iterator[str]:
    for token in args.split():
        if not token.startswith("-"):
            yield token


def _npx_target(args: str) -> Iterator[str]:
    """Only the first non-flag argument of ``npx`` is a package."""
    for token in _arguments(args):
        yield token
        return


def specifiers(content: str) -> Iterator[str]:
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith(CONTAINER_RUN_PREFIX):
            yield from specifiers(line[len(CONTAINER_RUN_PREFIX):])
            continue
        if any(macro in line for macro in MAKE_MACROS):
            for macro, command in MAKE_MACROS.items():
                line = line.replace(macro, command)
            yield from specifiers(line)
            continue

        for pattern in _INSTALL_COMMANDS:
            for args in pattern.findall(line):
                yield from _arguments(args)
        for args in _NPX.findall(line):
            yield from _npx_target(args)


def extract(content: str) -> List[Package]:
    """Extract packages installed or executed by CI/CD commands."""
    return packages_from(specifiers(content))
