"""
Documentation: README-style Markdown, reStructuredText and plain text.
"""
from __future__ import annotations

import re
from typing import Final, FrozenSet, Iterator, List, Tuple

from dep_scout.extract import cicd, javascript
from dep_scout.extract.names import packages_from
from dep_scout.models import Package

_FENCED_BLOCK = re.compile(r"```[\w+-]*\n(.*?)\n```", re.DOTALL)

# Prose install commands; arguments run to the end of the line or code span.
_PROSE_COMMANDS: Final[Tuple[re.Pattern[str], ...]] = (
    re.compile(r"\bnpm\s+(?:install|i)\s+([^`\n]+)"),
    re.compile(r"\byarn\s+add\s+([^`\n]+)"),
    re.compile(r"\bpnpm\s+(?:add|install)\s+([^`\n]+)"),
)
_SINGLE_TARGET_COMMANDS: Final[Tuple[re.Pattern[str], ...]] = (
    re.compile(r"\bnpx\s+(@?[\w./@-]+)"),
    re.compile(r"\b(?:yarn|npm)\s+create\s+(@?[\w./@-]+)"),
)

#: Words that end an install command written inside a sentence.
PROSE_STOP_WORDS: Final[FrozenSet[str]] = frozenset({
    "and", "or", "then", "to", "in", "into", "for", "the", "with", "from", "if", "first",
})

_INLINE_CODE = re.compile(r"`(@?[\w./-]+)`")
_JSON_EXAMPLE = re.compile(r'"(@?[\w./-]+)"\s*:\s*"[\^~]?\d[\w.+-]*"')


def _prose_arguments(args: str) -> Iterator[str]:
    for token in args.split():
        token = token.strip("`\"'")
        if token.startswith("-"):
            continue
        if token.lower() in PROSE_STOP_WORDS:
            return
        if token.endswith((".", ",", ":", ";")):
            # end of sentence: this token is the last argument
            yield token.rstrip(".,:;")
            return
        yield token


def specifiers(content: str) -> Iterator[str]:
    """Candidates found in prose, inline code spans and JSON examples."""
    prose = _FENCED_BLOCK.sub("", content)
    for pattern in _PROSE_COMMANDS:
        for args in pattern.findall(prose):
            yield from _prose_arguments(args)
    for pattern in _SINGLE_TARGET_COMMANDS:
        yield from pattern.findall(prose)
    yield from _INLINE_CODE.findall(prose)
    yield from _JSON_EXAMPLE.findall(content)


def extract(content: str) -> List[Package]:
    """Extract package references from documentation."""
    packages: List[Package] = []
    for block in _FENCED_BLOCK.findall(content):
        packages.extend(javascript.extract(block))
        packages.extend(cicd.extract(block))
    packages.extend(packages_from(specifiers(content)))
    return packages
