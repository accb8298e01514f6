"""dep_scout.extract: URL classification and per-format package extractors.

Every extractor is a plain ``extract(content) -> list[Package]`` function.
:func:`extract` runs the ones implied by :func:`classify` in
:class:`ContentClass` order and always finishes with JavaScript patterns.
Names are not deduplicated here; :class:`~dep_scout.models.Result` does that.
"""
from __future__ import annotations

from typing import Callable, Dict, List

from dep_scout.models import Package

from . import cicd, config_files, docs, javascript, manifest, sourcemap
from .classify import ContentClass, classify
from .names import BUILTIN_MODULES, COMMON_TOKENS, is_builtin, make_package

Extractor = Callable[[str], List[Package]]

EXTRACTORS: Dict[ContentClass, Extractor] = {
    ContentClass.JSON: manifest.extract,
    ContentClass.CONFIG: config_files.extract,
    ContentClass.CICD: cicd.extract,
    ContentClass.DOC: docs.extract,
    ContentClass.SOURCEMAP: sourcemap.extract,
}


def extract(url: str, content: str) -> List[Package]:
    """Run every extractor that applies to *url* over *content*."""
    classes = classify(url)
    packages: List[Package] = []
    for content_class in ContentClass:
        if content_class in classes:
            packages.extend(EXTRACTORS[content_class](content))
    packages.extend(javascript.extract(content))
    return packages


__all__ = [
    "BUILTIN_MODULES",
    "COMMON_TOKENS",
    "EXTRACTORS",
    "ContentClass",
    "Extractor",
    "classify",
    "extract",
    "is_builtin",
    "make_package",
]
