"""Content classification: which grammars apply to a URL."""
from __future__ import annotations

from enum import Enum
from typing import Final, FrozenSet, Tuple
from urllib.parse import urlsplit


class ContentClass(str, Enum):
    JSON = "json"
    CONFIG = "config"
    CICD = "cicd"
    DOC = "doc"
    SOURCEMAP = "sourcemap"


JSON_EXTENSIONS: Final[Tuple[str, ...]] = (".json",)
JSON_FILENAMES: Final[Tuple[str, ...]] = ("package.json", "package-lock.json", "yarn.lock")

CONFIG_FILENAMES: Final[Tuple[str, ...]] = (
    "webpack.config", "rollup.config", "vite.config", "babel.config",
    "jest.config", "prettier.config", "eslint", ".babelrc", ".prettierrc",
    "tsconfig.json", "jsconfig.json", ".eslintrc", ".stylelintrc",
)

CICD_MARKERS: Final[Tuple[str, ...]] = (
    ".github/workflows", ".gitlab-ci", "dockerfile", "docker-compose",
    ".travis", ".circleci", "makefile",
)
CICD_EXTENSIONS: Final[Tuple[str, ...]] = (".yml", ".yaml", ".sh", ".bash")

DOC_EXTENSIONS: Final[Tuple[str, ...]] = (".md", ".rst", ".txt")
SOURCEMAP_EXTENSIONS: Final[Tuple[str, ...]] = (".map",)


def classify(url: str) -> FrozenSet[ContentClass]:
    """Return every content class the URL matches (possibly none)."""
    path = urlsplit(url).path.lower() or url.lower()
    classes = set()
    if path.endswith(JSON_EXTENSIONS) or any(name in path for name in JSON_FILENAMES):
        classes.add(ContentClass.JSON)
    if any(name in path for name in CONFIG_FILENAMES):
        classes.add(ContentClass.CONFIG)
    if any(marker in path for marker in CICD_MARKERS) or path.endswith(CICD_EXTENSIONS):
        classes.add(ContentClass.CICD)
    if path.endswith(DOC_EXTENSIONS):
        classes.add(ContentClass.DOC)
    if path.endswith(SOURCEMAP_EXTENSIONS):
        classes.add(ContentClass.SOURCEMAP)
    return frozenset(classes)
