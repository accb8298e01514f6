# File: dep_scout/utils.py
"""dep_scout.utils: URL canonicalisation and the extension policy used by the frontier."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Final, FrozenSet, List, Sequence
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

__all__: Sequence[str] = (
    "EXCLUDED_EXTENSIONS",
    "EXTRACTABLE_EXTENSIONS",
    "normalize_url",
    "strip_query",
    "file_extension",
    "is_excluded_url",
)

DEFAULT_PORTS: Final = {"http": 80, "https": 443}

#: Extensions that never carry package references.
EXCLUDED_EXTENSIONS: Final[FrozenSet[str]] = frozenset({
    # images
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp", ".svg", ".ico", ".cur",
    ".psd", ".ai", ".eps", ".raw", ".cr2", ".nef", ".orf", ".sr2", ".dng",
    # video
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv", ".m4v", ".3gp", ".ogv",
    ".mpg", ".mpeg", ".m2v", ".m4p", ".m4b", ".f4v", ".f4p", ".f4a", ".f4b",
    # audio
    ".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a", ".opus", ".amr",
    ".aiff", ".au", ".ra", ".3ga", ".ac3", ".ape", ".caf", ".dts", ".m4r", ".mka", ".tak",
    ".tta", ".wv",
    # archives
    ".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".lz", ".lzma", ".z", ".cab", ".arj",
    ".lha", ".ace", ".zoo", ".arc", ".pak", ".pit", ".sit", ".sitx", ".sea", ".hqx",
    # documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods", ".odp",
    ".rtf", ".pages", ".numbers", ".key",
    # executables and installers
    ".exe", ".msi", ".deb", ".rpm", ".dmg", ".pkg", ".app", ".run", ".bin", ".com", ".scr",
    ".bat", ".cmd", ".ps1", ".vbs", ".jar", ".war", ".ear",
    # fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot", ".fon", ".fnt",
    # databases and disk images
    ".db", ".sqlite", ".sqlite3", ".mdb", ".accdb", ".dbf",
    ".iso", ".img", ".vdi", ".vmdk", ".vhd",
    # native code
    ".dll", ".so", ".dylib", ".lib", ".a", ".o", ".obj",
    ".swf", ".fla", ".as", ".class",
})

#: Extensions the extraction engine knows how to read.
EXTRACTABLE_EXTENSIONS: Final[FrozenSet[str]] = frozenset({
    ".js", ".mjs", ".cjs", ".jsx", ".ts", ".tsx", ".vue", ".html", ".htm",
    ".json", ".lock", ".map", ".yml", ".yaml", ".sh", ".bash",
    ".md", ".rst", ".txt", ".babelrc", ".eslintrc", ".prettierrc", ".stylelintrc",
})

_ESCAPE_RE = re.compile(r"%([0-9A-Fa-f]{2})")
_UNRESERVED = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-._~")
_PATH_SAFE = "/%:@!$&'()*+,;=-._~"


def _fix_escapes(value: str) -> str:
    """Decode escapes of unreserved characters, upper-case the rest, encode what must be."""

    def repl(match: re.Match[str]) -> str:
        char = chr(int(match.group(1), 16))
        return char if char in _UNRESERVED else "%" + match.group(1).upper()

    return quote(_ESCAPE_RE.sub(repl, value), safe=_PATH_SAFE)


def _remove_dot_segments(path: str) -> str:
    """Collapse ``.``/``..`` segments and duplicate slashes; drop the trailing slash."""
    out: List[str] = []
    for segment in path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if out:
                out.pop()
            continue
        out.append(segment)
    return "/" + "/".join(out) if out else ""


def normalize_url(url: str) -> str:
    """
    Canonicalise *url*: lower-case scheme and host, drop default ports, collapse
    dot-segments and duplicate slashes, fix percent escapes, sort the query,
    strip the trailing slash and the fragment.

    Raises ValueError when *url* cannot be parsed as an http(s) URL.
    """
    raw = url.strip()
    if "://" not in raw:
        raw = "https://" + raw.lstrip("/")
    parts = urlsplit(raw)
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise ValueError(f"unsupported URL scheme: {url!r}")
    host = (parts.hostname or "").rstrip(".")
    if not host:
        raise ValueError(f"URL has no host: {url!r}")
    port = parts.port  # raises ValueError on a malformed port

    netloc = f"[{host}]" if ":" in host else host
    if port is not None and port != DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = _remove_dot_segments(_fix_escapes(parts.path))
    query = urlencode(sorted(parse_qsl(parts.query, keep_blank_values=True)), doseq=True)
    return urlunsplit((scheme, netloc, path, query, ""))


def strip_query(url: str) -> str:
    """Drop everything from the first ``?`` on."""
    return url.split("?", 1)[0]


def file_extension(url: str) -> str:
    """Return the lower-cased extension of the last path segment, or ``""``."""
    path = urlsplit(url).path
    last = path.rsplit("/", 1)[-1]
    if "." not in last:
        return ""
    return PurePosixPath(last).suffix.lower() or last[last.rindex("."):].lower()


def is_excluded_url(url: str) -> bool:
    """True when the URL names a file type that cannot contain package references."""
    ext = file_extension(url)
    return bool(ext) and ext in EXCLUDED_EXTENSIONS and ext not in EXTRACTABLE_EXTENSIONS
