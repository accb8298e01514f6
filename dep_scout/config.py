"""
Scan options for DepScout: schema, loading from YAML/JSON and the helpers
that turn raw user input (proxy, resolver lists) into usable values.

Pydantic describes the schema and validates the data.
"""
from __future__ import annotations

import errno
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from dep_scout.logger import get_logger

DEFAULT_REGISTRY = "https://registry.npmjs.org"

_HOST_PORT_RE = re.compile(r"^(?:\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9.-]+):(\d{1,5})$")


class ScanOptions(BaseModel):
    """Configuration for one scan run."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    concurrency: int = Field(10, ge=1, description="Number of targets fetched at the same time.")
    timeout: float = Field(30.0, gt=0, description="Per-request deadline (seconds).")
    delay: int = Field(0, ge=0, description="Delay between dispatches (milliseconds).")
    delay_jitter: int = Field(0, ge=0, description="Upper bound of random extra delay (milliseconds).")
    user_agent: str = Field("dep_scout", description="User-Agent header; empty string sends none.")
    proxy: Optional[str] = Field(None, description="Upstream HTTP proxy as host:port.")
    resolvers: List[str] = Field(default_factory=list, description="Custom DNS resolvers, host[:port].")
    verbose: bool = False
    silence: bool = False
    registry_url: str = Field(DEFAULT_REGISTRY, min_length=1, description="Package registry base URL.")

    @field_validator("registry_url", mode="before")
    def _strip_trailing_slash(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.rstrip("/")
        return v

    @field_validator("resolvers", mode="before")
    def _drop_blank_resolvers(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [str(item).strip() for item in v if str(item).strip()]
        return v


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None]) -> ScanOptions:
    """
    Read a YAML or JSON file and return validated ScanOptions.
    ``None`` means "no file": all defaults apply.
    """
    if path is None:
        return ScanOptions()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Unsupported config format: {suffix}")

    return ScanOptions(**data)


def read_lines(path: Union[str, Path]) -> List[str]:
    """Return the non-empty, non-comment lines of a text file."""
    p = Path(path).expanduser()
    lines = [line.strip() for line in p.read_text(encoding="utf-8").splitlines()]
    return [line for line in lines if line and not line.startswith("#")]


def read_resolvers(path: Union[str, Path], logger: Optional[logging.Logger] = None) -> List[str]:
    """Read a resolver list; an unreadable file means "use system DNS"."""
    log = get_logger(logger)
    try:
        resolvers = read_lines(path)
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Could not read resolvers from %s, falling back to system DNS: %s", path, exc)
        return []
    log.debug("Loaded %d resolvers from %s", len(resolvers), path)
    return resolvers


def proxy_url(proxy: Optional[str], logger: Optional[logging.Logger] = None) -> Optional[str]:
    """Turn ``host:port`` into a proxy URL, or ``None`` when unset or invalid."""
    if not proxy:
        return None
    match = _HOST_PORT_RE.match(proxy.strip())
    if match is None or not 0 < int(match.group(1)) < 65536:
        get_logger(logger).warning("Invalid proxy format (expected host:port): %s", proxy)
        return None
    return f"http://{proxy.strip()}"


__all__ = [
    "DEFAULT_REGISTRY",
    "ScanOptions",
    "load_config",
    "proxy_url",
    "read_lines",
    "read_resolvers",
]
