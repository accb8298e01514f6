"""dep_scout.net: DNS resolution, HTTP transport and registry claim checks."""

from .claims import ClaimChecker
from .fetcher import Fetcher, FetchResponse
from .resolver import SYSTEM, Resolver, parse_nameserver

__all__ = ["SYSTEM", "ClaimChecker", "Fetcher", "FetchResponse", "Resolver", "parse_nameserver"]
