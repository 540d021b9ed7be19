# services/errors.py
from __future__ import annotations


class CryptocratError(Exception):
    """Base class for errors that end up as a chat reply."""


class ParseFailure(CryptocratError):
    """Required command argument is missing or malformed."""

    def __init__(self, usage: str):
        super().__init__(usage)
        self.usage = usage


class FetchFailure(CryptocratError):
    """Upstream API unreachable, timed out or answered with something unusable."""


class LookupMiss(CryptocratError):
    """Upstream answered fine but does not know the requested symbol."""
