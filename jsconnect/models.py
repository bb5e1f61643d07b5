"""
jsConnect Models
================
Shared data models for both handshake generations.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Union
from urllib.parse import parse_qs, urlsplit

UserProfile = Dict[str, Any]


class QueryMap(Mapping):
    """
    Immutable flat view of inbound query parameters.

    Accepts a raw querystring (with or without a leading ``?``), a
    ``parse_qs``-style mapping of lists, or a plain mapping. The first value
    wins for repeated keys and blank values are kept.
    """

    def __init__(self, source: Union[str, Mapping, None] = None):
        self._data: Dict[str, str] = {}
        if source is None:
            return
        if isinstance(source, str):
            source = parse_qs(source.lstrip("?"), keep_blank_values=True)
        for key, value in source.items():
            if isinstance(value, (list, tuple)):
                if not value:
                    continue
                value = value[0]
            self._data[str(key)] = value if value is None else str(value)

    @classmethod
    def from_url(cls, url: str) -> "QueryMap":
        """Build a query map from the querystring of a full URL."""
        return cls(urlsplit(url).query)

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryMap({self._data!r})"


@dataclass(frozen=True)
class RequestContext:
    """Snapshot of an inbound request plus the clock used to judge it."""
    query: QueryMap
    now: int

    @classmethod
    def from_query(
        cls,
        query: Union[str, Mapping, None],
        now: Optional[int] = None,
    ) -> "RequestContext":
        if not isinstance(query, QueryMap):
            query = QueryMap(query)
        return cls(query=query, now=int(time.time()) if now is None else int(now))


@dataclass(frozen=True)
class SsoState:
    """Either a guest or an authenticated user with a profile."""
    profile: Optional[UserProfile] = field(default=None)

    @classmethod
    def guest(cls) -> "SsoState":
        return cls()

    @classmethod
    def authenticated(cls, profile: Mapping) -> "SsoState":
        return cls(profile=dict(profile))

    @classmethod
    def from_user(cls, user: Optional[Mapping]) -> "SsoState":
        """A missing or empty user is treated as a guest."""
        if not user:
            return cls.guest()
        return cls.authenticated(user)

    @property
    def is_guest(self) -> bool:
        return self.profile is None
