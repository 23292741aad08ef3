"""Page request domain entity."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

CACHEABLE_METHODS = frozenset({"GET"})


@dataclass(frozen=True)
class PageRequest:
    """Immutable view of an inbound request, as seen by the caching decision.

    Attributes:
        url: Request path relative to the site root, always starting with "/"
        method: HTTP method, upper case
        query_params: Query string pairs in their original order
        host: Value of the Host header
        scheme: "http" or "https"
        stage: Resolved content variant, e.g. "Live" or "Stage"
        is_ajax: Whether this is a partial-render (XMLHttpRequest) request
        session: Ambient per-session data
        security_token: The live anti-forgery token for this session, if any
    """

    url: str
    method: str = "GET"
    query_params: tuple[tuple[str, str], ...] = ()
    host: str = ""
    scheme: str = "http"
    stage: str = "Live"
    is_ajax: bool = False
    session: Mapping[str, Any] = field(default_factory=dict, compare=False)
    security_token: str | None = None

    @property
    def query_keys(self) -> set[str]:
        return {name for name, _ in self.query_params}

    @property
    def is_write(self) -> bool:
        """Whether the request must be handled live rather than from the cache.

        Only GET is served from the cache. HEAD shares the GET cache key but
        routes may answer it differently (or not at all), so it is treated
        as a write.
        """
        return self.method.upper() not in CACHEABLE_METHODS


@dataclass(frozen=True)
class AuthState:
    """Outcome of the out-of-band site protection check.

    Attributes:
        site_protected: Whether the whole site sits behind basic auth
        principal: Name of the authenticated user, if the check passed
        check_failed: Whether the credentials were present but rejected
    """

    site_protected: bool = False
    principal: str | None = None
    check_failed: bool = False
