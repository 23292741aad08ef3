"""Domain entities for internal representation.

These are plain dataclasses used by the services. They carry no
framework types, so the caching decision can be exercised without a
web server. HTTP adapters in the api package convert to and from them.
"""

from .cache_result import CacheOutcome, CacheResult
from .eligibility_verdict import EligibilityVerdict
from .page_request import AuthState, PageRequest
from .page_response import PageResponse, ResponseEnvelope

__all__ = [
    "AuthState",
    "CacheOutcome",
    "CacheResult",
    "EligibilityVerdict",
    "PageRequest",
    "PageResponse",
    "ResponseEnvelope",
]
