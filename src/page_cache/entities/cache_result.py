"""Cache result domain entity."""

from dataclasses import dataclass
from enum import Enum

from .eligibility_verdict import EligibilityVerdict
from .page_response import PageResponse


class CacheOutcome(str, Enum):
    """Terminal states of a single caching decision."""

    BYPASSED = "bypassed"
    HIT = "hit"
    STORED = "stored"
    NOT_STORED = "not_stored"


@dataclass(frozen=True)
class CacheResult:
    """The response handed back to the caller, with how it was produced.

    Attributes:
        response: The response to send, diagnostic header included
        outcome: Which terminal state the decision ended in
        verdict: The eligibility verdict for the request
        cache_key: The key looked up, or None when bypassed
        reason: Why a miss was not stored, if it was not
    """

    response: PageResponse
    outcome: CacheOutcome
    verdict: EligibilityVerdict
    cache_key: str | None = None
    reason: str | None = None
