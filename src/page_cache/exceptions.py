"""Exception hierarchy for the page cache.

Only configuration errors and flush authorization failures ever reach
callers. Store and codec errors are raised internally and absorbed by
the cache service, which degrades to serving uncached responses.
"""


class PageCacheError(Exception):
    """Base class for all page cache errors."""


class ConfigurationError(PageCacheError, ValueError):
    """Raised at load time when the cache policy is malformed."""


class StoreUnavailableError(PageCacheError):
    """Raised by a response store when its backing service fails."""


class EnvelopeDecodeError(PageCacheError, ValueError):
    """Raised when stored bytes are not a readable response envelope."""


class FlushNotAuthorizedError(PageCacheError):
    """Raised when an unprivileged caller asks for a cache flush."""
