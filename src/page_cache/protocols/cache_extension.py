"""Cache extension protocol.

Extensions customise the caching decision without subclassing the
service. They are invoked in registration order.
"""

from typing import Protocol, runtime_checkable

from page_cache.entities import EligibilityVerdict, PageRequest


@runtime_checkable
class CacheExtension(Protocol):
    """Protocol for plugins that adjust eligibility or key derivation."""

    def update_eligibility(self, verdict: EligibilityVerdict, request: PageRequest) -> EligibilityVerdict:
        """Return the verdict to use for ``request``.

        Args:
            verdict: The verdict so far, from the built-in rules and earlier extensions
            request: The request being evaluated

        Returns:
            The same verdict, or an overriding one
        """
        ...

    def update_cache_key_fragments(self, fragments: dict[str, str], request: PageRequest) -> None:
        """Add, alter or remove cache key fragments in place.

        Args:
            fragments: Ordered mapping of fragment name to value
            request: The request the key is built for
        """
        ...


class CacheExtensionBase:
    """No-op extension to subclass when only one hook is needed."""

    def update_eligibility(self, verdict: EligibilityVerdict, request: PageRequest) -> EligibilityVerdict:
        return verdict

    def update_cache_key_fragments(self, fragments: dict[str, str], request: PageRequest) -> None:
        return None
