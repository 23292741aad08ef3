"""Cache key derivation.

Keys are a hash over individually hashed fragments, so fragment values
can never run into each other (``"a" + "/b"`` vs ``"a/" + "b"``). Only
the request is hashed, never process state, so every worker sharing a
store derives the same key for the same request.
"""

import hashlib
import re
from collections.abc import Sequence

from page_cache.config import Settings, settings
from page_cache.entities import PageRequest
from page_cache.protocols import CacheExtension

KEY_PREFIX = "DynamicCache_"
_FRAGMENT_SEPARATOR = "|"
_REPEATED_SLASHES = re.compile(r"/+")


def normalize_url(url: str) -> str:
    """Collapse runs of path separators into one."""
    return _REPEATED_SLASHES.sub("/", url)


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


class CacheKeyBuilder:
    """Maps a request to the opaque string key its rendering is stored under."""

    def __init__(
        self,
        config: Settings | None = None,
        extensions: Sequence[CacheExtension] = (),
    ) -> None:
        self._settings = config or settings
        self._extensions = list(extensions)

    def fragments(self, request: PageRequest) -> dict[str, str]:
        """Assemble the ordered fragments identifying this rendering."""
        fragments: dict[str, str] = {
            "protocol": request.scheme,
            "stage": request.stage,
        }
        if self._settings.segment_hostname:
            fragments["host"] = request.host
        fragments["url"] = normalize_url(request.url)

        for extension in self._extensions:
            extension.update_cache_key_fragments(fragments, request)
        return fragments

    def build(self, request: PageRequest) -> str:
        digests = (_digest(str(value)) for value in self.fragments(request).values())
        return KEY_PREFIX + _digest(_FRAGMENT_SEPARATOR.join(digests))
