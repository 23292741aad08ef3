"""Invalidation triggers for content changes.

Every trigger clears the whole cache. Working out which pages a changed
record appears on is not attempted: a full clear is always correct.
"""

from enum import Enum

import structlog

from page_cache.exceptions import FlushNotAuthorizedError
from page_cache.services.cache_service import DynamicCacheService

log = structlog.get_logger(__name__)


class ContentEvent(str, Enum):
    """Content lifecycle events the external content system reports."""

    SAVED = "saved"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
    DELETED = "deleted"


class InvalidationHooks:
    """Receivers for content events and the administrator flush command.

    Example:
        ```python
        hooks = InvalidationHooks(cache_service)

        # Wire into the content system's signals
        on_publish.connect(lambda *_: hooks.on_content_published())
        ```
    """

    def __init__(self, cache_service: DynamicCacheService, clear_on_write: bool | None = None) -> None:
        """Initialize the hooks.

        Args:
            cache_service: The cache to clear.
            clear_on_write: Whether content events clear the cache. Defaults to the
                service's cache_clear_on_write setting.
        """
        self._cache = cache_service
        self._clear_on_write = (
            cache_service.settings.cache_clear_on_write if clear_on_write is None else clear_on_write
        )

    def on_content_saved(self, versioned: bool = False) -> bool:
        """Handle a save.

        Content with a draft/publish lifecycle only reaches visitors on
        publish, so saving a draft of it leaves the cache alone.

        Args:
            versioned: Whether the saved record has a live stage of its own

        Returns:
            True if the cache was cleared
        """
        if versioned:
            return False
        return self._content_changed(ContentEvent.SAVED)

    def on_content_published(self) -> bool:
        return self._content_changed(ContentEvent.PUBLISHED)

    def on_content_unpublished(self) -> bool:
        return self._content_changed(ContentEvent.UNPUBLISHED)

    def on_content_deleted(self) -> bool:
        return self._content_changed(ContentEvent.DELETED)

    def dispatch(self, event: ContentEvent, versioned: bool = False) -> bool:
        """Route an event to its hook; used by the HTTP event endpoint."""
        if event is ContentEvent.SAVED:
            return self.on_content_saved(versioned=versioned)
        if event is ContentEvent.PUBLISHED:
            return self.on_content_published()
        if event is ContentEvent.UNPUBLISHED:
            return self.on_content_unpublished()
        return self.on_content_deleted()

    def on_flush_command(self, authorized: bool) -> bool:
        """Clear the cache on an explicit administrator request.

        Raises:
            FlushNotAuthorizedError: If the caller is not privileged
        """
        if not authorized:
            raise FlushNotAuthorizedError("Only administrators may flush the page cache")
        log.info("dynamic_cache.flush_command")
        return self._cache.clear()

    def _content_changed(self, event: ContentEvent) -> bool:
        if not self._clear_on_write:
            return False
        log.info("dynamic_cache.content_changed", content_event=event.value)
        return self._cache.clear()
