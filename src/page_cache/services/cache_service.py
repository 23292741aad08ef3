"""Cache service for the full-page caching decision.

This service coordinates eligibility, key derivation, the response store
and the envelope codec for one request at a time. It holds no
per-request state and takes no locks, so a single instance is shared by
every concurrent request for the lifetime of the process.

Decision flow:
    evaluate -> bypass (backend, "skipped")
             -> lookup -> hit (rewrite token, "hit at ...")
                       -> miss -> backend -> capture gate -> store ("miss at ...")
"""

import re
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from email.utils import formatdate

import structlog

from page_cache.config import Settings, settings
from page_cache.entities import (
    AuthState,
    CacheOutcome,
    CacheResult,
    EligibilityVerdict,
    PageRequest,
    PageResponse,
    ResponseEnvelope,
)
from page_cache.entities.page_response import header_line
from page_cache.protocols import CacheExtension, ResponseStore
from page_cache.services import codec
from page_cache.services.cache_key import CacheKeyBuilder
from page_cache.services.eligibility import EligibilityEvaluator, pattern_matches

log = structlog.get_logger(__name__)

Backend = Callable[[PageRequest], Awaitable[PageResponse]]


class DynamicCacheService:
    """Core full-page cache orchestration service.

    This service depends on the ResponseStore PROTOCOL, not a concrete
    store. Store failures are logged and turned into misses; backend
    failures propagate untouched.

    Example:
        ```python
        from page_cache.repositories import InMemoryResponseStore
        from page_cache.services import DynamicCacheService

        cache = DynamicCacheService.create(store=InMemoryResponseStore())
        result = await cache.handle(page_request, render_page)
        print(result.outcome)  # CacheOutcome.STORED, then CacheOutcome.HIT
        ```
    """

    def __init__(
        self,
        store: ResponseStore,
        config: Settings | None = None,
        extensions: Sequence[CacheExtension] = (),
        evaluator: EligibilityEvaluator | None = None,
        key_builder: CacheKeyBuilder | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            store: Response storage backend (required).
            config: Cache policy. Defaults to the process settings.
            extensions: Plugins invoked in order for eligibility and key fragments.
            evaluator: Eligibility rules. Defaults to one built from config.
            key_builder: Key derivation. Defaults to one built from config and extensions.
            clock: Source of timestamps for the diagnostic header.
        """
        self._store = store
        self._settings = config or settings
        self._extensions = list(extensions)
        self._evaluator = evaluator or EligibilityEvaluator(self._settings)
        self._key_builder = key_builder or CacheKeyBuilder(self._settings, self._extensions)
        self._clock = clock
        self._token_pattern = re.compile(
            rb'(<input type="hidden" name="'
            + re.escape(self._settings.security_token_name.encode("utf-8"))
            + rb'" value=")[\w-]*(")'
        )

    @classmethod
    def create(
        cls,
        store: ResponseStore,
        config: Settings | None = None,
        extensions: Sequence[CacheExtension] = (),
    ) -> "DynamicCacheService":
        """Factory method to create a DynamicCacheService with default collaborators.

        Args:
            store: Response storage backend (required).
            config: Cache policy. If None, uses settings.
            extensions: Optional cache extensions.

        Returns:
            Configured DynamicCacheService instance
        """
        return cls(store=store, config=config, extensions=extensions)

    # ------------------------------------------------------------------
    # Decision steps
    # ------------------------------------------------------------------

    def evaluate(self, request: PageRequest, auth: AuthState | None = None) -> EligibilityVerdict:
        """Run the eligibility rules, then let each extension adjust the verdict."""
        verdict = self._evaluator.evaluate(request, auth=auth)
        for extension in self._extensions:
            verdict = extension.update_eligibility(verdict, request)
        return verdict

    def cache_key(self, request: PageRequest) -> str:
        return self._key_builder.build(request)

    async def handle(
        self,
        request: PageRequest,
        backend: Backend,
        auth: AuthState | None = None,
        verdict: EligibilityVerdict | None = None,
    ) -> CacheResult:
        """Serve ``request`` from the cache or the backend.

        Business logic:
        1. Evaluate eligibility; if ineligible call the backend and tag "skipped"
        2. Look up the key; a decodable entry is replayed as a hit
        3. Otherwise call the backend, and store the response if it passes the capture gate

        Args:
            request: The request to serve
            backend: Coroutine function producing the live response
            auth: Result of the site protection check, if one was performed
            verdict: A verdict the caller already computed with evaluate()

        Returns:
            CacheResult with the response to send and the terminal state

        Raises:
            Exception: Anything raised by ``backend`` is propagated unchanged
        """
        if verdict is None:
            verdict = self.evaluate(request, auth)
        if not verdict:
            response = await backend(request)
            self._tag(response, "skipped")
            self.record_skip(request, verdict)
            return CacheResult(response=response, outcome=CacheOutcome.BYPASSED, verdict=verdict)

        key = self.cache_key(request)
        envelope = self.lookup(key)
        if envelope is not None:
            response = self.present(envelope, request)
            self._tag(response, f"hit at {self._timestamp()}")
            self._log_hit_miss("dynamic_cache.hit", request)
            return CacheResult(response=response, outcome=CacheOutcome.HIT, verdict=verdict, cache_key=key)

        response = await backend(request)
        rejection = self.capture_rejection(response)
        if rejection is None and not self.store_response(key, response):
            rejection = "store_unavailable"

        self._tag(response, f"miss at {self._timestamp()}")
        self._log_hit_miss("dynamic_cache.miss", request, stored=rejection is None, reason=rejection)
        return CacheResult(
            response=response,
            outcome=CacheOutcome.STORED if rejection is None else CacheOutcome.NOT_STORED,
            verdict=verdict,
            cache_key=key,
            reason=rejection,
        )

    def lookup(self, key: str) -> ResponseEnvelope | None:
        """Fetch and decode the entry for ``key``; any failure reads as a miss."""
        try:
            data = self._store.get(key)
        except Exception as e:
            log.warning("dynamic_cache.store.get_failed", key=key, error=str(e))
            return None

        envelope = codec.decode(data)
        if data and envelope is None:
            log.debug("dynamic_cache.decode_failed", key=key)
        return envelope

    def capture_rejection(self, response: PageResponse) -> str | None:
        """Check whether a backend response may be stored.

        Returns:
            None if the response is capturable, else the name of the failing check
        """
        if not response.body and not response.is_redirect:
            return "empty_body"

        opt_in_codes = self._settings.opt_in_response_codes
        if opt_in_codes is not None and response.status_code not in opt_in_codes:
            return "opt_in_response_code"

        opt_out_codes = self._settings.opt_out_response_codes
        if opt_out_codes is not None and response.status_code in opt_out_codes:
            return "opt_out_response_code"

        if not self.headers_allow_caching(response.header_lines()):
            return "headers"
        return None

    def headers_allow_caching(self, lines: Iterable[str]) -> bool:
        """Apply the opt-out then opt-in header patterns to "Name: value" lines."""
        lines = list(lines)
        opt_out = self._settings.opt_out_header_pattern
        if opt_out is not None and any(pattern_matches(opt_out, line) for line in lines):
            return False

        opt_in = self._settings.opt_in_header_pattern
        if opt_in is not None:
            return any(pattern_matches(opt_in, line) for line in lines)
        return True

    def cacheable_headers(self, headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
        """Filter headers down to those persisted with the envelope."""
        report_header = self._settings.response_header.lower()
        keep_pattern = self._settings.cache_headers_pattern

        saved = []
        for name, value in headers:
            if report_header and name.lower().startswith(report_header):
                continue
            if keep_pattern is not None and not pattern_matches(keep_pattern, header_line(name, value)):
                continue
            saved.append((name, value))
        return saved

    def store_response(self, key: str, response: PageResponse) -> bool:
        """Encode and write the response under ``key``.

        Returns:
            True if the entry was written, False if the store failed
        """
        data = codec.encode(response.status_code, self.cacheable_headers(response.headers), response.body)
        try:
            self._store.set(key, data)
        except Exception as e:
            log.warning("dynamic_cache.store.set_failed", key=key, error=str(e))
            return False
        return True

    def present(self, envelope: ResponseEnvelope, request: PageRequest) -> PageResponse:
        """Rebuild a response from an envelope, swapping in the live anti-forgery token."""
        response = envelope.to_response()
        response.body = self.replace_security_token(response.body, request.security_token)
        return response

    def replace_security_token(self, body: bytes, token: str | None) -> bytes:
        live = (token or "").encode("utf-8")
        return self._token_pattern.sub(lambda m: m.group(1) + live + m.group(2), body)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear(self) -> bool:
        """Remove every cached page.

        Returns:
            True if the store was cleared, False if the store failed
        """
        try:
            deleted = self._store.clear()
        except Exception as e:
            log.warning("dynamic_cache.store.clear_failed", error=str(e))
            return False
        log.info("dynamic_cache.cleared", deleted=deleted)
        return True

    def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with store statistics and the active policy
        """
        try:
            stats = self._store.get_stats()
        except Exception as e:
            log.warning("dynamic_cache.store.stats_failed", error=str(e))
            stats = {"total_entries": -1}
        stats["enabled"] = self._settings.enabled
        stats["segment_hostname"] = self._settings.segment_hostname
        stats["response_header"] = self._settings.response_header
        return stats

    def is_healthy(self) -> bool:
        try:
            return self._store.health_check()
        except Exception as e:
            log.warning("dynamic_cache.store.health_failed", error=str(e))
            return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def record_skip(self, request: PageRequest, verdict: EligibilityVerdict) -> None:
        """Log a bypass, for callers that forward ineligible requests themselves."""
        self._log_hit_miss("dynamic_cache.skipped", request, reason=verdict.reason)

    def _tag(self, response: PageResponse, value: str) -> None:
        header = self._settings.response_header
        if not header:
            return
        response.headers = [(name, v) for name, v in response.headers if name.lower() != header.lower()]
        response.add_header(header, value)

    def _timestamp(self) -> str:
        return formatdate(self._clock(), usegmt=True)

    def _log_hit_miss(self, event: str, request: PageRequest, **fields) -> None:
        if self._settings.log_hit_miss:
            log.info(event, url=request.url, host=request.host, **fields)

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def store(self) -> ResponseStore:
        """Get the underlying store (for testing)."""
        return self._store
