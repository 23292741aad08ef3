"""Eligibility rules deciding whether caching applies to a request.

The rules run in a fixed order and stop at the first one that rejects
the request, so the verdict names exactly one built-in rule. Nothing
here performs I/O: authentication and session loading happen before
evaluation and are passed in as plain values.
"""

import re
from collections.abc import Callable, Mapping
from typing import Any

import structlog

from page_cache.config import Settings, settings
from page_cache.entities import AuthState, EligibilityVerdict, PageRequest

log = structlog.get_logger(__name__)

# Session key holding per-form state, e.g. {"form_info": {"ContactForm": {"errors": [...]}}}
FORM_INFO_SESSION_KEY = "form_info"
FORM_ERROR_KEYS = ("errors", "form_error")

Rule = Callable[[PageRequest, Mapping[str, Any], AuthState], bool]


def pattern_matches(pattern: re.Pattern[str] | None, text: str) -> bool:
    """Return True if ``pattern`` matches ``text``; a failing match counts as no match."""
    if pattern is None:
        return False
    try:
        return pattern.search(text) is not None
    except (re.error, TypeError) as e:
        log.warning("dynamic_cache.pattern_failed", pattern=pattern.pattern, error=str(e))
        return False


def has_form_errors(session: Mapping[str, Any]) -> bool:
    """Check the session for forms waiting to redisplay validation errors.

    A form counts as having errors as soon as an error entry is present,
    even an empty one.
    """
    form_info = session.get(FORM_INFO_SESSION_KEY)
    if not isinstance(form_info, Mapping):
        return False
    for form_data in form_info.values():
        if isinstance(form_data, Mapping) and any(key in form_data for key in FORM_ERROR_KEYS):
            return True
    return False


class EligibilityEvaluator:
    """Pure decision function over a request and its ambient state.

    Example:
        ```python
        evaluator = EligibilityEvaluator(settings)
        verdict = evaluator.evaluate(request, auth=AuthState())
        if not verdict:
            print(verdict.reason)  # e.g. "query_string"
        ```
    """

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or settings
        self._rules: list[tuple[str, Rule]] = [
            ("disabled", self._is_enabled),
            ("query_string", self._has_only_url_param),
            ("write_request", self._is_read_only),
            ("opt_out_url", self._not_opted_out),
            ("opt_in_url", self._opted_in),
            ("ajax", self._ajax_allowed),
            ("stage", self._is_live_stage),
            ("site_protection", self._passes_site_protection),
            ("form_errors", self._no_form_errors),
        ]

    @property
    def rule_names(self) -> list[str]:
        return [name for name, _ in self._rules]

    def evaluate(
        self,
        request: PageRequest,
        session: Mapping[str, Any] | None = None,
        auth: AuthState | None = None,
    ) -> EligibilityVerdict:
        """Run every rule in order until one rejects the request.

        Args:
            request: The request to evaluate
            session: Session data; defaults to the request's own session
            auth: Result of the site protection check; defaults to unprotected

        Returns:
            EligibilityVerdict naming the first failing rule, if any
        """
        session = request.session if session is None else session
        auth = auth or AuthState()
        for name, rule in self._rules:
            if not rule(request, session, auth):
                return EligibilityVerdict.rejected(name)
        return EligibilityVerdict.eligible()

    def _is_enabled(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return self._settings.enabled

    def _has_only_url_param(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return not (request.query_keys - {self._settings.url_param})

    def _is_read_only(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return not request.is_write

    def _not_opted_out(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return not pattern_matches(self._settings.opt_out_url_pattern, request.url)

    def _opted_in(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        pattern = self._settings.opt_in_url_pattern
        return pattern is None or pattern_matches(pattern, request.url)

    def _ajax_allowed(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return self._settings.enable_ajax or not request.is_ajax

    def _is_live_stage(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return request.stage.casefold() == self._settings.live_stage.casefold()

    def _passes_site_protection(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        if not (self._settings.site_protected or auth.site_protected):
            return True
        return not auth.check_failed and auth.principal is not None

    def _no_form_errors(self, request: PageRequest, session: Mapping[str, Any], auth: AuthState) -> bool:
        return not has_form_errors(session)
