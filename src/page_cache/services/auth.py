"""Authentication helpers used around the caching decision.

BasicAuthChecker performs the out-of-band site protection check whose
result feeds the eligibility rules. AdminAuthorizer gates the flush
command and the admin endpoints.
"""

import base64
import binascii
import secrets

from page_cache.config import Settings, settings
from page_cache.entities import AuthState


def _compare(given: str, expected: str | None) -> bool:
    if not expected:
        return False
    return secrets.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class BasicAuthChecker:
    """Checks an ``Authorization: Basic`` header against configured credentials."""

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or settings

    def check(self, authorization: str | None) -> AuthState:
        """Check the header value and report the outcome.

        Args:
            authorization: Raw Authorization header, or None if absent

        Returns:
            AuthState with the principal set only if the credentials match
        """
        if not self._settings.site_protected:
            return AuthState()

        if not authorization:
            return AuthState(site_protected=True)

        scheme, _, encoded = authorization.partition(" ")
        if scheme.lower() != "basic" or not encoded:
            return AuthState(site_protected=True, check_failed=True)

        try:
            decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return AuthState(site_protected=True, check_failed=True)

        username, sep, password = decoded.partition(":")
        if (
            sep
            and _compare(username, self._settings.basic_auth_username)
            and _compare(password, self._settings.basic_auth_password)
        ):
            return AuthState(site_protected=True, principal=username)
        return AuthState(site_protected=True, check_failed=True)


class AdminAuthorizer:
    """Checks a bearer token against the configured admin token."""

    def __init__(self, config: Settings | None = None) -> None:
        self._settings = config or settings

    def is_authorized(self, authorization: str | None) -> bool:
        if not authorization or not self._settings.admin_token:
            return False
        scheme, _, token = authorization.partition(" ")
        return scheme.lower() == "bearer" and _compare(token.strip(), self._settings.admin_token)
