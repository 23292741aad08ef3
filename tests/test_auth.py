"""
Tests for the site protection check and admin authorization.
"""

import base64
import dataclasses

import pytest

from page_cache.entities import AuthState
from page_cache.services import AdminAuthorizer, BasicAuthChecker


def _basic(username: str, password: str) -> str:
    return "Basic " + base64.b64encode(f"{username}:{password}".encode()).decode()


@pytest.fixture
def checker(config):
    return BasicAuthChecker(
        dataclasses.replace(config, site_protected=True, basic_auth_username="editor", basic_auth_password="pw")
    )


def test_unprotected_site_skips_check(config):
    assert BasicAuthChecker(config).check(None) == AuthState()


def test_valid_credentials(checker):
    assert checker.check(_basic("editor", "pw")) == AuthState(site_protected=True, principal="editor")


def test_missing_credentials(checker):
    state = checker.check(None)
    assert state.site_protected and state.principal is None and not state.check_failed


@pytest.mark.parametrize(
    "header",
    [
        _basic("editor", "wrong"),
        _basic("someone", "pw"),
        "Bearer token",
        "Basic !!!not-base64",
        "Basic " + base64.b64encode(b"no-colon").decode(),
    ],
)
def test_rejected_credentials(checker, header):
    state = checker.check(header)
    assert state.check_failed
    assert state.principal is None


def test_admin_authorizer(config):
    authorizer = AdminAuthorizer(config)
    assert authorizer.is_authorized("Bearer admin-secret")
    assert not authorizer.is_authorized("Bearer nope")
    assert not authorizer.is_authorized("Basic admin-secret")
    assert not authorizer.is_authorized(None)


def test_admin_authorizer_without_token_configured(config):
    authorizer = AdminAuthorizer(dataclasses.replace(config, admin_token=None))
    assert not authorizer.is_authorized("Bearer ")
