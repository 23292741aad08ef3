"""Shared fixtures for the page cache tests."""

import pytest

from page_cache.config import Settings
from page_cache.repositories import InMemoryResponseStore

from tests.helpers import ADMIN_TOKEN


@pytest.fixture
def config() -> Settings:
    """Default policy with the environment-dependent fields pinned."""
    return Settings(
        enabled=True,
        opt_in_url=None,
        opt_out_url=r"^/(_cache|health)(/|$)",
        opt_in_header=None,
        opt_out_header=r"(?i)^X-DynamicCache-OptOut",
        cache_headers=r"(?i)^(content-type|location|x-)",
        segment_hostname=False,
        enable_ajax=False,
        opt_in_response_codes=None,
        opt_out_response_codes=(500, 501, 502, 503, 504),
        response_header="X-DynamicCache",
        log_hit_miss=True,
        cache_clear_on_write=True,
        live_stage="Live",
        stage_param="stage",
        url_param="url",
        base_url="",
        security_token_name="SecurityID",
        site_protected=False,
        basic_auth_username=None,
        basic_auth_password=None,
        admin_token=ADMIN_TOKEN,
        cache_prefix="dynamic_cache",
        cache_ttl=0,
    )


@pytest.fixture
def store() -> InMemoryResponseStore:
    return InMemoryResponseStore()
