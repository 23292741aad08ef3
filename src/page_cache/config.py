import os
import re
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

from page_cache.exceptions import ConfigurationError

load_dotenv()


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_codes(name: str, default: str) -> tuple[int, ...] | None:
    """Parse a comma separated list of HTTP status codes.

    An empty value means the list is not configured at all, which is
    different from an empty list.
    """
    raw = os.getenv(name, default).strip()
    if not raw:
        return None
    try:
        return tuple(int(code) for code in raw.split(",") if code.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a comma separated list of integers, got {raw!r}") from e


@lru_cache(maxsize=64)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile a policy pattern, raising ConfigurationError if it is malformed."""
    try:
        return re.compile(pattern)
    except re.error as e:
        raise ConfigurationError(f"Invalid pattern {pattern!r}: {e}") from e


@dataclass(frozen=True)
class Settings:
    """Cache policy and infrastructure settings loaded from environment variables.

    The instance is an immutable snapshot. Reloading the policy means
    building a new Settings and a new cache service around it.
    """

    # Master switch
    enabled: bool = _env_bool("DYNAMIC_CACHE_ENABLED", "true")

    # URL filters, matched with re.search against the request path
    opt_in_url: str | None = os.getenv("DYNAMIC_CACHE_OPT_IN_URL") or None
    opt_out_url: str | None = os.getenv("DYNAMIC_CACHE_OPT_OUT_URL", r"^/(_cache|health)(/|$)") or None

    # Header filters, matched against "Name: value" lines of the backend response
    opt_in_header: str | None = os.getenv("DYNAMIC_CACHE_OPT_IN_HEADER") or None
    opt_out_header: str | None = os.getenv("DYNAMIC_CACHE_OPT_OUT_HEADER", r"(?i)^X-DynamicCache-OptOut") or None
    opt_out_header_string: str = os.getenv("DYNAMIC_CACHE_OPT_OUT_HEADER_STRING", "X-DynamicCache-OptOut: true")

    # Only these response headers are persisted with a cached page
    cache_headers: str | None = os.getenv("DYNAMIC_CACHE_HEADERS", r"(?i)^(content-type|location|x-)") or None

    segment_hostname: bool = _env_bool("DYNAMIC_CACHE_SEGMENT_HOSTNAME", "false")
    enable_ajax: bool = _env_bool("DYNAMIC_CACHE_ENABLE_AJAX", "false")

    # Response code filters; None means "not configured"
    opt_in_response_codes: tuple[int, ...] | None = _env_codes("DYNAMIC_CACHE_OPT_IN_RESPONSE_CODES", "")
    opt_out_response_codes: tuple[int, ...] | None = _env_codes(
        "DYNAMIC_CACHE_OPT_OUT_RESPONSE_CODES", "500,501,502,503,504"
    )

    # Diagnostic header; empty disables it
    response_header: str = os.getenv("DYNAMIC_CACHE_RESPONSE_HEADER", "X-DynamicCache")
    log_hit_miss: bool = _env_bool("DYNAMIC_CACHE_LOG_HIT_MISS", "false")

    cache_clear_on_write: bool = _env_bool("DYNAMIC_CACHE_CLEAR_ON_WRITE", "true")

    # Request interpretation
    live_stage: str = os.getenv("DYNAMIC_CACHE_LIVE_STAGE", "Live")
    stage_param: str = os.getenv("DYNAMIC_CACHE_STAGE_PARAM", "stage")
    url_param: str = os.getenv("DYNAMIC_CACHE_URL_PARAM", "url")
    base_url: str = os.getenv("DYNAMIC_CACHE_BASE_URL", "")
    security_token_name: str = os.getenv("DYNAMIC_CACHE_SECURITY_TOKEN_NAME", "SecurityID")

    # Site-wide basic auth protection
    site_protected: bool = _env_bool("DYNAMIC_CACHE_SITE_PROTECTED", "false")
    basic_auth_username: str | None = os.getenv("DYNAMIC_CACHE_BASIC_AUTH_USERNAME")
    basic_auth_password: str | None = os.getenv("DYNAMIC_CACHE_BASIC_AUTH_PASSWORD")

    # Bearer token for the flush command and admin endpoints
    admin_token: str | None = os.getenv("DYNAMIC_CACHE_ADMIN_TOKEN") or None

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    cache_prefix: str = os.getenv("DYNAMIC_CACHE_PREFIX", "dynamic_cache")
    cache_ttl: int = int(os.getenv("DYNAMIC_CACHE_TTL", "0"))  # 0 = never expire

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = _env_bool("API_RELOAD", "false")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        for pattern in (
            self.opt_in_url,
            self.opt_out_url,
            self.opt_in_header,
            self.opt_out_header,
            self.cache_headers,
        ):
            if pattern:
                compile_pattern(pattern)

        for codes in (self.opt_in_response_codes, self.opt_out_response_codes):
            if codes is not None and not all(isinstance(code, int) and 100 <= code <= 599 for code in codes):
                raise ConfigurationError(f"Response codes must be integers between 100 and 599, got {codes!r}")

        if self.cache_ttl < 0:
            raise ConfigurationError("DYNAMIC_CACHE_TTL must be zero or positive")

        if ":" not in self.opt_out_header_string:
            raise ConfigurationError("DYNAMIC_CACHE_OPT_OUT_HEADER_STRING must look like 'Name: value'")

    @property
    def opt_in_url_pattern(self) -> re.Pattern[str] | None:
        return compile_pattern(self.opt_in_url) if self.opt_in_url else None

    @property
    def opt_out_url_pattern(self) -> re.Pattern[str] | None:
        return compile_pattern(self.opt_out_url) if self.opt_out_url else None

    @property
    def opt_in_header_pattern(self) -> re.Pattern[str] | None:
        return compile_pattern(self.opt_in_header) if self.opt_in_header else None

    @property
    def opt_out_header_pattern(self) -> re.Pattern[str] | None:
        return compile_pattern(self.opt_out_header) if self.opt_out_header else None

    @property
    def cache_headers_pattern(self) -> re.Pattern[str] | None:
        return compile_pattern(self.cache_headers) if self.cache_headers else None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(config: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    config = config or settings
    return redis.from_url(
        config.redis_url,
        password=config.redis_password,
        decode_responses=False,
    )
