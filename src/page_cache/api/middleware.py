"""Full-page cache middleware for FastAPI/Starlette.

Adapts Starlette requests and responses to the cache service's entities
and runs every request through it. The rest of the app behind this
middleware is the backend that renders pages.

Special query parameters:
- ?flush           the request bypasses the cache entirely; from an authorized
                   admin it also clears the cache first
- ?cache=flush     an authorized admin clears the cache; the request itself
                   is then forwarded live

Headers added to responses (name configurable, "X-DynamicCache" by default):
- skipped            caching did not apply to this request
- hit at <date>      served from the cache
- miss at <date>     rendered by the backend
"""

from __future__ import annotations

from collections.abc import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from page_cache.config import Settings, settings
from page_cache.entities import PageRequest, PageResponse
from page_cache.services import AdminAuthorizer, BasicAuthChecker, DynamicCacheService, InvalidationHooks

log = structlog.get_logger(__name__)

FLUSH_PARAM = "flush"
CACHE_PARAM = "cache"


def resolve_url(request: Request, config: Settings) -> str:
    """Work out the site-relative URL of a request."""
    url = request.query_params.get(config.url_param) or request.url.path
    url = url.split("?", 1)[0]

    # Remove base folders if the site is hosted in a subfolder
    base = config.base_url
    if url and base and url.lower().startswith(base.lower()):
        url = url[len(base):]

    if not url:
        return "/"
    if not url.startswith("/"):
        return f"/{url}"
    return url


def to_page_request(request: Request, config: Settings) -> PageRequest:
    session = request.scope.get("session") or {}
    stage = (
        request.query_params.get(config.stage_param)
        or getattr(request.state, "stage", None)
        or config.live_stage
    )
    token = getattr(request.state, "security_token", None) or session.get(config.security_token_name)
    return PageRequest(
        url=resolve_url(request, config),
        method=request.method,
        query_params=tuple(request.query_params.multi_items()),
        host=request.headers.get("host", ""),
        scheme=request.url.scheme,
        stage=stage,
        is_ajax=request.headers.get("x-requested-with", "").lower() == "xmlhttprequest",
        session=session,
        security_token=token,
    )


async def capture_response(response: Response) -> PageResponse:
    """Buffer a backend response completely, keeping duplicate headers."""
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is None:
        body = response.body
    else:
        chunks = []
        async for chunk in body_iterator:
            chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode(response.charset))
        body = b"".join(chunks)

    headers = [(name.decode("latin-1"), value.decode("latin-1")) for name, value in response.raw_headers]
    return PageResponse(status_code=response.status_code, headers=headers, body=body)


def to_starlette_response(page_response: PageResponse) -> Response:
    """Build a Starlette response; Content-Length is recomputed from the body."""
    response = Response(content=page_response.body, status_code=page_response.status_code)
    response.raw_headers = [
        *response.raw_headers,
        *(
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in page_response.headers
            if name.lower() != "content-length"
        ),
    ]
    return response


class DynamicCacheMiddleware(BaseHTTPMiddleware):
    """Starlette middleware serving whole pages from the response store.

    Add it after any session middleware so that the session is loaded by
    the time this runs, e.g. ``app.add_middleware(DynamicCacheMiddleware, ...)``
    followed by ``app.add_middleware(SessionMiddleware, ...)``.
    """

    def __init__(
        self,
        app: ASGIApp,
        cache_service: DynamicCacheService,
        hooks: InvalidationHooks | None = None,
        config: Settings | None = None,
        auth_checker: BasicAuthChecker | None = None,
        admin_authorizer: AdminAuthorizer | None = None,
    ) -> None:
        super().__init__(app)
        self._cache = cache_service
        self._settings = config or cache_service.settings or settings
        self._hooks = hooks or InvalidationHooks(cache_service)
        self._auth_checker = auth_checker or BasicAuthChecker(self._settings)
        self._admin = admin_authorizer or AdminAuthorizer(self._settings)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        query = request.query_params

        if FLUSH_PARAM in query:
            if self._admin.is_authorized(request.headers.get("authorization")):
                self._hooks.on_flush_command(authorized=True)
            return await call_next(request)

        if query.get(CACHE_PARAM) == "flush":
            if self._admin.is_authorized(request.headers.get("authorization")):
                self._hooks.on_flush_command(authorized=True)
            else:
                log.warning("dynamic_cache.flush_denied", path=request.url.path)
            return await call_next(request)

        page_request = to_page_request(request, self._settings)
        auth = None
        if self._settings.site_protected:
            auth = self._auth_checker.check(request.headers.get("authorization"))

        verdict = self._cache.evaluate(page_request, auth)
        if not verdict:
            # Ineligible responses stream straight through
            response = await call_next(request)
            if self._settings.response_header:
                response.headers[self._settings.response_header] = "skipped"
            self._cache.record_skip(page_request, verdict)
            return response

        async def backend(_: PageRequest) -> PageResponse:
            return await capture_response(await call_next(request))

        result = await self._cache.handle(page_request, backend, auth=auth, verdict=verdict)
        return to_starlette_response(result.response)
