"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state by the application factory
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, Response, status

from page_cache.config import settings
from page_cache.handlers import CacheHandler
from page_cache.services import AdminAuthorizer


def get_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "cache_handler", None)
    if handler is None:
        raise RuntimeError("CacheHandler not initialized. Use create_app().")
    return handler


def is_admin(request: Request) -> bool:
    """Whether the request carries the admin bearer token."""
    authorizer = getattr(request.app.state, "admin_authorizer", None) or AdminAuthorizer()
    return authorizer.is_authorized(request.headers.get("authorization"))


def require_admin(admin: Annotated[bool, Depends(is_admin)]) -> None:
    if not admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin token required")


def disable_page_cache(request: Request, response: Response) -> None:
    """Mark the current page as uncacheable.

    Add to any route whose output must never be stored, e.g.
    ``@app.get("/account", dependencies=[Depends(disable_page_cache)])``.
    """
    service = getattr(request.app.state, "cache_service", None)
    header = service.settings.opt_out_header_string if service else settings.opt_out_header_string
    name, _, value = header.partition(":")
    response.headers[name.strip()] = value.strip()


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
AdminDep = Annotated[bool, Depends(is_admin)]
