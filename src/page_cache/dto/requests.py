"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from page_cache.services import ContentEvent


class ContentEventRequest(BaseModel):
    """Request DTO for reporting a content change.

    The handler will convert this to a call on the invalidation hooks.
    """

    event: ContentEvent = Field(..., description="What happened to the content")
    versioned: bool = Field(
        False,
        description="Whether the record has its own draft/publish lifecycle (saves of those are ignored)",
    )
