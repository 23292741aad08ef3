"""Test doubles shared across test modules."""

from page_cache.entities import PageRequest, PageResponse


def make_request(url: str = "/about", **kwargs) -> PageRequest:
    return PageRequest(url=url, **kwargs)


class FakeBackend:
    """Backend stand-in that counts calls and returns a fresh response each time."""

    def __init__(self, status_code: int = 200, headers=None, body: bytes = b"<html>About us</html>") -> None:
        self.status_code = status_code
        self.headers = headers if headers is not None else [("Content-Type", "text/html; charset=utf-8")]
        self.body = body
        self.calls = 0

    async def __call__(self, request: PageRequest) -> PageResponse:
        self.calls += 1
        return PageResponse(status_code=self.status_code, headers=list(self.headers), body=self.body)

ADMIN_TOKEN = "admin-secret"
