"""Page response and response envelope domain entities."""

from dataclasses import dataclass, field


def header_line(name: str, value: str) -> str:
    return f"{name}: {value}"


@dataclass
class PageResponse:
    """A complete, buffered response produced by the backend or the cache.

    Headers keep their insertion order and may repeat.
    """

    status_code: int
    headers: list[tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header_lines(self) -> list[str]:
        return [header_line(name, value) for name, value in self.headers]

    def get_header(self, name: str) -> str | None:
        wanted = name.lower()
        for header_name, value in self.headers:
            if header_name.lower() == wanted:
                return value
        return None

    def add_header(self, name: str, value: str) -> None:
        self.headers.append((name, value))

    @property
    def is_redirect(self) -> bool:
        return self.get_header("Location") is not None


@dataclass(frozen=True)
class ResponseEnvelope:
    """The persisted unit of the cache: status, a header subset and the body.

    Attributes:
        status_code: HTTP status code of the captured response
        headers: Persisted headers, in the order the backend sent them
        body: The raw response body
    """

    status_code: int
    headers: tuple[tuple[str, str], ...] = ()
    body: bytes = b""

    def to_response(self) -> PageResponse:
        return PageResponse(
            status_code=self.status_code,
            headers=list(self.headers),
            body=self.body,
        )
