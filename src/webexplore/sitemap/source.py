"""Sitemap source record."""

from dataclasses import dataclass, field
from urllib.parse import urljoin, urlsplit

from webexplore.models import SourceStatus


@dataclass
class Source:
    """
    A candidate sitemap location and the result of probing it.

    Created ``pending`` by the location registry (or from robots.txt) and
    updated in place by :class:`~webexplore.sitemap.search.Search`.

    Attributes:
        path: Path relative to ``origin`` (e.g. "sitemap.xml").
        origin: Base authority (e.g. "https://example.com").
        tags: Labels used for filtering (e.g. "robots", "common", "news").
        content_types: Media types a real sitemap at this path would have.
        status: Probe lifecycle state.
        errors: Messages collected while probing.
        response_url: Final URL after redirects.
        status_code: HTTP status, or None when no response was received.
        last_modified: Last-Modified as ISO-8601.
        content_type: Content-Type header.
        content_encoding: Content-Encoding header.
        etag: ETag header.
    """

    path: str
    origin: str | None = None
    tags: set[str] = field(default_factory=set)
    content_types: set[str] = field(default_factory=set)
    status: SourceStatus = SourceStatus.PENDING
    errors: list[str] = field(default_factory=list)
    response_url: str | None = None
    status_code: int | None = None
    last_modified: str | None = None
    content_type: str | None = None
    content_encoding: str | None = None
    etag: str | None = None

    def __post_init__(self) -> None:
        self.tags = {str(tag) for tag in self.tags}
        self.content_types = {content_type.lower() for content_type in self.content_types}

    def url(self, origin: str | None = None) -> str:
        """Full URL of the source; the bare path when there is no origin."""
        origin = origin or self.origin
        if not origin:
            return self.path
        return urljoin(origin, self.path)

    @property
    def redirected(self) -> bool:
        """True if the final URL has a different path than the requested one."""
        if self.response_url is None:
            return False
        return urlsplit(self.response_url).path != urlsplit(self.url()).path

    @property
    def expected_content_type(self) -> bool:
        """True if there is no content-type filter or the recorded media type is in it."""
        if not self.content_types:
            return True
        if not self.content_type:
            return False
        media_type = self.content_type.split(";", 1)[0].strip().lower()
        return media_type in self.content_types
