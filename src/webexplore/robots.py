"""Fetch and query robots.txt files."""

import logging
from typing import Any

from webexplore.discovery.robots_txt import Record, RobotsTxt, parse_robots_txt
from webexplore.exceptions import RequestError, TimeoutError
from webexplore.models import RequestOptions
from webexplore.request import Request
from webexplore.uri import URI

LOGGER = logging.getLogger(__name__)

DEFAULT_OPTIONS = RequestOptions(
    method="GET",
    allow_redirects=True,
    max_redirects=3,
    connection_timeout=5,
    read_timeout=10,
    retries=2,
)


class Robots:
    """A robots.txt document, fetched from ``uri`` or given as ``contents``.

    Fetch failures are recorded in :attr:`errors` and leave an empty, still
    queryable document. A non-2xx response is treated as "no robots.txt".

    Usage:
        robots = Robots(uri="https://example.com/robots.txt")
        robots.sitemaps  # ["https://example.com/sitemap.xml"]

        robots = Robots(contents="User-agent: *\\nDisallow: /private/")
        robots.allow("MyBot", "/public/page")      # True
        robots.disallow("MyBot", "/private/data")  # True
    """

    DEFAULT_OPTIONS = DEFAULT_OPTIONS

    def __init__(
        self,
        uri: str | URI | None = None,
        contents: str | None = None,
        options: RequestOptions | dict[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        self.errors: list[str] = []
        self.options = DEFAULT_OPTIONS.merge(options, **overrides)
        self.uri: URI | None = None
        self.contents = self._load_contents(uri, contents)
        self.robots_txt: RobotsTxt = parse_robots_txt(self.contents)

    def _load_contents(self, uri: str | URI | None, contents: str | None) -> str:
        if contents is not None:
            return contents
        if uri is None:
            self.errors.append("Either uri or contents must be provided")
            return ""
        return self._fetch(uri)

    def _fetch(self, uri: str | URI) -> str:
        """Fetch the robots.txt body; errors are recorded, not raised."""
        try:
            self.uri = URI.parse(uri)
            request = Request(self.uri, self.options)
            if not request.success:
                LOGGER.info("robots.txt returned %d at %s, assuming allow all", request.status_code, self.uri)
                return ""
            return request.read()
        except (TimeoutError, RequestError) as e:
            LOGGER.warning("Failed to fetch robots.txt from %s: %s", uri, e.message)
            self.errors.append(e.message)
            return ""

    @property
    def rules(self) -> list[Record]:
        return self.robots_txt.rules

    @property
    def success(self) -> bool:
        """True if no errors occurred while fetching."""
        return not self.errors

    @property
    def sitemaps(self) -> list[str]:
        """Sitemap URLs declared in robots.txt, in order, duplicates kept."""
        return self.robots_txt.sitemaps

    def allow(self, user_agent: str, path: str) -> bool:
        return self.robots_txt.allow(user_agent, path)

    def disallow(self, user_agent: str, path: str) -> bool:
        return self.robots_txt.disallow(user_agent, path)

    def crawl_delay(self, user_agent: str) -> float | None:
        return self.robots_txt.crawl_delay(user_agent)

    def __repr__(self) -> str:
        return (
            f"<Robots sitemaps={len(self.sitemaps)} rules={len(self.rules)} errors={len(self.errors)}>"
        )
