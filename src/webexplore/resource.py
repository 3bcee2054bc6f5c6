"""Resource: one URL and everything discoverable about it."""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from webexplore.config import get_settings
from webexplore.domain import Domain
from webexplore.exceptions import InvalidDomainError, InvalidURIError
from webexplore.head import Head
from webexplore.models import SearchStrategy
from webexplore.robots import Robots
from webexplore.sitemap.locations import Locations
from webexplore.sitemap.search import Search
from webexplore.sitemap.source import Source
from webexplore.uri import URI

LOGGER = logging.getLogger(__name__)


class Resource:
    """A web resource identified by a URI.

    The HEAD probe and robots.txt are fetched on first access and cached
    until :meth:`reset` is called.

    Usage:
        resource = Resource("http://example.com/about")
        resource.head.status_code   # 200
        resource.robots_txt_url     # "https://example.com/robots.txt" (after redirect)
        resource.robots.sitemaps    # ["https://example.com/sitemap.xml"]
        resource.sitemaps(tags=["robots", "common"])

    Args:
        uri: Absolute URL string or :class:`URI`.
        domain: Options for :class:`Domain` (e.g. ``{"ignore_private": False}``).
        head: Request option overrides for the HEAD probe.
        robots: Request option overrides for the robots.txt fetch.

    Raises:
        InvalidURIError: If the URI is malformed or has no scheme and host.
    """

    def __init__(
        self,
        uri: str | URI,
        *,
        domain: Mapping[str, Any] | None = None,
        head: Mapping[str, Any] | None = None,
        robots: Mapping[str, Any] | None = None,
    ) -> None:
        self.uri = URI.parse(uri)
        if self.uri.origin is None:
            raise InvalidURIError(f"Resource URI must be absolute: {self.uri}", url=str(self.uri))

        self.domain = self._parse_domain(domain)
        self._head_options = dict(head or {})
        self._robots_options = dict(robots or {})
        self._head: Head | None = None
        self._robots: Robots | None = None

    def _parse_domain(self, options: Mapping[str, Any] | None) -> Domain | None:
        host = self.uri.host or ""
        try:
            return Domain(host, options)
        except InvalidDomainError as e:
            LOGGER.debug("No registrable domain for %s: %s", host, e.message)
            return None

    @property
    def head(self) -> Head:
        """HEAD probe of the URI (cached)."""
        if self._head is None:
            self._head = Head(self.uri, self._head_options)
        return self._head

    @property
    def has_head(self) -> bool:
        """True if a HEAD probe was made and succeeded."""
        return self._head is not None and bool(self._head.success)

    @property
    def robots_txt_url(self) -> str:
        """robots.txt URL, using the post-redirect origin when a HEAD probe succeeded."""
        uri = self._head.uri if self.has_head and self._head.uri is not None else self.uri
        return f"{uri.origin}/robots.txt"

    @property
    def robots(self) -> Robots:
        """robots.txt of the resource's origin (cached)."""
        if self._robots is None:
            self._robots = Robots(uri=self.robots_txt_url, options=self._robots_options)
        return self._robots

    def robots_sitemap_locations(self) -> Locations:
        """Sources for the sitemaps declared in robots.txt, tagged ``robots``."""
        base = URI.parse(self.robots_txt_url)
        sources = []
        for sitemap in self.robots.sitemaps:
            try:
                sitemap_uri = base.join(sitemap)
            except InvalidURIError as e:
                LOGGER.debug("Skipping invalid sitemap URL %r: %s", sitemap, e.message)
                continue
            path = sitemap_uri.path or "/"
            if sitemap_uri.query:
                path = f"{path}?{sitemap_uri.query}"
            sources.append(Source(path=path, origin=sitemap_uri.origin, tags={"robots"}))
        return Locations(sources)

    def sitemap_locations(self) -> Locations:
        """robots.txt sources followed by every bundled candidate for this origin."""
        return self.robots_sitemap_locations() + Locations.load(origin=self.uri.origin)

    def sitemaps(
        self,
        sources: Locations | Iterable[Source] | None = None,
        crawl_delay: float | None = None,
        strategy: SearchStrategy | str = SearchStrategy.ALL,
        tags: str | Iterable[str] = ("robots",),
    ) -> list[Source]:
        """
        Probe sitemap locations for this resource.

        Tags select which sources are probed: ``robots`` for the ones declared
        in robots.txt, and ``common``, ``extended``, ``news``, ``content`` or
        ``all`` for the bundled candidates. Include ``robots`` alongside
        ``all`` to probe both.

        Args:
            sources: Sources to filter; defaults to :meth:`sitemap_locations`.
            crawl_delay: Pause after each probe; defaults to the configured delay.
            strategy: ``all`` probes every source, ``first`` stops at a hit.
            tags: Tags a source must carry (any of) to be probed.

        Returns:
            The probed sources, annotated with their results.
        """
        if crawl_delay is None:
            crawl_delay = get_settings().crawl_delay
        if sources is None:
            sources = self.sitemap_locations()
        elif not isinstance(sources, Locations):
            sources = Locations(sources)

        search = Search(sources.find_by_tags(tags), crawl_delay=crawl_delay, strategy=strategy)
        return search.run()

    def reset(self) -> None:
        """Forget the cached HEAD probe and robots.txt."""
        self._head = None
        self._robots = None

    def __repr__(self) -> str:
        return f"<Resource {self.uri}>"
