"""Sitemap discovery: probe candidate locations one by one."""

import logging
from collections.abc import Iterable
from time import sleep
from typing import Any

from webexplore.exceptions import InvalidOptionError, RequestError, TimeoutError
from webexplore.models import RequestOptions, SearchStrategy, SourceStatus, StreamControl
from webexplore.request import Request
from webexplore.sitemap.source import Source

LOGGER = logging.getLogger(__name__)

MIN_CRAWL_DELAY = 0
MAX_CRAWL_DELAY = 60


def abort_on_first_chunk(chunk: bytes, received: int, response: Any) -> StreamControl:
    """Stop the transfer as soon as the body starts arriving."""
    return StreamControl.ABORT


# GET with the body cut off after the first chunk
DEFAULT_OPTIONS = RequestOptions(
    method="GET",
    allow_redirects=True,
    max_redirects=1,
    connection_timeout=5,
    read_timeout=10,
    retries=0,
    on_data=abort_on_first_chunk,
)


class Search:
    """Probe sitemap sources sequentially and record the results on them.

    Sources are visited in order and updated in place; with the ``first``
    strategy the search stops after the first successful probe, leaving the
    rest ``pending``. Every probe is followed by a ``crawl_delay`` pause.

    Usage:
        sources = Locations.load(origin="https://example.com").find_by_tags("common")
        search = Search(sources, crawl_delay=0.5, strategy="first")
        search.run()
        search.found  # sources whose probe succeeded

    Raises:
        InvalidOptionError: If ``crawl_delay`` is outside [0, 60] seconds or
            ``strategy`` is unknown.
    """

    DEFAULT_OPTIONS = DEFAULT_OPTIONS

    def __init__(
        self,
        sources: Iterable[Source],
        crawl_delay: float = 0.1,
        strategy: SearchStrategy | str = SearchStrategy.FIRST,
    ) -> None:
        self.sources: list[Source] = sources if isinstance(sources, list) else list(sources)
        self.crawl_delay = self._validate_crawl_delay(crawl_delay)
        self.strategy = self._validate_strategy(strategy)

    @staticmethod
    def _validate_crawl_delay(crawl_delay: Any) -> float:
        if isinstance(crawl_delay, bool) or not isinstance(crawl_delay, int | float):
            raise InvalidOptionError(
                "Crawl delay must be a number of seconds", field="crawl_delay", value=crawl_delay
            )
        if not MIN_CRAWL_DELAY <= crawl_delay <= MAX_CRAWL_DELAY:
            raise InvalidOptionError(
                f"Crawl delay must be between {MIN_CRAWL_DELAY} and {MAX_CRAWL_DELAY} seconds",
                field="crawl_delay",
                value=crawl_delay,
            )
        return crawl_delay

    @staticmethod
    def _validate_strategy(strategy: SearchStrategy | str) -> SearchStrategy:
        try:
            return SearchStrategy(strategy)
        except ValueError as e:
            raise InvalidOptionError(
                f"Unknown search strategy: {strategy!r}", field="strategy", value=strategy
            ) from e

    def run(self) -> list[Source]:
        """
        Probe each source in order.

        Returns:
            The same source list, annotated in place.
        """
        LOGGER.info(
            "Probing %d sitemap location(s) (strategy=%s, crawl_delay=%ss)",
            len(self.sources),
            self.strategy.value,
            self.crawl_delay,
        )

        for source in self.sources:
            succeeded = self._probe(source)
            sleep(self.crawl_delay)
            if succeeded and self.strategy is SearchStrategy.FIRST:
                break

        LOGGER.info("Found %d sitemap location(s)", len(self.found))
        return self.sources

    def _probe(self, source: Source) -> bool:
        """Probe one source; returns True on a 2xx response."""
        source.status = SourceStatus.IN_PROGRESS
        url = source.url()

        try:
            request = Request(url, DEFAULT_OPTIONS)
        except (TimeoutError, RequestError) as e:
            source.status = SourceStatus.FAILED
            # no response was received
            source.status_code = None
            source.errors.append(e.message)
            LOGGER.debug("Sitemap probe %s failed: %s", url, e.message)
            return False

        source.status_code = request.status_code
        if not request.success:
            source.status = SourceStatus.FAILED
            source.errors.append(request.status_text)
            LOGGER.debug("Sitemap probe %s -> %d", url, request.status_code)
            return False

        source.status = SourceStatus.COMPLETED
        source.response_url = str(request.url)
        source.last_modified = request.last_modified
        source.content_type = request.content_type
        source.content_encoding = request.content_encoding
        source.etag = request.etag
        LOGGER.debug("Sitemap probe %s -> %d (%s)", url, request.status_code, request.content_type)
        return True

    @property
    def found(self) -> list[Source]:
        """Sources whose probe succeeded."""
        return [source for source in self.sources if source.status is SourceStatus.COMPLETED]

    def __repr__(self) -> str:
        return f"<Search sources={len(self.sources)} strategy={self.strategy.value} found={len(self.found)}>"
