"""Tests for sitemap discovery search."""

import httpx
import pytest
import respx

from webexplore.exceptions import InvalidOptionError
from webexplore.models import SearchStrategy, SourceStatus
from webexplore.sitemap.search import Search
from webexplore.sitemap.source import Source

ORIGIN = "https://example.com"


def make_sources(*paths: str) -> list[Source]:
    return [Source(path=path, origin=ORIGIN, tags={"common"}) for path in paths]


class TestSearchValidation:
    """Tests for argument validation."""

    @pytest.mark.parametrize("crawl_delay", [61, -1, 60.5, "1", None, True])
    def test_invalid_crawl_delay(self, crawl_delay: object) -> None:
        """Test that crawl delays outside [0, 60] fail before probing."""
        with pytest.raises(InvalidOptionError):
            Search(make_sources("sitemap.xml"), crawl_delay=crawl_delay)  # type: ignore[arg-type]

    @pytest.mark.parametrize("crawl_delay", [0, 0.1, 60])
    def test_valid_crawl_delay(self, crawl_delay: float) -> None:
        """Test the accepted range bounds."""
        assert Search([], crawl_delay=crawl_delay).crawl_delay == crawl_delay

    def test_unknown_strategy(self) -> None:
        """Test that unknown strategies are rejected."""
        with pytest.raises(InvalidOptionError):
            Search([], strategy="some")

    def test_default_strategy(self) -> None:
        """Test that first is the default strategy."""
        assert Search([]).strategy is SearchStrategy.FIRST

    def test_probe_options(self) -> None:
        """Test the probe request configuration."""
        options = Search.DEFAULT_OPTIONS

        assert options.method == "GET"
        assert options.retries == 0
        assert options.max_redirects == 1
        assert options.connection_timeout == 5
        assert options.read_timeout == 10
        assert options.on_data is not None


class TestSearchRun:
    """Tests for probing."""

    @respx.mock
    def test_first_strategy_stops_at_first_success(self, sleeps: list[float]) -> None:
        """Test that later candidates stay pending after a hit."""
        respx.get(f"{ORIGIN}/sitemap.xml").mock(return_value=httpx.Response(404))
        respx.get(f"{ORIGIN}/sitemap_index.xml").mock(
            return_value=httpx.Response(200, content=b"<sitemapindex/>", headers={"Content-Type": "application/xml"})
        )
        sources = make_sources("sitemap.xml", "sitemap_index.xml", "wp-sitemap.xml", "sitemap1.xml")

        result = Search(sources, crawl_delay=0.5, strategy="first").run()

        assert result is sources
        assert [source.status for source in sources] == [
            SourceStatus.FAILED,
            SourceStatus.COMPLETED,
            SourceStatus.PENDING,
            SourceStatus.PENDING,
        ]
        assert sleeps == [0.5, 0.5]

    @respx.mock
    def test_all_strategy_probes_everything(self, sleeps: list[float]) -> None:
        """Test that every candidate is probed with the all strategy."""
        respx.get(f"{ORIGIN}/a.xml").mock(return_value=httpx.Response(200))
        respx.get(f"{ORIGIN}/b.xml").mock(return_value=httpx.Response(200))
        respx.get(f"{ORIGIN}/c.xml").mock(return_value=httpx.Response(500))
        sources = make_sources("a.xml", "b.xml", "c.xml")

        search = Search(sources, crawl_delay=0, strategy=SearchStrategy.ALL)
        search.run()

        assert [source.status for source in sources] == [
            SourceStatus.COMPLETED,
            SourceStatus.COMPLETED,
            SourceStatus.FAILED,
        ]
        assert [source.path for source in search.found] == ["a.xml", "b.xml"]
        assert len(sleeps) == 3

    @respx.mock
    def test_search_requests_do_not_retry(self, sleeps: list[float], transport_retries: list[int]) -> None:
        """Test that each candidate request is sent without retries."""
        respx.get(f"{ORIGIN}/a.xml").mock(return_value=httpx.Response(404))
        respx.get(f"{ORIGIN}/b.xml").mock(return_value=httpx.Response(200))

        Search(make_sources("a.xml", "b.xml"), strategy="all").run()

        assert transport_retries == [0, 0]

    def test_run_returns_callers_list(self, sleeps: list[float]) -> None:
        """Test that run() hands back the list it was given."""
        sources: list[Source] = []

        assert Search(sources).run() is sources

    @respx.mock
    def test_success_records_response(self, sleeps: list[float]) -> None:
        """Test that response details are stored on the source."""
        respx.get(f"{ORIGIN}/sitemap.xml").mock(
            return_value=httpx.Response(
                200,
                content=b"<urlset/>",
                headers={
                    "Content-Type": "application/xml",
                    "Content-Encoding": "identity",
                    "Last-Modified": "Wed, 21 Oct 2015 07:28:00 GMT",
                    "ETag": '"v1"',
                },
            )
        )
        source = make_sources("sitemap.xml")[0]

        Search([source]).run()

        assert source.status is SourceStatus.COMPLETED
        assert source.status_code == 200
        assert source.response_url == f"{ORIGIN}/sitemap.xml"
        assert source.content_type == "application/xml"
        assert source.content_encoding == "identity"
        assert source.last_modified == "2015-10-21T07:28:00+00:00"
        assert source.etag == '"v1"'
        assert source.errors == []

    @respx.mock
    def test_failure_records_status_and_reason(self, sleeps: list[float]) -> None:
        """Test that a non-2xx response records status and reason phrase."""
        respx.get(f"{ORIGIN}/sitemap.xml").mock(return_value=httpx.Response(404))
        source = make_sources("sitemap.xml")[0]

        Search([source]).run()

        assert source.status is SourceStatus.FAILED
        assert source.status_code == 404
        assert source.errors == ["Not Found"]

    @respx.mock
    def test_exception_records_message_and_unknown_status(self, sleeps: list[float]) -> None:
        """Test that transport failures are recorded with no status code."""
        respx.get(f"{ORIGIN}/sitemap.xml").mock(side_effect=httpx.ConnectTimeout("timed out"))
        respx.get(f"{ORIGIN}/sitemap_index.xml").mock(return_value=httpx.Response(200))
        sources = make_sources("sitemap.xml", "sitemap_index.xml")

        Search(sources, strategy="all").run()

        assert sources[0].status is SourceStatus.FAILED
        assert sources[0].status_code is None
        assert sources[0].errors == ["ConnectTimeout: timed out"]
        assert sources[1].status is SourceStatus.COMPLETED

    @respx.mock
    def test_redirect_followed_once(self, sleeps: list[float]) -> None:
        """Test that a single redirect is followed and recorded."""
        respx.get(f"{ORIGIN}/sitemap.xml").mock(
            return_value=httpx.Response(301, headers={"Location": f"{ORIGIN}/sitemap_index.xml"})
        )
        respx.get(f"{ORIGIN}/sitemap_index.xml").mock(return_value=httpx.Response(200, content=b"<sitemapindex/>"))
        source = make_sources("sitemap.xml")[0]

        Search([source]).run()

        assert source.status is SourceStatus.COMPLETED
        assert source.response_url == f"{ORIGIN}/sitemap_index.xml"
        assert source.redirected is True

    @respx.mock
    def test_second_redirect_fails(self, sleeps: list[float]) -> None:
        """Test that redirect chains longer than one hop fail."""
        respx.get(f"{ORIGIN}/a.xml").mock(return_value=httpx.Response(301, headers={"Location": f"{ORIGIN}/b.xml"}))
        respx.get(f"{ORIGIN}/b.xml").mock(return_value=httpx.Response(301, headers={"Location": f"{ORIGIN}/c.xml"}))
        source = make_sources("a.xml")[0]

        Search([source]).run()

        assert source.status is SourceStatus.FAILED
        assert source.status_code is None
        assert len(source.errors) == 1

    def test_source_without_origin_fails(self, sleeps: list[float]) -> None:
        """Test that a relative URL fails the probe instead of raising."""
        source = Source(path="sitemap.xml")

        Search([source]).run()

        assert source.status is SourceStatus.FAILED
        assert source.errors == ["URL must be HTTP"]

    def test_empty_sources(self, sleeps: list[float]) -> None:
        """Test that an empty list is a no-op."""
        assert Search([]).run() == []
        assert sleeps == []
