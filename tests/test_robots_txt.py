"""Tests for robots.txt parsing and matching."""

import pytest

from webexplore.discovery.robots_txt import (
    InvalidLine,
    RobotsGroup,
    RobotsRule,
    _matches_pattern,
    parse_robots_txt,
)

ROBOTS = """\
# Example robots.txt
User-agent: *
Disallow: /private/
Allow: /private/public-page
Crawl-delay: 2

User-agent: Googlebot
User-agent: Bingbot
Disallow: /no-search/
Allow: /

Sitemap: https://example.com/sitemap.xml
Sitemap: https://example.com/news-sitemap.xml # news
"""


class TestParseRobotsTxt:
    """Tests for parse_robots_txt."""

    def test_records_in_order(self) -> None:
        """Test the top-level record structure."""
        robots = parse_robots_txt(ROBOTS)

        kinds = [type(record) for record in robots.rules]
        assert kinds == [RobotsGroup, RobotsGroup, RobotsRule, RobotsRule]

    def test_consecutive_user_agents_share_group(self) -> None:
        """Test that consecutive User-agent lines form one group."""
        robots = parse_robots_txt(ROBOTS)

        assert robots.groups[1].user_agents == ["Googlebot", "Bingbot"]
        assert [rule.name for rule in robots.groups[1].rules] == ["disallow", "allow"]

    def test_sitemaps_in_declaration_order(self) -> None:
        """Test sitemap extraction with inline comments removed."""
        robots = parse_robots_txt(ROBOTS)

        assert robots.sitemaps == [
            "https://example.com/sitemap.xml",
            "https://example.com/news-sitemap.xml",
        ]

    def test_sitemap_inside_group_is_top_level(self) -> None:
        """Test that Sitemap directives never belong to a group."""
        robots = parse_robots_txt("User-agent: *\nSitemap: https://example.com/s.xml\nDisallow: /x")

        assert robots.sitemaps == ["https://example.com/s.xml"]
        assert [rule.name for rule in robots.groups[0].rules] == ["disallow"]

    def test_sitemaps_not_deduplicated(self) -> None:
        """Test that duplicate declarations are kept."""
        robots = parse_robots_txt("Sitemap: /a.xml\nSitemap: /a.xml")

        assert robots.sitemaps == ["/a.xml", "/a.xml"]

    def test_directive_names_case_insensitive(self) -> None:
        """Test that directive names are lower-cased."""
        robots = parse_robots_txt("SITEMAP: https://example.com/Sitemap.xml")

        assert robots.sitemaps == ["https://example.com/Sitemap.xml"]

    def test_invalid_lines(self) -> None:
        """Test that malformed lines are kept as invalid records."""
        robots = parse_robots_txt("Invalid content\nNot following robots.txt format")

        assert robots.sitemaps == []
        assert all(isinstance(record, InvalidLine) for record in robots.rules)
        assert robots.rules[0].line == 1

    def test_empty(self) -> None:
        """Test that empty content yields no rules."""
        robots = parse_robots_txt("")

        assert robots.rules == []
        assert robots.sitemaps == []
        assert len(robots) == 0


class TestRobotsMatching:
    """Tests for allow/disallow queries."""

    @pytest.fixture
    def robots(self):
        """Parsed example document."""
        return parse_robots_txt(ROBOTS)

    def test_wildcard_group(self, robots) -> None:
        """Test rules of the * group."""
        assert robots.allow("MyBot/1.0", "/public/page")
        assert robots.disallow("MyBot/1.0", "/private/data")

    def test_longest_match_wins(self, robots) -> None:
        """Test that the more specific allow beats the shorter disallow."""
        assert robots.allow("MyBot", "/private/public-page")

    def test_specific_group_beats_wildcard(self, robots) -> None:
        """Test that a named group replaces the * group."""
        assert robots.allow("Googlebot/2.1 (+http://www.google.com/bot.html)", "/private/data")
        assert robots.disallow("bingbot", "/no-search/page")

    def test_tie_favours_allow(self) -> None:
        """Test that equal-length allow and disallow resolve to allow."""
        robots = parse_robots_txt("User-agent: *\nDisallow: /page\nAllow: /page")

        assert robots.allow("MyBot", "/page")

    def test_empty_disallow_matches_nothing(self) -> None:
        """Test that an empty Disallow allows everything."""
        robots = parse_robots_txt("User-agent: *\nDisallow:")

        assert robots.allow("MyBot", "/anything")

    def test_robots_txt_always_allowed(self) -> None:
        """Test that robots.txt itself can always be fetched."""
        robots = parse_robots_txt("User-agent: *\nDisallow: /")

        assert robots.allow("MyBot", "/robots.txt")
        assert robots.disallow("MyBot", "/index.html")

    def test_absolute_url(self, robots) -> None:
        """Test queries with full URLs."""
        assert robots.disallow("MyBot", "https://example.com/private/data?x=1")

    def test_no_groups_allows_everything(self) -> None:
        """Test a document without groups."""
        assert parse_robots_txt("Sitemap: /s.xml").allow("MyBot", "/private/")

    def test_crawl_delay(self, robots) -> None:
        """Test crawl-delay lookup."""
        assert robots.crawl_delay("MyBot") == 2.0
        assert robots.crawl_delay("Googlebot") is None

    def test_request_rate(self) -> None:
        """Test request-rate parsing."""
        robots = parse_robots_txt("User-agent: *\nRequest-rate: 1/10")

        assert robots.request_rate("MyBot") == pytest.approx(0.1)


class TestMatchesPattern:
    """Tests for robots.txt pattern matching."""

    @pytest.mark.parametrize(
        ("path", "pattern", "expected"),
        [
            ("/private/data", "/private/", True),
            ("/public", "/private/", False),
            ("/page.pdf", "/*.pdf$", True),
            ("/page.pdf?x=1", "/*.pdf$", False),
            ("/a/b/c", "/a/*/c", True),
            ("/exact", "/exact$", True),
            ("/exact/more", "/exact$", False),
            ("/anything", "", False),
        ],
    )
    def test_patterns(self, path: str, pattern: str, expected: bool) -> None:
        """Test prefix, wildcard and anchor handling."""
        assert _matches_pattern(path, pattern) is expected
