"""robots.txt grammar and matching.

Parses robots.txt text into an ordered list of records (top-level rules,
user-agent groups and invalid lines) and answers allow/disallow queries
using longest-match semantics:

- The group(s) naming the agent's product token win over ``*`` groups.
- The longest matching ``Allow``/``Disallow`` pattern wins; ties favour allow.
- ``*`` matches any sequence and a trailing ``$`` anchors the pattern.
- ``/robots.txt`` itself is always allowed.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

# Paths that are always allowed regardless of rules
ALWAYS_ALLOWED = frozenset({"/robots.txt"})

_PRODUCT_TOKEN = re.compile(r"[A-Za-z_\-]+")


@dataclass(frozen=True)
class RobotsRule:
    """
    A single ``name: value`` directive.

    Attributes:
        name: Lower-cased directive name (e.g. "sitemap", "disallow").
        value: Directive value with surrounding whitespace removed.
        line: 1-based line number in the source text.
    """

    name: str
    value: str
    line: int = 0


@dataclass
class RobotsGroup:
    """
    Rules that apply to one or more user agents.

    Attributes:
        user_agents: Agent names from consecutive ``User-agent`` lines.
        rules: Directives that follow them, in order.
        line: Line number of the first ``User-agent`` line.
    """

    user_agents: list[str] = field(default_factory=list)
    rules: list[RobotsRule] = field(default_factory=list)
    line: int = 0

    def applies_to(self, token: str) -> bool:
        """True if one of the group's agents has the given product token."""
        return any(_product_token(agent) == token for agent in self.user_agents)

    @property
    def is_wildcard(self) -> bool:
        return "*" in self.user_agents


@dataclass(frozen=True)
class InvalidLine:
    """A line that is neither a comment nor a ``name: value`` directive."""

    text: str
    line: int = 0


Record = RobotsRule | RobotsGroup | InvalidLine


class RobotsTxt:
    """Parsed robots.txt document.

    Usage:
        robots = parse_robots_txt("User-agent: *\\nDisallow: /private/")
        robots.allow("MyBot/1.0", "/public/page")     # True
        robots.disallow("MyBot/1.0", "/private/data") # True
    """

    def __init__(self, rules: list[Record] | None = None) -> None:
        self.rules: list[Record] = rules or []

    @property
    def groups(self) -> list[RobotsGroup]:
        return [record for record in self.rules if isinstance(record, RobotsGroup)]

    @property
    def sitemaps(self) -> list[str]:
        """Values of top-level ``Sitemap`` directives, in declaration order."""
        return [
            record.value for record in self.rules if isinstance(record, RobotsRule) and record.name == "sitemap"
        ]

    def groups_for(self, user_agent: str) -> list[RobotsGroup]:
        """Groups that apply to ``user_agent``; specific groups beat ``*``."""
        token = _product_token(user_agent)
        specific = [group for group in self.groups if token and group.applies_to(token)]
        if specific:
            return specific
        return [group for group in self.groups if group.is_wildcard]

    def allow(self, user_agent: str, path: str) -> bool:
        """
        Check if ``path`` may be fetched by ``user_agent``.

        Args:
            user_agent: Full user agent string or bare product token.
            path: URL path (with optional query) or absolute URL.

        Returns:
            True if allowed, False if disallowed.
        """
        path = _request_path(path)
        if path in ALWAYS_ALLOWED:
            return True

        # (pattern length, is_allow): longer wins, allow wins ties
        best: tuple[int, bool] | None = None
        for group in self.groups_for(user_agent):
            for rule in group.rules:
                if rule.name not in ("allow", "disallow") or not rule.value:
                    continue
                if _matches_pattern(path, rule.value):
                    candidate = (len(rule.value), rule.name == "allow")
                    if best is None or candidate > best:
                        best = candidate

        return best is None or best[1]

    def disallow(self, user_agent: str, path: str) -> bool:
        return not self.allow(user_agent, path)

    def crawl_delay(self, user_agent: str) -> float | None:
        """Crawl-delay in seconds from the matched group, or None."""
        for group in self.groups_for(user_agent):
            for rule in group.rules:
                if rule.name != "crawl-delay":
                    continue
                try:
                    return float(rule.value)
                except ValueError:
                    continue
        return None

    def request_rate(self, user_agent: str) -> float | None:
        """Requests per second from ``Request-rate: n/seconds``, or None."""
        for group in self.groups_for(user_agent):
            for rule in group.rules:
                if rule.name != "request-rate" or "/" not in rule.value:
                    continue
                requests, _, seconds = rule.value.partition("/")
                try:
                    return float(requests) / float(seconds.rstrip("smh"))
                except (ValueError, ZeroDivisionError):
                    continue
        return None

    def __len__(self) -> int:
        return len(self.rules)

    def __repr__(self) -> str:
        return f"<RobotsTxt groups={len(self.groups)} sitemaps={len(self.sitemaps)} rules={len(self.rules)}>"


def parse_robots_txt(content: str) -> RobotsTxt:
    """
    Parse robots.txt content.

    Consecutive ``User-agent`` lines share one group; ``Sitemap`` directives
    are always top-level regardless of position.

    Args:
        content: Raw robots.txt content.

    Returns:
        RobotsTxt with records in source order.
    """
    records: list[Record] = []
    group: RobotsGroup | None = None
    previous_was_agent = False

    for number, raw in enumerate(content.splitlines(), start=1):
        # Remove comments
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue

        if ":" not in line:
            records.append(InvalidLine(text=line, line=number))
            previous_was_agent = False
            continue

        name, value = line.split(":", 1)
        name = name.strip().lower()
        value = value.strip()

        if not name:
            records.append(InvalidLine(text=line, line=number))
            previous_was_agent = False
            continue

        if name == "user-agent":
            if group is not None and previous_was_agent:
                group.user_agents.append(value)
            else:
                group = RobotsGroup(user_agents=[value], line=number)
                records.append(group)
            previous_was_agent = True
            continue

        previous_was_agent = False
        rule = RobotsRule(name=name, value=value, line=number)

        # Sitemap directives are global
        if name == "sitemap" or group is None:
            records.append(rule)
        else:
            group.rules.append(rule)

    return RobotsTxt(records)


def _product_token(user_agent: str) -> str:
    """``"MyBot/1.0 (+https://...)"`` -> ``"mybot"``; ``"*"`` stays ``"*"``."""
    user_agent = user_agent.strip()
    if user_agent == "*":
        return "*"
    match = _PRODUCT_TOKEN.match(user_agent)
    return match.group(0).lower() if match else ""


def _request_path(target: str) -> str:
    """Reduce an absolute URL or path to ``path[?query]``."""
    if "://" in target:
        parts = urlsplit(target)
        path = parts.path or "/"
        return f"{path}?{parts.query}" if parts.query else path
    return target or "/"


def _matches_pattern(path: str, pattern: str) -> bool:
    """
    Check if path matches a robots.txt pattern.

    Handles:
    - Exact prefix matching
    - * wildcard (matches any sequence)
    - $ end anchor
    """
    if not pattern:
        return False

    has_end_anchor = pattern.endswith("$")
    if has_end_anchor:
        pattern = pattern[:-1]

    if "*" not in pattern:
        return path == pattern if has_end_anchor else path.startswith(pattern)

    # Escape regex special chars except *
    regex_pattern = re.escape(pattern).replace(r"\*", ".*")
    if has_end_anchor:
        regex_pattern += "$"
    return re.match(regex_pattern, path) is not None
