"""robots.txt grammar used by the robots fetcher."""

from webexplore.discovery.robots_txt import (
    InvalidLine,
    RobotsGroup,
    RobotsRule,
    RobotsTxt,
    parse_robots_txt,
)

__all__ = [
    "InvalidLine",
    "RobotsGroup",
    "RobotsRule",
    "RobotsTxt",
    "parse_robots_txt",
]
