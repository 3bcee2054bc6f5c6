"""Sitemap location discovery."""

from webexplore.sitemap.locations import Locations
from webexplore.sitemap.search import Search
from webexplore.sitemap.source import Source

__all__ = [
    "Locations",
    "Search",
    "Source",
]
