"""webexplore: explore a web resource.

Given a URL, webexplore probes it with a HEAD request, reads the site's
robots.txt and discovers sitemap locations by probing well-known paths.

Usage:
    import webexplore

    webexplore.configure_logging()
    resource = webexplore.explore("https://example.com")
    resource.head.status_code
    resource.robots.sitemaps
    [source.url() for source in resource.sitemaps(tags=["robots", "common"]) if source.status == "completed"]
"""

from typing import Any

from webexplore._version import __version__
from webexplore.domain import Domain
from webexplore.exceptions import (
    ExploreError,
    InvalidDomainError,
    InvalidOptionError,
    InvalidURIError,
    RequestError,
    RequestTimeoutError,
    TimeoutError,
    ValidationError,
)
from webexplore.head import Head
from webexplore.logging_config import configure_logging
from webexplore.models import CacheOptions, RequestOptions, SearchStrategy, SourceStatus, StreamControl
from webexplore.request import Request
from webexplore.resource import Resource
from webexplore.robots import Robots
from webexplore.sitemap import Locations, Search, Source
from webexplore.uri import URI


def explore(uri: str | URI, **options: Any) -> Resource:
    """
    Create a :class:`Resource` for ``uri``.

    Args:
        uri: Absolute URL to explore.
        **options: ``domain``, ``head`` and ``robots`` option mappings.

    Returns:
        Resource bound to the URI; nothing is fetched until accessed.
    """
    return Resource(uri, **options)


__all__ = [
    "__version__",
    "configure_logging",
    "explore",
    # Components
    "Domain",
    "Head",
    "Locations",
    "Request",
    "Resource",
    "Robots",
    "Search",
    "Source",
    "URI",
    # Models
    "CacheOptions",
    "RequestOptions",
    "SearchStrategy",
    "SourceStatus",
    "StreamControl",
    # Exceptions
    "ExploreError",
    "InvalidDomainError",
    "InvalidOptionError",
    "InvalidURIError",
    "RequestError",
    "RequestTimeoutError",
    "TimeoutError",
    "ValidationError",
]
