"""HEAD probe: an error-tolerant HEAD request with sensible defaults."""

import logging
from typing import Any

import httpx

from webexplore.exceptions import RequestError, TimeoutError
from webexplore.models import RequestOptions
from webexplore.request import Request, RequestOutcome
from webexplore.uri import URI

LOGGER = logging.getLogger(__name__)

DEFAULT_OPTIONS = RequestOptions(
    method="HEAD",
    allow_redirects=True,
    max_redirects=3,
    connection_timeout=5,
    read_timeout=10,
    retries=2,
)


class Head:
    """Perform a HEAD request and expose its status and headers.

    Failures never raise: the error message is stored in :attr:`errors` and
    every accessor returns None, so "no data" stays distinguishable from
    empty data.

    Usage:
        head = Head("http://github.com")
        head.success      # True
        str(head.uri)     # "https://github.com/" (after redirects)

        head = Head("https://non-existent-domain.invalid")
        head.success      # None
        head.errors       # ["ConnectError: ..."]
    """

    DEFAULT_OPTIONS = DEFAULT_OPTIONS

    def __init__(
        self,
        uri: str | URI,
        options: RequestOptions | dict[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        self.options = DEFAULT_OPTIONS.merge(options, **overrides)
        self.request: Request | None = None
        self.errors: list[str] = []

        try:
            self.request = Request(uri, self.options)
        except (TimeoutError, RequestError) as e:
            LOGGER.debug("HEAD %s failed: %s", uri, e.message)
            self.errors.append(e.message)

    @property
    def uri(self) -> URI | None:
        """Final URI after redirects, or None if the request failed."""
        return self.request.url if self.request else None

    @property
    def response(self) -> RequestOutcome | None:
        return self.request.response if self.request else None

    @property
    def success(self) -> bool | None:
        return self.request.success if self.request else None

    @property
    def status_code(self) -> int | None:
        return self.request.status_code if self.request else None

    @property
    def status_text(self) -> str | None:
        return self.request.status_text if self.request else None

    @property
    def headers(self) -> httpx.Headers | None:
        return self.request.headers if self.request else None

    @property
    def content_type(self) -> str | None:
        return self.request.content_type if self.request else None

    @property
    def content_length(self) -> int | None:
        return self.request.content_length if self.request else None

    @property
    def content_encoding(self) -> str | None:
        return self.request.content_encoding if self.request else None

    @property
    def last_modified(self) -> str | None:
        return self.request.last_modified if self.request else None

    def __repr__(self) -> str:
        if self.request is None:
            return f"<Head errors={self.errors!r}>"
        return f"<Head {self.uri} status={self.status_code}>"
