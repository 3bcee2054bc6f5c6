"""HTTP request engine.

A :class:`Request` executes exactly one HTTP request, eagerly, when it is
constructed. Every accessor reads the stored outcome; failures raise from
the constructor.

Key behaviour:
- **Validation first**: scheme (http/https) and method are checked before any I/O.
- **Retries**: connect-level retries of ``httpx.HTTPTransport``.
- **Redirects**: followed up to ``max_redirects`` when allowed and the method
  permits it; cookies set along the chain are kept in the request's own client.
- **Caching**: optional hishel cache transport backed by a process-wide
  in-memory storage.
- **Streaming abort**: an ``on_data`` callback returning ``StreamControl.ABORT``
  stops the transfer; the outcome is built from status and headers only.
- **Overall deadline**: ``connection_timeout + read_timeout + 1`` seconds,
  enforced around the whole transfer, including connect and DNS.

Example:
    >>> request = Request("http://example.com/", allow_redirects=True)
    >>> request.status_code
    200
    >>> str(request.url)  # final URL after redirects
    'https://example.com/'
"""

import logging
import threading
from dataclasses import dataclass
from datetime import timezone
from email.utils import parsedate_to_datetime
from time import monotonic
from typing import Any

import hishel
import httpx

from webexplore.config import get_settings
from webexplore.exceptions import InvalidOptionError, RequestError, TimeoutError
from webexplore.models import CacheOptions, RequestOptions, StreamControl
from webexplore.uri import URI

LOGGER = logging.getLogger(__name__)

# Allowed URI schemes for requests
ALLOWED_SCHEMES = frozenset({"http", "https"})

ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "DELETE", "HEAD", "PATCH", "OPTIONS", "TRACE"})

# Methods whose body is sent
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

# Methods that follow redirects when redirects are allowed; the same set
# Faraday's follow_redirects middleware uses, so TRACE never follows
REDIRECT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"})

CHARSET_ALIASES: dict[str, str] = {"utf8": "utf-8"}


@dataclass(frozen=True)
class RequestOutcome:
    """The result of an executed request.

    Attributes:
        url: Final URL, after any redirects.
        status_code: HTTP status code.
        reason_phrase: HTTP reason phrase (e.g. "OK").
        headers: Case-insensitive response headers.
        body: Decoded (gzip/deflate) body bytes; empty when aborted.
        http_version: Protocol version reported by the transport.
        aborted: True when an ``on_data`` callback cut the transfer short.
    """

    url: str
    status_code: int
    reason_phrase: str
    headers: httpx.Headers
    body: bytes
    http_version: str = "HTTP/1.1"
    aborted: bool = False

    @property
    def success(self) -> bool:
        return 200 <= self.status_code < 300


# =============================================================================
# Shared cache storage
# =============================================================================

_cache_storages: dict[tuple[float | None, int], hishel.InMemoryStorage] = {}
_cache_lock = threading.Lock()


def get_cache_storage(options: CacheOptions) -> hishel.InMemoryStorage:
    """Get or create the in-memory cache storage for the given TTL/capacity."""
    key = (options.ttl, options.capacity)
    with _cache_lock:
        storage = _cache_storages.get(key)
        if storage is None:
            storage = hishel.InMemoryStorage(ttl=options.ttl, capacity=options.capacity)
            _cache_storages[key] = storage
            LOGGER.debug("Created response cache storage (ttl=%s, capacity=%d)", options.ttl, options.capacity)
        return storage


def reset_cache_storage() -> None:
    """Drop every cached response (primarily for testing)."""
    with _cache_lock:
        _cache_storages.clear()


# =============================================================================
# Request
# =============================================================================


class Request:
    """Execute a single HTTP request and expose its outcome.

    Usage:
        request = Request("https://example.com/", method="HEAD", retries=2)
        request.success        # True
        request.content_type   # "text/html; charset=UTF-8"
        request.charset        # "utf-8"

    Args:
        target: URL string (parsed once, immediately) or :class:`URI`.
        options: RequestOptions instance or mapping of option overrides.
        **overrides: Individual option overrides, applied last.

    Raises:
        RequestError: Invalid scheme or method, connection/TLS/protocol
            failure, malformed URL, or too many redirects.
        TimeoutError: Connect/read timeout or overall deadline exceeded.
        InvalidOptionError: Unknown or invalid option values.
    """

    ALLOWED_SCHEMES = ALLOWED_SCHEMES
    ALLOWED_METHODS = ALLOWED_METHODS
    BODY_METHODS = BODY_METHODS
    REDIRECT_METHODS = REDIRECT_METHODS

    def __init__(
        self,
        target: str | URI,
        options: RequestOptions | dict[str, Any] | None = None,
        **overrides: Any,
    ) -> None:
        self._url = URI.parse(target)
        self.options = RequestOptions.build(options, **overrides)

        if (self._url.scheme or "").lower() not in ALLOWED_SCHEMES:
            raise RequestError("URL must be HTTP", url=str(self._url))
        if self.options.method not in ALLOWED_METHODS:
            raise RequestError(f"Invalid HTTP method: {self.options.method}", url=str(self._url))

        self._client: httpx.Client | None = None
        self._outcome = self._fetch()

    # -- execution ----------------------------------------------------------------

    @property
    def method(self) -> str:
        return self.options.method

    @property
    def method_redirects(self) -> bool:
        return self.method in REDIRECT_METHODS

    @property
    def method_body(self) -> bool:
        return self.options.body is not None and self.method in BODY_METHODS

    @property
    def fatal_timeout(self) -> float | None:
        """
        Overall deadline in seconds, or None when both timeouts are disabled.

        Bounds the whole transfer, on top of the transport's connect and
        read timeouts.
        """
        connect = self.options.connection_timeout
        read = self.options.read_timeout
        if connect is None and read is None:
            return None
        return (connect or 0) + (read or 0) + 1

    def _fetch(self) -> RequestOutcome:
        """Run the request, bounded by the overall deadline when one applies."""
        follow = self.options.allow_redirects and self.method_redirects
        fatal_timeout = self.fatal_timeout

        LOGGER.debug("%s %s (redirects=%s, retries=%d)", self.method, self._url, follow, self.options.retries)

        if fatal_timeout is None:
            outcome = self._transfer(follow, None)
        else:
            outcome = self._transfer_with_deadline(follow, fatal_timeout)

        if follow:
            if outcome.url != str(self._url):
                LOGGER.debug("Redirected %s -> %s", self._url, outcome.url)
            self._url = URI.parse(outcome.url)

        LOGGER.debug("%s %s -> %d %s", self.method, self._url, outcome.status_code, outcome.reason_phrase)
        return outcome

    def _transfer_with_deadline(self, follow: bool, fatal_timeout: float) -> RequestOutcome:
        """
        Run the transfer on a worker thread and stop waiting at the deadline.

        A stalled connect, DNS lookup or read cannot hold the caller for longer
        than ``fatal_timeout`` seconds. On expiry the client is closed and the
        worker is abandoned (it is a daemon thread).
        """
        deadline = monotonic() + fatal_timeout
        holder: dict[str, Any] = {}

        def _work() -> None:
            try:
                holder["outcome"] = self._transfer(follow, deadline)
            except Exception as e:
                holder["error"] = e

        worker = threading.Thread(target=_work, name="webexplore-request", daemon=True)
        worker.start()
        worker.join(timeout=fatal_timeout)

        if worker.is_alive():
            LOGGER.debug("%s %s exceeded overall timeout of %ss", self.method, self._url, fatal_timeout)
            if self._client is not None:
                self._client.close()
            raise TimeoutError(
                f"Request exceeded overall timeout of {fatal_timeout}s",
                url=str(self._url),
                timeout=fatal_timeout,
            )
        if "error" in holder:
            raise holder["error"]
        return holder["outcome"]

    def _transfer(self, follow: bool, deadline: float | None) -> RequestOutcome:
        """Send the request and convert transport errors to webexplore errors."""
        try:
            with self._build_client(follow) as client:
                self._client = client
                request = client.build_request(
                    self.method,
                    str(self._url),
                    content=self.options.body if self.method_body else None,
                )
                response = client.send(request, stream=True, follow_redirects=follow)
                try:
                    outcome = self._consume(response, deadline)
                finally:
                    response.close()
        except httpx.TimeoutException as e:
            raise TimeoutError(_describe(e), url=str(self._url)) from e
        except (httpx.RequestError, httpx.InvalidURL) as e:
            raise RequestError(_describe(e), url=str(self._url)) from e
        return outcome

    def _build_client(self, follow: bool) -> httpx.Client:
        """Create the single-use client (and with it the request's cookie jar)."""
        options = self.options
        try:
            transport: httpx.BaseTransport = httpx.HTTPTransport(
                retries=options.retries,
                **options.transport_options,
            )
        except TypeError as e:
            raise InvalidOptionError(f"Invalid transport options: {e}", field="transport_options") from e

        if options.cache is not None:
            transport = hishel.CacheTransport(
                transport=transport,
                storage=get_cache_storage(options.cache),
                controller=hishel.Controller(
                    cacheable_methods=list(options.cache.cacheable_methods),
                    cacheable_status_codes=list(options.cache.cacheable_status_codes),
                    allow_heuristics=options.cache.allow_heuristics,
                ),
            )

        headers = {
            "User-Agent": get_settings().user_agent,
            "Accept-Encoding": "gzip, deflate",
            **options.headers,
        }

        return httpx.Client(
            transport=transport,
            headers=headers,
            timeout=httpx.Timeout(options.read_timeout, connect=options.connection_timeout),
            follow_redirects=follow,
            max_redirects=options.max_redirects,
        )

    def _consume(self, response: httpx.Response, deadline: float | None) -> RequestOutcome:
        """Read the (decoded) body, honouring the on_data callback and deadline."""
        self._check_deadline(deadline)

        on_data = self.options.on_data
        chunks: list[bytes] = []
        received = 0
        aborted = False

        for chunk in response.iter_bytes():
            received += len(chunk)
            if on_data is not None and on_data(chunk, received, response) is StreamControl.ABORT:
                LOGGER.debug("Transfer of %s aborted after %d bytes", response.url, received)
                aborted = True
                break
            chunks.append(chunk)
            self._check_deadline(deadline)

        return RequestOutcome(
            url=str(response.url),
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=response.headers,
            body=b"" if aborted else b"".join(chunks),
            http_version=response.http_version,
            aborted=aborted,
        )

    def _check_deadline(self, deadline: float | None) -> None:
        if deadline is not None and monotonic() > deadline:
            raise TimeoutError(
                f"Request exceeded overall timeout of {self.fatal_timeout}s",
                url=str(self._url),
                timeout=self.fatal_timeout,
            )

    # -- accessors ------------------------------------------------------------------

    @property
    def url(self) -> URI:
        """The request URL, replaced by the final URL once redirects were followed."""
        return self._url

    @property
    def response(self) -> RequestOutcome:
        return self._outcome

    @property
    def body(self) -> bytes:
        """Raw response body, untouched."""
        return self._outcome.body

    def read(self) -> str:
        """
        Return the body as text.

        Decodes with the ``encoding`` option, else the response charset, else
        UTF-8; invalid sequences are replaced and NUL characters stripped.

        Raises:
            RequestError: If the encoding is unknown.
        """
        codec = self.options.encoding or self.charset or "utf-8"
        try:
            text = self._outcome.body.decode(codec, errors="replace")
        except LookupError as e:
            raise RequestError(f"Unknown encoding: {codec}", url=str(self._url)) from e
        return text.replace("\x00", "")

    @property
    def response_url(self) -> str:
        return self._outcome.url

    @property
    def success(self) -> bool:
        return self._outcome.success

    @property
    def status_code(self) -> int:
        return self._outcome.status_code

    @property
    def status_text(self) -> str:
        return self._outcome.reason_phrase

    @property
    def headers(self) -> httpx.Headers:
        return self._outcome.headers

    @property
    def aborted(self) -> bool:
        return self._outcome.aborted

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def media_type(self) -> str | None:
        """Content type without parameters, e.g. ``text/html``."""
        content_type = self.content_type
        if not content_type:
            return None
        return content_type.split(";", 1)[0].strip().lower() or None

    @property
    def charset(self) -> str | None:
        """Charset parameter of the content type, with aliases applied."""
        content_type = self.content_type
        if not content_type or ";" not in content_type:
            return None

        for param in content_type.split(";")[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() != "charset":
                continue
            value = value.strip().strip("\"'").lower()
            if value:
                return CHARSET_ALIASES.get(value, value)
        return None

    @property
    def content_length(self) -> int | None:
        value = self.headers.get("content-length")
        try:
            return int(value) if value is not None else None
        except ValueError:
            return None

    @property
    def content_encoding(self) -> str | None:
        return self.headers.get("content-encoding")

    @property
    def etag(self) -> str | None:
        return self.headers.get("etag")

    @property
    def last_modified(self) -> str | None:
        """Last-Modified as an ISO-8601 timestamp; None when absent or unparseable."""
        value = self.headers.get("last-modified")
        if not value:
            return None
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.isoformat()

    def __repr__(self) -> str:
        return f"<Request {self.method} {self._url} status={self._outcome.status_code}>"


def _describe(error: Exception) -> str:
    """Readable message for a transport exception."""
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__
