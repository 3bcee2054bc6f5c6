"""Data models for webexplore."""

from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from webexplore.config import get_settings
from webexplore.exceptions import InvalidOptionError

# =============================================================================
# Enumerations
# =============================================================================


class StreamControl(str, Enum):
    """Return values understood from a streaming ``on_data`` callback."""

    CONTINUE = "continue"
    ABORT = "abort"


class SourceStatus(str, Enum):
    """Lifecycle of a sitemap source during discovery."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    RETRYING = "retrying"


class SearchStrategy(str, Enum):
    """Sitemap search strategies."""

    FIRST = "first"  # stop at the first successful probe
    ALL = "all"


# =============================================================================
# Request Configuration
# =============================================================================


class CacheOptions(BaseModel):
    """Configuration for the optional in-memory response cache.

    Usage:
        options = RequestOptions(cache=CacheOptions(ttl=300))
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    ttl: float | None = Field(default=None, ge=0)
    capacity: int = Field(default=128, ge=1)
    cacheable_methods: tuple[str, ...] = ("GET", "HEAD")
    cacheable_status_codes: tuple[int, ...] = (200, 301, 308)
    allow_heuristics: bool = False


# Signature: on_data(chunk, received_bytes, response) -> StreamControl | None
OnData = Callable[[bytes, int, Any], StreamControl | None]

# Dict fields merged key-wise rather than replaced
_MERGEABLE_FIELDS = ("headers", "transport_options")


class RequestOptions(BaseModel):
    """Immutable configuration for a single HTTP request.

    Instances are frozen; derive variants with :meth:`merge`, which merges
    ``headers`` and ``transport_options`` key-wise and replaces every other
    field.

    Usage:
        options = RequestOptions(method="HEAD", allow_redirects=True)
        slower = options.merge(read_timeout=30)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    method: str = "GET"
    body: bytes | str | None = None
    allow_redirects: bool = False
    max_redirects: int = Field(default=5, ge=0)
    connection_timeout: float | None = Field(default=5.0, ge=0)
    read_timeout: float | None = Field(default=10.0, ge=0)
    retries: int = Field(default=0, ge=0)
    encoding: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)

    # Forwarded to httpx.HTTPTransport (verify, cert, proxy, http2, ...)
    transport_options: dict[str, Any] = Field(default_factory=dict)

    cache: CacheOptions | None = None
    on_data: OnData | None = None

    @field_validator("method")
    @classmethod
    def upper_method(cls, v: str) -> str:
        """Normalise method names to upper case."""
        return v.upper()

    @classmethod
    def build(cls, options: "RequestOptions | Mapping[str, Any] | None" = None, **overrides: Any) -> "RequestOptions":
        """Create options from an instance, a mapping, or keyword overrides."""
        return cls().merge(options, **overrides)

    def merge(self, overrides: "RequestOptions | Mapping[str, Any] | None" = None, **kwargs: Any) -> "RequestOptions":
        """
        Return new options with ``overrides`` applied on top of these.

        Args:
            overrides: Options instance (only explicitly set fields apply) or mapping.
            **kwargs: Additional overrides, applied last.

        Returns:
            A new RequestOptions instance.

        Raises:
            InvalidOptionError: If a key is unknown or a value is invalid.
        """
        updates: dict[str, Any] = {}
        if isinstance(overrides, RequestOptions):
            updates.update({name: getattr(overrides, name) for name in overrides.model_fields_set})
        elif overrides:
            updates.update(overrides)
        updates.update(kwargs)

        # Unset fields stay unset in the result
        data = {name: getattr(self, name) for name in self.model_fields_set}
        try:
            for key, value in updates.items():
                current = data.get(key)
                if key in _MERGEABLE_FIELDS and isinstance(value, Mapping):
                    data[key] = {**(current or {}), **value}
                elif key == "cache":
                    data[key] = _merge_cache(current, value)
                else:
                    data[key] = value
            return type(self).model_validate(data)
        except PydanticValidationError as e:
            raise InvalidOptionError(
                f"Invalid request options: {e.errors(include_url=False)}",
                field=", ".join(str(err["loc"][0]) for err in e.errors() if err["loc"]),
            ) from e


def _merge_cache(current: CacheOptions | None, value: Any) -> CacheOptions | None:
    """Resolve a cache override: True enables configured defaults, False disables, mappings merge."""
    if value is True:
        if current is not None:
            return current
        settings = get_settings()
        return CacheOptions(ttl=settings.cache_ttl, capacity=settings.cache_capacity)
    if value is False or value is None:
        return None
    if isinstance(value, Mapping):
        base = current.model_dump() if current else {}
        return CacheOptions.model_validate({**base, **value})
    return value
