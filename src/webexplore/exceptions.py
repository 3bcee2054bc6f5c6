"""Custom exceptions for webexplore with context support."""

import uuid
from typing import Any


def generate_correlation_id() -> str:
    """
    Generate an 8-character UUID-based correlation ID.

    Returns:
        8-character correlation ID string.
    """
    return str(uuid.uuid4())[:8]


class ExploreError(Exception):
    """Base exception for webexplore with context and correlation ID support."""

    def __init__(
        self,
        message: str,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise exception with message, correlation ID, and context.

        Args:
            message: Error message.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        self.message = message
        self.correlation_id = correlation_id or generate_correlation_id()
        self.context = context or {}
        super().__init__(f"{message} [correlation_id={self.correlation_id}]")


class RequestError(ExploreError):
    """Raised when an HTTP request cannot be issued or completed."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise request error with URL context.

        Args:
            message: Error message.
            url: Optional URL the request was made to.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if url is not None:
            context["url"] = str(url)
        super().__init__(message, correlation_id=correlation_id, context=context)


class TimeoutError(ExploreError):
    """Raised when a request exceeds its connect, read or overall timeout."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        timeout: float | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise timeout error with URL and timeout context.

        Args:
            message: Error message.
            url: Optional URL the request was made to.
            timeout: Optional timeout (seconds) that was exceeded.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if url is not None:
            context["url"] = str(url)
        if timeout is not None:
            context["timeout"] = timeout
        super().__init__(message, correlation_id=correlation_id, context=context)


# Alias to avoid shadowing built-in, but keep custom exception
RequestTimeoutError = TimeoutError


class InvalidURIError(RequestError):
    """Raised when a URI string cannot be parsed."""


class InvalidDomainError(ExploreError):
    """Raised when a host name has no registrable domain."""

    def __init__(
        self,
        message: str,
        domain: str | None = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        if context is None:
            context = {}
        if domain is not None:
            context["domain"] = domain
        super().__init__(message, correlation_id=correlation_id, context=context)


class ValidationError(ExploreError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        correlation_id: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialise validation error with field and value context.

        Args:
            message: Error message.
            field: Optional field name that failed validation.
            value: Optional value that failed validation.
            correlation_id: Optional correlation ID. If None, generates a new one.
            context: Optional context dictionary for debugging.
        """
        if context is None:
            context = {}
        if field is not None:
            context["field"] = field
        if value is not None:
            context["value"] = str(value)
        super().__init__(message, correlation_id=correlation_id, context=context)


class InvalidOptionError(ValidationError, ValueError):
    """Raised when a configuration option is unknown or out of range."""
