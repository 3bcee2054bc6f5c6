"""Registrable-domain parsing backed by the Public Suffix List."""

import re
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

import tldextract

from webexplore.exceptions import InvalidDomainError, InvalidOptionError

DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType({"ignore_private": True})

# "www", "ww3", "www2", ...
_WWW_LABEL = re.compile(r"^w{2,3}\d*$", re.IGNORECASE)

_extractors: dict[bool, tldextract.TLDExtract] = {}
_extractors_lock = threading.Lock()


def _get_extractor(include_private: bool) -> tldextract.TLDExtract:
    """Return a shared extractor that only uses the bundled suffix snapshot."""
    with _extractors_lock:
        extractor = _extractors.get(include_private)
        if extractor is None:
            extractor = tldextract.TLDExtract(
                cache_dir=None,
                suffix_list_urls=(),
                include_psl_private_domains=include_private,
            )
            _extractors[include_private] = extractor
        return extractor


class Domain:
    """A host name split into subdomain, second-level domain and public suffix.

    Usage:
        domain = Domain("blog.example.co.uk")
        domain.tld                # "co.uk"
        domain.sld                # "example"
        domain.trd                # "blog"
        domain.registered_domain  # "example.co.uk"

    Private suffixes (``blogspot.com``, ``github.io``...) are ignored unless
    ``ignore_private=False`` is passed.
    """

    DEFAULT_OPTIONS = DEFAULT_OPTIONS

    def __init__(self, name: str, options: Mapping[str, Any] | None = None, **overrides: Any) -> None:
        merged = {**DEFAULT_OPTIONS, **(options or {}), **overrides}
        unknown = set(merged) - set(DEFAULT_OPTIONS)
        if unknown:
            raise InvalidOptionError(f"Unknown domain options: {sorted(unknown)}", field="options")

        self._options = merged
        self._name = name.lower().rstrip(".")

        extracted = _get_extractor(not merged["ignore_private"])(self._name)
        if not extracted.suffix or not extracted.domain:
            raise InvalidDomainError(f"`{name}` is not a valid domain", domain=name)

        self._trd = extracted.subdomain or None
        self._sld = extracted.domain
        self._tld = extracted.suffix

    @property
    def name(self) -> str:
        return self._name

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    @property
    def tld(self) -> str:
        """Public suffix, e.g. ``com`` or ``co.uk``."""
        return self._tld

    @property
    def sld(self) -> str:
        """Second-level label directly left of the public suffix."""
        return self._sld

    @property
    def trd(self) -> str | None:
        """Remaining subdomain labels, or None."""
        return self._trd

    @property
    def registered_domain(self) -> str:
        return f"{self._sld}.{self._tld}"

    @property
    def www(self) -> str | None:
        """The leading www-style label (``www``, ``ww3``...) if present."""
        if not self._trd:
            return None
        first = self._trd.split(".", 1)[0]
        return first if _WWW_LABEL.match(first) else None

    @property
    def key(self) -> str:
        """Host name with any leading www-style label removed."""
        if not self._trd:
            return self.registered_domain
        labels = self._trd.split(".")
        if self.www:
            labels = labels[1:]
        if not labels:
            return self.registered_domain
        return ".".join([*labels, self.registered_domain])

    def to_list(self) -> list[str | None]:
        return [self._trd, self._sld, self._tld]

    def __str__(self) -> str:
        return self._name

    def __repr__(self) -> str:
        return f"Domain({self._name!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Domain):
            return self._name == other._name and self._options == other._options
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._name)
