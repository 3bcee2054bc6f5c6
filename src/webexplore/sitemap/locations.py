"""Registry of candidate sitemap locations."""

from collections.abc import Iterable, Iterator
from importlib import resources
from typing import Any

import yaml

from webexplore.sitemap.source import Source


def _load_data() -> dict[str, dict[str, Any]]:
    """Read the bundled candidate dataset."""
    text = resources.files("webexplore.sitemap").joinpath("data/sitemaps.yml").read_text(encoding="utf-8")
    return yaml.safe_load(text)


# group name -> {"tags": [...], "content_types": [...], "paths": [...]}
DATA: dict[str, dict[str, Any]] = _load_data()


class Locations:
    """An ordered collection of sitemap sources.

    Usage:
        locations = Locations.load(origin="https://example.com")
        len(locations)                       # every bundled candidate
        locations.find_by_tags(["common"])   # primary candidates only

        combined = robots_locations + Locations.load(origin=origin)
    """

    DATA = DATA

    def __init__(self, sources: Iterable[Source] | None = None) -> None:
        self.sources: list[Source] = list(sources) if sources is not None else self.all()

    @classmethod
    def all(cls, origin: str | None = None) -> list[Source]:
        """Build fresh ``pending`` sources for every bundled candidate."""
        sources = []
        for group, spec in DATA.items():
            tags = {group, "all", *spec.get("tags", [])}
            content_types = set(spec.get("content_types", []))
            for path in spec.get("paths", []):
                sources.append(
                    Source(
                        path=path,
                        origin=origin,
                        tags=set(tags),
                        content_types=set(content_types),
                    )
                )
        return sources

    @classmethod
    def load(cls, origin: str | None = None) -> "Locations":
        return cls(cls.all(origin=origin))

    def find_by_tags(self, tags: str | Iterable[str]) -> list[Source]:
        """Sources carrying any of ``tags``."""
        wanted = {tags} if isinstance(tags, str) else {str(tag) for tag in tags}
        return [source for source in self.sources if source.tags & wanted]

    def __iter__(self) -> Iterator[Source]:
        return iter(self.sources)

    def __len__(self) -> int:
        return len(self.sources)

    def __add__(self, other: "Locations") -> "Locations":
        if not isinstance(other, Locations):
            return NotImplemented
        return type(self)(self.sources + other.sources)

    def __repr__(self) -> str:
        return f"<Locations sources={len(self.sources)}>"
