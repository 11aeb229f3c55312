"""Turns loaded entries into routed page-generation units.

Only entries with a ``published`` date are routed. Body conversion can run
on a thread pool, but every conversion is joined before any unit is
returned, so callers never see a partially populated result.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable, Mapping

from .errors import ContentConversionFailure, MissingRoute
from .loader import PostEntry
from .render import Converter, RenderedContent, convert_markdown
from .schema import PostMetadata

POSTS_DIR = "posts"
INDEX_PATH = "index.html"


@dataclass(frozen=True)
class PageUnit:
    identifier: str
    metadata: PostMetadata
    content: RenderedContent

    @property
    def path(self) -> str:
        return f"{POSTS_DIR}/{self.identifier}.html"


def qualifying_entries(entries: Mapping[str, PostEntry]) -> list[PostEntry]:
    return [entries[key] for key in sorted(entries) if entries[key].is_published]


def generate_page_units(
    entries: Mapping[str, PostEntry],
    convert: Converter = convert_markdown,
    workers: int = 1,
) -> list[PageUnit]:
    published = qualifying_entries(entries)
    if not published:
        return []

    def build_unit(entry: PostEntry) -> PageUnit:
        try:
            content = convert(entry.body)
        except Exception as exc:
            raise ContentConversionFailure(entry.identifier, exc) from exc
        return PageUnit(identifier=entry.identifier, metadata=entry.metadata, content=content)

    workers = max(1, int(workers or 1))
    if workers <= 1 or len(published) <= 1:
        return [build_unit(entry) for entry in published]
    with ThreadPoolExecutor(max_workers=min(workers, len(published))) as executor:
        return list(executor.map(build_unit, published))


def find_unit(units: Iterable[PageUnit], identifier: str) -> PageUnit:
    for unit in units:
        if unit.identifier == identifier:
            return unit
    raise MissingRoute(identifier)


def route_paths(units: Iterable[PageUnit]) -> list[str]:
    return [INDEX_PATH] + sorted(unit.path for unit in units)
