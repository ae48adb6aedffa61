"""
Linker — resolve parsed hits against an external entity directory.

The directory is never touched directly: callers inject a lookup function.
Three independent strategies, composable by the caller:

    link_entities   lookup(kind, surface text)
    link_with_slug  lookup(slug)                  slug = "Storm Coast" → "storm-coast"
    link_by_name    lookup(kind, lowercased text)

A lookup returning None leaves the hit unlinked; that is not an error.
"""
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from lore_parser.extraction.text_utils import slugify
from lore_parser.models.entity import EntityHit, Link
from lore_parser.models.kind import Kind

logger = logging.getLogger(__name__)

KindLookup = Callable[[Kind, str], Optional[Link]]
SlugLookup = Callable[[str], Optional[Link]]


def to_slug(text: str) -> str:
    """Lowercase with spaces replaced by hyphens."""
    return text.replace(" ", "-").lower()


def link_entities(hits: List[EntityHit], lookup: KindLookup) -> List[EntityHit]:
    """Exact (kind, surface text) lookup."""
    linked = 0
    for hit in hits:
        link = lookup(hit.kind, hit.text)
        if link is not None:
            hit.link = link
            linked += 1
    logger.debug("link_entities: %d/%d hits linked", linked, len(hits))
    return hits


def link_with_slug(hits: List[EntityHit], lookup: SlugLookup) -> List[EntityHit]:
    """Slug lookup."""
    for hit in hits:
        link = lookup(to_slug(hit.text))
        if link is not None:
            hit.link = link
    return hits


def link_by_name(hits: List[EntityHit], lookup: KindLookup) -> List[EntityHit]:
    """Case-insensitive name lookup; the lookup receives the lowercased text."""
    for hit in hits:
        link = lookup(hit.kind, hit.text.lower())
        if link is not None:
            hit.link = link
    return hits


def null_lookup(kind: Kind, text: str) -> Optional[Link]:  # noqa: ARG001
    """Directory with no entries."""
    return None


class InMemoryDirectory:
    """
    Entity directory held in memory, exposing the three lookup shapes.

    Useful for tests and for callers that already hold their directory as a
    list of Links. Entries are indexed by exact (kind, name), by slug and by
    (kind, lowercased name); later entries win on key collisions.
    """

    def __init__(self, links: Iterable[Link] = ()) -> None:
        self._exact: Dict[Tuple[Kind, str], Link] = {}
        self._slug: Dict[str, Link] = {}
        self._folded: Dict[Tuple[Kind, str], Link] = {}
        for link in links:
            self.add(link)

    def add(self, link: Link) -> None:
        self._exact[(link.kind, link.name)] = link
        self._slug[link.slug or slugify(link.name)] = link
        self._folded[(link.kind, link.name.lower())] = link

    def by_kind_text(self, kind: Kind, text: str) -> Optional[Link]:
        return self._exact.get((kind, text))

    def by_slug(self, slug: str) -> Optional[Link]:
        return self._slug.get(slug)

    def by_name(self, kind: Kind, name: str) -> Optional[Link]:
        return self._folded.get((kind, name))

    def __len__(self) -> int:
        return len(self._exact)
