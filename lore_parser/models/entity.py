"""
Span, Link and EntityHit — the units produced by the parser.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from lore_parser.models.kind import Kind, kind_label


class HitSource(str, Enum):
    """Provenance of a hit. Set once at creation, never altered."""

    DICTIONARY = "dictionary"
    PATTERN = "pattern"
    FUZZY = "fuzzy"


@dataclass(frozen=True)
class Span:
    """Offsets into the source text plus the reported surface text."""

    start: int
    end: int
    text: str

    def overlaps(self, other: "Span") -> bool:
        return not (self.end <= other.start or self.start >= other.end)

    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Link:
    """Reference into the external entity directory."""

    name: str
    kind: Kind
    id: Optional[str] = None
    slug: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "kind": kind_label(self.kind),
        }


@dataclass
class EntityHit:
    """A single detected entity mention with provenance."""

    kind: Kind
    span: Span
    source: HitSource
    pattern_id: Optional[str] = None
    score: float = 0.0
    link: Optional[Link] = None

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

    @property
    def text(self) -> str:
        return self.span.text

    def overlaps(self, other: "EntityHit") -> bool:
        """Check if two hits have overlapping spans."""
        return self.span.overlaps(other.span)

    def span_length(self) -> int:
        return self.span.length()

    def to_dict(self) -> dict:
        return {
            "kind": kind_label(self.kind),
            "span": {
                "start": self.span.start,
                "end": self.span.end,
                "text": self.span.text,
            },
            "source": self.source.value,
            "pattern_id": self.pattern_id,
            "score": self.score,
            "link": self.link.to_dict() if self.link is not None else None,
        }

    def __repr__(self) -> str:
        return (
            f"EntityHit('{self.span.text}', {kind_label(self.kind)}, "
            f"[{self.span.start},{self.span.end}], {self.source.value}, {self.score:.3f})"
        )
