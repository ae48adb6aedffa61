"""
Text utilities — tokenizer, stop zones, fuzzy and coreference candidates, slugs.

Stop zones are the ranges (code and quoted text) where entity detection
is suppressed. They are normalized once per parse: sorted by start and merged
whenever a zone starts at or before the end of the previous one, so in_zones()
can binary-search them as disjoint ordered intervals.
"""
from dataclasses import dataclass
from typing import List

import regex as re

from lore_parser.config.constants import (
    FUZZY_KIND_NAME,
    FUZZY_SCORE,
    PRONOUNS,
    TITLE_WORDS,
)
from lore_parser.models.entity import EntityHit, HitSource, Span
from lore_parser.models.kind import CustomKind

# Words keep internal apostrophes and periods ("don't", "3.5") but never
# start or end on punctuation.
_WORD_RE = re.compile(r"\w+(?:['’.]\w+)*")

_STOP_ZONE_RES = [
    re.compile(r"```.*?```", re.DOTALL),   # fenced code
    re.compile(r"`[^`]*`"),                # inline code
    re.compile(r'"[^"]*"'),                # straight double quotes
    re.compile(r"'[^']*'"),                # straight single quotes
    re.compile("“[^”]*”"),  # curly double quotes
    re.compile("‘[^’]*’"),  # curly single quotes
]

# 1-3 capitalized words in a row.
_FUZZY_RE = re.compile(r"\b([A-Z][\p{L}'’-]+(?:\s+[A-Z][\p{L}'’-]+){0,2})\b")

_PRONOUN_RE = re.compile(r"\b(?:%s)\b" % "|".join(PRONOUNS))

_TITLE_MENTION_RE = re.compile(
    r"\bthe\s+(?:%s)\b" % "|".join(re.escape(t) for t in TITLE_WORDS),
    re.IGNORECASE,
)

_NON_ALNUM_RE = re.compile(r"[^\p{L}\p{N}]+")


@dataclass(frozen=True)
class Zone:
    """Excluded range [start, end)."""

    start: int
    end: int


def tokenize(text: str) -> List[str]:
    """Unicode-aware word tokens; punctuation and whitespace are dropped."""
    return _WORD_RE.findall(text)


def find_stop_zones(text: str) -> List[Zone]:
    """Find code spans and quoted spans, sorted and merged."""
    zones: List[Zone] = []
    for pattern in _STOP_ZONE_RES:
        for m in pattern.finditer(text):
            zones.append(Zone(m.start(), m.end()))

    zones.sort(key=lambda z: z.start)

    merged: List[Zone] = []
    for z in zones:
        if merged and z.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Zone(last.start, max(last.end, z.end))
        else:
            merged.append(z)
    return merged


def in_zones(zones: List[Zone], start: int, end: int) -> bool:
    """True iff [start, end) intersects a zone. *zones* must be normalized."""
    lo, hi = 0, len(zones)
    while lo < hi:
        mid = (lo + hi) // 2
        z = zones[mid]
        if end <= z.start:
            hi = mid
        elif start >= z.end:
            lo = mid + 1
        else:
            return True
    return False


def fuzzy_candidates(text: str) -> List[EntityHit]:
    """Capitalized 1-3 word phrases as low-confidence Unknown hits."""
    hits: List[EntityHit] = []
    for m in _FUZZY_RE.finditer(text):
        hits.append(
            EntityHit(
                kind=CustomKind(FUZZY_KIND_NAME),
                span=Span(m.start(), m.end(), m.group(0)),
                source=HitSource.FUZZY,
                pattern_id=None,
                score=FUZZY_SCORE,
            )
        )
    return hits


def coref_candidates(text: str) -> List[Span]:
    """
    Spans that may refer back to a person.

    Pronouns are matched lowercase only ("He" at a sentence start is not a
    candidate); "the <Title>" phrases are matched case-insensitively.
    """
    spans = [Span(m.start(), m.end(), m.group(0)) for m in _PRONOUN_RE.finditer(text)]
    spans.extend(Span(m.start(), m.end(), m.group(0)) for m in _TITLE_MENTION_RE.finditer(text))
    return spans


def slugify(text: str) -> str:
    """Lowercase, non-alphanumerics collapsed to single hyphens."""
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")
