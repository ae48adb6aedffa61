"""
Coreference — link pronouns and "the <Title>" mentions to earlier persons.

For each candidate the antecedent is the nearest Person hit that starts
strictly before it. Candidates overlapping any existing hit are skipped.
The new hits are not merged against each other, so several candidates may
point at the same antecedent.
"""
from typing import List, Optional

from lore_parser.config.constants import COREF_DECAY, COREF_MAX_SCORE, COREF_PATTERN_ID
from lore_parser.extraction.text_utils import coref_candidates, slugify
from lore_parser.models.entity import EntityHit, HitSource, Link, Span
from lore_parser.models.kind import EntityKind


def _nearest_antecedent(persons: List[EntityHit], candidate: Span) -> Optional[EntityHit]:
    for person in reversed(persons):
        if person.start < candidate.start:
            return person
    return None


def _link_to(antecedent: EntityHit) -> Link:
    existing = antecedent.link
    slug = existing.slug if existing is not None and existing.slug else slugify(antecedent.text)
    return Link(
        name=antecedent.text,
        kind=EntityKind.PERSON,
        id=existing.id if existing is not None else None,
        slug=slug,
    )


def coref_link(text: str, hits: List[EntityHit]) -> List[EntityHit]:
    """
    Build coreference hits for *text* given the surviving *hits*.

    Returns:
        New Person hits (source=fuzzy, pattern_id="coref"), each with a Link
        to its antecedent. *hits* is not modified.
    """
    if not hits:
        return []

    persons = sorted((h for h in hits if h.kind == EntityKind.PERSON), key=lambda h: h.start)
    if not persons:
        return []

    extra: List[EntityHit] = []
    for candidate in coref_candidates(text):
        antecedent = _nearest_antecedent(persons, candidate)
        if antecedent is None:
            continue

        if any(candidate.overlaps(h.span) for h in hits):
            continue

        extra.append(
            EntityHit(
                kind=EntityKind.PERSON,
                span=candidate,
                source=HitSource.FUZZY,
                pattern_id=COREF_PATTERN_ID,
                score=min(antecedent.score * COREF_DECAY, COREF_MAX_SCORE),
                link=_link_to(antecedent),
            )
        )

    return extra
