"""
Context Rescoring — additive boosts from the word left of a hit.

Formula:
    score_rescored = clip(
        score
        + 0.05 × [Person preceded by a title word]
        + 0.04 × [Place preceded by a preposition]
        + 0.02 × [preceded by "the"]
        + 0.01 × [first character uppercase],
        0.0, 0.99)

The left context is the last whitespace-delimited word before the hit,
ignoring whitespace directly in front of it. Leading punctuation is dropped
before the word is compared whole, so "(Lord" is a title cue and "Overlord"
or "that" are not.
"""
from typing import List

import numpy as np
import regex as re

from lore_parser.config.constants import (
    ARTICLE,
    ARTICLE_BOOST,
    CAPITALIZED_BOOST,
    PREPOSITION_BOOST,
    PREPOSITIONS,
    SCORE_CEILING,
    SCORE_FLOOR,
    TITLE_BOOST,
    TITLE_WORDS,
)
from lore_parser.models.entity import EntityHit
from lore_parser.models.kind import EntityKind

_LEADING_PUNCT_RE = re.compile(r"^\W+")


def left_context(text: str, start: int) -> str:
    """The word immediately left of *start*, or "" at the start of text."""
    words = text[:start].split()
    return words[-1] if words else ""


def _cue_word(word: str) -> str:
    return _LEADING_PUNCT_RE.sub("", word)


def context_score(text: str, hit: EntityHit) -> float:
    """
    Recompute a hit's score from its left context.

    Args:
        text: The full source text the hit was found in.
        hit: Hit whose current score is the base.

    Returns:
        Boosted score clamped to [0.0, 0.99].
    """
    left = _cue_word(left_context(text, hit.start))
    score = hit.score

    if hit.kind == EntityKind.PERSON and left in TITLE_WORDS:
        score += TITLE_BOOST

    if hit.kind == EntityKind.PLACE and left in PREPOSITIONS:
        score += PREPOSITION_BOOST

    if left == ARTICLE:
        score += ARTICLE_BOOST

    if hit.text[:1].isupper():
        score += CAPITALIZED_BOOST

    return float(np.clip(score, SCORE_FLOOR, SCORE_CEILING))


def rescore_hits(text: str, hits: List[EntityHit]) -> List[EntityHit]:
    """Apply context_score to every hit in place."""
    for hit in hits:
        hit.score = context_score(text, hit)
    return hits
