"""
Deterministic Hit Merger.

Collapses overlapping hits into a mutually non-overlapping set:
1. Hits are visited by start position, longest span first
2. An overlapping hit replaces the kept one only with a higher score
3. Same score → longer span wins
"""
from typing import List

from lore_parser.models.entity import EntityHit


def dedupe_merge(hits: List[EntityHit]) -> List[EntityHit]:
    """
    Merge overlapping hits, preferring higher score then longer span.

    Each incoming hit is compared against the kept hits in order; the first
    overlapping kept hit is either replaced in place or wins, and the scan
    moves on. Hits that overlap nothing are appended.

    Args:
        hits: All candidate hits (may overlap).

    Returns:
        Non-overlapping hits in the order they were kept.
    """
    if not hits:
        return []

    hits_sorted = sorted(hits, key=lambda h: (h.start, -h.span_length()))

    merged: List[EntityHit] = []

    for hit in hits_sorted:
        overlap_found = False

        for i, existing in enumerate(merged):
            if hit.overlaps(existing):
                overlap_found = True

                hit_len = hit.span_length()
                existing_len = existing.span_length()

                if hit.score > existing.score or (
                    hit.score == existing.score and hit_len > existing_len
                ):
                    merged[i] = hit

                break

        if not overlap_found:
            merged.append(hit)

    return merged
