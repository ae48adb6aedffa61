"""
Lore Parser — orchestrates dictionary + patterns + fuzzy + coreference.

Pipeline:
    1. Tokenize (response tokens only)
    2. Stop zones (code fences, inline code, quotes)
    3. Dictionary hits (confidence 0.93)
    4. Pattern hits (rule confidence)
    5. Deterministic merge
    6. Optional fuzzy capitalized phrases (confidence 0.5) + re-merge
    7. Context rescoring
    8. Coreference hits (appended, not merged)
    9. Order by start, then score

A Parser is an immutable snapshot of its rules and safe to share between
threads. parse() does no I/O and has no error path.
"""
import logging
from typing import List, Optional, Tuple

from lore_parser.config.constants import DICTIONARY_SCORE, SCORE_SORT_RESOLUTION
from lore_parser.config.settings import LORE_DEFAULT_FUZZY
from lore_parser.extraction.coreference import coref_link
from lore_parser.extraction.dictionary_matcher import DictionaryMatcher
from lore_parser.extraction.merger import dedupe_merge
from lore_parser.extraction.patterns import CompiledPatternRule, PatternSet
from lore_parser.extraction.scoring import rescore_hits
from lore_parser.extraction.text_utils import (
    Zone,
    find_stop_zones,
    fuzzy_candidates,
    in_zones,
    tokenize,
)
from lore_parser.models.entity import EntityHit, HitSource, Span
from lore_parser.models.parse_io import ParseRequest, ParseResponse
from lore_parser.observability.metrics import record_hits, timed_parse

logger = logging.getLogger(__name__)


class Parser:
    """Entity annotation over a fixed dictionary and rule set."""

    def __init__(self, matcher: DictionaryMatcher, patterns: PatternSet) -> None:
        self._matcher = matcher
        self._rules: Tuple[CompiledPatternRule, ...] = tuple(patterns.rules)

    @property
    def rules(self) -> Tuple[CompiledPatternRule, ...]:
        return self._rules

    def parse(self, text: str, fuzzy: bool = True) -> ParseResponse:
        """
        Annotate *text*.

        Args:
            text: Source text. Empty text yields an empty response.
            fuzzy: Add capitalized-phrase candidates as a fallback.

        Returns:
            ParseResponse with non-overlapping scored hits (coreference hits
            aside) and the token list.
        """
        with timed_parse():
            tokens = tokenize(text)
            zones = find_stop_zones(text)

            hits = self._dictionary_hits(text, zones) + self._pattern_hits(text, zones)
            hits = dedupe_merge(hits)

            if fuzzy:
                hits = dedupe_merge(hits + fuzzy_candidates(text))

            rescore_hits(text, hits)

            hits.extend(coref_link(text, hits))

            hits.sort(key=lambda h: (h.start, -int(h.score * SCORE_SORT_RESOLUTION)))

        for source in HitSource:
            record_hits(source.value, sum(1 for h in hits if h.source is source))
        logger.debug(
            "Parsed %d chars: %d hits, %d tokens, %d stop zones",
            len(text), len(hits), len(tokens), len(zones),
        )
        return ParseResponse(hits=hits, tokens=tokens)

    def parse_request(self, req: ParseRequest) -> ParseResponse:
        """Parse with the request's fuzzy flag, then keep only requested kinds."""
        fuzzy = req.fuzzy if req.fuzzy is not None else LORE_DEFAULT_FUZZY
        response = self.parse(req.text, fuzzy)

        wanted = req.kind_filter()
        if wanted is not None:
            response.hits = [h for h in response.hits if h.kind in wanted]

        return response

    # ------------------------------------------------------------------
    # Candidate sources
    # ------------------------------------------------------------------

    def _dictionary_hits(self, text: str, zones: List[Zone]) -> List[EntityHit]:
        hits: List[EntityHit] = []
        for m in self._matcher.find_all(text):
            if in_zones(zones, m.start, m.end):
                continue
            hits.append(
                EntityHit(
                    kind=m.kind,
                    span=Span(m.start, m.end, text[m.start:m.end]),
                    source=HitSource.DICTIONARY,
                    pattern_id=None,
                    score=DICTIONARY_SCORE,
                )
            )
        return hits

    def _pattern_hits(self, text: str, zones: List[Zone]) -> List[EntityHit]:
        hits: List[EntityHit] = []
        for rule in self._rules:
            for m in rule.matches(text):
                if in_zones(zones, m.start, m.end):
                    continue
                hits.append(
                    EntityHit(
                        kind=rule.kind,
                        span=Span(m.start, m.end, m.text),
                        source=HitSource.PATTERN,
                        pattern_id=rule.id,
                        score=rule.score,
                    )
                )
        return hits


def build_parser(
    matcher: Optional[DictionaryMatcher] = None,
    patterns: Optional[PatternSet] = None,
) -> Parser:
    """Parser over the given components; missing ones are empty."""
    return Parser(
        matcher if matcher is not None else DictionaryMatcher.empty(),
        patterns if patterns is not None else PatternSet.empty(),
    )
