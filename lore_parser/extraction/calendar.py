"""
Calendar — generated date patterns from configurable vocabularies.

Produces up to four Date rules:

    id            shape                                             score
    date_month    day [suffix] [of] Month                           0.88
    epoch_year    [Year] N Epoch                                    0.90
    season_date   Early|Mid|Late Season                             0.85
    full_date     day [suffix] [of] Month[,] [Year] N Epoch         0.95

full_date needs both months and epochs. Vocabulary entries are literal words
and are escaped before they are joined into an alternation.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, NamedTuple, Optional, Union

import regex as re

from lore_parser.config.constants import (
    DATE_MONTH_SCORE,
    DEFAULT_DAY_SUFFIXES,
    DEFAULT_EPOCHS,
    DEFAULT_MONTHS,
    DEFAULT_SEASONS,
    EPOCH_YEAR_SCORE,
    FULL_DATE_SCORE,
    SEASON_DATE_SCORE,
    SEASON_QUALIFIERS,
)
from lore_parser.config.loader import load_rules_document
from lore_parser.config.schemas import CALENDAR_SCHEMA
from lore_parser.models.kind import EntityKind, Kind

logger = logging.getLogger(__name__)


class GeneratedRule(NamedTuple):
    id: str
    kind: Kind
    regex: str
    score: float


@dataclass(frozen=True)
class CalendarConfig:
    months: Optional[List[str]] = None
    epochs: Optional[List[str]] = None
    seasons: Optional[List[str]] = None
    day_suffixes: Optional[List[str]] = None

    @classmethod
    def default(cls) -> "CalendarConfig":
        return cls(
            months=list(DEFAULT_MONTHS),
            epochs=list(DEFAULT_EPOCHS),
            seasons=list(DEFAULT_SEASONS),
            day_suffixes=list(DEFAULT_DAY_SUFFIXES),
        )

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarConfig":
        return cls(
            months=data.get("months"),
            epochs=data.get("epochs"),
            seasons=data.get("seasons"),
            day_suffixes=data.get("day_suffixes"),
        )


def _concat(base: Optional[List[str]], extra: Optional[List[str]]) -> Optional[List[str]]:
    if extra is None:
        return base
    return list(base or []) + list(extra)


def _alternation(words: List[str]) -> str:
    return "|".join(re.escape(w) for w in words)


class Calendar:
    """Date pattern generator over a CalendarConfig."""

    def __init__(self, config: Optional[CalendarConfig] = None) -> None:
        self.config = config if config is not None else CalendarConfig.default()

    @classmethod
    def default(cls) -> "Calendar":
        return cls(CalendarConfig.default())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Calendar":
        """Load a calendar file as-is; lists it omits stay unset."""
        document = load_rules_document(path, CALENDAR_SCHEMA, "calendar")
        return cls(CalendarConfig.from_dict(document))

    def merge(self, other: CalendarConfig) -> "Calendar":
        """Extend each list with the override's entries. Nothing is dropped."""
        return Calendar(
            CalendarConfig(
                months=_concat(self.config.months, other.months),
                epochs=_concat(self.config.epochs, other.epochs),
                seasons=_concat(self.config.seasons, other.seasons),
                day_suffixes=_concat(self.config.day_suffixes, other.day_suffixes),
            )
        )

    def _day(self) -> str:
        suffixes = self.config.day_suffixes or DEFAULT_DAY_SUFFIXES
        return r"\d{1,2}(?:%s)?" % _alternation(suffixes)

    def generate_patterns(self) -> List[GeneratedRule]:
        patterns: List[GeneratedRule] = []
        months = self.config.months
        epochs = self.config.epochs
        seasons = self.config.seasons

        # "3rd of Stormtide", "15th Frostfall"
        if months:
            patterns.append(
                GeneratedRule(
                    "date_month",
                    EntityKind.DATE,
                    r"\b(%s\s+(?:of\s+)?(?:%s))\b" % (self._day(), _alternation(months)),
                    DATE_MONTH_SCORE,
                )
            )

        # "Year 412 AE", "3024 AD"
        if epochs:
            patterns.append(
                GeneratedRule(
                    "epoch_year",
                    EntityKind.DATE,
                    r"\b(?:Year\s+)?(\d{1,4}\s+(?:%s))\b" % _alternation(epochs),
                    EPOCH_YEAR_SCORE,
                )
            )

        # "Early Spring", "Late Winter"
        if seasons:
            patterns.append(
                GeneratedRule(
                    "season_date",
                    EntityKind.DATE,
                    r"\b((?:%s)\s+(?:%s))\b" % (_alternation(SEASON_QUALIFIERS), _alternation(seasons)),
                    SEASON_DATE_SCORE,
                )
            )

        # "3rd of Stormtide, Year 412 AE"
        if months and epochs:
            patterns.append(
                GeneratedRule(
                    "full_date",
                    EntityKind.DATE,
                    r"\b(%s\s+(?:of\s+)?(?:%s),?\s+(?:Year\s+)?\d{1,4}\s+(?:%s))\b"
                    % (self._day(), _alternation(months), _alternation(epochs)),
                    FULL_DATE_SCORE,
                )
            )

        logger.debug("Calendar generated %d date patterns", len(patterns))
        return patterns
