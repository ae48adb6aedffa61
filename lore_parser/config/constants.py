"""
Constants used across the lore parser.
Pinned so that scoring stays reproducible between runs.
"""
from typing import List

# =============================================================================
# Base confidence per hit source
# =============================================================================
DICTIONARY_SCORE: float = 0.93
FUZZY_SCORE: float = 0.5
FUZZY_KIND_NAME: str = "Unknown"

# =============================================================================
# Context rescoring
# =============================================================================
TITLE_WORDS: List[str] = [
    "Lord",
    "Lady",
    "Queen",
    "Captain",
    "Archmage",
]

PREPOSITIONS: List[str] = ["of", "at", "near"]

ARTICLE: str = "the"

TITLE_BOOST: float = 0.05
PREPOSITION_BOOST: float = 0.04
ARTICLE_BOOST: float = 0.02
CAPITALIZED_BOOST: float = 0.01

SCORE_FLOOR: float = 0.0
SCORE_CEILING: float = 0.99

# =============================================================================
# Coreference
# =============================================================================
PRONOUNS: List[str] = [
    "she", "her", "hers",
    "he", "him", "his",
    "they", "them", "theirs",
]

COREF_PATTERN_ID: str = "coref"
COREF_DECAY: float = 0.9
COREF_MAX_SCORE: float = 0.85

# Scores are compared at this resolution when ordering the final hit list.
SCORE_SORT_RESOLUTION: int = 1000

# =============================================================================
# Calendar defaults
# =============================================================================
DEFAULT_MONTHS: List[str] = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

DEFAULT_EPOCHS: List[str] = ["AD", "BC", "CE", "BCE"]

DEFAULT_SEASONS: List[str] = ["Spring", "Summer", "Autumn", "Fall", "Winter"]

DEFAULT_DAY_SUFFIXES: List[str] = ["st", "nd", "rd", "th"]

SEASON_QUALIFIERS: List[str] = ["Early", "Mid", "Late"]

DATE_MONTH_SCORE: float = 0.88
EPOCH_YEAR_SCORE: float = 0.90
SEASON_DATE_SCORE: float = 0.85
FULL_DATE_SCORE: float = 0.95

# =============================================================================
# Rules files
# =============================================================================
BASE_ENTITIES_FILE: str = "entities.yaml"
BASE_PATTERNS_FILE: str = "patterns.yaml"
PROJECT_ENTITIES_FILE: str = "entities.{project_id}.yaml"
PROJECT_PATTERNS_FILE: str = "patterns.{project_id}.yaml"
PROJECT_CALENDAR_FILE: str = "calendar.{project_id}.yaml"
