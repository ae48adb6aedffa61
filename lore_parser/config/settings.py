"""
Environment settings loaded from .env file.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# --- Rules ---
_DEFAULT_RULES_DIR = Path(__file__).resolve().parents[1] / "rules"
LORE_RULES_DIR: Path = Path(os.getenv("LORE_RULES_DIR", str(_DEFAULT_RULES_DIR)))

# --- Parsing ---
LORE_DEFAULT_FUZZY: bool = os.getenv("LORE_DEFAULT_FUZZY", "true").lower() == "true"

# --- Project parser cache ---
LORE_CACHE_SINGLE_FLIGHT: bool = os.getenv("LORE_CACHE_SINGLE_FLIGHT", "false").lower() == "true"

# --- Logging ---
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
