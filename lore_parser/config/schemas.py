"""
JSON Schemas for the YAML rules documents.

Three schemas:
1. ENTITIES_SCHEMA  — kind label → dictionary surface forms
2. PATTERNS_SCHEMA  — regex rules with score, constraints and hints
3. CALENDAR_SCHEMA  — month / epoch / season vocabularies

Unknown keys are tolerated everywhere so that newer rule files still load.
"""

_STRING_LIST: dict = {
    "type": ["array", "null"],
    "items": {"type": "string"},
}

# =============================================================================
# 1. Entities (dictionary matcher)
# =============================================================================
ENTITIES_SCHEMA: dict = {
    "type": "object",
    "required": ["kinds"],
    "properties": {
        "kinds": {
            "type": "object",
            "description": "Kind label (Person, Place, ... or custom) → surface forms",
            "additionalProperties": {
                "anyOf": [
                    {"type": "null"},
                    {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Shorthand: the list is the gazetteer",
                    },
                    {
                        "type": "object",
                        "properties": {
                            "gazetteer": _STRING_LIST,
                            "titles": _STRING_LIST,
                            "honorifics": _STRING_LIST,
                        },
                    },
                ],
            },
        },
    },
}

# =============================================================================
# 2. Patterns (regex rules)
# =============================================================================
PATTERNS_SCHEMA: dict = {
    "type": "object",
    "required": ["patterns"],
    "properties": {
        "patterns": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["id", "kind", "regex", "score"],
                "properties": {
                    "id": {"type": "string", "minLength": 1},
                    "kind": {"type": "string", "minLength": 1},
                    "regex": {"type": "string", "minLength": 1},
                    "score": {"type": "number", "minimum": 0, "maximum": 1},
                    "constraints": {
                        "type": ["object", "null"],
                        "properties": {
                            "min_len": {"type": ["integer", "null"], "minimum": 0},
                            "max_tokens": {"type": ["integer", "null"], "minimum": 0},
                            "disallow": _STRING_LIST,
                        },
                    },
                    "hints": {
                        "type": ["object", "null"],
                        "properties": {
                            "left": _STRING_LIST,
                            "right": _STRING_LIST,
                        },
                    },
                },
            },
        },
    },
}

# =============================================================================
# 3. Calendar (date pattern vocabularies)
# =============================================================================
CALENDAR_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "months": _STRING_LIST,
        "epochs": _STRING_LIST,
        "seasons": _STRING_LIST,
        "day_suffixes": _STRING_LIST,
    },
}
