"""
Entity kinds — closed enum plus an open custom variant.

Rules files may use labels outside the built-in set (e.g. "Deity"); those
become CustomKind values instead of being rejected.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Union


class EntityKind(str, Enum):
    """Built-in entity kinds."""

    PERSON = "Person"
    PLACE = "Place"
    FACTION = "Faction"
    ITEM = "Item"
    CREATURE = "Creature"
    MAGIC = "Magic"
    DATE = "Date"


@dataclass(frozen=True)
class CustomKind:
    """A kind label not in EntityKind, carried by name."""

    name: str

    def __repr__(self) -> str:
        return f"Custom({self.name})"


Kind = Union[EntityKind, CustomKind]


def parse_kind(label: str) -> Kind:
    """Map a configuration label to a Kind. Matching is case-sensitive."""
    try:
        return EntityKind(label)
    except ValueError:
        return CustomKind(label)


def kind_label(kind: Kind) -> str:
    if isinstance(kind, CustomKind):
        return kind.name
    return kind.value
