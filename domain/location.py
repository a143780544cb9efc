"""Location hierarchy -- levels and nodes shared by the populate engine and storage."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Level(str, Enum):
    """The four fixed depths of the hierarchy, top to bottom."""

    REGION = "region"
    SUB_REGION = "sub_region"
    LOCAL_AREA = "local_area"
    SETTLEMENT = "settlement"

    @property
    def depth(self) -> int:
        return _ORDER.index(self)

    @property
    def child(self) -> Optional["Level"]:
        idx = self.depth + 1
        return _ORDER[idx] if idx < len(_ORDER) else None

    @property
    def parent(self) -> Optional["Level"]:
        return _ORDER[self.depth - 1] if self.depth > 0 else None

    @classmethod
    def parse(cls, value: str) -> "Level":
        """Accept "sub_region", "sub-region" or "SUB_REGION"."""
        try:
            return cls(value.strip().lower().replace("-", "_"))
        except ValueError:
            raise ValueError(f"Unknown level: {value!r}") from None


_ORDER = [Level.REGION, Level.SUB_REGION, Level.LOCAL_AREA, Level.SETTLEMENT]


@dataclass
class Node:
    id: int
    level: Level
    name: str
    parent_id: Optional[int] = None
    is_deleted: bool = False


def normalize_name(name: str) -> str:
    """Key used for case-insensitive sibling comparison."""
    return " ".join(name.split()).casefold()
