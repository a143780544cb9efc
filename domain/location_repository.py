from abc import ABC, abstractmethod
from typing import Optional

from domain.location import Level, Node


class LocationRepository(ABC):
    """Persistence gateway for hierarchy nodes and their localized names.

    Every query ignores soft-deleted nodes. ``create_node`` and
    ``create_translation`` are create-if-missing: an existing row is never an
    error and is never overwritten.
    """

    @abstractmethod
    async def find_by_name(self, level: Level, name: str, parent_id: Optional[int]) -> Optional[Node]:
        """Case-insensitive lookup among the active children of ``parent_id``."""

    @abstractmethod
    async def create_node(self, level: Level, name: str, parent_id: Optional[int]) -> Node:
        """Return the existing active sibling with this name, or create one."""

    @abstractmethod
    async def get_node(self, level: Level, node_id: int) -> Optional[Node]:
        pass

    @abstractmethod
    async def list_children(self, level: Level, parent_id: int) -> list[Node]:
        """Active nodes of ``level`` under ``parent_id`` in insertion order."""

    @abstractmethod
    async def count_active_children(self, level: Level, parent_id: int) -> int:
        pass

    @abstractmethod
    async def translation_exists(self, level: Level, node_id: int, language: str) -> bool:
        pass

    @abstractmethod
    async def existing_languages(self, level: Level, node_id: int) -> set[str]:
        pass

    @abstractmethod
    async def create_translation(self, level: Level, node_id: int, language: str, name: str) -> bool:
        """Store a localized name. Returns False when one already existed."""
