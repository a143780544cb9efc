from typing import Optional

from domain.location import Level, Node, normalize_name
from domain.location_repository import LocationRepository


class MemoryLocationRepositoryImpl(LocationRepository):
    """Dict-backed repository for tests and dry runs."""

    def __init__(self):
        super().__init__()
        self.nodes = {level: dict[int, Node]() for level in Level}
        self.translations = dict[tuple[Level, int], dict[str, str]]()
        self._next_id = {level: 1 for level in Level}

    def _siblings(self, level: Level, parent_id: Optional[int]) -> list[Node]:
        return [
            n for n in self.nodes[level].values()
            if not n.is_deleted and (level.parent is None or n.parent_id == parent_id)
        ]

    async def find_by_name(self, level, name, parent_id):
        key = normalize_name(name)
        for node in self._siblings(level, parent_id):
            if normalize_name(node.name) == key:
                return node
        return None

    async def create_node(self, level, name, parent_id):
        existing = await self.find_by_name(level, name, parent_id)
        if existing:
            return existing
        if level.parent is not None:
            parent = self.nodes[level.parent].get(parent_id)
            if parent is None or parent.is_deleted:
                raise ValueError(f"{level.parent.value} {parent_id} does not exist")
        node_id = self._next_id[level]
        self._next_id[level] += 1
        node = Node(
            id=node_id,
            level=level,
            name=" ".join(name.split()),
            parent_id=parent_id if level.parent is not None else None,
        )
        self.nodes[level][node_id] = node
        return node

    async def get_node(self, level, node_id):
        node = self.nodes[level].get(node_id)
        return node if node and not node.is_deleted else None

    async def list_children(self, level, parent_id):
        return self._siblings(level, parent_id)

    async def count_active_children(self, level, parent_id):
        return len(self._siblings(level, parent_id))

    async def translation_exists(self, level, node_id, language):
        return language in self.translations.get((level, node_id), {})

    async def existing_languages(self, level, node_id):
        return set(self.translations.get((level, node_id), {}))

    async def create_translation(self, level, node_id, language, name):
        names = self.translations.setdefault((level, node_id), {})
        if language in names:
            return False
        names[language] = name.strip()
        return True

    def mark_deleted(self, level: Level, node_id: int):
        """Soft-delete, as an administrator would."""
        self.nodes[level][node_id].is_deleted = True
