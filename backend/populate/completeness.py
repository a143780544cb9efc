"""Decides whether a level under a parent already satisfies the requested languages."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from domain.location import Level, Node
from domain.location_repository import LocationRepository

logger = logging.getLogger(__name__)


class CompletenessChecker:
    def __init__(self, repository: LocationRepository):
        self.repository = repository

    async def missing_languages(self, level: Level, node_id: int, languages: Sequence[str]) -> list[str]:
        have = await self.repository.existing_languages(level, node_id)
        return [lang for lang in languages if lang not in have]

    async def complete_children(
        self,
        level: Level,
        parent_id: int,
        languages: Sequence[str],
    ) -> Optional[list[Node]]:
        """
        Existing active children of ``parent_id`` when there is at least one and
        every one of them has a localized name in every language, else None.
        """
        children = await self.repository.list_children(level, parent_id)
        if not children:
            return None
        for child in children:
            if await self.missing_languages(level, child.id, languages):
                return None
        return children
