"""SQLAlchemy-backed location repository (PostgreSQL in production, SQLite locally)."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.models import LEVEL_MODELS
from domain.location import Level, Node, normalize_name
from domain.location_repository import LocationRepository

logger = logging.getLogger(__name__)


def _to_node(level: Level, row) -> Node:
    return Node(
        id=row.id,
        level=level,
        name=row.name,
        parent_id=getattr(row, "parent_id", None),
        is_deleted=bool(row.is_deleted),
    )


class SqlLocationRepositoryImpl(LocationRepository):
    def __init__(self, session_factory: async_sessionmaker | None = None):
        if session_factory is None:
            from backend.database import async_session

            session_factory = async_session
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    @staticmethod
    def _active_siblings(level: Level, parent_id: Optional[int]):
        model, _ = LEVEL_MODELS[level]
        stmt = select(model).where(model.is_deleted.is_(False))
        if level.parent is not None:
            stmt = stmt.where(model.parent_id == parent_id)
        return stmt

    async def _find(self, session: AsyncSession, level: Level, name: str, parent_id: Optional[int]):
        model, _ = LEVEL_MODELS[level]
        stmt = (
            self._active_siblings(level, parent_id)
            .where(model.name_key == normalize_name(name))
            .order_by(model.id)
            .limit(1)
        )
        return (await session.execute(stmt)).scalar_one_or_none()

    async def find_by_name(self, level: Level, name: str, parent_id: Optional[int]) -> Optional[Node]:
        async with self._session_factory() as session:
            row = await self._find(session, level, name, parent_id)
            return _to_node(level, row) if row else None

    async def create_node(self, level: Level, name: str, parent_id: Optional[int]) -> Node:
        model, _ = LEVEL_MODELS[level]
        name = " ".join(name.split())
        async with self._session_factory() as session:
            existing = await self._find(session, level, name, parent_id)
            if existing:
                return _to_node(level, existing)

            fields = {"name": name, "name_key": normalize_name(name), "is_deleted": False}
            if level.parent is not None:
                if parent_id is None:
                    raise ValueError(f"{level.value} requires a parent")
                parent_model, _ = LEVEL_MODELS[level.parent]
                parent = await session.get(parent_model, parent_id)
                if parent is None or parent.is_deleted:
                    raise ValueError(f"{level.parent.value} {parent_id} does not exist")
                fields["parent_id"] = parent_id

            row = model(**fields)
            session.add(row)
            try:
                await session.flush()
                node = _to_node(level, row)
                await session.commit()
            except IntegrityError:
                # Lost a race with a concurrent writer -- return their row
                await session.rollback()
                existing = await self._find(session, level, name, parent_id)
                if existing is None:
                    raise
                return _to_node(level, existing)

            logger.debug("Created %s %r (parent=%s)", level.value, name, parent_id)
            return node

    async def get_node(self, level: Level, node_id: int) -> Optional[Node]:
        model, _ = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            row = await session.get(model, node_id)
            if row is None or row.is_deleted:
                return None
            return _to_node(level, row)

    async def list_children(self, level: Level, parent_id: int) -> list[Node]:
        model, _ = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            stmt = self._active_siblings(level, parent_id).order_by(model.id)
            rows = (await session.execute(stmt)).scalars().all()
            return [_to_node(level, r) for r in rows]

    async def count_active_children(self, level: Level, parent_id: int) -> int:
        model, _ = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            stmt = (
                select(func.count(model.id))
                .where(model.parent_id == parent_id)
                .where(model.is_deleted.is_(False))
            )
            return (await session.execute(stmt)).scalar() or 0

    # ------------------------------------------------------------------
    # Localized names
    # ------------------------------------------------------------------

    async def translation_exists(self, level: Level, node_id: int, language: str) -> bool:
        _, translation = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            stmt = (
                select(func.count(translation.id))
                .where(translation.node_id == node_id)
                .where(translation.language == language)
            )
            return ((await session.execute(stmt)).scalar() or 0) > 0

    async def existing_languages(self, level: Level, node_id: int) -> set[str]:
        _, translation = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            stmt = select(translation.language).where(translation.node_id == node_id)
            return set((await session.execute(stmt)).scalars().all())

    async def create_translation(self, level: Level, node_id: int, language: str, name: str) -> bool:
        _, translation = LEVEL_MODELS[level]
        async with self._session_factory() as session:
            stmt = (
                select(translation.id)
                .where(translation.node_id == node_id)
                .where(translation.language == language)
            )
            if (await session.execute(stmt)).first() is not None:
                return False

            session.add(translation(node_id=node_id, language=language, name=name.strip()))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
            return True
