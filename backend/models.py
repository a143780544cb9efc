"""
SQLAlchemy ORM models -- location hierarchy schema.

Tables
------
regions                   -- top-level administrative regions (states)
sub_regions               -- districts, parent = regions
local_areas               -- mandals / tehsils, parent = sub_regions
settlements               -- villages, parent = local_areas
*_translations            -- one localized name per (node, language)
populate_jobs             -- population job history (JOB_STORE=database)

Each node stores name_key (see domain.location.normalize_name); active siblings
are unique on it.
"""

from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from domain.location import Level

from .database import Base

# ---------------------------------------------------------------------------
# Hierarchy nodes
# ---------------------------------------------------------------------------

class Region(Base):
    __tablename__ = "regions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=func.now())

    translations = relationship("RegionTranslation", back_populates="node")

    __table_args__ = (
        Index(
            "uq_regions_name_key", "name_key",
            unique=True,
            sqlite_where=is_deleted.is_(False),
            postgresql_where=is_deleted.is_(False),
        ),
    )


class SubRegion(Base):
    __tablename__ = "sub_regions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("regions.id"), nullable=False, index=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=func.now())

    translations = relationship("SubRegionTranslation", back_populates="node")

    __table_args__ = (
        Index(
            "uq_sub_regions_parent_name_key", "parent_id", "name_key",
            unique=True,
            sqlite_where=is_deleted.is_(False),
            postgresql_where=is_deleted.is_(False),
        ),
    )


class LocalArea(Base):
    __tablename__ = "local_areas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("sub_regions.id"), nullable=False, index=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=func.now())

    translations = relationship("LocalAreaTranslation", back_populates="node")

    __table_args__ = (
        Index(
            "uq_local_areas_parent_name_key", "parent_id", "name_key",
            unique=True,
            sqlite_where=is_deleted.is_(False),
            postgresql_where=is_deleted.is_(False),
        ),
    )


class Settlement(Base):
    __tablename__ = "settlements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    name_key = Column(String(255), nullable=False)
    parent_id = Column(Integer, ForeignKey("local_areas.id"), nullable=False, index=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=func.now())

    translations = relationship("SettlementTranslation", back_populates="node")

    __table_args__ = (
        Index(
            "uq_settlements_parent_name_key", "parent_id", "name_key",
            unique=True,
            sqlite_where=is_deleted.is_(False),
            postgresql_where=is_deleted.is_(False),
        ),
    )


# ---------------------------------------------------------------------------
# Localized names (first write wins)
# ---------------------------------------------------------------------------

class RegionTranslation(Base):
    __tablename__ = "region_translations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(Integer, ForeignKey("regions.id"), nullable=False, index=True)
    language = Column(String(16), nullable=False)
    name = Column(String(255), nullable=False)

    node = relationship("Region", back_populates="translations")

    __table_args__ = (UniqueConstraint("node_id", "language"),)


class SubRegionTranslation(Base):
    __tablename__ = "sub_region_translations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(Integer, ForeignKey("sub_regions.id"), nullable=False, index=True)
    language = Column(String(16), nullable=False)
    name = Column(String(255), nullable=False)

    node = relationship("SubRegion", back_populates="translations")

    __table_args__ = (UniqueConstraint("node_id", "language"),)


class LocalAreaTranslation(Base):
    __tablename__ = "local_area_translations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(Integer, ForeignKey("local_areas.id"), nullable=False, index=True)
    language = Column(String(16), nullable=False)
    name = Column(String(255), nullable=False)

    node = relationship("LocalArea", back_populates="translations")

    __table_args__ = (UniqueConstraint("node_id", "language"),)


class SettlementTranslation(Base):
    __tablename__ = "settlement_translations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    node_id = Column(Integer, ForeignKey("settlements.id"), nullable=False, index=True)
    language = Column(String(16), nullable=False)
    name = Column(String(255), nullable=False)

    node = relationship("Settlement", back_populates="translations")

    __table_args__ = (UniqueConstraint("node_id", "language"),)


# (node model, translation model) per level
LEVEL_MODELS = {
    Level.REGION: (Region, RegionTranslation),
    Level.SUB_REGION: (SubRegion, SubRegionTranslation),
    Level.LOCAL_AREA: (LocalArea, LocalAreaTranslation),
    Level.SETTLEMENT: (Settlement, SettlementTranslation),
}


# ---------------------------------------------------------------------------
# Population jobs
# ---------------------------------------------------------------------------

class PopulateJobRecord(Base):
    __tablename__ = "populate_jobs"

    id = Column(String(64), primary_key=True)
    root_name = Column(String(255), nullable=False)
    root_key = Column(String(255), nullable=False, index=True)
    target_languages = Column(Text, default="[]")
    status = Column(String(20), nullable=False, index=True)
    progress_json = Column(Text, default="{}")
    failures_json = Column(Text, default="[]")
    error = Column(Text, nullable=True)
    started_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=True)
