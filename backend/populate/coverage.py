"""Coverage report -- what is stored under a region and where the gaps are."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from domain.location import Level, Node
from domain.location_repository import LocationRepository


@dataclass
class CoverageReport:
    region: Node
    region_languages: list[str]
    totals: dict = field(default_factory=dict)
    # [{id, name, parent_name}] -- candidates for a targeted retry
    sub_regions_without_local_areas: list[dict] = field(default_factory=list)
    local_areas_without_settlements: list[dict] = field(default_factory=list)


async def hierarchy_coverage(repository: LocationRepository, root_name: str) -> Optional[CoverageReport]:
    """Counts of active nodes per level under ``root_name``; None if the region is unknown."""
    region = await repository.find_by_name(Level.REGION, root_name, None)
    if region is None:
        return None

    report = CoverageReport(
        region=region,
        region_languages=sorted(await repository.existing_languages(Level.REGION, region.id)),
        totals={level.value: 0 for level in (Level.SUB_REGION, Level.LOCAL_AREA, Level.SETTLEMENT)},
    )

    sub_regions = await repository.list_children(Level.SUB_REGION, region.id)
    report.totals[Level.SUB_REGION.value] = len(sub_regions)
    for sub_region in sub_regions:
        local_areas = await repository.list_children(Level.LOCAL_AREA, sub_region.id)
        report.totals[Level.LOCAL_AREA.value] += len(local_areas)
        if not local_areas:
            report.sub_regions_without_local_areas.append(
                {"id": sub_region.id, "name": sub_region.name, "parent_name": region.name}
            )
        for local_area in local_areas:
            count = await repository.count_active_children(Level.SETTLEMENT, local_area.id)
            report.totals[Level.SETTLEMENT.value] += count
            if count == 0:
                report.local_areas_without_settlements.append(
                    {"id": local_area.id, "name": local_area.name, "parent_name": sub_region.name}
                )
    return report
