"""
Populate one region from the command line.

Usage:
    python -m backend.populate Telangana --languages te,hi
    python -m backend.populate Telangana --remote http://localhost:8000
    python -m backend.populate Telangana --status

Locally the job runs in this process against DATABASE_URL; with --remote it is
started on a running API server and followed until it finishes.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import config_env


def _parse_languages(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _print_job(job: dict):
    progress = job.get("progress", {})
    print(
        f"[{job.get('status')}] {progress.get('current_step', '')} | "
        f"sub-regions {progress.get('level1_processed', 0)}/{progress.get('level1_total', 0)}, "
        f"local areas {progress.get('level2_processed', 0)}, "
        f"settlements {progress.get('level3_processed', 0)}, "
        f"calls {progress.get('external_calls', 0)}"
    )


async def run_local(root_name: str, languages: list[str]) -> int:
    from backend.database import init_db
    from backend.populate.bootstrap import build_job_manager
    from backend.populate.errors import JobConflictError

    await init_db()
    manager = build_job_manager()
    try:
        job = await manager.start_job(root_name, languages)
    except JobConflictError as e:
        print(f"{e} (job {e.job_id}, {e.status})")
        return 1

    print(f"Started job {job.id} for {job.root_name} ({', '.join(job.target_languages)})")
    job = await manager.wait(job.id)

    progress = job.progress
    print("=" * 60)
    print(f"Status:            {job.status.value}")
    print(f"Sub-regions:       {progress.level1_processed}/{progress.level1_total}")
    print(f"Local areas:       {progress.level2_processed}")
    print(f"Settlements:       {progress.level3_processed}")
    print(f"External calls:    {progress.external_calls}")
    print(f"Languages covered: {', '.join(progress.languages_completed) or '-'}")
    if job.failures:
        print(f"Skipped branches:  {len(job.failures)}")
        for failure in job.failures:
            print(f"  - {failure.level}: {failure.name} ({failure.reason})")
    if job.error:
        print(f"Error:             {job.error}")
    print("=" * 60)
    return 0 if job.status.value == "completed" else 1


async def run_remote(base_url: str, root_name: str, languages: list[str], poll_interval: float) -> int:
    from services.api_client import LocationsAPI, LocationsAPIError

    async with LocationsAPI(base_url) as api:
        try:
            accepted = await api.start_population(root_name, languages)
        except LocationsAPIError as e:
            print(f"Could not start population: {e}")
            return 1
        print(f"Started job {accepted['job_id']} on {base_url}")
        job = await api.wait_for_job(accepted["job_id"], poll_interval=poll_interval, on_update=_print_job)

    if job.get("error"):
        print(f"Error: {job['error']}")
    return 0 if job.get("status") == "completed" else 1


async def show_status(root_name: str) -> int:
    from backend.database import init_db
    from backend.populate.coverage import hierarchy_coverage
    from data.sql_location_repository_impl import SqlLocationRepositoryImpl

    await init_db()
    report = await hierarchy_coverage(SqlLocationRepositoryImpl(), root_name)
    if report is None:
        print(f"Region not found: {root_name}")
        return 1
    print(f"{report.region.name} (languages: {', '.join(report.region_languages) or '-'})")
    for level, count in report.totals.items():
        print(f"  {level:<12} {count}")
    print(f"  sub-regions without local areas: {len(report.sub_regions_without_local_areas)}")
    print(f"  local areas without settlements: {len(report.local_areas_without_settlements)}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="python -m backend.populate")
    parser.add_argument("root_name", help="Region to populate, e.g. Telangana")
    parser.add_argument(
        "--languages",
        type=_parse_languages,
        default=[],
        help="Comma-separated language codes (default: AUTO_LANGUAGES)",
    )
    parser.add_argument("--remote", metavar="URL", help="Run on an API server instead of in-process")
    parser.add_argument("--poll-interval", type=float, default=5.0)
    parser.add_argument("--status", action="store_true", help="Only print stored coverage for the region")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config_env.LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.status:
        return asyncio.run(show_status(args.root_name))
    if args.remote:
        return asyncio.run(run_remote(args.remote, args.root_name, args.languages, args.poll_interval))
    return asyncio.run(run_local(args.root_name, args.languages))


if __name__ == "__main__":
    sys.exit(main())
