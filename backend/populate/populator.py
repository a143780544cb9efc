"""
Hierarchy populator -- walks Region -> SubRegion -> LocalArea -> Settlement.

For every node the walk does:
    check complete -> (skip) -> recurse
    check complete -> fetch -> parse -> persist names -> translate -> persist
                      localized names -> recurse

External calls are strictly sequential with a fixed pause before each one.
A failed fetch below the root only drops that branch; the walk carries on
with the siblings and the failure is recorded on the job.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, Sequence

from domain.job import BranchFailure, Job
from domain.location import Level, Node
from domain.location_repository import LocationRepository

from . import response_parser
from .completeness import CompletenessChecker
from .errors import DataSourceError, EmptyListingError, NodeNotFound, RootResolutionError
from .settings import PopulateSettings, normalize_languages
from .translator import Translator

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Job], Awaitable[None]]

# Errors that drop a branch instead of failing the job
BRANCH_ERRORS = (DataSourceError, EmptyListingError)


@dataclass
class PopulateStats:
    created: dict = field(default_factory=lambda: {level.value: 0 for level in Level})
    translations_created: int = 0
    external_calls: int = 0
    skipped_parents: int = 0
    translation_failures: int = 0
    failures: list[BranchFailure] = field(default_factory=list)


@dataclass
class RetryResult:
    node: Node
    children: list[Node]
    stats: PopulateStats


class _Run:
    """Mutable state of one walk: the job being reported on and its stats."""

    def __init__(self, job: Job, on_progress: Optional[ProgressCallback]):
        self.job = job
        self.languages = list(job.target_languages)
        self.stats = PopulateStats()
        self._on_progress = on_progress

    async def report(self):
        if self._on_progress is not None:
            await self._on_progress(self.job)

    async def step(self, description: str):
        self.job.progress.current_step = description
        await self.report()

    def count_call(self):
        self.stats.external_calls += 1
        self.job.progress.external_calls += 1

    def count_processed(self, level: Level, amount: int = 1):
        progress = self.job.progress
        if level is Level.SUB_REGION:
            progress.level1_processed += amount
        elif level is Level.LOCAL_AREA:
            progress.level2_processed += amount
        elif level is Level.SETTLEMENT:
            progress.level3_processed += amount

    def fail(self, level: Level, path: Sequence[str], error: Exception):
        failure = BranchFailure(level=level.value, name=" / ".join(path), reason=str(error) or error.__class__.__name__)
        self.stats.failures.append(failure)
        self.job.failures.append(failure)


class HierarchyPopulator:
    def __init__(
        self,
        repository: LocationRepository,
        client,
        settings: Optional[PopulateSettings] = None,
        translator: Optional[Translator] = None,
        checker: Optional[CompletenessChecker] = None,
    ):
        self.repository = repository
        self.client = client
        self.settings = settings or PopulateSettings()
        self.translator = translator or Translator(client)
        self.checker = checker or CompletenessChecker(repository)

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def populate(self, job: Job, on_progress: Optional[ProgressCallback] = None) -> PopulateStats:
        """Walk the whole hierarchy under ``job.root_name``. Raises RootResolutionError."""
        run = _Run(job, on_progress)
        root_name = " ".join(job.root_name.split())

        await run.step(f"Resolving region: {root_name}")
        try:
            region = await self.repository.create_node(Level.REGION, root_name, None)
        except Exception as e:
            raise RootResolutionError(f"Could not resolve region {root_name!r}: {e}") from e

        await self._ensure_translations(run, Level.REGION, [region], self.settings.country)
        covered = await self.repository.existing_languages(Level.REGION, region.id)
        for lang in run.languages:
            if lang in covered and lang not in job.progress.languages_completed:
                job.progress.languages_completed.append(lang)
        await run.report()

        try:
            await self._expand(run, region, Level.SUB_REGION, [region.name])
        except BRANCH_ERRORS as e:
            _, plural = self.settings.level_labels[Level.SUB_REGION]
            raise RootResolutionError(f"Could not list {plural} for {region.name}: {e}") from e

        logger.info(
            "Populated %s: created %s, %d translations, %d external calls, %d branch failures",
            region.name,
            run.stats.created,
            run.stats.translations_created,
            run.stats.external_calls,
            len(run.stats.failures),
        )
        return run.stats

    async def repopulate_children(
        self,
        level: Level,
        node_id: int,
        languages: Optional[Sequence[str]] = None,
        recursive: bool = False,
    ) -> RetryResult:
        """
        Fetch the children of one existing node again, ignoring the
        completeness check for that node. With ``recursive`` the walk continues
        below the children with the usual skip rules.
        """
        if level.child is None:
            raise ValueError(f"{level.value} has no child level")
        node = await self.repository.get_node(level, node_id)
        if node is None:
            raise NodeNotFound(f"{level.value} {node_id} not found")

        path = await self._path_to(node)
        langs = normalize_languages(languages, self.settings.languages)
        job = Job(id=f"retry_{level.value}_{node_id}", root_name=path[0], target_languages=langs)
        run = _Run(job, None)

        children = await self._resolve_children(run, node, level.child, path, force=True)
        if recursive:
            await self._walk_children(run, children, level.child, path)
        return RetryResult(node=node, children=children, stats=run.stats)

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    async def _expand(self, run: _Run, parent: Node, level: Level, path: list[str]):
        children = await self._resolve_children(run, parent, level, path)
        if level is Level.SUB_REGION:
            run.job.progress.level1_total = len(children)
        await self._walk_children(run, children, level, path)

    async def _walk_children(self, run: _Run, children: list[Node], level: Level, path: list[str]):
        if level.child is None:
            run.count_processed(level, len(children))
            await run.report()
            return

        singular, _ = self.settings.level_labels[level]
        limit = self.settings.descend_limit(level)
        for index, child in enumerate(children):
            run.count_processed(level)
            await run.step(f"Processing {singular}: {child.name}")
            if limit is not None and index >= limit:
                continue

            child_path = path + [child.name]
            try:
                await self._expand(run, child, level.child, child_path)
            except BRANCH_ERRORS as e:
                logger.warning("Skipping %s %s: %s", singular, " / ".join(child_path), e)
                run.fail(level, child_path, e)

    async def _resolve_children(
        self,
        run: _Run,
        parent: Node,
        level: Level,
        path: list[str],
        force: bool = False,
    ) -> list[Node]:
        _, plural = self.settings.level_labels[level]
        if not force:
            existing = await self.checker.complete_children(level, parent.id, run.languages)
            if existing is not None:
                run.stats.skipped_parents += 1
                logger.info(
                    "All %d %s of %s already complete, skipping AI call",
                    len(existing), plural, parent.name,
                )
                return existing

        stored = await self.repository.list_children(level, parent.id)
        known_ids = {n.id for n in stored}

        await run.step(f"Fetching {plural} for {' / '.join(path)}")
        names = await self._fetch_names(run, level, path)

        children: list[Node] = []
        seen = set()
        for name in names:
            node = await self.repository.create_node(level, name, parent.id)
            if node.id in seen:
                continue
            seen.add(node.id)
            children.append(node)
            if node.id not in known_ids:
                run.stats.created[level.value] += 1

        # Stored children the source did not mention are kept and walked too
        for node in stored:
            if node.id not in seen:
                seen.add(node.id)
                children.append(node)

        await self._ensure_translations(run, level, children, self._context(path))
        return children

    async def _fetch_names(self, run: _Run, level: Level, path: list[str]) -> list[str]:
        cap = self.settings.cap_for(level)
        attempts = max(1, self.settings.fetch_attempts)
        for attempt in range(1, attempts + 1):
            await self._pause()
            run.count_call()
            try:
                raw = await self.client.fetch_children(level, path, cap, labels=self.settings.level_labels)
            except DataSourceError as e:
                logger.warning(
                    "Attempt %d/%d to fetch %s for %s failed: %s",
                    attempt, attempts, level.value, " / ".join(path), e,
                )
                if attempt == attempts:
                    raise
                continue

            names = response_parser.parse_child_names(raw, level, self.settings.level_labels)[:cap]
            if not names:
                raise EmptyListingError(f"no usable {level.value} names in response")
            return names
        return []

    async def _ensure_translations(self, run: _Run, level: Level, nodes: Sequence[Node], context: str):
        """Request only the languages each node is missing, batched per missing-set."""
        groups: dict[tuple, list[Node]] = {}
        for node in nodes:
            missing = await self.checker.missing_languages(level, node.id, run.languages)
            if missing:
                groups.setdefault(tuple(missing), []).append(node)

        size = max(1, self.settings.translation_batch_size)
        for missing, group in groups.items():
            for start in range(0, len(group), size):
                batch = group[start:start + size]
                await self._pause()
                run.count_call()
                result = await self.translator.translate([n.name for n in batch], list(missing), context)
                if result is None:
                    run.stats.translation_failures += 1
                    continue
                for node in batch:
                    for lang, value in result.get(node.name, {}).items():
                        if await self.repository.create_translation(level, node.id, lang, value):
                            run.stats.translations_created += 1

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _pause(self):
        if self.settings.request_delay > 0:
            await asyncio.sleep(self.settings.request_delay)

    def _context(self, path: Sequence[str]) -> str:
        parts = list(reversed(path))
        if self.settings.country:
            parts.append(self.settings.country)
        return ", ".join(parts)

    async def _path_to(self, node: Node) -> list[str]:
        names = [node.name]
        current = node
        while current.level.parent is not None:
            parent = await self.repository.get_node(current.level.parent, current.parent_id)
            if parent is None:
                raise NodeNotFound(f"parent of {current.level.value} {current.id} not found")
            names.insert(0, parent.name)
            current = parent
        return names


