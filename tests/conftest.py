"""
Root conftest.py -- env vars, scripted data source, shared fixtures.

Everything here runs without network access: the LLM is replaced by
FakeSource, storage by the in-memory repository or a throwaway SQLite file.
"""

import json
import os
import sys

import pytest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Read at import time by config_env / backend.database
os.environ.setdefault("DATABASE_URL_FALLBACK", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("POPULATE_REQUEST_DELAY", "0")
os.environ.setdefault("JOB_STORE", "memory")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

from backend.database import init_db  # noqa: E402
from backend.populate.populator import HierarchyPopulator  # noqa: E402
from backend.populate.settings import PopulateSettings  # noqa: E402
from data.memory_job_store_impl import MemoryJobStoreImpl  # noqa: E402
from data.memory_location_repository_impl import MemoryLocationRepositoryImpl  # noqa: E402


# ============================================================================
# FAKE DATA SOURCE
# ============================================================================

def _flatten(tree, path=()):
    """{"A": {"B": ["c", "d"]}} -> {("A",): ["B"], ("A", "B"): ["c", "d"]}"""
    listing = {}
    if isinstance(tree, dict):
        for name, subtree in tree.items():
            listing.setdefault(path, []).append(name)
            listing.update(_flatten(subtree, path + (name,)))
    else:
        listing[path] = list(tree)
    return listing


def _prompt_json(prompt: str, prefix: str):
    for line in prompt.splitlines():
        if line.startswith(prefix):
            return json.loads(line[len(prefix):])
    raise AssertionError(f"{prefix!r} missing from prompt")


class FakeSource:
    """
    Stands in for DataSourceClient.

    ``tree`` maps region -> sub-region -> local area -> [settlements]. Children
    of a path not in the tree come back as an empty listing. ``errors`` maps a
    parent path to an exception raised on every fetch, ``errors_once`` to one
    raised on the first fetch only.
    """

    is_configured = True

    def __init__(self, tree=None, errors=None, errors_once=None):
        listing = _flatten(tree or {})
        listing.pop((), None)
        self.listing = listing
        self.errors = dict(errors or {})
        self.errors_once = dict(errors_once or {})
        self.translation_error = None
        # when set, listings wait until the event is set
        self.gate = None
        self.calls = []

    @property
    def fetch_calls(self):
        return [c[1] for c in self.calls if c[0] == "children"]

    @property
    def translate_calls(self):
        return [c[1:] for c in self.calls if c[0] == "translate"]

    async def fetch_children(self, level, path, max_items, labels=None):
        key = tuple(path)
        self.calls.append(("children", key))
        if self.gate is not None:
            await self.gate.wait()
        if key in self.errors:
            raise self.errors[key]
        if key in self.errors_once:
            raise self.errors_once.pop(key)
        names = self.listing.get(key, [])[:max_items]
        return json.dumps({"items": [{"name": n} for n in names]})

    async def complete(self, prompt, *, system_prompt=None):
        names = _prompt_json(prompt, "Names: ")
        languages = _prompt_json(prompt, "Language codes: ")
        self.calls.append(("translate", tuple(names), tuple(languages)))
        if self.translation_error is not None:
            raise self.translation_error
        return json.dumps({
            "translations": {n: {lang: f"{n} ({lang})" for lang in languages} for n in names}
        })


TREE = {
    "Telangana": {
        "Nalgonda": {
            "Miryalaguda": ["Alagadapa", "Avanthipuram"],
            "Devarakonda": ["Kondamallepally"],
        },
        "Warangal": {
            "Hanamkonda": ["Kazipet", "Madikonda"],
        },
    }
}


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def settings():
    return PopulateSettings(
        languages=["te", "hi"],
        country="India",
        request_delay=0,
        fetch_attempts=2,
        translation_batch_size=40,
        settlement_parent_limit=10,
    )


@pytest.fixture
def repository():
    return MemoryLocationRepositoryImpl()


@pytest.fixture
def job_store():
    return MemoryJobStoreImpl()


@pytest.fixture
def source():
    return FakeSource(TREE)


@pytest.fixture
def populator(repository, source, settings):
    return HierarchyPopulator(repository, source, settings)


@pytest.fixture
async def session_factory(tmp_path):
    """Fresh SQLite database per test, tables created."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'locations.db'}")
    await init_db(engine)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()
