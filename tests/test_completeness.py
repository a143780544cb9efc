"""Tests for the skip rules that make re-runs cheap."""

from backend.populate.completeness import CompletenessChecker
from domain.location import Level


async def seed(repository):
    region = await repository.create_node(Level.REGION, "Telangana", None)
    nalgonda = await repository.create_node(Level.SUB_REGION, "Nalgonda", region.id)
    warangal = await repository.create_node(Level.SUB_REGION, "Warangal", region.id)
    return region, nalgonda, warangal


async def test_missing_languages_in_request_order(repository):
    region, _, _ = await seed(repository)
    await repository.create_translation(Level.REGION, region.id, "hi", "तेलंगाना")

    missing = await CompletenessChecker(repository).missing_languages(Level.REGION, region.id, ["te", "hi", "ta"])

    assert missing == ["te", "ta"]


async def test_no_children_is_incomplete(repository):
    region = await repository.create_node(Level.REGION, "Telangana", None)

    assert await CompletenessChecker(repository).complete_children(Level.SUB_REGION, region.id, ["te"]) is None


async def test_one_untranslated_child_is_incomplete(repository):
    region, nalgonda, warangal = await seed(repository)
    await repository.create_translation(Level.SUB_REGION, nalgonda.id, "te", "నల్గొండ")

    assert await CompletenessChecker(repository).complete_children(Level.SUB_REGION, region.id, ["te"]) is None


async def test_all_children_translated(repository):
    region, nalgonda, warangal = await seed(repository)
    await repository.create_translation(Level.SUB_REGION, nalgonda.id, "te", "నల్గొండ")
    await repository.create_translation(Level.SUB_REGION, warangal.id, "te", "వరంగల్")

    children = await CompletenessChecker(repository).complete_children(Level.SUB_REGION, region.id, ["te"])

    assert [c.name for c in children] == ["Nalgonda", "Warangal"]


async def test_deleted_children_not_considered(repository):
    region, nalgonda, warangal = await seed(repository)
    await repository.create_translation(Level.SUB_REGION, nalgonda.id, "te", "నల్గొండ")
    repository.mark_deleted(Level.SUB_REGION, warangal.id)

    children = await CompletenessChecker(repository).complete_children(Level.SUB_REGION, region.id, ["te"])

    assert [c.name for c in children] == ["Nalgonda"]
