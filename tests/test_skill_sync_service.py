"""Tests for the skill synchronizer: sync, cascades, visibility and orphan cleanup."""

from uuid import uuid4

import pytest
from sqlalchemy.orm.attributes import flag_modified

from app.core.exceptions import (
    EntityNotFoundException,
    InvalidEntityTypeException,
    SkillAlreadyLinkedException,
    SkillInUseException,
    SkillNotFoundException,
)
from app.repositories.skill_repository import SkillRepository


async def _skill(sync_service, db, name):
    return await sync_service.resolver.get_by_name(db, name)


# ─── sync_skills ───────────────────────────────────────────────


@pytest.mark.asyncio
async def test_sync_skills_is_idempotent(db, sync_service) -> None:
    """Syncing the same list twice should leave one source per skill."""
    ref = str(uuid4())

    first = await sync_service.sync_skills(db, ["React", "TypeScript"], "project", ref)
    second = await sync_service.sync_skills(db, ["React", "TypeScript"], "project", ref)

    assert [s.id for s in first] == [s.id for s in second]
    skills = await SkillRepository().list_all(db)
    assert len(skills) == 2
    for skill in skills:
        assert skill.sources == [{"type": "project", "reference_id": ref}]


@pytest.mark.asyncio
async def test_case_and_punctuation_variants_collapse(
    db, sync_service, make_project, make_certification, make_education
) -> None:
    """React, react and "React" from three entities should become one skill with three sources."""
    project = await make_project(db, ["React"])
    certification = await make_certification(db, [{"name": "react", "proficiency": "Advanced"}])
    education = await make_education(db, ['"React"'])

    skills = await SkillRepository().list_all(db)
    assert len(skills) == 1
    react = skills[0]
    assert react.name == "React"
    assert {(s["type"], s["reference_id"]) for s in react.sources} == {
        ("project", str(project.id)),
        ("certification", str(certification.id)),
        ("education", str(education.id)),
    }


@pytest.mark.asyncio
async def test_sync_dedupes_within_one_call_first_casing_wins(db, sync_service) -> None:
    skills = await sync_service.sync_skills(
        db, ["GraphQL", "graphql", "  GRAPHQL  "], "github", "bulk-import"
    )

    assert len(skills) == 1
    assert skills[0].name == "GraphQL"
    assert skills[0].name_key == "graphql"


@pytest.mark.asyncio
async def test_sync_skips_malformed_and_unresolvable_entries(db, sync_service) -> None:
    """None, numbers, blanks and ids of missing skills should be skipped silently."""
    skills = await sync_service.sync_skills(
        db,
        [None, 42, "", "   ", str(uuid4()), {"proficiency": "Expert"}, "Python"],
        "github",
        "bulk-import",
    )

    assert [s.name for s in skills] == ["Python"]


@pytest.mark.asyncio
async def test_sync_resolves_ids_and_objects_to_existing_skills(
    db, sync_service, make_manual_skill
) -> None:
    docker = await make_manual_skill(db, "Docker")

    skills = await sync_service.sync_skills(
        db,
        [str(docker.id), {"name": "docker", "proficiency": "Expert"}, {"name": "Kubernetes"}],
        "certification",
        str(uuid4()),
    )

    assert [s.name for s in skills] == ["Docker", "Kubernetes"]
    assert skills[0].id == docker.id
    assert len(docker.sources) == 2


@pytest.mark.asyncio
async def test_new_skills_get_guessed_category_and_default_proficiency(db, sync_service) -> None:
    skills = await sync_service.sync_skills(db, ["PostgreSQL", "Basket Weaving"], "github", "x")

    assert skills[0].category == "Database"
    assert skills[1].category == "Other"
    assert all(s.proficiency == "Beginner" for s in skills)
    # a github import alone does not make a skill visible
    assert not any(s.is_active for s in skills)


@pytest.mark.asyncio
async def test_sync_recovers_when_another_request_created_the_skill(
    db, sync_service, make_manual_skill, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A unique-key collision on create should fall back to the existing record."""
    existing = await make_manual_skill(db, "Docker")
    repo = sync_service.skill_repo
    real_get_by_name_key = repo.get_by_name_key
    calls = {"count": 0}

    async def _not_found(session, name):
        return None

    async def _miss_first_lookup(session, key):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return await real_get_by_name_key(session, key)

    monkeypatch.setattr(repo, "get_by_name", _not_found)
    monkeypatch.setattr(repo, "get_by_name_key", _miss_first_lookup)

    ref = str(uuid4())
    skills = await sync_service.sync_skills(db, ["docker"], "project", ref)

    assert skills[0].id == existing.id
    assert {"type": "project", "reference_id": ref} in existing.sources
    assert len(await SkillRepository().list_all(db)) == 1


# ─── References & delete ───────────────────────────────────────


@pytest.mark.asyncio
async def test_get_skill_references_by_id_and_by_name(
    db, sync_service, make_project, make_education
) -> None:
    project = await make_project(db, ["Python"], title="Scraper")
    await make_education(db, [{"name": "python"}], is_active=False)
    python = await _skill(sync_service, db, "Python")

    by_id = await sync_service.get_skill_references(db, python.id)
    by_name = await sync_service.get_skill_references(db, "PYTHON")

    assert by_id == by_name
    assert [r.title for r in by_id.projects] == ["Scraper"]
    assert by_id.projects[0].id == project.id
    assert len(by_id.education) == 1
    assert by_id.certifications == []

    stats = await sync_service.get_skill_usage_stats(db, python.id)
    assert stats.total_references == 2
    assert stats.active_references == 1
    assert stats.active_education == 0


@pytest.mark.asyncio
async def test_unknown_skill_has_no_references_and_can_be_deleted(db, sync_service) -> None:
    refs = await sync_service.get_skill_references(db, "Nonexistent")
    check = await sync_service.can_delete_skill(db, uuid4())

    assert refs.all() == []
    assert check.can_delete is True
    assert check.total_references == 0


@pytest.mark.asyncio
async def test_cascade_delete_leaves_no_dangling_references(
    db, sync_service, make_project, make_certification, make_education
) -> None:
    project = await make_project(db, ["React", "Python"], is_active=False)
    certification = await make_certification(db, [{"name": "React"}], is_active=False)
    education = await make_education(db, ["react", "SQL"], is_active=False)
    react = await _skill(sync_service, db, "React")
    python = await _skill(sync_service, db, "Python")

    deleted = await sync_service.delete_skill(db, react.id)

    assert deleted.name == "React"
    assert await SkillRepository().get_by_id(db, react.id) is None
    assert project.technologies == ["Python"]
    assert project.skills == [str(python.id)]
    assert certification.skills == []
    assert education.skills == ["SQL"]
    refs = await sync_service.get_skill_references(db, "React")
    assert refs.all() == []


@pytest.mark.asyncio
async def test_delete_blocked_by_active_reference_until_deactivated(
    db, sync_service, make_project
) -> None:
    project = await make_project(db, ["Vue"], title="Dashboard")
    vue = await _skill(sync_service, db, "Vue")

    check = await sync_service.can_delete_skill(db, vue.id)
    assert check.can_delete is False

    with pytest.raises(SkillInUseException) as exc_info:
        await sync_service.delete_skill(db, vue.id)
    active = exc_info.value.details["active_references"]
    assert exc_info.value.status_code == 400
    assert active[0]["entity_type"] == "project"
    assert active[0]["id"] == str(project.id)

    project.is_active = False
    await db.commit()

    await sync_service.delete_skill(db, vue.id)
    assert await SkillRepository().get_by_id(db, vue.id) is None
    assert project.technologies == []


@pytest.mark.asyncio
async def test_force_delete_ignores_active_references(db, sync_service, make_project) -> None:
    project = await make_project(db, ["Svelte"])
    svelte = await _skill(sync_service, db, "Svelte")

    await sync_service.delete_skill(db, svelte.id, force=True)

    assert project.technologies == []
    assert project.skills == []


@pytest.mark.asyncio
async def test_delete_unknown_skill_raises_not_found(db, sync_service) -> None:
    with pytest.raises(SkillNotFoundException):
        await sync_service.delete_skill(db, uuid4())


# ─── Visibility ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_manual_skill_stays_visible_without_references(
    db, sync_service, make_manual_skill
) -> None:
    figma = await make_manual_skill(db, "Figma")

    result = await sync_service.recalculate_skill_visibility(db, figma.id)

    assert result.updated is False
    assert result.skill.is_active is True


@pytest.mark.asyncio
async def test_skill_with_only_inactive_references_is_hidden(
    db, sync_service, make_project, make_manual_skill
) -> None:
    await make_manual_skill(db, "Git")
    await make_project(db, ["Git", "jQuery"], is_active=False)
    git = await _skill(sync_service, db, "Git")
    jquery = await _skill(sync_service, db, "jQuery")

    assert git.is_active is True
    assert jquery.is_active is False

    await sync_service.show_skill(db, jquery.id)
    result = await sync_service.recalculate_skill_visibility(db, jquery.id)

    assert result.updated is True
    assert result.skill.is_active is False


@pytest.mark.asyncio
async def test_reactivating_entity_restores_visibility_on_recalculate(
    db, sync_service, make_project
) -> None:
    project = await make_project(db, ["Flask"], is_active=False)
    flask = await _skill(sync_service, db, "Flask")
    assert flask.is_active is False

    project.is_active = True
    await db.commit()
    result = await sync_service.recalculate_skill_visibility(db, flask.id)

    assert result.updated is True
    assert flask.is_active is True


@pytest.mark.asyncio
async def test_hide_and_show_leave_sources_alone(db, sync_service, make_project) -> None:
    await make_project(db, ["Redis"])
    redis_skill = await _skill(sync_service, db, "Redis")
    sources = list(redis_skill.sources)

    hidden = await sync_service.hide_skill(db, redis_skill.id)
    shown = await sync_service.show_skill(db, redis_skill.id)

    assert hidden.is_active is False
    assert shown.is_active is True
    assert redis_skill.sources == sources


@pytest.mark.asyncio
async def test_remove_skill_source_applies_visibility_rule(db, sync_service) -> None:
    await sync_service.sync_skills(db, ["Kotlin"], "github", "bulk-import")

    kotlin = await sync_service.remove_skill_source(db, "kotlin", "github", "bulk-import")

    assert kotlin.sources == []
    assert kotlin.is_active is False

    again = await sync_service.remove_skill_source(db, "kotlin", "github", "bulk-import")
    assert again.sources == []
    assert await sync_service.remove_skill_source(db, "Nope", "github", "x") is None


@pytest.mark.asyncio
async def test_sync_with_manual_source_reactivates_hidden_skill(db, sync_service) -> None:
    await sync_service.sync_skills(db, ["Kotlin"], "github", "bulk-import")
    await sync_service.remove_skill_source(db, "Kotlin", "github", "bulk-import")

    synced = await sync_service.sync_skills(db, ["Kotlin"], "manual", None)

    assert synced[0].sources == [{"type": "manual", "reference_id": None}]
    assert synced[0].is_active is True


@pytest.mark.asyncio
async def test_sync_with_active_entity_source_reactivates_hidden_skill(
    db, sync_service, make_project
) -> None:
    project = await make_project(db, ["Scala"])
    scala = await _skill(sync_service, db, "Scala")
    await sync_service.remove_skill_source(db, "Scala", "project", project.id)
    await sync_service.hide_skill(db, scala.id)

    await sync_service.sync_skills(db, ["scala"], "project", project.id)

    assert scala.has_source("project", project.id)
    assert scala.is_active is True


# ─── Link / unlink ─────────────────────────────────────────────


@pytest.mark.asyncio
async def test_unlink_is_symmetric_with_link(
    db, sync_service, make_education, make_manual_skill
) -> None:
    education = await make_education(db, ["Algorithms"])
    rust = await make_manual_skill(db, "Rust", proficiency="Advanced")
    before_skills = list(education.skills)
    before_sources = list(rust.sources)

    linked = await sync_service.link_skill_to_entity(db, rust.id, "education", education.id)
    adapter = sync_service.adapters["education"]

    assert linked.linked is True
    assert adapter.contains_skill(education, rust)
    assert education.skills[-1] == {"name": "Rust", "proficiency": "Advanced", "verified": True}
    assert rust.has_source("education", education.id)

    unlinked = await sync_service.unlink_skill_from_entity(db, rust.id, "education", education.id)

    assert unlinked.linked is False
    assert not adapter.contains_skill(education, rust)
    assert education.skills == before_skills
    assert rust.sources == before_sources


@pytest.mark.asyncio
async def test_link_to_project_writes_name_and_id_mirror(
    db, sync_service, make_project, make_manual_skill
) -> None:
    project = await make_project(db, [])
    go = await make_manual_skill(db, "Go")

    await sync_service.link_skill_to_entity(db, str(go.id), "project", str(project.id))

    assert project.technologies == ["Go"]
    assert project.skills == [str(go.id)]


@pytest.mark.asyncio
async def test_link_twice_raises_already_linked(
    db, sync_service, make_certification, make_manual_skill
) -> None:
    certification = await make_certification(db, [])
    aws = await make_manual_skill(db, "AWS")
    await sync_service.link_skill_to_entity(db, aws.id, "certification", certification.id)

    with pytest.raises(SkillAlreadyLinkedException):
        await sync_service.link_skill_to_entity(db, aws.id, "certification", certification.id)

    assert len(certification.skills) == 1


@pytest.mark.asyncio
async def test_link_validates_entity_type_skill_and_entity(
    db, sync_service, make_manual_skill
) -> None:
    skill = await make_manual_skill(db, "Java")

    with pytest.raises(InvalidEntityTypeException):
        await sync_service.link_skill_to_entity(db, skill.id, "blogpost", uuid4())
    with pytest.raises(SkillNotFoundException):
        await sync_service.link_skill_to_entity(db, uuid4(), "project", uuid4())
    with pytest.raises(EntityNotFoundException):
        await sync_service.link_skill_to_entity(db, skill.id, "project", uuid4())
    with pytest.raises(EntityNotFoundException):
        await sync_service.link_skill_to_entity(db, skill.id, "project", "not-an-id")


@pytest.mark.asyncio
async def test_bulk_link_reports_per_item_results(
    db, sync_service, make_project, make_manual_skill
) -> None:
    project = await make_project(db, ["Docker"])
    docker = await _skill(sync_service, db, "Docker")
    nginx = await make_manual_skill(db, "Nginx")

    results = await sync_service.bulk_link_skills_to_entity(
        db, [str(nginx.id), str(docker.id), str(uuid4())], "project", project.id
    )

    assert [r.status for r in results] == ["success", "error", "error"]
    assert project.technologies == ["Docker", "Nginx"]

    results = await sync_service.bulk_unlink_skills_from_entity(
        db, [str(nginx.id), str(docker.id)], "project", project.id
    )
    assert [r.status for r in results] == ["success", "success"]
    assert project.technologies == []


# ─── Orphan cleanup ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_cleanup_strips_stale_ids_and_names(
    db, sync_service, make_project, make_certification
) -> None:
    project = await make_project(db, ["React"])
    certification = await make_certification(db, [{"name": "AWS"}])
    react = await _skill(sync_service, db, "React")

    project.skills = [*project.skills, str(uuid4())]
    flag_modified(project, "skills")
    certification.skills = [*certification.skills, {"name": "Ghost Skill"}, 17]
    flag_modified(certification, "skills")
    await db.commit()

    result = await sync_service.cleanup_orphaned_references(db)

    assert result.cleaned_projects == 1
    assert result.cleaned_certifications == 1
    assert result.cleaned_education == 0
    assert project.skills == [str(react.id)]
    assert certification.skills == [{"name": "AWS"}]


@pytest.mark.asyncio
async def test_cleanup_prunes_sources_of_missing_entities(db, sync_service) -> None:
    """Sources pointing at deleted entities go; sentinel references stay."""
    await sync_service.sync_skills(db, ["Elixir"], "project", str(uuid4()))
    await sync_service.sync_skills(db, ["Haskell"], "github", "bulk-import")

    result = await sync_service.cleanup_orphaned_references(db)

    elixir = await _skill(sync_service, db, "Elixir")
    haskell = await _skill(sync_service, db, "Haskell")
    assert result.pruned_sources == 1
    assert result.deactivated_skills == 0
    assert elixir.sources == []
    assert haskell.sources == [{"type": "github", "reference_id": "bulk-import"}]
    assert elixir.is_active is False
    assert haskell.is_active is False


@pytest.mark.asyncio
async def test_cleanup_reactivates_hidden_skill_with_active_reference(
    db, sync_service, make_project
) -> None:
    await make_project(db, ["Terraform"])
    terraform = await _skill(sync_service, db, "Terraform")
    await sync_service.hide_skill(db, terraform.id)

    result = await sync_service.cleanup_orphaned_references(db)

    assert result.activated_skills == 1
    assert terraform.is_active is True


# ─── Entity lifecycle ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_update_entity_skills_drops_sources_of_removed_skills(
    db, sync_service, make_project
) -> None:
    project = await make_project(db, ["Angular", "RxJS"])
    angular = await _skill(sync_service, db, "Angular")

    response = await sync_service.update_entity_skills(db, "project", project.id, ["RxJS", "NgRx"])

    assert [s.name for s in response.skills] == ["RxJS", "NgRx"]
    assert project.technologies == ["RxJS", "NgRx"]
    assert len(project.skills) == 2
    assert not angular.has_source("project", project.id)
    assert angular.is_active is False


@pytest.mark.asyncio
async def test_delete_entity_releases_its_sources(
    db, sync_service, make_project, make_manual_skill
) -> None:
    await make_manual_skill(db, "Linux")
    project = await make_project(db, ["Linux", "Bash"])
    linux = await _skill(sync_service, db, "Linux")
    bash = await _skill(sync_service, db, "Bash")

    await sync_service.delete_entity(db, "project", project.id)

    assert not linux.has_source("project", project.id)
    assert linux.is_active is True
    assert bash.sources == []
    assert bash.is_active is False


@pytest.mark.asyncio
async def test_sync_all_entities_rebuilds_sources(
    db, sync_service, make_project, make_education
) -> None:
    project = await make_project(db, ["Node.js"])
    await make_education(db, ["Statistics"])
    node = await _skill(sync_service, db, "Node.js")
    node.sources = []
    flag_modified(node, "sources")
    await db.commit()

    result = await sync_service.sync_all_entities(db)

    assert result.projects.processed == 1
    assert result.education.processed == 1
    assert result.certifications.processed == 0
    assert result.total_skills == 2
    assert node.sources == [{"type": "project", "reference_id": str(project.id)}]
