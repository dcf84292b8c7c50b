"""ProjectStateManager unit tests.

Project list / current project bookkeeping, generation in-flight flags,
re-fetch after generation, and failure handling that keeps prior state.
"""

import asyncio
import json

import httpx
import pytest

from drishti.exceptions import PreconditionError, RemoteServiceError
from drishti.models import GenerationStatus, ProjectStatus
from drishti.services.api_client import ApiClient
from drishti.services.project_state import ProjectStateManager


def _state_with_handler(handler, tmp_path) -> ProjectStateManager:
    """가짜 서비스 앞에 handler를 끼운 ProjectStateManager."""
    client = ApiClient(
        base_url="http://remote.test",
        token="t",
        transport=httpx.MockTransport(handler),
        retry_delay=0,
        download_dir=str(tmp_path),
    )
    return ProjectStateManager(api_client=client)


class TestFetch:
    async def test_fetch_projects_replaces_list(self, project_state, fake_service):
        fake_service.add_project(idea="a")
        fake_service.add_project(idea="b")

        projects = await project_state.fetch_projects()

        assert [p.idea for p in projects] == ["b", "a"]
        assert project_state.is_loading is False
        assert project_state.error is None

    async def test_fetch_projects_failure_keeps_previous_list(self, project_state, fake_service):
        fake_service.add_project(idea="a")
        await project_state.fetch_projects()

        fake_service.fail("GET", "/projects", 500, {"error": "database unavailable"})
        with pytest.raises(RemoteServiceError):
            await project_state.fetch_projects()

        assert [p.idea for p in project_state.projects] == ["a"]
        assert project_state.error == "database unavailable"
        assert project_state.is_loading is False

    async def test_malformed_project_payload_is_a_remote_error(self, project_state, fake_service):
        fake_service.add_project(idea="a")
        await project_state.fetch_projects()

        fake_service.add_project(idea="b")["title"] = None
        with pytest.raises(RemoteServiceError) as exc_info:
            await project_state.fetch_projects()

        assert exc_info.value.status_code == 200
        assert project_state.error == "서비스 응답 형식이 올바르지 않습니다"
        assert [p.idea for p in project_state.projects] == ["a"]
        assert project_state.is_loading is False

    async def test_fetch_project_decodes_content(self, project_state, fake_service, sample_prd):
        project = fake_service.add_project(prd=json.dumps(sample_prd))

        fetched = await project_state.fetch_project(project["_id"])

        assert fetched.prd.content == sample_prd
        assert project_state.current_project is fetched

    async def test_undecodable_content_is_treated_as_absent(self, project_state, fake_service):
        project = fake_service.add_project(prd="<not json>")
        fetched = await project_state.fetch_project(project["_id"])
        assert fetched.prd is None
        assert fetched.has_prd is False

    async def test_fetch_project_failure_keeps_current(self, project_state, fake_service):
        project = fake_service.add_project()
        await project_state.fetch_project(project["_id"])

        with pytest.raises(RemoteServiceError):
            await project_state.fetch_project("missing")

        assert project_state.current_project.id == project["_id"]
        assert project_state.error == "Project not found"

    async def test_stale_response_is_discarded(self, fake_service, tmp_path):
        a = fake_service.add_project(idea="A")
        b = fake_service.add_project(idea="B")
        release = asyncio.Event()

        async def handler(request):
            if request.url.path == f"/projects/{a['_id']}":
                await release.wait()
            return fake_service.handler(request)

        state = _state_with_handler(handler, tmp_path)

        # A 응답이 도착하기 전에 B를 선택
        first = asyncio.create_task(state.fetch_project(a["_id"]))
        await asyncio.sleep(0)
        await state.fetch_project(b["_id"])
        release.set()
        stale = await first

        assert stale is None
        assert state.current_project.id == b["_id"]

class TestCrud:
    async def test_create_inserts_at_head_and_selects(self, project_state, fake_service):
        fake_service.add_project(idea="old")
        await project_state.fetch_projects()

        created = await project_state.create_project("New", "new idea")

        assert project_state.projects[0].id == created.id
        assert len(project_state.projects) == 2
        assert project_state.current_project.id == created.id

    async def test_update_syncs_list_and_current(self, project_state, fake_service):
        project = fake_service.add_project(idea="old")
        await project_state.fetch_projects()
        await project_state.fetch_project(project["_id"])

        await project_state.update_project(project["_id"], "T", "new")

        assert project_state.current_project.idea == "new"
        assert project_state.projects[0].idea == "new"

    async def test_update_non_current_leaves_current_alone(self, project_state, fake_service):
        a = fake_service.add_project(idea="a")
        b = fake_service.add_project(idea="b")
        await project_state.fetch_projects()
        await project_state.fetch_project(a["_id"])

        await project_state.update_project(b["_id"], "T", "b2")

        assert project_state.current_project.id == a["_id"]
        assert project_state.get_project(b["_id"]).idea == "b2"

    async def test_delete_current_clears_selection(self, project_state, fake_service):
        project = fake_service.add_project()
        await project_state.fetch_projects()
        await project_state.fetch_project(project["_id"])

        await project_state.delete_project(project["_id"])

        assert project_state.projects == []
        assert project_state.current_project is None

    async def test_delete_failure_keeps_list(self, project_state, fake_service):
        project = fake_service.add_project()
        await project_state.fetch_projects()
        fake_service.fail("DELETE", f"/projects/{project['_id']}", 403, {"message": "Not owner"})

        with pytest.raises(RemoteServiceError):
            await project_state.delete_project(project["_id"])

        assert len(project_state.projects) == 1
        assert project_state.error == "Not owner"

    async def test_clear_error(self, project_state, fake_service):
        fake_service.fail("GET", "/projects", 500, {})
        with pytest.raises(RemoteServiceError):
            await project_state.fetch_projects()
        assert project_state.error == "HTTP error! status: 500"

        project_state.clear_error()
        assert project_state.error is None


class TestGeneration:
    async def test_generate_prd_refetches_and_merges(self, project_state, fake_service, sample_prd):
        project = await project_state.create_project("Dog app", "dogs")

        updated = await project_state.generate_prd(project.id)

        assert updated.status == ProjectStatus.PRD_GENERATED
        assert updated.prd.content == sample_prd
        assert project_state.current_project.has_prd
        assert project_state.projects[0].has_prd
        assert fake_service.calls("GET", f"/projects/{project.id}") == 1
        assert project_state.generation_state[project.id] == GenerationStatus.IDLE

    async def test_flag_is_set_while_in_flight(self, fake_service, tmp_path):
        seen = []

        def handler(request):
            if request.url.path.endswith("generate-prd"):
                seen.append(state.is_generating(project.id))
            return fake_service.handler(request)

        state = _state_with_handler(handler, tmp_path)
        project = await state.create_project("t", "i")
        await state.generate_prd(project.id)

        assert seen == [True]
        assert state.is_generating(project.id) is False

    async def test_flag_cleared_on_failure(self, project_state, fake_service):
        project = await project_state.create_project("t", "i")
        fake_service.fail("POST", f"/projects/{project.id}/generate-prd", 500, {"error": "AI timeout"})

        with pytest.raises(RemoteServiceError):
            await project_state.generate_prd(project.id)

        assert project_state.is_generating(project.id) is False
        assert project_state.error == "AI timeout"
        assert project_state.current_project.has_prd is False

    async def test_generation_state_is_read_only(self, project_state):
        with pytest.raises(TypeError):
            project_state.generation_state["p1"] = GenerationStatus.GENERATING

    async def test_delete_during_generation_leaves_no_entry(self, fake_service, tmp_path):
        entered = asyncio.Event()
        release = asyncio.Event()

        async def handler(request):
            if request.url.path.endswith("generate-prd"):
                entered.set()
                await release.wait()
            return fake_service.handler(request)

        state = _state_with_handler(handler, tmp_path)
        project = await state.create_project("t", "i")

        task = asyncio.create_task(state.generate_prd(project.id))
        await entered.wait()
        await state.delete_project(project.id)
        release.set()
        with pytest.raises(RemoteServiceError):
            await task

        assert project.id not in state.generation_state
        assert state.is_generating(project.id) is False
        assert state.projects == []

    async def test_plan_without_prd_is_rejected_without_network(self, project_state, fake_service):
        project = await project_state.create_project("t", "i")
        before = len(fake_service.requests)

        with pytest.raises(PreconditionError):
            await project_state.generate_implementation_plan(project.id)

        assert len(fake_service.requests) == before

    async def test_plan_for_unknown_project_is_rejected(self, project_state, fake_service):
        with pytest.raises(PreconditionError):
            await project_state.generate_implementation_plan("nobody")
        assert fake_service.requests == []

    async def test_generate_plan_after_prd(self, project_state, sample_plan):
        project = await project_state.create_project("t", "i")
        await project_state.generate_prd(project.id)

        updated = await project_state.generate_implementation_plan(project.id)

        assert updated.status == ProjectStatus.PLAN_GENERATED
        assert updated.implementation_plan.content == sample_plan
        assert project_state.current_project.has_plan

    async def test_generation_for_background_project_keeps_selection(self, project_state, fake_service):
        a = await project_state.create_project("A", "a")
        b = await project_state.create_project("B", "b")
        assert project_state.current_project.id == b.id

        await project_state.generate_prd(a.id)

        assert project_state.current_project.id == b.id
        assert project_state.get_project(a.id).has_prd


class TestDownloads:
    async def test_download_wrappers(self, project_state, fake_service):
        project = fake_service.add_project()
        assert (await project_state.download_prd_markdown(project["_id"])).name == "PRD.md"
        assert (await project_state.download_prd_pdf(project["_id"])).name == "PRD.pdf"
        assert (await project_state.download_plan_markdown(project["_id"])).name == "Implementation_Plan.md"
        assert (await project_state.download_plan_pdf(project["_id"])).name == "Implementation_Plan.pdf"
        assert (await project_state.download_complete_project(project["_id"])).name == "project.zip"

    async def test_download_failure_sets_error(self, project_state):
        with pytest.raises(RemoteServiceError):
            await project_state.download_prd_pdf("missing")
        assert project_state.error == "Project not found"
