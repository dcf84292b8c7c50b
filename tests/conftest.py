"""공유 pytest fixture 모음."""

import json
import re
from datetime import datetime, timezone

import httpx
import pytest

from drishti.services.api_client import ApiClient
from drishti.services.checkpoint_store import CheckpointStore
from drishti.services.lifecycle import GenerationLifecycleController
from drishti.services.local_store import LocalStore
from drishti.services.project_state import ProjectStateManager


SAMPLE_PRD = {
    "overview": "반려견 동반 가능한 식당을 찾는 모바일 앱",
    "objectives": ["반려견 동반 식당 검색", "리뷰 공유"],
    "targetAudience": {
        "primary": "반려견 보호자",
        "secondary": "식당 운영자",
        "demographics": "25-45세 도시 거주자",
    },
    "features": [
        {"name": "지도 검색", "description": "주변 식당 지도", "priority": "High"},
        {"name": "리뷰", "description": "방문 리뷰 작성", "priority": "medium"},
        {"name": "즐겨찾기", "description": "식당 저장", "priority": "LOW"},
        {"name": "채팅", "description": "보호자 커뮤니티", "priority": "nice-to-have"},
    ],
    "technicalRequirements": ["React Native", "Node.js API"],
    "timeline": [{"phase": "MVP", "duration": "6 weeks", "deliverables": ["검색", "리뷰"]}],
    "successMetrics": ["MAU 1만"],
    "risks": [
        "Budget overrun during launch",
        {"risk": "Low adoption", "mitigation": "Partner with local shelters"},
    ],
}

SAMPLE_PLAN = {
    "developmentPhases": [
        {
            "phase": "Setup",
            "duration": "1 week",
            "tasks": [
                {
                    "task": "Init repo",
                    "description": "Create repository and CI",
                    "dependencies": [],
                    "estimatedHours": 4,
                }
            ],
        }
    ]
}

SAMPLE_PHASES_PLAN = {
    "phases": [
        {
            "id": "phase-1",
            "title": "Foundation",
            "description": "기반 작업",
            "stages": [
                {
                    "id": "stage-1",
                    "title": "Scaffolding",
                    "checkpoints": [
                        {"id": "cp-1", "title": "Repo", "description": "저장소 생성"},
                        {"id": "cp-2", "title": "CI", "description": "파이프라인", "testing": "CI green"},
                    ],
                }
            ],
        },
        {
            "id": "phase-2",
            "title": "Features",
            "stages": [
                {"id": "stage-2", "title": "Search", "checkpoints": [{"id": "cp-3", "title": "Map"}]}
            ],
        },
    ]
}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeRemoteService:
    """
    외부 REST 서비스를 메모리에서 흉내 내는 가짜 서버.
    httpx.MockTransport의 handler로 사용합니다.
    """

    def __init__(self):
        self.projects: dict[str, dict] = {}
        self.order: list[str] = []
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], tuple[int, object]] = {}
        self.prd_content: object = json.dumps(SAMPLE_PRD)
        self.plan_content: object = json.dumps(SAMPLE_PLAN)
        self._seq = 0

    # ---- 테스트 도우미 ----

    def add_project(self, idea: str = "아이디어", title: str = None, prd=None, plan=None) -> dict:
        self._seq += 1
        pid = f"p{self._seq:03d}"
        status = "plan_generated" if plan is not None else "prd_generated" if prd is not None else "draft"
        project = {
            "_id": pid,
            "title": title or idea[:50],
            "idea": idea,
            "status": status,
            "owner": "user-1",
            "createdAt": _now(),
            "updatedAt": _now(),
        }
        if prd is not None:
            project["prd"] = {"version": 1, "content": prd, "generatedAt": _now()}
        if plan is not None:
            project["implementationPlan"] = {"version": 1, "content": plan, "generatedAt": _now()}
        self.projects[pid] = project
        self.order.insert(0, pid)
        return project

    def fail(self, method: str, path: str, status: int, body=None) -> None:
        self.failures[(method, path)] = (status, body if body is not None else {})

    def calls(self, method: str, path: str) -> int:
        return sum(1 for r in self.requests if r.method == method and r.url.path == path)

    # ---- MockTransport handler ----

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if (method, path) in self.failures:
            status, body = self.failures[(method, path)]
            if isinstance(body, (bytes, str)):
                return httpx.Response(status, content=body)
            return httpx.Response(status, json=body)

        if path == "/projects" and method == "GET":
            items = [self.projects[pid] for pid in self.order]
            return httpx.Response(200, json={
                "projects": items,
                "pagination": {"current": 1, "pages": 1, "total": len(items)},
            })

        if path == "/projects" and method == "POST":
            body = json.loads(request.content)
            project = self.add_project(idea=body["idea"], title=body["title"])
            return httpx.Response(201, json={"message": "Project created", "project": project})

        match = re.fullmatch(r"/projects/([^/]+)(?:/(generate-prd|generate-plan))?", path)
        if match:
            return self._project_route(request, match.group(1), match.group(2))

        match = re.fullmatch(r"/exports/([^/]+)/(.+)", path)
        if match and method == "GET":
            if match.group(1) not in self.projects:
                return httpx.Response(404, json={"error": "Project not found"})
            return httpx.Response(200, content=f"export:{match.group(2)}".encode())

        return httpx.Response(404, json={"error": "Not found"})

    def _project_route(self, request: httpx.Request, pid: str, action):
        project = self.projects.get(pid)
        if project is None:
            return httpx.Response(404, json={"error": "Project not found"})

        if action is None and request.method == "GET":
            return httpx.Response(200, json={"project": project})

        if action is None and request.method == "PUT":
            body = json.loads(request.content)
            project.update(title=body["title"], idea=body["idea"], updatedAt=_now())
            return httpx.Response(200, json={"message": "Project updated", "project": project})

        if action is None and request.method == "DELETE":
            del self.projects[pid]
            self.order.remove(pid)
            return httpx.Response(200, json={"message": "Project deleted successfully"})

        if action == "generate-prd":
            version = project.get("prd", {}).get("version", 0) + 1
            project["prd"] = {"version": version, "content": self.prd_content, "generatedAt": _now()}
            project["status"] = "prd_generated"
            return httpx.Response(200, json={"message": "PRD generated", "prd": project["prd"]})

        if action == "generate-plan":
            if "prd" not in project:
                return httpx.Response(400, json={"error": "PRD must be generated first"})
            record = {"version": 1, "content": self.plan_content, "generatedAt": _now()}
            project["implementationPlan"] = record
            project["status"] = "plan_generated"
            return httpx.Response(200, json={
                "message": "Implementation plan generated",
                "implementationPlan": record,
            })

        return httpx.Response(405, json={"error": "Method not allowed"})


@pytest.fixture
def fake_service():
    """가짜 외부 서비스 fixture."""
    return FakeRemoteService()


@pytest.fixture
def api_client(fake_service, tmp_path):
    """MockTransport로 가짜 서비스에 연결된 ApiClient fixture."""
    return ApiClient(
        base_url="http://remote.test",
        token="test-token",
        transport=httpx.MockTransport(fake_service.handler),
        retry_delay=0,
        download_dir=str(tmp_path / "downloads"),
    )


@pytest.fixture
def local_store(tmp_path):
    """임시 디렉토리 기반 LocalStore fixture."""
    return LocalStore(base_path=str(tmp_path / "local"))


@pytest.fixture
def checkpoint_store(local_store):
    return CheckpointStore(store=local_store)


@pytest.fixture
def project_state(api_client):
    return ProjectStateManager(api_client=api_client)


@pytest.fixture
def lifecycle(project_state, checkpoint_store):
    return GenerationLifecycleController(
        project_state=project_state,
        checkpoint_store=checkpoint_store,
    )


@pytest.fixture
def sample_prd():
    return json.loads(json.dumps(SAMPLE_PRD))


@pytest.fixture
def sample_plan():
    return json.loads(json.dumps(SAMPLE_PLAN))


@pytest.fixture
def sample_phases_plan():
    return json.loads(json.dumps(SAMPLE_PHASES_PLAN))


@pytest.fixture
async def app_client(api_client, project_state, checkpoint_store, lifecycle, monkeypatch):
    """
    워크스페이스 FastAPI 앱용 httpx AsyncClient fixture.
    서비스 싱글톤을 가짜 서비스에 연결된 인스턴스로 바꿔 끼웁니다.
    """
    from httpx import AsyncClient, ASGITransport
    from drishti.main import app

    monkeypatch.setattr("drishti.services.api_client._api_client", api_client)
    monkeypatch.setattr("drishti.services.project_state._project_state", project_state)
    monkeypatch.setattr("drishti.services.checkpoint_store._checkpoint_store", checkpoint_store)
    monkeypatch.setattr("drishti.services.lifecycle._lifecycle", lifecycle)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
