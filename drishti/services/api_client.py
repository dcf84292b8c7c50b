"""REST service client for the Drishti workspace.

외부 프로젝트/AI 생성 서비스를 httpx AsyncClient로 감싸 비동기 호출을 제공합니다.

주요 기능:
- 프로젝트 목록/조회/생성/수정/삭제
- PRD / 구현 계획 생성 (새 하위 리소스만 반환 → 확인 응답으로만 취급)
- 내보내기 파일 다운로드 (서버가 생성한 Markdown/PDF/ZIP을 그대로 저장)

인증:
- 모든 요청에 Bearer 토큰 첨부 (발급/갱신은 범위 밖)

재시도 전략:
- 멱등 요청(GET/PUT/DELETE)의 네트워크 오류만 재시도
- 지수 백오프 (retry_delay, ×2, ×4 ...)
- 생성 요청(POST)은 재시도하지 않음 (중복 생성 방지)
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Callable, Optional

import aiofiles
import httpx
from pydantic import ValidationError

from drishti.config import get_settings
from drishti.exceptions import RemoteServiceError
from drishti.models import GenerationAck, Project, ProjectsPage

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = {"GET", "PUT", "DELETE"}

# 내보내기 종류 → (엔드포인트 접미사, 저장 파일명)
DOWNLOADS = {
    "prd_markdown": ("prd/markdown", "PRD.md"),
    "prd_pdf": ("prd/pdf", "PRD.pdf"),
    "plan_markdown": ("plan/markdown", "Implementation_Plan.md"),
    "plan_pdf": ("plan/pdf", "Implementation_Plan.pdf"),
    "complete": ("complete", "project.zip"),
}


def extract_error_message(body: Any, status_code: int) -> str:
    """
    서버 에러 응답에서 사람이 읽을 수 있는 메시지를 뽑습니다.

    우선순위:
    1. body.error
    2. body.message
    3. body.details (목록이면 각 항목의 msg를 "; "로 연결, 문자열이면 그대로)
    4. "HTTP error! status: <code>"
    """
    msg = ""
    if isinstance(body, dict):
        msg = body.get("error") or body.get("message") or ""
        if not isinstance(msg, str):
            msg = str(msg)
        details = body.get("details")
        if not msg and details:
            if isinstance(details, list):
                msg = "; ".join(
                    (d.get("msg") or str(d)) if isinstance(d, dict) else str(d)
                    for d in details
                )
            elif isinstance(details, str):
                msg = details
    return msg or f"HTTP error! status: {status_code}"


class ApiClient:
    """
    외부 REST 서비스 클라이언트.

    Attributes:
        base_url: 서비스 주소
        _token: Bearer 토큰 (없으면 헤더 생략)
        _max_retries: 최대 시도 횟수
        _retry_delay: 초기 재시도 대기 시간(초)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_retries: Optional[int] = None,
        retry_delay: Optional[float] = None,
        download_dir: Optional[str] = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self._token = token if token is not None else (settings.auth_token or None)
        self._max_retries = max(1, max_retries if max_retries is not None else settings.max_retries)
        self._retry_delay = retry_delay if retry_delay is not None else settings.retry_delay
        self.download_dir = Path(download_dir or settings.download_path)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
        logger.info(f"[ApiClient] 초기화 완료 (base_url={self.base_url})")

    # ==================== 토큰 관리 ====================

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def is_authenticated(self) -> bool:
        return bool(self._token)

    # ==================== 프로젝트 ====================

    async def list_projects(self, page: int = 1, limit: Optional[int] = None) -> ProjectsPage:
        """프로젝트 목록 조회 (페이지네이션)."""
        limit = limit or get_settings().page_limit
        return await self._request(
            "GET", "/projects", parse=ProjectsPage.model_validate, params={"page": page, "limit": limit}
        )

    async def get_project(self, project_id: str) -> Project:
        """프로젝트 하나를 조회합니다."""
        return await self._request("GET", f"/projects/{project_id}", parse=self._project)

    async def create_project(self, title: str, idea: str) -> Project:
        return await self._request(
            "POST", "/projects", parse=self._project, json={"title": title, "idea": idea}
        )

    async def update_project(self, project_id: str, title: str, idea: str) -> Project:
        return await self._request(
            "PUT", f"/projects/{project_id}", parse=self._project, json={"title": title, "idea": idea}
        )

    async def delete_project(self, project_id: str) -> str:
        data = await self._request("DELETE", f"/projects/{project_id}")
        return data.get("message", "") if isinstance(data, dict) else ""

    # ==================== AI 생성 ====================

    async def generate_prd(self, project_id: str) -> GenerationAck:
        """PRD 생성 요청. 응답은 확인용이며 프로젝트 상태는 다시 조회해야 합니다."""
        return await self._request(
            "POST", f"/projects/{project_id}/generate-prd", parse=lambda data: self._ack(data, "prd")
        )

    async def generate_implementation_plan(self, project_id: str) -> GenerationAck:
        """구현 계획 생성 요청."""
        return await self._request(
            "POST",
            f"/projects/{project_id}/generate-plan",
            parse=lambda data: self._ack(data, "implementationPlan"),
        )

    # ==================== 내보내기 ====================

    async def download(self, project_id: str, kind: str) -> Path:
        """
        서버가 만든 내보내기 파일을 다운로드 폴더에 저장합니다.
        내용은 검사하지 않습니다.

        Args:
            project_id: 프로젝트 ID
            kind: prd_markdown, prd_pdf, plan_markdown, plan_pdf, complete

        Returns:
            저장된 파일 경로
        """
        if kind not in DOWNLOADS:
            raise ValueError(f"지원하지 않는 내보내기 형식입니다: {kind}")

        suffix, filename = DOWNLOADS[kind]
        response = await self._send("GET", f"/exports/{project_id}/{suffix}")
        self._raise_for_status("GET", f"/exports/{project_id}/{suffix}", response)

        target_dir = self.download_dir / project_id
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / filename
        async with aiofiles.open(target, "wb") as f:
            await f.write(response.content)

        logger.info(f"[ApiClient] 다운로드 완료: {target} ({len(response.content)} bytes)")
        return target

    async def aclose(self) -> None:
        await self._client.aclose()

    # ==================== 내부 도우미 함수들 ====================

    def _headers(self, with_json: bool) -> dict:
        headers = {}
        if with_json:
            headers["Content-Type"] = "application/json"
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _send(self, method: str, path: str, **kwargs) -> httpx.Response:
        """
        요청을 보내고 응답을 그대로 반환합니다.
        네트워크 오류는 멱등 요청에 한해 지수 백오프로 재시도합니다.
        """
        attempts = self._max_retries if method in IDEMPOTENT_METHODS else 1
        last_error: Optional[Exception] = None

        for attempt in range(attempts):
            try:
                return await self._client.request(
                    method,
                    path,
                    headers=self._headers(with_json="json" in kwargs),
                    **kwargs,
                )
            except httpx.TransportError as e:
                last_error = e
                logger.error(
                    f"[ApiClient] {method} {path} 시도 {attempt + 1}/{attempts} 실패: "
                    f"{type(e).__name__}: {e}"
                )
                if attempt < attempts - 1:
                    wait_time = self._retry_delay * (2 ** attempt)
                    logger.info(f"[ApiClient] {wait_time}초 후 재시도...")
                    await asyncio.sleep(wait_time)

        raise RemoteServiceError(
            f"서비스에 연결할 수 없습니다: {last_error}",
            status_code=None,
        )

    def _raise_for_status(self, method: str, path: str, response: httpx.Response) -> None:
        """에러 상태 코드면 본문에서 메시지를 뽑아 RemoteServiceError로 올립니다."""
        if not response.is_error:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = extract_error_message(body, response.status_code)
        logger.error(f"[ApiClient] {method} {path} → {response.status_code}: {message}")
        raise RemoteServiceError(message, status_code=response.status_code, body=body)

    async def _request(
        self,
        method: str,
        path: str,
        parse: Optional[Callable[[Any], Any]] = None,
        **kwargs,
    ) -> Any:
        """
        JSON 요청/응답. 실패 시 RemoteServiceError.
        parse가 주어지면 응답 본문을 모델로 변환하며, 형식이 맞지 않아도 RemoteServiceError.
        """
        response = await self._send(method, path, **kwargs)
        self._raise_for_status(method, path, response)

        if not response.content:
            data = {}
        else:
            try:
                data = response.json()
            except ValueError:
                raise RemoteServiceError(
                    "서비스 응답을 JSON으로 해석할 수 없습니다",
                    status_code=response.status_code,
                )

        if parse is None:
            return data
        try:
            return parse(data)
        except ValidationError as e:
            logger.error(f"[ApiClient] {method} {path} 응답 형식 오류: {e.error_count()}건")
            raise RemoteServiceError(
                "서비스 응답 형식이 올바르지 않습니다",
                status_code=response.status_code,
                body=data,
            )

    @staticmethod
    def _project(data: Any) -> Project:
        if not isinstance(data, dict) or not isinstance(data.get("project"), dict):
            raise RemoteServiceError("서비스 응답에 project가 없습니다", body=data)
        return Project.model_validate(data["project"])

    @staticmethod
    def _ack(data: Any, resource_key: str) -> GenerationAck:
        data = data if isinstance(data, dict) else {}
        resource = data.get(resource_key)
        resource = resource if isinstance(resource, dict) else {}
        return GenerationAck(
            message=data.get("message", ""),
            version=resource.get("version"),
            generated_at=resource.get("generatedAt"),
        )


_api_client: Optional[ApiClient] = None


def get_api_client() -> ApiClient:
    """Get or create ApiClient singleton."""
    global _api_client
    if _api_client is None:
        _api_client = ApiClient()
    return _api_client


async def close_api_client() -> None:
    """싱글톤이 만들어져 있으면 연결을 닫고 초기화합니다."""
    global _api_client
    if _api_client is not None:
        await _api_client.aclose()
        _api_client = None
