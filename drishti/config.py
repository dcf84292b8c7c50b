from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """
    애플리케이션의 설정을 관리하는 클래스입니다.
    환경 변수(DRISHTI_ 접두사) 또는 .env 파일에서 설정값을 읽어옵니다.
    """

    # 외부 REST 서비스 설정: 프로젝트/AI 생성 API 주소와 인증 토큰
    api_base_url: str = "http://localhost:5000"
    auth_token: str = ""  # Bearer 토큰 (발급/갱신은 외부에서 처리)
    request_timeout: float = 300.0  # AI 생성 호출은 오래 걸리므로 넉넉하게 설정

    # 재시도 설정: 멱등 요청(GET/PUT/DELETE)의 네트워크 오류에만 적용
    max_retries: int = 3
    retry_delay: float = 1.0  # 초기 대기 시간(초), 지수 백오프

    # 프로젝트 목록 조회 시 한 페이지 크기
    page_limit: int = 10

    # 로컬 저장소 설정: 체크포인트 완료 상태와 다운로드 파일 위치
    storage_path: str = "data/local"
    download_path: str = "data/downloads"

    # 워크스페이스 서버 설정
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:5173", "http://localhost:8080"]

    class Config:
        env_prefix = "DRISHTI_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache()
def get_settings() -> Settings:
    """
    설정을 가져오는 함수입니다.
    @lru_cache를 사용하여 한 번 읽은 설정은 메모리에 저장해두고 재사용합니다.
    """
    return Settings()
