"""
Drishti 워크스페이스 커스텀 예외 계층입니다.
각 레이어/서비스별 구조화된 에러 코드와 메시지를 제공합니다.

복구 정책:
- ContentDecodeError, TransformUnrecognizedShapeError: 로컬에서 기본값으로 복구
- PreconditionError: 네트워크 호출 전에 거부
- RemoteServiceError: 호출자에게 전파 (알림 표시, 기존 상태 유지)
"""

from typing import Optional, Any


class DrishtiError(Exception):
    """Drishti 기본 예외 클래스."""

    def __init__(
        self,
        message: str,
        error_code: str = "ERR_UNKNOWN",
        details: Optional[Any] = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ContentDecodeError(DrishtiError):
    """문자열 콘텐츠가 유효한 JSON이 아닐 때 발생합니다."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_DECODE_001", details=details)


class TransformUnrecognizedShapeError(DrishtiError):
    """구현 계획이 알려진 어떤 형태(phases / developmentPhases)와도 맞지 않을 때."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_SHAPE_001", details=details)


class PreconditionError(DrishtiError):
    """선행 조건 위반 (예: PRD 없이 구현 계획 생성 요청)."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_PRECOND_001", details=details)


class RemoteServiceError(DrishtiError):
    """외부 REST 서비스 통신 에러."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[Any] = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(
            message,
            error_code="ERR_REMOTE_001",
            details={"status_code": status_code, "body": body},
        )


class StorageError(DrishtiError):
    """로컬 키-값 저장소 쓰기 에러."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message, error_code="ERR_STORE_001", details=details)
