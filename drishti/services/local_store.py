"""
파일 기반 로컬 키-값 저장소입니다.
브라우저 localStorage와 같은 역할: 문자열 키 → 문자열 값, 재시작 후에도 유지됩니다.

저장 방식:
- 키 하나당 파일 하나 (키는 URL 인코딩하여 파일명으로 사용)
- 쓰기는 동기식이며 임시 파일에 쓴 뒤 교체하여 원자적으로 반영
"""

import logging
import os
import tempfile
import urllib.parse
from pathlib import Path
from typing import Optional

from drishti.config import get_settings
from drishti.exceptions import StorageError

logger = logging.getLogger(__name__)


class LocalStore:
    """키 하나를 파일 하나로 저장하는 단순 저장소 클래스입니다."""

    def __init__(self, base_path: str = "data/local"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def get_item(self, key: str) -> Optional[str]:
        """저장된 값을 읽습니다. 없거나 읽을 수 없으면 None."""
        file_path = self._path_for(key)
        if not file_path.exists():
            return None

        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            logger.error(f"[LocalStore] 읽기 실패 {file_path}: {e}", exc_info=True)
            return None

    def set_item(self, key: str, value: str) -> None:
        """값을 저장합니다. 반환 시점에 디스크에 반영되어 있습니다."""
        file_path = self._path_for(key)
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.base_path, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_path, file_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            logger.error(f"[LocalStore] 저장 실패 {file_path}: {e}", exc_info=True)
            raise StorageError(
                f"로컬 저장에 실패했습니다: {key}",
                details={"path": str(file_path), "error": str(e)},
            )

    def _path_for(self, key: str) -> Path:
        # 불투명 ID에 슬래시 등이 있어도 안전한 파일명이 되도록 인코딩
        return self.base_path / f"{urllib.parse.quote(key, safe='')}.json"


# 싱글톤 인스턴스 (프로그램 전체에서 공유)
_local_store: Optional[LocalStore] = None


def get_local_store() -> LocalStore:
    """LocalStore 인스턴스를 반환합니다."""
    global _local_store
    if _local_store is None:
        _local_store = LocalStore(get_settings().storage_path)
    return _local_store
