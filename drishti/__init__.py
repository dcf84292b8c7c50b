"""Drishti 워크스페이스 코어: 아이디어 → PRD → 구현 계획 로드맵."""

__version__ = "1.0.0"
