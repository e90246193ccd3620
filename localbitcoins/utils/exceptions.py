"""클라이언트 공통 예외 계층."""

from __future__ import annotations

from typing import Any, Optional


class AppError(Exception):
    """패키지 전반에서 사용하는 기본 예외 클래스."""


class ConfigurationError(AppError):
    """인증 정보나 호스트 같은 필수 설정이 잘못된 경우 발생."""


class EncodingError(AppError, ValueError):
    """요청 파라미터나 경로 변수를 정규 인코딩할 수 없는 경우 발생.

    이 예외가 발생했다면 요청은 전송되지 않은 상태다.
    """


class TransportError(AppError):
    """요청이 전송된 뒤 네트워크 오류나 비정상 응답으로 실패한 경우 발생."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


__all__ = [
    "AppError",
    "ConfigurationError",
    "EncodingError",
    "TransportError",
]
