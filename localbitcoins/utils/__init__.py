"""예외 계층과 로깅 설정 유틸리티."""

from .exceptions import AppError, ConfigurationError, EncodingError, TransportError

__all__ = [
    "AppError",
    "ConfigurationError",
    "EncodingError",
    "TransportError",
]
