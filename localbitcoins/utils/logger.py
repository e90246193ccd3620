"""패키지 전역에서 사용하는 로깅 설정 유틸리티."""

from __future__ import annotations

import logging
from logging import Logger
from logging.config import dictConfig
from typing import Any, Dict, Optional

from ..config import AppSettings, get_settings

_LOG_CONFIGURED = False


def _build_logging_config(settings: AppSettings) -> Dict[str, Any]:
    """dictConfig에 사용할 로깅 설정을 생성한다."""
    logging_settings = settings.logging

    formatter = {
        "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        "datefmt": "%Y-%m-%d %H:%M:%S",
    }
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": logging_settings.normalized_level,
        },
    }

    if logging_settings.to_file:
        log_path = logging_settings.resolve_log_path(settings.root_dir)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.TimedRotatingFileHandler",
            "formatter": "standard",
            "level": logging_settings.normalized_level,
            "filename": str(log_path),
            "when": "midnight",
            "backupCount": logging_settings.backup_count,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"standard": formatter},
        "handlers": handlers,
        "root": {
            "level": logging_settings.normalized_level,
            "handlers": list(handlers),
        },
    }


def configure_logging(force: bool = False, settings: Optional[AppSettings] = None) -> None:
    """로깅 설정을 초기화한다."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED and not force:
        return
    dictConfig(_build_logging_config(settings or get_settings()))
    _LOG_CONFIGURED = True


def get_logger(name: str) -> Logger:
    """지정된 이름의 로거를 반환한다."""
    configure_logging()
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
