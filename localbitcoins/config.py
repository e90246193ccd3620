"""환경변수 기반 클라이언트 설정 로더."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr

ROOT_DIR = Path(__file__).resolve().parent.parent
ENV_FILE = ROOT_DIR / ".env"
load_dotenv(ENV_FILE)

DEFAULT_HOST = "https://localbitcoins.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "localbitcoins-python/0.1"


def _to_bool(value: str | bool | None, default: bool = False) -> bool:
    """문자열 값을 불리언으로 변환한다."""
    if isinstance(value, bool):
        return value
    if value is None:
        return default
    normalized = value.strip().lower()
    return normalized in {"1", "true", "yes", "on"}


def _to_int(value: str | int | None, default: int) -> int:
    """문자열 값을 정수로 변환한다."""
    if isinstance(value, int):
        return value
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: str | float | None, default: float) -> float:
    """문자열 값을 실수로 변환한다."""
    if isinstance(value, (int, float)):
        return float(value)
    if value is None:
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


class LoggingSettings(BaseModel):
    """로깅 관련 설정."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = Field(default="INFO")
    to_file: bool = Field(default=False)
    log_dir: Path = Field(default=Path("logs"))
    file_name: str = Field(default="localbitcoins.log")
    backup_count: int = Field(default=7, ge=0)

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """환경변수에서 로깅 설정을 생성한다."""
        return cls(
            level=os.getenv("LOG_LEVEL", "INFO"),
            to_file=_to_bool(os.getenv("LOG_TO_FILE"), False),
            log_dir=Path(os.getenv("LOG_DIR", "logs")).expanduser(),
            file_name=os.getenv("LOG_FILE_NAME", "localbitcoins.log"),
            backup_count=_to_int(os.getenv("LOG_BACKUP_COUNT"), 7),
        )

    @property
    def normalized_level(self) -> str:
        """대문자로 정규화된 로그 레벨."""
        return self.level.upper()

    def resolve_log_path(self, root_dir: Path) -> Path:
        """루트 경로 기준 로그 파일 전체 경로."""
        log_dir = self.log_dir if self.log_dir.is_absolute() else (root_dir / self.log_dir).resolve()
        return log_dir / self.file_name


class LocalBitcoinsSettings(BaseModel):
    """LocalBitcoins API 관련 설정."""

    model_config = ConfigDict(populate_by_name=True)

    api_key: Optional[SecretStr] = Field(default=None)
    api_secret: Optional[SecretStr] = Field(default=None)
    host: str = Field(default=DEFAULT_HOST)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    user_agent: str = Field(default=DEFAULT_USER_AGENT)

    @classmethod
    def from_env(cls) -> "LocalBitcoinsSettings":
        """환경변수에서 API 설정을 생성한다."""
        api_key = os.getenv("LOCALBITCOINS_API_KEY")
        api_secret = os.getenv("LOCALBITCOINS_API_SECRET")
        return cls(
            api_key=SecretStr(api_key) if api_key else None,
            api_secret=SecretStr(api_secret) if api_secret else None,
            host=os.getenv("LOCALBITCOINS_HOST", DEFAULT_HOST),
            timeout=_to_float(os.getenv("LOCALBITCOINS_TIMEOUT"), DEFAULT_TIMEOUT),
            user_agent=os.getenv("LOCALBITCOINS_USER_AGENT", DEFAULT_USER_AGENT),
        )


class AppSettings(BaseModel):
    """패키지 전반에 사용되는 설정 묶음."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    root_dir: Path = Field(default=ROOT_DIR)
    environment: str = Field(default="development")
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    localbitcoins: LocalBitcoinsSettings = Field(default_factory=LocalBitcoinsSettings)

    @classmethod
    def load(cls) -> "AppSettings":
        """환경변수 및 기본값을 반영하여 설정 인스턴스를 생성한다."""
        return cls(
            root_dir=ROOT_DIR,
            environment=os.getenv("APP_ENV", "development"),
            logging=LoggingSettings.from_env(),
            localbitcoins=LocalBitcoinsSettings.from_env(),
        )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """전역 설정을 캐시하여 반환한다."""
    return AppSettings.load()


__all__ = [
    "AppSettings",
    "DEFAULT_HOST",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "LocalBitcoinsSettings",
    "LoggingSettings",
    "get_settings",
]
