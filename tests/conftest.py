from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from localbitcoins.config import get_settings  # noqa: E402
from localbitcoins.exchange import LocalBitcoinsClient, TransportResponse  # noqa: E402
from localbitcoins.utils.exceptions import TransportError  # noqa: E402


@dataclass
class RecordingTransport:
    """요청을 기록하고 미리 정한 응답을 돌려주는 가짜 전송 계층."""

    payload: Any = field(default_factory=lambda: {"data": {}})
    error: Optional[TransportError] = None
    calls: List[Dict[str, Any]] = field(default_factory=list)

    def _record(self, method: str, url: str, params: str, headers: Mapping[str, str]) -> TransportResponse:
        self.calls.append({"method": method, "url": url, "params": params, "headers": dict(headers)})
        if self.error is not None:
            raise self.error
        return TransportResponse(status_code=200, data=self.payload)

    def get(self, url: str, params: str, headers: Mapping[str, str]) -> TransportResponse:
        return self._record("GET", url, params, headers)

    def post(self, url: str, params: str, headers: Mapping[str, str]) -> TransportResponse:
        return self._record("POST", url, params, headers)


class FixedNonce:
    def __init__(self, start: int = 1700000000000000) -> None:
        self.value = start - 1

    def __call__(self) -> int:
        self.value += 1
        return self.value


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def fixed_nonce() -> FixedNonce:
    return FixedNonce()


@pytest.fixture
def client(transport: RecordingTransport, fixed_nonce: FixedNonce) -> LocalBitcoinsClient:
    return LocalBitcoinsClient("test-key", "test-secret", transport=transport, nonce_source=fixed_nonce)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> None:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
