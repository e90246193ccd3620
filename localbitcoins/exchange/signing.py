"""요청 서명에 필요한 순수 함수와 nonce 발급기."""

from __future__ import annotations

import hashlib
import hmac
import logging
import threading
import time
import weakref
from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

from ..utils.exceptions import EncodingError

Scalar = Union[str, int, float, Decimal, bool]
RequestParams = Mapping[str, Optional[Scalar]]
EncodedPairs = List[Tuple[str, str]]

HEADER_KEY = "Apiauth-Key"
HEADER_NONCE = "Apiauth-Nonce"
HEADER_SIGNATURE = "Apiauth-Signature"

logger = logging.getLogger(__name__)


def ensure_utf8(name: str, text: str) -> str:
    """UTF-8로 인코딩할 수 없는 문자열(짝 없는 서로게이트 등)을 거부한다."""
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise EncodingError(f"'{name}' 값은 UTF-8로 인코딩할 수 없습니다.") from exc
    return text


def _encode_value(key: str, value: Scalar) -> str:
    # bool은 int의 하위 타입이므로 먼저 검사한다.
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int, float, Decimal)):
        return ensure_utf8(key, str(value))
    raise EncodingError(f"파라미터 '{key}'의 값 타입({type(value).__name__})은 인코딩할 수 없습니다.")


def canonical_pairs(params: Optional[RequestParams]) -> EncodedPairs:
    """파라미터를 입력 순서대로 (키, 문자열 값) 목록으로 변환한다.

    값이 ``None``인 항목은 전달되지 않은 선택 파라미터로 보고 제외한다.
    """
    pairs: EncodedPairs = []
    for key, value in (params or {}).items():
        if not isinstance(key, str) or not key:
            raise EncodingError(f"파라미터 키가 올바르지 않습니다: {key!r}")
        ensure_utf8("파라미터 키", key)
        if value is None:
            continue
        pairs.append((key, _encode_value(key, value)))
    return pairs


def encode_params(params: Optional[RequestParams]) -> str:
    """서명과 전송에 동일하게 사용하는 정규 쿼리 문자열을 만든다."""
    return urlencode(canonical_pairs(params))


def build_message(nonce: int, api_key: str, path: str, encoded_params: str) -> str:
    """서명 대상 메시지. 구분자 없이 nonce, 키, 경로, 파라미터 순으로 이어 붙인다."""
    return f"{nonce}{api_key}{path}{encoded_params}"


def sign_message(message: str, secret: str) -> str:
    """HMAC-SHA256 서명을 대문자 16진 문자열로 반환한다."""
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).hexdigest()
    return digest.upper()


def build_signed_headers(
    api_key: str,
    secret: str,
    nonce: int,
    path: str,
    encoded_params: str,
) -> Dict[str, str]:
    """요청마다 새로 계산되는 인증 헤더를 만든다."""
    message = build_message(nonce, api_key, path, encoded_params)
    return {
        HEADER_KEY: api_key,
        HEADER_NONCE: str(nonce),
        HEADER_SIGNATURE: sign_message(message, secret),
    }


def _microsecond_clock() -> int:
    return time.time_ns() // 1000


class NonceGenerator:
    """마이크로초 단위 시각에서 엄격히 증가하는 nonce를 발급한다.

    시계가 멈추거나 뒤로 가면 직전 값 + 1을 발급한다.
    """

    _registry: "weakref.WeakValueDictionary[str, NonceGenerator]" = weakref.WeakValueDictionary()
    _registry_lock = threading.Lock()

    def __init__(self, clock: Callable[[], int] = _microsecond_clock) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._last = 0
        self._last_reading = 0

    @classmethod
    def for_key(cls, api_key: str) -> "NonceGenerator":
        """같은 API 키를 쓰는 클라이언트끼리 공유하는 발급기를 반환한다."""
        with cls._registry_lock:
            generator = cls._registry.get(api_key)
            if generator is None:
                generator = cls()
                cls._registry[api_key] = generator
            return generator

    @property
    def last(self) -> int:
        return self._last

    def next(self) -> int:
        with self._lock:
            reading = int(self._clock())
            if reading < self._last_reading:
                logger.warning("시계가 뒤로 이동했습니다. nonce를 직전 값 기준으로 보정합니다.")
            self._last_reading = reading
            candidate = reading if reading > self._last else self._last + 1
            self._last = candidate
            return candidate

    __call__ = next


__all__ = [
    "EncodedPairs",
    "HEADER_KEY",
    "HEADER_NONCE",
    "HEADER_SIGNATURE",
    "NonceGenerator",
    "RequestParams",
    "Scalar",
    "build_message",
    "build_signed_headers",
    "canonical_pairs",
    "encode_params",
    "ensure_utf8",
    "sign_message",
]
