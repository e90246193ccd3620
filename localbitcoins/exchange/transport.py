"""HTTP 전송 계층 인터페이스와 requests 기반 기본 구현."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Tuple, Union

import requests
from requests import Response, Session

from ..config import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT
from ..utils.exceptions import TransportError

Headers = Mapping[str, str]
Timeout = Union[float, Tuple[float, float]]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """전송 계층이 돌려주는 응답. ``data``는 디코딩된 JSON 본문이다."""

    status_code: int
    data: Any
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(Protocol):
    """클라이언트가 사용하는 전송 계층의 최소 인터페이스.

    ``params``는 이미 정규 인코딩된 문자열이며 그대로 전송되어야 한다.
    """

    def get(self, url: str, params: str, headers: Headers) -> TransportResponse:
        ...

    def post(self, url: str, params: str, headers: Headers) -> TransportResponse:
        ...


class RequestsTransport:
    """requests 세션을 이용하는 기본 전송 계층."""

    def __init__(
        self,
        *,
        session: Optional[Session] = None,
        timeout: Timeout = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._session: Session = session or requests.Session()
        self._owns_session = session is None
        self._timeout: Timeout = timeout
        self._default_headers: dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": user_agent,
        }

    @property
    def session(self) -> Session:
        """내부 HTTP 세션."""

        return self._session

    @property
    def timeout(self) -> Timeout:
        return self._timeout

    def close(self) -> None:
        """직접 생성한 세션만 종료한다."""

        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _merge_headers(self, extra_headers: Optional[Headers]) -> dict[str, str]:
        merged = dict(self._default_headers)
        if extra_headers:
            merged.update(extra_headers)
        return merged

    def get(self, url: str, params: str, headers: Headers) -> TransportResponse:
        return self._send("GET", url, params=params or None, data=None, headers=self._merge_headers(headers))

    def post(self, url: str, params: str, headers: Headers) -> TransportResponse:
        merged = self._merge_headers(headers)
        merged["Content-Type"] = FORM_CONTENT_TYPE
        return self._send("POST", url, params=None, data=params, headers=merged)

    def _send(
        self,
        method: str,
        url: str,
        *,
        params: Optional[str],
        data: Optional[str],
        headers: dict[str, str],
    ) -> TransportResponse:
        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                data=data,
                headers=headers,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.debug("%s %s 네트워크 오류: %s", method, url, exc)
            raise TransportError(f"LocalBitcoins API 호출 중 네트워크 오류가 발생했습니다: {exc}") from exc

        return self._handle_response(response)

    def _handle_response(self, response: Response) -> TransportResponse:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = response.status_code
            payload = _decode_or_none(response)
            detail = _describe_error(payload) or response.text
            logger.debug("HTTP %s 응답: %s", status_code, detail)
            raise TransportError(
                f"LocalBitcoins API 호출 실패: HTTP {status_code} - {detail}",
                status_code=status_code,
                payload=payload,
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            logger.debug("HTTP %s 응답 JSON 디코딩 실패: %s", response.status_code, exc)
            raise TransportError(
                "LocalBitcoins API 응답 JSON 디코딩 실패",
                status_code=response.status_code,
            ) from exc
        return TransportResponse(
            status_code=response.status_code,
            data=data,
            headers=dict(response.headers or {}),
        )


def _decode_or_none(response: Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _describe_error(payload: Any) -> Optional[str]:
    # {"error": {"message": ..., "error_code": ...}}
    if not isinstance(payload, Mapping):
        return None
    error = payload.get("error")
    if not isinstance(error, Mapping):
        return None
    message = error.get("message")
    code = error.get("error_code")
    if message and code is not None:
        return f"{message} (error_code={code})"
    return message or None


__all__ = [
    "FORM_CONTENT_TYPE",
    "RequestsTransport",
    "Transport",
    "TransportResponse",
]
