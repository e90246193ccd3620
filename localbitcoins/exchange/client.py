"""LocalBitcoins 서명 API 클라이언트."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from ..config import DEFAULT_HOST, LocalBitcoinsSettings, get_settings
from ..utils.exceptions import ConfigurationError, EncodingError
from .endpoints import ENDPOINTS, EndpointSpec, HttpMethod
from .signing import NonceGenerator, RequestParams, build_signed_headers, encode_params
from .transport import RequestsTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

NonceSource = Callable[[], int]


@dataclass(frozen=True)
class ClientCredentials:
    """API 인증 정보. 시크릿은 repr에 노출하지 않는다."""

    api_key: str
    api_secret: str = field(repr=False)


def _normalize_host(host: str) -> str:
    if not isinstance(host, str) or not host.strip():
        raise ConfigurationError("호스트가 비어 있습니다.")
    cleaned = host.strip().rstrip("/")
    if not cleaned.startswith(("http://", "https://")):
        raise ConfigurationError(f"호스트는 http:// 또는 https:// 로 시작해야 합니다: {host}")
    return cleaned


class LocalBitcoinsClient:
    """HMAC 서명 요청을 만들어 전송 계층에 넘기는 클라이언트.

    엔드포인트별 메서드(``myself``, ``account_info`` 등)는 ``ENDPOINTS`` 표에서
    생성되며 모두 :meth:`call` 을 거친다.
    """

    def __init__(
        self,
        key: str,
        secret: str,
        *,
        host: str = DEFAULT_HOST,
        transport: Optional[Transport] = None,
        nonce_source: Optional[NonceSource] = None,
    ) -> None:
        if not isinstance(key, str) or not key:
            raise ConfigurationError("API 키가 비어 있습니다.")
        if not isinstance(secret, str) or not secret:
            raise ConfigurationError("API 시크릿이 비어 있습니다.")

        self._credentials = ClientCredentials(key, secret)
        self._host = _normalize_host(host)
        self._transport: Transport = transport or RequestsTransport()
        self._owns_transport = transport is None
        self._nonce_source: NonceSource = nonce_source or NonceGenerator.for_key(key)

    @classmethod
    def from_settings(
        cls,
        settings: Optional[LocalBitcoinsSettings] = None,
        *,
        transport: Optional[Transport] = None,
    ) -> "LocalBitcoinsClient":
        """환경 설정에서 인증 정보와 호스트를 읽어 클라이언트를 만든다."""
        resolved = settings or get_settings().localbitcoins
        if resolved.api_key is None or resolved.api_secret is None:
            raise ConfigurationError("LOCALBITCOINS_API_KEY/LOCALBITCOINS_API_SECRET을 설정한 뒤 호출해야 합니다.")
        host = _normalize_host(resolved.host)
        owns_transport = transport is None
        if transport is None:
            transport = RequestsTransport(timeout=resolved.timeout, user_agent=resolved.user_agent)
        client = cls(
            resolved.api_key.get_secret_value(),
            resolved.api_secret.get_secret_value(),
            host=host,
            transport=transport,
        )
        client._owns_transport = owns_transport
        return client

    @property
    def host(self) -> str:
        """요청을 보낼 기본 URL."""

        return self._host

    @property
    def credentials(self) -> ClientCredentials:
        return self._credentials

    @property
    def transport(self) -> Transport:
        return self._transport

    def set_host(self, host: str) -> "LocalBitcoinsClient":
        """이후 호출에 사용할 기본 URL을 바꾼다. 진행 중인 호출에는 영향이 없다."""
        self._host = _normalize_host(host)
        return self

    def close(self) -> None:
        if self._owns_transport:
            close = getattr(self._transport, "close", None)
            if close is not None:
                close()

    def __enter__(self) -> "LocalBitcoinsClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key={self._credentials.api_key!r}, host={self._host!r})"

    # ------------------------------------------------------------------
    # 공통 호출 파이프라인
    # ------------------------------------------------------------------
    def call(
        self,
        method: Union[HttpMethod, str],
        path: str,
        params: Optional[RequestParams] = None,
    ) -> Any:
        """서명된 요청 하나를 보내고 디코딩된 응답 본문을 반환한다."""
        http_method = HttpMethod.parse(method)
        if not isinstance(path, str) or not path.startswith("/"):
            raise EncodingError(f"경로는 '/'로 시작해야 합니다: {path!r}")

        encoded = encode_params(params)
        host = self._host
        nonce = self._nonce_source()
        headers = build_signed_headers(
            self._credentials.api_key,
            self._credentials.api_secret,
            nonce,
            path,
            encoded,
        )
        url = f"{host}{path}"

        logger.debug("%s %s (nonce=%s)", http_method.value, path, nonce)
        if http_method is HttpMethod.GET:
            response: TransportResponse = self._transport.get(url, encoded, headers)
        else:
            response = self._transport.post(url, encoded, headers)
        return response.data

    def get(self, path: str, params: Optional[RequestParams] = None) -> Any:
        return self.call(HttpMethod.GET, path, params)

    def post(self, path: str, params: Optional[RequestParams] = None) -> Any:
        return self.call(HttpMethod.POST, path, params)

    def call_endpoint(self, endpoint: EndpointSpec, **arguments: Any) -> Any:
        """엔드포인트 항목과 인자로 요청을 보낸다."""
        unknown = sorted(set(arguments) - set(endpoint.arguments))
        if unknown:
            raise TypeError(f"{endpoint.name}() got unexpected keyword arguments: {', '.join(unknown)}")
        missing =[name for name in endpoint.required if arguments.get(name) is None]
        if missing:
            raise EncodingError(f"{endpoint.name}: 필수 인자가 없습니다: {', '.join(missing)}")
        path, params = endpoint.split_arguments(arguments)
        return self.call(endpoint.method, path, params)


def _make_endpoint_method(endpoint: EndpointSpec) -> Callable[..., Any]:
    parameters = [inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    parameters += [
        inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD) for name in endpoint.required
    ]
    parameters += [
        inspect.Parameter(name, inspect.Parameter.KEYWORD_ONLY, default=None) for name in endpoint.optional
    ]
    signature = inspect.Signature(parameters)

    def method(*args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(*args, **kwargs)
        bound.apply_defaults()
        arguments = dict(bound.arguments)
        self = arguments.pop("self")
        return self.call_endpoint(endpoint, **arguments)

    method.__name__ = endpoint.name
    method.__qualname__ = f"{LocalBitcoinsClient.__name__}.{endpoint.name}"
    method.__doc__ = f"{endpoint.doc}\n\n{endpoint.method.value} {endpoint.path_template}"
    method.__signature__ = signature  # type: ignore[attr-defined]
    return method


for _endpoint in ENDPOINTS:
    setattr(LocalBitcoinsClient, _endpoint.name, _make_endpoint_method(_endpoint))
del _endpoint


__all__ = ["ClientCredentials", "LocalBitcoinsClient"]
