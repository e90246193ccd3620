"""LocalBitcoins API 서명 클라이언트 패키지."""

from .client import ClientCredentials, LocalBitcoinsClient
from .endpoints import ENDPOINTS, EndpointSpec, HttpMethod, get_endpoint, render_path
from .signing import (
    HEADER_KEY,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    NonceGenerator,
    build_message,
    build_signed_headers,
    encode_params,
    sign_message,
)
from .transport import RequestsTransport, Transport, TransportResponse

__all__ = [
    "ClientCredentials",
    "ENDPOINTS",
    "EndpointSpec",
    "HEADER_KEY",
    "HEADER_NONCE",
    "HEADER_SIGNATURE",
    "HttpMethod",
    "LocalBitcoinsClient",
    "NonceGenerator",
    "RequestsTransport",
    "Transport",
    "TransportResponse",
    "build_message",
    "build_signed_headers",
    "encode_params",
    "get_endpoint",
    "render_path",
    "sign_message",
]
