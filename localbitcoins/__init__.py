"""LocalBitcoins HTTP API 클라이언트."""

from .exchange import ENDPOINTS, LocalBitcoinsClient, RequestsTransport, TransportResponse
from .utils.exceptions import AppError, ConfigurationError, EncodingError, TransportError

__version__ = "0.1.0"

__all__ = [
    "AppError",
    "ConfigurationError",
    "ENDPOINTS",
    "EncodingError",
    "LocalBitcoinsClient",
    "RequestsTransport",
    "TransportError",
    "TransportResponse",
    "__version__",
]
