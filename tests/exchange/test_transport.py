from __future__ import annotations

import logging

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest
import requests

from localbitcoins.exchange import LocalBitcoinsClient, RequestsTransport, build_message, sign_message
from localbitcoins.utils.exceptions import TransportError


@dataclass
class DummyResponse:
    status_code: int = 200
    json_payload: Any = None
    text: str = ""
    json_raises: bool = False
    headers: Dict[str, str] = field(default_factory=dict)

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)  # type: ignore[arg-type]

    def json(self) -> Any:
        if self.json_raises:
            raise ValueError("invalid json")
        return self.json_payload


class DummySession:
    def __init__(self, responses: List[Any]) -> None:
        self._responses = responses
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def request(
        self,
        method: str,
        url: str,
        params: Optional[str] = None,
        data: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Any = None,
    ) -> DummyResponse:
        if not self._responses:
            raise AssertionError("예상치 못한 추가 호출이 발생했습니다.")
        self.calls.append(
            {
                "method": method,
                "url": url,
                "params": params,
                "data": data,
                "headers": headers or {},
                "timeout": timeout,
            }
        )
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True


def test_get_sends_query_string_and_default_headers() -> None:
    session = DummySession([DummyResponse(json_payload={"data": {"username": "alice"}})])
    transport = RequestsTransport(session=session, timeout=5)

    response = transport.get("https://localbitcoins.com/api/myself/", "a=1", {"Apiauth-Key": "k"})

    assert response.status_code == 200
    assert response.data == {"data": {"username": "alice"}}
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["params"] == "a=1"
    assert call["data"] is None
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["User-Agent"].startswith("localbitcoins-python/")
    assert call["headers"]["Apiauth-Key"] == "k"
    assert call["timeout"] == 5


def test_get_without_params_sends_none() -> None:
    session = DummySession([DummyResponse(json_payload={})])
    transport = RequestsTransport(session=session)

    transport.get("https://localbitcoins.com/api/myself/", "", {})

    assert session.calls[0]["params"] is None


def test_post_sends_form_body() -> None:
    session = DummySession([DummyResponse(json_payload={"data": {"message": "ok"}})])
    transport = RequestsTransport(session=session)

    transport.post("https://localbitcoins.com/api/wallet-send/", "address=x&amount=1", {})

    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["params"] is None
    assert call["data"] == "address=x&amount=1"
    assert call["headers"]["Content-Type"] == "application/x-www-form-urlencoded"


def test_http_error_becomes_transport_error_with_payload() -> None:
    error_payload = {"error": {"message": "HMAC authentication key and signature was given, but they are invalid.", "error_code": 41}}
    session = DummySession([DummyResponse(status_code=400, json_payload=error_payload, text="bad")])
    transport = RequestsTransport(session=session)

    with pytest.raises(TransportError) as exc:
        transport.get("https://localbitcoins.com/api/myself/", "", {})

    assert exc.value.status_code == 400
    assert exc.value.payload == error_payload
    assert "error_code=41" in str(exc.value)


def test_server_error_without_json_body() -> None:
    session = DummySession([DummyResponse(status_code=500, json_raises=True, text="Internal Server Error")])
    transport = RequestsTransport(session=session)

    with pytest.raises(TransportError) as exc:
        transport.get("https://localbitcoins.com/api/myself/", "", {})

    assert exc.value.status_code == 500
    assert exc.value.payload is None
    assert "Internal Server Error" in str(exc.value)


def test_network_error_becomes_transport_error() -> None:
    session = DummySession([requests.ConnectionError("connection refused")])
    transport = RequestsTransport(session=session)

    with pytest.raises(TransportError) as exc:
        transport.post("https://localbitcoins.com/api/logout/", "", {})

    assert exc.value.status_code is None
    assert isinstance(exc.value.__cause__, requests.ConnectionError)


def test_invalid_json_on_success_is_transport_error() -> None:
    session = DummySession([DummyResponse(json_raises=True)])
    transport = RequestsTransport(session=session)

    with pytest.raises(TransportError):
        transport.get("https://localbitcoins.com/api/myself/", "", {})


def test_close_only_closes_owned_session() -> None:
    session = DummySession([])
    RequestsTransport(session=session).close()
    assert session.closed is False

    owned = RequestsTransport()
    owned.close()


def test_client_signature_matches_transmitted_bytes() -> None:
    session = DummySession([DummyResponse(json_payload={"data": {}}), DummyResponse(json_payload={"data": {}})])
    client = LocalBitcoinsClient("key", "secret", transport=RequestsTransport(session=session))

    client.ads(visible=False, currency="EUR")
    client.contact_message_post(5, msg="payment sent & confirmed")

    get_call, post_call = session.calls
    for call, path, transmitted in (
        (get_call, "/api/ads/", get_call["params"]),
        (post_call, "/api/contact_message_post/5/", post_call["data"]),
    ):
        headers = call["headers"]
        message = build_message(int(headers["Apiauth-Nonce"]), "key", path, transmitted)
        assert headers["Apiauth-Signature"] == sign_message(message, "secret")
    assert get_call["params"] == "visible=0&currency=EUR"
    assert post_call["data"] == "msg=payment+sent+%26+confirmed"


def test_server_error_surfaces_through_endpoint_wrapper() -> None:
    session = DummySession([DummyResponse(status_code=500, json_raises=True, text="oops")])
    client = LocalBitcoinsClient("key", "secret", transport=RequestsTransport(session=session))

    with pytest.raises(TransportError) as exc:
        client.released_trades()
    assert exc.value.status_code == 500


def test_response_failures_are_logged_at_debug(caplog) -> None:
    session = DummySession(
        [
            DummyResponse(status_code=503, json_raises=True, text="Service Unavailable"),
            DummyResponse(json_raises=True),
        ]
    )
    transport = RequestsTransport(session=session)

    with caplog.at_level(logging.DEBUG, logger="localbitcoins.exchange.transport"):
        with pytest.raises(TransportError):
            transport.get("https://localbitcoins.com/api/myself/", "", {})
        with pytest.raises(TransportError):
            transport.get("https://localbitcoins.com/api/myself/", "", {})

    messages = [record.getMessage() for record in caplog.records if record.levelno == logging.DEBUG]
    assert any("503" in message and "Service Unavailable" in message for message in messages)
    assert any("JSON" in message for message in messages)
