from __future__ import annotations

import gc
import hashlib
import hmac
import logging
from decimal import Decimal

import pytest

from localbitcoins.exchange import (
    HEADER_KEY,
    HEADER_NONCE,
    HEADER_SIGNATURE,
    NonceGenerator,
    build_message,
    build_signed_headers,
    encode_params,
    sign_message,
)
from localbitcoins.utils.exceptions import EncodingError

MYSELF_SIGNATURE = "368A70632C290980E8A52EFA83092588F60DA511EEA8CF9D9828B3388D920690"


def test_myself_signature_regression_fixture() -> None:
    message = build_message(1700000000000000, "abc", "/api/myself/", encode_params({}))

    assert message == "1700000000000000abc/api/myself/"
    assert sign_message(message, "xyz") == MYSELF_SIGNATURE


def test_signature_matches_hmac_sha256_uppercase_hex() -> None:
    message = "1700000000000001test-key/api/wallet-send/address=bc1qexample&amount=0.01"
    expected = hmac.new(b"test-secret", message.encode("utf-8"), hashlib.sha256).hexdigest().upper()

    assert sign_message(message, "test-secret") == expected
    assert sign_message(message, "test-secret") == sign_message(message, "test-secret")


def test_signature_changes_with_nonce() -> None:
    first = build_signed_headers("abc", "xyz", 1700000000000000, "/api/myself/", "")
    second = build_signed_headers("abc", "xyz", 1700000000000001, "/api/myself/", "")

    assert first[HEADER_SIGNATURE] != second[HEADER_SIGNATURE]
    assert first[HEADER_KEY] == "abc"
    assert first[HEADER_NONCE] == "1700000000000000"
    assert set(first) == {"Apiauth-Key", "Apiauth-Nonce", "Apiauth-Signature"}


def test_encode_params_keeps_insertion_order() -> None:
    assert encode_params({"b": "2", "a": "1"}) == "b=2&a=1"
    assert encode_params({"a": "1", "b": "2"}) == "a=1&b=2"


def test_encode_params_scalars_and_form_escaping() -> None:
    encoded = encode_params(
        {
            "msg": "hello world & more",
            "amount": Decimal("0.015"),
            "count": 3,
            "visible": True,
            "hidden": False,
            "ratio": 1.5,
            "skipped": None,
        }
    )

    assert encoded == "msg=hello+world+%26+more&amount=0.015&count=3&visible=1&hidden=0&ratio=1.5"


def test_encode_params_empty() -> None:
    assert encode_params({}) == ""
    assert encode_params(None) == ""


@pytest.mark.parametrize("value", [["a"], {"a": 1}, object()])
def test_encode_params_rejects_non_scalar(value) -> None:
    with pytest.raises(EncodingError):
        encode_params({"key": value})


def test_encode_params_rejects_bad_key() -> None:
    with pytest.raises(EncodingError):
        encode_params({"": "value"})


def test_nonce_generator_uses_microsecond_clock() -> None:
    generator = NonceGenerator(clock=lambda: 1700000000123456)

    assert generator.next() == 1700000000123456
    assert generator.last == 1700000000123456


def test_nonce_generator_clamps_when_clock_goes_backward(caplog) -> None:
    readings = iter([1_000_000, 999_000, 999_500, 2_000_000])
    generator = NonceGenerator(clock=lambda: next(readings))

    with caplog.at_level(logging.WARNING, logger="localbitcoins.exchange.signing"):
        issued = [generator() for _ in range(4)]

    assert issued == [1_000_000, 1_000_001, 1_000_002, 2_000_000]
    assert any("시계" in record.getMessage() for record in caplog.records)


def test_nonce_generator_strictly_increasing_with_frozen_clock() -> None:
    generator = NonceGenerator(clock=lambda: 42)

    issued = [generator.next() for _ in range(5)]

    assert issued == [42, 43, 44, 45, 46]


def test_nonce_generator_shared_per_key() -> None:
    assert NonceGenerator.for_key("shared-key") is NonceGenerator.for_key("shared-key")
    assert NonceGenerator.for_key("shared-key") is not NonceGenerator.for_key("other-key")


def test_encode_params_rejects_values_that_are_not_utf8() -> None:
    with pytest.raises(EncodingError) as exc:
        encode_params({"msg": "\ud800"})
    assert isinstance(exc.value.__cause__, UnicodeEncodeError)

    with pytest.raises(EncodingError):
        encode_params({"\udfff": "value"})


def test_nonce_registry_releases_unused_generators() -> None:
    generator = NonceGenerator.for_key("short-lived-key")
    assert "short-lived-key" in NonceGenerator._registry

    del generator
    gc.collect()

    assert "short-lived-key" not in NonceGenerator._registry
