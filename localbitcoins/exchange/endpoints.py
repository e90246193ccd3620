"""LocalBitcoins API 엔드포인트 목록과 경로 생성 유틸리티."""

from __future__ import annotations

import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple
from urllib.parse import quote

from ..utils.exceptions import EncodingError
from .signing import ensure_utf8


class HttpMethod(str, Enum):
    """지원하는 HTTP 메서드."""

    GET = "GET"
    POST = "POST"

    @classmethod
    def parse(cls, value: "HttpMethod | str") -> "HttpMethod":
        if isinstance(value, HttpMethod):
            return value
        try:
            return cls(str(value).upper())
        except ValueError as exc:
            raise EncodingError(f"지원하지 않는 HTTP 메서드입니다: {value!r}") from exc


_FORMATTER = string.Formatter()


def path_fields(template: str) -> Tuple[str, ...]:
    """경로 템플릿에 포함된 자리표시자 이름을 순서대로 반환한다."""
    return tuple(name for _, name, _, _ in _FORMATTER.parse(template) if name)


def escape_path_segment(name: str, value: Any) -> str:
    """경로에 삽입할 값을 검증하고 퍼센트 인코딩한다."""
    if value is None or isinstance(value, (bool, list, tuple, dict, set)):
        raise EncodingError(f"경로 변수 '{name}'의 값이 올바르지 않습니다: {value!r}")
    text = str(value)
    if not text or text in {".", ".."} or "/" in text:
        raise EncodingError(f"경로 변수 '{name}'에 사용할 수 없는 값입니다: {text!r}")
    return quote(ensure_utf8(name, text), safe="")


def render_path(template: str, path_params: Optional[Mapping[str, Any]] = None) -> str:
    """경로 템플릿의 자리표시자를 인코딩된 값으로 치환한다."""
    values = dict(path_params or {})
    escaped: Dict[str, str] = {}
    for name in path_fields(template):
        if name not in values:
            raise EncodingError(f"경로 변수 '{name}'가 누락되었습니다: {template}")
        escaped[name] = escape_path_segment(name, values[name])
    return template.format(**escaped)


@dataclass(frozen=True)
class EndpointSpec:
    """엔드포인트 하나를 선언하는 항목."""

    name: str
    method: HttpMethod
    path_template: str
    required: Tuple[str, ...] = ()
    optional: Tuple[str, ...] = ()
    doc: str = ""
    path_params: Tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path_params", path_fields(self.path_template))
        missing = [name for name in self.path_params if name not in self.required]
        if missing:
            raise ValueError(f"{self.name}: 경로 변수 {missing}는 필수 인자로 선언해야 합니다.")

    @property
    def arguments(self) -> Tuple[str, ...]:
        return self.required + self.optional

    def split_arguments(self, arguments: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """인자를 치환된 경로와 요청 파라미터로 나눈다."""
        path = render_path(self.path_template, {name: arguments[name] for name in self.path_params})
        params = {
            name: arguments[name]
            for name in self.arguments
            if name not in self.path_params and arguments.get(name) is not None
        }
        return path, params


GET = HttpMethod.GET
POST = HttpMethod.POST

_AD_FIELDS: Tuple[str, ...] = (
    "price_equation",
    "lat",
    "lon",
    "city",
    "location_string",
    "countrycode",
    "currency",
    "account_info",
    "bank_name",
    "msg",
    "sms_verification_required",
    "track_max_amount",
    "require_trusted_by_advertiser",
    "require_identification",
)

ENDPOINTS: Tuple[EndpointSpec, ...] = (
    # 계정
    EndpointSpec("myself", GET, "/api/myself/", doc="인증된 사용자의 정보를 조회한다."),
    EndpointSpec("logout", GET, "/api/logout/", doc="현재 액세스 토큰을 즉시 만료시킨다."),
    EndpointSpec(
        "account_info",
        GET,
        "/api/account_info/{username}/",
        required=("username",),
        doc="사용자의 공개 프로필을 조회한다.",
    ),
    EndpointSpec("pincode", POST, "/api/pincode/", required=("pincode",), doc="PIN 코드를 검증한다."),
    EndpointSpec(
        "feedback",
        POST,
        "/api/feedback/{username}/",
        required=("username", "feedback"),
        optional=("msg",),
        doc="사용자에게 피드백을 남긴다.",
    ),
    # 대시보드
    EndpointSpec("dashboard", GET, "/api/dashboard/", doc="진행 중인 거래를 조회한다."),
    EndpointSpec("released_trades", GET, "/api/dashboard/released/", doc="완료된 거래를 조회한다."),
    EndpointSpec("canceled_trades", GET, "/api/dashboard/canceled/", doc="취소된 거래를 조회한다."),
    EndpointSpec("closed_trades", GET, "/api/dashboard/closed/", doc="종료된 거래를 조회한다."),
    # 알림과 메시지
    EndpointSpec("notifications", GET, "/api/notifications/", doc="알림 목록을 조회한다."),
    EndpointSpec(
        "notification_mark_as_read",
        POST,
        "/api/notifications/mark_as_read/{notification_id}/",
        required=("notification_id",),
        doc="알림을 읽음으로 표시한다.",
    ),
    EndpointSpec(
        "recent_messages",
        GET,
        "/api/recent_messages/",
        optional=("before", "after"),
        doc="최근 거래 메시지를 조회한다.",
    ),
    # 지갑
    EndpointSpec("wallet", GET, "/api/wallet/", doc="지갑 잔고와 최근 거래 내역을 조회한다."),
    EndpointSpec("wallet_balance", GET, "/api/wallet-balance/", doc="지갑 잔고를 조회한다."),
    EndpointSpec("wallet_address", GET, "/api/wallet-addr/", doc="미사용 입금 주소를 조회한다."),
    EndpointSpec("wallet_fees", GET, "/api/fees/", doc="출금 수수료를 조회한다."),
    EndpointSpec(
        "wallet_send",
        POST,
        "/api/wallet-send/",
        required=("address", "amount"),
        doc="지갑에서 주소로 송금한다.",
    ),
    EndpointSpec(
        "wallet_send_pin",
        POST,
        "/api/wallet-send-pin/",
        required=("address", "amount", "pincode"),
        doc="PIN 코드로 인증하여 송금한다.",
    ),
    # 거래(contact)
    EndpointSpec(
        "contact_info",
        GET,
        "/api/contact_info/{contact_id}/",
        required=("contact_id",),
        doc="거래 정보를 조회한다.",
    ),
    EndpointSpec(
        "contacts_info",
        GET,
        "/api/contact_info/",
        required=("contacts",),
        doc="쉼표로 구분된 여러 거래의 정보를 조회한다.",
    ),
    EndpointSpec(
        "contact_messages",
        GET,
        "/api/contact_messages/{contact_id}/",
        required=("contact_id",),
        doc="거래 메시지를 조회한다.",
    ),
    EndpointSpec(
        "contact_message_post",
        POST,
        "/api/contact_message_post/{contact_id}/",
        required=("contact_id",),
        optional=("msg",),
        doc="거래에 메시지를 보낸다.",
    ),
    EndpointSpec(
        "contact_create",
        POST,
        "/api/contact_create/{ad_id}/",
        required=("ad_id", "amount"),
        optional=("message",),
        doc="광고에 대한 거래 요청을 생성한다.",
    ),
    EndpointSpec(
        "contact_release",
        POST,
        "/api/contact_release/{contact_id}/",
        required=("contact_id",),
        doc="에스크로를 해제한다.",
    ),
    EndpointSpec(
        "contact_release_pin",
        POST,
        "/api/contact_release_pin/{contact_id}/",
        required=("contact_id", "pincode"),
        doc="PIN 코드로 인증하여 에스크로를 해제한다.",
    ),
    EndpointSpec(
        "contact_mark_as_paid",
        POST,
        "/api/contact_mark_as_paid/{contact_id}/",
        required=("contact_id",),
        doc="거래를 입금 완료로 표시한다.",
    ),
    EndpointSpec(
        "contact_cancel",
        POST,
        "/api/contact_cancel/{contact_id}/",
        required=("contact_id",),
        doc="거래를 취소한다.",
    ),
    EndpointSpec(
        "contact_dispute",
        POST,
        "/api/contact_dispute/{contact_id}/",
        required=("contact_id",),
        optional=("topic",),
        doc="거래에 분쟁을 제기한다.",
    ),
    # 광고
    EndpointSpec(
        "ads",
        GET,
        "/api/ads/",
        optional=("visible", "trade_type", "currency", "countrycode"),
        doc="내 광고 목록을 조회한다.",
    ),
    EndpointSpec("ad_get", GET, "/api/ad-get/{ad_id}/", required=("ad_id",), doc="광고 하나를 조회한다."),
    EndpointSpec(
        "ads_get",
        GET,
        "/api/ad-get/",
        required=("ads",),
        doc="쉼표로 구분된 여러 광고를 조회한다.",
    ),
    EndpointSpec(
        "ad_update",
        POST,
        "/api/ad/{ad_id}/",
        required=("ad_id",) + _AD_FIELDS,
        optional=("min_amount", "max_amount", "opening_hours", "visible"),
        doc="광고를 수정한다.",
    ),
    EndpointSpec(
        "ad_create",
        POST,
        "/api/ad-create/",
        required=_AD_FIELDS + ("online_provider", "trade_type"),
        optional=("min_amount", "max_amount", "opening_hours"),
        doc="새 광고를 등록한다.",
    ),
    EndpointSpec(
        "ad_equation",
        POST,
        "/api/ad-equation/{ad_id}/",
        required=("ad_id", "price_equation"),
        doc="광고 가격 공식을 변경한다.",
    ),
    EndpointSpec("ad_delete", POST, "/api/ad-delete/{ad_id}/", required=("ad_id",), doc="광고를 삭제한다."),
    # 공개 정보
    EndpointSpec("payment_methods", GET, "/api/payment_methods/", doc="결제 수단 목록을 조회한다."),
    EndpointSpec("country_codes", GET, "/api/countrycodes/", doc="국가 코드 목록을 조회한다."),
    EndpointSpec("currencies", GET, "/api/currencies/", doc="통화 목록을 조회한다."),
)

_BY_NAME: Dict[str, EndpointSpec] = {endpoint.name: endpoint for endpoint in ENDPOINTS}


def get_endpoint(name: str) -> EndpointSpec:
    """이름으로 엔드포인트 항목을 찾는다."""
    try:
        return _BY_NAME[name]
    except KeyError as exc:
        raise KeyError(f"알 수 없는 엔드포인트입니다: {name}") from exc


__all__ = [
    "ENDPOINTS",
    "EndpointSpec",
    "HttpMethod",
    "escape_path_segment",
    "get_endpoint",
    "path_fields",
    "render_path",
]
