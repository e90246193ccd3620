"""엔드포인트를 명령행에서 호출하는 스크립트."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Callable, Dict, List, Optional, Sequence

from .config import get_settings
from .exchange import ENDPOINTS, LocalBitcoinsClient, get_endpoint
from .utils.exceptions import AppError
from .utils.logger import configure_logging

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], LocalBitcoinsClient]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="LocalBitcoins API 호출")
    parser.add_argument("endpoint", nargs="?", help="호출할 엔드포인트 이름 (예: myself, account_info)")
    parser.add_argument("arguments", nargs="*", help="필수 인자 (엔드포인트 선언 순서)")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="선택 인자 (여러 번 지정 가능)",
    )
    parser.add_argument("--host", help="기본 URL 재정의")
    parser.add_argument("--list", action="store_true", help="엔드포인트 목록 출력")
    return parser.parse_args(argv)


def _parse_params(pairs: List[str]) -> Dict[str, str]:
    params: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise SystemExit(f"--param 형식이 올바르지 않습니다: {pair}")
        params[key] = value
    return params


def _print_endpoints() -> None:
    for endpoint in ENDPOINTS:
        arguments = " ".join(endpoint.required)
        optional = " ".join(f"[--param {name}=...]" for name in endpoint.optional)
        print(f"{endpoint.name:28} {endpoint.method.value:4} {endpoint.path_template} {arguments} {optional}".rstrip())


def main(argv: Optional[Sequence[str]] = None, client_factory: Optional[ClientFactory] = None) -> int:
    args = parse_args(argv)
    configure_logging()

    if args.list or not args.endpoint:
        _print_endpoints()
        return 0

    try:
        endpoint = get_endpoint(args.endpoint)
    except KeyError as exc:
        print(exc.args[0], file=sys.stderr)
        return 2

    if len(args.arguments) != len(endpoint.required):
        print(
            f"{endpoint.name}: 필수 인자 {len(endpoint.required)}개가 필요합니다 ({', '.join(endpoint.required)}).",
            file=sys.stderr,
        )
        return 2

    arguments: Dict[str, str] = dict(zip(endpoint.required, args.arguments))
    optional = _parse_params(args.param)
    unknown = sorted(set(optional) - set(endpoint.optional))
    if unknown:
        print(f"{endpoint.name}: 알 수 없는 선택 인자입니다: {', '.join(unknown)}", file=sys.stderr)
        return 2
    arguments.update(optional)

    factory = client_factory or (lambda: LocalBitcoinsClient.from_settings(get_settings().localbitcoins))
    try:
        with factory() as client:
            if args.host:
                client.set_host(args.host)
            result = client.call_endpoint(endpoint, **arguments)
    except AppError as exc:
        logger.error("%s 호출 실패: %s", endpoint.name, exc)
        return 1

    print(json.dumps(result, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
