"""정비 요청 번호 형식 유틸리티.

Request number codec: ``MR-<YYYY><MM>-<NNNN>``.
"""

import re
from datetime import datetime

REQUEST_NUMBER_PREFIX: str = "MR"

# 순번은 최소 4자리, 9999 초과 시 자릿수 확장 (At least four digits, widens past 9999)
_PATTERN = re.compile(r"^MR-(\d{4})(\d{2})-(\d{4,})$")


def period_for(moment: datetime) -> str:
    """연월 키 (YYYYMM period key for a timestamp)."""
    return f"{moment.year:04d}{moment.month:02d}"


def format_request_number(period: str, sequence: int) -> str:
    """요청 번호 문자열 생성: e.g. ("202610", 7) -> "MR-202610-0007"."""
    return f"{REQUEST_NUMBER_PREFIX}-{period}-{sequence:04d}"


def period_prefix(period: str) -> str:
    """해당 월 번호의 접두사 ("MR-YYYYMM-" prefix for LIKE queries)."""
    return f"{REQUEST_NUMBER_PREFIX}-{period}-"


def is_valid_request_number(request_number: str) -> bool:
    match = _PATTERN.match(request_number)
    return match is not None and 1 <= int(match.group(2)) <= 12


def parse_sequence(request_number: str) -> int | None:
    """요청 번호에서 순번을 추출합니다. 형식 불일치(잘못된 월 포함) 시 None."""
    if not is_valid_request_number(request_number):
        return None
    return int(_PATTERN.match(request_number).group(3))
