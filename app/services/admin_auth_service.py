import hmac
from enum import Enum
from typing import Optional


class AdminAuthResult(str, Enum):
    AUTHORIZED = "authorized"
    UNAUTHORIZED = "unauthorized"
    MISCONFIGURED = "misconfigured"

    def __str__(self):
        return self.value


def extract_admin_secret(header_value: Optional[str], body_value: Optional[str]) -> str:
    # header wins whenever it was sent, even empty
    if header_value is not None:
        return header_value
    if body_value is not None:
        return body_value
    return ""


def check_admin_secret(candidate: Optional[str], configured: Optional[str]) -> AdminAuthResult:
    if not configured:
        return AdminAuthResult.MISCONFIGURED

    expected = configured.encode("utf-8")
    provided = (candidate or "").encode("utf-8")
    if len(expected) != len(provided):
        return AdminAuthResult.UNAUTHORIZED
    # compare_digest visits every byte regardless of where the first mismatch is
    if not hmac.compare_digest(expected, provided):
        return AdminAuthResult.UNAUTHORIZED
    return AdminAuthResult.AUTHORIZED
