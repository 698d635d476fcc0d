import re
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LICENSE_KEY_PREFIX = "CTP"
# no 0/O/1/I
LICENSE_KEY_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
LICENSE_KEY_GROUPS = 3
LICENSE_KEY_GROUP_SIZE = 4
LICENSE_KEY_PATTERN = re.compile(
    rf"^{LICENSE_KEY_PREFIX}"
    + rf"-[{LICENSE_KEY_ALPHABET}]{{{LICENSE_KEY_GROUP_SIZE}}}" * LICENSE_KEY_GROUPS
    + "$"
)


class LicenseErrorCode(str, Enum):
    METHOD_NOT_ALLOWED = "method_not_allowed"
    MISSING_KEY = "missing_key"
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    MISSING_ADMIN_SECRET = "missing_admin_secret"
    DB_ERROR = "db_error"
    SERVER_ERROR = "server_error"

    def __str__(self):
        return self.value


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class LicenseRecord(BaseModel):
    key: str
    active: Optional[bool] = True


class IssueLicenseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    admin_secret: Optional[str] = Field(default=None, alias="adminSecret")

    @field_validator("admin_secret", mode="before")
    @classmethod
    def coerce_secret(cls, value: Any) -> Optional[str]:
        return None if value is None else _to_text(value)


class VerifyLicenseRequest(BaseModel):
    key: str = ""

    @field_validator("key", mode="before")
    @classmethod
    def normalize_key(cls, value: Any) -> str:
        return _to_text(value).strip()


class IssueLicenseResponse(BaseModel):
    ok: Literal[True] = True
    key: str


class VerifyLicenseResponse(BaseModel):
    ok: Literal[True] = True
    valid: bool


class ErrorResponse(BaseModel):
    ok: Literal[False] = False
    error: LicenseErrorCode
    detail: Optional[str] = None


class MethodNotAllowedResponse(BaseModel):
    error: Literal[LicenseErrorCode.METHOD_NOT_ALLOWED] = LicenseErrorCode.METHOD_NOT_ALLOWED
