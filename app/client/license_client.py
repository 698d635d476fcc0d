from enum import Enum
from typing import Any, Dict, Optional

import httpx
import structlog

from app.models.license import LicenseErrorCode

logger = structlog.get_logger(__name__)


class VerificationOutcome(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    NETWORK_ERROR = "network_error"
    PROTOCOL_ERROR = "protocol_error"
    SERVER_ERROR = "server_error"

    def __str__(self):
        return self.value


class LicenseApiError(Exception):
    def __init__(self, status_code: int, error: str, detail: Optional[str] = None):
        super().__init__(f"{status_code} {error}" + (f": {detail}" if detail else ""))
        self.status_code = status_code
        self.error = error
        self.detail = detail


class LicenseApiClient:
    """
    Talks to the license API from an installation of the app.

    verify_license keeps "the key is not valid" apart from "we could not find out", so the
    caller can tell the user to retry instead of telling them the key is wrong.
    """
    verify_path = "/api/verify-license"
    issue_path = "/api/admin/issue-license"

    def __init__(self, base_url: str = "", timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def get_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"content-type": "application/json"},
            timeout=self.timeout,
            transport=self.transport,
        )

    @staticmethod
    def _json_object(response: httpx.Response) -> Dict[str, Any] | None:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    async def verify_license(self, key: str) -> VerificationOutcome:
        try:
            async with self.get_http_client() as client:
                response = await client.post(self.verify_path, json={"key": key.strip()})
        except httpx.TransportError as e:
            logger.warning("License API unreachable", error=str(e))
            return VerificationOutcome.NETWORK_ERROR

        data = self._json_object(response)
        if data is None or not isinstance(data.get("ok"), bool):
            logger.warning("Unexpected license API response", status_code=response.status_code)
            return VerificationOutcome.PROTOCOL_ERROR

        if not data["ok"]:
            if data.get("error") == LicenseErrorCode.MISSING_KEY.value:
                return VerificationOutcome.INVALID
            logger.warning("License API failed", status_code=response.status_code, error=data.get("error"))
            return VerificationOutcome.SERVER_ERROR

        valid = data.get("valid")
        if not isinstance(valid, bool):
            return VerificationOutcome.PROTOCOL_ERROR
        return VerificationOutcome.VALID if valid else VerificationOutcome.INVALID

    async def is_license_valid(self, key: str) -> bool:
        return await self.verify_license(key) is VerificationOutcome.VALID

    async def issue_license(self, admin_secret: str) -> str:
        try:
            async with self.get_http_client() as client:
                response = await client.post(self.issue_path, headers={"x-admin-secret": admin_secret})
        except httpx.TransportError as e:
            logger.warning("License API unreachable", error=str(e))
            raise LicenseApiError(0, "network_error", str(e) or e.__class__.__name__)
        data = self._json_object(response) or {}
        if response.status_code != 200 or not data.get("ok") or not data.get("key"):
            raise LicenseApiError(response.status_code, str(data.get("error", "unexpected_response")), data.get("detail"))
        return data["key"]
