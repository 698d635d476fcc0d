import asyncio
from typing import Optional

import structlog

from app.models.license import LicenseRecord
from app.repository.licenses_repository import BaseLicenseStore, LicenseStoreError
from app.services.admin_auth_service import AdminAuthResult, check_admin_secret
from app.services.license_key_service import generate_license_key

logger = structlog.get_logger(__name__)


class MissingAdminSecretError(Exception):
    pass


class UnauthorizedError(Exception):
    pass


class MissingKeyError(Exception):
    pass


class LicenseService:
    """
    Issues and verifies license keys against a license store.

    Every call does at most one store operation, bounded by store_timeout. Issuing is not
    idempotent: a retried call after an ambiguous failure may mint a second key.
    """

    def __init__(self, store: BaseLicenseStore, admin_secret: Optional[str], store_timeout: float = 10.0):
        self.store = store
        self.admin_secret = admin_secret
        self.store_timeout = store_timeout

    async def _bounded(self, coro):
        try:
            return await asyncio.wait_for(coro, timeout=self.store_timeout)
        except asyncio.TimeoutError:
            logger.error("License store timed out", timeout=self.store_timeout)
            raise LicenseStoreError(f"License store did not respond within {self.store_timeout}s")

    async def issue_license(self, provided_secret: str) -> str:
        auth = check_admin_secret(provided_secret, self.admin_secret)
        if auth is AdminAuthResult.MISCONFIGURED:
            logger.error("Admin issue secret is not configured")
            raise MissingAdminSecretError()
        if auth is AdminAuthResult.UNAUTHORIZED:
            logger.warning("Rejected license issuance, bad admin secret")
            raise UnauthorizedError()

        key = generate_license_key()
        await self._bounded(self.store.insert(LicenseRecord(key=key, active=True)))
        logger.info("Issued license")
        return key

    async def verify_license(self, key: str) -> bool:
        key = (key or "").strip()
        if not key:
            raise MissingKeyError()

        record = await self._bounded(self.store.find_by_key(key))
        # never issued and deactivated look the same to the caller
        return record is not None and record.active is True
