from abc import ABC, abstractmethod
from typing import Optional

import httpx
import structlog
from postgrest import APIError
from postgrest.types import CountMethod
from sentry_sdk import capture_exception

from app.models.license import LicenseRecord
from app.services.db.base import BaseDBConnectionService

logger = structlog.get_logger(__name__)

UNIQUE_VIOLATION = "23505"


class LicenseStoreError(Exception):
    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BaseLicenseStore(ABC):
    @abstractmethod
    async def insert(self, record: LicenseRecord) -> None:
        raise NotImplementedError()

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[LicenseRecord]:
        """
        Zero matches is a normal outcome and returns None.
        Failures of the store itself raise LicenseStoreError.
        """
        raise NotImplementedError()


class LicensesRepository(BaseLicenseStore):
    table_name = "licenses"

    def __init__(self, db_connection: BaseDBConnectionService):
        self.db_connection = db_connection

    async def _table(self):
        db = await self.db_connection.connect()
        return db.table(self.table_name)

    async def insert(self, record: LicenseRecord) -> None:
        repository = await self._table()
        try:
            await repository.insert(record.model_dump(), count=CountMethod.exact).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.error("License key collision", error=e.message)
            else:
                logger.error("Failed to insert license", error=e.message, code=e.code)
            capture_exception(e)
            raise LicenseStoreError(e.message or str(e))
        except httpx.HTTPError as e:
            logger.error("Failed to reach license store", error=str(e))
            capture_exception(e)
            raise LicenseStoreError(str(e) or e.__class__.__name__)

    async def find_by_key(self, key: str) -> Optional[LicenseRecord]:
        repository = await self._table()
        try:
            response = await repository.select("key, active").eq("key", key).maybe_single().execute()
        except APIError as e:
            logger.error("Failed to look up license", error=e.message, code=e.code)
            capture_exception(e)
            raise LicenseStoreError(e.message or str(e))
        except httpx.HTTPError as e:
            logger.error("Failed to reach license store", error=str(e))
            capture_exception(e)
            raise LicenseStoreError(str(e) or e.__class__.__name__)

        if response is None or not response.data:
            return None
        return LicenseRecord(**response.data)
