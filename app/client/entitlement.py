import asyncio
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import structlog

from app.client.license_client import LicenseApiClient, VerificationOutcome

logger = structlog.get_logger(__name__)


class VerificationInProgressError(Exception):
    pass


class BaseEntitlementStorage(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any:
        raise NotImplementedError()

    @abstractmethod
    async def set(self, key: str, value: Any) -> None:
        raise NotImplementedError()


class JsonFileEntitlementStorage(BaseEntitlementStorage):
    """Blocking file I/O, meant for a single local process such as the CLI."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            if self.path.exists():
                logger.warning("Unreadable entitlement file, treating as empty", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    async def get(self, key: str) -> Any:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")


class ProEntitlement:
    """
    Local cache of "this installation holds an active license".

    Only a VALID verification turns Pro on. Nothing turns it off again, a later INVALID
    answer leaves an already stored flag untouched.
    """
    storage_key = "ctp-pro"

    def __init__(self, client: LicenseApiClient, storage: BaseEntitlementStorage):
        self.client = client
        self.storage = storage
        self._lock = asyncio.Lock()

    async def is_pro(self) -> bool:
        return await self.storage.get(self.storage_key) is True

    async def activate(self, key: str) -> VerificationOutcome:
        if self._lock.locked():
            raise VerificationInProgressError()
        async with self._lock:
            outcome = await self.client.verify_license(key)
            if outcome is VerificationOutcome.VALID:
                await self.storage.set(self.storage_key, True)
                logger.info("Pro unlocked")
            return outcome
