from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from app.depends.license import get_license_store, get_settings
from app.main import app
from app.models.license import LicenseRecord
from app.repository.licenses_repository import BaseLicenseStore, LicenseStoreError
from app.settings import Settings

ADMIN_SECRET = "s3cr3t"


class InMemoryLicenseStore(BaseLicenseStore):
    def __init__(self):
        self.records: Dict[str, LicenseRecord] = {}
        self.fail_with: Optional[Exception] = None
        self.inserts = 0
        self.lookups = 0

    async def insert(self, record: LicenseRecord) -> None:
        self.inserts += 1
        if self.fail_with:
            raise self.fail_with
        if record.key in self.records:
            raise LicenseStoreError('duplicate key value violates unique constraint "licenses_key_key"')
        self.records[record.key] = record.model_copy()

    async def find_by_key(self, key: str) -> Optional[LicenseRecord]:
        self.lookups += 1
        if self.fail_with:
            raise self.fail_with
        return self.records.get(key)

    def deactivate(self, key: str):
        self.records[key].active = False


@pytest.fixture
def store() -> InMemoryLicenseStore:
    return InMemoryLicenseStore()


@pytest.fixture
def app_settings() -> Settings:
    return Settings.model_construct(admin_issue_secret=ADMIN_SECRET, store_timeout=1.0)


@pytest.fixture
def client(store, app_settings):
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_license_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
