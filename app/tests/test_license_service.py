import asyncio

import pytest

from app.models.license import LicenseRecord
from app.repository.licenses_repository import LicenseStoreError
from app.services.license_key_service import is_well_formed_license_key
from app.services.license_service import LicenseService, MissingAdminSecretError, MissingKeyError, UnauthorizedError
from app.tests.conftest import ADMIN_SECRET, InMemoryLicenseStore


class SlowStore(InMemoryLicenseStore):
    async def insert(self, record):
        await asyncio.sleep(5)

    async def find_by_key(self, key):
        await asyncio.sleep(5)


@pytest.fixture
def service(store):
    return LicenseService(store=store, admin_secret=ADMIN_SECRET, store_timeout=1.0)


async def test_issue_stores_active_record(service, store):
    key = await service.issue_license(ADMIN_SECRET)

    assert is_well_formed_license_key(key)
    assert store.records == {key: LicenseRecord(key=key, active=True)}


async def test_issue_is_not_idempotent(service, store):
    first = await service.issue_license(ADMIN_SECRET)
    second = await service.issue_license(ADMIN_SECRET)

    assert first != second
    assert len(store.records) == 2


async def test_issue_without_configured_secret(store):
    service = LicenseService(store=store, admin_secret="")

    with pytest.raises(MissingAdminSecretError):
        await service.issue_license(ADMIN_SECRET)
    assert store.inserts == 0


async def test_issue_with_wrong_secret(service, store):
    with pytest.raises(UnauthorizedError):
        await service.issue_license("wrong")
    assert store.inserts == 0


async def test_issue_store_failure_is_not_retried(service, store):
    store.fail_with = LicenseStoreError("connection refused")

    with pytest.raises(LicenseStoreError, match="connection refused"):
        await service.issue_license(ADMIN_SECRET)
    assert store.inserts == 1


async def test_round_trip(service):
    key = await service.issue_license(ADMIN_SECRET)
    assert await service.verify_license(key) is True
    assert await service.verify_license(f"  {key}\n") is True


async def test_unknown_and_deactivated_keys_look_the_same(service, store):
    key = await service.issue_license(ADMIN_SECRET)
    store.deactivate(key)

    assert await service.verify_license(key) is False
    assert await service.verify_license("CTP-0000-0000-0000") is False


async def test_active_flag_must_be_strictly_true(service, store):
    store.records["CTP-AAAA-BBBB-CCCC"] = LicenseRecord(key="CTP-AAAA-BBBB-CCCC", active=None)
    assert await service.verify_license("CTP-AAAA-BBBB-CCCC") is False


@pytest.mark.parametrize("key", ["", "   ", "\t\n", None])
async def test_verify_requires_key(service, store, key):
    with pytest.raises(MissingKeyError):
        await service.verify_license(key)
    assert store.lookups == 0


async def test_verify_store_failure(service, store):
    store.fail_with = LicenseStoreError("relation \"licenses\" does not exist")

    with pytest.raises(LicenseStoreError):
        await service.verify_license("CTP-AAAA-BBBB-CCCC")


async def test_store_timeout_becomes_store_error():
    service = LicenseService(store=SlowStore(), admin_secret=ADMIN_SECRET, store_timeout=0.05)

    with pytest.raises(LicenseStoreError, match="did not respond"):
        await service.verify_license("CTP-AAAA-BBBB-CCCC")
    with pytest.raises(LicenseStoreError, match="did not respond"):
        await service.issue_license(ADMIN_SECRET)
