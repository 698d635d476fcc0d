from fastapi import Depends

from app.repository.licenses_repository import BaseLicenseStore, LicensesRepository
from app.services.db.supabase import SupabaseConnectionService
from app.services.license_service import LicenseService
from app.settings import Settings, settings


def get_settings() -> Settings:
    return settings


def get_license_store() -> BaseLicenseStore:
    # connects on first use so a missing config is reported by the endpoint itself
    return LicensesRepository(SupabaseConnectionService())


def get_license_service(
        app_settings: Settings = Depends(get_settings),
        store: BaseLicenseStore = Depends(get_license_store)
) -> LicenseService:
    return LicenseService(
        store=store,
        admin_secret=app_settings.admin_issue_secret,
        store_timeout=app_settings.store_timeout
    )
