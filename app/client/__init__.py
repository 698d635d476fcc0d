from app.client.entitlement import JsonFileEntitlementStorage, ProEntitlement, VerificationInProgressError
from app.client.license_client import LicenseApiClient, LicenseApiError, VerificationOutcome

__all__ = [
    "JsonFileEntitlementStorage",
    "LicenseApiClient",
    "LicenseApiError",
    "ProEntitlement",
    "VerificationInProgressError",
    "VerificationOutcome",
]
