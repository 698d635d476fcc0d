from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sentry_sdk import capture_exception

from app.depends.license import get_license_service
from app.models.license import (
    ErrorResponse,
    IssueLicenseRequest,
    IssueLicenseResponse,
    LicenseErrorCode,
    VerifyLicenseRequest,
    VerifyLicenseResponse,
)
from app.repository.licenses_repository import LicenseStoreError
from app.services.admin_auth_service import extract_admin_secret
from app.services.license_service import LicenseService, MissingAdminSecretError, MissingKeyError, UnauthorizedError

router = APIRouter(prefix="/api", tags=["licenses"])

logger = structlog.get_logger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    405: {"description": "Method not allowed"},
    500: {"model": ErrorResponse},
}


def error_response(status_code: int, error: LicenseErrorCode, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(mode="json", exclude_none=True)
    )


@router.post("/admin/issue-license", responses=ERROR_RESPONSES)
async def issue_license(
        data: Optional[IssueLicenseRequest] = None,
        x_admin_secret: Optional[str] = Header(default=None),
        license_service: LicenseService = Depends(get_license_service)
) -> IssueLicenseResponse:
    provided = extract_admin_secret(x_admin_secret, data.admin_secret if data else None)
    try:
        key = await license_service.issue_license(provided)
        return IssueLicenseResponse(key=key)
    except MissingAdminSecretError:
        return error_response(500, LicenseErrorCode.MISSING_ADMIN_SECRET)
    except UnauthorizedError:
        return error_response(401, LicenseErrorCode.UNAUTHORIZED)
    except LicenseStoreError as e:
        return error_response(500, LicenseErrorCode.DB_ERROR, e.detail)
    except Exception as e:
        logger.error("Failed to issue license", error=str(e))
        capture_exception(e)
        return error_response(500, LicenseErrorCode.SERVER_ERROR, str(e) or repr(e))


@router.post("/verify-license", responses=ERROR_RESPONSES)
async def verify_license(
        data: Optional[VerifyLicenseRequest] = None,
        license_service: LicenseService = Depends(get_license_service)
) -> VerifyLicenseResponse:
    try:
        valid = await license_service.verify_license(data.key if data else "")
        return VerifyLicenseResponse(valid=valid)
    except MissingKeyError:
        return error_response(400, LicenseErrorCode.MISSING_KEY)
    except LicenseStoreError as e:
        return error_response(500, LicenseErrorCode.DB_ERROR, e.detail)
    except Exception as e:
        logger.error("Failed to verify license", error=str(e))
        capture_exception(e)
        return error_response(500, LicenseErrorCode.SERVER_ERROR, str(e) or repr(e))
