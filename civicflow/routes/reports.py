"""
Report endpoints - submission, status updates and deletion.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from civicflow.core.errors import PersistenceError, ValidationError
from civicflow.dependencies import get_report_store, get_reporting, require_role
from civicflow.models.base import BaseResponse
from civicflow.models.report import (
    CustomReportCreate,
    CustomReportFields,
    Report,
    ReportCreate,
    StatusUpdate,
    location_from,
)
from civicflow.models.user import UserRole
from civicflow.services.report_store import ReportStore
from civicflow.services.reporting_service import ReportingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

STAFF_ROLES = (UserRole.MUNICIPALITY, UserRole.HOSPITAL)
SIGNED_IN = tuple(UserRole)


def _persistence_unavailable(e: PersistenceError) -> HTTPException:
    logger.error(f"Report persistence failed: {e}")
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Report storage unavailable: {e}",
    )


@router.post("", response_model=Report, status_code=status.HTTP_201_CREATED)
async def submit_report(
    payload: ReportCreate,
    reporting: ReportingService = Depends(get_reporting),
    _profile=Depends(require_role(UserRole.CITIZEN)),
):
    """
    Report a catalog category at the device location.

    Severity, deadline and presentation come from the category policy.
    """
    logger.info(f"POST /reports - category={payload.category.value}")
    try:
        return reporting.report_category(
            payload.category,
            location_from(payload.latitude, payload.longitude),
            photo_data=payload.photo_data,
            description=payload.description,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except PersistenceError as e:
        raise _persistence_unavailable(e)


@router.post("/custom", response_model=Report, status_code=status.HTTP_201_CREATED)
async def submit_custom_report(
    payload: CustomReportCreate,
    reporting: ReportingService = Depends(get_reporting),
    _profile=Depends(require_role(UserRole.CITIZEN)),
):
    """Report a free-form issue. Description and photo are required."""
    fields = CustomReportFields(
        description=payload.description,
        label=payload.label,
        icon=payload.icon,
        color=payload.color,
        severity=payload.severity,
    )
    try:
        return reporting.report_custom(
            fields,
            location_from(payload.latitude, payload.longitude),
            photo_data=payload.photo_data,
        )
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except PersistenceError as e:
        raise _persistence_unavailable(e)


@router.get("/{report_id}", response_model=Report)
async def get_report(report_id: str, store: ReportStore = Depends(get_report_store)):
    report = store.get(report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Report {report_id} not found")
    return report


@router.patch("/{report_id}/status", response_model=Report)
async def update_report_status(
    report_id: str,
    payload: StatusUpdate,
    store: ReportStore = Depends(get_report_store),
    _profile=Depends(require_role(*STAFF_ROLES)),
):
    """Mark a report resolved or reopen it."""
    try:
        found = store.update_status(report_id, payload.is_resolved)
    except PersistenceError as e:
        raise _persistence_unavailable(e)

    if not found:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Report {report_id} not found")
    return store.get(report_id)


@router.delete("/{report_id}", response_model=BaseResponse)
async def delete_report(
    report_id: str,
    store: ReportStore = Depends(get_report_store),
    _profile=Depends(require_role(*SIGNED_IN)),
):
    """Delete one report. Deleting an unknown ID succeeds and changes nothing."""
    try:
        store.remove(report_id)
    except PersistenceError as e:
        raise _persistence_unavailable(e)
    return BaseResponse(message=f"Report {report_id} removed")


@router.delete("", response_model=BaseResponse)
async def delete_all_reports(
    store: ReportStore = Depends(get_report_store),
    _profile=Depends(require_role(*SIGNED_IN)),
):
    """Delete every report on this device. Irreversible."""
    try:
        store.remove_all()
    except PersistenceError as e:
        raise _persistence_unavailable(e)
    return BaseResponse(message="All reports removed")
