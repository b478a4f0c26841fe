# tutorlink/api/v1/endpoints/tutor_applications.py
# Tutor application review
#
# Admin panel:
#   GET  /tutor-applications                    → list (status / subject / district filters)
#   GET  /tutor-applications/stats              → counts per status
#   PUT  /tutor-applications/{id}/approve       → pending → approved
#   PUT  /tutor-applications/{id}/reject        → pending → rejected (adminNotes required)
#
# Tutor dashboard:
#   GET  /tutor-dashboard/applications          → own applications
#   PUT  /tutor-dashboard/applications/{id}/withdraw

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

import tutorlink.db.base  # noqa: F401
from tutorlink.core.dependencies import require_admin, require_tutor
from tutorlink.core.workflow import APPLICATION, ensure_transition
from tutorlink.db.filters import json_list_contains
from tutorlink.db.session import get_db
from tutorlink.models.application import TutorApplication
from tutorlink.models.tutor_request import TutorRequest
from tutorlink.models.user import User
from tutorlink.schemas.application import (
    ApplicationResponse,
    ApplicationStats,
    ApproveApplicationRequest,
    RejectApplicationRequest,
)
from tutorlink.schemas.common import DataResponse
from tutorlink.services.notification_service import notify_application_reviewed
from tutorlink.services.responses import build_application_response

router = APIRouter()
dashboard_router = APIRouter()
logger = logging.getLogger("tutorlink.tutor_applications")


def _get_application(application_id: UUID, db: Session) -> TutorApplication:
    application = db.query(TutorApplication).filter(
        TutorApplication.id == application_id
    ).first()
    if not application:
        raise HTTPException(status_code=404, detail="Application not found.")
    return application


def _review(
    application: TutorApplication,
    status: str,
    admin_notes: Optional[str],
    reviewer: User,
    db: Session,
) -> DataResponse[ApplicationResponse]:
    ensure_transition(APPLICATION, application.status, status)

    application.status = status
    if admin_notes is not None:
        application.admin_notes = admin_notes
    application.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(application)
    logger.info("Application %s %s by %s", application.id, status, reviewer.id)

    notify_application_reviewed(application.tutor, status, application.admin_notes)
    return DataResponse(
        message=f"Application {status} successfully.",
        data=build_application_response(application, include_job=True),
    )


# ── Admin Panel ───────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=DataResponse[List[ApplicationResponse]],
    summary="List tutor applications",
)
def list_applications(
    status: Optional[str] = Query(None, description="pending|approved|rejected|withdrawn"),
    subject: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(TutorApplication).join(
        TutorRequest, TutorRequest.id == TutorApplication.tutor_request_id
    )
    if status and status != "all":
        query = query.filter(TutorApplication.status == status)
    if subject:
        query = query.filter(json_list_contains(TutorRequest.selected_subjects, subject))
    if district:
        query = query.filter(TutorRequest.district.ilike(district))

    results = query.order_by(TutorApplication.created_at.desc()).all()
    return DataResponse(data=[build_application_response(a, include_job=True) for a in results])


@router.get(
    "/stats",
    response_model=DataResponse[ApplicationStats],
    summary="Application counts per status",
)
def application_stats(
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    rows = db.query(
        TutorApplication.status, func.count(TutorApplication.id)
    ).group_by(TutorApplication.status).all()

    counts = {status: count for status, count in rows}
    return DataResponse(data=ApplicationStats(total=sum(counts.values()), **counts))


@router.put(
    "/{application_id}/approve",
    response_model=DataResponse[ApplicationResponse],
    summary="Approve a pending application",
)
def approve_application(
    application_id: UUID,
    payload: Optional[ApproveApplicationRequest] = Body(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    application = _get_application(application_id, db)
    notes = payload.admin_notes if payload else None
    return _review(application, "approved", notes, current_user, db)


@router.put(
    "/{application_id}/reject",
    response_model=DataResponse[ApplicationResponse],
    summary="Reject a pending application (admin notes required)",
)
def reject_application(
    application_id: UUID,
    payload: RejectApplicationRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    application = _get_application(application_id, db)
    return _review(application, "rejected", payload.admin_notes, current_user, db)


# ── Tutor Dashboard ───────────────────────────────────────────────────────────

@dashboard_router.get(
    "/applications",
    response_model=DataResponse[List[ApplicationResponse]],
    summary="Tutor sees own applications",
)
def list_my_applications(
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    results = db.query(TutorApplication).filter(
        TutorApplication.tutor_id == current_user.id
    ).order_by(TutorApplication.created_at.desc()).all()
    return DataResponse(data=[build_application_response(a, include_job=True) for a in results])


@dashboard_router.put(
    "/applications/{application_id}/withdraw",
    response_model=DataResponse[ApplicationResponse],
    summary="Tutor withdraws own application",
)
def withdraw_application(
    application_id: UUID,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    application = _get_application(application_id, db)
    if application.tutor_id != current_user.id:
        raise HTTPException(status_code=403, detail="You can only withdraw your own applications.")

    ensure_transition(APPLICATION, application.status, "withdrawn")
    application.status = "withdrawn"
    application.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(application)
    logger.info("Application %s withdrawn by tutor %s", application.id, current_user.id)

    return DataResponse(
        message="Application withdrawn successfully.",
        data=build_application_response(application, include_job=True),
    )
