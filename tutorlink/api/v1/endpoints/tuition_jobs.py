# tutorlink/api/v1/endpoints/tuition_jobs.py
# Tuition job board: tutor requests as seen by tutors, plus tutor self-service
#
#   GET    /tuition-jobs                         → open jobs (anyone)
#   GET    /tuition-jobs/{id}                    → job detail (anyone)
#   POST   /tuition-jobs/{id}/apply              → tutor applies
#   GET    /tuition-jobs/{id}/check-application  → tutor's active application or null
#   POST   /tuition-jobs/{id}/reset-application  → withdraw so the tutor can re-apply
#
# One application row per (job, tutor): reset sets it to withdrawn and a later
# apply brings the same row back to pending.

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import tutorlink.db.base  # noqa: F401
from tutorlink.core.dependencies import get_optional_user, require_login, require_tutor
from tutorlink.core.workflow import APPLICATION, ensure_transition
from tutorlink.db.filters import LIKE_ESCAPE, contains_text, json_list_contains, like_escape
from tutorlink.db.session import get_db
from tutorlink.models.application import TutorApplication
from tutorlink.models.tutor_request import TutorRequest
from tutorlink.models.user import User
from tutorlink.schemas.application import (
    ApplicationResponse,
    ApplyForJobRequest,
    ResetApplicationRequest,
)
from tutorlink.schemas.common import DataResponse, MessageResponse, PagedResponse, Pagination
from tutorlink.schemas.tutor_request import TuitionJobResponse
from tutorlink.services.notification_service import notify_application_received
from tutorlink.services.responses import build_application_response, build_job_response

router = APIRouter()
logger = logging.getLogger("tutorlink.tuition_jobs")

OPEN_STATUSES = ("Active", "Assign")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _get_job(job_id: UUID, db: Session) -> TutorRequest:
    job = db.query(TutorRequest).filter(TutorRequest.id == job_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Tuition job not found.")
    return job


def _duplicate() -> HTTPException:
    return HTTPException(
        status_code=409,
        detail={
            "message": "You have already applied for this job.",
            "code": "duplicate_application",
        },
    )


def _find_application(job_id: UUID, tutor_id: UUID, db: Session) -> Optional[TutorApplication]:
    return db.query(TutorApplication).filter(
        TutorApplication.tutor_request_id == job_id,
        TutorApplication.tutor_id == tutor_id,
    ).first()


# ── Job Board ─────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=PagedResponse[TuitionJobResponse],
    summary="Open tuition jobs",
)
def list_tuition_jobs(
    subject: Optional[str] = Query(None),
    district: Optional[str] = Query(None),
    area: Optional[str] = Query(None),
    tutoring_type: Optional[str] = Query(None, alias="tutoringType"),
    category: Optional[str] = Query(None),
    salary_min: Optional[int] = Query(None, ge=0, alias="salaryMin"),
    salary_max: Optional[int] = Query(None, ge=0, alias="salaryMax"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """
    Active and partly assigned requests, newest first.

    salaryMin / salaryMax keep jobs whose salary range overlaps the given
    range; either bound may be left out.
    """
    if salary_min is not None and salary_max is not None and salary_min > salary_max:
        raise HTTPException(
            status_code=400,
            detail={"message": "salaryMin must be <= salaryMax.", "code": "validation_error"},
        )

    query = db.query(TutorRequest).filter(TutorRequest.status.in_(OPEN_STATUSES))

    if subject:
        query = query.filter(json_list_contains(TutorRequest.selected_subjects, subject))
    if district:
        query = query.filter(TutorRequest.district.ilike(district))
    if area:
        query = query.filter(contains_text(TutorRequest.area, area))
    if tutoring_type:
        query = query.filter(TutorRequest.tutoring_type == tutoring_type)
    if category:
        query = query.filter(or_(
            TutorRequest.category.ilike(like_escape(category.strip()), escape=LIKE_ESCAPE),
            json_list_contains(TutorRequest.selected_categories, category),
        ))
    if salary_max is not None:
        query = query.filter(TutorRequest.salary_min <= salary_max)
    if salary_min is not None:
        query = query.filter(TutorRequest.salary_max >= salary_min)

    total = query.count()
    results = query.order_by(
        TutorRequest.created_at.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    return PagedResponse(
        data=[build_job_response(job, db) for job in results],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.get(
    "/{job_id}",
    response_model=DataResponse[TuitionJobResponse],
    summary="Tuition job detail",
)
def get_tuition_job(
    job_id: UUID,
    current_user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return DataResponse(data=build_job_response(_get_job(job_id, db), db))


# ── Applications ──────────────────────────────────────────────────────────────

@router.post(
    "/{job_id}/apply",
    response_model=DataResponse[ApplicationResponse],
    status_code=201,
    summary="Tutor applies for a tuition job",
)
def apply_for_job(
    job_id: UUID,
    payload: Optional[ApplyForJobRequest] = Body(None),
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    """
    Fails with 409 while the tutor holds a non-withdrawn application.
    A withdrawn application is reopened instead of inserting a new row;
    the unique (job, tutor) constraint catches two tabs applying at once.
    """
    payload = payload or ApplyForJobRequest()
    job = _get_job(job_id, db)
    if job.status not in OPEN_STATUSES:
        raise HTTPException(
            status_code=400,
            detail={
                "message": "This tuition job is no longer accepting applications.",
                "code": "job_closed",
            },
        )

    application = _find_application(job.id, current_user.id, db)
    if application and application.status != "withdrawn":
        raise _duplicate()

    try:
        if application:
            ensure_transition(APPLICATION, application.status, "pending")
            application.status = "pending"
            application.cover_letter = payload.cover_letter
            application.proposed_rate = payload.proposed_rate
            application.admin_notes = None
            application.updated_at = datetime.now(timezone.utc)
        else:
            application = TutorApplication(
                tutor_request_id=job.id,
                tutor_id=current_user.id,
                cover_letter=payload.cover_letter,
                proposed_rate=payload.proposed_rate,
                status="pending",
            )
            db.add(application)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent application by tutor %s for job %s rejected", current_user.id, job_id)
        raise _duplicate()

    db.refresh(application)
    logger.info("Tutor %s applied for job %s", current_user.id, job.id)

    admins = db.query(User).filter(User.role == "admin", User.is_active == True).all()  # noqa: E712
    notify_application_received(admins, current_user, job)

    return DataResponse(
        message="Your application has been submitted successfully!",
        data=build_application_response(application),
    )


@router.get(
    "/{job_id}/check-application",
    response_model=DataResponse[Optional[ApplicationResponse]],
    summary="Tutor's active application for this job, if any",
)
def check_tutor_application(
    job_id: UUID,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    """data is null when the tutor has not applied (or has reset the application)."""
    application = _find_application(job_id, current_user.id, db)
    if application is None or application.status == "withdrawn":
        return DataResponse(data=None)
    return DataResponse(data=build_application_response(application))


@router.post(
    "/{job_id}/reset-application",
    response_model=MessageResponse,
    summary="Withdraw an application so the tutor can apply again",
)
def reset_application(
    job_id: UUID,
    payload: Optional[ResetApplicationRequest] = Body(None),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """
    Tutors reset their own application; admins pass {"tutorId": ...}.
    Resetting an already withdrawn application succeeds without changes.
    """
    if current_user.role == "tutor":
        tutor_id = current_user.id
    elif current_user.is_admin:
        if payload is None or payload.tutor_id is None:
            raise HTTPException(status_code=400, detail="tutorId is required.")
        tutor_id = payload.tutor_id
    else:
        raise HTTPException(status_code=403, detail="Only tutors and admins can reset applications.")

    application = _find_application(job_id, tutor_id, db)
    if application is None:
        raise HTTPException(status_code=404, detail="Application not found.")

    if application.status == "withdrawn":
        return MessageResponse(message="Application was already reset.")

    ensure_transition(APPLICATION, application.status, "withdrawn")
    previous = application.status
    application.status = "withdrawn"
    application.updated_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(
        "Application %s reset (%s → withdrawn) by %s", application.id, previous, current_user.id
    )

    return MessageResponse(message="Your application has been reset successfully.")
