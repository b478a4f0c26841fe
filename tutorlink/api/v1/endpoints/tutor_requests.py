# tutorlink/api/v1/endpoints/tutor_requests.py
# Tutor request and assignment endpoints
#
# Student flow:
#   POST   /tutor-requests                          → post a request (signed in)
#   POST   /tutor-requests/public                   → post a request (anonymous)
#   POST   /tutor-requests/public/from-tutor/{tid}  → anonymous, from a tutor's profile
#   GET    /tutor-requests/student                  → own requests
#   PUT    /tutor-requests/{id}                     → edit own request
#
# Admin flow:
#   GET    /tutor-requests                          → list with filters + pagination
#   PATCH  /tutor-requests/{id}/status              → move status (force = override)
#   DELETE /tutor-requests/{id}                     → delete (cascades assignments)
#   GET    /tutor-requests/{id}/assignments         → matched tutors
#   POST   /tutor-requests/{id}/assign              → assign tutor (+ optional demo class)
#   PATCH  /tutor-requests/{id}/assignments/{aid}   → assignment status
#   DELETE /tutor-requests/{id}/assignments/{aid}   → remove assignment (demo class kept)

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import tutorlink.db.base  # noqa: F401
from tutorlink.core.dependencies import require_admin, require_login
from tutorlink.core.workflow import ASSIGNMENT, TUTOR_REQUEST, ensure_transition
from tutorlink.db.filters import json_list_contains
from tutorlink.db.session import get_db
from tutorlink.models.demo_class import DemoClass
from tutorlink.models.tutor_request import TutorAssignment, TutorRequest
from tutorlink.models.user import User
from tutorlink.schemas.common import DataResponse, MessageResponse, PagedResponse, Pagination
from tutorlink.schemas.tutor_request import (
    AssignmentStatusUpdate,
    AssignTutorRequest,
    DemoClassOptions,
    TutorAssignmentResponse,
    TutorRequestCreate,
    TutorRequestResponse,
    TutorRequestStatusUpdate,
    TutorRequestUpdate,
)
from tutorlink.services.notification_service import (
    notify_assignment_updated,
    notify_tutor_assigned,
)
from tutorlink.services.responses import build_assignment_response, build_request_response

router = APIRouter()
logger = logging.getLogger("tutorlink.tutor_requests")

STAFF_ROLES = ("admin", "manager")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _get_request(request_id: UUID, db: Session) -> TutorRequest:
    req = db.query(TutorRequest).filter(TutorRequest.id == request_id).first()
    if not req:
        raise HTTPException(status_code=404, detail="Tutor request not found.")
    return req


def _is_owner(req: TutorRequest, user: User) -> bool:
    return req.student_id is not None and req.student_id == user.id


def _ensure_can_view(req: TutorRequest, user: User) -> None:
    if user.role not in STAFF_ROLES and not _is_owner(req, user):
        raise HTTPException(status_code=403, detail="You do not have access to this tutor request.")


def _ensure_can_edit(req: TutorRequest, user: User) -> None:
    if not user.is_admin and not _is_owner(req, user):
        raise HTTPException(status_code=403, detail="You do not have access to this tutor request.")


def _get_assignment(request_id: UUID, assignment_id: UUID, db: Session) -> TutorAssignment:
    assignment = db.query(TutorAssignment).filter(
        TutorAssignment.id == assignment_id,
        TutorAssignment.tutor_request_id == request_id,
    ).first()
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found.")
    return assignment


def _new_request(
    payload: TutorRequestCreate,
    student_id: Optional[UUID] = None,
    requested_tutor_id: Optional[UUID] = None,
) -> TutorRequest:
    data = payload.model_dump(exclude={"salary_range", "subject", "student_class"})
    return TutorRequest(
        **data,
        student_id=student_id,
        requested_tutor_id=requested_tutor_id,
        salary_min=payload.salary_range.min,
        salary_max=payload.salary_range.max,
        status="Active",
    )


def _save_new_request(req: TutorRequest, db: Session) -> DataResponse[TutorRequestResponse]:
    db.add(req)
    db.commit()
    db.refresh(req)
    logger.info("Tutor request %s created (student=%s)", req.id, req.student_id)
    return DataResponse(
        message="Tutor request submitted successfully.",
        data=build_request_response(req),
    )


def _create_demo_class(
    db: Session,
    req: TutorRequest,
    tutor: User,
    options: DemoClassOptions,
) -> DemoClass:
    """Create the demo class inside the caller's transaction (flushed, not committed)."""
    subjects = req.selected_subjects or []
    demo = DemoClass(
        tutor_request_id=req.id,
        student_id=req.student_id,
        tutor_id=tutor.id,
        subject=subjects[0] if subjects else (req.category or "General"),
        requested_date=options.requested_date,
        duration=options.duration,
        status="pending",
        admin_notes=options.notes,
    )
    db.add(demo)
    db.flush()
    return demo


# ── Create ────────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=DataResponse[TutorRequestResponse],
    status_code=201,
    summary="Signed-in student posts a tutor request",
)
def create_tutor_request(
    payload: TutorRequestCreate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """Students own the request they post; staff post on behalf of a walk-in student."""
    if current_user.role == "tutor":
        raise HTTPException(status_code=403, detail="Tutors cannot post tutor requests.")

    student_id = current_user.id if current_user.role == "student" else None
    return _save_new_request(_new_request(payload, student_id=student_id), db)


@router.post(
    "/public",
    response_model=DataResponse[TutorRequestResponse],
    status_code=201,
    summary="Anonymous visitor posts a tutor request",
)
def create_public_tutor_request(
    payload: TutorRequestCreate,
    db: Session = Depends(get_db),
):
    if not payload.phone_number or not payload.phone_number.strip():
        raise HTTPException(
            status_code=400,
            detail="A phone number is required so we can contact you.",
        )
    return _save_new_request(_new_request(payload), db)


@router.post(
    "/public/from-tutor/{tutor_id}",
    response_model=DataResponse[TutorRequestResponse],
    status_code=201,
    summary="Anonymous visitor requests a specific tutor",
)
def create_public_tutor_request_from_tutor(
    tutor_id: UUID,
    payload: TutorRequestCreate,
    db: Session = Depends(get_db),
):
    tutor = db.query(User).filter(
        User.id == tutor_id, User.role == "tutor", User.is_active == True  # noqa: E712
    ).first()
    if not tutor:
        raise HTTPException(status_code=404, detail="Tutor not found.")

    if not payload.phone_number or not payload.phone_number.strip():
        raise HTTPException(
            status_code=400,
            detail="A phone number is required so we can contact you.",
        )
    return _save_new_request(_new_request(payload, requested_tutor_id=tutor.id), db)


# ── Read ──────────────────────────────────────────────────────────────────────

@router.get(
    "/student",
    response_model=DataResponse[List[TutorRequestResponse]],
    summary="Student sees own tutor requests",
)
def list_student_requests(
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    requests = db.query(TutorRequest).filter(
        TutorRequest.student_id == current_user.id
    ).order_by(TutorRequest.created_at.desc()).all()
    return DataResponse(data=[build_request_response(r) for r in requests])


@router.get(
    "",
    response_model=PagedResponse[TutorRequestResponse],
    summary="List tutor requests with filters",
)
def list_tutor_requests(
    status: Optional[str] = Query(None, description="Active|Inactive|Completed|Assign"),
    subject: Optional[str] = Query(None, description="Matches any selected subject"),
    district: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """
    Staff see every request. Students only ever see their own,
    whatever filters they pass.
    """
    query = db.query(TutorRequest)
    if current_user.role not in STAFF_ROLES:
        if current_user.role != "student":
            raise HTTPException(status_code=403, detail="Use the tuition job board instead.")
        query = query.filter(TutorRequest.student_id == current_user.id)

    if status:
        query = query.filter(TutorRequest.status == status)
    if subject:
        query = query.filter(json_list_contains(TutorRequest.selected_subjects, subject))
    if district:
        query = query.filter(TutorRequest.district.ilike(district))

    total = query.count()
    results = query.order_by(
        TutorRequest.created_at.desc()
    ).offset((page - 1) * limit).limit(limit).all()

    return PagedResponse(
        data=[build_request_response(r) for r in results],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.get(
    "/{request_id}",
    response_model=DataResponse[TutorRequestResponse],
    summary="Tutor request detail",
)
def get_tutor_request(
    request_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    req = _get_request(request_id, db)
    _ensure_can_view(req, current_user)
    return DataResponse(data=build_request_response(req))


# ── Update / Delete ───────────────────────────────────────────────────────────

@router.put(
    "/{request_id}",
    response_model=DataResponse[TutorRequestResponse],
    summary="Owner or admin edits a tutor request",
)
def update_tutor_request(
    request_id: UUID,
    payload: TutorRequestUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """
    Applies only the fields present in the body. Empty strings are stored
    as-is: clearing adminNote or updateNotice means sending "".
    """
    req = _get_request(request_id, db)
    _ensure_can_edit(req, current_user)

    data = payload.model_dump(exclude_unset=True)
    if "admin_note" in data and not current_user.is_admin:
        raise HTTPException(status_code=403, detail="Only admins can set the admin note.")

    salary_range = data.pop("salary_range", None)
    if salary_range is not None:
        req.salary_min = salary_range["min"]
        req.salary_max = salary_range["max"]

    for field, value in data.items():
        setattr(req, field, value)
    req.updated_at = datetime.now(timezone.utc)

    db.commit()
    db.refresh(req)
    logger.info("Tutor request %s updated: %s", req.id, sorted(payload.model_fields_set))

    return DataResponse(
        message="Tutor request updated successfully.",
        data=build_request_response(req),
    )


@router.patch(
    "/{request_id}/status",
    response_model=MessageResponse,
    summary="Move a tutor request to another status",
)
def update_tutor_request_status(
    request_id: UUID,
    payload: TutorRequestStatusUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """
    Follows the request status table. Admins may pass force=true to move
    backwards (e.g. reopen a Completed request). Owners may deactivate,
    reactivate or complete their own request, never mark it Assign.
    """
    req = _get_request(request_id, db)
    _ensure_can_edit(req, current_user)
    is_admin = current_user.is_admin

    if payload.force and not is_admin:
        raise HTTPException(status_code=403, detail="Only admins can override the status workflow.")
    if payload.status == "Assign" and not is_admin:
        raise HTTPException(status_code=403, detail="Only admins can mark a request as assigned.")

    if not payload.force:
        ensure_transition(TUTOR_REQUEST, req.status, payload.status)

    previous = req.status
    req.status = payload.status
    req.updated_at = datetime.now(timezone.utc)
    db.commit()
    logger.info(
        "Tutor request %s status %s → %s by %s%s",
        req.id, previous, req.status, current_user.id, " (forced)" if payload.force else "",
    )

    return MessageResponse(message=f"Tutor request status updated to {req.status}.")


@router.delete(
    "/{request_id}",
    response_model=MessageResponse,
    summary="Delete a tutor request and its assignments",
)
def delete_tutor_request(
    request_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """Assignments and applications go with it; demo classes are kept, unlinked."""
    req = _get_request(request_id, db)
    _ensure_can_edit(req, current_user)

    db.delete(req)
    db.commit()
    logger.info("Tutor request %s deleted by %s", request_id, current_user.id)

    return MessageResponse(message="Tutor request deleted successfully.")


# ── Assignments ───────────────────────────────────────────────────────────────

@router.get(
    "/{request_id}/assignments",
    response_model=DataResponse[List[TutorAssignmentResponse]],
    summary="Tutors assigned to a request",
)
def list_assignments(
    request_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    req = _get_request(request_id, db)
    _ensure_can_view(req, current_user)
    return DataResponse(data=[build_assignment_response(a) for a in req.assignments])


@router.post(
    "/{request_id}/assign",
    response_model=DataResponse[TutorAssignmentResponse],
    status_code=201,
    summary="Admin assigns a tutor (optionally booking a demo class)",
)
def assign_tutor(
    request_id: UUID,
    payload: AssignTutorRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Creates the assignment, and the demo class when demoClass.createDemo is
    set, in ONE transaction: either both rows exist afterwards or neither.

    Re-assigning a tutor who already holds a pending/accepted assignment for
    this request reuses that row instead of adding a second one.
    Notifications go out only after the commit.
    """
    req = _get_request(request_id, db)
    if req.status in ("Inactive", "Completed"):
        raise HTTPException(
            status_code=400,
            detail={
                "message": f"Cannot assign tutors to a request that is '{req.status}'.",
                "code": "invalid_state_transition",
            },
        )

    tutor = db.query(User).filter(
        User.id == payload.tutor_id, User.role == "tutor", User.is_active == True  # noqa: E712
    ).first()
    if not tutor:
        raise HTTPException(status_code=404, detail="Tutor not found.")

    existing = db.query(TutorAssignment).filter(
        TutorAssignment.tutor_request_id == req.id,
        TutorAssignment.tutor_id == tutor.id,
        TutorAssignment.status.in_(("pending", "accepted")),
    ).first()

    now = datetime.now(timezone.utc)
    demo = None
    try:
        if existing:
            assignment = existing
            assignment.status = "pending"
            assignment.notes = payload.notes
            assignment.assigned_by = current_user.id
            assignment.assigned_at = now
            assignment.updated_at = now
        else:
            assignment = TutorAssignment(
                tutor_request_id=req.id,
                tutor_id=tutor.id,
                assigned_by=current_user.id,
                status="pending",
                notes=payload.notes,
                assigned_at=now,
            )
            db.add(assignment)
        db.flush()

        if payload.demo_class and payload.demo_class.create_demo:
            demo = _create_demo_class(db, req, tutor, payload.demo_class)
            assignment.demo_class_id = demo.id

        if req.status == "Active":
            req.status = "Assign"
            req.updated_at = now

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("Assigning tutor %s to request %s failed: %s", payload.tutor_id, request_id, exc)
        raise HTTPException(
            status_code=500,
            detail="Could not assign the tutor. Nothing was saved, please try again.",
        )

    db.refresh(assignment)
    logger.info(
        "Tutor %s assigned to request %s by %s (demo=%s, reused=%s)",
        tutor.id, req.id, current_user.id, demo.id if demo else None, existing is not None,
    )

    notify_tutor_assigned(
        tutor,
        req,
        demo_class=demo,
        send_email=payload.send_email_notification,
        send_sms=payload.send_sms_notification,
    )

    message = "Tutor assigned successfully."
    if demo is not None:
        message = "Tutor assigned and demo class scheduled successfully."
    return DataResponse(message=message, data=build_assignment_response(assignment))


@router.patch(
    "/{request_id}/assignments/{assignment_id}",
    response_model=DataResponse[TutorAssignmentResponse],
    summary="Move an assignment to another status",
)
def update_assignment_status(
    request_id: UUID,
    assignment_id: UUID,
    payload: AssignmentStatusUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    """
    Admins may perform any transition in the assignment table.
    The assigned tutor may only accept or reject a pending assignment.
    Rejected and completed assignments are final.
    """
    assignment = _get_assignment(request_id, assignment_id, db)

    is_admin = current_user.is_admin
    is_assigned_tutor = current_user.role == "tutor" and assignment.tutor_id == current_user.id
    if not (is_admin or is_assigned_tutor):
        raise HTTPException(status_code=403, detail="You cannot update this assignment.")

    ensure_transition(ASSIGNMENT, assignment.status, payload.status)

    changed = payload.status != assignment.status
    if changed and not is_admin and not (
        assignment.status == "pending" and payload.status in ("accepted", "rejected")
    ):
        raise HTTPException(
            status_code=403,
            detail="Tutors can only accept or reject a pending assignment.",
        )

    previous = assignment.status
    assignment.status = payload.status
    if "notes" in payload.model_fields_set:
        assignment.notes = payload.notes
    assignment.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(assignment)

    if changed:
        logger.info(
            "Assignment %s status %s → %s by %s",
            assignment.id, previous, assignment.status, current_user.id,
        )
        notify_assignment_updated(assignment.tutor, assignment.status)

    return DataResponse(
        message=f"Assignment status updated to {assignment.status}.",
        data=build_assignment_response(assignment),
    )


@router.delete(
    "/{request_id}/assignments/{assignment_id}",
    response_model=MessageResponse,
    summary="Admin removes an assignment",
)
def delete_assignment(
    request_id: UUID,
    assignment_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """The linked demo class, if any, stays: it is managed on its own."""
    assignment = _get_assignment(request_id, assignment_id, db)
    db.delete(assignment)
    db.commit()
    logger.info("Assignment %s deleted by %s", assignment_id, current_user.id)
    return MessageResponse(message="Assignment deleted successfully.")
