# tutorlink/api/v1/endpoints/demo_classes.py
# Demo class administration
#
#   GET    /demo-classes          → all demo classes (admin), status filter
#   GET    /demo-classes/mine     → student / tutor sees own
#   GET    /demo-classes/{id}     → detail (admin or participant)
#   PUT    /demo-classes/{id}     → admin edits status / admin notes
#   DELETE /demo-classes/{id}     → admin hard delete
#
# completed, rejected and cancelled are final: the status can no longer change,
# admin notes can.

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

import tutorlink.db.base  # noqa: F401
from tutorlink.core.dependencies import require_admin, require_login
from tutorlink.core.workflow import DEMO_CLASS, ensure_transition
from tutorlink.db.session import get_db
from tutorlink.models.demo_class import DemoClass
from tutorlink.models.user import User
from tutorlink.schemas.common import DataResponse, MessageResponse
from tutorlink.schemas.demo_class import DemoClassResponse, DemoClassUpdate
from tutorlink.services.responses import build_demo_class_response

router = APIRouter()
logger = logging.getLogger("tutorlink.demo_classes")


def _get_demo_class(demo_id: UUID, db: Session) -> DemoClass:
    demo = db.query(DemoClass).filter(DemoClass.id == demo_id).first()
    if not demo:
        raise HTTPException(status_code=404, detail="Demo class not found.")
    return demo


@router.get(
    "",
    response_model=DataResponse[List[DemoClassResponse]],
    summary="All demo classes",
)
def list_demo_classes(
    status: Optional[str] = Query(None, description="pending|accepted|rejected|completed|cancelled|all"),
    tutor_id: Optional[UUID] = Query(None),
    student_id: Optional[UUID] = Query(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(DemoClass)
    if status and status != "all":
        query = query.filter(DemoClass.status == status)
    if tutor_id:
        query = query.filter(DemoClass.tutor_id == tutor_id)
    if student_id:
        query = query.filter(DemoClass.student_id == student_id)

    results = query.order_by(DemoClass.requested_date.desc()).all()
    return DataResponse(data=[build_demo_class_response(d) for d in results])


@router.get(
    "/mine",
    response_model=DataResponse[List[DemoClassResponse]],
    summary="Student or tutor sees own demo classes",
)
def list_my_demo_classes(
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    if current_user.role == "student":
        query = db.query(DemoClass).filter(DemoClass.student_id == current_user.id)
    elif current_user.role == "tutor":
        query = db.query(DemoClass).filter(DemoClass.tutor_id == current_user.id)
    else:
        raise HTTPException(status_code=403, detail="Only students and tutors have demo classes.")

    results = query.order_by(DemoClass.requested_date.asc()).all()
    return DataResponse(data=[build_demo_class_response(d) for d in results])


@router.get(
    "/{demo_id}",
    response_model=DataResponse[DemoClassResponse],
    summary="Demo class detail",
)
def get_demo_class(
    demo_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    demo = _get_demo_class(demo_id, db)
    if not current_user.is_admin and current_user.id not in (demo.student_id, demo.tutor_id):
        raise HTTPException(status_code=403, detail="You do not have access to this demo class.")
    return DataResponse(data=build_demo_class_response(demo))


@router.put(
    "/{demo_id}",
    response_model=DataResponse[DemoClassResponse],
    summary="Admin updates a demo class",
)
def update_demo_class(
    demo_id: UUID,
    payload: DemoClassUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Only the fields present in the body are applied.
    A status change must follow the demo class table; terminal demos refuse it.
    """
    demo = _get_demo_class(demo_id, db)
    fields = payload.model_fields_set

    previous = demo.status
    if "status" in fields and payload.status is not None:
        ensure_transition(DEMO_CLASS, demo.status, payload.status)
        demo.status = payload.status
    if "admin_notes" in fields:
        demo.admin_notes = payload.admin_notes

    demo.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(demo)

    if demo.status != previous:
        logger.info("Demo class %s status %s → %s by %s", demo.id, previous, demo.status, current_user.id)

    return DataResponse(
        message="Demo class updated successfully.",
        data=build_demo_class_response(demo),
    )


@router.delete(
    "/{demo_id}",
    response_model=MessageResponse,
    summary="Admin deletes a demo class",
)
def delete_demo_class(
    demo_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """Irreversible. Assignments that linked to it keep their row, unlinked."""
    demo = _get_demo_class(demo_id, db)
    db.delete(demo)
    db.commit()
    logger.info("Demo class %s deleted by %s", demo_id, current_user.id)
    return MessageResponse(message="Demo class deleted successfully.")
