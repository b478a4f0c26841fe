# tutorlink/schemas/demo_class.py
# Pydantic request/response models for demo class administration

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

DemoClassStatus = Literal["pending", "accepted", "rejected", "completed", "cancelled"]


class DemoClassUpdate(BaseModel):
    """Admin edit form: status and/or admin notes. Unsent fields are left alone."""
    status: Optional[DemoClassStatus] = None
    admin_notes: Optional[str] = None


class DemoClassResponse(BaseModel):
    id: UUID
    tutor_request_id: Optional[UUID] = None
    student_id: Optional[UUID] = None
    tutor_id: UUID
    subject: str
    requested_date: datetime
    duration: int
    status: DemoClassStatus
    student_notes: Optional[str] = None
    tutor_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    # Joined for the admin table
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    student_phone: Optional[str] = None
    tutor_name: Optional[str] = None
    tutor_email: Optional[str] = None
    tutor_phone: Optional[str] = None
    request_district: Optional[str] = None
    request_area: Optional[str] = None
