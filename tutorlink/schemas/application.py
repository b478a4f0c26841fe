# tutorlink/schemas/application.py
# Pydantic request/response models for tutor applications
# (tuition job board, tutor dashboard and the admin applications panel)

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from tutorlink.schemas.common import CamelModel

ApplicationStatus = Literal["pending", "approved", "rejected", "withdrawn"]


# ── Requests (input) ──────────────────────────────────────────────────────────

class ApplyForJobRequest(CamelModel):
    """Tutor applies to a tuition job: {coverLetter, proposedRate}, both optional."""
    cover_letter: Optional[str] = None
    proposed_rate: Optional[int] = Field(None, ge=0)


class ResetApplicationRequest(BaseModel):
    """Admins name the tutor whose application is reset; tutors send nothing."""
    tutor_id: Optional[UUID] = Field(None, alias="tutorId")

    model_config = {"populate_by_name": True}


class RejectApplicationRequest(BaseModel):
    """Admin rejection. Notes are mandatory so the tutor learns why."""
    admin_notes: str = Field(alias="adminNotes")

    model_config = {"populate_by_name": True}

    @field_validator("admin_notes")
    @classmethod
    def notes_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Admin notes are required for rejection.")
        return v.strip()


class ApproveApplicationRequest(BaseModel):
    admin_notes: Optional[str] = Field(None, alias="adminNotes")

    model_config = {"populate_by_name": True}


# ── Responses (output) ────────────────────────────────────────────────────────

class JobSummary(BaseModel):
    """The tuition job an application points at (admin and tutor dashboards)."""
    id: UUID
    subjects: List[str] = []
    classes: List[str] = []
    district: str
    area: str
    salary_min: int
    salary_max: int
    tutoring_type: str
    status: str


class ApplicationResponse(BaseModel):
    id: UUID
    tutor_request_id: UUID
    tutor_id: UUID
    tutor_name: Optional[str] = None
    tutor_email: Optional[str] = None
    cover_letter: Optional[str] = None
    proposed_rate: Optional[int] = None
    status: ApplicationStatus
    admin_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    job: Optional[JobSummary] = None


class ApplicationStats(BaseModel):
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    withdrawn: int = 0
