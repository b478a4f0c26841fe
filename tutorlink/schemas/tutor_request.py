# tutorlink/schemas/tutor_request.py
# Pydantic request/response models for tutor request and assignment endpoints
#
# Tutor request bodies are camelCase on the wire (salaryRange, selectedSubjects,
# adminNote, ...). Assignment responses are snake_case, like the rest of the
# admin panel payloads.
#
# The same models validate on both sides: the API client builds them before
# sending, so malformed requests never leave the browser/app.

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from tutorlink.schemas.common import CamelModel

StudentGender = Literal["male", "female", "both"]
GenderPreference = Literal["male", "female", "any"]
TutoringType = Literal["Home Tutoring", "Online Tutoring", "Both"]
TutorRequestStatus = Literal["Active", "Inactive", "Completed", "Assign"]
AssignmentStatus = Literal["pending", "accepted", "rejected", "completed"]


# ── Shared pieces ─────────────────────────────────────────────────────────────

class SalaryRange(BaseModel):
    min: int = Field(0, ge=0)
    max: int = Field(0, ge=0)

    @model_validator(mode="after")
    def min_not_above_max(self) -> "SalaryRange":
        if self.min > self.max:
            raise ValueError("salaryRange.min must be <= salaryRange.max.")
        return self


def _not_blank(value: Optional[str], field: str) -> Optional[str]:
    if value is None:
        return value
    if not value.strip():
        raise ValueError(f"{field} cannot be empty.")
    return value.strip()


# ── Requests (input) ──────────────────────────────────────────────────────────

class TutorRequestCreate(CamelModel):
    """Student (or anonymous visitor) posts this to create a tuition request."""
    phone_number: Optional[str] = None
    student_gender: StudentGender = "both"
    district: str
    area: str
    detailed_location: Optional[str] = None
    category: Optional[str] = None
    selected_categories: List[str] = []
    selected_subjects: List[str] = []
    selected_classes: List[str] = []
    tutor_gender_preference: GenderPreference = "any"
    salary: Optional[str] = None
    is_salary_negotiable: bool = False
    salary_range: SalaryRange
    extra_information: Optional[str] = None
    # Legacy single-value fields from the old request form
    subject: Optional[str] = None
    student_class: Optional[str] = None
    medium: Optional[str] = None
    number_of_students: int = Field(1, ge=1)
    tutoring_days: Optional[int] = Field(None, ge=1, le=7)
    tutoring_time: Optional[str] = None
    tutoring_duration: Optional[str] = None
    tutoring_type: TutoringType = "Home Tutoring"

    @field_validator("district")
    @classmethod
    def district_not_empty(cls, v: str) -> str:
        return _not_blank(v, "District")

    @field_validator("area")
    @classmethod
    def area_not_empty(cls, v: str) -> str:
        return _not_blank(v, "Area")

    @model_validator(mode="after")
    def subjects_and_classes_present(self) -> "TutorRequestCreate":
        # Fold the legacy single-value fields into the lists
        if self.subject and self.subject.strip() and not self.selected_subjects:
            self.selected_subjects = [self.subject.strip()]
        if self.student_class and self.student_class.strip() and not self.selected_classes:
            self.selected_classes = [self.student_class.strip()]

        self.selected_subjects = [s.strip() for s in self.selected_subjects if s.strip()]
        self.selected_classes = [c.strip() for c in self.selected_classes if c.strip()]
        if not self.selected_subjects:
            raise ValueError("At least one subject is required.")
        if not self.selected_classes:
            raise ValueError("At least one class level is required.")
        return self


# Columns that always hold a value; a partial update may omit them but not null them
NOT_NULL_FIELDS = (
    "student_gender",
    "district",
    "area",
    "selected_categories",
    "selected_subjects",
    "selected_classes",
    "tutor_gender_preference",
    "is_salary_negotiable",
    "salary_range",
    "number_of_students",
    "tutoring_type",
)


class TutorRequestUpdate(CamelModel):
    """
    Partial update by the owning student or an admin.
    Only fields that were actually sent are applied (exclude_unset), so
    adminNote="" and updateNotice="" are stored as "" rather than dropped.
    """
    phone_number: Optional[str] = None
    student_gender: Optional[StudentGender] = None
    district: Optional[str] = None
    area: Optional[str] = None
    detailed_location: Optional[str] = None
    category: Optional[str] = None
    selected_categories: Optional[List[str]] = None
    selected_subjects: Optional[List[str]] = None
    selected_classes: Optional[List[str]] = None
    tutor_gender_preference: Optional[GenderPreference] = None
    salary: Optional[str] = None
    is_salary_negotiable: Optional[bool] = None
    salary_range: Optional[SalaryRange] = None
    extra_information: Optional[str] = None
    medium: Optional[str] = None
    number_of_students: Optional[int] = Field(None, ge=1)
    tutoring_days: Optional[int] = Field(None, ge=1, le=7)
    tutoring_time: Optional[str] = None
    tutoring_duration: Optional[str] = None
    tutoring_type: Optional[TutoringType] = None
    admin_note: Optional[str] = None
    update_notice: Optional[str] = None

    @field_validator("district")
    @classmethod
    def district_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "District")

    @field_validator("area")
    @classmethod
    def area_not_empty(cls, v: Optional[str]) -> Optional[str]:
        return _not_blank(v, "Area")

    @field_validator("selected_subjects")
    @classmethod
    def subjects_not_empty(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None:
            v = [s.strip() for s in v if s.strip()]
            if not v:
                raise ValueError("At least one subject is required.")
        return v

    @field_validator("selected_classes")
    @classmethod
    def classes_not_empty(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is not None:
            v = [c.strip() for c in v if c.strip()]
            if not v:
                raise ValueError("At least one class level is required.")
        return v

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "TutorRequestUpdate":
        # Optional here means "may be left out", not "may be cleared"
        for field in NOT_NULL_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                alias = type(self).model_fields[field].alias or field
                raise ValueError(f"{alias} cannot be null.")
        return self


class TutorRequestStatusUpdate(BaseModel):
    status: TutorRequestStatus
    force: bool = False   # admin-only override of the transition table


class DemoClassOptions(CamelModel):
    """Optional demo booking sent along with an assignment."""
    create_demo: bool = False
    requested_date: Optional[datetime] = None
    duration: int = Field(60, gt=0, le=480)   # minutes
    notes: Optional[str] = None

    @model_validator(mode="after")
    def date_required_for_demo(self) -> "DemoClassOptions":
        if self.create_demo and self.requested_date is None:
            raise ValueError("demoClass.requestedDate is required when createDemo is true.")
        return self


class AssignTutorRequest(CamelModel):
    """Admin assigns a tutor: {tutorId, notes, demoClass, sendEmailNotification, sendSMSNotification}."""
    tutor_id: UUID
    notes: Optional[str] = None
    demo_class: Optional[DemoClassOptions] = None
    send_email_notification: bool = True
    send_sms_notification: bool = Field(True, alias="sendSMSNotification")


class AssignmentStatusUpdate(BaseModel):
    status: AssignmentStatus
    notes: Optional[str] = None


# ── Responses (output) ────────────────────────────────────────────────────────

class TutorAssignmentResponse(BaseModel):
    """One tutor paired with a request, with its demo class when linked."""
    id: UUID
    tutor_request_id: UUID
    tutor_id: UUID
    tutor_name: str
    tutor_email: str
    tutor_phone: Optional[str] = None
    status: AssignmentStatus
    assigned_by: Optional[UUID] = None
    assigned_at: datetime
    updated_at: datetime
    notes: Optional[str] = None

    # Demo class (only when linked)
    demo_class_id: Optional[UUID] = None
    demo_date: Optional[datetime] = None
    demo_duration: Optional[int] = None
    demo_status: Optional[str] = None
    demo_notes: Optional[str] = None


class TutorRequestResponse(CamelModel):
    """Full tutor request detail, as seen by its owner and admins."""
    id: UUID
    student_id: Optional[UUID] = None
    requested_tutor_id: Optional[UUID] = None
    phone_number: Optional[str] = None
    student_gender: str
    district: str
    area: str
    detailed_location: Optional[str] = None
    category: Optional[str] = None
    selected_categories: List[str] = []
    selected_subjects: List[str] = []
    selected_classes: List[str] = []
    tutor_gender_preference: str
    salary: Optional[str] = None
    is_salary_negotiable: bool
    salary_range: SalaryRange
    extra_information: Optional[str] = None
    medium: Optional[str] = None
    number_of_students: int
    tutoring_days: Optional[int] = None
    tutoring_time: Optional[str] = None
    tutoring_duration: Optional[str] = None
    tutoring_type: str
    admin_note: Optional[str] = None
    update_notice: Optional[str] = None
    status: TutorRequestStatus
    created_at: datetime
    updated_at: datetime
    matched_tutors: List[TutorAssignmentResponse] = []


class TuitionJobResponse(CamelModel):
    """
    A tutor request as shown on the public job board.
    No contact details and no admin note.
    """
    id: UUID
    district: str
    area: str
    category: Optional[str] = None
    selected_subjects: List[str] = []
    selected_classes: List[str] = []
    medium: Optional[str] = None
    student_gender: str
    tutor_gender_preference: str
    salary_range: SalaryRange
    is_salary_negotiable: bool
    number_of_students: int
    tutoring_days: Optional[int] = None
    tutoring_time: Optional[str] = None
    tutoring_duration: Optional[str] = None
    tutoring_type: str
    extra_information: Optional[str] = None
    update_notice: Optional[str] = None
    status: TutorRequestStatus
    application_count: int = 0
    created_at: datetime
