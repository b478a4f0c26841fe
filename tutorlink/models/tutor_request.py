# tutorlink/models/tutor_request.py
# Tuition request flow: Student posts → Admin assigns tutors → optional demo class
#
# Flow:
#   1. Student (or anonymous visitor) posts a request → POST /tutor-requests[/public]
#   2. Admin pairs tutors with it                    → POST /tutor-requests/{id}/assign
#      (optionally books a demo class in the same transaction)
#   3. Tutor / admin move the assignment along      → PATCH /tutor-requests/{id}/assignments/{aid}
#   4. In parallel, tutors apply from the job board  → POST /tuition-jobs/{id}/apply
#
# Deleting a request removes its assignments and applications.
# Demo classes survive with tutor_request_id = NULL.

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from tutorlink.core.workflow import ASSIGNMENT_STATUSES, TUTOR_REQUEST_STATUSES
from tutorlink.db.base_class import Base


class TutorRequest(Base):
    """
    A student's posted tuition need.
    Status lifecycle: Active → Assign → Completed (Inactive ↔ Active while unassigned)
    """
    __tablename__ = "tutor_requests"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Parties ───────────────────────────────────────────────────────────────
    # Null for public (anonymous) submissions
    student_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Set when the request was posted from a tutor's public profile
    requested_tutor_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Contact & Location ────────────────────────────────────────────────────
    phone_number = Column(String(20), nullable=True)
    student_gender = Column(String(10), nullable=False, default="both")
    district = Column(String(100), nullable=False, index=True)
    area = Column(String(100), nullable=False)
    detailed_location = Column(Text, nullable=True)

    # ── What is needed ────────────────────────────────────────────────────────
    category = Column(String(100), nullable=True)
    selected_categories = Column(JSON, nullable=False, default=list)
    selected_subjects = Column(JSON, nullable=False, default=list)
    selected_classes = Column(JSON, nullable=False, default=list)
    medium = Column(String(100), nullable=True)
    tutor_gender_preference = Column(String(10), nullable=False, default="any")
    number_of_students = Column(Integer, nullable=False, default=1)
    tutoring_days = Column(Integer, nullable=True)           # days per week
    tutoring_time = Column(String(50), nullable=True)
    tutoring_duration = Column(String(50), nullable=True)
    tutoring_type = Column(String(30), nullable=False, default="Home Tutoring")
    extra_information = Column(Text, nullable=True)

    # ── Salary ────────────────────────────────────────────────────────────────
    salary = Column(String(50), nullable=True)               # free text as typed
    is_salary_negotiable = Column(Boolean, nullable=False, default=False)
    salary_min = Column(Integer, nullable=False, default=0)
    salary_max = Column(Integer, nullable=False, default=0)

    # ── Admin ─────────────────────────────────────────────────────────────────
    admin_note = Column(Text, nullable=True)
    update_notice = Column(Text, nullable=True)

    # ── Status ────────────────────────────────────────────────────────────────
    status = Column(
        Enum(*TUTOR_REQUEST_STATUSES, name="tutor_request_status_enum"),
        nullable=False,
        default="Active",
        index=True,
    )

    # ── Timestamps ────────────────────────────────────────────────────────────
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    student = relationship("User", foreign_keys=[student_id])
    assignments = relationship(
        "TutorAssignment",
        back_populates="tutor_request",
        cascade="all, delete-orphan",
        order_by="TutorAssignment.assigned_at",
    )
    applications = relationship(
        "TutorApplication",
        back_populates="tutor_request",
        cascade="all, delete-orphan",
    )
    # No delete cascade: demo classes have their own lifecycle
    demo_classes = relationship("DemoClass", back_populates="tutor_request")

    def __repr__(self) -> str:
        return f"<TutorRequest {self.id} district={self.district} status={self.status}>"


class TutorAssignment(Base):
    """
    Admin's pairing of a tutor with a request.
    Status lifecycle: pending → accepted → completed, rejected from any non-terminal.
    At most one pending/accepted row per (request, tutor): re-assigning reuses it.
    """
    __tablename__ = "tutor_assignments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    tutor_request_id = Column(
        Uuid,
        ForeignKey("tutor_requests.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tutor_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    assigned_by = Column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    status = Column(
        Enum(*ASSIGNMENT_STATUSES, name="tutor_assignment_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    notes = Column(Text, nullable=True)

    # ── Demo Class Link ───────────────────────────────────────────────────────
    # Set when the assignment was created with demoClass.createDemo = true
    demo_class_id = Column(
        Uuid,
        ForeignKey("demo_classes.id", ondelete="SET NULL"),
        nullable=True,
    )

    # ── Timestamps ────────────────────────────────────────────────────────────
    assigned_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    tutor_request = relationship("TutorRequest", back_populates="assignments")
    tutor = relationship("User", foreign_keys=[tutor_id])
    demo_class = relationship("DemoClass", back_populates="assignments")

    def __repr__(self) -> str:
        return (
            f"<TutorAssignment request={self.tutor_request_id} "
            f"tutor={self.tutor_id} status={self.status}>"
        )
