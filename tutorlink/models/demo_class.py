# tutorlink/models/demo_class.py
# Trial session between a tutor and a student
#
# Usually created by POST /tutor-requests/{id}/assign with demoClass.createDemo,
# then managed on its own by admins (GET/PUT/DELETE /demo-classes).
# Deleting an assignment never deletes its demo class.

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from tutorlink.core.workflow import DEMO_CLASS_STATUSES
from tutorlink.db.base_class import Base


class DemoClass(Base):
    """
    Status lifecycle: pending ↔ accepted → completed | cancelled, pending → rejected.
    completed, rejected and cancelled are terminal.
    """
    __tablename__ = "demo_classes"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Parties ───────────────────────────────────────────────────────────────
    tutor_request_id = Column(
        Uuid,
        ForeignKey("tutor_requests.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    student_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,   # public requests have no student account
        index=True,
    )
    tutor_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Session ───────────────────────────────────────────────────────────────
    subject = Column(String(100), nullable=False)
    requested_date = Column(DateTime(timezone=True), nullable=False)
    duration = Column(Integer, nullable=False, default=60)   # minutes

    status = Column(
        Enum(*DEMO_CLASS_STATUSES, name="demo_class_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )

    student_notes = Column(Text, nullable=True)
    tutor_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)

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
    tutor_request = relationship("TutorRequest", back_populates="demo_classes")
    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])
    assignments = relationship("TutorAssignment", back_populates="demo_class")

    def __repr__(self) -> str:
        return f"<DemoClass {self.id} tutor={self.tutor_id} status={self.status}>"
