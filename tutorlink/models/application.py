# tutorlink/models/application.py
# A tutor's self-submitted interest in a tuition job (parallel to admin assignment)
#
# One row per (tutor_request, tutor) for the lifetime of the pair:
#   apply   → pending (new row, or withdrawn row reused)
#   admin   → approved | rejected (rejection carries admin_notes)
#   reset   → withdrawn, after which the tutor may apply again

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from tutorlink.core.workflow import APPLICATION_STATUSES
from tutorlink.db.base_class import Base


class TutorApplication(Base):
    __tablename__ = "tutor_applications"
    __table_args__ = (
        UniqueConstraint("tutor_request_id", "tutor_id", name="uq_application_request_tutor"),
    )

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

    cover_letter = Column(Text, nullable=True)
    proposed_rate = Column(Integer, nullable=True)

    status = Column(
        Enum(*APPLICATION_STATUSES, name="tutor_application_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
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
    tutor_request = relationship("TutorRequest", back_populates="applications")
    tutor = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<TutorApplication request={self.tutor_request_id} "
            f"tutor={self.tutor_id} status={self.status}>"
        )
