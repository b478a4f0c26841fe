# tutorlink/models/user.py
# Base user model for all roles: student | tutor | admin | manager
# Only what the matching workflow needs; profiles live in the profile service

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Enum, String, Uuid

from tutorlink.db.base_class import Base

USER_ROLES = ("student", "tutor", "admin", "manager")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Identity ──────────────────────────────────────────────────────────────
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)

    # ── Role ──────────────────────────────────────────────────────────────────
    role = Column(
        Enum(*USER_ROLES, name="user_role_enum"),
        nullable=False,
        default="student",
    )

    # ── Account Status ────────────────────────────────────────────────────────
    is_active = Column(Boolean, nullable=False, default=True)

    # ── Timestamps ────────────────────────────────────────────────────────────
    created_at = Column(
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

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"
