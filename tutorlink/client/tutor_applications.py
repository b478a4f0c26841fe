# tutorlink/client/tutor_applications.py
# Admin review of tutor applications, plus the tutor's own dashboard list

from typing import Any, Dict, Optional, Union
from uuid import UUID

from tutorlink.client.http import ApiClient, build_body
from tutorlink.core.workflow import APPLICATION, ensure_transition
from tutorlink.schemas.application import ApproveApplicationRequest, RejectApplicationRequest

Id = Union[str, UUID]


class TutorApplicationService:
    BASE = "/tutor-applications"
    DASHBOARD = "/tutor-dashboard/applications"

    def __init__(self, api: ApiClient):
        self.api = api

    # ── Admin ─────────────────────────────────────────────────────────────────

    async def get_applications(
        self,
        status: Optional[str] = None,
        subject: Optional[str] = None,
        district: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {"status": status, "subject": subject, "district": district}
        return await self.api.get(self.BASE, params=params)

    async def get_application_stats(self) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/stats")

    async def approve_application(
        self,
        application_id: Id,
        admin_notes: Optional[str] = None,
        current_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        if current_status is not None:
            ensure_transition(APPLICATION, current_status, "approved")
        dto = build_body(ApproveApplicationRequest, {"adminNotes": admin_notes})
        return await self.api.put(
            f"{self.BASE}/{application_id}/approve",
            json=dto.model_dump(by_alias=True, exclude_none=True),
        )

    async def reject_application(
        self,
        application_id: Id,
        admin_notes: str,
        current_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Blank notes raise ValidationError before anything is sent."""
        dto = build_body(RejectApplicationRequest, {"adminNotes": admin_notes})
        if current_status is not None:
            ensure_transition(APPLICATION, current_status, "rejected")
        return await self.api.put(
            f"{self.BASE}/{application_id}/reject", json=dto.model_dump(by_alias=True)
        )

    # ── Tutor dashboard ───────────────────────────────────────────────────────

    async def get_my_applications(self) -> Dict[str, Any]:
        return await self.api.get(self.DASHBOARD)

    async def withdraw_application(self, application_id: Id) -> Dict[str, Any]:
        return await self.api.put(f"{self.DASHBOARD}/{application_id}/withdraw")
