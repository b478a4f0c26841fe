# tutorlink/client/tutor_requests.py
# Client-side service for tutor requests and their tutor assignments
#
# Bodies are validated with the same pydantic models the API uses, so a
# malformed request raises ValidationError without a network call.
# Assignment lists are cached per request id and dropped whenever something
# that could change them succeeds (assign, update, delete).

import logging
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from tutorlink.client.http import ApiClient, build_body
from tutorlink.core.workflow import ASSIGNMENT, TUTOR_REQUEST, ensure_transition
from tutorlink.schemas.tutor_request import (
    AssignmentStatusUpdate,
    AssignTutorRequest,
    DemoClassOptions,
    TutorRequestCreate,
    TutorRequestStatusUpdate,
    TutorRequestUpdate,
)

logger = logging.getLogger("tutorlink.client.tutor_requests")

Id = Union[str, UUID]
Body = Union[Dict[str, Any], TutorRequestCreate]


class TutorRequestService:
    BASE = "/tutor-requests"

    def __init__(self, api: ApiClient):
        self.api = api
        self._assignments: Dict[str, List[Dict[str, Any]]] = {}

    # ── Create ────────────────────────────────────────────────────────────────

    @staticmethod
    def _create_body(data: Body) -> Dict[str, Any]:
        dto = build_body(TutorRequestCreate, data)
        return dto.model_dump(mode="json", by_alias=True, exclude={"subject", "student_class"})

    async def create_tutor_request(self, data: Body) -> Dict[str, Any]:
        """Signed-in student posts a request."""
        return await self.api.post(self.BASE, json=self._create_body(data))

    async def create_public_tutor_request(self, data: Body) -> Dict[str, Any]:
        """Anonymous visitor posts a request; phoneNumber is how we reach them."""
        return await self.api.post(
            f"{self.BASE}/public", json=self._create_body(data), require_auth=False
        )

    async def create_public_tutor_request_from_tutor(self, tutor_id: Id, data: Body) -> Dict[str, Any]:
        return await self.api.post(
            f"{self.BASE}/public/from-tutor/{tutor_id}",
            json=self._create_body(data),
            require_auth=False,
        )

    # ── Read ──────────────────────────────────────────────────────────────────

    async def get_student_tutor_requests(self) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/student")

    async def get_all_tutor_requests(
        self,
        status: Optional[str] = None,
        subject: Optional[str] = None,
        district: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        params = {
            "status": status,
            "subject": subject,
            "district": district,
            "page": page,
            "limit": limit,
        }
        return await self.api.get(self.BASE, params=params)

    async def get_tutor_request_by_id(self, request_id: Id) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/{request_id}")

    # ── Update / Delete ───────────────────────────────────────────────────────

    async def update_tutor_request(
        self, request_id: Id, data: Union[Dict[str, Any], TutorRequestUpdate]
    ) -> Dict[str, Any]:
        """
        Partial update. Only keys present in `data` are sent, so
        {"adminNote": ""} clears the note instead of being dropped.
        """
        dto = build_body(TutorRequestUpdate, data)
        body = dto.model_dump(mode="json", by_alias=True, exclude_unset=True)
        result = await self.api.put(f"{self.BASE}/{request_id}", json=body)
        self.invalidate_assignments(request_id)
        return result

    async def update_tutor_request_status(
        self,
        request_id: Id,
        status: str,
        force: bool = False,
        current_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Pass `current_status` when the caller already knows it: an illegal
        move then fails here instead of on the server.
        """
        dto = build_body(TutorRequestStatusUpdate, {"status": status, "force": force})
        if current_status is not None and not force:
            ensure_transition(TUTOR_REQUEST, current_status, dto.status)
        return await self.api.patch(
            f"{self.BASE}/{request_id}/status", json=dto.model_dump(mode="json")
        )

    async def delete_tutor_request(self, request_id: Id) -> Dict[str, Any]:
        result = await self.api.delete(f"{self.BASE}/{request_id}")
        self.invalidate_assignments(request_id)
        return result

    # ── Assignments ───────────────────────────────────────────────────────────

    def invalidate_assignments(self, request_id: Id) -> None:
        if self._assignments.pop(str(request_id), None) is not None:
            logger.debug("Assignment cache dropped for request %s", request_id)

    def cached_assignments(self, request_id: Id) -> Optional[List[Dict[str, Any]]]:
        return self._assignments.get(str(request_id))

    async def get_tutor_assignments(self, request_id: Id, refresh: bool = False) -> Dict[str, Any]:
        key = str(request_id)
        if not refresh and key in self._assignments:
            return {"success": True, "message": None, "data": self._assignments[key]}

        result = await self.api.get(f"{self.BASE}/{request_id}/assignments")
        self._assignments[key] = result["data"] or []
        return result

    async def assign_tutor(
        self,
        request_id: Id,
        tutor_id: Id,
        notes: Optional[str] = None,
        demo_class: Optional[Union[Dict[str, Any], DemoClassOptions]] = None,
        send_email_notification: bool = True,
        send_sms_notification: bool = True,
    ) -> Dict[str, Any]:
        """
        One call, one body. The server creates the assignment and the optional
        demo class together or not at all; a ServerError here means nothing
        was saved, so it is not retried automatically.
        """
        if isinstance(demo_class, DemoClassOptions):
            demo_class = demo_class.model_dump(by_alias=True)
        dto = build_body(
            AssignTutorRequest,
            {
                "tutorId": tutor_id,
                "notes": notes,
                "demoClass": demo_class,
                "sendEmailNotification": send_email_notification,
                "sendSMSNotification": send_sms_notification,
            },
        )
        try:
            return await self.api.post(
                f"{self.BASE}/{request_id}/assign",
                json=dto.model_dump(mode="json", by_alias=True),
            )
        finally:
            self.invalidate_assignments(request_id)

    def _known_assignment_status(self, request_id: Id, assignment_id: Id) -> Optional[str]:
        for assignment in self._assignments.get(str(request_id)) or []:
            if str(assignment.get("id")) == str(assignment_id):
                return assignment.get("status")
        return None

    async def update_assignment_status(
        self,
        request_id: Id,
        assignment_id: Id,
        status: str,
        notes: Optional[str] = None,
        current_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Checked against the assignment table when the current status is known."""
        dto = build_body(AssignmentStatusUpdate, {"status": status, "notes": notes})
        current_status = current_status or self._known_assignment_status(request_id, assignment_id)
        if current_status is not None:
            ensure_transition(ASSIGNMENT, current_status, dto.status)

        body = dto.model_dump(mode="json", exclude_none=True)
        result = await self.api.patch(
            f"{self.BASE}/{request_id}/assignments/{assignment_id}", json=body
        )
        self.invalidate_assignments(request_id)
        return result

    async def delete_assignment(self, request_id: Id, assignment_id: Id) -> Dict[str, Any]:
        result = await self.api.delete(f"{self.BASE}/{request_id}/assignments/{assignment_id}")
        self.invalidate_assignments(request_id)
        return result
