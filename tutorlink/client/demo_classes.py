# tutorlink/client/demo_classes.py
# Demo class administration from the admin panel, and "my demo classes"
# for students and tutors.

import logging
from typing import Any, Dict, Optional, Union
from uuid import UUID

from tutorlink.client.http import ApiClient, build_body
from tutorlink.core.errors import ValidationError
from tutorlink.core.workflow import DEMO_CLASS, ensure_transition
from tutorlink.schemas.demo_class import DemoClassUpdate

logger = logging.getLogger("tutorlink.client.demo_classes")

Id = Union[str, UUID]

_UNSET: Any = object()


class DemoClassService:
    BASE = "/demo-classes"

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_all_demo_classes(self, status: Optional[str] = None) -> Dict[str, Any]:
        return await self.api.get(self.BASE, params={"status": status})

    async def get_my_demo_classes(self) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/mine")

    async def get_demo_class(self, demo_id: Id) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/{demo_id}")

    async def update_demo_class(
        self,
        demo_id: Id,
        status: Optional[str] = None,
        admin_notes: Optional[str] = _UNSET,
        current_status: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Sends only what is given. admin_notes="" clears the notes; leaving it
        out keeps them. A completed, rejected or cancelled demo refuses any
        status change (checked here when `current_status` is known).
        """
        data: Dict[str, Any] = {}
        if status is not None:
            data["status"] = status
        if admin_notes is not _UNSET:
            data["admin_notes"] = admin_notes
        if not data:
            raise ValidationError("Nothing to update.", code="validation_error")

        dto = build_body(DemoClassUpdate, data)
        if current_status is not None and dto.status is not None:
            ensure_transition(DEMO_CLASS, current_status, dto.status)

        return await self.api.put(
            f"{self.BASE}/{demo_id}", json=dto.model_dump(mode="json", exclude_unset=True)
        )

    async def delete_demo_class(self, demo_id: Id, confirm: bool = False) -> Dict[str, Any]:
        """Hard delete. Irreversible, so the caller must pass confirm=True."""
        if not confirm:
            raise ValidationError(
                "Deleting a demo class cannot be undone; pass confirm=True.",
                code="confirmation_required",
            )
        result = await self.api.delete(f"{self.BASE}/{demo_id}")
        logger.info("Demo class %s deleted", demo_id)
        return result
