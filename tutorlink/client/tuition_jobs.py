# tutorlink/client/tuition_jobs.py
# Client-side service for the tuition job board and tutor applications
#
# Server is the source of truth for "already applied": a 409 from apply_for_job
# surfaces as DuplicateApplicationError even when check_tutor_application
# said the tutor had not applied yet (two tabs, same tutor).

import logging
from typing import Any, Dict, Optional, Union
from uuid import UUID

from tutorlink.client.http import ApiClient, build_body
from tutorlink.core.errors import ValidationError
from tutorlink.schemas.application import ApplyForJobRequest, ResetApplicationRequest

logger = logging.getLogger("tutorlink.client.tuition_jobs")

Id = Union[str, UUID]


class TuitionJobsService:
    BASE = "/tuition-jobs"

    def __init__(self, api: ApiClient):
        self.api = api

    async def get_tuition_jobs(
        self,
        subject: Optional[str] = None,
        district: Optional[str] = None,
        area: Optional[str] = None,
        tutoring_type: Optional[str] = None,
        category: Optional[str] = None,
        salary_min: Optional[int] = None,
        salary_max: Optional[int] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """salary_min / salary_max match jobs whose salary range overlaps them."""
        if salary_min is not None and salary_max is not None and salary_min > salary_max:
            raise ValidationError("salaryMin must be <= salaryMax.", code="validation_error")
        params = {
            "subject": subject,
            "district": district,
            "area": area,
            "tutoringType": tutoring_type,
            "category": category,
            "salaryMin": salary_min,
            "salaryMax": salary_max,
            "page": page,
            "limit": limit,
        }
        return await self.api.get(self.BASE, params=params, require_auth=False)

    async def get_tuition_job_by_id(self, job_id: Id) -> Dict[str, Any]:
        return await self.api.get(f"{self.BASE}/{job_id}", require_auth=False)

    async def apply_for_job(
        self,
        job_id: Id,
        cover_letter: Optional[str] = None,
        proposed_rate: Optional[int] = None,
    ) -> Dict[str, Any]:
        dto = build_body(
            ApplyForJobRequest, {"cover_letter": cover_letter, "proposed_rate": proposed_rate}
        )
        return await self.api.post(
            f"{self.BASE}/{job_id}/apply",
            json=dto.model_dump(mode="json", by_alias=True, exclude_none=True),
        )

    async def check_tutor_application(self, job_id: Id) -> Optional[Dict[str, Any]]:
        """The tutor's live application for this job, or None (withdrawn counts as none)."""
        result = await self.api.get(f"{self.BASE}/{job_id}/check-application")
        return result["data"]

    async def reset_application(self, job_id: Id, tutor_id: Optional[Id] = None) -> Dict[str, Any]:
        """Tutors reset their own application; admins name the tutor."""
        body = None
        if tutor_id is not None:
            dto = build_body(ResetApplicationRequest, {"tutorId": tutor_id})
            body = dto.model_dump(mode="json", by_alias=True)
        return await self.api.post(f"{self.BASE}/{job_id}/reset-application", json=body)
