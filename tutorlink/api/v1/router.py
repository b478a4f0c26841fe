# tutorlink/api/v1/router.py
# Master router -- registers all endpoint routers under /api
# Each endpoint module exposes its own router; prefixes and tags live here

from fastapi import APIRouter

from tutorlink.api.v1.endpoints import (
    demo_classes,
    tuition_jobs,
    tutor_applications,
    tutor_requests,
)

api_router = APIRouter()

# Tutor requests & assignments (student / admin)
api_router.include_router(
    tutor_requests.router, prefix="/tutor-requests", tags=["Tutor Requests"]
)

# Job board (tutors)
api_router.include_router(
    tuition_jobs.router, prefix="/tuition-jobs", tags=["Tuition Jobs"]
)

# Application review (admin) and tutor dashboard
api_router.include_router(
    tutor_applications.router, prefix="/tutor-applications", tags=["Tutor Applications"]
)
api_router.include_router(
    tutor_applications.dashboard_router, prefix="/tutor-dashboard", tags=["Tutor Dashboard"]
)

# Demo classes
api_router.include_router(
    demo_classes.router, prefix="/demo-classes", tags=["Demo Classes"]
)
