# tutorlink/services/responses.py
# Build API response models from ORM rows
#
# Shared by several endpoint modules: assignments appear inside tutor requests,
# job summaries inside applications, and so on.

from sqlalchemy import func
from sqlalchemy.orm import Session

from tutorlink.models.application import TutorApplication
from tutorlink.models.demo_class import DemoClass
from tutorlink.models.tutor_request import TutorAssignment, TutorRequest
from tutorlink.schemas.application import ApplicationResponse, JobSummary
from tutorlink.schemas.demo_class import DemoClassResponse
from tutorlink.schemas.tutor_request import (
    SalaryRange,
    TuitionJobResponse,
    TutorAssignmentResponse,
    TutorRequestResponse,
)


def _salary_range(req: TutorRequest) -> SalaryRange:
    return SalaryRange(min=req.salary_min or 0, max=req.salary_max or 0)


def build_assignment_response(assignment: TutorAssignment) -> TutorAssignmentResponse:
    """Assignment row + tutor contact details + linked demo class, if any."""
    tutor = assignment.tutor
    demo = assignment.demo_class
    return TutorAssignmentResponse(
        id=assignment.id,
        tutor_request_id=assignment.tutor_request_id,
        tutor_id=assignment.tutor_id,
        tutor_name=tutor.full_name,
        tutor_email=tutor.email,
        tutor_phone=tutor.phone,
        status=assignment.status,
        assigned_by=assignment.assigned_by,
        assigned_at=assignment.assigned_at,
        updated_at=assignment.updated_at,
        notes=assignment.notes,
        demo_class_id=assignment.demo_class_id,
        demo_date=demo.requested_date if demo else None,
        demo_duration=demo.duration if demo else None,
        demo_status=demo.status if demo else None,
        demo_notes=demo.admin_notes if demo else None,
    )


def build_request_response(req: TutorRequest) -> TutorRequestResponse:
    """Full tutor request, as seen by its owner and staff."""
    return TutorRequestResponse(
        id=req.id,
        student_id=req.student_id,
        requested_tutor_id=req.requested_tutor_id,
        phone_number=req.phone_number,
        student_gender=req.student_gender,
        district=req.district,
        area=req.area,
        detailed_location=req.detailed_location,
        category=req.category,
        selected_categories=req.selected_categories or [],
        selected_subjects=req.selected_subjects or [],
        selected_classes=req.selected_classes or [],
        tutor_gender_preference=req.tutor_gender_preference,
        salary=req.salary,
        is_salary_negotiable=req.is_salary_negotiable,
        salary_range=_salary_range(req),
        extra_information=req.extra_information,
        medium=req.medium,
        number_of_students=req.number_of_students,
        tutoring_days=req.tutoring_days,
        tutoring_time=req.tutoring_time,
        tutoring_duration=req.tutoring_duration,
        tutoring_type=req.tutoring_type,
        admin_note=req.admin_note,
        update_notice=req.update_notice,
        status=req.status,
        created_at=req.created_at,
        updated_at=req.updated_at,
        matched_tutors=[build_assignment_response(a) for a in req.assignments],
    )


def active_application_count(req: TutorRequest, db: Session) -> int:
    return db.query(func.count(TutorApplication.id)).filter(
        TutorApplication.tutor_request_id == req.id,
        TutorApplication.status != "withdrawn",
    ).scalar() or 0


def build_job_response(req: TutorRequest, db: Session) -> TuitionJobResponse:
    """Tutor request as a job board card. No contact details, no admin note."""
    return TuitionJobResponse(
        id=req.id,
        district=req.district,
        area=req.area,
        category=req.category,
        selected_subjects=req.selected_subjects or [],
        selected_classes=req.selected_classes or [],
        medium=req.medium,
        student_gender=req.student_gender,
        tutor_gender_preference=req.tutor_gender_preference,
        salary_range=_salary_range(req),
        is_salary_negotiable=req.is_salary_negotiable,
        number_of_students=req.number_of_students,
        tutoring_days=req.tutoring_days,
        tutoring_time=req.tutoring_time,
        tutoring_duration=req.tutoring_duration,
        tutoring_type=req.tutoring_type,
        extra_information=req.extra_information,
        update_notice=req.update_notice,
        status=req.status,
        application_count=active_application_count(req, db),
        created_at=req.created_at,
    )


def build_job_summary(req: TutorRequest) -> JobSummary:
    return JobSummary(
        id=req.id,
        subjects=req.selected_subjects or [],
        classes=req.selected_classes or [],
        district=req.district,
        area=req.area,
        salary_min=req.salary_min or 0,
        salary_max=req.salary_max or 0,
        tutoring_type=req.tutoring_type,
        status=req.status,
    )


def build_application_response(application: TutorApplication, include_job: bool = False) -> ApplicationResponse:
    tutor = application.tutor
    return ApplicationResponse(
        id=application.id,
        tutor_request_id=application.tutor_request_id,
        tutor_id=application.tutor_id,
        tutor_name=tutor.full_name if tutor else None,
        tutor_email=tutor.email if tutor else None,
        cover_letter=application.cover_letter,
        proposed_rate=application.proposed_rate,
        status=application.status,
        admin_notes=application.admin_notes,
        created_at=application.created_at,
        updated_at=application.updated_at,
        job=build_job_summary(application.tutor_request) if include_job else None,
    )


def build_demo_class_response(demo: DemoClass) -> DemoClassResponse:
    """Demo class + joined student/tutor contact and request location."""
    student = demo.student
    tutor = demo.tutor
    req = demo.tutor_request
    return DemoClassResponse(
        id=demo.id,
        tutor_request_id=demo.tutor_request_id,
        student_id=demo.student_id,
        tutor_id=demo.tutor_id,
        subject=demo.subject,
        requested_date=demo.requested_date,
        duration=demo.duration,
        status=demo.status,
        student_notes=demo.student_notes,
        tutor_notes=demo.tutor_notes,
        admin_notes=demo.admin_notes,
        created_at=demo.created_at,
        updated_at=demo.updated_at,
        student_name=student.full_name if student else None,
        student_email=student.email if student else None,
        student_phone=student.phone if student else None,
        tutor_name=tutor.full_name if tutor else None,
        tutor_email=tutor.email if tutor else None,
        tutor_phone=tutor.phone if tutor else None,
        request_district=req.district if req else None,
        request_area=req.area if req else None,
    )
