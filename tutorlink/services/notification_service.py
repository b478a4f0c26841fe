# tutorlink/services/notification_service.py
# Fire-and-forget email/SMS notifications for the matching workflow
#
# Usage (from an endpoint, AFTER the transaction is committed):
#   from tutorlink.services.notification_service import notify_tutor_assigned
#   notify_tutor_assigned(tutor, request, send_email=True, send_sms=True)
#
# Delivery is handled by the messaging gateway; this module only decides who
# gets what and records the dispatch. A failure here never fails the caller.

import logging
from dataclasses import dataclass
from typing import List, Optional

from tutorlink.core.config import settings
from tutorlink.models.demo_class import DemoClass
from tutorlink.models.tutor_request import TutorRequest
from tutorlink.models.user import User

logger = logging.getLogger("tutorlink.notifications")


# ── Notification Types ────────────────────────────────────────────────────────

NOTIFICATION_TYPES = {
    "tutor_assigned",         # Admin assigned a tutor to a request
    "demo_class_scheduled",   # Demo class booked with the assignment
    "assignment_updated",     # Assignment accepted / rejected / completed
    "application_received",   # Tutor applied to a job
    "application_reviewed",   # Admin approved / rejected an application
}


@dataclass
class Dispatch:
    channel: str        # "email" | "sms"
    recipient: str
    notification_type: str
    subject: str
    body: str
    sender: str         # EMAIL_FROM or SMS_SENDER_ID


def _dispatch(
    user: Optional[User],
    notification_type: str,
    subject: str,
    body: str,
    send_email: bool = True,
    send_sms: bool = False,
) -> List[Dispatch]:
    """
    Build and hand off the email/SMS messages for one user.
    Returns what was dispatched (empty when disabled or nothing to send).
    """
    if notification_type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type '{notification_type}'.")

    sent: List[Dispatch] = []
    if not settings.notifications_enabled or user is None:
        return sent

    try:
        if send_email and user.email:
            sent.append(Dispatch(
                "email", user.email, notification_type, subject, body, settings.email_from
            ))
        if send_sms and user.phone:
            sent.append(Dispatch(
                "sms", user.phone, notification_type, subject, body, settings.sms_sender_id
            ))

        for item in sent:
            logger.info(
                "Notification %s via %s from %s to %s: %s",
                item.notification_type, item.channel, item.sender, item.recipient, item.subject,
            )
    except Exception as exc:
        # Notification failure should never block the main flow
        logger.error("Notification %s failed for user %s: %s", notification_type, user.id, exc)
        return []

    return sent


def notify_tutor_assigned(
    tutor: User,
    request: TutorRequest,
    demo_class: Optional[DemoClass] = None,
    send_email: bool = True,
    send_sms: bool = True,
) -> List[Dispatch]:
    subjects = ", ".join(request.selected_subjects or []) or "tuition"
    sent = _dispatch(
        tutor,
        "tutor_assigned",
        f"New tuition assignment: {subjects}",
        f"You have been assigned to a {subjects} tuition in {request.area}, {request.district}.",
        send_email=send_email,
        send_sms=send_sms,
    )
    if demo_class is not None:
        when = demo_class.requested_date.strftime("%d %b %Y %H:%M")
        body = f"A {demo_class.duration}-minute demo class for {demo_class.subject} is scheduled on {when}."
        sent += _dispatch(
            tutor, "demo_class_scheduled", "Demo class scheduled", body,
            send_email=send_email, send_sms=send_sms,
        )
        sent += _dispatch(
            request.student, "demo_class_scheduled", "Demo class scheduled", body,
            send_email=send_email, send_sms=send_sms,
        )
    return sent


def notify_assignment_updated(tutor: User, status: str) -> List[Dispatch]:
    return _dispatch(
        tutor,
        "assignment_updated",
        f"Assignment {status}",
        f"Your tuition assignment is now '{status}'.",
    )


def notify_application_received(admins: List[User], tutor: User, request: TutorRequest) -> List[Dispatch]:
    sent: List[Dispatch] = []
    for admin in admins:
        sent += _dispatch(
            admin,
            "application_received",
            "New tutor application",
            f"{tutor.full_name} applied for the tuition in {request.area}, {request.district}.",
        )
    return sent


def notify_application_reviewed(tutor: User, status: str, admin_notes: Optional[str]) -> List[Dispatch]:
    body = f"Your application was {status}."
    if admin_notes:
        body += f" Note from admin: {admin_notes}"
    return _dispatch(tutor, "application_reviewed", f"Application {status}", body)
