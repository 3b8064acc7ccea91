"""
HR Notification

Turns one interest-form submission into a plain-text email for HR.
Sending is fire-and-forget: a failed send is logged and reported through the
event stream, never retried, never raised. The stored response row remains
the authoritative record.
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Optional, Sequence, Tuple

from src.common.config import Config
from src.common.structured_logger import EventType, StructuredLogger, get_structured_logger
from src.common.types import Submission
from src.services.form_builder import (
    AVAILABILITY_TITLE,
    CURRENT_DEPARTMENT_TITLE,
    CURRENT_TITLE_TITLE,
    FULL_NAME_TITLE,
    MOTIVATION_TITLE,
    PHONE_TITLE,
    ROLE_SELECT_TITLE,
)
from src.services.mailer import MailSender, SmtpMailSender

logger = logging.getLogger(__name__)

NOT_PROVIDED = "Not provided"

EMAIL_TEMPLATE = """Hello HR Team,

A new internal faculty role interest application has been submitted through the Faculty Role Expression of Interest system.

=== APPLICATION DETAILS ===
Faculty Role Applied For: {role}
Submitted: {timestamp}

=== APPLICANT INFORMATION ===
Name: {name}
Email: {email}
Phone: {phone}
Current Position: {current_title}
Current Department: {current_department}

=== APPLICATION RESPONSES ===
Why Interested:
{motivation}

Availability: {availability}

=== NEXT STEPS ===
Please review the complete application details in the form responses spreadsheet and follow up with the applicant as appropriate.

This notification was automatically generated by the Faculty Role Expression of Interest system.
"""


def _pick(submission: Submission, labels: Sequence[str], default: str) -> str:
    """First non-empty answer among the given labels."""
    for label in labels:
        value = submission.get(label)
        if value is not None and str(value).strip():
            return str(value).strip()
    return default


@dataclass
class NotificationDetails:
    """The submission fields HR cares about, with placeholders filled in."""
    role: str
    name: str
    email: str
    phone: str
    current_title: str
    current_department: str
    motivation: str
    availability: str
    timestamp: str

    @classmethod
    def from_submission(cls, submission: Submission) -> "NotificationDetails":
        # Older form revisions used "Position of Interest" and a differently
        # worded motivation question
        return cls(
            role=_pick(submission, [ROLE_SELECT_TITLE, "Position of Interest"], "Unknown Position"),
            name=_pick(submission, [FULL_NAME_TITLE], "Unknown"),
            email=_pick(submission, ["Email Address", "Email"], NOT_PROVIDED),
            phone=_pick(submission, [PHONE_TITLE], NOT_PROVIDED),
            current_title=_pick(submission, [CURRENT_TITLE_TITLE], NOT_PROVIDED),
            current_department=_pick(submission, [CURRENT_DEPARTMENT_TITLE], NOT_PROVIDED),
            motivation=_pick(
                submission,
                [MOTIVATION_TITLE, "Why are you interested in this position?"],
                NOT_PROVIDED,
            ),
            availability=_pick(submission, [AVAILABILITY_TITLE], NOT_PROVIDED),
            timestamp=_pick(submission, ["Timestamp"], datetime.now().strftime("%Y-%m-%d %H:%M:%S")),
        )


def compose_notification(submission: Submission) -> Tuple[str, str]:
    """Return (subject, body) for a submission."""
    details = NotificationDetails.from_submission(submission)
    subject = f"New Faculty Role Interest Application: {details.role}"
    body = EMAIL_TEMPLATE.format(**asdict(details))
    return subject, body


class HRNotifier:
    """Sends the HR notification for each submission."""

    def __init__(
        self,
        mailer: Optional[MailSender] = None,
        hr_email: Optional[str] = None,
        events: Optional[StructuredLogger] = None,
    ):
        self.mailer = mailer or SmtpMailSender()
        self.hr_email = hr_email if hr_email is not None else Config.HR_EMAIL
        self.events = events or get_structured_logger("notifications")

    def notify_hr(self, submission: Submission) -> bool:
        """
        Email HR about one submission.

        Returns True when the mail service accepted the message. Callers are
        not expected to act on the result.
        """
        subject, body = compose_notification(submission)
        try:
            if not self.hr_email:
                raise RuntimeError("HR_EMAIL is not configured")
            self.mailer.send_email(self.hr_email, subject, body)
        except Exception as e:
            logger.error(f"Error sending notification email: {e}")
            self.events.degraded(EventType.NOTIFICATION_FAILED, error=str(e), metadata={"subject": subject})
            return False

        logger.info(f"Notification email sent to HR: {subject}")
        self.events.success(EventType.NOTIFICATION_SENT, metadata={"subject": subject})
        return True
