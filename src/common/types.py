"""
Canonical types for the faculty roles dashboard.

Listings are derived fresh from the roles sheet on every read; profiles and
form definitions are rebuilt on demand. None of these objects are cached or
persisted by the dashboard itself.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional


# A completed form response: question label -> answer text
Submission = Mapping[str, str]

CLOSED_STATUS_MARKERS = ("closed", "filled")


def is_open_status(status: Optional[str]) -> bool:
    """
    Classify a listing status.

    A listing is open unless its status contains "closed" or "filled"
    (case-insensitive). Empty and unrecognised statuses count as open.
    """
    normalized = (status or "").strip().lower()
    return not any(marker in normalized for marker in CLOSED_STATUS_MARKERS)


@dataclass(frozen=True)
class Listing:
    """One open faculty role from the roles sheet."""
    division: str = ""
    role_title: str = ""
    summary: str = ""
    description_link: str = ""
    interest_form_url: str = ""
    status: str = ""

    @property
    def is_open(self) -> bool:
        return is_open_status(self.status)

    @property
    def choice_label(self) -> str:
        """Label used for this listing in the role-selection question."""
        return role_choice_label(self.division, self.role_title)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def role_choice_label(division: str, role_title: str) -> str:
    return f"{division} - {role_title}"


@dataclass
class RespondentProfile:
    """
    Resolved identity of a form-filler.

    email is always the lookup key; every other field defaults to "".
    """
    email: str
    name: str = ""
    job_title: str = ""
    department: str = ""
    phone: str = ""
    source: str = ""

    FIELDS = ("name", "job_title", "department", "phone")

    def empty_fields(self) -> List[str]:
        return [name for name in self.FIELDS if not getattr(self, name)]

    def is_complete(self) -> bool:
        return not self.empty_fields()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class FormInfo:
    """Identifiers and URLs of the provisioned interest form."""
    published_url: str = ""
    edit_url: str = ""
    form_id: str = ""

    @property
    def is_available(self) -> bool:
        return bool(self.form_id)

    def to_dict(self) -> Dict[str, str]:
        return {
            "publishedUrl": self.published_url,
            "editUrl": self.edit_url,
            "formId": self.form_id,
        }


class QuestionRole(str, Enum):
    """Semantic role of a question in the interest form."""
    ROLE_SELECT = "role_select"
    FULL_NAME = "full_name"
    CURRENT_DEPARTMENT = "current_department"
    CURRENT_TITLE = "current_title"
    PHONE = "phone"
    MOTIVATION = "motivation"
    EXPERIENCE = "experience"
    AVAILABILITY = "availability"
    COMMENTS = "comments"
    NO_ROLES_NOTICE = "no_roles_notice"


class QuestionKind(str, Enum):
    """Question types supported by the form-building service."""
    SINGLE_SELECT = "single_select"
    MULTIPLE_CHOICE = "multiple_choice"
    TEXT = "text"
    PARAGRAPH = "paragraph"
    SECTION_HEADER = "section_header"


@dataclass
class FormQuestion:
    """One item of the FormQuestionSet."""
    title: str
    kind: QuestionKind
    role: Optional[QuestionRole] = None
    description: str = ""
    required: bool = False
    choices: List[str] = field(default_factory=list)
