"""
Interest form question set.

Builds the ordered FormQuestionSet from the current open listings and
translates it into Google Forms API batchUpdate requests. The set is rebuilt
from scratch on every provisioning call; the form only reflects openings as
of its last build.
"""

from typing import Any, Dict, List, Optional, Sequence

from src.common.types import FormQuestion, Listing, QuestionKind, QuestionRole

ROLE_SELECT_TITLE = "Faculty Role of Interest"
FULL_NAME_TITLE = "Full Name"
CURRENT_DEPARTMENT_TITLE = "Current Department/Division"
CURRENT_TITLE_TITLE = "Current Position Title"
PHONE_TITLE = "Phone Number"
MOTIVATION_TITLE = "Why are you interested in this faculty role?"
EXPERIENCE_TITLE = "Relevant Experience or Qualifications"
AVAILABILITY_TITLE = "When would you be available to start?"
COMMENTS_TITLE = "Additional Comments"
NO_ROLES_TITLE = "No Faculty Roles Available"

AVAILABILITY_CHOICES = [
    "Immediately",
    "Within 2 weeks",
    "Within 1 month",
    "Within 2 months",
    "At the end of current semester",
    "At the end of current school year",
    "Other (please specify in comments)",
]

# Questions the pre-filled link may answer from a respondent profile
PREFILLABLE_PROFILE_FIELDS = {
    QuestionRole.FULL_NAME: "name",
    QuestionRole.CURRENT_TITLE: "job_title",
    QuestionRole.CURRENT_DEPARTMENT: "department",
    QuestionRole.PHONE: "phone",
}


def contact_and_followup_questions() -> List[FormQuestion]:
    """The fixed questions that follow the role selection."""
    return [
        FormQuestion(
            title="Contact Information",
            kind=QuestionKind.SECTION_HEADER,
            description="This information will help HR contact you about the position.",
        ),
        FormQuestion(FULL_NAME_TITLE, QuestionKind.TEXT, QuestionRole.FULL_NAME, required=True),
        FormQuestion(
            CURRENT_DEPARTMENT_TITLE,
            QuestionKind.TEXT,
            QuestionRole.CURRENT_DEPARTMENT,
            description="e.g., Elementary School, Middle School, High School, Technology, etc.",
            required=True,
        ),
        FormQuestion(CURRENT_TITLE_TITLE, QuestionKind.TEXT, QuestionRole.CURRENT_TITLE, required=True),
        FormQuestion(
            PHONE_TITLE,
            QuestionKind.TEXT,
            QuestionRole.PHONE,
            description="Mobile or office number where you can be reached",
        ),
        FormQuestion(title="Additional Information", kind=QuestionKind.SECTION_HEADER),
        FormQuestion(
            MOTIVATION_TITLE,
            QuestionKind.PARAGRAPH,
            QuestionRole.MOTIVATION,
            description=(
                "Please share what interests you about this role and how it aligns "
                "with your career goals."
            ),
            required=True,
        ),
        FormQuestion(
            EXPERIENCE_TITLE,
            QuestionKind.PARAGRAPH,
            QuestionRole.EXPERIENCE,
            description=(
                "Please highlight any relevant experience, skills, or qualifications "
                "that make you a good fit for this faculty role."
            ),
        ),
        FormQuestion(
            AVAILABILITY_TITLE,
            QuestionKind.MULTIPLE_CHOICE,
            QuestionRole.AVAILABILITY,
            required=True,
            choices=list(AVAILABILITY_CHOICES),
        ),
        FormQuestion(
            COMMENTS_TITLE,
            QuestionKind.PARAGRAPH,
            QuestionRole.COMMENTS,
            description="Any additional information you would like to share",
        ),
    ]


def build_question_set(listings: Sequence[Listing]) -> List[FormQuestion]:
    """
    Ordered questions for the interest form.

    With no open listings the form carries a single notice instead of the
    role selection and contact questions.
    """
    if not listings:
        return [
            FormQuestion(
                NO_ROLES_TITLE,
                QuestionKind.PARAGRAPH,
                QuestionRole.NO_ROLES_NOTICE,
                description=(
                    "There are currently no faculty role positions available "
                    "for interest expression."
                ),
            )
        ]

    role_select = FormQuestion(
        ROLE_SELECT_TITLE,
        QuestionKind.SINGLE_SELECT,
        QuestionRole.ROLE_SELECT,
        description="Select the faculty role you would like to express interest in:",
        required=True,
        choices=[listing.choice_label for listing in listings],
    )
    return [role_select] + contact_and_followup_questions()


# ===== Google Forms API translation =====

def _choice_question(kind: QuestionKind, choices: List[str]) -> Dict[str, Any]:
    # Forms rejects duplicate option values
    unique = list(dict.fromkeys(choices))
    return {
        "type": "DROP_DOWN" if kind == QuestionKind.SINGLE_SELECT else "RADIO",
        "options": [{"value": choice} for choice in unique],
    }


def question_to_item(question: FormQuestion) -> Dict[str, Any]:
    """Translate a FormQuestion into a Forms API Item."""
    item: Dict[str, Any] = {"title": question.title}
    if question.description:
        item["description"] = question.description

    if question.kind == QuestionKind.SECTION_HEADER:
        item["textItem"] = {}
        return item

    body: Dict[str, Any] = {"required": question.required}
    if question.kind in (QuestionKind.SINGLE_SELECT, QuestionKind.MULTIPLE_CHOICE):
        body["choiceQuestion"] = _choice_question(question.kind, question.choices)
    else:
        body["textQuestion"] = {"paragraph": question.kind == QuestionKind.PARAGRAPH}

    item["questionItem"] = {"question": body}
    return item


def build_rebuild_requests(existing_item_count: int, questions: Sequence[FormQuestion]) -> List[Dict[str, Any]]:
    """
    batchUpdate requests that delete every existing item and create the new set.

    Deletions run from the last index down so indices stay valid.
    """
    requests: List[Dict[str, Any]] = [
        {"deleteItem": {"location": {"index": index}}}
        for index in reversed(range(existing_item_count))
    ]
    requests.extend(
        {"createItem": {"item": question_to_item(question), "location": {"index": index}}}
        for index, question in enumerate(questions)
    )
    return requests


def map_question_ids(
    questions: Sequence[FormQuestion],
    replies: Sequence[Dict[str, Any]],
) -> Dict[str, str]:
    """
    Map each question's semantic role to the question id Forms assigned it.

    Only createItem replies carry ids; they arrive in request order.
    """
    create_replies = [reply["createItem"] for reply in replies if "createItem" in reply]
    mapping: Dict[str, str] = {}
    for question, reply in zip(questions, create_replies):
        question_ids = reply.get("questionId") or []
        if question.role is not None and question_ids:
            mapping[question.role.value] = question_ids[0]
    return mapping


def recover_question_ids(form: Dict[str, Any]) -> Dict[str, str]:
    """
    Rebuild the role -> question id mapping from a fetched form, matching the
    exact titles this module assigns. Used when no mapping was recorded.
    """
    titles = {question.title: question.role for question in build_question_set([Listing()])}
    titles[NO_ROLES_TITLE] = QuestionRole.NO_ROLES_NOTICE

    mapping: Dict[str, str] = {}
    for item in form.get("items", []):
        role = titles.get(item.get("title", ""))
        question_id = ((item.get("questionItem") or {}).get("question") or {}).get("questionId")
        if role is not None and question_id:
            mapping[role.value] = question_id
    return mapping


def prefill_entry_key(question_id: str) -> Optional[str]:
    """
    Query parameter name for pre-filling a question.

    Forms question ids are hex strings; pre-fill links use their decimal value.
    """
    try:
        return f"entry.{int(question_id, 16)}"
    except (TypeError, ValueError):
        return None
