"""
Response Collection

The Forms API has no way to link a response spreadsheet, so the dashboard
keeps its own: a spreadsheet created once, remembered in the config store,
and filled by sync_responses(). Every response copied into it for the first
time triggers one HR notification.

Response sheet layout (first tab):
    Timestamp | Email Address | <question titles...> | Response ID
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from src.common.error_handling import dashboard_operation
from src.common.repositories import INTEREST_FORM_ID, RESPONSE_SHEET_ID, ConfigStoreInterface
from src.common.structured_logger import EventType, StructuredLogger, get_structured_logger
from src.common.types import FormQuestion, QuestionKind, QuestionRole
from src.services.forms_client import FormsClient
from src.services.hr_notifier import HRNotifier
from src.services.sheets_store import SpreadsheetStore

logger = logging.getLogger(__name__)

TIMESTAMP_COLUMN = "Timestamp"
EMAIL_COLUMN = "Email Address"
RESPONSE_ID_COLUMN = "Response ID"


def response_header(questions: Sequence[FormQuestion]) -> List[str]:
    """Column headings for the response sheet."""
    titles = [
        question.title
        for question in questions
        if question.kind != QuestionKind.SECTION_HEADER and question.role != QuestionRole.NO_ROLES_NOTICE
    ]
    return [TIMESTAMP_COLUMN, EMAIL_COLUMN] + titles + [RESPONSE_ID_COLUMN]


def merge_header(existing: Sequence[str], wanted: Sequence[str]) -> List[str]:
    """Keep existing columns in place and append any missing ones."""
    merged = [str(column) for column in existing]
    merged.extend(column for column in wanted if column not in merged)
    return merged


def question_titles(form: Dict[str, Any]) -> Dict[str, str]:
    """question id -> item title for a fetched form."""
    titles = {}
    for item in form.get("items", []):
        question = (item.get("questionItem") or {}).get("question") or {}
        if question.get("questionId"):
            titles[question["questionId"]] = item.get("title", "")
    return titles


def response_to_submission(response: Dict[str, Any], titles: Dict[str, str]) -> Dict[str, str]:
    """Flatten a Forms API response into a label -> answer mapping."""
    submission = {
        TIMESTAMP_COLUMN: response.get("lastSubmittedTime") or response.get("createTime", ""),
        EMAIL_COLUMN: response.get("respondentEmail", ""),
        RESPONSE_ID_COLUMN: response.get("responseId", ""),
    }
    for question_id, answer in (response.get("answers") or {}).items():
        title = titles.get(question_id)
        if not title:
            continue
        values = [entry.get("value", "") for entry in (answer.get("textAnswers") or {}).get("answers", [])]
        submission[title] = ", ".join(value for value in values if value)
    return submission


class ResponseCollector:
    """Owns the response spreadsheet and the per-response HR notification."""

    def __init__(
        self,
        forms: FormsClient,
        sheets: SpreadsheetStore,
        config_store: ConfigStoreInterface,
        notifier: HRNotifier,
        form_title: str,
        events: Optional[StructuredLogger] = None,
    ):
        self.forms = forms
        self.sheets = sheets
        self.config_store = config_store
        self.notifier = notifier
        self.form_title = form_title
        self.events = events or get_structured_logger("responses")

    def _existing_store_id(self) -> Optional[str]:
        sheet_id = self.config_store.get(RESPONSE_SHEET_ID)
        if not sheet_id:
            return None
        try:
            self.sheets.describe(sheet_id)
            return sheet_id
        except Exception as e:
            logger.warning(f"Response spreadsheet {sheet_id} not accessible, creating a new one: {e}")
            return None

    def ensure_response_store(self, questions: Sequence[FormQuestion]) -> str:
        """
        Open or create the response spreadsheet and make sure its header
        covers the current question set. Returns the spreadsheet id.
        """
        sheet_id = self._existing_store_id()
        if sheet_id is None:
            sheet_id = self.sheets.create_spreadsheet(f"{self.form_title} - Responses")
            self.config_store.set(RESPONSE_SHEET_ID, sheet_id)

        rows = self.sheets.read_all_rows(sheet_id)
        existing = rows[0] if rows else []
        header = merge_header(existing, response_header(questions))
        if header != list(existing):
            self.sheets.write_header(sheet_id, header)

        self.events.success(EventType.RESPONSE_STORE_READY, metadata={"sheet_id": sheet_id, "columns": len(header)})
        return sheet_id

    @dashboard_operation(
        "sync form responses",
        component="responses",
        fallback_factory=lambda: {"new_responses": 0, "notified": 0},
    )
    def sync_responses(self) -> Dict[str, int]:
        """
        Copy responses not yet in the response sheet and notify HR for each.
        """
        form_id = self.config_store.get(INTEREST_FORM_ID)
        sheet_id = self.config_store.get(RESPONSE_SHEET_ID)
        if not form_id or not sheet_id:
            logger.info("No provisioned form or response spreadsheet; nothing to sync")
            return {"new_responses": 0, "notified": 0}

        titles = question_titles(self.forms.get_form(form_id))
        rows = self.sheets.read_all_rows(sheet_id)
        header = list(rows[0]) if rows else [TIMESTAMP_COLUMN, EMAIL_COLUMN, RESPONSE_ID_COLUMN]
        if not rows:
            self.sheets.write_header(sheet_id, header)

        id_index = header.index(RESPONSE_ID_COLUMN) if RESPONSE_ID_COLUMN in header else None
        seen = set()
        if id_index is not None:
            seen = {row[id_index] for row in rows[1:] if len(row) > id_index}

        responses = [
            response for response in self.forms.list_responses(form_id)
            if response.get("responseId") not in seen
        ]
        responses.sort(key=lambda response: response.get("lastSubmittedTime") or response.get("createTime", ""))
        submissions = [response_to_submission(response, titles) for response in responses]

        self.sheets.append_rows(sheet_id, [[submission.get(column, "") for column in header] for submission in submissions])

        notified = sum(1 for submission in submissions if self.notifier.notify_hr(submission))
        result = {"new_responses": len(submissions), "notified": notified}
        self.events.success(EventType.RESPONSES_SYNCED, metadata=result)
        return result

    @dashboard_operation("notify latest response", component="responses", log_success=True, fallback_value=False)
    def notify_latest_response(self) -> bool:
        """Re-send the HR notification for the most recent stored response."""
        sheet_id = self.config_store.get(RESPONSE_SHEET_ID)
        if not sheet_id:
            logger.info("No response spreadsheet found")
            return False

        rows = self.sheets.read_all_rows(sheet_id)
        if len(rows) <= 1:
            logger.info("No responses found")
            return False

        header, last_row = rows[0], rows[-1]
        submission = {column: (last_row[index] if index < len(last_row) else "") for index, column in enumerate(header)}
        return self.notifier.notify_hr(submission)
