"""
Global fixtures for all unit tests.

This conftest provides:
- autouse fixtures that prevent real external service calls (MongoDB) and
  isolate environment variables
- in-memory stand-ins for the spreadsheet store, the forms service and the
  mail sender, so components can be exercised end to end without Google APIs
- an event sink that captures StructuredLogger output

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import copy
import os
from typing import Any, Dict, List, Optional, Sequence
from unittest.mock import MagicMock, patch

import pytest

# Set test environment BEFORE any imports to prevent Config from loading real values
os.environ["CONFIG_STORE_BACKEND"] = "memory"
os.environ["ENABLE_FORM_PROVISIONING"] = "false"

from src.common.repositories import InMemoryConfigStore, reset_config_store
from src.common.repositories.config_store import AtlasConfigStore
from src.common.structured_logger import StructuredLogger
from src.services.dashboard_service import reset_dashboard_service
from src.services.forms_client import FormsClient
from src.services.mailer import MailSender
from src.services.sheets_store import SpreadsheetStore


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("src.common.repositories.config_store.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_collection = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_db.__getitem__ = MagicMock(return_value=mock_collection)
        mock_collection.find_one = MagicMock(return_value=None)

        mock_client.return_value = mock_instance
        AtlasConfigStore._client = None
        yield mock_client
        AtlasConfigStore._client = None


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate test environment from real credentials and configurations.

    This prevents real Google credentials, SMTP servers or MongoDB
    deployments from being picked up by tests.
    """
    monkeypatch.setenv("CONFIG_STORE_BACKEND", "memory")
    monkeypatch.setenv("GOOGLE_CREDENTIALS_PATH", "/nonexistent/test-credentials.json")
    monkeypatch.delenv("SMTP_HOST", raising=False)
    monkeypatch.delenv("MONGODB_URI", raising=False)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Fresh config store and dashboard singletons per test."""
    reset_config_store()
    reset_dashboard_service()
    yield
    reset_config_store()
    reset_dashboard_service()


# ===== In-memory collaborators =====

class FakeSpreadsheetStore(SpreadsheetStore):
    """
    Grids keyed by (sheet_id, tab_name). tab_name None is the first tab.

    Reading a sheet or tab that was never added raises KeyError, the way
    gspread raises for a missing spreadsheet or worksheet.
    """

    def __init__(self):
        self.grids: Dict[tuple, List[List[str]]] = {}
        self.titles: Dict[str, str] = {}
        self.created: List[str] = []

    def add_tab(self, sheet_id: str, tab_name: Optional[str], rows: Sequence[Sequence[Any]]) -> None:
        self.grids[(sheet_id, tab_name)] = [list(row) for row in rows]
        self.titles.setdefault(sheet_id, sheet_id)

    def read_all_rows(self, sheet_id, tab_name=None):
        return [list(row) for row in self.grids[(sheet_id, tab_name)]]

    def create_spreadsheet(self, title):
        sheet_id = f"sheet-{len(self.created) + 1}"
        self.created.append(sheet_id)
        self.grids[(sheet_id, None)] = []
        self.titles[sheet_id] = title
        return sheet_id

    def describe(self, sheet_id):
        if sheet_id not in self.titles:
            raise KeyError(sheet_id)
        return {
            "id": sheet_id,
            "name": self.titles[sheet_id],
            "url": f"https://docs.google.com/spreadsheets/d/{sheet_id}",
        }

    def append_rows(self, sheet_id, rows):
        self.grids[(sheet_id, None)].extend(list(row) for row in rows)

    def write_header(self, sheet_id, header):
        grid = self.grids[(sheet_id, None)]
        if grid:
            grid[0] = list(header)
        else:
            grid.append(list(header))


class FakeFormsClient(FormsClient):
    """
    Applies batchUpdate requests to in-memory form resources.

    Question ids are hex strings, like the ones the Forms API assigns.
    """

    def __init__(self):
        self.forms: Dict[str, Dict[str, Any]] = {}
        self.responses: Dict[str, List[Dict[str, Any]]] = {}
        self.batch_calls: List[List[Dict[str, Any]]] = []
        self.reject_settings = False
        self._next_id = 0x1a2b0000

    def _new_id(self) -> str:
        self._next_id += 1
        return format(self._next_id, "x")

    def create_form(self, title):
        form_id = f"form{len(self.forms) + 1}"
        self.forms[form_id] = {
            "formId": form_id,
            "info": {"title": title, "documentTitle": title},
            "responderUri": f"https://docs.google.com/forms/d/e/{form_id}/viewform",
            "items": [],
        }
        return copy.deepcopy(self.forms[form_id])

    def get_form(self, form_id):
        if form_id not in self.forms:
            raise KeyError(f"Requested entity was not found: {form_id}")
        return copy.deepcopy(self.forms[form_id])

    def batch_update(self, form_id, requests):
        self.batch_calls.append(copy.deepcopy(requests))
        form = self.forms[form_id]
        replies = []
        for request in requests:
            if "updateSettings" in request and self.reject_settings:
                raise RuntimeError("Email collection is not supported for this form")
            if "updateFormInfo" in request:
                form["info"].update(request["updateFormInfo"]["info"])
                replies.append({})
            elif "updateSettings" in request:
                form["settings"] = request["updateSettings"]["settings"]
                replies.append({})
            elif "deleteItem" in request:
                del form["items"][request["deleteItem"]["location"]["index"]]
                replies.append({})
            elif "createItem" in request:
                item = copy.deepcopy(request["createItem"]["item"])
                item["itemId"] = self._new_id()
                reply = {"itemId": item["itemId"]}
                if "questionItem" in item:
                    question_id = self._new_id()
                    item["questionItem"]["question"]["questionId"] = question_id
                    reply["questionId"] = [question_id]
                form["items"].insert(request["createItem"]["location"]["index"], item)
                replies.append({"createItem": reply})
        return {"replies": replies}

    def list_responses(self, form_id):
        return copy.deepcopy(self.responses.get(form_id, []))


class FakeMailSender(MailSender):
    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent: List[Dict[str, str]] = []
        self.fail_with = fail_with

    def send_email(self, to, subject, body):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append({"to": to, "subject": subject, "body": body})


@pytest.fixture
def sheets():
    return FakeSpreadsheetStore()


@pytest.fixture
def forms():
    return FakeFormsClient()


@pytest.fixture
def mailer():
    return FakeMailSender()


@pytest.fixture
def failing_mailer():
    return FakeMailSender(fail_with=ConnectionRefusedError("SMTP server unavailable"))


@pytest.fixture
def config_store():
    return InMemoryConfigStore()


@pytest.fixture
def captured_events():
    """List that receives every LogEvent emitted through the `events` fixture."""
    return []


@pytest.fixture
def events(captured_events):
    return StructuredLogger(source="test", sink=captured_events.append)


@pytest.fixture
def roles_rows():
    """Roles sheet contents: header plus a mix of open, closed and blank rows."""
    return [
        ["Division", "Role Title", "Summary", "Description Link", "Interest Form URL", "Status"],
        ["Elementary", "Grade 3 Teacher", "Teach grade 3", "http://doc", "http://form", "Available"],
        ["High School", "Physics Teacher", "AP Physics", "http://doc/physics", "", "Closed"],
        ["Middle School", "Math Coach", "Support math faculty", "", "http://form/math", ""],
        ["", "", "", "", "", ""],
        ["High School", "Chemistry Teacher", "Lab sciences", "http://doc/chem", "", "Position Filled"],
        ["High School", "Librarian", "Library and research"],
    ]
