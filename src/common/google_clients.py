"""
Google API client factories.

One service-account credential is shared by the Sheets (gspread), Forms and
People clients. Forms and People calls act on behalf of a Workspace user when
GOOGLE_DELEGATED_USER is set (domain-wide delegation).
"""

import logging
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import build

from src.common.config import Config

logger = logging.getLogger(__name__)

SHEETS_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]
FORMS_SCOPES = [
    "https://www.googleapis.com/auth/forms.body",
    "https://www.googleapis.com/auth/forms.responses.readonly",
    "https://www.googleapis.com/auth/drive",
]
PEOPLE_SCOPES = [
    "https://www.googleapis.com/auth/contacts.readonly",
    "https://www.googleapis.com/auth/directory.readonly",
]


def get_credentials(scopes: list, subject: Optional[str] = None) -> Credentials:
    """
    Load service-account credentials for the given scopes.

    Args:
        scopes: OAuth scopes to request
        subject: Workspace user to impersonate (defaults to GOOGLE_DELEGATED_USER)
    """
    creds = Credentials.from_service_account_file(
        Config.GOOGLE_CREDENTIALS_PATH,
        scopes=scopes,
    )
    subject = subject if subject is not None else Config.GOOGLE_DELEGATED_USER
    if subject:
        creds = creds.with_subject(subject)
    return creds


def get_sheets_client() -> gspread.Client:
    """gspread client for the roles, directory and response spreadsheets."""
    # Sheets access uses the service account itself; the sheets are shared with it
    return gspread.authorize(get_credentials(SHEETS_SCOPES, subject=""))


def get_forms_service():
    """Google Forms API v1 resource."""
    return build("forms", "v1", credentials=get_credentials(FORMS_SCOPES), cache_discovery=False)


def get_people_service():
    """Google People API v1 resource."""
    return build("people", "v1", credentials=get_credentials(PEOPLE_SCOPES), cache_discovery=False)
