"""
Pytest fixtures for frontend/Flask tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from src.common.types import FormInfo, Listing, RespondentProfile
from src.services.dashboard_service import DashboardService

ADMIN_TOKEN = "test-admin-token"


@pytest.fixture(scope="session", autouse=True)
def setup_frontend_imports():
    """Add frontend directory to sys.path for imports."""
    frontend_path = Path(__file__).parent.parent.parent / "frontend"
    if str(frontend_path) not in sys.path:
        sys.path.insert(0, str(frontend_path))


@pytest.fixture(scope="session", autouse=True)
def set_test_env():
    """Set test environment variables."""
    os.environ["FLASK_SECRET_KEY"] = "test-secret-key"
    os.environ["FLASK_ENV"] = "testing"
    os.environ["CONFIG_STORE_BACKEND"] = "memory"


@pytest.fixture
def app():
    """Flask app fixture with test configuration."""
    from app import app
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret-key"
    app.config["ADMIN_TOKEN"] = ADMIN_TOKEN
    app.config["PAGE_TITLE"] = "Faculty Roles 2026-27"
    return app


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture
def sample_listings():
    return [
        Listing(
            division="Elementary",
            role_title="Grade 3 Teacher",
            summary="Teach grade 3",
            description_link="http://doc",
            interest_form_url="http://form",
            status="Available",
        ),
        Listing(division="High School", role_title="Librarian", summary="Library and research"),
    ]


@pytest.fixture
def mock_service(mocker, sample_listings):
    """
    Replace the dashboard service the routes use.

    Defaults describe a dashboard with form provisioning enabled; tests
    override return values as needed.
    """
    service = MagicMock(spec=DashboardService)
    service.forms_enabled = True
    service.list_open_roles.return_value = sample_listings
    service.list_divisions.return_value = ["Elementary", "High School"]
    service.get_form_url.return_value = "https://docs.google.com/forms/d/e/form1/viewform"
    service.prefilled_url.return_value = "https://docs.google.com/forms/d/e/form1/viewform?usp=pp_url"
    service.provision_form.return_value = FormInfo(
        published_url="https://docs.google.com/forms/d/e/form1/viewform",
        edit_url="https://docs.google.com/forms/d/form1/edit",
        form_id="form1",
    )
    service.resolve_profile.return_value = RespondentProfile(
        email="jane.doe@org.example", name="Jane Doe", source="email_inference"
    )
    service.sync_responses.return_value = {"new_responses": 1, "notified": 1}
    service.management_info.return_value = {"formId": "form1", "responseCount": 1}
    service.system_check.return_value = {"success": True, "role_count": 2}
    service.listings_with_prefilled_urls.return_value = [
        dict(listing.to_dict(), prefilled_form_url="https://forms.example/?usp=pp_url")
        for listing in sample_listings
    ]
    mocker.patch("app.get_dashboard_service", return_value=service)
    return service
