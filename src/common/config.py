"""
Configuration loader for the faculty roles dashboard.

Settings come from the process environment, with a .env file picked up for
local runs. Config.validate() is called at startup and by the system check.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


DEFAULT_FORM_TITLE = "Expression of Interest: 2026-27 Internal Transfer (Faculty Roles)"
DEFAULT_FORM_DESCRIPTION = (
    "Express your interest in the following faculty role opportunities. "
    "Your information will be pre-filled from your school account."
)


class Config:
    """
    Centralized configuration for the dashboard and the form provisioner.

    Credentials and tokens only ever come from the environment.
    """

    # ===== Google APIs =====
    GOOGLE_CREDENTIALS_PATH: str = os.getenv(
        "GOOGLE_CREDENTIALS_PATH",
        "./credentials/google-service-account.json"
    )
    # Workspace user impersonated through domain-wide delegation (Forms, People)
    GOOGLE_DELEGATED_USER: str = os.getenv("GOOGLE_DELEGATED_USER", "")

    # ===== Roles Spreadsheet =====
    ROLES_SHEET_ID: str = os.getenv("ROLES_SHEET_ID", "")
    ROLES_SHEET_NAME: str = os.getenv("ROLES_SHEET_NAME", "Faculty Roles")
    STAFF_DIRECTORY_SHEET_NAME: str = os.getenv("STAFF_DIRECTORY_SHEET_NAME", "Staff Directory")

    # ===== Interest Form =====
    FORM_TITLE: str = os.getenv("FORM_TITLE", DEFAULT_FORM_TITLE)
    FORM_DESCRIPTION: str = os.getenv("FORM_DESCRIPTION", DEFAULT_FORM_DESCRIPTION)
    STAFF_PROFILES_PATH: str = os.getenv("STAFF_PROFILES_PATH", "")

    # ===== HR Notifications =====
    HR_EMAIL: str = os.getenv("HR_EMAIL", "")
    SMTP_HOST: str = os.getenv("SMTP_HOST", "")
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER: str = os.getenv("SMTP_USER", "")
    SMTP_PASS: str = os.getenv("SMTP_PASS", "")
    FROM_EMAIL: str = os.getenv("FROM_EMAIL", "")

    # ===== Persisted configuration (form/response ids) =====
    # "mongodb" for deployments, "memory" for local runs and tests
    CONFIG_STORE_BACKEND: str = os.getenv("CONFIG_STORE_BACKEND", "mongodb").lower()
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "faculty_roles")

    # ===== Web App =====
    PAGE_TITLE: str = os.getenv("PAGE_TITLE", DEFAULT_FORM_TITLE)
    ADMIN_TOKEN: str = os.getenv("ADMIN_TOKEN", "")

    # ===== Feature Flags =====
    # The form provisioner stays dormant unless explicitly enabled; the dashboard
    # links to the interest form URLs stored in the roles sheet instead.
    ENABLE_FORM_PROVISIONING: bool = os.getenv("ENABLE_FORM_PROVISIONING", "false").lower() == "true"

    @classmethod
    def validate(cls) -> None:
        """
        Check the settings needed by the enabled features.

        Raises ValueError for missing or unknown settings and FileNotFoundError
        when the service account key is absent.
        """
        required_settings = {
            "ROLES_SHEET_ID": cls.ROLES_SHEET_ID,
            "GOOGLE_CREDENTIALS_PATH": cls.GOOGLE_CREDENTIALS_PATH,
        }

        if cls.ENABLE_FORM_PROVISIONING:
            required_settings.update({
                "HR_EMAIL": cls.HR_EMAIL,
                "SMTP_HOST": cls.SMTP_HOST,
                "FROM_EMAIL": cls.FROM_EMAIL,
            })
            if cls.CONFIG_STORE_BACKEND == "mongodb":
                required_settings["MONGODB_URI"] = cls.MONGODB_URI

        missing = [name for name, value in required_settings.items() if not value]

        if missing:
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}. "
                f"Please check your .env file."
            )

        if cls.CONFIG_STORE_BACKEND not in ("mongodb", "memory"):
            raise ValueError(
                f"Unknown CONFIG_STORE_BACKEND '{cls.CONFIG_STORE_BACKEND}' (expected mongodb or memory)."
            )

        if not Path(cls.GOOGLE_CREDENTIALS_PATH).exists():
            raise FileNotFoundError(
                f"Google credentials file not found: {cls.GOOGLE_CREDENTIALS_PATH}"
            )

    @classmethod
    def summary(cls) -> str:
        """Human-readable settings overview for the startup log; secrets are never printed."""
        return f"""
Configuration Summary:
  Roles Sheet: {'✓ Configured' if cls.ROLES_SHEET_ID else '✗ Missing'} (tab: {cls.ROLES_SHEET_NAME})
  Google Credentials: {cls.GOOGLE_CREDENTIALS_PATH}
  Delegated User: {cls.GOOGLE_DELEGATED_USER or '✗ Not set'}
  Form Provisioning: {'Enabled' if cls.ENABLE_FORM_PROVISIONING else 'Disabled'}
  HR Email: {'✓ Configured' if cls.HR_EMAIL else '✗ Missing'}
  SMTP: {'✓ Configured' if cls.SMTP_HOST else '✗ Missing'}
  Config Store: {cls.CONFIG_STORE_BACKEND} {'✓' if cls.MONGODB_URI or cls.CONFIG_STORE_BACKEND == 'memory' else '✗ Missing MONGODB_URI'}
  Admin Token: {'✓ Configured' if cls.ADMIN_TOKEN else '✗ Missing'}
        """.strip()

