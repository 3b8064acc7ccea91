"""
Dashboard Service

The surface the web layer talks to:

    list_open_roles()          list_divisions()
    provision_form()           resolve_profile(email)
    prefilled_url(role, div)   notify_hr(submission)

plus a few administrative helpers. Every call is independent and returns a
usable default instead of raising. Form operations are only wired up when
form provisioning is enabled.
"""

import logging
from typing import Any, Dict, List, Optional

from src.common.config import Config
from src.common.error_handling import dashboard_operation
from src.common.repositories import ConfigStoreInterface, get_config_store
from src.common.types import FormInfo, Listing, RespondentProfile, Submission
from src.services.forms_client import FormsClient, GoogleFormsClient
from src.services.form_provisioner import FormProvisioner
from src.services.hr_notifier import HRNotifier
from src.services.listing_reader import ListingReader
from src.services.mailer import MailSender
from src.services.people_directory import GooglePeopleDirectory
from src.services.profile_resolver import ProfileResolver, build_default_strategies
from src.services.response_collector import ResponseCollector
from src.services.sheets_store import GspreadSpreadsheetStore, SpreadsheetStore

logger = logging.getLogger(__name__)


class DashboardService:
    """Facade over the listing reader and the (optional) form provisioner."""

    def __init__(
        self,
        listing_reader: ListingReader,
        profile_resolver: ProfileResolver,
        notifier: HRNotifier,
        provisioner: Optional[FormProvisioner] = None,
        response_collector: Optional[ResponseCollector] = None,
    ):
        self.listing_reader = listing_reader
        self.profile_resolver = profile_resolver
        self.notifier = notifier
        self.provisioner = provisioner
        self.response_collector = response_collector

    @property
    def forms_enabled(self) -> bool:
        return self.provisioner is not None

    # ===== Listings =====

    def list_open_roles(self) -> List[Listing]:
        return self.listing_reader.list_open_roles()

    def list_divisions(self) -> List[str]:
        return self.listing_reader.list_divisions()

    # ===== Form provisioning =====

    def provision_form(self) -> FormInfo:
        if self.provisioner is None:
            logger.info("Form provisioning is disabled; skipping provision_form")
            return FormInfo()
        return self.provisioner.provision_form()

    def get_form_url(self) -> str:
        if self.provisioner is None:
            return ""
        return self.provisioner.get_form_url()

    @dashboard_operation("resolve respondent profile", component="profiles")
    def _resolve(self, email: str) -> RespondentProfile:
        return self.profile_resolver.resolve(email)

    def resolve_profile(self, email: str) -> RespondentProfile:
        return self._resolve(email) or RespondentProfile(email=email)

    def prefilled_url(self, role_title: str, division: str, respondent_email: Optional[str] = None) -> str:
        """Pre-filled form link; "" when provisioning is disabled."""
        if self.provisioner is None:
            return ""
        return self.provisioner.prefilled_url(role_title, division, respondent_email)

    def listings_with_prefilled_urls(self, respondent_email: Optional[str] = None) -> List[Dict[str, Any]]:
        if self.provisioner is None:
            return [listing.to_dict() for listing in self.list_open_roles()]
        return self.provisioner.listings_with_prefilled_urls(respondent_email)

    def management_info(self) -> Dict[str, Any]:
        if self.provisioner is None:
            return {"error": "Form provisioning is disabled."}
        return self.provisioner.management_info()

    # ===== Responses =====

    def notify_hr(self, submission: Submission) -> None:
        self.notifier.notify_hr(submission)

    def sync_responses(self) -> Dict[str, int]:
        if self.response_collector is None:
            return {"new_responses": 0, "notified": 0}
        return self.response_collector.sync_responses()

    def notify_latest_response(self) -> bool:
        """Re-send the HR notification for the most recent stored response."""
        if self.response_collector is None:
            return False
        return self.response_collector.notify_latest_response()

    # ===== Diagnostics =====

    def system_check(self) -> Dict[str, Any]:
        """Summary of what the dashboard can currently read."""
        summary = self.listing_reader.refresh_summary()
        try:
            Config.validate()
            config_error = None
        except (ValueError, FileNotFoundError) as e:
            logger.warning(f"Configuration check failed: {e}")
            config_error = str(e)
        return {
            "success": True,
            "config_ok": config_error is None,
            "config_error": config_error,
            "role_count": summary["role_count"],
            "roles_with_form_urls": summary["roles_with_form_urls"],
            "divisions": summary["divisions"],
            "form_provisioning": self.forms_enabled,
            "using_sheet_urls": not self.forms_enabled,
        }


def build_dashboard_service(
    sheets: Optional[SpreadsheetStore] = None,
    forms: Optional[FormsClient] = None,
    config_store: Optional[ConfigStoreInterface] = None,
    mailer: Optional[MailSender] = None,
    people_directory=None,
    enable_forms: Optional[bool] = None,
) -> DashboardService:
    """
    Wire the dashboard from its collaborators. Anything not supplied is
    created from Config.
    """
    sheets = sheets or GspreadSpreadsheetStore()
    enable_forms = Config.ENABLE_FORM_PROVISIONING if enable_forms is None else enable_forms

    listing_reader = ListingReader(store=sheets)
    notifier = HRNotifier(mailer=mailer)

    if not enable_forms:
        resolver = ProfileResolver(build_default_strategies(store=sheets, people_directory=people_directory))
        return DashboardService(listing_reader, resolver, notifier)

    people_directory = people_directory or GooglePeopleDirectory()
    resolver = ProfileResolver(build_default_strategies(store=sheets, people_directory=people_directory))
    if config_store is None:
        try:
            config_store = get_config_store()
        except ValueError as e:
            # Listings and notifications keep working; system_check reports the cause
            logger.error(f"Config store unavailable, form provisioning stays disabled: {e}")
            return DashboardService(listing_reader, resolver, notifier)
    forms = forms or GoogleFormsClient()

    collector = ResponseCollector(
        forms=forms,
        sheets=sheets,
        config_store=config_store,
        notifier=notifier,
        form_title=Config.FORM_TITLE,
    )
    provisioner = FormProvisioner(
        forms=forms,
        config_store=config_store,
        listing_reader=listing_reader,
        profile_resolver=resolver,
        response_collector=collector,
    )
    return DashboardService(listing_reader, resolver, notifier, provisioner, collector)


# Singleton instance
_dashboard_service_instance: Optional[DashboardService] = None


def get_dashboard_service() -> DashboardService:
    """Process-wide DashboardService built from Config."""
    global _dashboard_service_instance

    if _dashboard_service_instance is None:
        _dashboard_service_instance = build_dashboard_service()
        logger.info(
            f"Initialized dashboard service (form provisioning "
            f"{'enabled' if _dashboard_service_instance.forms_enabled else 'disabled'})"
        )
    return _dashboard_service_instance


def reset_dashboard_service() -> None:
    global _dashboard_service_instance
    _dashboard_service_instance = None
