"""
Form Provisioner

Creates or refreshes the interest form from the current open listings and
generates pre-filled links for respondents.

provision_form() is a full rebuild: every existing item is deleted and the
question set is created again. The question ids Forms assigns are recorded
per semantic role at that moment, so pre-filled links never have to find
questions by matching their titles.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from src.common.config import Config
from src.common.error_handling import dashboard_operation, log_on_exception, safe_execute
from src.common.repositories import (
    INTEREST_FORM_ID,
    INTEREST_FORM_QUESTION_IDS,
    RESPONSE_SHEET_ID,
    ConfigStoreInterface,
)
from src.common.structured_logger import EventType, StructuredLogger, get_structured_logger
from src.common.types import FormInfo, QuestionRole, RespondentProfile, role_choice_label
from src.services.form_builder import (
    PREFILLABLE_PROFILE_FIELDS,
    build_question_set,
    build_rebuild_requests,
    map_question_ids,
    prefill_entry_key,
    recover_question_ids,
)
from src.services.forms_client import FormsClient, edit_url_for
from src.services.listing_reader import ListingReader
from src.services.profile_resolver import ProfileResolver
from src.services.response_collector import ResponseCollector

logger = logging.getLogger(__name__)


class FormProvisioner:
    """Builds the interest form and its pre-filled links."""

    def __init__(
        self,
        forms: FormsClient,
        config_store: ConfigStoreInterface,
        listing_reader: ListingReader,
        profile_resolver: ProfileResolver,
        response_collector: ResponseCollector,
        title: Optional[str] = None,
        description: Optional[str] = None,
        events: Optional[StructuredLogger] = None,
    ):
        self.forms = forms
        self.config_store = config_store
        self.listing_reader = listing_reader
        self.profile_resolver = profile_resolver
        self.response_collector = response_collector
        self.title = title if title is not None else Config.FORM_TITLE
        self.description = description if description is not None else Config.FORM_DESCRIPTION
        self.events = events or get_structured_logger("form")

    # ===== Form lifecycle =====

    def _open_or_create_form(self) -> Dict[str, Any]:
        form_id = self.config_store.get(INTEREST_FORM_ID)
        if form_id:
            try:
                form = self.forms.get_form(form_id)
                logger.info(f"Using existing form: {form_id}")
                return form
            except Exception as e:
                logger.info(f"Existing form {form_id} not found, creating new one: {e}")

        form = self.forms.create_form(self.title)
        with log_on_exception(logger, f"record new form {form['formId']}", level=logging.ERROR):
            self.config_store.set(INTEREST_FORM_ID, form["formId"])
        self.config_store.clear(INTEREST_FORM_QUESTION_IDS)
        return form

    def _apply_settings(self, form_id: str) -> None:
        self.forms.batch_update(form_id, [
            {
                "updateFormInfo": {
                    "info": {"title": self.title, "description": self.description},
                    "updateMask": "title,description",
                }
            }
        ])
        # Email collection is optional; older projects reject this setting
        safe_execute(
            self.forms.batch_update,
            form_id,
            [{
                "updateSettings": {
                    "settings": {"emailCollectionType": "VERIFIED"},
                    "updateMask": "emailCollectionType",
                }
            }],
            operation_name="enable email collection",
            logger=logger,
        )

    @staticmethod
    def _form_info(form: Dict[str, Any]) -> FormInfo:
        form_id = form.get("formId", "")
        return FormInfo(
            published_url=form.get("responderUri", ""),
            edit_url=edit_url_for(form_id) if form_id else "",
            form_id=form_id,
        )

    @dashboard_operation("provision interest form", component="form", critical=True, fallback_factory=FormInfo)
    def provision_form(self) -> FormInfo:
        """
        Create the form if needed, rebuild its questions from the open
        listings and (re)attach the response spreadsheet.
        """
        try:
            form = self._open_or_create_form()
            form_id = form["formId"]
            self._apply_settings(form_id)

            listings = self.listing_reader.list_open_roles()
            questions = build_question_set(listings)
            requests = build_rebuild_requests(len(form.get("items", [])), questions)
            response = self.forms.batch_update(form_id, requests)

            question_ids = map_question_ids(questions, response.get("replies", []))
            self.config_store.set(INTEREST_FORM_QUESTION_IDS, {"form_id": form_id, "questions": question_ids})

            self.response_collector.ensure_response_store(questions)
        except Exception as e:
            self.events.degraded(EventType.FORM_PROVISION_FAILED, error=str(e))
            raise

        info = self._form_info(form)
        logger.info(f"Form created/updated: {info.published_url} (edit: {info.edit_url})")
        self.events.success(
            EventType.FORM_PROVISIONED,
            metadata={"form_id": form_id, "roles": len(listings), "questions": len(questions)},
        )
        return info

    @dashboard_operation("get interest form URL", component="form", fallback_value="")
    def get_form_url(self) -> str:
        """Published URL of the form, provisioning it when none is usable."""
        form_id = self.config_store.get(INTEREST_FORM_ID)
        if form_id:
            try:
                return self.forms.get_form(form_id).get("responderUri", "")
            except Exception as e:
                logger.warning(f"Stored form {form_id} could not be opened: {e}")
        return self.provision_form().published_url

    # ===== Pre-filled links =====

    def _question_ids(self, form: Dict[str, Any]) -> Dict[str, str]:
        stored = self.config_store.get(INTEREST_FORM_QUESTION_IDS) or {}
        if stored.get("form_id") == form.get("formId") and stored.get("questions"):
            return stored["questions"]
        logger.info("No recorded question ids for this form; recovering them from its items")
        return recover_question_ids(form)

    def _prefill_context(self) -> Optional[Tuple[str, Dict[str, str]]]:
        """
        (responder URL, role -> question id) for the live form, or None.

        Provisions the form first when none has been created yet.
        """
        form_id = self.config_store.get(INTEREST_FORM_ID)
        if not form_id:
            form_id = self.provision_form().form_id
        if not form_id:
            return None
        try:
            form = self.forms.get_form(form_id)
        except Exception as e:
            logger.error(f"Error opening form {form_id} for pre-filling: {e}")
            self.events.degraded(EventType.PREFILL_FALLBACK, error=str(e), metadata={"form_id": form_id})
            return None
        return form.get("responderUri", ""), self._question_ids(form)

    @staticmethod
    def compose_prefilled_url(
        responder_url: str,
        question_ids: Dict[str, str],
        role_title: str,
        division: str,
        profile: Optional[RespondentProfile] = None,
    ) -> str:
        """
        Pre-filled link for one role. Profile fields that are empty are left
        out entirely, so the form shows them blank.
        """
        answers: List[Tuple[QuestionRole, str]] = [
            (QuestionRole.ROLE_SELECT, role_choice_label(division, role_title))
        ]
        if profile is not None:
            for role, field_name in PREFILLABLE_PROFILE_FIELDS.items():
                value = getattr(profile, field_name)
                if value:
                    answers.append((role, value))

        params = []
        for role, value in answers:
            key = prefill_entry_key(question_ids.get(role.value, ""))
            if key:
                params.append((key, value))

        if not params:
            return responder_url
        return f"{responder_url}?{urlencode([('usp', 'pp_url')] + params)}"

    @dashboard_operation("build pre-filled form URL", component="form", fallback_value="")
    def prefilled_url(self, role_title: str, division: str, respondent_email: Optional[str] = None) -> str:
        """
        Shareable link with the role (and known profile fields) filled in.
        Nothing is submitted. Falls back to the plain form URL.
        """
        context = self._prefill_context()
        if context is None:
            return self.get_form_url() if self.config_store.get(INTEREST_FORM_ID) else ""

        responder_url, question_ids = context
        profile = self.profile_resolver.resolve(respondent_email) if respondent_email else None
        url = self.compose_prefilled_url(responder_url, question_ids, role_title, division, profile)
        self.events.success(
            EventType.PREFILL_GENERATED,
            metadata={"role": role_choice_label(division, role_title), "profile_source": profile.source if profile else None},
        )
        return url

    @dashboard_operation("list roles with pre-filled URLs", component="form", fallback_factory=list)
    def listings_with_prefilled_urls(self, respondent_email: Optional[str] = None) -> List[Dict[str, Any]]:
        listings = self.listing_reader.list_open_roles()
        if not listings:
            return []

        context = self._prefill_context()
        if context is None:
            plain_url = self.get_form_url() if self.config_store.get(INTEREST_FORM_ID) else ""
            return [dict(listing.to_dict(), prefilled_form_url=plain_url) for listing in listings]

        responder_url, question_ids = context
        profile = self.profile_resolver.resolve(respondent_email) if respondent_email else None
        return [
            dict(
                listing.to_dict(),
                prefilled_form_url=self.compose_prefilled_url(
                    responder_url, question_ids, listing.role_title, listing.division, profile
                ),
            )
            for listing in listings
        ]

    # ===== Management =====

    def management_info(self) -> Dict[str, Any]:
        """Form and response spreadsheet details for administrators."""
        form_id = self.config_store.get(INTEREST_FORM_ID)
        if not form_id:
            return {"error": "No form created yet. Run provision_form() first."}

        try:
            form = self.forms.get_form(form_id)
            info: Dict[str, Any] = {
                "formId": form_id,
                "title": (form.get("info") or {}).get("title", ""),
                "publishedUrl": form.get("responderUri", ""),
                "editUrl": edit_url_for(form_id),
                "responseCount": len(self.forms.list_responses(form_id)),
            }
        except Exception as e:
            return {"error": f"Form not found: {e}"}

        sheet_id = self.config_store.get(RESPONSE_SHEET_ID)
        if sheet_id:
            try:
                info["responseSpreadsheet"] = self.response_collector.sheets.describe(sheet_id)
            except Exception as e:
                logger.warning(f"Response spreadsheet {sheet_id} not accessible: {e}")
                info["responseSpreadsheet"] = {"error": "Response spreadsheet not accessible"}
        return info
