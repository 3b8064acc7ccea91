"""
Form-building service client.

GoogleFormsClient wraps the Google Forms API v1 resource. Everything the
provisioner needs goes through four calls: create, get, batchUpdate and
responses.list.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def edit_url_for(form_id: str) -> str:
    return f"https://docs.google.com/forms/d/{form_id}/edit"


class FormsClient(ABC):
    """Interface over the hosted form service."""

    @abstractmethod
    def create_form(self, title: str) -> Dict[str, Any]:
        """Create an empty form. Returns the form resource (formId, responderUri, ...)."""
        pass

    @abstractmethod
    def get_form(self, form_id: str) -> Dict[str, Any]:
        """Fetch a form resource including its items. Raises if it does not exist."""
        pass

    @abstractmethod
    def batch_update(self, form_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        """Apply update requests; returns {"replies": [...]} in request order."""
        pass

    @abstractmethod
    def list_responses(self, form_id: str) -> List[Dict[str, Any]]:
        """All submitted responses."""
        pass


class GoogleFormsClient(FormsClient):
    def __init__(self, service=None):
        self._service = service

    @property
    def service(self):
        if self._service is None:
            from src.common.google_clients import get_forms_service

            self._service = get_forms_service()
        return self._service

    def create_form(self, title: str) -> Dict[str, Any]:
        form = self.service.forms().create(
            body={"info": {"title": title, "documentTitle": title}}
        ).execute()
        logger.info(f"Created form {form.get('formId')}")
        return form

    def get_form(self, form_id: str) -> Dict[str, Any]:
        return self.service.forms().get(formId=form_id).execute()

    def batch_update(self, form_id: str, requests: List[Dict[str, Any]]) -> Dict[str, Any]:
        if not requests:
            return {"replies": []}
        return self.service.forms().batchUpdate(
            formId=form_id,
            body={"requests": requests, "includeFormInResponse": False},
        ).execute()

    def list_responses(self, form_id: str) -> List[Dict[str, Any]]:
        responses: List[Dict[str, Any]] = []
        page_token = None
        while True:
            kwargs = {"formId": form_id}
            if page_token:
                kwargs["pageToken"] = page_token
            page = self.service.forms().responses().list(**kwargs).execute()
            responses.extend(page.get("responses", []))
            page_token = page.get("nextPageToken")
            if not page_token:
                return responses
