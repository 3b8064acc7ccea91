"""
Google People API lookups used by profile resolution.

- search_contacts: the delegated user's contacts (best effort; any field may be absent)
- search_directory: the Workspace domain profile directory
"""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

READ_MASK = "names,emailAddresses,phoneNumbers,organizations"
DIRECTORY_SOURCES = [
    "DIRECTORY_SOURCE_TYPE_DOMAIN_PROFILE",
    "DIRECTORY_SOURCE_TYPE_DOMAIN_CONTACT",
]


def _first(person: Dict[str, Any], key: str) -> Dict[str, Any]:
    values = person.get(key) or []
    return values[0] if values else {}


def person_to_fields(person: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """
    Extract name, job title, department and phone from a People API person.

    Fields the person does not carry are simply left out.
    """
    if not person:
        return {}

    name = _first(person, "names")
    organization = _first(person, "organizations")
    phone = _first(person, "phoneNumbers")

    fields = {
        "name": name.get("displayName", ""),
        "job_title": organization.get("title", ""),
        "department": organization.get("department", ""),
        "phone": phone.get("value", ""),
    }
    return {key: value for key, value in fields.items() if value}


def _has_email(person: Dict[str, Any], email: str) -> bool:
    wanted = email.strip().lower()
    return any(
        (entry.get("value") or "").strip().lower() == wanted
        for entry in person.get("emailAddresses") or []
    )


def _pick_person(people: List[Dict[str, Any]], email: str) -> Optional[Dict[str, Any]]:
    """Prefer an exact email match; searches are prefix based."""
    for person in people:
        if _has_email(person, email):
            return person
    return None


class GooglePeopleDirectory:
    """Thin wrapper over the People API v1 resource."""

    def __init__(self, service=None):
        self._service = service

    @property
    def service(self):
        if self._service is None:
            from src.common.google_clients import get_people_service

            self._service = get_people_service()
        return self._service

    def search_contacts(self, email: str) -> Dict[str, str]:
        response = self.service.people().searchContacts(
            query=email,
            readMask=READ_MASK,
        ).execute()
        people = [result.get("person", {}) for result in response.get("results", [])]
        return person_to_fields(_pick_person(people, email))

    def search_directory(self, email: str) -> Dict[str, str]:
        response = self.service.people().searchDirectoryPeople(
            query=email,
            readMask=READ_MASK,
            sources=DIRECTORY_SOURCES,
        ).execute()
        return person_to_fields(_pick_person(response.get("people", []), email))
