"""
Profile Resolution

Resolves a respondent's profile (name, job title, department, phone) from an
ordered list of resolver strategies:

    1. static table          (authoritative)
    2. staff directory sheet (authoritative)
    3. contacts lookup       (fills empty fields)
    4. people directory      (fills fields still empty)
    5. email pattern inference (default name, best-guess department)

An authoritative hit ends the chain and nothing below it can overwrite its
fields. Other strategies only fill fields that are still empty. Each
strategy's failure is contained: it contributes nothing and the chain moves on.
"""

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

from src.common.config import Config
from src.common.structured_logger import EventType, StructuredLogger, get_structured_logger
from src.common.types import RespondentProfile
from src.services.sheets_store import SpreadsheetStore

logger = logging.getLogger(__name__)

PartialProfile = Dict[str, str]
ProfileLookup = Callable[[str], PartialProfile]

# Checked in order; the first substring found in the email's local part wins
DEPARTMENT_PATTERNS = (
    ("tech", "Technology"),
    ("it", "Technology"),
    ("hr", "Human Resources"),
    ("admin", "Administration"),
    ("finance", "Finance"),
    ("elementary", "Elementary School"),
    ("middle", "Middle School"),
    ("high", "High School"),
    ("es", "Elementary School"),
    ("ms", "Middle School"),
    ("hs", "High School"),
)

_FIELD_ALIASES = {
    "name": "name",
    "full_name": "name",
    "job_title": "job_title",
    "jobTitle": "job_title",
    "title": "job_title",
    "department": "department",
    "phone": "phone",
}


@dataclass(frozen=True)
class ResolverStrategy:
    """One step of the fallback chain."""
    name: str
    lookup: ProfileLookup
    authoritative: bool = False


def clean_partial(fields: Optional[Mapping[str, object]]) -> PartialProfile:
    """Keep known profile fields with non-empty text values."""
    cleaned: PartialProfile = {}
    for key, value in (fields or {}).items():
        target = _FIELD_ALIASES.get(key)
        if target is None or value is None:
            continue
        text = str(value).strip()
        if text and target not in cleaned:
            cleaned[target] = text
    return cleaned


# ===== Pattern inference =====

def default_name_from_email(email: str) -> str:
    """'jane.doe@org.example' -> 'Jane Doe'."""
    local_part = email.split("@")[0]
    segments = [segment for segment in re.split(r"[._\-+]+", local_part) if segment]
    return " ".join(segment.capitalize() for segment in segments)


def infer_department(email: str) -> str:
    local_part = email.split("@")[0].lower()
    for pattern, department in DEPARTMENT_PATTERNS:
        if pattern in local_part:
            return department
    return ""


def infer_from_email(email: str) -> PartialProfile:
    """Default name and best-guess department. Never guesses a job title."""
    return {
        "name": default_name_from_email(email),
        "department": infer_department(email),
    }


# ===== Table and sheet lookups =====

def load_static_profiles(path: Optional[str]) -> Dict[str, PartialProfile]:
    """
    Load the static profile table from a JSON file:
        {"someone@org.example": {"name": ..., "job_title": ..., "department": ..., "phone": ...}}
    A missing path yields an empty table.
    """
    if not path:
        return {}
    file_path = Path(path)
    if not file_path.exists():
        logger.warning(f"Static profile table not found: {path}")
        return {}
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return {email: clean_partial(fields) for email, fields in data.items()}


def static_table_lookup(table: Mapping[str, Mapping[str, object]]) -> ProfileLookup:
    """Exact-email lookup in a fixed table."""

    def lookup(email: str) -> PartialProfile:
        return clean_partial(table.get(email))

    return lookup


class StaffDirectoryLookup:
    """
    Lookup in the staff directory tab.

    Columns: Email | Full Name | Job Title | Department | Phone (header row skipped).
    The tab is re-read on every lookup so edits apply immediately.
    """

    def __init__(
        self,
        store: SpreadsheetStore,
        sheet_id: Optional[str] = None,
        tab_name: Optional[str] = None,
    ):
        self.store = store
        self.sheet_id = sheet_id if sheet_id is not None else Config.ROLES_SHEET_ID
        self.tab_name = tab_name if tab_name is not None else Config.STAFF_DIRECTORY_SHEET_NAME

    def load_profiles(self) -> Dict[str, PartialProfile]:
        rows = self.store.read_all_rows(self.sheet_id, self.tab_name)
        profiles: Dict[str, PartialProfile] = {}
        for row in rows[1:]:
            cells = [str(cell).strip() if cell is not None else "" for cell in row] + [""] * 5
            email = cells[0]
            if email:
                profiles[email] = clean_partial({
                    "name": cells[1],
                    "job_title": cells[2],
                    "department": cells[3],
                    "phone": cells[4],
                })
        logger.debug(f"Loaded {len(profiles)} profiles from '{self.tab_name}'")
        return profiles

    def __call__(self, email: str) -> PartialProfile:
        return self.load_profiles().get(email, {})


# ===== Resolver =====

class ProfileResolver:
    """Runs the strategy chain and merges the results."""

    def __init__(
        self,
        strategies: List[ResolverStrategy],
        events: Optional[StructuredLogger] = None,
    ):
        self.strategies = list(strategies)
        self.events = events or get_structured_logger("profiles")

    def _lookup(self, strategy: ResolverStrategy, email: str) -> PartialProfile:
        try:
            return clean_partial(strategy.lookup(email))
        except Exception as e:
            logger.info(f"Profile source '{strategy.name}' unavailable for {email}: {e}")
            self.events.degraded(
                EventType.PROFILE_SOURCE_FAILED,
                error=str(e),
                metadata={"source": strategy.name},
            )
            return {}

    def resolve(self, email: str) -> RespondentProfile:
        profile = RespondentProfile(email=email)
        sources: List[str] = []

        for strategy in self.strategies:
            if profile.is_complete():
                break
            fields = self._lookup(strategy, email)
            if not fields:
                continue

            if strategy.authoritative:
                profile = RespondentProfile(email=email, **fields)
                sources = [strategy.name]
                break

            filled = [key for key, value in fields.items() if not getattr(profile, key)]
            for key in filled:
                setattr(profile, key, fields[key])
            if filled:
                sources.append(strategy.name)

        if not profile.name:
            profile.name = default_name_from_email(email)
        profile.source = "+".join(sources) or "email"

        self.events.success(
            EventType.PROFILE_RESOLVED,
            metadata={"source": profile.source, "empty_fields": profile.empty_fields()},
        )
        return profile


def build_default_strategies(
    store: Optional[SpreadsheetStore] = None,
    people_directory=None,
    static_profiles: Optional[Mapping[str, Mapping[str, object]]] = None,
) -> List[ResolverStrategy]:
    """
    The standard five-step chain.

    Sources that are not configured (no sheet store, no People API client) are
    left out of the chain.
    """
    if static_profiles is None:
        static_profiles = load_static_profiles(Config.STAFF_PROFILES_PATH)

    strategies = [ResolverStrategy("static_table", static_table_lookup(static_profiles), authoritative=True)]
    if store is not None:
        strategies.append(ResolverStrategy("staff_directory", StaffDirectoryLookup(store), authoritative=True))
    if people_directory is not None:
        strategies.append(ResolverStrategy("contacts", people_directory.search_contacts))
        strategies.append(ResolverStrategy("people_directory", people_directory.search_directory))
    strategies.append(ResolverStrategy("email_inference", infer_from_email))
    return strategies
