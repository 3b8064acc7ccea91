"""
Listing Reader

Reads the faculty roles sheet and projects open rows into Listing records.

Column contract (row positions, header row skipped):
    0 division | 1 role title | 2 summary | 3 description link |
    4 interest form URL | 5 status

Read failures never reach the caller: an unreachable store or a missing tab
produces an empty list, so "no open roles" and "sheet unavailable" look the
same from the outside. The failure is logged and emitted as an event.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from src.common.config import Config
from src.common.structured_logger import EventType, StructuredLogger, get_structured_logger
from src.common.types import Listing
from src.services.sheets_store import GspreadSpreadsheetStore, SpreadsheetStore

logger = logging.getLogger(__name__)

LISTING_COLUMNS = (
    "division",
    "role_title",
    "summary",
    "description_link",
    "interest_form_url",
    "status",
)


def _cell(row: Sequence[Any], index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return str(row[index]).strip()


def row_to_listing(row: Sequence[Any]) -> Listing:
    """Project a sheet row onto a Listing; missing cells become ""."""
    values = {name: _cell(row, index) for index, name in enumerate(LISTING_COLUMNS)}
    return Listing(**values)


def _is_blank_row(row: Sequence[Any]) -> bool:
    return all(not str(cell).strip() for cell in row if cell is not None)


def parse_listings(rows: Sequence[Sequence[Any]]) -> List[Listing]:
    """Drop the header row and blank rows, keep open listings."""
    listings = []
    for row in rows[1:]:
        if _is_blank_row(row):
            continue
        listing = row_to_listing(row)
        if listing.is_open:
            listings.append(listing)
    return listings


class ListingReader:
    """Reads open roles from the configured roles sheet."""

    def __init__(
        self,
        store: Optional[SpreadsheetStore] = None,
        sheet_id: Optional[str] = None,
        tab_name: Optional[str] = None,
        events: Optional[StructuredLogger] = None,
    ):
        self.store = store or GspreadSpreadsheetStore()
        self.sheet_id = sheet_id if sheet_id is not None else Config.ROLES_SHEET_ID
        self.tab_name = tab_name if tab_name is not None else Config.ROLES_SHEET_NAME
        self.events = events or get_structured_logger("listings")

    def list_open_roles(self) -> List[Listing]:
        """Open listings in sheet order; [] if the sheet cannot be read."""
        try:
            rows = self.store.read_all_rows(self.sheet_id, self.tab_name)
        except Exception as e:
            logger.error(f"Error fetching faculty role listings from '{self.tab_name}': {e}")
            self.events.degraded(
                EventType.ROLES_READ_FAILED,
                error=str(e),
                metadata={"sheet_id": self.sheet_id, "tab": self.tab_name},
            )
            return []

        listings = parse_listings(rows)
        self.events.success(
            EventType.ROLES_READ,
            metadata={"rows": max(len(rows) - 1, 0), "open": len(listings)},
        )
        return listings

    def list_divisions(self) -> List[str]:
        """Distinct non-empty divisions across open listings, sorted."""
        return sorted({listing.division for listing in self.list_open_roles() if listing.division})

    def refresh_summary(self) -> Dict[str, Any]:
        """Counts used by the admin system check."""
        listings = self.list_open_roles()
        divisions = sorted({listing.division for listing in listings if listing.division})
        return {
            "role_count": len(listings),
            "roles_with_form_urls": sum(1 for listing in listings if listing.interest_form_url),
            "divisions": divisions,
        }
