"""
Spreadsheet store used by the listing reader, the staff directory lookup and
the response collector.

The dashboard only needs a handful of operations, so the gspread client is
hidden behind SpreadsheetStore and tests substitute an in-memory grid.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import gspread

logger = logging.getLogger(__name__)

Grid = List[List[str]]


class SpreadsheetStore(ABC):
    """Narrow interface over the hosted spreadsheet service."""

    @abstractmethod
    def read_all_rows(self, sheet_id: str, tab_name: Optional[str] = None) -> Grid:
        """
        Read every populated row of a tab (first tab when tab_name is None).

        Raises whatever the backend raises when the spreadsheet or tab is missing.
        """
        pass

    @abstractmethod
    def create_spreadsheet(self, title: str) -> str:
        """Create a spreadsheet and return its id."""
        pass

    @abstractmethod
    def describe(self, sheet_id: str) -> Dict[str, str]:
        """Return {"id", "name", "url"} for an existing spreadsheet."""
        pass

    @abstractmethod
    def append_rows(self, sheet_id: str, rows: Sequence[Sequence[Any]]) -> None:
        """Append rows to the first tab."""
        pass

    @abstractmethod
    def write_header(self, sheet_id: str, header: Sequence[str]) -> None:
        """Overwrite the first row of the first tab."""
        pass


class GspreadSpreadsheetStore(SpreadsheetStore):
    """Google Sheets implementation backed by gspread."""

    def __init__(self, client: Optional[gspread.Client] = None):
        self._client = client

    @property
    def client(self) -> gspread.Client:
        if self._client is None:
            from src.common.google_clients import get_sheets_client

            self._client = get_sheets_client()
        return self._client

    def read_all_rows(self, sheet_id: str, tab_name: Optional[str] = None) -> Grid:
        spreadsheet = self.client.open_by_key(sheet_id)
        worksheet = spreadsheet.worksheet(tab_name) if tab_name else spreadsheet.sheet1
        return worksheet.get_all_values()

    def create_spreadsheet(self, title: str) -> str:
        spreadsheet = self.client.create(title)
        logger.info(f"Created spreadsheet '{title}' ({spreadsheet.id})")
        return spreadsheet.id

    def describe(self, sheet_id: str) -> Dict[str, str]:
        spreadsheet = self.client.open_by_key(sheet_id)
        return {
            "id": spreadsheet.id,
            "name": spreadsheet.title,
            "url": spreadsheet.url,
        }

    def append_rows(self, sheet_id: str, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        worksheet = self.client.open_by_key(sheet_id).sheet1
        worksheet.append_rows([list(row) for row in rows], value_input_option="RAW")

    def write_header(self, sheet_id: str, header: Sequence[str]) -> None:
        worksheet = self.client.open_by_key(sheet_id).sheet1
        worksheet.update(range_name="A1", values=[list(header)])
