"""
Repository layer for persisted dashboard state.

Public API:
- get_config_store(): Factory to get the config store instance
- ConfigStoreInterface: Abstract get/set/clear interface
- InMemoryConfigStore / AtlasConfigStore: implementations

Usage:
    from src.common.repositories import get_config_store, INTEREST_FORM_ID

    store = get_config_store()
    form_id = store.get(INTEREST_FORM_ID)
"""

from .config_store import (
    INTEREST_FORM_ID,
    INTEREST_FORM_QUESTION_IDS,
    RESPONSE_SHEET_ID,
    AtlasConfigStore,
    ConfigStoreInterface,
    InMemoryConfigStore,
    get_config_store,
    reset_config_store,
)

__all__ = [
    "get_config_store",
    "reset_config_store",
    "ConfigStoreInterface",
    "InMemoryConfigStore",
    "AtlasConfigStore",
    "INTEREST_FORM_ID",
    "RESPONSE_SHEET_ID",
    "INTEREST_FORM_QUESTION_IDS",
]
