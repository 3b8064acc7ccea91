"""
Config Store Repository

Process-wide persisted configuration for the form provisioner. Remembers the
provisioned form id, the response spreadsheet id and the question-id mapping
across invocations.

Backends:
- AtlasConfigStore: one document per key in a MongoDB collection
- InMemoryConfigStore: process-local dict for tests and local runs
"""

import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Optional

from pymongo import MongoClient

from src.common.error_handling import log_on_exception

logger = logging.getLogger(__name__)

# Keys used by the form provisioner
INTEREST_FORM_ID = "INTEREST_FORM_ID"
RESPONSE_SHEET_ID = "RESPONSE_SHEET_ID"
INTEREST_FORM_QUESTION_IDS = "INTEREST_FORM_QUESTION_IDS"


class ConfigStoreInterface(ABC):
    """
    Abstract key-value store surviving across invocations.

    Values are plain JSON-compatible objects (strings, dicts).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """
        Get a stored value.

        Args:
            key: Setting name (e.g., "INTEREST_FORM_ID")

        Returns:
            Stored value or None if not set
        """
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """
        Store a value, replacing any previous one. Backend failures raise.

        Returns:
            True if the stored value was written or changed
        """
        pass

    @abstractmethod
    def clear(self, key: str) -> bool:
        """
        Remove a stored value.

        Returns:
            True if a value was removed, False if it was not set

        Backend failures raise.
        """
        pass


class InMemoryConfigStore(ConfigStoreInterface):
    """Dict-backed store; contents live as long as the process."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._values: Dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> bool:
        self._values[key] = value
        return True

    def clear(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


class AtlasConfigStore(ConfigStoreInterface):
    """
    MongoDB implementation of the config store.

    Each key is a document {_id: key, value: ..., updated_at: ...}.
    """

    _client: Optional[MongoClient] = None

    def __init__(
        self,
        mongodb_uri: Optional[str] = None,
        database: str = "faculty_roles",
        collection: str = "system_state",
    ):
        """
        Initialize the store.

        Args:
            mongodb_uri: MongoDB connection string (defaults to MONGODB_URI env var)
            database: Database name
            collection: Collection name
        """
        self._mongodb_uri = mongodb_uri or os.getenv("MONGODB_URI")
        self._database = database
        self._collection_name = collection

        if not self._mongodb_uri:
            raise ValueError("MongoDB URI is required")

    def _get_client(self) -> MongoClient:
        """Get or create the MongoDB client (singleton)."""
        if AtlasConfigStore._client is None:
            AtlasConfigStore._client = MongoClient(self._mongodb_uri)
            logger.info("Created new MongoDB client for config store")
        return AtlasConfigStore._client

    def _get_collection(self):
        client = self._get_client()
        return client[self._database][self._collection_name]

    @classmethod
    def reset_connection(cls) -> None:
        """Reset the MongoDB client connection."""
        if cls._client is not None:
            cls._client.close()
            cls._client = None
            logger.info("Config store connection reset")

    def get(self, key: str) -> Optional[Any]:
        with log_on_exception(logger, f"config store read {key}"):
            doc = self._get_collection().find_one({"_id": key})
        if not doc:
            return None
        return doc.get("value")

    def set(self, key: str, value: Any) -> bool:
        with log_on_exception(logger, f"config store write {key}", level=logging.ERROR):
            result = self._get_collection().update_one(
                {"_id": key},
                {"$set": {"value": value, "updated_at": datetime.utcnow()}},
                upsert=True,
            )
        return result.modified_count > 0 or result.upserted_id is not None

    def clear(self, key: str) -> bool:
        with log_on_exception(logger, f"config store clear {key}", level=logging.ERROR):
            result = self._get_collection().delete_one({"_id": key})
        return result.deleted_count > 0


# Singleton instance
_config_store_instance: Optional[ConfigStoreInterface] = None


def get_config_store(backend: Optional[str] = None) -> ConfigStoreInterface:
    """
    Get the config store instance (singleton).

    Args:
        backend: "mongodb" or "memory" (defaults to CONFIG_STORE_BACKEND)

    Returns:
        ConfigStoreInterface implementation
    """
    global _config_store_instance

    if _config_store_instance is None:
        from src.common.config import Config

        backend = (backend or Config.CONFIG_STORE_BACKEND).lower()
        if backend == "memory":
            _config_store_instance = InMemoryConfigStore()
            logger.warning("Using in-memory config store; form ids will not survive a restart")
        else:
            _config_store_instance = AtlasConfigStore(
                mongodb_uri=Config.MONGODB_URI,
                database=Config.MONGODB_DATABASE,
            )
            logger.info("Initialized MongoDB config store")

    return _config_store_instance


def reset_config_store() -> None:
    """Reset the store singleton."""
    global _config_store_instance

    if isinstance(_config_store_instance, AtlasConfigStore):
        AtlasConfigStore.reset_connection()

    _config_store_instance = None
