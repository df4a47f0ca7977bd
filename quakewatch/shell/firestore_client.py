"""Firestore Client - Imperative Shell.

This module persists zones and settings in Google Cloud Firestore, one
document per storage key. It implements the same get/set interface as the
local JSON file store.

All I/O is contained here; zone and settings logic is elsewhere.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from google.cloud import firestore


logger = logging.getLogger(__name__)


# Default collection name for persisted keys
DEFAULT_COLLECTION = "quakewatch"


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
        collection: Firestore collection name
    """
    project_id: str | None = None
    database: str | None = None
    collection: str = DEFAULT_COLLECTION


class FirestoreStore:
    """Key-value store backed by Firestore.

    This is part of the imperative shell - it handles database I/O.

    Document structure (document ID = key):
    {
        "value": <JSON-compatible value>,
        "updated_at": <timestamp>
    }
    """

    def __init__(self, config: FirestoreConfig | None = None) -> None:
        """Initialize Firestore store.

        Args:
            config: Firestore configuration
        """
        self.config = config or FirestoreConfig()
        self._client: firestore.Client | None = None

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs = {}
            if self.config.project_id:
                kwargs['project'] = self.config.project_id
            if self.config.database:
                kwargs['database'] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def _get_doc_ref(self, key: str) -> Any:
        """Get reference to the document holding a key."""
        return (
            self.client
            .collection(self.config.collection)
            .document(key)
        )

    def get(self, key: str) -> Any | None:
        """Fetch a stored value.

        This method performs database I/O.

        Returns:
            Stored value, or None if missing or on error
        """
        logger.info("Fetching %s from Firestore", key)

        try:
            doc = self._get_doc_ref(key).get()

            if not doc.exists:
                logger.info("No stored document for %s", key)
                return None

            data = doc.to_dict() or {}
            return data.get("value")

        except Exception as e:
            logger.error("Failed to fetch %s: %s", key, str(e))
            # Start from defaults on error - won't crash
            return None

    def set(self, key: str, value: Any) -> bool:
        """Store a value, replacing the previous one.

        This method performs database I/O.

        Returns:
            True if save was successful
        """
        logger.info("Saving %s to Firestore", key)

        try:
            self._get_doc_ref(key).set({
                "value": value,
                "updated_at": datetime.now(timezone.utc),
            })

            logger.info("Successfully saved %s", key)
            return True

        except Exception as e:
            logger.error("Failed to save %s: %s", key, str(e))
            return False
