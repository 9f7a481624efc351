"""Firestore connection for store_backend=firestore.

Credentials come from FIREBASE_SERVICE_ACCOUNT_KEY (the JSON itself) or
FIREBASE_SERVICE_ACCOUNT_PATH (a file); the key wins when both are set.
The returned client is owned by the RecordStore, which closes it on shutdown.
"""

import json
import logging
from pathlib import Path
from typing import Any

from apa.core.config import Settings
from apa.domain.exceptions import ConfigurationException
from apa.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
)

logger = logging.getLogger(__name__)


def load_service_account(settings: Settings) -> dict[str, Any]:
    """Return the service account mapping.

    Raises:
        ConfigurationException: no credentials configured, unreadable file or bad JSON.
    """
    key = settings.firebase_service_account_key
    if key is not None and key.get_secret_value():
        source, text = "FIREBASE_SERVICE_ACCOUNT_KEY", key.get_secret_value()
    elif settings.firebase_service_account_path:
        location = Path(settings.firebase_service_account_path).expanduser().resolve()
        if not location.is_file():
            raise ConfigurationException(
                "Service account file not found",
                {"firebase_service_account_path": str(location)},
            )
        source, text = str(location), location.read_text(encoding="utf-8")
    else:
        raise ConfigurationException(
            "No Firebase service account configured",
            {"store_backend": "firestore"},
        )
    try:
        account = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationException(
            "Service account is not valid JSON", {"source": source}
        ) from e
    if not isinstance(account, dict):
        raise ConfigurationException("Service account must be a JSON object", {"source": source})
    return account


def connect_firestore(settings: Settings) -> FirestoreRESTClient:
    """Build the REST client for the service account's project.

    FIREBASE_PROJECT_ID is used when the account JSON has no project_id.
    """
    account = load_service_account(settings)
    project_id = account.get("project_id") or settings.firebase_project_id
    if not project_id:
        raise ConfigurationException(
            "Firebase project id missing from service account and settings",
            {"firebase_project_id": ""},
        )
    try:
        credentials = _get_credentials(account)
    except (KeyError, ValueError) as e:
        raise ConfigurationException(
            "Service account credentials are incomplete", {"project_id": project_id}
        ) from e
    logger.info("Firestore client ready for project %s", project_id)
    return FirestoreRESTClient(project_id, credentials)
