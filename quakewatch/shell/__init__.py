"""Imperative Shell - I/O and side effects.

This module contains all code that interacts with external systems:
- USGS feed client (HTTP)
- Gemini client (HTTP)
- Key-value storage (JSON file, Firestore)
- Audio and speech output (sound card, TTS engine)
- Configuration loading (environment/files/Secret Manager)

Keep this layer thin and simple. All business logic should be in core.
"""

from quakewatch.shell.usgs_client import USGSClient
from quakewatch.shell.gemini_client import GeminiClient
from quakewatch.shell.storage import JsonFileStore, Repository
from quakewatch.shell.firestore_client import FirestoreStore
from quakewatch.shell.config_loader import load_config

__all__ = [
    "USGSClient",
    "GeminiClient",
    "JsonFileStore",
    "Repository",
    "FirestoreStore",
    "load_config",
]
