# -*- coding: utf-8 -*-
"""Credentials — lookup of the Gemini API key.

Stores are passed explicitly to whoever needs a secret; nothing here keeps
process-wide state besides what ``EnvCredentialStore`` reads from ``os.environ``.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional, Protocol

GEMINI_API_KEY = "GEMINI_API_KEY"

logger = logging.getLogger(__name__)


class CredentialStore(Protocol):
    def get_secret(self, name: str) -> Optional[str]: ...

    def set_secret(self, name: str, value: str) -> None: ...


class EnvCredentialStore:
    """Reads secrets from environment variables."""

    def get_secret(self, name: str) -> Optional[str]:
        value = (os.environ.get(name) or "").strip()
        return value or None

    def set_secret(self, name: str, value: str) -> None:
        os.environ[name] = value


class FileCredentialStore:
    """JSON object on disk, readable only by the owner."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("credential file %s unreadable: %s", self.path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("credential file %s is not a JSON object", self.path)
            return {}
        return {str(k): v for k, v in raw.items() if isinstance(v, str)}

    def get_secret(self, name: str) -> Optional[str]:
        value = self._load().get(name, "").strip()
        return value or None

    def set_secret(self, name: str, value: str) -> None:
        data = self._load()
        data[name] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2)
        os.chmod(self.path, 0o600)


class ChainedCredentialStore:
    """First store with a non-empty value wins; writes go to the first store."""

    def __init__(self, *stores: CredentialStore) -> None:
        if not stores:
            raise ValueError("ChainedCredentialStore needs at least one store")
        self.stores = stores

    def get_secret(self, name: str) -> Optional[str]:
        for store in self.stores:
            value = store.get_secret(name)
            if value:
                return value
        return None

    def set_secret(self, name: str, value: str) -> None:
        self.stores[0].set_secret(name, value)
