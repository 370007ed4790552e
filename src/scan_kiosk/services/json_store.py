"""JSON document persistence for the file-backed stores."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from scan_kiosk.services.errors import StorageError

logger = logging.getLogger(__name__)


class JsonDocument:
    """An in-memory JSON object mirrored to one file after every mutation.

    All reads and writes go through ``lock``; callers mutate ``data`` and
    call ``save`` while still holding it, so the file on disk never lags
    behind an answer already handed out.
    """

    def __init__(self, path: Path, default: Callable[[], dict[str, Any]]) -> None:
        self.path = Path(path)
        self.lock = threading.Lock()
        self.data: dict[str, Any] = self._load(default)

    def _load(self, default: Callable[[], dict[str, Any]]) -> dict[str, Any]:
        if not self.path.exists():
            data = default()
            self._write(data)
            return data
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Cannot read state file {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"State file {self.path} does not hold a JSON object")
        return data

    def _write(self, data: dict[str, Any]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError as exc:
            logger.error("Failed to write %s", self.path, exc_info=True)
            raise StorageError(f"Cannot write state file {self.path}: {exc}") from exc

    def save(self) -> None:
        """Flush ``data`` to disk. Call with ``lock`` held."""
        self._write(self.data)
