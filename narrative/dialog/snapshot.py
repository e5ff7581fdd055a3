"""
Legacy snapshot store.

Persists single parsed definitions under the application data cache
directory, one file per source id. Snapshots are independent of the
per-language document tree and are only read on request.

File layout:
    {"source_id": ..., "saved_at": ..., "definition": {...}, "checksum": ...}
"""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import time
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from narrative.dialog.models import DialogDefinition


class DialogSnapshotStore:
    """Reads and writes definition snapshots."""

    def __init__(self, cache_dir: Path | str, extension: str = ".ekqolt"):
        self.cache_dir = Path(cache_dir)
        self.extension = extension if extension.startswith(".") else f".{extension}"
        self.logger = logging.getLogger(__name__)

    def path_for(self, source_id: str) -> Path:
        return self.cache_dir / f"{source_id}{self.extension}"

    def exists(self, source_id: str) -> bool:
        return self.path_for(source_id).is_file()

    def save(self, source_id: str, definition: DialogDefinition) -> bool:
        """Write a snapshot. Returns False on any I/O failure."""
        payload = {
            "source_id": source_id,
            "saved_at": time.time(),
            "definition": definition.to_document(),
        }
        payload["checksum"] = self._calculate_checksum(payload)

        path = self.path_for(source_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
        except OSError as e:
            self.logger.error(f"Failed to write dialog snapshot {path}: {e}")
            return False

        self.logger.debug(f"Saved dialog snapshot {path}")
        return True

    def load(self, source_id: str) -> Optional[DialogDefinition]:
        """Read a snapshot, or None when missing, corrupt or tampered with."""
        path = self.path_for(source_id)
        if not path.is_file():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                payload = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to read dialog snapshot {path}: {e}")
            return None

        if not isinstance(payload, dict):
            self.logger.error(f"Dialog snapshot {path} is not an object")
            return None

        checksum = payload.get("checksum")
        if not checksum or not self._verify_checksum(payload, checksum):
            self.logger.error(f"Dialog snapshot corrupted: checksum mismatch in {path}")
            return None

        try:
            return DialogDefinition.model_validate(payload.get("definition"))
        except ValidationError as e:
            self.logger.error(f"Dialog snapshot {path} holds invalid data: {e}")
            return None

    def delete(self, source_id: str) -> bool:
        path = self.path_for(source_id)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            self.logger.error(f"Failed to delete dialog snapshot {path}: {e}")
            return False

    def list_source_ids(self) -> list[str]:
        if not self.cache_dir.is_dir():
            return []
        return sorted(p.stem for p in self.cache_dir.glob(f"*{self.extension}"))

    def _calculate_checksum(self, data: dict) -> str:
        body = {k: v for k, v in data.items() if k != "checksum"}
        json_str = json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        digest = hashlib.sha256(json_str.encode("utf-8")).digest()
        return base64.b64encode(digest).decode("ascii")

    def _verify_checksum(self, data: dict, expected: str) -> bool:
        return self._calculate_checksum(data) == expected
