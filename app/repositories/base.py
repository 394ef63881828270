"""
JSON document store backing the prompt repository.
"""
import json
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator

from filelock import FileLock, Timeout

from app.core.exceptions import StorageIOException
from app.models.domain import PromptStore

logger = logging.getLogger(__name__)

REQUIRED_RECORD_FIELDS = ("id", "name", "promptText")
OPTIONAL_RECORD_FIELDS = {"modelConfig": dict, "createdAt": str, "updatedAt": str, "isActive": bool}


class JsonDocumentStore:
    """Reads and replaces a single JSON document holding the prompt store."""

    def __init__(self, document_path: Path, lock_timeout: float = 10.0):
        """
        Initialize document store.

        Args:
            document_path: Path of the JSON document
            lock_timeout: Seconds to wait for the file lock
        """
        self.document_path = Path(document_path)
        self.lock_file = self.document_path.with_name(self.document_path.name + '.lock')
        self.lock_timeout = lock_timeout
        try:
            self.document_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOException("create", str(self.document_path.parent), str(e))
        self._lock = FileLock(str(self.lock_file), timeout=self.lock_timeout)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the document lock across several load/save calls."""
        try:
            self._lock.acquire()
        except Timeout:
            raise StorageIOException(
                "lock", str(self.lock_file), f"timed out after {self.lock_timeout}s"
            )
        except OSError as e:
            raise StorageIOException("lock", str(self.lock_file), str(e))
        try:
            yield
        finally:
            self._lock.release()

    def load(self) -> PromptStore:
        """
        Load the prompt store, creating an empty document if none exists.

        Returns:
            Current PromptStore

        Raises:
            StorageIOException: If the document is unreadable or malformed
        """
        with self.locked():
            try:
                raw = self.document_path.read_text(encoding='utf-8')
            except FileNotFoundError:
                logger.info(f"Prompt document not found, creating new: {self.document_path}")
                store = PromptStore()
                self._write(store.to_dict())
                return store
            except OSError as e:
                raise StorageIOException("read", str(self.document_path), str(e))

            try:
                data = json.loads(raw)
            except json.JSONDecodeError as e:
                raise StorageIOException("parse", str(self.document_path), str(e))

            self._validate_shape(data)
            return PromptStore.from_dict(data)

    def save(self, store: PromptStore) -> None:
        """
        Replace the document with the full serialized store.

        Raises:
            StorageIOException: If the write fails
        """
        with self.locked():
            self._write(store.to_dict())
        logger.debug(f"Saved prompt document with {len(store.prompts)} prompts")

    def _validate_shape(self, data: Any) -> None:
        if not isinstance(data, dict) or not isinstance(data.get("prompts"), list):
            raise StorageIOException(
                "parse", str(self.document_path), "expected an object with a 'prompts' list"
            )
        seen = set()
        for index, item in enumerate(data["prompts"]):
            if not isinstance(item, dict):
                raise StorageIOException(
                    "parse", str(self.document_path), f"prompt #{index} is not an object"
                )
            missing = [name for name in REQUIRED_RECORD_FIELDS if name not in item]
            if missing:
                raise StorageIOException(
                    "parse", str(self.document_path), f"prompt #{index} is missing {missing}"
                )
            wrong = [name for name in REQUIRED_RECORD_FIELDS if not isinstance(item[name], str)]
            wrong += [
                name for name, kind in OPTIONAL_RECORD_FIELDS.items()
                if item.get(name) is not None and not isinstance(item[name], kind)
            ]
            if wrong:
                raise StorageIOException(
                    "parse", str(self.document_path), f"prompt #{index} has invalid {wrong}"
                )
            if item["id"] in seen:
                raise StorageIOException(
                    "parse", str(self.document_path), f"duplicate prompt id {item['id']}"
                )
            seen.add(item["id"])

    def _write(self, data: Dict[str, Any]) -> None:
        """Write atomically via a temp file and rename."""
        temp_file = self.document_path.with_name(self.document_path.name + '.tmp')
        try:
            self.document_path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(json.dumps(data, indent=2, ensure_ascii=False))
                f.write('\n')
                f.flush()
                os.fsync(f.fileno())
            temp_file.replace(self.document_path)
        except (OSError, TypeError, ValueError) as e:
            try:
                temp_file.unlink()
            except OSError:
                pass
            raise StorageIOException("write", str(self.document_path), str(e))
