"""
Repository for managing system prompt persistence.
"""
import logging
import threading
import uuid
from typing import Any, Dict, List, Mapping, Optional

from app.core.exceptions import (
    LastPromptException,
    PromptNotFoundException,
    ValidationException,
)
from app.models.domain import PromptRecord, next_timestamp, utc_now_iso
from app.repositories.base import JsonDocumentStore

logger = logging.getLogger(__name__)

DEFAULT_MODEL_CONFIG = {
    "temperature": 0.7,
    "maxOutputTokens": 500,
    "topP": 0.95,
    "topK": 40,
}


def _require_text(value: Any, field: str, label: str) -> str:
    """Return ``value`` trimmed, or raise if it is missing or blank."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationException(f"{label} is required and cannot be empty", field=field)
    return value.strip()


class PromptRepository:
    """CRUD over the prompt store with validation and the non-empty invariant."""

    def __init__(self, store: JsonDocumentStore, default_model_config: Optional[Mapping[str, Any]] = None):
        """
        Initialize prompt repository.

        Args:
            store: Backing JSON document store
            default_model_config: Values applied for omitted model options
        """
        self.store = store
        self.default_model_config = dict(default_model_config or DEFAULT_MODEL_CONFIG)
        # Single writer per process; the store's file lock covers other processes.
        self._write_lock = threading.RLock()

    def list_all(self) -> List[PromptRecord]:
        """Get all prompts in insertion order."""
        return list(self.store.load().prompts)

    def get_by_id(self, prompt_id: str) -> Optional[PromptRecord]:
        """
        Get a specific prompt by its ID.

        Returns:
            PromptRecord or None if not found
        """
        return self.store.load().find(prompt_id)

    def require(self, prompt_id: str) -> PromptRecord:
        """Get a prompt by ID or raise PromptNotFoundException."""
        prompt = self.get_by_id(prompt_id)
        if prompt is None:
            raise PromptNotFoundException(prompt_id)
        return prompt

    def create(
        self,
        name: str,
        prompt_text: str,
        model_config: Optional[Mapping[str, Any]] = None
    ) -> PromptRecord:
        """
        Create a prompt and append it to the store.

        Args:
            name: Display name (trimmed, must not be blank)
            prompt_text: Instruction text (trimmed, must not be blank)
            model_config: Model options; omitted options take defaults

        Returns:
            The created PromptRecord

        Raises:
            ValidationException: If name or prompt text is blank
        """
        name = _require_text(name, "name", "Prompt name")
        prompt_text = _require_text(prompt_text, "promptText", "Prompt text")

        config = dict(self.default_model_config)
        config.update(model_config or {})

        now = utc_now_iso()
        prompt = PromptRecord(
            id=str(uuid.uuid4()),
            name=name,
            prompt_text=prompt_text,
            model_config=config,
            created_at=now,
            updated_at=now,
            is_active=True
        )

        with self._write_lock, self.store.locked():
            store = self.store.load()
            store.prompts.append(prompt)
            self.store.save(store)

        logger.info(f"Created prompt {prompt.id} ({prompt.name!r})")
        return prompt

    def update(
        self,
        prompt_id: str,
        name: Optional[str] = None,
        prompt_text: Optional[str] = None,
        model_config: Optional[Mapping[str, Any]] = None,
        is_active: Optional[bool] = None
    ) -> PromptRecord:
        """
        Update the supplied fields of a prompt.

        ``model_config`` is shallow-merged into the existing configuration.
        Fields passed as None are left unchanged.

        Raises:
            PromptNotFoundException: If the prompt does not exist
            ValidationException: If a supplied name or prompt text is blank
        """
        changes: Dict[str, Any] = {}
        if name is not None:
            changes["name"] = _require_text(name, "name", "Prompt name")
        if prompt_text is not None:
            changes["prompt_text"] = _require_text(prompt_text, "promptText", "Prompt text")

        with self._write_lock, self.store.locked():
            store = self.store.load()
            prompt = store.find(prompt_id)
            if prompt is None:
                raise PromptNotFoundException(prompt_id)

            for attr, value in changes.items():
                setattr(prompt, attr, value)
            if model_config is not None:
                prompt.model_config = {**prompt.model_config, **model_config}
            if is_active is not None:
                prompt.is_active = bool(is_active)
            prompt.updated_at = next_timestamp(prompt.updated_at)

            self.store.save(store)

        logger.info(f"Updated prompt {prompt_id}")
        return prompt

    def delete(self, prompt_id: str) -> bool:
        """
        Delete a prompt.

        Raises:
            PromptNotFoundException: If the prompt does not exist
            LastPromptException: If it is the only prompt left
        """
        with self._write_lock, self.store.locked():
            store = self.store.load()
            if store.find(prompt_id) is None:
                raise PromptNotFoundException(prompt_id)
            if len(store.prompts) <= 1:
                raise LastPromptException(prompt_id)

            store.prompts = [p for p in store.prompts if p.id != prompt_id]
            self.store.save(store)

        logger.info(f"Deleted prompt {prompt_id}")
        return True

    def count(self) -> int:
        return len(self.store.load().prompts)
