"""
Domain models for business logic.
These are internal representations separate from API schemas; their
``to_dict`` output is the persisted (camelCase) document format.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, Any, List

# X's post-length ceiling. Generation reports it and never truncates.
X_POST_CHARACTER_LIMIT = 280


class ProviderErrorKind(Enum):
    """Classification of a failed provider call."""
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    CONTENT_POLICY = "content_policy"
    UPSTREAM = "upstream"


def format_timestamp(moment: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp produced by ``format_timestamp``."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def utc_now_iso() -> str:
    """Current time in the persisted timestamp format."""
    return format_timestamp(datetime.now(timezone.utc))


def next_timestamp(previous: Optional[str]) -> str:
    """
    Current time, bumped past ``previous`` when the clock has not advanced
    a full millisecond since then.
    """
    now = datetime.now(timezone.utc)
    if previous:
        try:
            floor = parse_timestamp(previous) + timedelta(milliseconds=1)
        except ValueError:
            floor = None
        if floor is not None and now < floor:
            now = floor
    return format_timestamp(now)


@dataclass
class PromptRecord:
    """A stored, named system prompt with its model configuration."""
    id: str
    name: str
    prompt_text: str
    model_config: Dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the persisted dictionary form."""
        return {
            "id": self.id,
            "name": self.name,
            "promptText": self.prompt_text,
            "modelConfig": dict(self.model_config),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "isActive": self.is_active
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PromptRecord':
        """Create from the persisted dictionary form."""
        return cls(
            id=data["id"],
            name=data["name"],
            prompt_text=data["promptText"],
            model_config=dict(data.get("modelConfig") or {}),
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
            is_active=data.get("isActive") is not False
        )


@dataclass
class PromptStore:
    """The persisted aggregate: prompts in insertion order."""
    prompts: List[PromptRecord] = field(default_factory=list)

    def find(self, prompt_id: str) -> Optional[PromptRecord]:
        for prompt in self.prompts:
            if prompt.id == prompt_id:
                return prompt
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {"prompts": [prompt.to_dict() for prompt in self.prompts]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PromptStore':
        return cls(prompts=[PromptRecord.from_dict(item) for item in data.get("prompts", [])])


@dataclass
class GenerationResult:
    """Outcome of a successful generation."""
    text: str
    character_count: int
    exceeds_limit: bool
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_text(cls, text: str, metadata: Dict[str, Any]) -> 'GenerationResult':
        character_count = len(text)
        return cls(
            text=text,
            character_count=character_count,
            exceeds_limit=character_count > X_POST_CHARACTER_LIMIT,
            metadata={**metadata, "characterCount": character_count}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "characterCount": self.character_count,
            "exceedsLimit": self.exceeds_limit,
            "metadata": self.metadata
        }
