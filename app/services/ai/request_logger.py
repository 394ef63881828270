import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


def get_generation_log_directory(logs_dir: Path) -> Path:
    """Get or create the generation audit log directory."""
    generations_dir = Path(logs_dir) / "generations"
    generations_dir.mkdir(parents=True, exist_ok=True)
    return generations_dir


def log_generation(
    logs_dir: Path,
    enabled: bool,
    provider: str,
    model: str,
    instruction_text: str,
    user_input: str,
    model_config: Mapping[str, Any],
    duration_ms: int,
    success: bool,
    generated_text: Optional[str] = None,
    error_kind: Optional[str] = None,
    error_message: Optional[str] = None,
    prompt_id: Optional[str] = None,
    request_id: Optional[str] = None,
) -> Optional[Path]:
    """
    Record one generation attempt as a JSON file.

    Args:
        logs_dir: Base logs directory
        enabled: Operator toggle (LOG_GENERATIONS); nothing is written when False
        provider: Provider key (gemini, openrouter)
        model: Model identifier sent to the provider
        instruction_text: System instruction used
        user_input: User's topic or idea
        model_config: Model options used
        duration_ms: Time taken for the provider call
        success: Whether generation succeeded
        generated_text: Output text on success
        error_kind: Classified error on failure
        error_message: Provider error message on failure
        prompt_id: Stored prompt ID, if the named-prompt mode was used
        request_id: Request ID for tracing

    Returns:
        Path to the created log file, or None if disabled or logging failed
    """
    if not enabled:
        return None

    try:
        generations_dir = get_generation_log_directory(logs_dir)

        timestamp = datetime.now(timezone.utc)
        timestamp_str = timestamp.strftime("%Y-%m-%dT%H-%M-%S-%f")
        log_file = generations_dir / f"generation-{timestamp_str}-{uuid.uuid4().hex[:8]}.json"

        log_data: Dict[str, Any] = {
            "timestamp": timestamp.isoformat(),
            "request_id": request_id,
            "provider": provider,
            "model": model,
            "prompt_id": prompt_id,
            "request": {
                "system_prompt": instruction_text,
                "user_input": user_input,
                "model_config": dict(model_config),
            },
            "success": success,
            "duration_ms": duration_ms,
        }
        if success:
            log_data["response"] = {
                "text": generated_text,
                "character_count": len(generated_text or ""),
            }
        else:
            log_data["error"] = {
                "kind": error_kind,
                "message": error_message,
            }

        with open(log_file, 'w', encoding='utf-8') as f:
            json.dump(log_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Generation logged to: {log_file}")
        return log_file

    except Exception as e:
        logger.error(f"Failed to log generation: {e}", exc_info=True)
        return None
