"""
Recipe Intake - Prompt Logger.

Writes LLM prompts and responses to markdown files for debugging.
Enabled via INTAKE_LOG_PROMPTS=1 or the --log-prompts CLI flag.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

LOG_PROMPTS = os.getenv("INTAKE_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")

_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled
    if enabled:
        LOG_DIR.mkdir(exist_ok=True)


def _get_session_dir() -> Path:
    """Get the directory for this run's logs."""
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    session_dir = LOG_DIR / _session_id
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def log_prompt(
    *,
    stage: str,
    model: str,
    messages: list[dict[str, Any]],
    response: Any = None,
    error: str | None = None,
) -> Path | None:
    """
    Log a prompt and response to a file.

    Args:
        stage: Which pipeline stage made the call (parser, recovery, ocr)
        model: The model used
        messages: Chat messages sent to the model
        response: Parsed response or raw text (optional)
        error: Any error that occurred (optional)

    Returns:
        Path to the log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    filepath = _get_session_dir() / f"{_call_counter:02d}_{stage}.md"

    content = f"# LLM Call: {stage}\n\n**Time:** {datetime.now().isoformat()}\n**Model:** {model}\n\n---\n"
    for message in messages:
        body = message.get("content")
        if not isinstance(body, str):
            # Vision payloads carry base64 images; keep the log readable
            body = "(multimodal content omitted)"
        content += f"\n## {message.get('role', 'user').title()}\n\n```\n{body}\n```\n"

    content += "\n---\n\n## Response\n\n"
    if error:
        content += f"**ERROR:** {error}\n"
    elif response is not None:
        if hasattr(response, "model_dump"):
            response = response.model_dump()
        if isinstance(response, str):
            content += f"```\n{response}\n```\n"
        else:
            content += f"```json\n{json.dumps(response, indent=2, default=str)}\n```\n"
    else:
        content += "(No response)\n"

    filepath.write_text(content, encoding="utf-8")
    return filepath


def get_session_log_dir() -> Path | None:
    """Get the current session's log directory, if logging is enabled."""
    if not LOG_PROMPTS:
        return None
    return _get_session_dir()


def reset_session() -> None:
    """Reset the session (for testing)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
