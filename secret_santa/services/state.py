"""JSON Schema validation and file I/O for persisted group state."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Union

from jsonschema import Draft202012Validator
from loguru import logger

from secret_santa.services.errors import StateValidationError

_COUNT = {"type": "integer", "minimum": 0}

RECIPIENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["name", "weight", "frequency"],
    "properties": {
        "name": {"type": "string"},
        "weight": _COUNT,
        "frequency": _COUNT,
    },
}

STATS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "meanRecipientWeight": _COUNT,
        "previousRecipient": {"type": "string"},
        "recipientRepeatFrequency": _COUNT,
        "recipients": {"type": "array", "items": RECIPIENT_SCHEMA},
    },
}

STATE_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "array",
    "items": {
        "type": "object",
        "required": ["name"],
        "properties": {
            "name": {"type": "string"},
            "stats": STATS_SCHEMA,
        },
    },
}

_validator = Draft202012Validator(STATE_SCHEMA)


def validate_state(state: Any) -> None:
    errors = sorted(_validator.iter_errors(state), key=lambda e: e.json_path)
    if errors:
        messages = "; ".join(f"{error.json_path}: {error.message}" for error in errors)
        raise StateValidationError(f"Invalid Secret Santa state: {messages}")


def load_state(path: Union[str, Path]) -> List[Dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        logger.info("No state at {path}, starting fresh", path=path)
        return []
    try:
        state = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StateValidationError(f"State file {path} is not valid JSON: {exc}") from exc
    validate_state(state)
    logger.debug("Loaded state for {count} participants from {path}", count=len(state), path=path)
    return state


def save_state(path: Union[str, Path], state: List[Dict[str, Any]]) -> None:
    validate_state(state)
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(state, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.debug("Saved state for {count} participants to {path}", count=len(state), path=path)
