"""
Trigger state persistence — the last recorded trigger sequence per run step.

State is stored as JSON in .state/triggers.json next to the config.
Writes are atomic (write to temp file, then rename) to prevent
corruption if the process crashes mid-write.

Secret values are already hashed by the trigger composer, so nothing
recorded here is sensitive.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_STATE_DIR = ".state"
DEFAULT_STATE_FILE = "triggers.json"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class TriggerRecord(BaseModel):
    """The trigger sequence recorded for one run step."""

    triggers: list[Any] = Field(default_factory=list)
    recorded_at: str = Field(default_factory=_now_iso)


class TriggerState(BaseModel):
    """All recorded trigger sequences, keyed by run resource id."""

    schema_version: int = 1
    records: dict[str, TriggerRecord] = Field(default_factory=dict)

    def previous(self, resource_id: str) -> list[Any] | None:
        record = self.records.get(resource_id)
        return record.triggers if record else None

    def record(self, resource_id: str, triggers: list[Any]) -> None:
        self.records[resource_id] = TriggerRecord(triggers=normalize_triggers(triggers))


def normalize_triggers(triggers: list[Any]) -> list[Any]:
    """The JSON form of a trigger sequence, as it will be stored."""
    return json.loads(json.dumps(triggers, ensure_ascii=False, default=str))


def default_state_path(config_dir: Path) -> Path:
    """Get the default trigger state path for a config directory."""
    return config_dir / DEFAULT_STATE_DIR / DEFAULT_STATE_FILE


def load_trigger_state(path: Path) -> TriggerState:
    """Load trigger state from a JSON file.

    Returns:
        TriggerState. If the file is missing or corrupt, a fresh state.
    """
    if not path.is_file():
        logger.info("No trigger state at %s, starting fresh", path)
        return TriggerState()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        state = TriggerState.model_validate(data)
        logger.debug("Loaded trigger state from %s (%d records)", path, len(state.records))
        return state
    except json.JSONDecodeError as e:
        logger.warning("Corrupt trigger state %s: %s, starting fresh", path, e)
        return TriggerState()
    except Exception as e:
        logger.warning("Cannot load trigger state from %s: %s, starting fresh", path, e)
        return TriggerState()


def save_trigger_state(state: TriggerState, path: Path) -> None:
    """Save trigger state to a JSON file (atomic write)."""
    path.parent.mkdir(parents=True, exist_ok=True)

    content = json.dumps(state.model_dump(mode="json"), indent=2, ensure_ascii=False) + "\n"

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".triggers_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.replace(path)
            logger.debug("Trigger state saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save trigger state to %s: %s", path, e)
        raise
