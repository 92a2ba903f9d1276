"""
Check use case — does the run step need to re-run?

Builds the provisioner from configuration, composes the current
triggers and compares them with the recorded ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from provisioner.core.config.loader import ConfigError, config_root, find_config_file, load_config
from provisioner.core.engine.provisioner import AnsibleProvisioner
from provisioner.core.persistence.trigger_state import (
    default_state_path,
    load_trigger_state,
    normalize_triggers,
    save_trigger_state,
)
from provisioner.core.services.triggers import triggers_changed

logger = logging.getLogger(__name__)


@dataclass
class CheckResult:
    """Result of comparing current and recorded triggers."""

    resource_id: str = ""
    changed: bool = False
    recorded: bool = False
    state_path: Path | None = None
    changed_positions: list[int] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "resource_id": self.resource_id,
            "changed": self.changed,
            "recorded": self.recorded,
            "state_path": str(self.state_path) if self.state_path else None,
            "changed_positions": self.changed_positions,
            "error": self.error,
        }


def _diff_positions(previous: list | None, current: list) -> list[int]:
    if previous is None:
        return list(range(len(current)))
    length = max(len(previous), len(current))
    return [
        i for i in range(length)
        if i >= len(previous) or i >= len(current) or previous[i] != current[i]
    ]


def check_triggers(
    config_path: Path | None = None,
    state_path: Path | None = None,
    record: bool = False,
    force: bool = False,
) -> CheckResult:
    """Compare the current run triggers with the recorded sequence.

    Args:
        config_path: Optional explicit path to provisioner.yml.
        state_path: Trigger state file (default: .state/triggers.json next to the config).
        record: Store the current triggers after comparing.
        force: Add the timestamp token (always reports a change).

    Returns:
        CheckResult. ``error`` is set when the configuration or the
        role files cannot be read.
    """
    result = CheckResult()

    if config_path is None:
        config_path = find_config_file()

    try:
        config = load_config(config_path)
    except ConfigError as e:
        result.error = str(e)
        return result

    if state_path is None:
        state_path = default_state_path(config_root(config_path))
    result.state_path = state_path

    try:
        provisioner = AnsibleProvisioner(config.id, config, force=force)
    except OSError as e:
        result.error = f"Cannot read role files: {e}"
        return result

    resource_id = provisioner.run_command.resource_id
    result.resource_id = resource_id

    state = load_trigger_state(state_path)
    previous = state.previous(resource_id)
    current = normalize_triggers(provisioner.triggers)

    result.changed = triggers_changed(previous, current)
    if result.changed:
        result.changed_positions = _diff_positions(previous, current)
        logger.info("Triggers for %s changed at %s", resource_id, result.changed_positions)

    if record:
        state.record(resource_id, current)
        save_trigger_state(state, state_path)
        result.recorded = True

    return result
