"""
Trigger composition — the fingerprint that decides whether the run step re-runs.

The dependency engine compares the previous and current token sequences
by value and order; any difference re-runs the playbook. Changing the
composition order below therefore re-runs every host once.

Secret values never appear raw in a token. They are replaced by
``<label>-secret:<sha256>`` so changes are still detected.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from provisioner.core.models.command import RemoteCommand
from provisioner.core.models.role import RoleCopy
from provisioner.core.models.sensitive import is_sensitive, reveal
from provisioner.core.services.hashing import string_hash

logger = logging.getLogger(__name__)


def secret_token(label: str, value: Any) -> str:
    """Hash-tagged stand-in for a secret value."""
    raw = reveal(value)
    if not isinstance(raw, str):
        raw = json.dumps(raw, separators=(",", ":"), ensure_ascii=False, default=str)
    return f"{label}-secret:{string_hash(raw)}"


def make_triggers(
    remote_path: str,
    playbook: Any,
    init_command: RemoteCommand,
    roles_copies: Sequence[RoleCopy] = (),
    input_triggers: Sequence[Any] | None = None,
    requirements: Any = None,
    revision: str | None = None,
    force: bool = False,
    now: datetime | None = None,
) -> list[Any]:
    """Compose the ordered trigger tokens for the run step.

    Args:
        remote_path: Remote directory holding the playbook.
        playbook: The playbook document (possibly containing secrets).
        init_command: The declared init step; its identity and script feed the triggers.
        roles_copies: Declared role copies, in input order.
        input_triggers: Caller-supplied tokens, passed through verbatim.
        requirements: The Galaxy requirements value, if any.
        revision: Explicit version stamp; bumping it forces a re-run.
        force: Add a timestamp token so the run step always re-runs.
        now: Clock override for the timestamp token.

    Returns:
        The token sequence.
    """
    triggers: list[Any] = []

    if input_triggers:
        triggers.extend(
            secret_token("trigger", t) if is_sensitive(t) else t
            for t in input_triggers
        )

    triggers.append(f"remote-path:{remote_path}")

    if requirements:
        if is_sensitive(requirements):
            triggers.append(secret_token("requirements", requirements))
        else:
            triggers.append(requirements)

    if is_sensitive(playbook):
        triggers.append(secret_token("playbook", playbook))
    else:
        triggers.append(playbook)

    triggers.append(f"init-id:{init_command.resource_id}")
    if init_command.is_secret:
        triggers.append(secret_token("init-cmd", init_command.create))
    else:
        triggers.append(init_command.create)

    for copy in roles_copies:
        triggers.append(copy.token)

    if revision:
        triggers.append(f"revision:{revision}")

    if force:
        stamp = (now or datetime.now(UTC)).isoformat()
        logger.info("Forcing re-run with timestamp token %s", stamp)
        triggers.append(f"forced-at:{stamp}")

    logger.debug("Composed %d trigger tokens", len(triggers))
    return triggers


def triggers_changed(previous: Sequence[Any] | None, current: Sequence[Any]) -> bool:
    """Whether the run step must re-run (order-sensitive comparison)."""
    if previous is None:
        return True
    return list(previous) != list(current)
