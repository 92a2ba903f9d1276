"""
Apply use case — drive the declared steps through the collaborators.

Order follows the declared dependencies: init, then every role copy,
then the run step. A failed step stops everything after it.

    init   re-runs when its script changes
    copies the copier decides from the role hash triggers
    run    re-runs when the trigger sequence changes

Recorded fingerprints live in the same TriggerState used by ``check``;
saving it is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from provisioner.adapters.base import RemoteCopier, RemoteExecutor
from provisioner.core.engine.provisioner import AnsibleProvisioner
from provisioner.core.models.action import Receipt
from provisioner.core.models.command import RemoteCommand
from provisioner.core.models.provisioner import ConnectionConfig
from provisioner.core.persistence.trigger_state import TriggerState, normalize_triggers
from provisioner.core.services.hashing import string_hash
from provisioner.core.services.triggers import triggers_changed

logger = logging.getLogger(__name__)


@dataclass
class ApplyResult:
    """Receipts of every step attempted, in execution order."""

    receipts: list[Receipt] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(r.failed for r in self.receipts)

    @property
    def failed_step(self) -> str | None:
        for r in self.receipts:
            if r.failed:
                return r.resource_id
        return None

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "failed_step": self.failed_step,
            "receipts": [r.model_dump() for r in self.receipts],
        }


def _run_if_changed(
    step: RemoteCommand,
    fingerprint: list,
    executor: RemoteExecutor,
    connection: ConnectionConfig,
    state: TriggerState,
) -> Receipt:
    if not triggers_changed(state.previous(step.resource_id), fingerprint):
        logger.info("%s unchanged, skipping", step.resource_id)
        return Receipt.skip(
            adapter=executor.name,
            resource_id=step.resource_id,
            reason="triggers unchanged",
        )

    receipt = executor.run(connection, step.resource_id, step.script())
    if receipt.ok:
        state.record(step.resource_id, fingerprint)
    else:
        logger.error("%s failed: %s", step.resource_id, receipt.error)
    return receipt


def apply_steps(
    provisioner: AnsibleProvisioner,
    connection: ConnectionConfig,
    executor: RemoteExecutor,
    copier: RemoteCopier,
    state: TriggerState,
) -> ApplyResult:
    """Execute the provisioner's steps that need to (re-)run.

    Args:
        provisioner: The composed provisioner.
        connection: Target host for every step.
        executor: Runs the init and run scripts.
        copier: Syncs the role directories.
        state: Recorded fingerprints; updated for every successful step.

    Returns:
        ApplyResult. Steps after a failure are not attempted.
    """
    result = ApplyResult()

    init = provisioner.init_command
    receipt = _run_if_changed(
        init, [string_hash(init.script())], executor, connection, state,
    )
    result.receipts.append(receipt)
    if receipt.failed:
        return result

    for copy in provisioner.roles_copies:
        receipt = copier.copy(
            connection, copy.resource_id, copy.role_path, copy.remote_path, copy.triggers,
        )
        result.receipts.append(receipt)
        if receipt.failed:
            logger.error("%s failed: %s", copy.resource_id, receipt.error)
            return result

    run = provisioner.run_command
    result.receipts.append(
        _run_if_changed(
            run, normalize_triggers(run.triggers), executor, connection, state,
        )
    )
    return result
