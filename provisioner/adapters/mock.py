"""
Mock collaborators — test doubles for the remote executor and copier.

They record every call and succeed by default. Individual resources
can be configured to fail.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from provisioner.adapters.base import RemoteCopier, RemoteExecutor
from provisioner.core.models.action import Receipt
from provisioner.core.models.provisioner import ConnectionConfig


@dataclass
class RecordedCall:
    resource_id: str
    connection: ConnectionConfig
    payload: dict[str, Any] = field(default_factory=dict)


class MockExecutor(RemoteExecutor):
    """Records scripts instead of running them."""

    def __init__(self, executor_name: str = "mock-executor", default_output: str = "[mock] executed"):
        self._name = executor_name
        self._default_output = default_output
        self._failures: dict[str, tuple[int, str]] = {}
        self._calls: list[RecordedCall] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def calls(self) -> list[RecordedCall]:
        return self._calls

    @property
    def call_count(self) -> int:
        return len(self._calls)

    def set_failure(self, resource_id: str, exit_status: int = 1, error: str = "Mock failure") -> None:
        """Configure a resource's script to fail with ``exit_status``."""
        self._failures[resource_id] = (exit_status, error)

    def run(self, connection: ConnectionConfig, resource_id: str, script: str) -> Receipt:
        self._calls.append(RecordedCall(resource_id, connection, {"script": script}))

        if resource_id in self._failures:
            exit_status, error = self._failures[resource_id]
            return Receipt.failure(
                adapter=self._name,
                resource_id=resource_id,
                error=error,
                exit_status=exit_status,
            )

        return Receipt.success(
            adapter=self._name,
            resource_id=resource_id,
            output=self._default_output,
        )


class MockCopier(RemoteCopier):
    """Records copies and skips those whose triggers did not change."""

    def __init__(self, copier_name: str = "mock-copier"):
        self._name = copier_name
        self._calls: list[RecordedCall] = []
        self._last_triggers: dict[str, list[Any]] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def calls(self) -> list[RecordedCall]:
        return self._calls

    def copy(
        self,
        connection: ConnectionConfig,
        resource_id: str,
        local_path: str,
        remote_path: str,
        triggers: Sequence[Any],
    ) -> Receipt:
        if self._last_triggers.get(resource_id) == list(triggers):
            return Receipt.skip(
                adapter=self._name,
                resource_id=resource_id,
                reason="triggers unchanged",
            )

        self._calls.append(RecordedCall(
            resource_id,
            connection,
            {"local_path": local_path, "remote_path": remote_path, "triggers": list(triggers)},
        ))
        self._last_triggers[resource_id] = list(triggers)
        return Receipt.success(adapter=self._name, resource_id=resource_id)
