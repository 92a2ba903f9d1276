"""
Collaborator contracts — what the provisioner needs from the outside world.

The provisioner only declares steps. Transport (running a script over
SSH, syncing a directory) lives behind these interfaces and is provided
by the surrounding deployment tooling; ``core.use_cases.apply`` drives
the declared steps through them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from provisioner.core.models.action import Receipt
from provisioner.core.models.provisioner import ConnectionConfig


class RemoteExecutor(ABC):
    """Runs a script on the remote host under a POSIX shell (bash).

    Implementations must honour ``set -eu``, heredocs and NUL-delimited
    ``find``/``read`` loops. They NEVER raise: failures (including a
    non-zero exit after the backoff retries) are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The executor identifier (e.g., 'ssh')."""

    @abstractmethod
    def run(self, connection: ConnectionConfig, resource_id: str, script: str) -> Receipt:
        """Execute ``script`` and return a receipt carrying the exit status."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class RemoteCopier(ABC):
    """Pushes a local directory tree to a remote path.

    Re-syncs only when ``triggers`` differ from the last successful copy.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The copier identifier (e.g., 'scp')."""

    @abstractmethod
    def copy(
        self,
        connection: ConnectionConfig,
        resource_id: str,
        local_path: str,
        remote_path: str,
        triggers: Sequence[Any],
    ) -> Receipt:
        """Copy ``local_path`` under ``remote_path`` and return a receipt."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
