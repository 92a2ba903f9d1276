"""
Role models — local role files and their copies to the remote host.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict


class RoleFile(BaseModel):
    """A file (or symlink) inside a role directory.

    ``key`` is the POSIX path relative to the parent of the role root,
    e.g. ``common/tasks/main.yml`` for ``roles/common/tasks/main.yml``.
    """

    model_config = ConfigDict(frozen=True)

    key: str
    source: Path
    kind: Literal["file", "symlink"] = "file"


@dataclass
class RoleCopy:
    """A declared copy of one role directory onto the remote host.

    The external copier re-syncs only when ``triggers`` change.
    """

    resource_id: str
    role_path: str
    remote_path: str
    hash: str
    depends_on: list[str] = field(default_factory=list)

    @property
    def triggers(self) -> list[str]:
        return [self.hash]

    @property
    def token(self) -> str:
        """Trigger token for the run step."""
        return f"{self.resource_id}:{self.hash}"

    def to_dict(self) -> dict:
        return {
            "resource_id": self.resource_id,
            "role_path": self.role_path,
            "remote_path": self.remote_path,
            "hash": self.hash,
            "triggers": self.triggers,
            "depends_on": list(self.depends_on),
        }
