"""
Provisioner model — everything needed to provision one remote host.

Loaded from provisioner.yml, this declares what Ansible should run,
which local role directories get shipped, and where on the remote
host the playbook lives.
"""

from __future__ import annotations

import posixpath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from provisioner.core.models.sensitive import Sensitive

DEFAULT_REMOTE_PATH = "/var/ansible"


class ConnectionConfig(BaseModel):
    """How the external transport reaches the remote host."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    host: str
    user: str = "root"
    port: int = 22
    private_key: str | Sensitive | None = None
    password: str | Sensitive | None = None


class ProvisionerConfig(BaseModel):
    """Root provisioning configuration.

    Role and task records are open-ended mappings: Ansible accepts
    arbitrary per-role variables, so no fixed schema is imposed here.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = "main"
    connection: ConnectionConfig | None = None
    remote_path: str = DEFAULT_REMOTE_PATH

    role_paths: list[str] = Field(default_factory=list)
    clean: bool = True
    ansible_install_command: str | Sensitive | None = None

    requirements: Any = None
    roles: list[Any] | Sensitive | None = None
    pre_tasks: list[Any] | Sensitive | None = None
    post_tasks: list[Any] | Sensitive | None = None
    tasks: list[Any] | Sensitive | None = None
    vars: dict[str, Any] | Sensitive | None = None

    triggers: list[Any] | None = None
    revision: str | None = None  # bump to force a re-run on next evaluation

    @field_validator("remote_path")
    @classmethod
    def normalize_remote_path(cls, v: str) -> str:
        """Strip trailing and doubled slashes so keep paths match `find` output."""
        return posixpath.normpath(v)
