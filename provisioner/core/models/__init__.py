"""
Domain models for the provisioner.

All models are re-exported here for convenient access:

    from provisioner.core.models import ProvisionerConfig, Receipt, RoleCopy, Sensitive
"""

from provisioner.core.models.action import Receipt
from provisioner.core.models.command import RemoteCommand
from provisioner.core.models.provisioner import (
    DEFAULT_REMOTE_PATH,
    ConnectionConfig,
    ProvisionerConfig,
)
from provisioner.core.models.role import RoleCopy, RoleFile
from provisioner.core.models.sensitive import Sensitive, is_sensitive, redact, reveal

__all__ = [
    # provisioner.py
    "ConnectionConfig",
    "DEFAULT_REMOTE_PATH",
    "ProvisionerConfig",
    # action.py
    "Receipt",
    # command.py
    "RemoteCommand",
    # role.py
    "RoleCopy",
    "RoleFile",
    # sensitive.py
    "Sensitive",
    "is_sensitive",
    "redact",
    "reveal",
]
