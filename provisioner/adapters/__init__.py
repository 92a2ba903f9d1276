"""
Adapters — contracts for the remote collaborators and their test doubles.
"""

from provisioner.adapters.base import RemoteCopier, RemoteExecutor
from provisioner.adapters.mock import MockCopier, MockExecutor

__all__ = [
    "MockCopier",
    "MockExecutor",
    "RemoteCopier",
    "RemoteExecutor",
]
