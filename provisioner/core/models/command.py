"""
Remote command declarations — what the dependency engine executes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from provisioner.core.models.sensitive import Sensitive, redact


@dataclass
class RemoteCommand:
    """A script to run on the remote host, with its re-run triggers.

    ``resource_id`` is the command's identity; ``create`` is the script
    text, secret when anything embedded in it is.
    """

    resource_id: str
    create: str | Sensitive
    triggers: list[Any] = field(default_factory=list)
    depends_on: list[str] = field(default_factory=list)

    @property
    def is_secret(self) -> bool:
        return isinstance(self.create, Sensitive)

    def script(self) -> str:
        """The raw script text, for handing to the executor."""
        if isinstance(self.create, Sensitive):
            return self.create.reveal()
        return self.create

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "create": redact(self.create),
            "triggers": redact(self.triggers),
            "depends_on": list(self.depends_on),
        }
