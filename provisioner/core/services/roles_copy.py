"""
Role copies — one declared directory sync per configured role path.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from provisioner.core.models.role import RoleCopy
from provisioner.core.services.hashing import directory_hash

logger = logging.getLogger(__name__)


def make_roles_copies(
    provision_id: str,
    role_paths: Sequence[str] | None,
    remote_path: str,
    depends_on: Sequence[str] = (),
) -> list[RoleCopy]:
    """Declare a copy for each role path, in input order.

    The content hash of the whole role directory is the copy's trigger.
    """
    if not role_paths:
        return []

    copies: list[RoleCopy] = []
    for index, role_path in enumerate(role_paths):
        resource_id = f"{provision_id}-roles-copy-{index}"
        copy = RoleCopy(
            resource_id=resource_id,
            role_path=str(role_path),
            remote_path=remote_path,
            hash=directory_hash(role_path),
            depends_on=list(depends_on),
        )
        logger.info("Declared %s for %s (%s)", resource_id, role_path, copy.hash[:12])
        copies.append(copy)
    return copies
