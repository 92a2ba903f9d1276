"""
Role file collection — which files the role copies put on the remote host.

Keys are relative to the *parent* of each role root, which is how the
role directory lands under the remote path: ``roles/common`` copied to
``/var/ansible`` becomes ``/var/ansible/common``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePath

from provisioner.core.models.role import RoleFile
from provisioner.core.services.hashing import walk_entries

logger = logging.getLogger(__name__)


def gather_roles_files(role_paths: Iterable[str | os.PathLike]) -> dict[str, RoleFile]:
    """Collect the regular files and symlinks of every role directory.

    Later role paths overwrite keys from earlier ones.

    Raises:
        FileNotFoundError: If a role directory does not exist.
    """
    files: dict[str, RoleFile] = {}

    for role_path in role_paths:
        root = os.path.normpath(os.path.abspath(role_path))
        parent = os.path.dirname(root)

        for entry in walk_entries(root):
            if entry.is_symlink():
                kind = "symlink"
            elif entry.is_file(follow_symlinks=False):
                kind = "file"
            else:
                continue

            key = PurePath(os.path.relpath(entry.path, parent)).as_posix()
            if key in files:
                logger.debug("Role file '%s' from %s overrides %s", key, root, files[key].source)
            files[key] = RoleFile(key=key, source=Path(entry.path), kind=kind)

    logger.debug("Collected %d role files", len(files))
    return files
