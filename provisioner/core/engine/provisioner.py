"""
Provisioner — composes everything one host needs into declared steps.

Nothing is executed here. The provisioner declares:

    init command   (<id>-init)          create remote dir, install Ansible,
                                        clean stale files, write requirements + playbook
    role copies    (<id>-roles-copy-N)  one directory sync per role path, after init
    run command    (<id>-run)           galaxy install + ansible-playbook, re-run on trigger change

The external dependency engine decides when each step runs.
"""

from __future__ import annotations

import logging
from typing import Any

from provisioner.core.models.command import RemoteCommand
from provisioner.core.models.provisioner import ProvisionerConfig
from provisioner.core.models.role import RoleCopy
from provisioner.core.models.sensitive import Sensitive, redact
from provisioner.core.services.commands import (
    BASH_BACKOFF_RETRY_FUNCTION,
    build_clean_command,
    build_file_write_command,
    build_remote_path_init_command,
    build_run_command,
    concat_commands,
)
from provisioner.core.services.playbook import make_playbook_output, to_yaml
from provisioner.core.services.role_files import gather_roles_files
from provisioner.core.services.roles_copy import make_roles_copies
from provisioner.core.services.triggers import make_triggers

logger = logging.getLogger(__name__)

REQUIREMENTS_FILE = "requirements.yml"


def _write_command(path: str, contents: str | Sensitive) -> str | Sensitive:
    if isinstance(contents, Sensitive):
        return contents.map(lambda text: build_file_write_command(path, text))
    return build_file_write_command(path, contents)


class AnsibleProvisioner:
    """Declared provisioning steps for one remote host.

    Args:
        provision_id: Name prefix of every declared step; also names
            the playbook file (``<id>.yml``).
        config: Validated provisioning configuration.
        force: Add a timestamp trigger so the run step re-runs.
    """

    def __init__(self, provision_id: str, config: ProvisionerConfig, force: bool = False):
        self.id = provision_id
        self.config = config
        self.remote_path = config.remote_path

        self.playbook = make_playbook_output(
            roles=config.roles,
            pre_tasks=config.pre_tasks,
            post_tasks=config.post_tasks,
            tasks=config.tasks,
            vars=config.vars,
        )
        self.playbook_yaml = to_yaml(self.playbook)
        self.requirements_yaml = (
            to_yaml(config.requirements) if config.requirements is not None else None
        )

        self.init_command = RemoteCommand(
            resource_id=f"{provision_id}-init",
            create=concat_commands(self._init_fragments()),
        )

        self.roles_copies: list[RoleCopy] = make_roles_copies(
            provision_id,
            config.role_paths,
            self.remote_path,
            depends_on=[self.init_command.resource_id],
        )

        self.triggers = make_triggers(
            remote_path=self.remote_path,
            playbook=self.playbook,
            init_command=self.init_command,
            roles_copies=self.roles_copies,
            input_triggers=config.triggers,
            requirements=config.requirements,
            revision=config.revision,
            force=force,
        )

        self.run_command = RemoteCommand(
            resource_id=f"{provision_id}-run",
            create=build_run_command(self.remote_path, provision_id, with_backoff=True),
            triggers=self.triggers,
            depends_on=[
                self.init_command.resource_id,
                *(rc.resource_id for rc in self.roles_copies),
            ],
        )

        logger.info(
            "Provisioner '%s': %d role copies, %d trigger tokens",
            provision_id,
            len(self.roles_copies),
            len(self.triggers),
        )

    @property
    def playbook_file(self) -> str:
        return f"{self.id}.yml"

    def keep_files(self) -> list[str]:
        """Files under the remote path that the clean step must not delete."""
        files = [self.playbook_file]
        if self.config.requirements is not None:
            files.append(REQUIREMENTS_FILE)
        files.extend(gather_roles_files(self.config.role_paths))
        return files

    def _init_fragments(self) -> list[str | Sensitive | None]:
        remote_path = self.remote_path
        fragments: list[str | Sensitive | None] = [
            build_remote_path_init_command(remote_path),
        ]

        if self.config.ansible_install_command:
            fragments.append(BASH_BACKOFF_RETRY_FUNCTION)
            fragments.append(self.config.ansible_install_command)

        if self.config.clean:
            fragments.append(build_clean_command(remote_path, self.keep_files()))

        if self.requirements_yaml is not None:
            fragments.append(
                _write_command(f"{remote_path}/{REQUIREMENTS_FILE}", self.requirements_yaml)
            )

        fragments.append(
            _write_command(f"{remote_path}/{self.playbook_file}", self.playbook_yaml)
        )
        return fragments

    def to_dict(self) -> dict[str, Any]:
        """Declared steps, with every secret redacted."""
        return {
            "id": self.id,
            "remote_path": self.remote_path,
            "playbook": redact(self.playbook_yaml),
            "requirements": redact(self.requirements_yaml),
            "init_command": self.init_command.to_dict(),
            "roles_copies": [rc.to_dict() for rc in self.roles_copies],
            "run_command": self.run_command.to_dict(),
        }
