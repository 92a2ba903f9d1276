"""
Tests for the provisioner composition — declared init, copy and run steps.
"""

from pathlib import Path

from provisioner.core.engine.provisioner import AnsibleProvisioner
from provisioner.core.models.provisioner import ProvisionerConfig
from provisioner.core.models.sensitive import REDACTED, Sensitive
from provisioner.core.services.commands import BASH_BACKOFF_RETRY_FUNCTION
from provisioner.core.services.hashing import directory_hash


class TestMinimalScenario:
    """Remote path /root, id main, no requirements, no roles."""

    def _provisioner(self) -> AnsibleProvisioner:
        return AnsibleProvisioner("main", ProvisionerConfig(remote_path="/root"))

    def test_init_creates_dir_and_writes_playbook(self):
        init = self._provisioner().init_command
        assert init.resource_id == "main-init"
        script = init.script()
        assert script.startswith('sudo mkdir -p "/root"\nsudo chown -Rv "$USER:$USER" "/root"\n')
        assert "cat << 'EOF' | tee \"/root/main.yml\"\n" in script
        assert "requirements.yml" not in script
        assert script.endswith("  roles: []\nEOF\n")

    def test_run_script(self):
        run = self._provisioner().run_command
        assert run.resource_id == "main-run"
        assert run.depends_on == ["main-init"]
        script = run.script()
        assert BASH_BACKOFF_RETRY_FUNCTION in script
        assert 'cd "/root"\n' in script
        assert "if [[ -s requirements.yml ]]; then with_backoff ansible-galaxy" in script
        assert script.endswith("with_backoff ansible-playbook -i localhost, 'main.yml'\n")

    def test_clean_keeps_only_playbook(self):
        provisioner = self._provisioner()
        assert provisioner.keep_files() == ["main.yml"]
        assert "declare -A keep_files=([/root/main.yml]=1)" in provisioner.init_command.script()

    def test_no_roles_copies(self):
        assert self._provisioner().roles_copies == []

    def test_triggers(self):
        provisioner = self._provisioner()
        assert provisioner.triggers == [
            "remote-path:/root",
            provisioner.playbook,
            "init-id:main-init",
            provisioner.init_command.create,
        ]
        assert provisioner.run_command.triggers == provisioner.triggers


class TestFullConfiguration:
    def _config(self, roles_dir: Path, **overrides) -> ProvisionerConfig:
        data = {
            "remote_path": "/var/ansible",
            "role_paths": [str(roles_dir / "common"), str(roles_dir / "web")],
            "ansible_install_command": "sudo apt-get install -y ansible",
            "requirements": {"collections": [{"name": "community.general"}]},
            "roles": [{"role": "common"}, {"role": "web"}],
            "tasks": [{"name": "ping", "ping": {}}],
        }
        data.update(overrides)
        return ProvisionerConfig.model_validate(data)

    def test_init_fragment_order(self, roles_dir: Path):
        script = AnsibleProvisioner("web", self._config(roles_dir)).init_command.script()
        positions = [
            script.index('sudo mkdir -p "/var/ansible"'),
            script.index("function with_backoff"),
            script.index("sudo apt-get install -y ansible"),
            script.index("declare -A keep_files"),
            script.index('tee "/var/ansible/requirements.yml"'),
            script.index('tee "/var/ansible/web.yml"'),
        ]
        assert positions == sorted(positions)

    def test_keep_files(self, roles_dir: Path):
        provisioner = AnsibleProvisioner("web", self._config(roles_dir))
        assert provisioner.keep_files() == [
            "web.yml",
            "requirements.yml",
            "common/defaults/main.yml",
            "common/tasks/main.yml",
            "web/tasks/main.yml",
        ]

    def test_clean_disabled(self, roles_dir: Path):
        config = self._config(roles_dir, clean=False)
        script = AnsibleProvisioner("web", config).init_command.script()
        assert "keep_files" not in script

    def test_roles_copies(self, roles_dir: Path):
        provisioner = AnsibleProvisioner("web", self._config(roles_dir))
        copies = provisioner.roles_copies
        assert [c.resource_id for c in copies] == ["web-roles-copy-0", "web-roles-copy-1"]
        assert copies[1].hash == directory_hash(roles_dir / "web")
        assert copies[1].triggers == [copies[1].hash]
        assert copies[0].depends_on == ["web-init"]
        assert provisioner.run_command.depends_on == [
            "web-init", "web-roles-copy-0", "web-roles-copy-1",
        ]

    def test_triggers_tail_is_role_tokens(self, roles_dir: Path):
        provisioner = AnsibleProvisioner("web", self._config(roles_dir))
        assert provisioner.triggers[-2:] == [c.token for c in provisioner.roles_copies]
        assert provisioner.triggers[1] == {"collections": [{"name": "community.general"}]}

    def test_secret_vars_stay_secret(self, roles_dir: Path):
        config = self._config(roles_dir, vars={"db_password": Sensitive("hunter2")})
        provisioner = AnsibleProvisioner("web", config)

        assert isinstance(provisioner.playbook_yaml, Sensitive)
        assert provisioner.init_command.is_secret
        assert "db_password: hunter2" in provisioner.init_command.script()

        flat = repr(provisioner.triggers)
        assert "hunter2" not in flat
        assert any(str(t).startswith("playbook-secret:") for t in provisioner.triggers)
        assert any(str(t).startswith("init-cmd-secret:") for t in provisioner.triggers)

        data = provisioner.to_dict()
        assert data["playbook"] == REDACTED
        assert data["init_command"]["create"] == REDACTED
        assert "hunter2" not in repr(data)

    def test_eof_in_playbook_uses_base64(self, roles_dir: Path):
        config = self._config(roles_dir, tasks=[{"shell": "cat <<EOF\nx\nEOF"}])
        script = AnsibleProvisioner("web", config).init_command.script()
        assert "| base64 -d | tee \"/var/ansible/web.yml\"" in script


class TestRemotePathNormalization:
    def test_trailing_slash_stripped(self):
        config = ProvisionerConfig(remote_path="/var/ansible/")
        assert config.remote_path == "/var/ansible"

    def test_steps_use_normalized_path(self, roles_dir: Path):
        config = ProvisionerConfig(
            remote_path="/var//ansible/",
            role_paths=[str(roles_dir / "web")],
        )
        provisioner = AnsibleProvisioner("main", config)
        script = provisioner.init_command.script()

        assert "[/var/ansible/main.yml]=1" in script
        assert "[/var/ansible/web/tasks/main.yml]=1" in script
        assert "//" not in script
        assert provisioner.roles_copies[0].remote_path == "/var/ansible"
        assert provisioner.triggers[0] == "remote-path:/var/ansible"


class TestSecretTaskLists:
    def test_whole_task_list_secret(self):
        tasks = Sensitive([{"name": "login", "shell": "docker login -p hunter2"}])
        provisioner = AnsibleProvisioner("main", ProvisionerConfig(tasks=tasks))

        assert isinstance(provisioner.playbook_yaml, Sensitive)
        assert "docker login -p hunter2" in provisioner.playbook_yaml.reveal()
        assert "hunter2" not in repr(provisioner.triggers)
        assert any(str(t).startswith("playbook-secret:") for t in provisioner.triggers)
