"""
Tests for the apply use case — declared steps driven through mock collaborators.
"""

from pathlib import Path

from provisioner.adapters import MockCopier, MockExecutor
from provisioner.core.engine.provisioner import AnsibleProvisioner
from provisioner.core.models.provisioner import ConnectionConfig, ProvisionerConfig
from provisioner.core.persistence.trigger_state import TriggerState
from provisioner.core.use_cases.apply import apply_steps

CONNECTION = ConnectionConfig(host="web-1", user="deploy")


def _config(roles_dir: Path, **overrides) -> ProvisionerConfig:
    data = {
        "role_paths": [str(roles_dir / "common"), str(roles_dir / "web")],
        "roles": [{"role": "common"}, {"role": "web"}],
    }
    data.update(overrides)
    return ProvisionerConfig(**data)


class TestApplySteps:
    def test_first_apply_runs_everything_in_order(self, roles_dir: Path):
        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        provisioner = AnsibleProvisioner("main", _config(roles_dir))

        result = apply_steps(provisioner, CONNECTION, executor, copier, state)

        assert result.ok
        assert [r.resource_id for r in result.receipts] == [
            "main-init", "main-roles-copy-0", "main-roles-copy-1", "main-run",
        ]
        assert [c.resource_id for c in executor.calls] == ["main-init", "main-run"]
        assert executor.calls[0].payload["script"] == provisioner.init_command.script()
        assert state.previous("main-run") is not None

    def test_second_apply_skips_unchanged(self, roles_dir: Path):
        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        apply_steps(AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state)

        result = apply_steps(
            AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state,
        )
        assert result.ok
        assert [r.status for r in result.receipts] == ["skipped"] * 4
        assert executor.call_count == 2

    def test_role_change_recopies_and_reruns(self, roles_dir: Path):
        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        apply_steps(AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state)

        (roles_dir / "web" / "tasks" / "main.yml").write_text("- name: changed\n  ping:\n")
        result = apply_steps(
            AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state,
        )
        assert [r.status for r in result.receipts] == ["skipped", "skipped", "ok", "ok"]
        assert [c.resource_id for c in executor.calls] == ["main-init", "main-run", "main-run"]

    def test_init_failure_stops_before_copies(self, roles_dir: Path):
        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        executor.set_failure("main-init", exit_status=100, error="apt lock")

        result = apply_steps(
            AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state,
        )
        assert not result.ok
        assert result.failed_step == "main-init"
        assert len(result.receipts) == 1
        assert copier.calls == []
        assert state.records == {}

    def test_failed_run_is_retried_next_time(self, roles_dir: Path):
        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        executor.set_failure("main-run", exit_status=2, error="ansible-playbook failed")

        result = apply_steps(
            AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, executor, copier, state,
        )
        assert result.failed_step == "main-run"
        assert state.previous("main-run") is None
        assert result.to_dict()["receipts"][-1]["exit_status"] == 2

        ok_executor = MockExecutor()
        result = apply_steps(
            AnsibleProvisioner("main", _config(roles_dir)), CONNECTION, ok_executor, copier, state,
        )
        assert result.ok
        assert [c.resource_id for c in ok_executor.calls] == ["main-run"]

    def test_secret_script_revealed_to_executor_only(self, roles_dir: Path):
        from provisioner.core.models.sensitive import Sensitive

        executor, copier, state = MockExecutor(), MockCopier(), TriggerState()
        config = _config(roles_dir, vars={"db_password": Sensitive("hunter2")})

        apply_steps(AnsibleProvisioner("main", config), CONNECTION, executor, copier, state)

        assert "db_password: hunter2" in executor.calls[0].payload["script"]
        assert "hunter2" not in repr(state.model_dump())
