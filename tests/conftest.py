"""
Shared test fixtures and configuration.
"""

import textwrap
from pathlib import Path

import pytest


def write_files(root: Path, files: dict[str, str]) -> Path:
    """Create ``files`` (relative path → content) under ``root``."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    return root


@pytest.fixture
def roles_dir(tmp_path: Path) -> Path:
    """A roles/ directory with two small roles."""
    root = tmp_path / "roles"
    write_files(root, {
        "common/tasks/main.yml": "- name: ping\n  ping:\n",
        "common/defaults/main.yml": "common_user: deploy\n",
        "web/tasks/main.yml": "- name: nginx\n  apt:\n    name: nginx\n",
    })
    return root


@pytest.fixture
def config_file(tmp_path: Path, roles_dir: Path) -> Path:
    """A provisioner.yml using the roles fixture."""
    content = textwrap.dedent("""\
        id: main
        connection:
          host: web-1.example.com
          user: deploy
        remote_path: /var/ansible
        role_paths:
          - roles/common
          - roles/web
        roles:
          - role: common
          - role: web
            vars:
              web_port: 8080
        vars:
          env: staging
    """)
    path = tmp_path / "provisioner.yml"
    path.write_text(content)
    return path


@pytest.fixture
def tmp_state_dir(tmp_path: Path) -> Path:
    """Return a temporary directory for state files."""
    state_dir = tmp_path / "state"
    state_dir.mkdir()
    return state_dir
