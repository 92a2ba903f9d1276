"""
Configuration loader — reads provisioner.yml into domain models.

It reads YAML, validates against Pydantic schemas, and returns typed
domain objects. Values tagged ``!secret`` are wrapped in ``Sensitive``
so they never leak into trigger state or logs.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml

from provisioner.core.models.provisioner import ProvisionerConfig
from provisioner.core.models.sensitive import Sensitive

logger = logging.getLogger(__name__)

# Default config filename
PROVISIONER_CONFIG_FILE = "provisioner.yml"

SECRET_TAG = "!secret"


class ConfigError(Exception):
    """Raised when provisioning configuration is invalid or missing."""


class SecretLoader(yaml.SafeLoader):
    """SafeLoader that understands the ``!secret`` tag."""


def _construct_secret(loader: SecretLoader, node: yaml.Node) -> Sensitive:
    if isinstance(node, yaml.ScalarNode):
        return Sensitive(loader.construct_scalar(node))
    if isinstance(node, yaml.SequenceNode):
        return Sensitive(loader.construct_sequence(node, deep=True))
    return Sensitive(loader.construct_mapping(node, deep=True))


SecretLoader.add_constructor(SECRET_TAG, _construct_secret)


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Search for provisioner.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to provisioner.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / PROVISIONER_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_config(path: Path | None = None) -> ProvisionerConfig:
    """Load and validate provisioning configuration.

    Relative role paths are resolved against the config file's directory.

    Args:
        path: Explicit path to provisioner.yml. If None, searches upward.

    Returns:
        Validated ProvisionerConfig model.

    Raises:
        ConfigError: If the file is missing or invalid.
    """
    if path is None:
        path = find_config_file()

    if path is None:
        raise ConfigError(
            f"No {PROVISIONER_CONFIG_FILE} found. Specify one with --config."
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading provisioner config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.load(raw, Loader=SecretLoader)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    try:
        config = ProvisionerConfig.model_validate(data)
    except Exception as e:
        raise ConfigError(f"Invalid provisioner configuration: {e}") from e

    base = path.parent.resolve()
    config.role_paths = [str((base / p).resolve()) for p in config.role_paths]

    logger.info(
        "Loaded provisioner '%s' with %d role paths", config.id, len(config.role_paths)
    )
    return config


def config_root(config_path: Path) -> Path:
    """Get the directory holding a config file."""
    return config_path.parent.resolve()
