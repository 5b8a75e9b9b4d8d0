"""
Project configuration for vro-docs.

A project is the repository that holds the exported workflows. Its optional
``vro-docs.yaml`` overrides the built-in defaults.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from vro_docs.exceptions import InvalidConfigError

SCHEMA_FILE = Path(__file__).parent / "schema" / "config.schema.json"

CONFIG_FILENAME = "vro-docs.yaml"

# Environment variables that override configuration values
ENV_OVERRIDES = {
    "VRO_GLOB": ("workflows", "glob"),
    "VRA_URL": ("vra", "url"),
}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        # A section whose keys are all commented out loads as None
        if value is None and isinstance(merged.get(key), dict):
            continue
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Workspace:
    """Manages the project configuration file."""

    DEFAULT_CONFIG: dict[str, Any] = {
        "workflows": {
            "glob": "**/*workflow.xml",
        },
        "docs": {
            "out_dir": "docs/workflows",
            "index": True,
            "html": False,
        },
        "lint": {
            "glob": "vro-samples/**/*.xml",
            "eslint_config": None,
        },
        "vra": {
            "url": None,
            "runner_workflow_id": "d8a3ea33-868f-43f4-bed1-df4404b0cedb",
            "verify_ssl": True,
            "timeout": 30,
            "retry_attempts": 3,
            "retry_delay": 5.0,
        },
        "publish": {
            "branch_suffix": "-documentation",
            "commit_message": "docs: auto-generated workflow documentation",
            "user_name": "github-actions[bot]",
            "user_email": "github-actions[bot]@users.noreply.github.com",
        },
    }

    def __init__(self, root: Path):
        self.root = Path(root)
        self.config_file = self.root / CONFIG_FILENAME
        self._config_cache: dict[str, Any] | None = None

    def initialize(self) -> None:
        """Write the default configuration file."""
        self.root.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            yaml.dump(self.DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
        self._config_cache = None

    def load_config(self) -> dict[str, Any]:
        """
        Load, merge and validate the project configuration (cached).

        Precedence, lowest first: built-in defaults, ``vro-docs.yaml``,
        environment variables.

        Raises:
            InvalidConfigError: If the file is not a mapping or fails schema validation
        """
        if self._config_cache is not None:
            return self._config_cache

        config = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_file.exists():
            with open(self.config_file) as f:
                try:
                    loaded = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise InvalidConfigError(f"{self.config_file}: {e}") from e

            if loaded is not None:
                if not isinstance(loaded, dict):
                    raise InvalidConfigError(
                        f"expected a mapping, got {type(loaded).__name__}"
                    )
                config = _deep_merge(config, loaded)

        for env_var, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(env_var)
            if value:
                config[section][key] = value

        self._validate_config_schema(config)

        self._config_cache = config
        return config

    def _validate_config_schema(self, config: dict) -> None:
        """Validate config against JSON schema."""
        schema = json.loads(SCHEMA_FILE.read_text())
        try:
            validate(instance=config, schema=schema)
        except ValidationError as e:
            path = ".".join(str(p) for p in e.path)
            raise InvalidConfigError(f"{e.message} (at {path or '<root>'})") from e
