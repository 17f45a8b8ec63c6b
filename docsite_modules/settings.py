"""Settings for module resolution.

Reads the "modules" section of settings.yaml files across three scopes:
- User global (~/.docsite/settings.yaml)
- Project (.docsite/settings.yaml)
- Local (.docsite/settings.local.yaml)

Example:
    modules:
      organization: acme
      bundled_paths:
        - vendor/themes
      auto_load: false
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field
from pydantic import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_ORGANIZATION = "docsite"
ORGANIZATION_ENV = "DOCSITE_ORGANIZATION"


class ModuleSettings(BaseModel):
    """Resolver defaults from the "modules" settings section."""

    organization: str = Field(DEFAULT_ORGANIZATION, description="Default organization for unscoped package names")
    bundled_paths: list[str] = Field(
        default_factory=list, description="Directories of bundled default modules (relative to the project)"
    )
    auto_load: bool | None = Field(None, description="Load resolved modules eagerly (None keeps the kind default)")


class SettingsManager:
    """Reads settings across user/project/local scopes."""

    def __init__(self, docsite_dir: Path | None = None, user_settings_file: Path | None = None):
        """Initialize settings manager with standard paths.

        Args:
            docsite_dir: Base directory for project/local settings.
                         If None, uses .docsite in current directory.
            user_settings_file: User settings file (for testing).
                                If None, uses ~/.docsite/settings.yaml.
        """
        if docsite_dir is None:
            docsite_dir = Path(".docsite")

        self.user_settings_file = user_settings_file or Path.home() / ".docsite" / "settings.yaml"
        self.project_settings_file = docsite_dir / "settings.yaml"
        self.local_settings_file = docsite_dir / "settings.local.yaml"

    def get_merged_settings(self) -> dict[str, Any]:
        """Get merged settings from all scopes.

        Merge order (later overrides earlier):
        1. User settings
        2. Project settings
        3. Local settings
        """
        merged: dict[str, Any] = {}
        for path in (self.user_settings_file, self.project_settings_file, self.local_settings_file):
            settings = self._read_settings(path)
            if settings:
                merged = self._deep_merge(merged, settings)
        return merged

    def get_module_settings(self) -> ModuleSettings:
        """Get validated module settings.

        DOCSITE_ORGANIZATION overrides the organization from any scope.
        Invalid settings are reported and replaced by defaults.
        """
        section = self.get_merged_settings().get("modules") or {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring 'modules' settings: expected a mapping, got {type(section).__name__}")
            section = {}

        if env_organization := os.getenv(ORGANIZATION_ENV):
            section = {**section, "organization": env_organization}

        try:
            return ModuleSettings(**section)
        except ValidationError as e:
            logger.warning(f"Invalid 'modules' settings, using defaults: {e}")
            return ModuleSettings()

    def _read_settings(self, path: Path) -> dict[str, Any] | None:
        """Read settings from YAML file.

        Returns:
            Settings dict or None if file doesn't exist or can't be parsed
        """
        if not path.exists():
            return None

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read settings from {path}: {e}")
            return None

        if data is None:
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring settings in {path}: expected a mapping")
            return None
        return data

    def _deep_merge(self, base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_module_settings(project_dir: str | Path) -> ModuleSettings:
    """Load module settings for a project directory."""
    return SettingsManager(Path(project_dir) / ".docsite").get_module_settings()
