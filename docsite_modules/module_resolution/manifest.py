"""Dependency manifests - which packages a site project declares.

The resolver only asks one question of a manifest: is this package name
declared? ProjectManifest answers it from the files in the project root:
- pyproject.toml: [project] dependencies and optional-dependencies,
  plus [tool.docsite] dependencies
- package.json: dependencies and devDependencies (scoped "@org/name" packages)
"""

import json
import logging
import re
import tomllib
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

from .errors import ManifestError

logger = logging.getLogger(__name__)

# Leading distribution name of a PEP 508 requirement string
REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


def normalize_package_name(name: str) -> str:
    """Normalize a package name for comparison.

    Unscoped names follow PEP 503 ("Foo_Bar" == "foo-bar"). Scoped names
    are compared lowercase as written.
    """
    if name.startswith("@"):
        return name.lower()
    return re.sub(r"[-_.]+", "-", name.lower())


class DependencyManifest(Protocol):
    """Read-only view of a project's declared dependencies."""

    def has_dependency(self, name: str) -> bool:
        """Return True if the package name is declared."""
        ...


class StaticManifest:
    """Manifest over a fixed set of package names."""

    def __init__(self, names: Iterable[str] = ()):
        self._names = frozenset(normalize_package_name(n) for n in names)

    def has_dependency(self, name: str) -> bool:
        return normalize_package_name(name) in self._names

    def __repr__(self) -> str:
        return f"StaticManifest({sorted(self._names)})"


class ProjectManifest:
    """Manifest read from pyproject.toml and package.json in a project root."""

    def __init__(self, project_dir: str | Path):
        """Read declared dependencies from a project directory.

        Args:
            project_dir: Directory containing pyproject.toml and/or package.json

        Raises:
            ManifestError: A manifest file exists but cannot be parsed
        """
        self.project_dir = Path(project_dir)
        names = set(self._read_pyproject(self.project_dir / "pyproject.toml"))
        names.update(self._read_package_json(self.project_dir / "package.json"))
        self._names = frozenset(normalize_package_name(n) for n in names)
        logger.debug(f"[module:manifest] {self.project_dir}: {len(self._names)} declared dependencies")

    @property
    def names(self) -> frozenset[str]:
        """Normalized names of all declared dependencies."""
        return self._names

    def has_dependency(self, name: str) -> bool:
        return normalize_package_name(name) in self._names

    def _read_pyproject(self, path: Path) -> list[str]:
        if not path.is_file():
            return []

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ManifestError(f"Failed to read {path}: {e}") from e

        project = data.get("project", {})
        requirements = list(project.get("dependencies", []))
        for extra in project.get("optional-dependencies", {}).values():
            requirements.extend(extra)
        requirements.extend(data.get("tool", {}).get("docsite", {}).get("dependencies", []))

        names = []
        for requirement in requirements:
            if not isinstance(requirement, str):
                continue
            if requirement.startswith("@"):
                names.append(requirement.split()[0])
                continue
            match = REQUIREMENT_NAME.match(requirement)
            if match:
                names.append(match.group(1))
        return names

    def _read_package_json(self, path: Path) -> list[str]:
        if not path.is_file():
            return []

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ManifestError(f"Failed to read {path}: {e}") from e

        if not isinstance(data, dict):
            raise ManifestError(f"Failed to read {path}: expected a JSON object")

        names = []
        for section in ("dependencies", "devDependencies"):
            declared = data.get(section) or {}
            if isinstance(declared, dict):
                names.extend(declared.keys())
        return names

    def __repr__(self) -> str:
        return f"ProjectManifest({self.project_dir})"
