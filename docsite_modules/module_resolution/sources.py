"""Module locations on disk.

- PackageLocator: Where a declared dependency lives
- DefaultModules: Bundled and project-local default modules of one kind
"""

import importlib.metadata
import logging
from collections.abc import Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

WORKSPACE_DIR = ".docsite"


class PackageLocator:
    """Locate a declared dependency for the loader.

    Resolution order (first match wins):
    1. Workspace convention (<project>/.docsite/modules/<name>/)
    2. Installed distribution (importlib.metadata)
    3. The package name itself, as an import specifier
    """

    def locate(self, name: str, project_dir: str | Path) -> str:
        """Return the entry the loader should import for a package.

        Args:
            name: Package name (e.g., "docsite-theme-foo", "@acme/theme-foo")
            project_dir: Project root the request was made from

        Returns:
            Filesystem path string, or the package name when it has no
            known location
        """
        if workspace_path := self._check_workspace(name, Path(project_dir)):
            logger.debug(f"[module:locate] {name} -> workspace ({workspace_path})")
            return str(workspace_path)

        if package_path := self._check_installed(name):
            logger.debug(f"[module:locate] {name} -> installed ({package_path})")
            return str(package_path)

        logger.debug(f"[module:locate] {name} -> specifier")
        return name

    def _check_workspace(self, name: str, project_dir: Path) -> Path | None:
        workspace_path = project_dir / WORKSPACE_DIR / "modules" / name
        if workspace_path.is_dir():
            return workspace_path
        return None

    def _check_installed(self, name: str) -> Path | None:
        """Find the install location of a distribution.

        Scoped names are not valid distribution names and are never installed.
        """
        if name.startswith("@"):
            return None

        try:
            dist = importlib.metadata.distribution(name)
        except importlib.metadata.PackageNotFoundError:
            return None

        # Top-level package directory if the distribution declares one
        top_level = dist.read_text("top_level.txt")
        if top_level:
            package_dir = Path(str(dist.locate_file(top_level.split()[0])))
            if package_dir.exists():
                return package_dir

        if dist.files:
            return Path(str(dist.locate_file(dist.files[0]))).parent
        return Path(str(dist.locate_file("")))

    def __repr__(self) -> str:
        return "PackageLocator(workspace, installed)"


class DefaultModules:
    """Default modules shipped with the build tool or kept in the project.

    Search order (first match wins):
    1. Project-local defaults (<project>/.docsite/<kind>s/)
    2. Bundled paths, in configured order

    A module is a directory <name>/ or a file <name>.py.
    """

    def __init__(self, kind: str, bundled_paths: Iterable[str | Path] = ()):
        self.kind = kind
        self.bundled_paths = [Path(p) for p in bundled_paths]

    def search_paths(self, project_dir: str | Path) -> list[Path]:
        """Directories searched for defaults, highest precedence first."""
        return [Path(project_dir) / WORKSPACE_DIR / f"{self.kind}s", *self.bundled_paths]

    def find(self, name: str, project_dir: str | Path) -> Path | None:
        """Return the path of a default module, or None if there is none."""
        for search_path in self.search_paths(project_dir):
            candidate = search_path / name
            if candidate.is_dir():
                return candidate
            module_file = search_path / f"{name}.py"
            if module_file.is_file():
                return module_file
        return None

    def __repr__(self) -> str:
        return f"DefaultModules({self.kind}, bundled={[str(p) for p in self.bundled_paths]})"
