"""Loading resolved module entries.

The resolver only calls a loader when auto_load is enabled. ImportLoader
imports path entries from the filesystem and specifier entries by name.
"""

import hashlib
import importlib
import importlib.util
import logging
import os
import re
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol

from .errors import ModuleLoadError

logger = logging.getLogger(__name__)

LOADED_PREFIX = "_docsite_loaded_"


class ModuleLoader(Protocol):
    """Loads a resolved entry into a module value."""

    def load(self, entry: str) -> object:
        """Load an entry (path or import specifier).

        Raises:
            ModuleLoadError: Entry cannot be loaded
        """
        ...


def module_name_for(entry: str) -> str:
    """Derive an importable module name from a package name.

    "@acme/theme-foo" -> "acme.theme_foo"
    """
    parts = [re.sub(r"\W", "_", part) for part in entry.lstrip("@").split("/") if part]
    return ".".join(parts)


def path_module_name(path: str | Path) -> str:
    """Private sys.modules name for a module loaded from a path.

    Unique per absolute path, so a plugin file named like an installed
    module ("json.py") never replaces it.
    "/site/my-theme.py" -> "_docsite_loaded_my_theme_<hash>"
    """
    path = Path(path)
    digest = hashlib.sha1(str(path.resolve()).encode("utf-8")).hexdigest()[:8]
    stem = re.sub(r"\W", "_", path.stem)
    return f"{LOADED_PREFIX}{stem}_{digest}"


class ImportLoader:
    """Import entries with importlib."""

    def load(self, entry: str) -> ModuleType:
        if os.path.isabs(entry):
            return self._load_path(Path(entry))
        return self._load_specifier(entry)

    def _load_path(self, path: Path) -> ModuleType:
        if path.is_dir():
            init_file = path / "__init__.py"
            if not init_file.is_file():
                raise ModuleLoadError(f"Path does not contain a valid Python package: {path}")
            spec = importlib.util.spec_from_file_location(
                path_module_name(path), init_file, submodule_search_locations=[str(path)]
            )
        else:
            # Extension may be omitted in site configuration
            if not path.is_file() and path.suffix != ".py" and path.with_name(f"{path.name}.py").is_file():
                path = path.with_name(f"{path.name}.py")
            if not path.is_file():
                raise ModuleLoadError(f"Module path not found: {path}")
            spec = importlib.util.spec_from_file_location(path_module_name(path), path)

        if spec is None or spec.loader is None:
            raise ModuleLoadError(f"Cannot load module from {path}")

        module = importlib.util.module_from_spec(spec)
        sys.modules[spec.name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            sys.modules.pop(spec.name, None)
            raise ModuleLoadError(f"Failed to load module from {path}: {e}") from e

        logger.debug(f"[module:load] {path} -> {spec.name}")
        return module

    def _load_specifier(self, specifier: str) -> ModuleType:
        module_name = module_name_for(specifier)
        try:
            module = importlib.import_module(module_name)
        except ImportError as e:
            raise ModuleLoadError(f"Failed to import '{specifier}' as '{module_name}': {e}") from e

        logger.debug(f"[module:load] {specifier} -> {module_name}")
        return module

    def __repr__(self) -> str:
        return "ImportLoader()"
