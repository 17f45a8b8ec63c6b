"""Module resolver - turns site configuration references into module descriptors.

A request is one of:
- a falsy value (no module)
- an already-built object (function, mapping, module, ...)
- an absolute path
- a path relative to the project (./theme, ../plugins/toc)
- a package name (foo, theme-foo, docsite-theme-foo, @acme/theme-foo)

Every request resolves to a CommonModule. Path and name logic never touches
object requests, and nothing is cached between calls.
"""

import logging
import os
import types
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from ..settings import ModuleSettings
from ..settings import load_module_settings
from .errors import InvalidPathError
from .errors import ModuleNotFoundError
from .errors import ResolutionError
from .errors import UnsupportedTypeError
from .loader import ImportLoader
from .loader import ModuleLoader
from .manifest import DependencyManifest
from .manifest import ProjectManifest
from .models import CommonModule
from .models import NormalizedModuleRequest
from .models import RequestKind
from .models import ValueType
from .naming import NamingRules
from .naming import resolve_scope_package
from .sources import DefaultModules
from .sources import PackageLocator

logger = logging.getLogger(__name__)

ValueTypeSpec = ValueType | type | str


class ModuleResolver:
    """Resolve module requests of one kind ("plugin", "theme", ...).

    Resolution order (first matching branch wins):
    1. Falsy request -> empty CommonModule
    2. Non-string request -> used as-is if its type is allowed
    3. Absolute path -> entry is the path unchanged
    4. Relative path -> entry is the path joined to the working directory
    5. Package name -> first probe candidate found among declared
       dependencies or default modules
    """

    def __init__(
        self,
        kind: str,
        organization: str = "",
        allowed_types: Iterable[ValueTypeSpec] | None = None,
        auto_load: bool = False,
        cwd: str | Path | None = None,
        *,
        manifest: DependencyManifest | None = None,
        bundled_paths: Iterable[str | Path] = (),
        loader: ModuleLoader | None = None,
    ):
        """Initialize resolver configuration.

        Args:
            kind: Module kind, used for type prefixes and messages
            organization: Default organization for unscoped names
            allowed_types: Accepted object request types (default: all)
            auto_load: Load path and package entries before returning them
            cwd: Default working directory (default: process cwd)
            manifest: Dependency manifest (default: project manifest read
                from the working directory on every call)
            bundled_paths: Directories holding bundled default modules
            loader: Loader used when auto_load is set (default: ImportLoader)

        Raises:
            ValueError: Empty kind or unknown allowed type
        """
        self.rules = NamingRules(kind, organization)
        self.kind = kind
        self.organization = self.rules.organization
        if allowed_types is None:
            self.allowed_types = frozenset(ValueType)
        else:
            self.allowed_types = frozenset(ValueType.coerce(t) for t in allowed_types)
        self.auto_load = auto_load
        self.cwd = os.path.abspath(cwd) if cwd is not None else os.getcwd()
        self.manifest = manifest
        self.defaults = DefaultModules(kind, bundled_paths)
        self.locator = PackageLocator()
        self.loader = loader or ImportLoader()

    def resolve(self, request: Any, cwd: str | Path | None = None) -> CommonModule:
        """Resolve a module request.

        Args:
            request: Module request from site configuration
            cwd: Working directory for this call only (default: resolver cwd)

        Returns:
            CommonModule describing the module

        Raises:
            UnsupportedTypeError: Object request of a type that is not allowed
            InvalidPathError: Malformed path request
            ModuleNotFoundError: No package candidate exists
            ResolutionError: Dependency probe failed
        """
        base = os.path.abspath(cwd) if cwd is not None else self.cwd
        request_kind = RequestKind.of(request)

        if request_kind is RequestKind.EMPTY:
            return CommonModule()
        if request_kind is RequestKind.OBJECT:
            return self.resolve_non_string_package(request)
        if request_kind is RequestKind.ABSOLUTE_PATH:
            return self.resolve_absolute_path_package(request)
        if request_kind is RequestKind.RELATIVE_PATH:
            return self.resolve_relative_path_package(request, base)
        return self.resolve_dep_package(request, base)

    def resolve_non_string_package(self, request: Any) -> CommonModule:
        """Return an object request as the module entry."""
        if not self._is_allowed(request):
            raise UnsupportedTypeError(request, self.kind, sorted(t.value for t in self.allowed_types))

        logger.debug(f"[module:resolve] {self.kind} object ({type(request).__name__})")
        return CommonModule(entry=request)

    def resolve_absolute_path_package(self, request: str) -> CommonModule:
        """Resolve a module by absolute path; existence is left to the loader."""
        self._validate_path(request)

        stem = Path(request).stem
        shortcut = self.rules.get_shortcut(stem) if stem else None

        logger.debug(f"[module:resolve] {self.kind} {request} -> absolute path")
        return CommonModule(entry=self._maybe_load(request), shortcut=shortcut)

    def resolve_relative_path_package(self, request: str, cwd: str | None = None) -> CommonModule:
        """Resolve a module by path relative to the working directory."""
        self._validate_path(request)

        entry = os.path.normpath(os.path.join(cwd if cwd is not None else self.cwd, request))

        logger.debug(f"[module:resolve] {self.kind} {request} -> relative path ({entry})")
        return CommonModule(entry=self._maybe_load(entry))

    def resolve_dep_package(self, request: str, cwd: str | None = None) -> CommonModule:
        """Resolve a package name by probing candidates in precedence order.

        Each candidate is checked against declared dependencies first, then
        against default modules.
        """
        self._validate_package_name(request)

        base = cwd if cwd is not None else self.cwd
        shortcut = self.get_shortcut_for(request)
        candidates = self.candidates(request)

        try:
            manifest = self.manifest if self.manifest is not None else ProjectManifest(base)

            for candidate in candidates:
                if manifest.has_dependency(candidate):
                    entry = self.locator.locate(candidate, base)
                    logger.debug(f"[module:resolve] {self.kind} {request} -> dependency {candidate}")
                    return CommonModule(
                        entry=self._maybe_load(entry), name=candidate, shortcut=shortcut, from_dep=True
                    )

                if default_path := self.defaults.find(candidate, base):
                    logger.debug(f"[module:resolve] {self.kind} {request} -> default {candidate} ({default_path})")
                    return CommonModule(
                        entry=self._maybe_load(str(default_path)), name=candidate, shortcut=shortcut, from_dep=False
                    )
        except OSError as e:
            raise ResolutionError(f"Failed to probe {self.kind} '{request}': {e}") from e

        logger.debug(f"[module:resolve] {self.kind} {request} -> not found (tried {', '.join(candidates)})")
        raise ModuleNotFoundError(request, self.kind, candidates)

    def get_shortcut(self, name: str) -> str:
        """Strip the organization and type prefixes from an unscoped name."""
        return self.rules.get_shortcut(name)

    def get_shortcut_for(self, request: str) -> str:
        """Shortcut of a package request, with any scope removed."""
        return self.rules.get_shortcut(resolve_scope_package(request).name)

    def normalize_name(self, request: str) -> NormalizedModuleRequest:
        """Normalize a package name request into (name, shortcut)."""
        return self.rules.normalize_name(request)

    def normalize_request(self, request: Any) -> NormalizedModuleRequest:
        """Normalize any request for display and deduplication.

        Strings are normalized by name. Mappings and objects are normalized
        by their "name" if it is a string, else reported by their "shortcut".
        """
        if isinstance(request, str):
            return self.normalize_name(request)

        if isinstance(request, dict):
            name = request.get("name")
            shortcut = request.get("shortcut")
        else:
            name = getattr(request, "name", None)
            shortcut = getattr(request, "shortcut", None)

        if isinstance(name, str) and name:
            return self.normalize_name(name)
        if isinstance(shortcut, str) and shortcut:
            return NormalizedModuleRequest(name=shortcut, shortcut=shortcut)
        return NormalizedModuleRequest(name=None, shortcut=None)

    def candidates(self, request: str) -> list[str]:
        """Package names probed for a request, highest precedence first."""
        return self.rules.candidates(request)

    def _is_allowed(self, request: Any) -> bool:
        if isinstance(request, types.ModuleType):
            return True
        value_type = ValueType.detect(request)
        return value_type is not None and value_type in self.allowed_types

    def _validate_path(self, request: str) -> None:
        if "\x00" in request:
            raise InvalidPathError(request, "contains a NUL byte")

        segments = request.replace(os.sep, "/").split("/")
        # Leading segment is empty for absolute paths, trailing one for directories
        if any(segment == "" for segment in segments[1:-1]):
            raise InvalidPathError(request, "contains an empty path segment")

    def _validate_package_name(self, request: str) -> None:
        if "\x00" in request or "\\" in request:
            raise InvalidPathError(request, "not a valid package name")

        # Candidates are joined onto search paths and must stay inside them
        if any(segment in ("", ".", "..") for segment in request.split("/")):
            raise InvalidPathError(request, "package names cannot contain empty, . or .. segments")

    def _maybe_load(self, entry: str) -> Any:
        if not self.auto_load:
            return entry
        return self.loader.load(entry)

    def __repr__(self) -> str:
        return f"ModuleResolver(kind={self.kind!r}, organization={self.organization!r}, auto_load={self.auto_load})"


def _create_resolver(
    kind: str,
    organization: str,
    allowed_types: list[ValueTypeSpec],
    auto_load: bool,
    cwd: str | Path,
    settings: ModuleSettings,
) -> ModuleResolver:
    bundled_paths = [Path(cwd) / p if not os.path.isabs(p) else Path(p) for p in settings.bundled_paths]
    return ModuleResolver(
        kind,
        organization,
        allowed_types,
        auto_load,
        cwd,
        bundled_paths=bundled_paths,
    )


def get_plugin_resolver(cwd: str | Path, settings: ModuleSettings | None = None) -> ModuleResolver:
    """Resolver for site plugins (names, paths, functions or plugin mappings)."""
    settings = settings or load_module_settings(cwd)
    auto_load = settings.auto_load if settings.auto_load is not None else True
    return _create_resolver(
        "plugin",
        settings.organization,
        [ValueType.STRING, ValueType.FUNCTION, ValueType.MAPPING],
        auto_load,
        cwd,
        settings,
    )


def get_theme_resolver(cwd: str | Path, settings: ModuleSettings | None = None) -> ModuleResolver:
    """Resolver for site themes (names or paths)."""
    settings = settings or load_module_settings(cwd)
    auto_load = settings.auto_load if settings.auto_load is not None else False
    return _create_resolver("theme", settings.organization, [ValueType.STRING], auto_load, cwd, settings)


def get_markdown_it_resolver(cwd: str | Path, settings: ModuleSettings | None = None) -> ModuleResolver:
    """Resolver for markdown-it plugins, loaded eagerly unless settings say otherwise."""
    settings = settings or load_module_settings(cwd)
    auto_load = settings.auto_load if settings.auto_load is not None else True
    return _create_resolver(
        "markdown-it",
        "",
        [ValueType.STRING, ValueType.FUNCTION],
        auto_load,
        cwd,
        settings,
    )
