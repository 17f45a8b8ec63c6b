"""Module resolution for site plugins, themes and markdown-it plugins.

Turns module requests from site configuration (package names, scoped
names, paths, or ready-made objects) into CommonModule descriptors for
the loader.
"""

from .errors import InvalidPathError
from .errors import ManifestError
from .errors import ModuleLoadError
from .errors import ModuleNotFoundError
from .errors import ResolutionError
from .errors import UnsupportedTypeError
from .loader import ImportLoader
from .loader import ModuleLoader
from .manifest import DependencyManifest
from .manifest import ProjectManifest
from .manifest import StaticManifest
from .models import CommonModule
from .models import NormalizedModuleRequest
from .models import RequestKind
from .models import ScopePackage
from .models import ValueType
from .naming import NamingRules
from .naming import resolve_scope_package
from .resolver import ModuleResolver
from .resolver import get_markdown_it_resolver
from .resolver import get_plugin_resolver
from .resolver import get_theme_resolver
from .sources import DefaultModules
from .sources import PackageLocator

__all__ = [
    "CommonModule",
    "DefaultModules",
    "DependencyManifest",
    "ImportLoader",
    "InvalidPathError",
    "ManifestError",
    "ModuleLoadError",
    "ModuleLoader",
    "ModuleNotFoundError",
    "ModuleResolver",
    "NamingRules",
    "NormalizedModuleRequest",
    "PackageLocator",
    "ProjectManifest",
    "RequestKind",
    "ResolutionError",
    "ScopePackage",
    "StaticManifest",
    "UnsupportedTypeError",
    "ValueType",
    "get_markdown_it_resolver",
    "get_plugin_resolver",
    "get_theme_resolver",
    "resolve_scope_package",
]
