"""Module resolution for documentation site plugins and themes."""

from .module_resolution import CommonModule
from .module_resolution import ModuleResolver
from .module_resolution import ResolutionError
from .module_resolution import get_markdown_it_resolver
from .module_resolution import get_plugin_resolver
from .module_resolution import get_theme_resolver

__all__ = [
    "CommonModule",
    "ModuleResolver",
    "ResolutionError",
    "get_markdown_it_resolver",
    "get_plugin_resolver",
    "get_theme_resolver",
]
