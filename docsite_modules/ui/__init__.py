"""Rich output helpers for the docsite-modules CLI."""

from .error_display import display_resolution_error

__all__ = ["display_resolution_error"]
