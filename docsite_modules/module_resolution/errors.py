"""Module resolution errors.

All resolution failures derive from ResolutionError so callers can turn any
of them into a single configuration error. Loading failures are separate:
the module was named and located, but could not be imported.
"""


class ResolutionError(Exception):
    """Raised when a module request cannot be resolved."""

    pass


class UnsupportedTypeError(ResolutionError):
    """Raised when an object request's type is not in the allowed types."""

    def __init__(self, request: object, kind: str, allowed: list[str]):
        self.request = request
        self.kind = kind
        self.allowed = allowed
        super().__init__(
            f"Unsupported {kind} request of type '{type(request).__name__}'\n"
            f"Allowed value types: {', '.join(allowed) if allowed else '(none)'}"
        )


class ModuleNotFoundError(ResolutionError):
    """Raised when no probe candidate resolves to an existing module."""

    def __init__(self, request: str, kind: str, candidates: list[str]):
        self.request = request
        self.kind = kind
        self.candidates = list(candidates)
        tried = "\n".join(f"  {i}. {name}" for i, name in enumerate(self.candidates, 1))
        super().__init__(
            f"Cannot resolve {kind} '{request}'\n\n"
            f"Resolution attempted:\n"
            f"{tried}\n\n"
            f"Suggestions:\n"
            f"  - Declare the package in your project dependencies\n"
            f"  - Reference a local {kind} by path: ./path/to/{kind}"
        )


class InvalidPathError(ResolutionError):
    """Raised when a path request fails syntactic validation."""

    def __init__(self, request: str, reason: str):
        self.request = request
        self.reason = reason
        super().__init__(f"Invalid module path '{request}': {reason}")


class ManifestError(ResolutionError):
    """Raised when the dependency manifest cannot be read."""

    pass


class ModuleLoadError(Exception):
    """Raised when a resolved entry is found but cannot be loaded."""

    pass
