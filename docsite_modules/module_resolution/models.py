"""Module resolution data models.

Defines the types shared by the resolver and its collaborators:
- RequestKind: Shape of a module request, decided once at the boundary
- ValueType: Object types a resolver accepts as already-built modules
- ScopePackage: Namespace decomposition of a package name
- NormalizedModuleRequest: Canonical name and shortcut of a request
- CommonModule: Resolution result handed to the loader
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable
from collections.abc import Mapping
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import NamedTuple

# Builtin types whose falsy values mean "no module"; other objects are never
# asked for their truth value
EMPTY_REQUEST_TYPES = (str, bool, int, float, dict, list, tuple, set, frozenset)


class RequestKind(str, Enum):
    """Shape of a module request.

    Kinds:
    - EMPTY: Falsy request, resolves to the empty module
    - OBJECT: Non-string value used as the module itself
    - ABSOLUTE_PATH: Platform absolute path
    - RELATIVE_PATH: Path starting with ./ or ../
    - PACKAGE_NAME: Bare or scoped package name
    """

    EMPTY = "empty"
    OBJECT = "object"
    ABSOLUTE_PATH = "absolute-path"
    RELATIVE_PATH = "relative-path"
    PACKAGE_NAME = "package-name"

    @classmethod
    def of(cls, request: Any) -> RequestKind:
        """Classify a request."""
        if request is None or (isinstance(request, EMPTY_REQUEST_TYPES) and not request):
            return cls.EMPTY
        if not isinstance(request, str):
            return cls.OBJECT
        if os.path.isabs(request):
            return cls.ABSOLUTE_PATH
        if request in (".", "..") or request.startswith(("./", "../")):
            return cls.RELATIVE_PATH
        return cls.PACKAGE_NAME


class ValueType(str, Enum):
    """Object types accepted as object-form requests."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    PATTERN = "pattern"
    FUNCTION = "function"
    MAPPING = "mapping"
    SEQUENCE = "sequence"

    @classmethod
    def coerce(cls, value: ValueType | type | str) -> ValueType:
        """Map a ValueType, builtin type, or type name to a ValueType.

        Raises:
            ValueError: Value does not name a supported type
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls(value.lower())
        if isinstance(value, type):
            # bool before int: bool is an int subclass
            if issubclass(value, bool):
                return cls.BOOLEAN
            if issubclass(value, str):
                return cls.STRING
            if issubclass(value, (int, float)):
                return cls.NUMBER
            if issubclass(value, re.Pattern):
                return cls.PATTERN
            if issubclass(value, Mapping):
                return cls.MAPPING
            if issubclass(value, Sequence):
                return cls.SEQUENCE
            if issubclass(value, Callable):
                return cls.FUNCTION
        raise ValueError(f"Unsupported value type: {value!r}")

    @classmethod
    def detect(cls, value: Any) -> ValueType | None:
        """Return the ValueType of a runtime value, or None if it has none."""
        if isinstance(value, bool):
            return cls.BOOLEAN
        if isinstance(value, str):
            return cls.STRING
        if isinstance(value, (int, float)):
            return cls.NUMBER
        if isinstance(value, re.Pattern):
            return cls.PATTERN
        if isinstance(value, Mapping):
            return cls.MAPPING
        if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
            return cls.SEQUENCE
        if callable(value):
            return cls.FUNCTION
        return None


class ScopePackage(NamedTuple):
    """Namespace decomposition of a package name.

    org is the "@org" segment (empty for unscoped names), name is the rest.
    """

    org: str
    name: str


class NormalizedModuleRequest(NamedTuple):
    """Canonical package name and display shortcut of a request."""

    name: str | None
    shortcut: str | None


@dataclass(frozen=True)
class CommonModule:
    """Resolved module descriptor.

    Attributes:
        entry: Path, import specifier, request object, or loaded module
        name: Canonical package name (None for object and path requests)
        shortcut: Display name with namespace and type prefix removed
        from_dep: True if found among declared dependencies, False for
            bundled or local defaults, None for object and path requests
    """

    entry: Any = None
    name: str | None = None
    shortcut: str | None = None
    from_dep: bool | None = None

    @property
    def is_empty(self) -> bool:
        """True for the "no module" result of a falsy request."""
        return self.entry is None and self.name is None and self.shortcut is None and self.from_dep is None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (entry rendered as text for non-path values)."""
        entry = self.entry
        if entry is not None and not isinstance(entry, str):
            entry = repr(entry)
        return {
            "entry": entry,
            "name": self.name,
            "shortcut": self.shortcut,
            "from_dep": self.from_dep,
        }
