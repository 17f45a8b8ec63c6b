"""Package naming rules for module requests.

A module kind ("theme") and a default organization ("docsite") give two
prefixes:
- type prefix: "theme-"
- non-scope prefix: "docsite-theme-"

A request names a module by its shortcut ("default"), by its prefixed name
("theme-default", "docsite-theme-default") or under a scope
("@acme/theme-default"). All spellings normalize to the same shortcut.
"""

import re

from .models import NormalizedModuleRequest
from .models import ScopePackage

SCOPE_PATTERN = re.compile(r"^(@[^/]+)/(.+)$")


def resolve_scope_package(name: str) -> ScopePackage:
    """Split a package name into its "@org" segment and the remainder.

    Examples:
        >>> resolve_scope_package("@acme/theme-foo")
        ScopePackage(org='@acme', name='theme-foo')
        >>> resolve_scope_package("theme-foo")
        ScopePackage(org='', name='theme-foo')
    """
    match = SCOPE_PATTERN.match(name)
    if match:
        return ScopePackage(org=match.group(1), name=match.group(2))
    return ScopePackage(org="", name=name)


class NamingRules:
    """Prefix rules for one module kind under one default organization."""

    def __init__(self, kind: str, organization: str = ""):
        if not kind:
            raise ValueError("Module kind must be a non-empty string")
        self.kind = kind
        self.organization = organization.lstrip("@") if organization else ""
        self.type_prefix = f"{kind}-"
        self.non_scope_prefix = f"{self.organization}-{kind}-" if self.organization else self.type_prefix

    def get_shortcut(self, name: str) -> str:
        """Strip the non-scope prefix, else the type prefix."""
        if name.startswith(self.non_scope_prefix) and len(name) > len(self.non_scope_prefix):
            return name[len(self.non_scope_prefix) :]
        if name.startswith(self.type_prefix) and len(name) > len(self.type_prefix):
            return name[len(self.type_prefix) :]
        return name

    def normalize_name(self, request: str) -> NormalizedModuleRequest:
        """Normalize a package name request into (name, shortcut).

        Scoped requests keep their own scope: "@acme/foo" and
        "@acme/theme-foo" both give ("@acme/theme-foo", "foo"). Unscoped
        requests take the default organization: "foo" and "theme-foo" both
        give ("docsite-theme-foo", "foo").
        """
        pkg = resolve_scope_package(request)
        shortcut = self.get_shortcut(pkg.name)
        if pkg.org:
            return NormalizedModuleRequest(name=f"{pkg.org}/{self.type_prefix}{shortcut}", shortcut=shortcut)
        return NormalizedModuleRequest(name=f"{self.non_scope_prefix}{shortcut}", shortcut=shortcut)

    def candidates(self, request: str) -> list[str]:
        """Package names to probe for a request, highest precedence first.

        Order:
        1. The request's own scope: @org/<kind>-<shortcut>
        2. The default organization: <organization>-<kind>-<shortcut>
        3. Unscoped: <kind>-<shortcut>, then <shortcut>
        """
        pkg = resolve_scope_package(request)
        shortcut = self.get_shortcut(pkg.name)

        names = []
        if pkg.org:
            names.append(f"{pkg.org}/{self.type_prefix}{shortcut}")
        if self.organization:
            names.append(f"{self.non_scope_prefix}{shortcut}")
        names.append(f"{self.type_prefix}{shortcut}")
        names.append(shortcut)

        # Keep first occurrence
        return list(dict.fromkeys(names))

    def __repr__(self) -> str:
        return f"NamingRules(kind={self.kind!r}, organization={self.organization!r})"
