"""
Tests for ModuleResolver.

Covers every request form, probe precedence between the request scope,
the default organization and unscoped names, and the per-kind factories.
"""

import os
import re
import sys
import types
from pathlib import Path

import pytest

from docsite_modules.module_resolution.errors import InvalidPathError
from docsite_modules.module_resolution.errors import ModuleNotFoundError
from docsite_modules.module_resolution.errors import ResolutionError
from docsite_modules.module_resolution.errors import UnsupportedTypeError
from docsite_modules.module_resolution.manifest import StaticManifest
from docsite_modules.module_resolution.models import CommonModule
from docsite_modules.module_resolution.models import ValueType
from docsite_modules.module_resolution.resolver import ModuleResolver
from docsite_modules.module_resolution.resolver import get_markdown_it_resolver
from docsite_modules.module_resolution.resolver import get_plugin_resolver
from docsite_modules.module_resolution.resolver import get_theme_resolver
from docsite_modules.settings import ModuleSettings

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="POSIX paths")


class RecordingManifest:
    """Manifest that records every name it is asked about."""

    def __init__(self, *names: str):
        self.names = set(names)
        self.queries: list[str] = []

    def has_dependency(self, name: str) -> bool:
        self.queries.append(name)
        return name in self.names


class RecordingLoader:
    def __init__(self):
        self.loaded: list[str] = []

    def load(self, entry: str) -> object:
        self.loaded.append(entry)
        return types.SimpleNamespace(entry=entry)


def theme_resolver(*declared: str, **kwargs) -> ModuleResolver:
    kwargs.setdefault("cwd", "/proj")
    return ModuleResolver("theme", "mysite", manifest=StaticManifest(declared), **kwargs)


class TestEmptyRequests:
    @pytest.mark.parametrize("request_value", [None, "", 0, False, {}, []])
    def test_falsy_request_returns_empty_module(self, request_value):
        manifest = RecordingManifest()
        resolver = ModuleResolver("theme", "mysite", manifest=manifest)

        module = resolver.resolve(request_value)

        assert module == CommonModule(None, None, None, None)
        assert module.is_empty
        assert manifest.queries == []


class TestObjectRequests:
    def test_mapping_is_used_unchanged(self):
        manifest = RecordingManifest("mysite-theme-foo")
        resolver = ModuleResolver("theme", "mysite", [ValueType.MAPPING], manifest=manifest)
        plugin = {"render": lambda tokens: tokens}

        module = resolver.resolve(plugin)

        assert module.entry is plugin
        assert module.name is None
        assert module.shortcut is None
        assert module.from_dep is None
        assert manifest.queries == []

    def test_named_mapping_is_not_normalized(self):
        resolver = ModuleResolver("plugin", "mysite", [dict], manifest=StaticManifest())

        module = resolver.resolve({"name": "plugin-toc"})

        assert module.name is None
        assert module.shortcut is None

    def test_function_allowed_by_builtin_type_name(self):
        resolver = ModuleResolver("plugin", "mysite", [str, "function"])

        def render(md):
            return md

        assert resolver.resolve(render).entry is render

    def test_module_object_always_allowed(self):
        resolver = ModuleResolver("plugin", "mysite", [ValueType.STRING])

        assert resolver.resolve(re).entry is re

    @pytest.mark.parametrize("request_value", [{"render": None}, [1, 2], 42, True, re.compile("x")])
    def test_disallowed_type_raises(self, request_value):
        resolver = ModuleResolver("theme", "mysite", [ValueType.STRING, ValueType.FUNCTION])

        with pytest.raises(UnsupportedTypeError) as exc_info:
            resolver.resolve(request_value)

        assert exc_info.value.request is request_value
        assert exc_info.value.allowed == ["function", "string"]
        assert isinstance(exc_info.value, ResolutionError)

    def test_plain_object_never_allowed(self):
        resolver = ModuleResolver("theme", "mysite")

        with pytest.raises(UnsupportedTypeError):
            resolver.resolve(object())

    def test_object_truth_value_never_evaluated(self):
        class Frame:
            def __bool__(self):
                raise ValueError("truth value is ambiguous")

        request_value = Frame()

        with pytest.raises(UnsupportedTypeError) as exc_info:
            ModuleResolver("theme", "mysite").resolve(request_value)

        assert exc_info.value.request is request_value

    def test_default_allows_every_value_type(self):
        resolver = ModuleResolver("theme", "mysite")

        assert resolver.allowed_types == frozenset(ValueType)
        assert resolver.resolve([1]).entry == [1]

    def test_unknown_allowed_type_rejected_at_construction(self):
        with pytest.raises(ValueError):
            ModuleResolver("theme", "mysite", ["widget"])


@posix_only
class TestPathRequests:
    def test_absolute_path_entry_is_unchanged(self):
        resolver = theme_resolver()

        module = resolver.resolve("/site/themes/mysite-theme-night.py")

        assert module.entry == "/site/themes/mysite-theme-night.py"
        assert module.name is None
        assert module.from_dep is None
        assert module.shortcut == "night"

    def test_absolute_path_need_not_exist(self, tmp_path):
        missing = str(tmp_path / "nope")
        assert theme_resolver().resolve(missing).entry == missing

    def test_relative_path_joined_to_cwd(self):
        resolver = theme_resolver()

        module = resolver.resolve("./local-theme", "/proj")

        assert module == CommonModule("/proj/local-theme", None, None, None)

    def test_relative_path_uses_resolver_cwd_by_default(self):
        resolver = theme_resolver(cwd="/site")

        assert resolver.resolve("../shared/theme").entry == "/shared/theme"

    def test_relative_path_follows_call_cwd(self):
        resolver = theme_resolver()

        first = resolver.resolve("./local-theme", "/a")
        second = resolver.resolve("./local-theme", "/b")
        third = resolver.resolve("./local-theme")

        assert first.entry == "/a/local-theme"
        assert second.entry == "/b/local-theme"
        assert third.entry == "/proj/local-theme"
        assert resolver.cwd == "/proj"

    def test_call_cwd_accepts_path_objects(self):
        assert theme_resolver().resolve("./t", Path("/x")).entry == "/x/t"

    @pytest.mark.parametrize("request_value", ["/site//theme", "./themes//dark", "/site/\x00theme"])
    def test_invalid_paths_rejected(self, request_value):
        with pytest.raises(InvalidPathError) as exc_info:
            theme_resolver().resolve(request_value)

        assert exc_info.value.request == request_value

    def test_trailing_separator_is_valid(self):
        assert theme_resolver().resolve("./themes/dark/").entry == "/proj/themes/dark"

    def test_path_requests_never_probe_manifest(self):
        manifest = RecordingManifest()
        resolver = ModuleResolver("theme", "mysite", cwd="/proj", manifest=manifest)

        resolver.resolve("./local-theme")
        resolver.resolve("/abs/theme")

        assert manifest.queries == []


class TestPackageRequests:
    def test_default_organization_dependency(self):
        resolver = theme_resolver("mysite-theme-foo")

        module = resolver.resolve("foo")

        assert module.entry == "mysite-theme-foo"
        assert module.name == "mysite-theme-foo"
        assert module.shortcut == "foo"
        assert module.from_dep is True

    @pytest.mark.parametrize("request_name", ["foo", "theme-foo", "mysite-theme-foo"])
    def test_prefixed_spellings_resolve_alike(self, request_name):
        module = theme_resolver("mysite-theme-foo").resolve(request_name)

        assert module.name == "mysite-theme-foo"
        assert module.shortcut == "foo"

    def test_not_found_lists_candidates_in_order(self):
        resolver = theme_resolver()

        with pytest.raises(ModuleNotFoundError) as exc_info:
            resolver.resolve("bar")

        assert exc_info.value.candidates == ["mysite-theme-bar", "theme-bar", "bar"]
        assert exc_info.value.request == "bar"
        assert "mysite-theme-bar" in str(exc_info.value)

    def test_probe_order(self):
        manifest = RecordingManifest()
        resolver = ModuleResolver("theme", "mysite", cwd="/proj", manifest=manifest)

        with pytest.raises(ModuleNotFoundError):
            resolver.resolve("@acme/foo")

        assert manifest.queries == ["@acme/theme-foo", "mysite-theme-foo", "theme-foo", "foo"]

    def test_request_scope_beats_default_organization(self):
        module = theme_resolver("@acme/theme-foo", "mysite-theme-foo").resolve("@acme/foo")

        assert module.name == "@acme/theme-foo"
        assert module.shortcut == "foo"
        assert module.from_dep is True

    def test_default_organization_beats_unscoped(self):
        module = theme_resolver("mysite-theme-foo", "theme-foo").resolve("foo")

        assert module.name == "mysite-theme-foo"

    def test_scoped_request_falls_back_to_default_organization(self):
        module = theme_resolver("mysite-theme-foo", "foo").resolve("@acme/theme-foo")

        assert module.name == "mysite-theme-foo"
        assert module.shortcut == "foo"

    def test_unscoped_fallback(self):
        module = theme_resolver("foo").resolve("foo")

        assert module.name == "foo"
        assert module.entry == "foo"
        assert module.from_dep is True

    def test_no_organization_skips_default_candidate(self):
        manifest = RecordingManifest()
        resolver = ModuleResolver("theme", cwd="/proj", manifest=manifest)

        with pytest.raises(ModuleNotFoundError) as exc_info:
            resolver.resolve("bar")

        assert exc_info.value.candidates == ["theme-bar", "bar"]

    def test_bundled_default_is_not_from_dep(self, tmp_path):
        bundled = tmp_path / "bundled"
        (bundled / "theme-default").mkdir(parents=True)
        resolver = ModuleResolver("theme", "mysite", cwd=tmp_path, manifest=StaticManifest(), bundled_paths=[bundled])

        module = resolver.resolve("default")

        assert module.entry == str(bundled / "theme-default")
        assert module.name == "theme-default"
        assert module.shortcut == "default"
        assert module.from_dep is False

    def test_dependency_beats_default_for_same_candidate(self, tmp_path):
        bundled = tmp_path / "bundled"
        (bundled / "theme-default").mkdir(parents=True)
        resolver = ModuleResolver(
            "theme", "mysite", cwd=tmp_path, manifest=StaticManifest(["theme-default"]), bundled_paths=[bundled]
        )

        module = resolver.resolve("default")

        assert module.from_dep is True

    def test_higher_candidate_default_beats_lower_dependency(self, tmp_path):
        bundled = tmp_path / "bundled"
        bundled.mkdir()
        (bundled / "mysite-theme-default.py").write_text("")
        resolver = ModuleResolver(
            "theme", "mysite", cwd=tmp_path, manifest=StaticManifest(["theme-default"]), bundled_paths=[bundled]
        )

        module = resolver.resolve("default")

        assert module.name == "mysite-theme-default"
        assert module.from_dep is False

    @pytest.mark.parametrize(
        "request_name", ["default/../..", "default/..", "foo//bar", "foo/./bar", "foo\\..\\bar"]
    )
    def test_package_name_cannot_leave_search_paths(self, tmp_path, request_name):
        bundled = tmp_path / "bundled"
        (bundled / "theme-default").mkdir(parents=True)
        manifest = RecordingManifest()
        resolver = ModuleResolver("theme", "mysite", cwd=tmp_path, manifest=manifest, bundled_paths=[bundled])

        with pytest.raises(InvalidPathError) as exc_info:
            resolver.resolve(request_name)

        assert exc_info.value.request == request_name
        assert manifest.queries == []

    def test_project_manifest_read_from_call_cwd(self, project):
        resolver = ModuleResolver("theme", "mysite", cwd="/nonexistent")

        module = resolver.resolve("foo", project)

        assert module.name == "mysite-theme-foo"
        assert module.from_dep is True

    def test_project_manifest_package_json_scope(self, project):
        module = ModuleResolver("theme", "mysite").resolve("@acme/dark", project)

        assert module.name == "@acme/theme-dark"
        assert module.shortcut == "dark"

    def test_project_manifest_changes_between_calls(self, project):
        resolver = ModuleResolver("theme", "mysite", cwd=project)
        assert resolver.resolve("classic").name == "theme-classic"

        (project / "pyproject.toml").write_text('[project]\nname = "x"\ndependencies = []\n')

        with pytest.raises(ModuleNotFoundError):
            resolver.resolve("classic")

    def test_unreadable_manifest_is_resolution_error(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text("[project\n")
        resolver = ModuleResolver("theme", "mysite", cwd=tmp_path)

        with pytest.raises(ResolutionError):
            resolver.resolve("foo")

    def test_probe_os_error_is_resolution_error(self):
        class BrokenManifest:
            def has_dependency(self, name):
                raise PermissionError("denied")

        resolver = ModuleResolver("theme", "mysite", manifest=BrokenManifest())

        with pytest.raises(ResolutionError) as exc_info:
            resolver.resolve("foo")

        assert isinstance(exc_info.value.__cause__, PermissionError)

    def test_workspace_module_used_as_entry(self, tmp_path):
        workspace_module = tmp_path / ".docsite" / "modules" / "mysite-theme-foo"
        workspace_module.mkdir(parents=True)
        resolver = ModuleResolver("theme", "mysite", cwd=tmp_path, manifest=StaticManifest(["mysite-theme-foo"]))

        assert resolver.resolve("foo").entry == str(workspace_module)


class TestAutoLoad:
    def test_package_entry_loaded(self):
        loader = RecordingLoader()
        resolver = theme_resolver("mysite-theme-foo", auto_load=True, loader=loader)

        module = resolver.resolve("foo")

        assert loader.loaded == ["mysite-theme-foo"]
        assert module.entry.entry == "mysite-theme-foo"
        assert module.name == "mysite-theme-foo"

    @posix_only
    def test_path_entry_loaded(self):
        loader = RecordingLoader()
        resolver = theme_resolver(auto_load=True, loader=loader)

        resolver.resolve("./local-theme")

        assert loader.loaded == ["/proj/local-theme"]

    def test_object_request_not_loaded(self):
        loader = RecordingLoader()
        resolver = theme_resolver(auto_load=True, loader=loader)

        resolver.resolve({"render": None})

        assert loader.loaded == []

    def test_lazy_by_default(self):
        loader = RecordingLoader()
        resolver = theme_resolver("mysite-theme-foo", loader=loader)

        assert resolver.resolve("foo").entry == "mysite-theme-foo"
        assert loader.loaded == []


class TestNormalizeRequest:
    @pytest.fixture
    def resolver(self):
        return theme_resolver()

    def test_string(self, resolver):
        assert resolver.normalize_request("theme-foo") == ("mysite-theme-foo", "foo")

    def test_mapping_with_name(self, resolver):
        assert resolver.normalize_request({"name": "@acme/foo"}) == ("@acme/theme-foo", "foo")

    def test_object_with_shortcut_only(self, resolver):
        request = types.SimpleNamespace(shortcut="night")
        assert resolver.normalize_request(request) == ("night", "night")

    def test_anonymous_object(self, resolver):
        assert resolver.normalize_request(lambda: None) == (None, None)


class TestConcurrentUse:
    def test_resolutions_are_independent(self):
        from concurrent.futures import ThreadPoolExecutor

        resolver = theme_resolver("mysite-theme-foo")
        requests = [("foo", None), ("./a", "/x"), ("./a", "/y"), (None, None)] * 25

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda args: resolver.resolve(*args), requests))

        expected = [resolver.resolve(*args) for args in requests]
        assert results == expected
        assert resolver.cwd == "/proj"


class TestFactories:
    def test_plugin_resolver(self, tmp_path):
        resolver = get_plugin_resolver(tmp_path)

        assert resolver.kind == "plugin"
        assert resolver.organization == "docsite"
        assert resolver.auto_load is True
        assert resolver.allowed_types == {ValueType.STRING, ValueType.FUNCTION, ValueType.MAPPING}
        assert resolver.cwd == str(tmp_path)

    def test_theme_resolver(self, tmp_path):
        resolver = get_theme_resolver(tmp_path)

        assert resolver.kind == "theme"
        assert resolver.auto_load is False
        assert resolver.allowed_types == {ValueType.STRING}

    def test_markdown_it_resolver(self, tmp_path):
        resolver = get_markdown_it_resolver(tmp_path)

        assert resolver.kind == "markdown-it"
        assert resolver.organization == ""
        assert resolver.auto_load is True
        assert resolver.allowed_types == {ValueType.STRING, ValueType.FUNCTION}
        assert resolver.candidates("anchor") == ["markdown-it-anchor", "anchor"]

    def test_markdown_it_resolver_finds_declared_plugin(self, tmp_path):
        (tmp_path / "package.json").write_text('{"dependencies": {"markdown-it-anchor": "^8.0.0"}}')
        resolver = get_markdown_it_resolver(tmp_path, ModuleSettings(auto_load=False))

        module = resolver.resolve("anchor")

        assert module.name == "markdown-it-anchor"
        assert module.shortcut == "anchor"
        assert module.from_dep is True

    def test_settings_applied(self, tmp_path):
        settings = ModuleSettings(organization="acme", bundled_paths=["vendor/themes"], auto_load=True)

        resolver = get_theme_resolver(tmp_path, settings)

        assert resolver.organization == "acme"
        assert resolver.auto_load is True
        assert resolver.defaults.bundled_paths == [tmp_path / "vendor" / "themes"]

    def test_settings_read_from_project(self, tmp_path):
        (tmp_path / ".docsite").mkdir()
        (tmp_path / ".docsite" / "settings.yaml").write_text("modules:\n  organization: acme\n")

        assert get_theme_resolver(tmp_path).organization == "acme"

    def test_factory_resolves_bundled_theme(self, tmp_path):
        vendor = tmp_path / "vendor"
        (vendor / "theme-default").mkdir(parents=True)
        resolver = get_theme_resolver(tmp_path, ModuleSettings(bundled_paths=[str(vendor)]))

        module = resolver.resolve("default")

        assert module.entry == str(vendor / "theme-default")
        assert module.from_dep is False


def test_repr():
    assert repr(theme_resolver()) == "ModuleResolver(kind='theme', organization='mysite', auto_load=False)"


def test_cwd_defaults_to_process_cwd():
    assert ModuleResolver("theme").cwd == os.getcwd()


@posix_only
def test_relative_cwd_made_absolute(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    loader = RecordingLoader()
    resolver = ModuleResolver("plugin", cwd="site", auto_load=True, loader=loader)

    resolver.resolve("./local")
    resolver.resolve("./local", "other")

    assert resolver.cwd == str(tmp_path / "site")
    assert loader.loaded == [str(tmp_path / "site" / "local"), str(tmp_path / "other" / "local")]
