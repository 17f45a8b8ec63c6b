"""Pytest configuration for docsite-modules tests."""

import sys
from pathlib import Path
from textwrap import dedent

import pytest

# Make the docsite_modules package importable without installation
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch):
    """Keep user settings and environment overrides out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("DOCSITE_ORGANIZATION", raising=False)
    return home


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """
    Create a site project declaring theme and plugin dependencies.

    Declares:
    - mysite-theme-foo (pyproject.toml)
    - theme-classic (pyproject.toml, optional dependency)
    - @acme/theme-dark (package.json)
    """
    project_dir = tmp_path / "proj"
    project_dir.mkdir()
    (project_dir / "pyproject.toml").write_text(
        dedent("""
        [project]
        name = "my-site"
        version = "1.0.0"
        dependencies = ["mysite-theme-foo>=1.0", "click"]

        [project.optional-dependencies]
        themes = ["theme-classic"]
        """)
    )
    (project_dir / "package.json").write_text('{"dependencies": {"@acme/theme-dark": "^2.0.0"}}')
    return project_dir
