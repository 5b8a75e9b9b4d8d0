"""
Pytest configuration and shared fixtures.
"""

import shutil
from pathlib import Path

import pytest


@pytest.fixture
def fixtures_dir():
    """Return path to test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def avi_workflow(fixtures_dir):
    """Namespaced workflow export with a form, links and an error handler."""
    return fixtures_dir / "vrealize" / "avi" / "create-avi-lb.workflow.xml"


@pytest.fixture
def minimal_workflow(fixtures_dir):
    """Workflow export without namespace or display name."""
    return fixtures_dir / "vrealize" / "minimal.workflow.xml"


@pytest.fixture
def project(tmp_path, fixtures_dir, monkeypatch):
    """Copy of the fixture workflows in a temporary repository, used as cwd."""
    root = tmp_path / "repo"
    shutil.copytree(fixtures_dir / "vrealize", root / "workflows")
    monkeypatch.chdir(root)
    monkeypatch.delenv("VRO_GLOB", raising=False)
    monkeypatch.delenv("VRA_URL", raising=False)
    return root
