from pathlib import Path

import pytest

from mky import Environment
from tests.infrastructure.project_builders import create_template_project, make_environment


@pytest.fixture(autouse=True)
def _no_cache_env(monkeypatch):
    # disk cache toggling must come from the test itself
    monkeypatch.delenv("MKY_CACHE", raising=False)
    monkeypatch.delenv("MKY_DEBUG", raising=False)


@pytest.fixture
def tmpproj(tmp_path: Path) -> Path:
    """Project with default layouts, views and components under templates/."""
    return create_template_project(tmp_path)


@pytest.fixture
def env(tmpproj: Path) -> Environment:
    return make_environment(tmpproj)


@pytest.fixture
def cached_env(tmpproj: Path) -> Environment:
    """Environment with the disk cache under <root>/.mky-cache."""
    return make_environment(tmpproj, cache_dir=tmpproj / ".mky-cache")
