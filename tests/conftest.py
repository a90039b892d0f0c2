"""Shared pytest fixtures for the fastify-starter test suite.

Provides reusable fixtures for:
- The packaged template and materialised copies of it
- Tool settings that never touch the network
- Mocked subprocess execution for the pipeline
- Mocked npm registry transports
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from fastify_starter.config import DEFAULT_TEMPLATE_DIR, Settings
from fastify_starter.scaffolder import materialize


# ---------------------------------------------------------------------------
# Template & Projects
# ---------------------------------------------------------------------------

@pytest.fixture
def template_dir() -> Path:
    """The template tree shipped inside the package."""
    assert (DEFAULT_TEMPLATE_DIR / "package.json").exists(), "packaged template is missing"
    return DEFAULT_TEMPLATE_DIR


@pytest.fixture
def project_dir(tmp_path: Path, template_dir: Path) -> Path:
    """A freshly materialised, not yet customised copy of the template."""
    dest = tmp_path / "demo-app"
    materialize(template_dir, dest)
    yield dest


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def offline_settings(template_dir: Path) -> Settings:
    """Settings that skip registry lookups."""
    return Settings(check_versions=False, template_dir=template_dir)


# ---------------------------------------------------------------------------
# Mock Subprocess
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_run_command():
    """Patch the pipeline's ``run_command`` so no process is ever spawned.

    Usage:
        def test_install(mock_run_command):
            mock_run_command.side_effect = fake  # or keep the default success
            ...
            mock_run_command.assert_not_called()
    """
    mock = AsyncMock(return_value=(0, "", ""))
    with patch("fastify_starter.pipeline.run_command", mock):
        yield mock


# ---------------------------------------------------------------------------
# Mock Registry
# ---------------------------------------------------------------------------

@pytest.fixture
def registry_client() -> Callable[[dict[str, Any]], httpx.AsyncClient]:
    """Factory for an ``httpx.AsyncClient`` backed by a fake npm registry.

    ``versions`` maps a package name to its ``latest`` version string, or to
    an ``httpx`` exception class to raise for that package.  Unknown
    packages answer 404.
    """
    def factory(versions: dict[str, Any]) -> httpx.AsyncClient:
        def handler(request: httpx.Request) -> httpx.Response:
            name = request.url.path[1:].rsplit("/latest", 1)[0]
            answer = versions.get(name)
            if isinstance(answer, type) and issubclass(answer, Exception):
                raise answer("simulated failure", request=request)
            if answer is None:
                return httpx.Response(404, json={"error": "Not found"})
            return httpx.Response(200, json={"name": name, "version": answer})

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return factory
