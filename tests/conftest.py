"""Global test fixtures for reviewthreads."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reviewthreads.config import Config, set_config
from reviewthreads.github_api import GitHubClient

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.fixture(autouse=True)
def _default_config():
    """Reset config to defaults before every test.

    ``REVIEWTHREADS_*`` variables in the developer's shell must not leak
    into tests that rely on the defaults.
    """
    set_config(Config())
    yield
    set_config(Config())


@pytest.fixture
def github(mocker: MockerFixture):
    """A GitHubClient stand-in whose rest/graphql/aclose are AsyncMocks."""
    client = mocker.create_autospec(GitHubClient, instance=True)
    client.api_url = "https://api.github.com"
    return client
