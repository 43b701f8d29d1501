"""Global pytest configuration and fixtures.

Tests under tests/integration need Docker and are marked `integration`
so they can be deselected with `-m "not integration"`.
"""

from __future__ import annotations

from pathlib import Path

INTEGRATION_DIR = Path(__file__).parent / "integration"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: test runs against a MongoDB container started with Docker"
    )


def pytest_collection_modifyitems(config, items):
    """Mark every test collected from the integration directory."""
    import pytest

    for item in items:
        if INTEGRATION_DIR in Path(item.path).parents:
            item.add_marker(pytest.mark.integration)
