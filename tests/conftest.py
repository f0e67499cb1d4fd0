"""Shared pytest configuration for turnpike tests."""

import pytest


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"
