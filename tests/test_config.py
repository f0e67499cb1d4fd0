"""Tests for turnpike.config — RouterConfig defaults and immutability."""

import dataclasses

import pytest

from turnpike.config import RouterConfig


class TestRouterConfig:
    def test_defaults(self) -> None:
        config = RouterConfig()
        assert config.not_found_body == "Not Found"
        assert config.quote_url_params is True
        assert config.strict is False
        assert config.debug is False
        assert config.max_content_length == 16 * 1024 * 1024

    def test_overrides(self) -> None:
        config = RouterConfig(strict=True, not_found_body="Nope")
        assert config.strict
        assert config.not_found_body == "Nope"

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            RouterConfig().strict = True  # type: ignore[misc]

    def test_replace(self) -> None:
        config = dataclasses.replace(RouterConfig(), debug=True)
        assert config.debug
