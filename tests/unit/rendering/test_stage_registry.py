"""Unit tests for rendering.registry module."""

import pytest

from src.rendering.errors import StageNotFoundError
from src.rendering.registry import StageRegistry, default_registry


class TestStageRegistry:
    """Test cases for StageRegistry class."""

    def test_register_and_get(self):
        registry = StageRegistry()
        factory = lambda options: (lambda tree, context: None)  # noqa: E731

        registry.register("noop", factory)

        assert registry.get("noop") is factory
        assert "noop" in registry
        assert registry.names() == ["noop"]

    def test_unknown_name_raises(self):
        """Looking up an unregistered name raises StageNotFoundError."""
        with pytest.raises(StageNotFoundError) as exc_info:
            StageRegistry().get("missing")

        assert exc_info.value.name == "missing"
        assert "'missing' is not registered" in str(exc_info.value)

    def test_default_registry_names(self):
        assert default_registry.names() == ["external-links", "heading-links", "lazy-images"]
