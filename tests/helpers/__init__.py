"""Test helper modules for Notion content sync testing.

This package provides in-memory collaborators for unit and integration tests:
- fake_notion: Canned Notion API serving pages and block children
- fake_renderer: Renderer stand-in with scripted outcomes
"""

from .fake_notion import FakeNotionAPI
from .fake_renderer import FakeRenderer, FakeRendererFactory

__all__ = [
    'FakeNotionAPI',
    'FakeRenderer',
    'FakeRendererFactory',
]
