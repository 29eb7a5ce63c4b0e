"""Test fixtures for Notion content sync tests.

This module provides test fixtures for:
- Notion page, block and rich text objects as returned by the API
- Signed Notion file URLs for asset cache tests
"""

from .notion_objects import (
    DATABASE_ID,
    PAGE_ID_A,
    PAGE_ID_B,
    PAGE_ID_C,
    WORKSPACE_ID,
    make_block,
    make_page,
    partial_page,
    rich_text,
    paragraph,
    heading,
    bulleted_item,
    numbered_item,
    image_block,
    notion_file_url,
)

__all__ = [
    'DATABASE_ID',
    'PAGE_ID_A',
    'PAGE_ID_B',
    'PAGE_ID_C',
    'WORKSPACE_ID',
    'make_block',
    'make_page',
    'partial_page',
    'rich_text',
    'paragraph',
    'heading',
    'bulleted_item',
    'numbered_item',
    'image_block',
    'notion_file_url',
]
