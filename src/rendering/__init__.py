"""Rendering pipeline turning Notion block trees into HTML.

This package converts realized block trees into markup, runs the markup
through an ordered chain of transform stages, and renders complete pages
(property data plus markup) for the content store.
"""

from .errors import MalformedTocError, RenderError, StageNotFoundError
from .html_converter import blocks_to_html
from .models import HeadingOutlineEntry, RenderContext, RenderedDocument, RenderResult
from .pipeline import TransformChain
from .registry import StageRegistry, default_registry
from .renderer import DocumentRenderer
from .stages import IMAGE_HINT_ATTRIBUTE
from .toc import build_toc_nav, extract_toc_headings

__all__ = [
    'MalformedTocError',
    'RenderError',
    'StageNotFoundError',
    'blocks_to_html',
    'HeadingOutlineEntry',
    'RenderContext',
    'RenderedDocument',
    'RenderResult',
    'TransformChain',
    'StageRegistry',
    'default_registry',
    'DocumentRenderer',
    'IMAGE_HINT_ATTRIBUTE',
    'build_toc_nav',
    'extract_toc_headings',
]
