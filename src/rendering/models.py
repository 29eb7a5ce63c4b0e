"""Data models for the rendering pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.block_fetcher.models import Block


@dataclass
class HeadingOutlineEntry:
    """One heading of a rendered document's table of contents.

    Attributes:
        depth: Nesting depth in the outline (0 = top level)
        text: Heading text
        slug: Anchor id of the heading (without '#')
    """
    depth: int
    text: str
    slug: str

    def to_dict(self) -> Dict[str, Any]:
        return {'depth': self.depth, 'text': self.text, 'slug': self.slug}


@dataclass
class RenderContext:
    """Per-render state shared by the stages of one transform chain run.

    Attributes:
        page_id: Id of the page being rendered (for log messages)
        asset_paths: Content-root-relative paths of locally cached assets
        headings: Outline filled in by the table of contents stage
    """
    page_id: str = ""
    asset_paths: List[str] = field(default_factory=list)
    headings: List[HeadingOutlineEntry] = field(default_factory=list)


@dataclass
class RenderedDocument:
    """Rendered markup and metadata of one page.

    Attributes:
        html: Serialized markup
        headings: Heading outline, in document order
        image_paths: Local asset paths referenced by the render
        blocks: The realized block tree the markup was produced from
    """
    html: str
    headings: List[HeadingOutlineEntry] = field(default_factory=list)
    image_paths: List[str] = field(default_factory=list)
    blocks: List[Block] = field(default_factory=list)


@dataclass
class RenderResult:
    """Outcome of rendering one page; both fields are None on failure."""
    data: Optional[Dict[str, Any]] = None
    rendered: Optional[RenderedDocument] = None

    @property
    def ok(self) -> bool:
        return self.data is not None and self.rendered is not None
