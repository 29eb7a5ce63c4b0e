"""Transform chain turning a block tree into rendered markup.

Stage order is fixed:

    1. block tree -> markup tree
    2. heading slugs
    3. math
    4. table of contents (outline recorded, navigation discarded)
    5. caller-supplied stages, in the order given
    6. resource path rewriting
    7. serialization

Caller stages are given as a registered name, a stage factory, or a
``(name_or_factory, options)`` pair. All of them are resolved when the chain
is built, so an unknown stage name fails before any document is rendered.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple, Union

from bs4 import BeautifulSoup

from src.block_fetcher.models import Block

from .asset_rewrite import asset_rewrite_stage
from .html_converter import blocks_to_html
from .models import RenderContext
from .registry import StageRegistry, default_registry
from .stages import Stage, StageFactory, math_stage, slug_stage
from .toc import toc_stage

logger = logging.getLogger(__name__)

StageSpec = Union[str, StageFactory, Tuple[Union[str, StageFactory], Any]]


class TransformChain:
    """An ordered, reusable sequence of transform stages.

    A chain holds no per-render state; one chain may process many documents
    concurrently.

    Example:
        >>> chain = TransformChain(["external-links", ("lazy-images", {"loading": "eager"})])
        >>> context = RenderContext(page_id="abc", asset_paths=[...])
        >>> html = chain.process(blocks, context)
        >>> context.headings
        [HeadingOutlineEntry(depth=0, text='Intro', slug='intro')]
    """

    def __init__(
        self,
        stages: Optional[Sequence[StageSpec]] = None,
        registry: Optional[StageRegistry] = None,
    ):
        """Build the chain.

        Args:
            stages: Caller-supplied stages inserted after the table of contents
            registry: Registry used to look up stage names (default registry
                      if not given)

        Raises:
            StageNotFoundError: If a stage name is not registered
        """
        self._registry = registry or default_registry
        self._caller_stages: List[Stage] = [self._load(spec) for spec in stages or []]

        self._stages: List[Stage] = [
            slug_stage(),
            math_stage(),
            toc_stage(),
            *self._caller_stages,
            asset_rewrite_stage(),
        ]

    def _load(self, spec: StageSpec) -> Stage:
        options = None
        if isinstance(spec, (tuple, list)):
            if len(spec) != 2:
                raise ValueError(f"Stage spec must be (stage, options), got {spec!r}")
            spec, options = spec

        if isinstance(spec, str):
            factory = self._registry.get(spec)
        elif callable(spec):
            factory = spec
        else:
            raise TypeError(f"Stage must be a name or a callable, got {type(spec).__name__}")

        return factory(options)

    @property
    def caller_stage_count(self) -> int:
        return len(self._caller_stages)

    def run(self, tree: BeautifulSoup, context: RenderContext) -> BeautifulSoup:
        """Apply every stage to a markup tree."""
        for stage in self._stages:
            result = stage(tree, context)
            if result is not None:
                tree = result
        return tree

    def process(self, blocks: List[Block], context: RenderContext) -> str:
        """Convert a block tree and run it through the chain.

        Args:
            blocks: Realized block tree
            context: Per-render state; receives the heading outline

        Returns:
            Serialized markup
        """
        tree = self.run(blocks_to_html(blocks), context)
        return tree.decode()
