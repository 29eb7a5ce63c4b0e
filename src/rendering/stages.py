"""Transform stages operating on a document's markup tree.

A stage is a callable ``stage(tree, context)`` that modifies the tree in
place (or returns a replacement tree). Stages are created by factories that
accept a single options value, so one factory can be configured differently
per transform chain:

    >>> stage = external_links_stage({"target": "_blank"})
    >>> stage(tree, context)

Per-render state (heading slugs, the heading outline, occurrence counters)
lives in the RenderContext or in locals, never on the stage, so one chain can
render many documents concurrently.
"""

import logging
from typing import Any, Callable, Dict, Optional

from bs4 import BeautifulSoup

from .html_converter import class_list
from .models import RenderContext
from .slugger import Slugger

logger = logging.getLogger(__name__)

Stage = Callable[[BeautifulSoup, RenderContext], Optional[BeautifulSoup]]
StageFactory = Callable[[Any], Stage]

HEADING_NAMES = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

IMAGE_HINT_ATTRIBUTE = '__ASTRO_IMAGE_'


def stage_options(options: Any) -> Dict[str, Any]:
    if options is None:
        return {}
    if not isinstance(options, dict):
        raise TypeError(f"Stage options must be a mapping, got {type(options).__name__}")
    return options


def slug_stage(options: Any = None) -> Stage:
    """Give every heading without an id a unique slug id."""
    prefix = stage_options(options).get('prefix', '')

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        slugger = Slugger()
        for heading in tree.find_all(HEADING_NAMES):
            if not heading.get('id'):
                heading['id'] = prefix + slugger.slug(heading.get_text())

    return stage


def math_stage(options: Any = None) -> Stage:
    """Prepare equations for client-side typesetting.

    Inline equations become ``\\(...\\)`` and display equations ``\\[...\\]``;
    the source expression is kept in a data-latex attribute.
    """
    stage_options(options)

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        for node in tree.find_all(class_='math'):
            if node.has_attr('data-latex'):
                continue
            classes = class_list(node)
            expression = node.get_text()
            node['data-latex'] = expression
            if 'math-display' in classes:
                node.string = f"\\[{expression}\\]"
            elif 'math-inline' in classes:
                node.string = f"\\({expression}\\)"

    return stage


def external_links_stage(options: Any = None) -> Stage:
    """Open absolute http(s) links in a new tab."""
    opts = stage_options(options)
    target = opts.get('target', '_blank')
    rel = opts.get('rel', ['noopener', 'noreferrer'])

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        for link in tree.find_all('a', href=True):
            if link['href'].startswith(('http://', 'https://')):
                if target:
                    link['target'] = target
                if rel:
                    link['rel'] = list(rel)

    return stage


def lazy_images_stage(options: Any = None) -> Stage:
    """Add native lazy loading attributes to every image."""
    opts = stage_options(options)
    loading = opts.get('loading', 'lazy')
    decoding = opts.get('decoding', 'async')

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        for image in tree.find_all('img'):
            if image.has_attr(IMAGE_HINT_ATTRIBUTE):
                continue
            image['loading'] = loading
            image['decoding'] = decoding

    return stage


def heading_links_stage(options: Any = None) -> Stage:
    """Append a self-link anchor to every heading with an id."""
    opts = stage_options(options)
    content = opts.get('content', '#')
    class_name = opts.get('class', 'heading-anchor')

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        for heading in tree.find_all(HEADING_NAMES):
            slug = heading.get('id')
            if not slug:
                continue
            anchor = tree.new_tag('a', attrs={
                'class': [class_name],
                'href': f"#{slug}",
                'aria-hidden': 'true',
            })
            anchor.string = content
            heading.append(anchor)

    return stage
