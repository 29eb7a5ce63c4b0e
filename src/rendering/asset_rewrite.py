"""Final stage rewriting resource paths in rendered markup.

Images whose source is a locally cached raster file are replaced by an
optimization hint: all of the element's attributes, plus an occurrence
index, serialized as JSON into a single attribute. The site build later
expands the hint into an optimized image. Every other relative resource
path is rewritten into a site-absolute path.
"""

import json
import os
import re
from typing import Any, Dict
from urllib.parse import unquote

from bs4 import BeautifulSoup

from .models import RenderContext
from .stages import IMAGE_HINT_ATTRIBUTE, Stage, stage_options

RASTER_EXTENSIONS = {'.avif', '.webp', '.png', '.jpg', '.jpeg', '.gif'}

_PARENT_PREFIX = re.compile(r'^(\.\./)+')


def is_raster_image(path: str) -> bool:
    return os.path.splitext(path)[1].lower() in RASTER_EXTENSIONS


def site_absolute(path: str) -> str:
    """Rewrite a project- or content-relative path to a site-absolute one.

    Example:
        >>> site_absolute("../../assets/notion/a/b.pdf")
        '/assets/notion/a/b.pdf'
        >>> site_absolute("src/assets/notion/a/b.mp4")
        '/assets/notion/a/b.mp4'
    """
    if _PARENT_PREFIX.match(path):
        return _PARENT_PREFIX.sub('/', path, count=1)
    if path.startswith('src/'):
        return '/' + path[len('src/'):]
    return path


def _hint(attrs: Dict[str, Any], index: int) -> str:
    props = {
        key: (' '.join(value) if isinstance(value, list) else value)
        for key, value in attrs.items()
    }
    props['index'] = index
    return json.dumps(props)


def asset_rewrite_stage(options: Any = None) -> Stage:
    """Create the resource path rewriting stage."""
    stage_options(options)

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        local_paths = set(context.asset_paths)
        occurrences: Dict[str, int] = {}

        for node in tree.find_all(True):
            src = node.get('src')
            if isinstance(src, str) and src:
                src = unquote(src)
                node['src'] = src

                if node.name == 'img' and src in local_paths and is_raster_image(src):
                    index = occurrences.get(src, 0)
                    occurrences[src] = index + 1
                    node.attrs = {IMAGE_HINT_ATTRIBUTE: _hint(node.attrs, index)}
                    continue

                node['src'] = site_absolute(src)

            href = node.get('href')
            if isinstance(href, str) and href.startswith('src/'):
                node['href'] = site_absolute(href)

    return stage
