"""Table of contents generation and heading outline extraction.

The table of contents stage builds a navigation structure of the shape

    nav.toc > ol.toc-level > li.toc-item > [a.toc-link[href="#slug"], ol.toc-level?]

from the document's headings, flattens it into a list of HeadingOutlineEntry
records on the render context, and then discards it: the navigation markup
is never inserted into the document.
"""

import logging
from typing import Any, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from .errors import MalformedTocError
from .models import HeadingOutlineEntry, RenderContext
from .stages import HEADING_NAMES, Stage, stage_options

logger = logging.getLogger(__name__)


def _heading_level(tag: Tag) -> int:
    return int(tag.name[1])


def build_toc_nav(tree: BeautifulSoup, headings: Optional[List[str]] = None) -> Tag:
    """Build the navigation structure for a document.

    Only headings that carry an id are listed. A heading deeper than the
    current level opens a sub-list in the previous item. A shallower heading
    returns to the open level with the same heading number; when there is
    none it stays on the current level, which then takes the shallower
    number. Skipped levels therefore never leave gaps in the nesting.

    Args:
        tree: Markup tree whose headings to list
        headings: Heading tag names to include (default h1-h6)

    Returns:
        Detached nav element
    """
    nav = tree.new_tag('nav', attrs={'class': ['toc']})
    root = tree.new_tag('ol', attrs={'class': ['toc-level', 'toc-level-1']})
    nav.append(root)

    # Open levels, outermost first: [heading number, list element]
    levels: List[List[Any]] = []

    for heading in tree.find_all(headings or HEADING_NAMES):
        slug = heading.get('id')
        if not slug:
            continue
        number = _heading_level(heading)

        if not levels:
            levels.append([number, root])
        elif number > levels[-1][0]:
            levels.append([number, _sub_list(tree, levels[-1][1], len(levels) + 1)])
        elif number < levels[-1][0]:
            for index in range(len(levels) - 2, -1, -1):
                if levels[index][0] == number:
                    del levels[index + 1:]
                    break
            else:
                levels[-1][0] = min(levels[-1][0], number)

        item = tree.new_tag('li', attrs={'class': ['toc-item', f'toc-item-{heading.name}']})
        link = tree.new_tag('a', attrs={
            'class': ['toc-link', f'toc-link-{heading.name}'],
            'href': f"#{slug}",
        })
        link.string = heading.get_text()
        item.append(link)
        levels[-1][1].append(item)

    return nav


def _sub_list(tree: BeautifulSoup, parent: Tag, depth: int) -> Tag:
    """Return the sub-list of the parent list's last item, creating it if needed."""
    last_item = parent.find_all('li', recursive=False)[-1]
    existing = last_item.find('ol', recursive=False)
    if existing is not None:
        return existing
    sub_list = tree.new_tag('ol', attrs={'class': ['toc-level', f'toc-level-{depth}']})
    last_item.append(sub_list)
    return sub_list


def _list_items(ol: Tag) -> Iterator[Tag]:
    return iter(ol.find_all('li', recursive=False))


def extract_toc_headings(nav: Any) -> List[HeadingOutlineEntry]:
    """Flatten a navigation structure into an ordered heading outline.

    Args:
        nav: Element produced by build_toc_nav

    Returns:
        Headings in document order with their nesting depth (0-based)

    Raises:
        MalformedTocError: If the element is not a nav with a list, or an item
            does not start with a link
    """
    if not isinstance(nav, Tag) or nav.name != 'nav':
        name = getattr(nav, 'name', type(nav).__name__)
        raise MalformedTocError(f"expected a nav element, got '{name}'")

    root = nav.find('ol', recursive=False)
    if root is None:
        raise MalformedTocError("nav element has no list")

    entries: List[HeadingOutlineEntry] = []
    stack: List[Tuple[Iterator[Tag], int]] = [(_list_items(root), 0)]

    while stack:
        items, depth = stack[-1]
        item = next(items, None)
        if item is None:
            stack.pop()
            continue

        children = [child for child in item.children if isinstance(child, Tag)]
        if not children or children[0].name != 'a':
            raise MalformedTocError("list item does not start with a link")

        link = children[0]
        href = link.get('href') or ''
        entries.append(HeadingOutlineEntry(
            depth=depth,
            text=link.get_text(),
            slug=href[1:] if href.startswith('#') else href,
        ))

        # Last sub-list pushed first so sub-lists flatten in document order
        sub_lists = [child for child in children[1:] if child.name == 'ol']
        for sub_list in reversed(sub_lists):
            stack.append((_list_items(sub_list), depth + 1))

    return entries


def toc_stage(options: Any = None) -> Stage:
    """Record the document's heading outline on the render context."""
    headings = stage_options(options).get("headings")

    def stage(tree: BeautifulSoup, context: RenderContext) -> None:
        nav = build_toc_nav(tree, headings)
        context.headings = extract_toc_headings(nav)
        logger.debug(f"Extracted {len(context.headings)} headings for {context.page_id}")

    return stage
