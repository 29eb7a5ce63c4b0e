"""Block tree to HTML conversion.

This module turns a realized block tree into a BeautifulSoup markup tree.
Consecutive list items are grouped into a single ul/ol, nested content is
placed inside the element of its parent block, and rich text annotations
become inline elements.

Conversion uses an explicit work queue so trees nested deeper than Python's
recursion limit convert without error.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag

from src.block_fetcher.models import Block
from src.notion_api.properties import file_to_url, rich_text_to_plain_text

logger = logging.getLogger(__name__)

# html.parser is used for every tree: no XML entity expansion
PARSER = "html.parser"

HEADING_TAGS = {'heading_1': 'h1', 'heading_2': 'h2', 'heading_3': 'h3'}

LIST_TAGS = {
    'bulleted_list_item': 'ul',
    'numbered_list_item': 'ol',
    'to_do': 'ul',
}

# Innermost first
ANNOTATION_TAGS = [
    ('code', 'code'),
    ('strikethrough', 'del'),
    ('underline', 'u'),
    ('italic', 'em'),
    ('bold', 'strong'),
]

Rendered = Tuple[List[Tag], Optional[Tag]]


def new_document(markup: str = "") -> BeautifulSoup:
    """Create an empty (or parsed) markup tree."""
    return BeautifulSoup(markup, PARSER)


def class_list(tag: Tag) -> List[str]:
    """Return the class attribute of a tag as a list."""
    value = tag.get('class')
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def rich_text_to_nodes(soup: BeautifulSoup, items: Optional[List[Dict[str, Any]]]) -> List[Any]:
    """Convert rich text items into inline markup nodes."""
    return [_rich_text_node(soup, item) for item in items or []]


def _rich_text_node(soup: BeautifulSoup, item: Dict[str, Any]):
    item_type = item.get('type')

    if item_type == 'equation':
        node = soup.new_tag('span', attrs={'class': ['math', 'math-inline']})
        expression = (item.get('equation') or {}).get('expression')
        node.string = expression if expression is not None else item.get('plain_text', '')
        return node

    text = item.get('plain_text')
    if text is None:
        text = (item.get('text') or {}).get('content', '')
    node = NavigableString(text)

    annotations = item.get('annotations') or {}
    for key, tag_name in ANNOTATION_TAGS:
        if annotations.get(key):
            wrapper = soup.new_tag(tag_name)
            wrapper.append(node)
            node = wrapper

    color = annotations.get('color')
    if color and color != 'default':
        wrapper = soup.new_tag('span', attrs={'class': [f'color-{color}']})
        wrapper.append(node)
        node = wrapper

    if item_type == 'mention':
        mention_type = (item.get('mention') or {}).get('type', '')
        wrapper = soup.new_tag(
            'span', attrs={'class': ['mention'], 'data-mention-type': mention_type}
        )
        wrapper.append(node)
        node = wrapper

    href = item.get('href')
    if href:
        wrapper = soup.new_tag('a', attrs={'href': href})
        wrapper.append(node)
        node = wrapper

    return node


def _with_color(tag: Tag, payload: Dict[str, Any]) -> Tag:
    color = payload.get('color')
    if color and color != 'default':
        tag['class'] = class_list(tag) + [f'color-{color}']
    return tag


def _append_all(tag: Tag, nodes: List[Any]) -> Tag:
    for node in nodes:
        tag.append(node)
    return tag


def _caption(soup: BeautifulSoup, payload: Dict[str, Any]) -> Optional[Tag]:
    caption = payload.get('caption') or []
    if not caption:
        return None
    return _append_all(soup.new_tag('figcaption'), rich_text_to_nodes(soup, caption))


def _children_wrapper(soup: BeautifulSoup, block: Block) -> Optional[Tag]:
    if not block.children:
        return None
    return soup.new_tag('div', attrs={'class': ['block-children']})


class HtmlConverter:
    """Converts realized block trees into markup trees.

    Example:
        >>> tree = HtmlConverter().convert(blocks)
        >>> str(tree)
        '<p>Hello</p>'
    """

    def __init__(self):
        self._renderers: Dict[str, Callable[[BeautifulSoup, Block], Rendered]] = {
            'paragraph': self._paragraph,
            'heading_1': self._heading,
            'heading_2': self._heading,
            'heading_3': self._heading,
            'bulleted_list_item': self._list_item,
            'numbered_list_item': self._list_item,
            'to_do': self._list_item,
            'toggle': self._toggle,
            'quote': self._quote,
            'callout': self._callout,
            'code': self._code,
            'equation': self._equation,
            'divider': self._divider,
            'image': self._image,
            'video': self._media,
            'audio': self._media,
            'file': self._file,
            'pdf': self._file,
            'bookmark': self._bookmark,
            'link_preview': self._bookmark,
            'embed': self._embed,
            'table': self._table,
            'column_list': self._container,
            'column': self._container,
            'synced_block': self._container,
            'child_page': self._child_title,
            'child_database': self._child_title,
            'link_to_page': self._link_to_page,
            'table_of_contents': self._table_of_contents,
            'breadcrumb': self._skip,
        }

    def convert(self, blocks: List[Block]) -> BeautifulSoup:
        """Convert a block tree into a markup tree.

        Args:
            blocks: Top-level blocks with their children realized

        Returns:
            BeautifulSoup fragment holding the converted markup
        """
        soup = new_document()
        queue: List[Tuple[List[Block], Tag]] = [(blocks, soup)]

        while queue:
            siblings, container = queue.pop()
            current_list: Optional[Tag] = None
            current_list_type: Optional[str] = None

            for block in siblings:
                list_tag = LIST_TAGS.get(block.type)
                if list_tag is not None:
                    if current_list is None or current_list_type != block.type:
                        current_list = soup.new_tag(list_tag)
                        if block.type == 'to_do':
                            current_list['class'] = ['to-do-list']
                        container.append(current_list)
                        current_list_type = block.type
                    parent = current_list
                else:
                    current_list = None
                    current_list_type = None
                    parent = container

                renderer = self._renderers.get(block.type, self._unsupported)
                elements, child_container = renderer(soup, block)
                for element in elements:
                    parent.append(element)

                if block.children and child_container is not None:
                    queue.append((block.children, child_container))

        return soup

    def _paragraph(self, soup: BeautifulSoup, block: Block) -> Rendered:
        p = _with_color(soup.new_tag('p'), block.payload)
        _append_all(p, rich_text_to_nodes(soup, block.payload.get('rich_text')))
        wrapper = _children_wrapper(soup, block)
        return ([p, wrapper] if wrapper is not None else [p]), wrapper

    def _heading(self, soup: BeautifulSoup, block: Block) -> Rendered:
        heading = _with_color(soup.new_tag(HEADING_TAGS[block.type]), block.payload)
        _append_all(heading, rich_text_to_nodes(soup, block.payload.get('rich_text')))

        if block.payload.get('is_toggleable'):
            details = soup.new_tag('details', attrs={'class': ['toggle-heading']})
            summary = soup.new_tag('summary')
            summary.append(heading)
            details.append(summary)
            return [details], details

        wrapper = _children_wrapper(soup, block)
        return ([heading, wrapper] if wrapper is not None else [heading]), wrapper

    def _list_item(self, soup: BeautifulSoup, block: Block) -> Rendered:
        li = _with_color(soup.new_tag('li'), block.payload)
        if block.type == 'to_do':
            checkbox = soup.new_tag('input', attrs={'type': 'checkbox', 'disabled': ''})
            if block.payload.get('checked'):
                checkbox['checked'] = ''
            li.append(checkbox)
        _append_all(li, rich_text_to_nodes(soup, block.payload.get('rich_text')))
        return [li], li

    def _toggle(self, soup: BeautifulSoup, block: Block) -> Rendered:
        details = _with_color(soup.new_tag('details'), block.payload)
        summary = _append_all(
            soup.new_tag('summary'), rich_text_to_nodes(soup, block.payload.get('rich_text'))
        )
        details.append(summary)
        return [details], details

    def _quote(self, soup: BeautifulSoup, block: Block) -> Rendered:
        quote = _with_color(soup.new_tag('blockquote'), block.payload)
        _append_all(quote, rich_text_to_nodes(soup, block.payload.get('rich_text')))
        return [quote], quote

    def _callout(self, soup: BeautifulSoup, block: Block) -> Rendered:
        callout = _with_color(soup.new_tag('div', attrs={'class': ['callout']}), block.payload)

        icon = block.payload.get('icon') or {}
        if icon.get('type') == 'emoji':
            icon_tag = soup.new_tag('span', attrs={'class': ['callout-icon']})
            icon_tag.string = icon.get('emoji', '')
            callout.append(icon_tag)
        else:
            url = file_to_url(icon)
            if url:
                callout.append(
                    soup.new_tag('img', attrs={'class': ['callout-icon'], 'src': url, 'alt': ''})
                )

        content = soup.new_tag('div', attrs={'class': ['callout-content']})
        text = rich_text_to_nodes(soup, block.payload.get('rich_text'))
        if text:
            content.append(_append_all(soup.new_tag('p'), text))
        callout.append(content)
        return [callout], content

    def _code(self, soup: BeautifulSoup, block: Block) -> Rendered:
        language = block.payload.get('language') or 'plain text'
        pre = soup.new_tag('pre')
        code = soup.new_tag(
            'code', attrs={'class': [f"language-{language.replace(' ', '-')}"]}
        )
        code.string = rich_text_to_plain_text(block.payload.get('rich_text') or [])
        pre.append(code)

        caption = _caption(soup, block.payload)
        if caption is None:
            return [pre], None
        figure = soup.new_tag('figure', attrs={'class': ['code']})
        figure.append(pre)
        figure.append(caption)
        return [figure], None

    def _equation(self, soup: BeautifulSoup, block: Block) -> Rendered:
        div = soup.new_tag('div', attrs={'class': ['math', 'math-display']})
        div.string = block.payload.get('expression') or ''
        return [div], None

    def _divider(self, soup: BeautifulSoup, block: Block) -> Rendered:
        return [soup.new_tag('hr')], None

    def _image(self, soup: BeautifulSoup, block: Block) -> Rendered:
        url = file_to_url(block.payload)
        if not url:
            return self._unsupported(soup, block)
        figure = soup.new_tag('figure', attrs={'class': ['image']})
        alt = rich_text_to_plain_text(block.payload.get('caption') or [])
        figure.append(soup.new_tag('img', attrs={'src': url, 'alt': alt}))
        caption = _caption(soup, block.payload)
        if caption is not None:
            figure.append(caption)
        return [figure], None

    def _media(self, soup: BeautifulSoup, block: Block) -> Rendered:
        url = file_to_url(block.payload)
        if not url:
            return self._unsupported(soup, block)
        figure = soup.new_tag('figure', attrs={'class': [block.type]})
        figure.append(soup.new_tag(block.type, attrs={'src': url, 'controls': ''}))
        caption = _caption(soup, block.payload)
        if caption is not None:
            figure.append(caption)
        return [figure], None

    def _file(self, soup: BeautifulSoup, block: Block) -> Rendered:
        url = file_to_url(block.payload)
        if not url:
            return self._unsupported(soup, block)
        name = block.payload.get('name') or url.rstrip('/').split('/')[-1].split('?')[0]
        figure = soup.new_tag('figure', attrs={'class': [block.type]})
        link = soup.new_tag('a', attrs={'href': url})
        link.string = name
        figure.append(link)
        caption = _caption(soup, block.payload)
        if caption is not None:
            figure.append(caption)
        return [figure], None

    def _bookmark(self, soup: BeautifulSoup, block: Block) -> Rendered:
        url = block.payload.get('url') or ''
        figure = soup.new_tag('figure', attrs={'class': [block.type.replace('_', '-')]})
        link = soup.new_tag('a', attrs={'href': url})
        link.string = url
        figure.append(link)
        caption = _caption(soup, block.payload)
        if caption is not None:
            figure.append(caption)
        return [figure], None

    def _embed(self, soup: BeautifulSoup, block: Block) -> Rendered:
        figure = soup.new_tag('figure', attrs={'class': ['embed']})
        figure.append(soup.new_tag('iframe', attrs={'src': block.payload.get('url') or ''}))
        caption = _caption(soup, block.payload)
        if caption is not None:
            figure.append(caption)
        return [figure], None

    def _table(self, soup: BeautifulSoup, block: Block) -> Rendered:
        """Render a table and its rows.

        Rows never have children, so they are converted here rather than
        through the work queue.
        """
        column_header = block.payload.get('has_column_header', False)
        row_header = block.payload.get('has_row_header', False)

        table = soup.new_tag('table')
        body = soup.new_tag('tbody')
        table.append(body)

        for row_index, row in enumerate(block.children):
            if row.type != 'table_row':
                continue
            tr = soup.new_tag('tr')
            for cell_index, cell in enumerate(row.payload.get('cells') or []):
                is_header = (column_header and row_index == 0) or (row_header and cell_index == 0)
                cell_tag = soup.new_tag('th' if is_header else 'td')
                _append_all(cell_tag, rich_text_to_nodes(soup, cell))
                tr.append(cell_tag)
            body.append(tr)

        return [table], None

    def _container(self, soup: BeautifulSoup, block: Block) -> Rendered:
        div = soup.new_tag('div', attrs={'class': [block.type.replace('_', '-')]})
        return [div], div

    def _child_title(self, soup: BeautifulSoup, block: Block) -> Rendered:
        p = soup.new_tag(
            'p', attrs={'class': [block.type.replace('_', '-')], 'data-block-id': block.id}
        )
        p.string = block.payload.get('title') or ''
        return [p], None

    def _link_to_page(self, soup: BeautifulSoup, block: Block) -> Rendered:
        target_type = block.payload.get('type', 'page_id')
        p = soup.new_tag('p', attrs={
            'class': ['link-to-page'],
            'data-target-id': block.payload.get(target_type) or '',
        })
        return [p], None

    def _table_of_contents(self, soup: BeautifulSoup, block: Block) -> Rendered:
        return [soup.new_tag('div', attrs={'class': ['table-of-contents']})], None

    def _skip(self, soup: BeautifulSoup, block: Block) -> Rendered:
        return [], None

    def _unsupported(self, soup: BeautifulSoup, block: Block) -> Rendered:
        logger.debug(f"No markup for block type '{block.type}' ({block.id})")
        div = soup.new_tag('div', attrs={'data-block-type': block.type})
        return [div], div


def blocks_to_html(blocks: List[Block]) -> BeautifulSoup:
    """Convert a realized block tree into a markup tree."""
    return HtmlConverter().convert(blocks)
