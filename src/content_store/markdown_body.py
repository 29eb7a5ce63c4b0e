"""HTML to markdown conversion for stored document bodies."""

from bs4 import BeautifulSoup
from markdownify import MarkdownConverter

from src.rendering.stages import IMAGE_HINT_ATTRIBUTE

# markdownify re-parses the body, and HTML parsers lowercase attribute names
_PARSED_HINT_ATTRIBUTE = IMAGE_HINT_ATTRIBUTE.lower()


class _BodyMarkdownConverter(MarkdownConverter):
    """markdownify converter that keeps optimization hints intact."""

    def __init__(self, **options):
        options.setdefault('heading_style', 'atx')  # Use # style headings
        options.setdefault('bullets', '-')
        options.setdefault('strong_em_symbol', '*')
        super().__init__(**options)

    def convert_img(self, el, text, parent_tags):
        # The hint has no src; emit it as inline HTML for the site build
        hint = el.get(IMAGE_HINT_ATTRIBUTE, el.get(_PARSED_HINT_ATTRIBUTE))
        if hint is not None:
            img = BeautifulSoup('', 'html.parser').new_tag('img', attrs={IMAGE_HINT_ATTRIBUTE: hint})
            return str(img)
        return super().convert_img(el, text, parent_tags)


def html_to_markdown(html: str, **options) -> str:
    """Convert rendered HTML into a markdown body.

    Raises:
        RecursionError: If the markup is nested deeper than the converter
            can walk
    """
    return _BodyMarkdownConverter(**options).convert(html)
