"""Unit tests for notion_api.properties module."""

from datetime import datetime, timezone

from src.notion_api.properties import (
    date_to_date_objects,
    file_to_url,
    page_metadata,
    page_title,
    rich_text_to_plain_text,
    transform_properties,
    transform_property,
)
from tests.fixtures.notion_objects import PAGE_ID_A, make_page, rich_text


class TestRichTextAndFiles:
    """Test cases for rich text and file helpers."""

    def test_joins_plain_text(self):
        """Plain text of every item is concatenated."""
        assert rich_text_to_plain_text([rich_text("Hello "), rich_text("world")]) == "Hello world"

    def test_file_urls(self):
        """Hosted and external files expose their URL; emoji has none."""
        assert file_to_url({'type': 'file', 'file': {'url': 'https://s3/a.png'}}) == 'https://s3/a.png'
        assert file_to_url({'type': 'external', 'external': {'url': 'https://x/b.png'}}) == 'https://x/b.png'
        assert file_to_url({'type': 'emoji', 'emoji': '🚀'}) is None
        assert file_to_url(None) is None


class TestDates:
    """Test cases for date_to_date_objects."""

    def test_parses_start_and_end(self):
        """ISO strings become aware datetimes."""
        result = date_to_date_objects({'start': '2024-01-15T10:30:00.000Z', 'end': None, 'time_zone': None})

        assert result['start'] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert result['end'] is None

    def test_none_stays_none(self):
        """A missing date property value stays None."""
        assert date_to_date_objects(None) is None


class TestTransformProperty:
    """Test cases for transform_property."""

    def test_title_and_rich_text(self):
        assert transform_property({'type': 'title', 'title': [rich_text("Post")]}) == "Post"
        assert transform_property({'type': 'rich_text', 'rich_text': []}) == ""

    def test_select_and_multi_select(self):
        assert transform_property({'type': 'select', 'select': {'name': 'Blog'}}) == 'Blog'
        assert transform_property({'type': 'select', 'select': None}) is None
        assert transform_property({
            'type': 'multi_select',
            'multi_select': [{'name': 'a'}, {'name': 'b'}],
        }) == ['a', 'b']

    def test_scalars_pass_through(self):
        assert transform_property({'type': 'checkbox', 'checkbox': True}) is True
        assert transform_property({'type': 'number', 'number': 3}) == 3

    def test_unique_id_with_prefix(self):
        assert transform_property({'type': 'unique_id', 'unique_id': {'prefix': 'POST', 'number': 7}}) == 'POST-7'
        assert transform_property({'type': 'unique_id', 'unique_id': {'prefix': None, 'number': 7}}) == '7'

    def test_formula_unwraps_inner_value(self):
        assert transform_property({'type': 'formula', 'formula': {'type': 'string', 'string': 'x'}}) == 'x'

    def test_rollup_array_is_flattened(self):
        prop = {
            'type': 'rollup',
            'rollup': {
                'type': 'array',
                'array': [{'type': 'title', 'title': [rich_text("One")]}],
            },
        }
        assert transform_property(prop) == ['One']

    def test_unknown_type_is_returned_unchanged(self):
        prop = {'type': 'button', 'button': {}}
        assert transform_property(prop) is prop

    def test_transform_properties_maps_every_name(self):
        properties = {
            'Name': {'type': 'title', 'title': [rich_text("Hi")]},
            'Tags': {'type': 'multi_select', 'multi_select': [{'name': 'x'}]},
        }
        assert transform_properties(properties) == {'Name': 'Hi', 'Tags': ['x']}


class TestPageMetadata:
    """Test cases for page_title and page_metadata."""

    def test_title_and_edit_date(self):
        """Log description has the quoted title and edit date."""
        page = make_page(PAGE_ID_A, title="My post", last_edited_time="2024-01-15T10:30:00.000Z")

        assert page_title(page) == "My post"
        assert page_metadata(page) == '"My post" (last edited 2024-01-15)'

    def test_untitled_page(self):
        """Pages without a title property are described as Untitled."""
        page = make_page(PAGE_ID_A, properties={})

        assert page_title(page) is None
        assert page_metadata(page).startswith("Untitled")
