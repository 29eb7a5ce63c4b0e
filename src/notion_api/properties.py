"""Helpers for reading Notion page properties.

Notion returns every property as a typed object (``{"type": "title",
"title": [...]}``). These helpers flatten them into plain Python values that
are convenient to store and to use from templates.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

logger = logging.getLogger(__name__)


def rich_text_to_plain_text(data: Iterable[Dict[str, Any]]) -> str:
    """Join the plain text of a list of rich text items.

    Example:
        >>> rich_text_to_plain_text([{"plain_text": "Hello "}, {"plain_text": "world"}])
        'Hello world'
    """
    return ''.join(item.get('plain_text', '') for item in data)


def file_to_url(file: Optional[Dict[str, Any]]) -> Optional[str]:
    """Extract the URL from a file object.

    Returns None for objects without a URL (emoji icons, None).
    """
    if not file:
        return None
    file_type = file.get('type')
    if file_type in ('external', 'file', 'custom_emoji'):
        return (file.get(file_type) or {}).get('url')
    return None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace('Z', '+00:00'))


def date_to_date_objects(date_response: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Replace the ISO strings of a date property value with datetimes."""
    if date_response is None:
        return None

    return {
        'start': _parse_datetime(date_response.get('start')),
        'end': _parse_datetime(date_response.get('end')),
        'time_zone': date_response.get('time_zone'),
    }


def page_title(page: Dict[str, Any]) -> Optional[str]:
    """Return the plain text of the page's title property, if any."""
    for prop in (page.get('properties') or {}).values():
        if prop.get('type') == 'title':
            return rich_text_to_plain_text(prop.get('title') or [])
    return None


def page_metadata(page: Dict[str, Any]) -> str:
    """Format a short description of a page for log messages.

    Example:
        >>> page_metadata(page)
        '"My post" (last edited 2024-01-15)'
    """
    title = page_title(page)
    label = f'"{title}"' if title else 'Untitled'
    last_edited = (page.get('last_edited_time') or '')[:10]
    return f"{label} (last edited {last_edited})"


def transform_property(prop: Dict[str, Any]) -> Any:
    """Flatten one typed property value into a plain value.

    Unknown property types are returned unchanged.
    """
    prop_type = prop.get('type')
    value = prop.get(prop_type) if prop_type else None

    if prop_type in ('title', 'rich_text'):
        return rich_text_to_plain_text(value or [])
    if prop_type in ('number', 'checkbox', 'url', 'email', 'phone_number'):
        return value
    if prop_type in ('select', 'status'):
        return value.get('name') if value else None
    if prop_type == 'multi_select':
        return [option.get('name') for option in value or []]
    if prop_type == 'date':
        return date_to_date_objects(value)
    if prop_type == 'files':
        return [file_to_url(f) for f in value or []]
    if prop_type == 'people':
        return [person.get('name') or person.get('id') for person in value or []]
    if prop_type == 'relation':
        return [relation.get('id') for relation in value or []]
    if prop_type in ('created_time', 'last_edited_time'):
        return _parse_datetime(value)
    if prop_type in ('created_by', 'last_edited_by'):
        return (value or {}).get('name') or (value or {}).get('id')
    if prop_type == 'unique_id':
        if not value:
            return None
        prefix = value.get('prefix')
        return f"{prefix}-{value.get('number')}" if prefix else str(value.get('number'))
    if prop_type in ('formula', 'rollup'):
        if not value:
            return None
        inner_type = value.get('type')
        inner = value.get(inner_type)
        if inner_type == 'date':
            return date_to_date_objects(inner)
        if inner_type == 'array':
            return [transform_property(item) for item in inner or []]
        return inner

    logger.debug(f"Passing through unsupported property type '{prop_type}'")
    return prop


def transform_properties(properties: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
    """Flatten every property of a page.

    Example:
        >>> transform_properties({"Name": {"type": "title", "title": [{"plain_text": "Hi"}]}})
        {'Name': 'Hi'}
    """
    return {name: transform_property(prop) for name, prop in properties.items()}
