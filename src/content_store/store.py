"""Keyed local stores for synced documents.

Two backends share one contract (keys / get / set / delete):

- MemoryContentStore keeps entries in a dict and counts writes.
- FileContentStore persists one ``<id>.md`` file per entry: YAML front
  matter holding the entry's metadata, followed by the rendered body.
"""

import logging
import os
import re
import uuid
from abc import ABC, abstractmethod
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from src.rendering.models import HeadingOutlineEntry, RenderedDocument

from .errors import StoreError, StoreValidationError
from .markdown_body import html_to_markdown
from .models import StoreEntry

logger = logging.getLogger(__name__)

BODY_FORMATS = ('html', 'markdown')


def validate_entry(entry: StoreEntry) -> None:
    """Check the shape of an entry before it is written.

    Raises:
        StoreValidationError: If a required field is missing or mistyped
    """
    if not isinstance(entry.id, str) or not entry.id:
        raise StoreValidationError("must be a non-empty string", 'id')
    if not isinstance(entry.digest, str) or not entry.digest:
        raise StoreValidationError("must be a non-empty string", 'digest')
    if not isinstance(entry.data, Mapping):
        raise StoreValidationError(
            f"must be a mapping, got {type(entry.data).__name__}", 'data'
        )
    properties = entry.data.get('properties')
    if not isinstance(properties, Mapping):
        raise StoreValidationError(
            f"must be a mapping, got {type(properties).__name__}", 'data.properties'
        )
    if entry.rendered is not None and not isinstance(entry.rendered, RenderedDocument):
        raise StoreValidationError(
            f"must be a RenderedDocument, got {type(entry.rendered).__name__}", 'rendered'
        )


class ContentStore(ABC):
    """Keyed map of synced documents, keyed by document id."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return the ids of all stored entries."""

    @abstractmethod
    def get(self, entry_id: str) -> Optional[StoreEntry]:
        """Return a stored entry, or None if there is none."""

    @abstractmethod
    def set(self, entry: StoreEntry) -> None:
        """Create or replace an entry.

        Raises:
            StoreValidationError: If the entry has an invalid shape
            StoreError: If persisting the entry fails
        """

    @abstractmethod
    def delete(self, entry_id: str) -> None:
        """Remove an entry; removing a missing entry is not an error."""


class MemoryContentStore(ContentStore):
    """In-process store. Counts writes and deletions."""

    def __init__(self, entries: Optional[List[StoreEntry]] = None):
        self._entries: Dict[str, StoreEntry] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry
        self.write_count = 0
        self.delete_count = 0

    def keys(self) -> List[str]:
        return list(self._entries)

    def get(self, entry_id: str) -> Optional[StoreEntry]:
        return self._entries.get(entry_id)

    def set(self, entry: StoreEntry) -> None:
        validate_entry(entry)
        self._entries[entry.id] = entry
        self.write_count += 1

    def delete(self, entry_id: str) -> None:
        if self._entries.pop(entry_id, None) is not None:
            self.delete_count += 1

    def __len__(self) -> int:
        return len(self._entries)


class FileContentStore(ContentStore):
    """Store persisting each entry as a markdown file with YAML front matter.

    File layout::

        ---
        id: d16195b7-...
        digest: '2024-01-15T10:30:00.000Z'
        file_path: src/content/notion/d16195b7-....md
        asset_imports: [...]
        headings: [{depth: 0, text: Intro, slug: intro}]
        body_format: html
        data: {...}
        ---
        <p>Rendered body</p>

    With ``body_format="markdown"`` the body is converted with markdownify
    before it is written; ``get`` returns the body as stored.
    """

    FRONTMATTER_PATTERN = re.compile(r'^---\s*\n(.*?)\n---\s*\n', re.DOTALL)

    ID_PATTERN = re.compile(r'^[A-Za-z0-9-]+$')

    FILE_SUFFIX = '.md'

    def __init__(self, directory: Union[str, Path], body_format: str = 'html'):
        if body_format not in BODY_FORMATS:
            raise ValueError(f"body_format must be one of {BODY_FORMATS}, got '{body_format}'")
        self.directory = Path(directory)
        self.body_format = body_format

    def _path_for(self, entry_id: str) -> Path:
        if not isinstance(entry_id, str) or not self.ID_PATTERN.match(entry_id):
            raise StoreError(str(entry_id), 'resolve', 'id must match [A-Za-z0-9-]+')
        return self.directory / f"{entry_id}{self.FILE_SUFFIX}"

    def keys(self) -> List[str]:
        try:
            names = os.listdir(self.directory)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StoreError(str(self.directory), 'list', str(e))

        keys = []
        for name in sorted(names):
            stem, suffix = os.path.splitext(name)
            if suffix == self.FILE_SUFFIX and self.ID_PATTERN.match(stem):
                keys.append(stem)
        return keys

    def get(self, entry_id: str) -> Optional[StoreEntry]:
        path = self._path_for(entry_id)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                content = f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreError(str(path), 'read', str(e))

        meta, body = self._split(str(path), content)
        return self._to_entry(str(path), meta, body)

    def set(self, entry: StoreEntry) -> None:
        validate_entry(entry)
        path = self._path_for(entry.id)
        content = self._serialize(str(path), entry)

        try:
            os.makedirs(self.directory, exist_ok=True)
            temp_path = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
            with open(temp_path, 'w', encoding='utf-8') as f:
                f.write(content)
            os.replace(temp_path, path)
        except OSError as e:
            raise StoreError(str(path), 'write', str(e))

        logger.debug(f"Wrote store entry {path}")

    def delete(self, entry_id: str) -> None:
        path = self._path_for(entry_id)
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StoreError(str(path), 'delete', str(e))
        logger.debug(f"Deleted store entry {path}")

    def _serialize(self, location: str, entry: StoreEntry) -> str:
        rendered = entry.rendered
        headings = [h.to_dict() for h in rendered.headings] if rendered else []
        body = rendered.html if rendered else ''

        if self.body_format == 'markdown' and body:
            try:
                body = html_to_markdown(body)
            except RecursionError:
                raise StoreError(location, 'convert', 'document is nested too deeply for markdown output')

        meta = {
            'id': entry.id,
            'digest': entry.digest,
            'file_path': entry.file_path,
            'asset_imports': list(entry.asset_imports),
            'headings': headings,
            'body_format': self.body_format,
            'data': dict(entry.data),
        }

        try:
            yaml_str = yaml.safe_dump(
                meta,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False
            )
        except yaml.YAMLError as e:
            raise StoreError(location, 'serialize', str(e))

        return f"---\n{yaml_str}---\n{body}"

    def _split(self, location: str, content: str) -> Tuple[Dict[str, Any], str]:
        match = self.FRONTMATTER_PATTERN.match(content)
        if not match:
            raise StoreError(location, 'parse', 'missing front matter')

        try:
            meta = yaml.safe_load(match.group(1))
        except yaml.YAMLError as e:
            raise StoreError(location, 'parse', f"Invalid YAML syntax: {e}")

        if not isinstance(meta, dict):
            raise StoreError(
                location, 'parse',
                f"Front matter must be a YAML dictionary, got {type(meta).__name__}"
            )
        return meta, content[match.end():]

    def _to_entry(self, location: str, meta: Dict[str, Any], body: str) -> StoreEntry:
        for key in ('id', 'digest'):
            if not isinstance(meta.get(key), str):
                raise StoreError(location, 'parse', f"Field '{key}' must be a string")

        try:
            headings = [
                HeadingOutlineEntry(depth=h['depth'], text=h['text'], slug=h['slug'])
                for h in meta.get('headings') or []
            ]
        except (KeyError, TypeError) as e:
            raise StoreError(location, 'parse', f"Invalid headings: {e}")

        asset_imports = list(meta.get('asset_imports') or [])
        return StoreEntry(
            id=meta['id'],
            digest=meta['digest'],
            data=meta.get('data') or {},
            rendered=RenderedDocument(html=body, headings=headings, image_paths=asset_imports),
            file_path=meta.get('file_path') or '',
            asset_imports=asset_imports,
        )
