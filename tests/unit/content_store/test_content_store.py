"""Unit tests for content_store.store module."""

import os
from datetime import datetime, timezone

import pytest

from src.content_store.errors import StoreError, StoreValidationError
from src.content_store.models import StoreEntry
from src.content_store.store import FileContentStore, MemoryContentStore, validate_entry
from src.rendering.models import HeadingOutlineEntry, RenderedDocument
from src.rendering.stages import IMAGE_HINT_ATTRIBUTE
from tests.fixtures.notion_objects import PAGE_ID_A, PAGE_ID_B


def make_entry(entry_id=PAGE_ID_A, digest="2024-01-15T10:30:00.000Z", html="<h1 id=\"intro\">Intro</h1><p>Body</p>"):
    return StoreEntry(
        id=entry_id,
        digest=digest,
        data={
            'id': entry_id,
            'properties': {
                'Name': "Café notes",
                'Date': {'start': datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc), 'end': None, 'time_zone': None},
            },
        },
        rendered=RenderedDocument(
            html=html,
            headings=[HeadingOutlineEntry(depth=0, text="Intro", slug="intro")],
            image_paths=["../../assets/notion/o/a.png"],
        ),
        file_path=f"src/content/notion/{entry_id}.md",
        asset_imports=["../../assets/notion/o/a.png"],
    )


class TestValidateEntry:
    """Test cases for validate_entry."""

    def test_valid_entry_passes(self):
        validate_entry(make_entry())

    def test_empty_id_rejected(self):
        with pytest.raises(StoreValidationError, match="'id'"):
            validate_entry(StoreEntry(id="", digest="d", data={'properties': {}}))

    def test_missing_digest_rejected(self):
        with pytest.raises(StoreValidationError, match="'digest'"):
            validate_entry(StoreEntry(id="a", digest=None, data={'properties': {}}))

    def test_properties_must_be_mapping(self):
        with pytest.raises(StoreValidationError, match="'data.properties'"):
            validate_entry(StoreEntry(id="a", digest="d", data={'properties': []}))

    def test_rendered_must_be_document(self):
        with pytest.raises(StoreValidationError, match="'rendered'"):
            validate_entry(StoreEntry(id="a", digest="d", data={'properties': {}}, rendered="<p>x</p>"))


class TestMemoryContentStore:
    """Test cases for MemoryContentStore class."""

    def test_set_get_delete(self):
        store = MemoryContentStore()
        entry = make_entry()

        store.set(entry)

        assert store.keys() == [PAGE_ID_A]
        assert store.get(PAGE_ID_A) is entry
        assert store.write_count == 1

        store.delete(PAGE_ID_A)
        assert store.get(PAGE_ID_A) is None
        assert len(store) == 0
        assert store.delete_count == 1

    def test_delete_missing_is_noop(self):
        store = MemoryContentStore()
        store.delete("nothing")
        assert store.delete_count == 0

    def test_invalid_entry_not_written(self):
        store = MemoryContentStore()
        with pytest.raises(StoreValidationError):
            store.set(StoreEntry(id="a", digest="d", data={}))
        assert store.write_count == 0

    def test_initial_entries(self):
        store = MemoryContentStore([make_entry(PAGE_ID_A), make_entry(PAGE_ID_B)])
        assert sorted(store.keys()) == [PAGE_ID_A, PAGE_ID_B]
        assert store.write_count == 0


class TestFileContentStore:
    """Test cases for FileContentStore class."""

    def test_round_trips_entry(self, tmp_path):
        """A written entry reads back with its metadata and body."""
        store = FileContentStore(tmp_path / "store")
        store.set(make_entry())

        loaded = store.get(PAGE_ID_A)

        assert loaded.id == PAGE_ID_A
        assert loaded.digest == "2024-01-15T10:30:00.000Z"
        assert loaded.data['properties']['Name'] == "Café notes"
        assert loaded.data['properties']['Date']['start'] == datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
        assert loaded.rendered.html == '<h1 id="intro">Intro</h1><p>Body</p>'
        assert loaded.rendered.headings == [HeadingOutlineEntry(depth=0, text="Intro", slug="intro")]
        assert loaded.asset_imports == ["../../assets/notion/o/a.png"]
        assert loaded.file_path == f"src/content/notion/{PAGE_ID_A}.md"

    def test_file_layout(self, tmp_path):
        """Files start with front matter in a fixed key order."""
        store = FileContentStore(tmp_path)
        store.set(make_entry())

        content = (tmp_path / f"{PAGE_ID_A}.md").read_text(encoding='utf-8')
        assert content.startswith(f"---\nid: {PAGE_ID_A}\ndigest: '2024-01-15T10:30:00.000Z'\n")
        assert "Café notes" in content
        assert content.endswith("---\n<h1 id=\"intro\">Intro</h1><p>Body</p>")

    def test_keys_sorted_and_filtered(self, tmp_path):
        store = FileContentStore(tmp_path)
        store.set(make_entry(PAGE_ID_B))
        store.set(make_entry(PAGE_ID_A))
        (tmp_path / "notes.txt").write_text("not an entry")
        (tmp_path / f".{PAGE_ID_A}.md.abc.part").write_text("temp")

        assert store.keys() == [PAGE_ID_A, PAGE_ID_B]

    def test_missing_directory_is_empty(self, tmp_path):
        store = FileContentStore(tmp_path / "absent")

        assert store.keys() == []
        assert store.get(PAGE_ID_A) is None

    def test_overwrite_replaces_entry(self, tmp_path):
        store = FileContentStore(tmp_path)
        store.set(make_entry(digest="2024-01-01T00:00:00.000Z"))
        store.set(make_entry(digest="2024-02-01T00:00:00.000Z", html="<p>New</p>"))

        loaded = store.get(PAGE_ID_A)
        assert loaded.digest == "2024-02-01T00:00:00.000Z"
        assert loaded.rendered.html == "<p>New</p>"
        assert os.listdir(tmp_path) == [f"{PAGE_ID_A}.md"]

    def test_delete(self, tmp_path):
        store = FileContentStore(tmp_path)
        store.set(make_entry())

        store.delete(PAGE_ID_A)
        store.delete(PAGE_ID_A)

        assert store.keys() == []

    def test_unsafe_id_rejected(self, tmp_path):
        store = FileContentStore(tmp_path)
        with pytest.raises(StoreError, match="resolve"):
            store.get("../escape")

    def test_corrupt_file_raises(self, tmp_path):
        (tmp_path / f"{PAGE_ID_A}.md").write_text("no front matter here")
        store = FileContentStore(tmp_path)

        with pytest.raises(StoreError, match="missing front matter"):
            store.get(PAGE_ID_A)

    def test_invalid_yaml_raises(self, tmp_path):
        (tmp_path / f"{PAGE_ID_A}.md").write_text("---\nid: [unclosed\n---\n")
        store = FileContentStore(tmp_path)

        with pytest.raises(StoreError, match="Invalid YAML syntax"):
            store.get(PAGE_ID_A)

    def test_bad_body_format(self, tmp_path):
        with pytest.raises(ValueError, match="body_format"):
            FileContentStore(tmp_path, body_format="rst")

    def test_markdown_body(self, tmp_path):
        """Markdown stores convert the body and keep image hints as HTML."""
        hint = '{"src": "../../assets/notion/o/a.png", "alt": "", "index": 0}'
        html = (
            '<h1 id="intro">Intro</h1><p>Some <strong>bold</strong> text</p>'
            '<ul><li>one</li></ul>'
            f"<figure class=\"image\"><img {IMAGE_HINT_ATTRIBUTE}='{hint}'/></figure>"
        )
        store = FileContentStore(tmp_path, body_format="markdown")
        store.set(make_entry(html=html))

        body = store.get(PAGE_ID_A).rendered.html
        assert "# Intro" in body
        assert "Some **bold** text" in body
        assert "- one" in body
        assert IMAGE_HINT_ATTRIBUTE in body
        assert "../../assets/notion/o/a.png" in body
