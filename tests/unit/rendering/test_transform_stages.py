"""Unit tests for rendering.stages module."""

import pytest

from src.rendering.html_converter import class_list, new_document
from src.rendering.models import RenderContext
from src.rendering.stages import (
    IMAGE_HINT_ATTRIBUTE,
    external_links_stage,
    heading_links_stage,
    lazy_images_stage,
    math_stage,
    slug_stage,
    stage_options,
)


def run(stage, markup):
    tree = new_document(markup)
    stage(tree, RenderContext(page_id="p"))
    return tree


class TestStageOptions:
    """Test cases for stage_options."""

    def test_none_is_empty(self):
        assert stage_options(None) == {}

    def test_non_mapping_raises(self):
        with pytest.raises(TypeError, match="must be a mapping"):
            stage_options(["nope"])


class TestSlugStage:
    """Test cases for slug_stage."""

    def test_assigns_unique_ids(self):
        tree = run(slug_stage(), "<h1>Intro</h1><h2>Intro</h2><h3>Next Step</h3>")

        assert [h['id'] for h in tree.find_all(['h1', 'h2', 'h3'])] == ["intro", "intro-1", "next-step"]

    def test_keeps_existing_ids_and_applies_prefix(self):
        tree = run(slug_stage({'prefix': 'doc-'}), '<h1 id="custom">A</h1><h2>B</h2>')

        assert tree.h1['id'] == "custom"
        assert tree.h2['id'] == "doc-b"

    def test_slugs_start_fresh_for_each_document(self):
        """One stage instance used twice does not carry slugs over."""
        stage = slug_stage()
        first = run(stage, "<h1>Intro</h1>")
        second = run(stage, "<h1>Intro</h1>")

        assert first.h1['id'] == second.h1['id'] == "intro"


class TestMathStage:
    """Test cases for math_stage."""

    def test_wraps_expressions_in_delimiters(self):
        tree = run(
            math_stage(),
            '<p><span class="math math-inline">x^2</span></p><div class="math math-display">\\sum x</div>',
        )

        inline = tree.find('span')
        display = tree.find('div')
        assert inline.get_text() == "\\(x^2\\)"
        assert inline['data-latex'] == "x^2"
        assert display.get_text() == "\\[\\sum x\\]"

    def test_skips_processed_nodes(self):
        tree = run(math_stage(), '<span class="math math-inline" data-latex="y">\\(y\\)</span>')

        assert tree.span.get_text() == "\\(y\\)"


class TestExternalLinksStage:
    """Test cases for external_links_stage."""

    def test_marks_absolute_links_only(self):
        tree = run(external_links_stage(), '<a href="https://x.test">x</a><a href="#intro">i</a>')

        external, anchor = tree.find_all('a')
        assert external['target'] == "_blank"
        assert external['rel'] == ["noopener", "noreferrer"]
        assert not anchor.has_attr('target')

    def test_custom_options(self):
        tree = run(external_links_stage({'target': None, 'rel': ['nofollow']}), '<a href="http://x.test">x</a>')

        assert not tree.a.has_attr('target')
        assert tree.a['rel'] == ["nofollow"]


class TestLazyImagesStage:
    """Test cases for lazy_images_stage."""

    def test_adds_loading_attributes(self):
        tree = run(lazy_images_stage(), '<img src="/a.png"/>')

        assert tree.img['loading'] == "lazy"
        assert tree.img['decoding'] == "async"

    def test_skips_hinted_images(self):
        tree = new_document()
        tree.append(tree.new_tag("img", attrs={IMAGE_HINT_ATTRIBUTE: "{}"}))
        lazy_images_stage()(tree, RenderContext(page_id="p"))

        assert not tree.img.has_attr('loading')


class TestHeadingLinksStage:
    """Test cases for heading_links_stage."""

    def test_appends_anchor_to_headings_with_id(self):
        tree = run(heading_links_stage(), '<h2 id="intro">Intro</h2><h3>No id</h3>')

        anchor = tree.h2.a
        assert anchor['href'] == "#intro"
        assert anchor['aria-hidden'] == "true"
        assert class_list(anchor) == ["heading-anchor"]
        assert anchor.get_text() == "#"
        assert tree.h3.a is None
