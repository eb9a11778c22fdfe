"""Tests for post and page loading."""

import pytest
import os
from datetime import datetime, date
from pathlib import Path

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from quire_pkg.content import (
    ContentLoader, format_date, get_categories, get_tags, parse_date, split_terms, term_id,
)


@pytest.fixture
def loader(site_dir):
    return ContentLoader(site_dir, 'content', 'posts', 'pages')


class TestHelpers:
    """Test cases for module-level helpers."""

    def test_term_id_normalizes_case_and_whitespace(self):
        assert term_id('  Travel ') == term_id('travel')
        assert len(term_id('travel')) == 32

    def test_split_terms(self):
        assert split_terms('a, b ,, c') == ['a', 'b', 'c']
        assert split_terms(['x', ' y ']) == ['x', 'y']
        assert split_terms(None) == []

    def test_parse_date(self):
        assert parse_date('15-06-2024') == datetime(2024, 6, 15)
        assert parse_date(date(2024, 1, 2)) == datetime(2024, 1, 2)
        assert parse_date('2024/06/15') == datetime.min
        assert parse_date(None) == datetime.min

    def test_format_date(self):
        assert format_date(date(2024, 3, 1)) == '01-03-2024'
        assert format_date('01-03-2024') == '01-03-2024'
        assert format_date(None) is None


class TestContentLoader:
    """Test cases for ContentLoader."""

    def test_get_posts_sorted_newest_first(self, loader):
        posts = loader.get_posts()
        assert [p.slug for p in posts] == ['second-post', 'first-post']

    def test_post_fields(self, loader):
        post = loader.load_post('first-post')
        assert post.title == 'First Post'
        assert post.date == '01-03-2024'
        assert post.image == '/content/posts/first-post/cover.jpg'
        assert post.description == 'Our first trip'
        assert [c.name for c in post.categories] == ['Travel', 'Photos']
        assert [t.name for t in post.tags] == ['italy', 'summer']
        assert post.tags[0].id == term_id('Italy')
        assert '![Beach](/content/posts/first-post/beach.jpg)' in post.content

    def test_post_is_immutable(self, loader):
        post = loader.load_post('first-post')
        with pytest.raises(AttributeError):
            post.title = 'Changed'

    def test_missing_description_is_none(self, loader):
        """Test that description is passed through without an excerpt."""
        post = loader.load_post('second-post')
        assert post.description is None
        assert post.content.startswith('Another post without a description')

    def test_folder_without_post_is_skipped(self, loader):
        assert loader.load_post('drafts') is None

    def test_get_pages(self, loader, site_dir):
        nested = Path(site_dir) / 'pages' / 'legal' / 'privacy.md'
        nested.parent.mkdir()
        nested.write_text('---\ntitle: Privacy\nimage: /content/pages/p.jpg\n---\nText\n')

        pages = loader.get_pages()
        assert [p.slug for p in pages] == ['about', 'legal/privacy']
        assert pages[0].tags == () and pages[0].categories == ()
        assert pages[1].image == '/content/pages/p.jpg'

    def test_file_without_front_matter(self, loader, site_dir):
        path = Path(site_dir) / 'plain.md'
        path.write_text('Just text --- with dashes --- inside')
        metadata, body = loader.parse_markdown_with_metadata(str(path))
        assert metadata == {}
        assert body == 'Just text --- with dashes --- inside'

    def test_invalid_front_matter(self, loader, site_dir):
        path = Path(site_dir) / 'broken.md'
        path.write_text('---\ntitle: [unclosed\n---\nBody\n')
        metadata, body = loader.parse_markdown_with_metadata(str(path))
        assert metadata == {}
        assert body == 'Body\n'

    def test_missing_posts_folder(self, temp_dir):
        loader = ContentLoader(temp_dir, 'content', 'posts', 'pages')
        assert loader.get_posts() == []
        assert loader.get_pages() == []


class TestGrouping:
    """Test cases for category and tag grouping."""

    def test_categories(self, loader):
        categories = get_categories(loader.get_posts())
        by_name = {c.name: c.slugs for c in categories}
        # 'travel' and 'Travel' share an id; the first name seen wins
        assert by_name == {'travel': ['second-post', 'first-post'], 'Photos': ['first-post']}

    def test_tags(self, loader):
        tags = get_tags(loader.get_posts())
        assert [(t.name, t.slugs) for t in tags] == [
            ('summer', ['second-post', 'first-post']),
            ('italy', ['first-post']),
        ]
