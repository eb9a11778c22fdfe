"""
Loading of posts and pages from markdown files with YAML front matter.
"""

import logging
import os
import posixpath
from datetime import date, datetime
from hashlib import md5

import yaml

from .models import Category, PostCategory, PostMetadata, PostTag, Tag

DATE_FORMAT = '%d-%m-%Y'
POST_FILENAME = 'post.md'


def term_id(name):
    """Stable identifier for a tag or category name."""
    return md5(name.lower().strip().encode('utf-8')).hexdigest()


def split_terms(value):
    """Split a comma list (or YAML list) into trimmed, non-empty names."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(v) for v in value]
    else:
        items = str(value).split(',')
    return [item.strip() for item in items if item.strip()]


def parse_date(date_str):
    """Parse a ``dd-mm-YYYY`` date; anything unparseable sorts as the oldest."""
    if isinstance(date_str, datetime):
        return date_str
    if isinstance(date_str, date):
        return datetime(date_str.year, date_str.month, date_str.day)
    if isinstance(date_str, str):
        try:
            return datetime.strptime(date_str.strip(), DATE_FORMAT)
        except ValueError:
            pass
    return datetime.min


def format_date(value):
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FORMAT)
    return str(value) if value is not None else None


class ContentLoader:
    """Reads posts and pages from the content folders."""

    def __init__(self, base_dir, contents_folder, posts_folder, pages_folder):
        self.base_dir = base_dir
        self.contents_folder = contents_folder
        self.posts_folder = posts_folder
        self.pages_folder = pages_folder
        self.posts_dir = os.path.join(base_dir, posts_folder)
        self.pages_dir = os.path.join(base_dir, pages_folder)
        self.logger = logging.getLogger('Quire.content')

    def parse_markdown_with_metadata(self, filepath):
        """Parse a markdown file with YAML front matter."""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()

        parts = content.split('---', 2)
        if len(parts) >= 3 and not parts[0].strip():
            try:
                metadata = yaml.safe_load(parts[1]) or {}
            except yaml.YAMLError as e:
                self.logger.error(f"Invalid YAML front matter in {filepath}: {e}")
                metadata = {}
            body = parts[2].lstrip('\r\n')
        else:
            metadata = {}
            body = content

        if not isinstance(metadata, dict):
            self.logger.warning(f"Ignoring non-mapping front matter in {filepath}")
            metadata = {}
        return metadata, body

    def post_image_reference(self, slug, image):
        if not image:
            return None
        return '/' + posixpath.join(self.contents_folder, self.posts_folder, slug, str(image))

    def load_post(self, slug):
        """Load ``{posts}/{slug}/post.md``; returns None if it does not exist."""
        post_path = os.path.join(self.posts_dir, slug, POST_FILENAME)
        if not os.path.isfile(post_path):
            return None

        metadata, body = self.parse_markdown_with_metadata(post_path)
        categories = tuple(
            PostCategory(id=term_id(name), name=name)
            for name in split_terms(metadata.get('category', metadata.get('categories')))
        )
        tags = tuple(
            PostTag(id=term_id(name), name=name.lower())
            for name in split_terms(metadata.get('tags'))
        )

        return PostMetadata(
            title=metadata.get('title'),
            date=format_date(metadata.get('date')),
            tags=tags,
            categories=categories,
            image=self.post_image_reference(slug, metadata.get('image')),
            slug=slug,
            description=metadata.get('description'),
            content=body,
        )

    def get_posts(self):
        """All posts, newest first."""
        if not os.path.isdir(self.posts_dir):
            self.logger.warning(f"Posts folder not found: {self.posts_dir}")
            return []

        posts = []
        for slug in sorted(os.listdir(self.posts_dir)):
            post = self.load_post(slug)
            if post is None:
                self.logger.debug(f"No {POST_FILENAME} in {slug}, skipping")
                continue
            posts.append(post)

        posts.sort(key=lambda p: parse_date(p.date), reverse=True)
        return posts

    def get_markdown_files(self, directory):
        """Get all markdown files below a directory, recursively."""
        files = []
        for root, dirs, filenames in os.walk(directory):
            dirs.sort()
            for filename in sorted(filenames):
                if filename.endswith('.md'):
                    files.append(os.path.join(root, filename))
        return files

    def get_pages(self):
        if not os.path.isdir(self.pages_dir):
            self.logger.warning(f"Pages folder not found: {self.pages_dir}")
            return []

        pages = []
        for page_path in self.get_markdown_files(self.pages_dir):
            metadata, body = self.parse_markdown_with_metadata(page_path)
            slug = os.path.splitext(os.path.relpath(page_path, self.pages_dir))[0]
            pages.append(PostMetadata(
                title=metadata.get('title'),
                date=format_date(metadata.get('date')),
                tags=(),
                categories=(),
                image=metadata.get('image'),
                slug=slug.replace(os.sep, '/'),
                description=metadata.get('description'),
                content=body,
            ))
        return pages


def get_categories(posts):
    """Group categories across posts, in first-seen order."""
    categories = {}
    for post in posts:
        for cat in post.categories:
            category = categories.setdefault(cat.id, Category(id=cat.id, name=cat.name))
            category.slugs.append(post.slug)
    return list(categories.values())


def get_tags(posts):
    """Group tags across posts, in first-seen order."""
    tags = {}
    for post in posts:
        for t in post.tags:
            tag = tags.setdefault(t.id, Tag(id=t.id, name=t.name))
            tag.slugs.append(post.slug)
    return list(tags.values())
