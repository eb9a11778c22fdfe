"""
Image reference extraction from markdown content.

Two independent line scans are provided: inline content images (HTML
``<p><img></p>`` tags or markdown ``![alt](path)``) and gallery images
(``- [label](path)`` list items between ``[gallery]`` and ``[/gallery]``).
Lines that do not match are skipped; malformed syntax never raises.
"""

import re
from typing import Iterable, Iterator, List, Optional, Tuple

LINE_SPLIT_RE = re.compile(r'\r?\n')

IMG_TAG_RE = re.compile(r'<p><img(.*?)/?></p>?', re.IGNORECASE)
IMG_SRC_RE = re.compile(r'src="(.+?)"')
# Paths may contain one level of balanced parentheses
IMG_MD_RE = re.compile(r'!\[([^\]]*)\]\(((?:[^()]|\([^()]*\))+)\)')

GALLERY_START_RE = re.compile(r'^\[gallery\]', re.IGNORECASE)
GALLERY_END_RE = re.compile(r'\[/gallery\]', re.IGNORECASE)
GALLERY_ITEM_RE = re.compile(r'^-\s+\[([^\]]*)\]\(((?:[^()]|\([^()]*\))+)\)')

OUTSIDE = 'outside'
INSIDE = 'inside'


def split_lines(content):
    """Split content on ``\\n`` or ``\\r\\n``."""
    return LINE_SPLIT_RE.split(content or '')


# Line classifiers

def is_gallery_start(line):
    return bool(GALLERY_START_RE.match(line))


def is_gallery_end(line):
    return bool(GALLERY_END_RE.search(line))


# Inline matchers

def image_tag_path(line) -> Optional[str]:
    """Return the ``src`` of a paragraph-wrapped ``<img>`` tag, if any."""
    match = IMG_TAG_RE.search(line)
    if not match:
        return None
    src = IMG_SRC_RE.search(match.group(1))
    return src.group(1) if src else None


def image_markdown_path(line) -> Optional[str]:
    """Return the path of the first ``![alt](path)`` on the line, if any."""
    match = IMG_MD_RE.search(line)
    return match.group(2) if match else None


def gallery_item_path(line) -> Optional[str]:
    """Return the path of a ``- [label](path)`` list item, if any."""
    match = GALLERY_ITEM_RE.match(line)
    return match.group(2) if match else None


def content_image_path(line) -> Optional[str]:
    """Extract at most one inline image from a line; HTML tags win."""
    return image_tag_path(line) or image_markdown_path(line)


def gallery_step(state, line) -> Tuple[str, Optional[str]]:
    """
    Advance the gallery scan by one line.

    Returns the next state and the image path the line yields, if any.
    Marker lines never yield an image.
    """
    if is_gallery_start(line):
        return INSIDE, None
    if is_gallery_end(line):
        return OUTSIDE, None
    if state == INSIDE:
        return state, gallery_item_path(line)
    return state, None


def iter_content_images(content) -> Iterator[str]:
    for line in split_lines(content):
        path = content_image_path(line)
        if path:
            yield path


def iter_gallery_images(content) -> Iterator[str]:
    state = OUTSIDE
    for line in split_lines(content):
        state, path = gallery_step(state, line)
        if path:
            yield path


def get_content_images_from_md(content) -> List[str]:
    """Inline image references in document order."""
    return list(iter_content_images(content))


def get_gallery_images_from_md(content) -> List[str]:
    """Gallery image references in document order."""
    return list(iter_gallery_images(content))


def get_content_images(posts: Iterable) -> List[str]:
    """Flatten the inline image references of every post and page."""
    return [path for post in posts for path in iter_content_images(post.content)]


def get_gallery_images(posts: Iterable) -> List[str]:
    """Flatten the gallery image references of every post and page."""
    return [path for post in posts for path in iter_gallery_images(post.content)]
