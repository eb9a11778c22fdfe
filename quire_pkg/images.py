"""
Batch generation of theme image derivatives.

Each theme in the content config carries up to four resolution policies.
For every policy the matching images are resized into the staging directory
and an ordered list of ImageMap entries is produced for the templates.
"""

import logging
import os
import posixpath
from typing import Dict, Iterable, Iterator, List

from .errors import MissingSourceError, QuireError, UnsafePathError
from .extractor import get_content_images, get_gallery_images
from .models import IMAGE_CATEGORIES, ImageMap, ImageResolution
from .transform import process_image

CATEGORY_SUFFIXES = {
    'postThumbnail': '-thumbnail',
    'contentImage': '',
    'galleryImage': '-gallery',
    'galleryThumbnail': '-gallery-thumb',
}

CATEGORY_LABELS = {
    'postThumbnail': 'Post Thumbnails',
    'contentImage': 'Content Images',
    'galleryImage': 'Gallery Images',
    'galleryThumbnail': 'Gallery Thumbnails',
}


def category_prefix(theme, category):
    """Filename prefix for derivatives of ``category`` in ``theme``."""
    return theme + CATEGORY_SUFFIXES[category]


def is_remote(reference):
    return reference.startswith(('http://', 'https://', '//'))


def unique_references(references: Iterable[str]) -> List[str]:
    """Drop empty, remote and repeated references, keeping first occurrences."""
    seen = set()
    result = []
    for ref in references:
        if not ref or is_remote(ref) or ref in seen:
            continue
        seen.add(ref)
        result.append(ref)
    return result


class ImageBatchProcessor:
    """Resizes referenced images into the staging directory, one at a time."""

    def __init__(self, staging_dir, contents_folder, collect_errors=False):
        self.staging_dir = staging_dir
        self.contents_folder = contents_folder
        self.collect_errors = collect_errors
        self.errors = []
        self.images_generated = 0
        self.logger = logging.getLogger('Quire.images')

    def resolve_source(self, reference):
        """
        Map a site reference such as ``/content/posts/a/b.jpg`` to its staged
        file. The content root segment is dropped; the result must stay inside
        the staging directory.
        """
        parts = [p for p in reference.split('/') if p and p != self.contents_folder]
        source_path = os.path.join(self.staging_dir, *parts)

        staging_root = os.path.abspath(self.staging_dir)
        if not os.path.abspath(source_path).startswith(staging_root + os.sep):
            raise UnsafePathError(reference)
        return source_path

    def derivative_reference(self, reference, prefix):
        return posixpath.join(posixpath.dirname(reference),
                              f"{prefix}-{posixpath.basename(reference)}")

    def process_reference(self, reference, prefix, resolution: ImageResolution,
                          theme=None, category=None) -> ImageMap:
        """Generate one derivative and return its mapping."""
        source_path = self.resolve_source(reference)
        if not os.path.isfile(source_path):
            raise MissingSourceError(reference, source_path, theme, category)

        dest_path = os.path.join(os.path.dirname(source_path),
                                 f"{prefix}-{os.path.basename(source_path)}")
        self.logger.info(f"- {reference} -> {dest_path}")

        with open(source_path, 'rb') as f:
            data = f.read()
        output = process_image(data, resolution, source=reference)
        with open(dest_path, 'wb') as f:
            f.write(output)

        self.images_generated += 1
        return ImageMap(reference, self.derivative_reference(reference, prefix))

    def iter_images(self, prefix, references, resolution, theme=None, category=None) -> Iterator[ImageMap]:
        """Yield an ImageMap for every unique local reference, in order."""
        for reference in unique_references(references):
            try:
                yield self.process_reference(reference, prefix, resolution, theme, category)
            except (QuireError, OSError) as e:
                self.logger.error(f"Failed to process {reference} (theme '{theme}', {category}): {e}")
                if not self.collect_errors:
                    raise
                self.errors.append((reference, theme, category, e))

    def process_images(self, prefix, references, resolution, theme=None, category=None) -> List[ImageMap]:
        return list(self.iter_images(prefix, references, resolution, theme, category))

    def process_post_thumbnails(self, prefix, posts, resolution, theme=None) -> List[ImageMap]:
        """Generate thumbnails for the featured image of every post that has one."""
        references = []
        for post in posts:
            if not post.image:
                self.logger.debug(f"Post {post.slug} has no image, skipping thumbnail")
                continue
            references.append(post.image)
        return self.process_images(prefix, references, resolution, theme, 'postThumbnail')

    def process_theme(self, theme, resolutions: Dict[str, ImageResolution], posts, pages) -> Dict[str, List[ImageMap]]:
        """
        Run every configured category for one theme.

        Returns a dict keyed by category name, containing only the
        categories the theme configures.
        """
        image_maps = {}
        documents = list(posts) + list(pages)
        gallery_images = None

        for category in IMAGE_CATEGORIES:
            resolution = resolutions.get(category)
            if not resolution:
                continue

            self.logger.info(f"Processing {CATEGORY_LABELS[category]}")
            prefix = category_prefix(theme, category)

            if category == 'postThumbnail':
                maps = self.process_post_thumbnails(prefix, posts, resolution, theme)
            elif category == 'contentImage':
                maps = self.process_images(prefix, get_content_images(documents),
                                           resolution, theme, category)
            else:
                if gallery_images is None:
                    gallery_images = get_gallery_images(documents)
                maps = self.process_images(prefix, gallery_images, resolution, theme, category)

            image_maps[category] = maps

        return image_maps
