"""Data models shared across the build pipeline."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

FIT_MODES = ('fill', 'contain', 'cover', 'inside', 'outside')
DEFAULT_FIT = 'cover'
DEFAULT_QUALITY = 100

# Keys of a theme's resolution bundle, in processing order
IMAGE_CATEGORIES = ('postThumbnail', 'contentImage', 'galleryImage', 'galleryThumbnail')


@dataclass(frozen=True)
class PostTag:
    id: str
    name: str


@dataclass(frozen=True)
class PostCategory:
    id: str
    name: str


@dataclass
class Tag:
    """A tag together with the slugs of every post carrying it."""

    id: str
    name: str
    slugs: List[str] = field(default_factory=list)


@dataclass
class Category:
    """A category together with the slugs of every post filed under it."""

    id: str
    name: str
    slugs: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PostMetadata:
    """A parsed post or page. Pages carry no tags or categories."""

    title: Optional[str]
    date: Optional[str]
    tags: Tuple[PostTag, ...]
    categories: Tuple[PostCategory, ...]
    image: Optional[str]
    slug: str
    description: Optional[str]
    content: str


@dataclass(frozen=True)
class ImageResolution:
    """Resize policy for one image derivative."""

    width: Optional[int] = None
    aspect_ratio: Optional[str] = None
    quality: Optional[int] = None
    fit: Optional[str] = None

    @property
    def effective_quality(self) -> int:
        return self.quality or DEFAULT_QUALITY

    @property
    def effective_fit(self) -> str:
        return self.fit or DEFAULT_FIT

    def ratio(self) -> Optional[Tuple[int, int]]:
        """Return the aspect ratio as ``(w, h)`` integers, or None."""
        if not self.aspect_ratio:
            return None
        w, h = str(self.aspect_ratio).split(':')
        return int(w), int(h)


@dataclass(frozen=True)
class ImageMap:
    """Maps an original image reference to its generated derivative."""

    from_path: str
    to_path: str

    def as_dict(self):
        return {'from': self.from_path, 'to': self.to_path}
