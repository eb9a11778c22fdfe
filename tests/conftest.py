"""Test configuration and fixtures for Quire tests."""

import pytest
import os
import sys
import tempfile
import shutil
import logging
import io
from pathlib import Path
import yaml
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from quire_pkg.models import ImageResolution
from quire_pkg.settings import ContentConfig, FtpConfig


def make_image_bytes(size=(100, 100), format='PNG', mode='RGB', color='red'):
    """Create a test image in memory."""
    img = Image.new(mode, size, color=color)
    img_bytes = io.BytesIO()
    img.save(img_bytes, format=format)
    return img_bytes.getvalue()


def write_image(path, size=(100, 100), format='PNG', mode='RGB'):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(make_image_bytes(size, format, mode))
    return str(path)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_quire_logger():
    """Drop handlers installed by Quire.setup_logging between tests."""
    yield
    logger = logging.getLogger('Quire')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def content_config():
    return ContentConfig(
        contents_folder='content',
        pages_folder='pages',
        posts_folder='posts',
        public_folder='public',
        theme_image_resolutions={
            'light': {
                'postThumbnail': ImageResolution(width=40, aspect_ratio='1:1'),
                'contentImage': ImageResolution(width=80, quality=80),
                'galleryImage': ImageResolution(width=120),
                'galleryThumbnail': ImageResolution(width=30, aspect_ratio='1:1', fit='cover'),
            },
            'dark': {
                'contentImage': ImageResolution(width=50),
            },
        },
    )


@pytest.fixture
def ftp_config():
    return FtpConfig(host='ftp.example.com', user='user', password='secret',
                     secure=False, upload_path='/www/content')


@pytest.fixture
def site_dir(temp_dir):
    """Create a site source tree with posts, pages, public files and images."""
    root = Path(temp_dir) / 'site'
    posts_dir = root / 'posts'
    pages_dir = root / 'pages'

    (root / 'public').mkdir(parents=True)
    (root / 'public' / 'style.css').write_text('body { color: black; }')
    (root / 'intro.md').write_text('# Welcome\n')
    (root / 'main-menu.json').write_text('[{"title": "Home", "url": "/"}]')

    (root / 'content-config.yaml').write_text(yaml.safe_dump({
        'contentsFolder': 'content',
        'pagesFolder': 'pages',
        'postsFolder': 'posts',
        'publicFolder': 'public',
        'themeImageResolutions': {
            'light': {
                'postThumbnail': {'width': 40, 'aspectRatio': '1:1'},
                'contentImage': {'width': 80, 'quality': 80},
                'galleryImage': {'width': 120},
                'galleryThumbnail': {'width': 30, 'aspectRatio': '1:1', 'fit': 'cover'},
            },
        },
    }))
    (root / 'ftp-config.yaml').write_text(yaml.safe_dump({
        'host': 'ftp.example.com',
        'user': 'user',
        'password': 'secret',
        'secure': False,
        'uploadPath': '/www/content',
    }))

    first = posts_dir / 'first-post'
    first.mkdir(parents=True)
    (first / 'post.md').write_text("""---
title: First Post
date: 01-03-2024
category: Travel, Photos
tags: Italy, summer
image: cover.jpg
description: Our first trip
---

Some intro text.

![Beach](/content/posts/first-post/beach.jpg)

[gallery]
- [One](/content/posts/first-post/g1.png)
- [Two](/content/posts/first-post/g2.jpg)
[/gallery]
""")
    write_image(first / 'cover.jpg', (200, 100), 'JPEG')
    write_image(first / 'beach.jpg', (160, 120), 'JPEG')
    write_image(first / 'g1.png', (300, 200), 'PNG')
    write_image(first / 'g2.jpg', (240, 240), 'JPEG')

    second = posts_dir / 'second-post'
    second.mkdir(parents=True)
    (second / 'post.md').write_text("""---
title: Second Post
date: 15-06-2024
category: travel
tags: Summer
image: cover.png
---

Another post without a description but with plenty of words in its body text.

![Beach again](/content/posts/first-post/beach.jpg)
""")
    write_image(second / 'cover.png', (120, 60), 'PNG')

    # Folder without post.md is ignored
    (posts_dir / 'drafts').mkdir()

    pages_dir.mkdir(parents=True)
    (pages_dir / 'about.md').write_text("""---
title: About
---

<p><img src="/content/pages/team.jpg" alt="Team"/></p>
""")
    write_image(pages_dir / 'team.jpg', (100, 100), 'JPEG')

    return str(root)
