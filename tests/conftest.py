"""Test configuration and fixtures for Gazette tests."""

import pytest
import tempfile
import shutil
import logging
import os
from pathlib import Path
import yaml

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gazette_pkg.document import Document, RawDocument
from gazette_pkg.frontmatter import PartialFrontmatter


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers a build attached so each test configures logging afresh."""
    yield
    logger = logging.getLogger('gazette_pkg')
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def site_dir(temp_dir):
    """Create a small site with layouts, pages, posts, a draft and static files."""
    root = Path(temp_dir) / 'site'
    (root / '_layouts').mkdir(parents=True)
    (root / '_data').mkdir()
    (root / 'posts').mkdir()
    (root / '_drafts').mkdir()
    (root / 'css').mkdir()

    (root / '_gazette.yml').write_text(yaml.safe_dump({
        'site': {
            'title': 'Test Site',
            'description': 'A site for tests',
            'base_url': 'https://example.com',
        },
        'posts': {
            'dir': 'posts',
            'drafts_dir': '_drafts',
            'rss': 'rss.xml',
            'jsonfeed': 'feed.json',
            'default': {
                'layout': 'post.html',
                'permalink': '/blog/{{year}}/{{slug}}/',
            },
        },
    }))

    (root / '_layouts' / 'post.html').write_text(
        "<h1>{{ page.title }}</h1>\n<div>{{ content }}</div>\n")
    (root / '_layouts' / 'default.html').write_text(
        "<title>{{ site.title }}</title>\n{{ content }}")
    (root / '_data' / 'authors.yml').write_text(yaml.safe_dump({'jane': 'Jane Doe'}))

    (root / 'index.html').write_text("""---
title: Home
permalink: /
layout: default.html
pagination:
  include: all
  per_page: 2
---
{% for post in paginator.pages %}<p>{{ post.title }}</p>{% endfor %}
""")
    (root / 'about.md').write_text("""---
title: About
---
# About {{ site.data.authors.jane }}
""")

    (root / 'posts' / '2023-01-15-first-post.md').write_text("""---
tags: [python, web]
categories: [code]
---
First post excerpt.

The rest of the first post.
""")
    (root / 'posts' / '2023-03-02-second-post.md').write_text("""---
tags: [python]
---
Second post body.
""")
    (root / 'posts' / '2024-07-04 Third Post.md').write_text("Third post body.\n")
    (root / 'posts' / 'hidden-draft.md').write_text("""---
is_draft: true
---
Not ready.
""")
    (root / '_drafts' / '2024-08-01-upcoming.md').write_text("Coming soon.\n")

    (root / 'css' / 'style.css').write_text("body { color: black; }\n")
    (root / '.secret').write_text("do not copy\n")

    return str(root)


def make_document(rel_path, front=None, body='', default=None):
    """Build a Document from a front matter mapping without touching disk."""
    raw = RawDocument(PartialFrontmatter.from_dict(front or {}), body)
    return Document.from_raw(raw, rel_path, default)


@pytest.fixture
def document_factory():
    """Factory for in-memory documents."""
    return make_document
