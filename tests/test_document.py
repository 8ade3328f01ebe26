"""Tests for splitting and resolving source documents."""

import pytest
import os
import logging
from datetime import datetime, timezone

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gazette_pkg.document import Document, RawDocument, split_document
from gazette_pkg.errors import ContentError, MissingFieldError, SourceReadError
from gazette_pkg.frontmatter import PartialFrontmatter, SourceFormat


class TestSplitDocument:
    """Test cases for separating front matter from the body."""

    @pytest.mark.parametrize('content,front,body', [
        ('', None, ''),
        ('Content\n', None, 'Content\n'),
        ('---\n---\n', None, ''),
        ('---\n---\nContent\n', None, 'Content\n'),
        ('---\ntitle: test_post\n---\n', 'title: test_post\n', ''),
        ('---\ntitle: test_post\n---\nContent\n', 'title: test_post\n', 'Content\n'),
        ('---\r\ntitle: x\r\n---\r\nBody', 'title: x\r\n', 'Body'),
    ])
    def test_split(self, content, front, body):
        """Test fenced front matter."""
        assert split_document(content) == (front, body)

    def test_body_may_contain_separators(self):
        """Test that only the first two fences split."""
        front, body = split_document('---\ntitle: a\n---\nabove\n---\nbelow\n')
        assert front == 'title: a\n'
        assert body == 'above\n---\nbelow\n'

    def test_trailing_separator_is_deprecated(self, caplog):
        """Test the legacy form with only a closing fence."""
        with caplog.at_level(logging.WARNING, logger='gazette_pkg.document'):
            front, body = split_document('title: legacy\n---\nBody')
        assert front == 'title: legacy'
        assert body == 'Body'
        assert 'deprecated' in caplog.text

    def test_leading_fence_only(self):
        """Test a document that opens a fence but never closes it."""
        front, body = split_document('---\nBody')
        assert front is None
        assert body == 'Body'


class TestRawDocument:
    """Test cases for parsing front matter YAML."""

    def test_parse(self):
        """Test known fields and free-form data."""
        raw = RawDocument.parse('---\ntitle: Hello\nauthor: jane\n---\nBody\n')
        assert raw.front.title == 'Hello'
        assert raw.front.data == {'author': 'jane'}
        assert raw.body == 'Body\n'

    def test_no_front_matter(self):
        """Test a plain body."""
        raw = RawDocument.parse('Just text\n')
        assert raw.front == PartialFrontmatter()
        assert raw.body == 'Just text\n'

    def test_non_mapping_front_matter(self):
        """Test that a YAML list is rejected."""
        with pytest.raises(ContentError, match='mapping'):
            RawDocument.parse('---\n- a\n- b\n---\nbody', 'list.md')

    def test_invalid_yaml(self):
        """Test that broken YAML is a content error naming the file."""
        with pytest.raises(ContentError, match='broken.md'):
            RawDocument.parse('---\ntitle: [unclosed\n---\nbody', 'broken.md')


class TestDocument:
    """Test cases for resolved documents."""

    def test_path_permalink(self, document_factory):
        """Test the default permalink for a page."""
        doc = document_factory('docs/guide.md', {'title': 'Guide'})
        assert doc.url_path == 'docs/guide.html'
        assert doc.destination == 'docs/guide.html'
        assert doc.front.format is SourceFormat.MARKDOWN

    def test_explicit_permalink(self, document_factory):
        """Test a dated pretty URL."""
        doc = document_factory('posts/2017-03-05-hello.md',
                               {'permalink': '/blog/{{year}}/{{month}}/{{slug}}/'})
        assert doc.url_path == 'blog/2017/03/hello/'
        assert doc.destination == 'blog/2017/03/hello/index.html'
        assert doc.front.published_date == datetime(2017, 3, 5, tzinfo=timezone.utc)

    def test_default_layer_fills_gaps(self, document_factory):
        """Test that collection defaults apply below document values."""
        default = PartialFrontmatter(layout='post.html', is_draft=True, data={'a': 1, 'b': 1})
        doc = document_factory('p.md', {'is_draft': False, 'data': {'a': 2}}, default=default)
        assert doc.front.layout == 'post.html'
        assert doc.front.is_draft is False
        assert doc.front.data == {'a': 2, 'b': 1}

    def test_path_derived_title_beats_default(self, document_factory):
        """Test that values derived from the file name outrank defaults."""
        doc = document_factory('my-page.md', default=PartialFrontmatter(title='Fallback'))
        assert doc.front.title == 'My Page'

    def test_missing_slug_after_cascade(self):
        """Test that a blank file name leaves no slug to derive."""
        raw = RawDocument(PartialFrontmatter(), '')
        with pytest.raises(MissingFieldError):
            Document.from_raw(raw, '!!!.md')

    def test_excerpt(self, document_factory):
        """Test the excerpt up to the first blank line."""
        doc = document_factory('p.md', body='Intro line.\n\nThe rest.\n')
        assert doc.excerpt == 'Intro line.'

    def test_explicit_excerpt(self, document_factory):
        """Test that front matter excerpts win."""
        doc = document_factory('p.md', {'excerpt': 'Custom'}, body='Intro.\n\nRest.\n')
        assert doc.excerpt == 'Custom'

    def test_empty_separator_disables_excerpt(self, document_factory):
        """Test that an empty separator yields no excerpt."""
        doc = document_factory('p.md', {'excerpt_separator': ''}, body='Intro.\n\nRest.\n')
        assert doc.excerpt is None

    def test_custom_separator(self, document_factory):
        """Test a custom excerpt separator."""
        doc = document_factory('p.md', {'excerpt_separator': '<!--more-->'},
                               body='Teaser<!--more-->Full')
        assert doc.excerpt == 'Teaser'

    def test_attributes(self, document_factory):
        """Test the template view of a document."""
        doc = document_factory('posts/2020-01-02-a.md', {'tags': ['x'], 'mood': 'ok'}, body='Body')
        attributes = doc.attributes()
        assert attributes['permalink'] == 'posts/2020-01-02-a.html'
        assert attributes['title'] == 'A'
        assert attributes['tags'] == ['x']
        assert attributes['categories'] == []
        assert attributes['format'] == 'markdown'
        assert attributes['data'] == {'mood': 'ok'}
        assert attributes['file'] == {'permalink': 'posts/2020-01-02-a.md', 'parent': 'posts'}
        assert 'content' not in attributes

        doc.rendered = '<p>Body</p>'
        assert doc.attributes()['content'] == '<p>Body</p>'

    def test_parse_from_disk(self, temp_dir):
        """Test reading a file with Windows line endings."""
        path = os.path.join(temp_dir, 'note.md')
        with open(path, 'wb') as f:
            f.write(b'---\r\ntitle: Note\r\n---\r\nLine one\r\n')
        doc = Document.parse(path, 'note.md')
        assert doc.front.title == 'Note'
        assert doc.content == 'Line one\n'

    def test_parse_missing_file(self, temp_dir):
        """Test that unreadable sources are wrapped with their path."""
        path = os.path.join(temp_dir, 'missing.md')
        with pytest.raises(SourceReadError, match='missing.md'):
            Document.parse(path, 'missing.md')
