"""Tests for permalink rendering and destination paths."""

import pytest
import os
from datetime import datetime, timezone

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from gazette_pkg.errors import ConfigurationError
from gazette_pkg.frontmatter import PartialFrontmatter, resolve
from gazette_pkg.permalink import (PermalinkResolver, explode_permalink,
                                   format_path_variable, format_url_as_file,
                                   permalink_attributes)


@pytest.fixture
def resolver():
    return PermalinkResolver()


class TestExplode:
    """Test cases for rendering permalink templates."""

    def test_double_slashes_collapse(self, resolver):
        """Test that '//' collapses and the leading slash is dropped."""
        assert resolver.explode('//path/middle//end', {}) == 'path/middle/end'

    def test_adjacent_empty_segments_collapse(self, resolver):
        """Test that runs of slashes from several blank values collapse."""
        assert resolver.explode('/{{a}}/{{b}}/x', {}) == 'x'
        assert resolver.explode('/{{a}}/{{b}}/{{c}}/x/', {'c': 'y'}) == 'y/x/'

    def test_variables(self, resolver):
        """Test substitution of template variables."""
        attributes = {'year': '2017', 'month': '03', 'slug': 'hello'}
        url = resolver.explode('/blog/{{year}}/{{month}}/{{slug}}/', attributes)
        assert url == 'blog/2017/03/hello/'

    def test_empty_parent(self, resolver):
        """Test the path alias for a file at the site root."""
        attributes = {'parent': '', 'name': 'about', 'ext': '.html'}
        assert resolver.explode('/{{parent}}/{{name}}{{ext}}', attributes) == 'about.html'

    def test_backslashes_become_slashes(self, resolver):
        """Test Windows separators in substituted values."""
        assert resolver.explode('/{{parent}}/x', {'parent': 'a\\b'}) == 'a/b/x'

    def test_undefined_variable_renders_empty(self, resolver):
        """Test that missing variables leave no trace but a collapsed slash."""
        assert resolver.explode('/blog/{{year}}/{{slug}}/', {'slug': 's'}) == 'blog/s/'

    def test_invalid_template(self, resolver):
        """Test that template syntax errors are configuration errors."""
        with pytest.raises(ConfigurationError, match='permalink'):
            resolver.explode('/{{ unclosed', {})

    def test_templates_are_cached(self, resolver):
        """Test that a template string is compiled once."""
        resolver.explode('/{{slug}}/', {'slug': 'a'})
        resolver.explode('/{{slug}}/', {'slug': 'b'})
        assert list(resolver._cache) == ['/{{slug}}/']

    def test_module_level_helper(self):
        """Test the shared default resolver."""
        assert explode_permalink('/{{slug}}.html', {'slug': 'x'}) == 'x.html'


class TestDestinationPath:
    """Test cases for mapping URLs to output files."""

    @pytest.mark.parametrize('url,expected', [
        ('/hello/world', 'hello/world/index.html'),
        ('/hello/world.html', 'hello/world.html'),
        ('hello/world/', 'hello/world/index.html'),
        ('feed.xml', 'feed.xml'),
        ('', 'index.html'),
    ])
    def test_format_url_as_file(self, url, expected):
        """Test that extensionless URLs become directories with an index."""
        assert format_url_as_file(url) == expected

    def test_resolver_method(self, resolver):
        """Test the resolver's destination mapping."""
        assert resolver.to_destination_path('/hello/world') == 'hello/world/index.html'


class TestAttributes:
    """Test cases for the variables available to permalinks."""

    @pytest.mark.parametrize('rel_path,expected', [
        ('posts/2023/a.md', 'posts/2023'),
        ('a.md', ''),
        ('./posts/a.md', 'posts'),
        ('/abs/a.md', 'abs'),
        ('posts\\win\\a.md', 'posts/win'),
    ])
    def test_parent(self, rel_path, expected):
        """Test the parent variable."""
        assert format_path_variable(rel_path) == expected

    def test_path_attributes(self):
        """Test name, ext, slug and categories."""
        front = resolve(PartialFrontmatter(slug='my-post', title='My Post',
                                           categories=('Rust Lang', 'Web')))
        attributes = permalink_attributes(front, 'posts/archive.tar.md')
        assert attributes['parent'] == 'posts'
        assert attributes['name'] == 'archive.tar'
        assert attributes['ext'] == '.html'
        assert attributes['slug'] == 'my-post'
        assert attributes['categories'] == 'rust-lang/web'
        assert 'year' not in attributes

    def test_date_attributes(self):
        """Test zero padded and unpadded date parts."""
        front = resolve(PartialFrontmatter(
            slug='s', title='T',
            published_date=datetime(2017, 3, 5, 9, 7, 1, tzinfo=timezone.utc)))
        attributes = permalink_attributes(front, 's.md')
        assert attributes['year'] == '2017'
        assert (attributes['month'], attributes['i_month']) == ('03', '3')
        assert (attributes['day'], attributes['i_day']) == ('05', '5')
        assert (attributes['hour'], attributes['minute'], attributes['second']) == ('09', '07', '01')

    def test_data_attributes(self, resolver):
        """Test that front matter data is reachable from templates."""
        front = resolve(PartialFrontmatter(slug='s', title='T', data={'section': 'guides'}))
        attributes = resolver.permalink_attributes(front, 's.md')
        assert resolver.explode('/{{data.section}}/{{slug}}/', attributes) == 'guides/s/'

    def test_dotfile_name_is_kept(self):
        """Test that a leading dot is not an extension."""
        front = resolve(PartialFrontmatter(slug='htaccess', title='T'))
        assert permalink_attributes(front, '.htaccess')['name'] == '.htaccess'
