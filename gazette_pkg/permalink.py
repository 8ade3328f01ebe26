"""
Permalink rendering.

Permalinks are Jinja2 templates such as '/{{parent}}/{{name}}{{ext}}' or
'/blog/{{year}}/{{month}}/{{slug}}/', rendered against attributes derived
from a document's front matter and source path.
"""

import logging
import re
from pathlib import PurePosixPath

from jinja2 import Environment, TemplateError

from .errors import ConfigurationError
from .slug import slugify

logger = logging.getLogger(__name__)


class PermalinkResolver:
    """Renders permalink templates and maps the resulting URLs to files."""

    def __init__(self, environment=None):
        self.env = environment or Environment(autoescape=False, keep_trailing_newline=False)
        self._cache = {}

    def _template(self, permalink):
        template = self._cache.get(permalink)
        if template is None:
            try:
                template = self.env.from_string(permalink)
            except TemplateError as e:
                raise ConfigurationError(f"failed to parse permalink '{permalink}': {e}")
            self._cache[permalink] = template
        return template

    def explode(self, permalink, attributes):
        """Render a permalink template into a URL relative to the site root."""
        try:
            url = self._template(permalink).render(**attributes)
        except TemplateError as e:
            raise ConfigurationError(f"failed to render permalink '{permalink}': {e}")

        # Windows style separators, then blank substitutions.
        url = url.replace('\\', '/')
        url = re.sub('/{2,}', '/', url)
        if url.startswith('/'):
            url = url[1:]
        return url

    def to_destination_path(self, url):
        return format_url_as_file(url)

    def permalink_attributes(self, front, rel_path):
        return permalink_attributes(front, rel_path)


def format_url_as_file(url):
    """
    Map a URL to a relative output path. URLs whose last segment has no
    extension are treated as directories and get an 'index.html'.
    """
    path = PurePosixPath(url.lstrip('/'))
    if not path.suffix:
        path = path / 'index.html'
    return str(path)


def format_path_variable(rel_path):
    """Parent directory of a source path, with forward slashes and no leading './' or '/'."""
    parent = str(PurePosixPath(rel_path.replace('\\', '/')).parent)
    if parent == '.':
        return ''
    if parent.startswith('./'):
        parent = parent[1:]
    if parent.startswith('/'):
        parent = parent[1:]
    return parent


def permalink_attributes(front, rel_path):
    """Variables available to a document's permalink template."""
    rel_path = rel_path.replace('\\', '/')
    name = PurePosixPath(rel_path).name
    attributes = {
        'parent': format_path_variable(rel_path),
        'name': name.rsplit('.', 1)[0] if '.' in name[1:] else name,
        'ext': '.html',
        'slug': front.slug,
        'categories': '/'.join(slugify(category) for category in front.categories),
    }

    date = front.published_date
    if date is not None:
        attributes.update({
            'year': str(date.year),
            'month': f"{date.month:02d}",
            'i_month': str(date.month),
            'day': f"{date.day:02d}",
            'i_day': str(date.day),
            'hour': f"{date.hour:02d}",
            'minute': f"{date.minute:02d}",
            'second': f"{date.second:02d}",
        })

    attributes['data'] = dict(front.data)
    return attributes


_default_resolver = None


def default_resolver():
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = PermalinkResolver()
    return _default_resolver


def explode_permalink(permalink, attributes):
    return default_resolver().explode(permalink, attributes)
