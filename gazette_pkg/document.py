"""
Source documents: splitting front matter from the body, and the resolved
document the rest of the build works with.
"""

import os
import re
import logging

import yaml

from .errors import ContentError
from .files import read_file
from .frontmatter import PartialFrontmatter, derive_from_path, merge, resolve
from .permalink import default_resolver

logger = logging.getLogger(__name__)

FRONT_MATTER_RE = re.compile(r'\A---\s*\r?\n([\s\S]*\n)?---\s*\r?\n')
FRONT_MATTER_DIVIDE_RE = re.compile(r'---\s*\r?\n')
DEPRECATED_DIVIDE_RE = re.compile(r'(?:\A|\n)---\s*\r?\n')


def split_document(content):
    """
    Split a source file into (front matter text or None, body).

    Front matter is fenced above and below by '---' lines. A document with a
    single trailing '---' line after its front matter is still accepted but
    logs a deprecation warning.
    """
    if FRONT_MATTER_RE.match(content):
        splits = FRONT_MATTER_DIVIDE_RE.split(content, maxsplit=2)[1:]
        front = splits[0] if splits else ''
        body = splits[1] if len(splits) > 1 else ''
        return (front or None), body

    if DEPRECATED_DIVIDE_RE.search(content):
        logger.warning("Trailing separators are deprecated. "
                       "Surround front matter with '---' above and below.")
        front, body = DEPRECATED_DIVIDE_RE.split(content, maxsplit=1)
        return (front or None), body

    return None, content


class RawDocument:
    """A document before any defaults or derived values are applied."""

    def __init__(self, front, body):
        self.front = front
        self.body = body

    @classmethod
    def parse(cls, content, source=None):
        front_text, body = split_document(content)
        if front_text is None:
            return cls(PartialFrontmatter(), body)
        try:
            data = yaml.safe_load(front_text)
        except yaml.YAMLError as e:
            raise ContentError(f"invalid YAML front matter: {e}", source)
        if data is None:
            return cls(PartialFrontmatter(), body)
        if not isinstance(data, dict):
            raise ContentError("front matter must be a mapping", source)
        return cls(PartialFrontmatter.from_dict(data, source), body)


class Document:
    """
    A source file with fully resolved front matter, its URL and its
    destination path relative to the output directory.
    """

    def __init__(self, front, content, file_path, url_path, destination):
        self.front = front
        self.content = content
        self.file_path = file_path
        self.url_path = url_path
        self.destination = destination
        self.excerpt = extract_excerpt(front, content)
        self.rendered = None
        self.rendered_excerpt = None

    def __repr__(self):
        return f"Document({self.file_path!r}, url={self.url_path!r})"

    @classmethod
    def parse(cls, src_path, rel_path, default_front=None, resolver=None,
              date_in_filename=True):
        """
        Read `src_path` and resolve its metadata. `rel_path` is the path
        relative to the site source, used for derived values and
        permalinks.
        """
        rel_path = rel_path.replace(os.sep, '/')
        raw = RawDocument.parse(read_file(src_path), rel_path)
        return cls.from_raw(raw, rel_path, default_front, resolver, date_in_filename)

    @classmethod
    def from_raw(cls, raw, rel_path, default_front=None, resolver=None,
                 date_in_filename=True):
        resolver = resolver or default_resolver()
        partial = merge(derive_from_path(raw.front, rel_path, date_in_filename), default_front)
        front = resolve(partial, rel_path)

        attributes = resolver.permalink_attributes(front, rel_path)
        url_path = resolver.explode(front.permalink_template, attributes)
        destination = resolver.to_destination_path(url_path)
        logger.debug(f"{rel_path}: url '{url_path}', destination '{destination}'")
        return cls(front, raw.body, rel_path, url_path, destination)

    def attributes(self):
        """Values exposed to templates and used as pagination sort keys."""
        front = self.front
        attributes = {
            'permalink': self.url_path,
            'title': front.title,
            'slug': front.slug,
            'description': front.description,
            'excerpt': self.rendered_excerpt if self.rendered_excerpt is not None else self.excerpt,
            'categories': list(front.categories),
            'tags': list(front.tags) if front.tags else [],
            'published_date': front.published_date,
            'format': front.format.value,
            'layout': front.layout,
            'is_draft': front.is_draft,
            'weight': front.weight,
            'collection': front.collection,
            'data': dict(front.data),
            'file': {
                'permalink': self.file_path,
                'parent': os.path.dirname(self.file_path),
            },
        }
        if self.rendered is not None:
            attributes['content'] = self.rendered
        return attributes


def extract_excerpt(front, content):
    """An explicit excerpt, else the body up to the excerpt separator."""
    if front.excerpt is not None:
        return front.excerpt
    separator = front.excerpt_separator
    if not separator:
        return None
    return content.split(separator, 1)[0]
