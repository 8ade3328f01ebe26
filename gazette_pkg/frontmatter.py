"""
Front matter layers and their resolution.

A document's metadata is assembled from several partial layers: what the
document declares itself, what can be derived from its file name, and the
defaults of its collection and of the site. Layers are merged with
"first set value wins"; the result is then resolved into a Frontmatter with
every default applied and its values validated.
"""

import os
import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from functools import reduce
from typing import Any, Dict, List, Optional, Tuple, Union

from .datetime_utils import from_ymd, parse_datetime
from .errors import (BlankTagError, ContentError, InvalidPermalinkAliasError,
                     MissingFieldError)
from .pagination_config import PaginationConfig, PartialPagination
from .slug import slugify, titleize_slug

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1

DEFAULT_EXCERPT_SEPARATOR = '\n\n'

DATE_PREFIX_RE = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})[- ](.*)$')


class PermalinkAlias(Enum):
    PATH = 'path'

    @property
    def template(self):
        return _ALIAS_TEMPLATES[self]


_ALIAS_TEMPLATES = {
    PermalinkAlias.PATH: '/{{parent}}/{{name}}{{ext}}',
}


@dataclass(frozen=True)
class ExplicitPermalink:
    template: str


Permalink = Union[PermalinkAlias, ExplicitPermalink]


def parse_permalink(value):
    if isinstance(value, (PermalinkAlias, ExplicitPermalink)):
        return value
    text = str(value)
    for alias in PermalinkAlias:
        if alias.value == text:
            return alias
    return ExplicitPermalink(text)


def permalink_template(permalink):
    """The template string behind a permalink value."""
    return permalink.template


class SourceFormat(Enum):
    RAW = 'raw'
    MARKDOWN = 'markdown'
    VIMWIKI = 'vimwiki'

    @classmethod
    def from_extension(cls, ext):
        return _EXTENSION_FORMATS.get(ext.lower().lstrip('.'), cls.RAW)


_EXTENSION_FORMATS = {
    'md': SourceFormat.MARKDOWN,
    'wiki': SourceFormat.VIMWIKI,
}


@dataclass(frozen=True)
class PartialFrontmatter:
    permalink: Optional[Permalink] = None
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    excerpt: Optional[str] = None
    categories: Optional[Tuple[str, ...]] = None
    tags: Optional[Tuple[str, ...]] = None
    excerpt_separator: Optional[str] = None
    published_date: Optional[datetime] = None
    format: Optional[SourceFormat] = None
    templated: Optional[bool] = None
    layout: Optional[str] = None
    is_draft: Optional[bool] = None
    weight: Optional[int] = None
    collection: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    pagination: Optional[PartialPagination] = None

    def merge(self, fallback):
        return merge(self, fallback)

    @classmethod
    def from_dict(cls, mapping, source=None):
        """
        Build a layer from a parsed YAML mapping.

        Keys that are not front matter fields are kept in the free-form
        `data` map alongside an explicit `data` mapping, which wins on
        conflicts.
        """
        if mapping is None:
            return cls()
        if not isinstance(mapping, dict):
            raise ContentError("front matter must be a mapping", source)

        values = {}
        data = {}
        for key, value in mapping.items():
            key = str(key)
            if key in _FIELD_PARSERS:
                if value is not None:
                    values[key] = _FIELD_PARSERS[key](value, key, source)
            elif key == 'data':
                if value is None:
                    continue
                if not isinstance(value, dict):
                    raise ContentError("'data' must be a mapping", source)
                data_explicit = {str(k): v for k, v in value.items()}
                values['data'] = data_explicit
            else:
                data[key] = value

        if data:
            data.update(values.get('data', {}))
            values['data'] = data
        return cls(**values)


def merge(primary, fallback):
    """
    Combine two layers. Each field takes primary's value when set and
    fallback's otherwise; `data` is merged key by key with primary winning
    and `pagination` is merged field by field.
    """
    if fallback is None:
        return primary
    values = {}
    for f in fields(PartialFrontmatter):
        mine = getattr(primary, f.name)
        theirs = getattr(fallback, f.name)
        if f.name == 'data':
            values['data'] = _merge_data(mine, theirs)
        elif f.name == 'pagination':
            values['pagination'] = mine.merge(theirs) if mine is not None else theirs
        else:
            values[f.name] = mine if mine is not None else theirs
    return PartialFrontmatter(**values)


def _merge_data(primary, fallback):
    if primary is None:
        return fallback
    if fallback is None:
        return primary
    merged = dict(fallback)
    merged.update(primary)
    return merged


def merge_layers(layers):
    """Fold layers given from highest to lowest precedence."""
    return reduce(merge, layers, PartialFrontmatter())


def file_stem(rel_path):
    """File name with every extension removed."""
    name = os.path.basename(rel_path.replace('\\', '/'))
    return name.split('.', 1)[0] if not name.startswith('.') else name


def parse_file_stem(stem, source=None):
    """Split a 'YYYY-MM-DD-rest' stem into (rest, date)."""
    match = DATE_PREFIX_RE.match(stem)
    if not match:
        return stem, None
    year, month, day, rest = match.groups()
    published = from_ymd(int(year), int(month), int(day), source)
    return rest, published


def derive_from_path(partial, rel_path, date_in_filename=True):
    """
    Fill format, slug, title and published date from a source path. With
    `date_in_filename` off, a leading date is kept as part of the slug.
    """
    values = {}
    if partial.format is None:
        values['format'] = SourceFormat.from_extension(os.path.splitext(rel_path)[1])

    slug = partial.slug
    if partial.slug is None or partial.published_date is None:
        stem, published = file_stem(rel_path), None
        if date_in_filename:
            stem, published = parse_file_stem(stem, rel_path)
        if partial.published_date is None and published is not None:
            values['published_date'] = published
        if partial.slug is None:
            slug = slugify(stem) or None
            if slug is not None:
                values['slug'] = slug

    if partial.title is None and slug is not None:
        values['title'] = titleize_slug(slug)

    return merge(partial, PartialFrontmatter(**values))


@dataclass(frozen=True)
class Frontmatter:
    slug: str
    title: str
    permalink: Permalink = PermalinkAlias.PATH
    description: Optional[str] = None
    excerpt: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    tags: Optional[List[str]] = None
    excerpt_separator: str = DEFAULT_EXCERPT_SEPARATOR
    published_date: Optional[datetime] = None
    format: SourceFormat = SourceFormat.RAW
    templated: bool = True
    layout: Optional[str] = None
    is_draft: bool = False
    weight: int = 0
    collection: str = ''
    data: Dict[str, Any] = field(default_factory=dict)
    pagination: Optional[PaginationConfig] = None

    @property
    def permalink_template(self):
        return permalink_template(self.permalink)


def resolve(partial, source=None):
    """Apply defaults to a fully merged layer and validate it."""
    if partial.slug is None:
        raise MissingFieldError('slug', source)
    if partial.title is None:
        raise MissingFieldError('title', source)

    permalink = partial.permalink if partial.permalink is not None else PermalinkAlias.PATH
    if isinstance(permalink, ExplicitPermalink) and not permalink.template.startswith('/'):
        raise InvalidPermalinkAliasError(permalink.template, source)

    tags = list(partial.tags) if partial.tags is not None else None
    if tags is not None and any(not tag.strip() for tag in tags):
        raise BlankTagError(source)
    if not tags:
        tags = None

    pagination = None
    if partial.pagination is not None:
        pagination = PaginationConfig.from_partial(
            partial.pagination, permalink_template(permalink), source)

    return Frontmatter(
        slug=partial.slug,
        title=partial.title,
        permalink=permalink,
        description=partial.description,
        excerpt=partial.excerpt,
        categories=list(partial.categories or []),
        tags=tags,
        excerpt_separator=(partial.excerpt_separator
                           if partial.excerpt_separator is not None
                           else DEFAULT_EXCERPT_SEPARATOR),
        published_date=partial.published_date,
        format=partial.format or SourceFormat.RAW,
        templated=partial.templated if partial.templated is not None else True,
        layout=partial.layout,
        is_draft=partial.is_draft if partial.is_draft is not None else False,
        weight=partial.weight if partial.weight is not None else 0,
        collection=partial.collection or '',
        data=dict(partial.data or {}),
        pagination=pagination,
    )


# YAML field parsers

def _parse_str(value, key, source):
    if isinstance(value, (dict, list)):
        raise ContentError(f"'{key}' must be a string", source)
    return str(value)


def _parse_str_list(value, key, source):
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ContentError(f"'{key}' must be a list of strings", source)
    items = []
    for item in value:
        if isinstance(item, (dict, list)) or item is None:
            raise ContentError(f"'{key}' must be a list of strings", source)
        items.append(str(item))
    return tuple(items)


def _parse_bool(value, key, source):
    if not isinstance(value, bool):
        raise ContentError(f"'{key}' must be true or false", source)
    return value


def _parse_weight(value, key, source):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ContentError(f"'{key}' must be an integer", source)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ContentError(f"'{key}' is out of range: {value}", source)
    return value


def _parse_format(value, key, source):
    text = str(value).strip().lower()
    for fmt in SourceFormat:
        if fmt.value == text:
            return fmt
    raise ContentError(f"unknown format '{value}'", source)


def _parse_permalink(value, key, source):
    return parse_permalink(_parse_str(value, key, source))


def _parse_date(value, key, source):
    return parse_datetime(value, source)


def _parse_pagination(value, key, source):
    return PartialPagination.from_dict(value, source)


_FIELD_PARSERS = {
    'permalink': _parse_permalink,
    'slug': _parse_str,
    'title': _parse_str,
    'description': _parse_str,
    'excerpt': _parse_str,
    'categories': _parse_str_list,
    'tags': _parse_str_list,
    'excerpt_separator': _parse_str,
    'published_date': _parse_date,
    'format': _parse_format,
    'templated': _parse_bool,
    'layout': _parse_str,
    'is_draft': _parse_bool,
    'weight': _parse_weight,
    'pagination': _parse_pagination,
}
