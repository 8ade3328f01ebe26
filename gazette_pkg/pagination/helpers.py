"""Sorting and addressing shared by every pagination strategy."""

import functools
from pathlib import PurePosixPath

from ..errors import ConfigurationError
from ..pagination_config import Include, SortOrder
from ..permalink import default_resolver
from ..slug import slugify


def extract_scalar(post, key):
    """The value of `key` on a post when it is a single comparable value."""
    value = post.get(key)
    if value is None or isinstance(value, (list, tuple, dict)):
        return None
    return value


def extract_list(post, key):
    value = post.get(key)
    if not value or not isinstance(value, (list, tuple)):
        return None
    return list(value)


def _compare_values(a, b):
    try:
        if a < b:
            return -1
        if b < a:
            return 1
    except TypeError:
        # Mixed types are treated as equal.
        return 0
    return 0


def _compare_posts(a, b, sort_by):
    for key in sort_by:
        left = extract_scalar(a, key)
        right = extract_scalar(b, key)
        if left is None and right is None:
            cmp = 0
        elif right is None:
            cmp = -1
        elif left is None:
            cmp = 1
        else:
            cmp = _compare_values(left, right)
        if cmp != 0:
            return cmp
    return 0


def sort_posts(posts, config):
    """
    Stable multi-key sort. Under ascending order a post that has a key sorts
    before one that lacks it; descending order reverses the whole
    comparison. Posts that tie on every key keep their input order.
    """
    if config.order is SortOrder.NONE or not config.sort_by:
        return list(posts)
    sign = -1 if config.order is SortOrder.DESC else 1

    def compare(a, b):
        return sign * _compare_posts(a, b, config.sort_by)

    return sorted(posts, key=functools.cmp_to_key(compare))


def index_to_string(index):
    """URL segment(s) for a grouping key: a tag, or a category/date path."""
    if isinstance(index, (list, tuple)):
        return '/'.join(slugify(str(part)) for part in index)
    return slugify(str(index))


def pagination_root(config, doc, resolver=None):
    """The owning document's permalink without its extension."""
    resolver = resolver or default_resolver()
    attributes = resolver.permalink_attributes(doc.front, doc.file_path)
    permalink = resolver.explode(config.front_permalink, attributes)
    suffix = PurePosixPath(permalink).suffix
    if suffix and permalink.endswith(suffix):
        permalink = permalink[:-len(suffix)]
    return permalink.rstrip('/')


def interpret_permalink(config, doc, page_num, index=None, resolver=None):
    """
    URL of page `page_num` of a grouping. The first page of the ungrouped
    chain is the document itself.
    """
    resolver = resolver or default_resolver()
    root = pagination_root(config, doc, resolver)

    if page_num == 1:
        if index is None:
            return doc.url_path
        return _join(root, index_to_string(index))

    if index is None:
        if config.include is not Include.ALL:
            raise ConfigurationError(f"{config.include.value} pagination requires an index")
        segment = 'all'
    else:
        segment = index_to_string(index)
    attributes = resolver.permalink_attributes(doc.front, doc.file_path)
    attributes['num'] = page_num
    suffix = resolver.explode(config.permalink_suffix, attributes)
    return _join(root, segment, suffix)


def _join(*parts):
    return '/'.join(part for part in parts if part)
