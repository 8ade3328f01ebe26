"""
Pagination of a collection into index pages.

A document with a `pagination` front matter section is rendered once per
Paginator produced here; the first Paginator is rendered at the document's
own URL and every other one at its `index_permalink`.
"""

import logging

from ..pagination_config import Include
from .categories import create_categories_paginators
from .dates import create_dates_paginators
from .helpers import index_to_string, interpret_permalink, sort_posts
from .paginator import Paginator, create_all_paginators
from .tags import create_tags_paginators

logger = logging.getLogger(__name__)

__all__ = [
    'Paginator',
    'generate_paginators',
    'index_to_string',
    'interpret_permalink',
    'sort_posts',
]


def generate_paginators(doc, posts, resolver=None):
    """
    Build the paginators for `doc` over `posts`, a list of document
    attribute mappings.
    """
    config = doc.front.pagination
    if config is None or config.include is Include.NONE:
        raise ValueError(f"{doc.file_path} does not configure pagination")

    logger.debug(f"{doc.file_path}: paginating {len(posts)} posts by {config.include.value}")
    posts = list(posts)
    if config.include is Include.ALL:
        return create_all_paginators(sort_posts(posts, config), doc, config, None, resolver)
    if config.include is Include.TAGS:
        return create_tags_paginators(posts, doc, config, resolver)
    if config.include is Include.CATEGORIES:
        return create_categories_paginators(posts, doc, config, resolver)
    return create_dates_paginators(posts, doc, config, resolver)
