"""
Date archives: year, then month, and so on down to the finest level in
`date_index`. A dated post is listed at every level of its date.
"""

from datetime import datetime

from ..pagination_config import DateIndex
from .helpers import sort_posts
from .paginator import (create_all_paginators, create_index_paginator,
                        create_root_paginator)


class DateNode:

    def __init__(self, value=0, field=None):
        self.value = value
        self.field = field
        self.posts = []
        self.children = []

    def child(self, value, field):
        for existing in self.children:
            if existing.value == value:
                return existing
        node = DateNode(value, field)
        self.children.append(node)
        self.children.sort(key=lambda n: n.value)
        return node

    def formatted(self):
        if self.field is DateIndex.YEAR:
            return str(self.value)
        return f"{self.value:02d}"


def get_date_field_value(date, field):
    return {
        DateIndex.YEAR: lambda: date.year,
        DateIndex.MONTH: lambda: date.month,
        DateIndex.DAY: lambda: date.day,
        DateIndex.HOUR: lambda: date.hour,
        DateIndex.MINUTE: lambda: date.minute,
    }[field]()


def distribute_posts_by_dates(posts, config):
    root = DateNode()
    dated = 0
    for post in posts:
        published = post.get('published_date')
        if not isinstance(published, datetime):
            continue
        dated += 1
        node = root
        for field in config.date_index:
            node = node.child(get_date_field_value(published, field), field)
            node.posts.append(post)
    return root, dated


def walk_dates(node, config, doc, parents=None, resolver=None):
    """Paginators for `node` and, depth first, all of its descendants."""
    trail = list(parents or [])
    if node.field is None:
        paginators = [create_root_paginator(doc, 0)]
    else:
        trail.append(node.formatted())
        if node.posts:
            paginators = create_all_paginators(
                sort_posts(node.posts, config), doc, config, list(trail), resolver)
        else:
            paginators = [create_index_paginator(config, doc, list(trail), resolver)]

    for child in node.children:
        child_paginators = walk_dates(child, config, doc, trail, resolver)
        paginators[0].add_index(child_paginators[0])
        paginators.extend(child_paginators)
    return paginators


def create_dates_paginators(posts, doc, config, resolver=None):
    root, dated = distribute_posts_by_dates(posts, config)
    paginators = walk_dates(root, config, doc, resolver=resolver)
    paginators[0].total_posts = dated
    return paginators
