"""
Nested category indexes.

A post categorised ["a", "b"] is listed on the "a/b" pages only; the "a"
pages link to "a/b" through their `indexes`.
"""

from .helpers import extract_list, sort_posts
from .paginator import (create_all_paginators, create_index_paginator,
                        create_root_paginator)


class Category:

    def __init__(self, path=None):
        self.path = list(path or [])
        self.posts = []
        self.children = []

    def child(self, path):
        """Find or insert the child for `path`, keeping children ordered."""
        for existing in self.children:
            if existing.path == path:
                return existing
        node = Category(path)
        self.children.append(node)
        self.children.sort(key=lambda c: [str(part) for part in c.path])
        return node


def distribute_posts_by_categories(posts):
    root = Category()
    for post in posts:
        categories = extract_list(post, 'categories')
        if not categories:
            continue
        node = root
        for depth in range(1, len(categories) + 1):
            node = node.child(categories[:depth])
        node.posts.append(post)
    return root


def walk_categories(category, config, doc, resolver=None):
    """Paginators for `category` and, depth first, all of its descendants."""
    if not category.path:
        paginators = [create_root_paginator(doc, 0)]
    elif category.posts:
        paginators = create_all_paginators(
            sort_posts(category.posts, config), doc, config, list(category.path), resolver)
    else:
        paginators = [create_index_paginator(config, doc, list(category.path), resolver)]

    for child in category.children:
        child_paginators = walk_categories(child, config, doc, resolver)
        paginators[0].add_index(child_paginators[0])
        paginators.extend(child_paginators)
    return paginators


def count_posts(category):
    return len(category.posts) + sum(count_posts(child) for child in category.children)


def create_categories_paginators(posts, doc, config, resolver=None):
    root = distribute_posts_by_categories(posts)
    paginators = walk_categories(root, config, doc, resolver)
    paginators[0].total_posts = count_posts(root)
    return paginators
