"""The Paginator node handed to index templates."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .helpers import interpret_permalink


@dataclass
class Paginator:
    pages: Optional[List[Dict[str, Any]]] = None
    indexes: Optional[List['Paginator']] = None
    index: int = 0
    index_title: Any = None
    index_permalink: str = ''
    previous_index: int = 0
    previous_index_permalink: Optional[str] = None
    next_index: int = 0
    next_index_permalink: Optional[str] = None
    first_index_permalink: str = ''
    last_index_permalink: str = ''
    total_indexes: int = 0
    total_pages: int = 0
    total_posts: int = 0

    def add_index(self, paginator):
        if self.indexes is None:
            self.indexes = []
        self.indexes.append(paginator)

    def to_dict(self):
        """Template view; previous/next keys only exist when there is such a page."""
        data = {}
        if self.pages is not None:
            data['pages'] = list(self.pages)
        if self.indexes is not None:
            data['indexes'] = [paginator.to_dict() for paginator in self.indexes]
        data['index'] = self.index
        data['index_permalink'] = self.index_permalink
        if self.index_title is not None:
            data['index_title'] = self.index_title
        if self.previous_index_permalink is not None:
            data['previous_index'] = self.previous_index
            data['previous_index_permalink'] = self.previous_index_permalink
        if self.next_index_permalink is not None:
            data['next_index'] = self.next_index
            data['next_index_permalink'] = self.next_index_permalink
        data['first_index_permalink'] = self.first_index_permalink
        data['last_index_permalink'] = self.last_index_permalink
        data['total_indexes'] = self.total_indexes
        data['total_pages'] = self.total_pages
        data['total_posts'] = self.total_posts
        return data


def create_paginator(i, total_indexes, total_posts, config, doc, posts, index_title=None,
                     resolver=None):
    """Page `i + 1` of a chain of `total_indexes` pages."""
    index = i + 1
    paginator = Paginator(total_indexes=total_indexes, total_pages=total_indexes,
                          total_posts=total_posts)

    paginator.first_index_permalink = interpret_permalink(config, doc, 1, index_title, resolver)
    paginator.last_index_permalink = interpret_permalink(
        config, doc, max(total_indexes, 1), index_title, resolver)

    paginator.index = index
    paginator.pages = list(posts)
    paginator.index_title = index_title
    paginator.index_permalink = interpret_permalink(config, doc, index, index_title, resolver)

    if index > 1:
        paginator.previous_index = index - 1
        paginator.previous_index_permalink = interpret_permalink(
            config, doc, index - 1, index_title, resolver)
    if index < total_indexes:
        paginator.next_index = index + 1
        paginator.next_index_permalink = interpret_permalink(
            config, doc, index + 1, index_title, resolver)
    return paginator


def create_index_paginator(config, doc, index_title, resolver=None):
    """A grouping without documents of its own, only links to its children."""
    permalink = interpret_permalink(config, doc, 1, index_title, resolver)
    return Paginator(
        index=1,
        index_title=index_title,
        index_permalink=permalink,
        first_index_permalink=permalink,
        last_index_permalink=permalink,
        total_indexes=1,
    )


def create_root_paginator(doc, total_posts):
    """The synthesized top of a tags, categories or dates tree."""
    return Paginator(
        index=1,
        index_permalink=doc.url_path,
        first_index_permalink=doc.url_path,
        last_index_permalink=doc.url_path,
        total_indexes=1,
        total_posts=total_posts,
    )


def create_all_paginators(posts, doc, config, index_title=None, resolver=None):
    """
    Chunk already sorted posts into a chain of `per_page` sized pages.
    An empty list still yields a single, empty page.
    """
    total_posts = len(posts)
    total_indexes = -(-total_posts // config.per_page)

    if total_posts == 0:
        return [create_paginator(0, total_indexes, total_posts, config, doc, [],
                                 index_title, resolver)]

    return [
        create_paginator(i, total_indexes, total_posts, config, doc,
                         posts[start:start + config.per_page], index_title, resolver)
        for i, start in enumerate(range(0, total_posts, config.per_page))
    ]
