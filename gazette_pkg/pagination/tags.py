"""One page chain per tag, below a root listing every tag."""

from ..slug import slugify
from .helpers import extract_list, sort_posts
from .paginator import create_all_paginators, create_root_paginator


def distribute_posts_by_tags(posts):
    per_tag = {}
    for post in posts:
        for tag in extract_list(post, 'tags') or []:
            per_tag.setdefault(str(tag), []).append(post)
    return per_tag


def _tag_key(tag):
    return slugify(tag).lower()


def create_tags_paginators(posts, doc, config, resolver=None):
    per_tag = distribute_posts_by_tags(posts)

    firsts_of_tags = []
    paginators = []
    for tag in sorted(per_tag, key=lambda t: (_tag_key(t), t)):
        chain = create_all_paginators(
            sort_posts(per_tag[tag], config), doc, config, tag, resolver)
        firsts_of_tags.append(chain[0])
        paginators.extend(chain)

    tagged = sum(1 for post in posts if extract_list(post, 'tags'))
    root = create_root_paginator(doc, tagged)
    root.indexes = firsts_of_tags
    return [root] + paginators
