"""
Collections group documents that share a source directory, a default front
matter layer and an ordering. A site has two: its pages and its posts.
"""

import os
import logging

from .errors import ConfigurationError
from .files import FilesBuilder
from .frontmatter import PartialFrontmatter
from .pagination_config import SortOrder

logger = logging.getLogger(__name__)


class Collection:

    def __init__(self, title, slug, description=None, source='.', dir='.',
                 drafts_dir=None, order=SortOrder.NONE, rss=None, jsonfeed=None,
                 base_url=None, publish_date_in_filename=True, default=None, ignore=None,
                 template_extensions=None):
        self.title = title
        self.slug = slug
        self.description = description
        self.source = source
        self.dir = dir
        self.drafts_dir = drafts_dir
        self.order = order
        self.rss = rss
        self.jsonfeed = jsonfeed
        self.base_url = base_url
        self.publish_date_in_filename = publish_date_in_filename
        self.default = default or PartialFrontmatter()
        self.ignore = list(ignore or [])
        self.template_extensions = list(template_extensions or [])

    def __repr__(self):
        return f"Collection({self.slug!r}, dir={self.dir!r})"

    @classmethod
    def from_page_config(cls, pages, site, posts, common_default, source, ignore,
                         template_extensions):
        """The pages collection: every template file outside the posts tree."""
        ignore = list(ignore)
        ignore.append(f"/{posts['dir']}")
        if posts.get('drafts_dir'):
            ignore.append(f"/{posts['drafts_dir']}")

        default = PartialFrontmatter.from_dict(pages.get('default'), 'pages.default')
        default = default.merge(PartialFrontmatter(excerpt_separator=''))
        default = default.merge(common_default)
        default = default.merge(PartialFrontmatter(collection='pages'))

        return cls(
            title=site.get('title') or '',
            slug='pages',
            description=site.get('description'),
            source=source,
            dir='.',
            order=SortOrder.NONE,
            base_url=site.get('base_url'),
            default=default,
            ignore=ignore,
            template_extensions=template_extensions,
        )

    @classmethod
    def from_post_config(cls, posts, site, include_drafts, common_default, source,
                         ignore, template_extensions):
        """The posts collection, falling back to the site's title and description."""
        if not posts.get('dir'):
            raise ConfigurationError("posts collection is missing a 'dir'")

        default = PartialFrontmatter.from_dict(posts.get('default'), 'posts.default')
        default = default.merge(common_default)
        default = default.merge(PartialFrontmatter(collection='posts'))

        return cls(
            title=posts.get('title') or site.get('title') or '',
            slug='posts',
            description=posts.get('description') or site.get('description'),
            source=source,
            dir=posts['dir'],
            drafts_dir=posts.get('drafts_dir') if include_drafts else None,
            order=SortOrder.parse(posts.get('order', 'desc'), 'posts order'),
            rss=posts.get('rss'),
            jsonfeed=posts.get('jsonfeed'),
            base_url=site.get('base_url'),
            publish_date_in_filename=bool(posts.get('publish_date_in_filename', True)),
            default=default,
            ignore=ignore,
            template_extensions=template_extensions,
        )

    def _files_for(self, directory):
        builder = FilesBuilder(self.source)
        for line in self.ignore:
            builder.add_ignore(line)
        for ext in self.template_extensions:
            builder.add_extension(ext)

        rel_dir = directory.strip('/')
        if rel_dir not in ('', '.'):
            # Collections may live in '_' prefixed directories; nested
            # hidden entries below them stay excluded.
            if rel_dir.startswith('_') or rel_dir.startswith('.'):
                builder.add_ignore(f"!/{rel_dir}")
                builder.add_ignore(f"!/{rel_dir}/**")
                builder.add_ignore(f"/{rel_dir}/**/_*")
                builder.add_ignore(f"/{rel_dir}/**/_*/**")
            builder.limit(os.path.join(self.source, rel_dir))
        return builder.build()

    def files(self):
        """Files of the collection's own directory."""
        return self._files_for(self.dir)

    def draft_files(self):
        """Files of the drafts directory, or None when drafts are not built."""
        if not self.drafts_dir:
            return None
        return self._files_for(self.drafts_dir)

    def sort_documents(self, docs):
        """Order documents by published date; undated ones go last."""
        if self.order is SortOrder.NONE:
            return list(docs)
        dated = [doc for doc in docs if doc.front.published_date is not None]
        undated = [doc for doc in docs if doc.front.published_date is None]
        dated.sort(key=lambda doc: doc.front.published_date,
                   reverse=self.order is SortOrder.DESC)
        return dated + undated

    def attributes(self):
        attributes = {
            'title': self.title,
            'slug': self.slug,
            'description': self.description or '',
        }
        if self.rss:
            attributes['rss'] = self.rss
        if self.jsonfeed:
            attributes['jsonfeed'] = self.jsonfeed
        return attributes
