import os
import re
import json
import html
import logging
from datetime import datetime
from email.utils import format_datetime as rfc822_datetime
from xml.sax.saxutils import escape

import mistune
import yaml
from jinja2 import (Environment, FileSystemLoader, TemplateError, TemplateNotFound,
                    TemplateSyntaxError)

from .document import Document
from .errors import ConfigurationError, ContentError, GazetteError, SourceReadError
from .files import FilesBuilder, copy_file, write_document_file
from .frontmatter import PartialFrontmatter, SourceFormat
from .pagination import generate_paginators
from .permalink import PermalinkResolver, format_url_as_file


class InfoFilter(logging.Filter):
    """Filter to allow only selected INFO messages to be shown in the console."""
    def filter(self, record):
        if record.levelno >= logging.WARNING:
            return True
        allowed_messages = [
            "Site build completed in",
            "Total posts generated:",
            "Total pages generated:",
            "Total static files copied:",
            "Building pages",
            "Building posts",
            "Copying static files",
            "Generating RSS feed",
            "Generating JSON feed",
        ]
        return any(msg in record.getMessage() for msg in allowed_messages)


class Gazette:
    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                super().__init__(escape=False)
            def block_code(self, code, info=None):
                escaped_code = mistune.escape(code)
                return '<pre style="white-space: pre-wrap;"><code>{}</code></pre>'.format(escaped_code)
        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=['table', 'task_lists', 'strikethrough']
        )

    def markdown_filter(self, text):
        """Convert markdown text to HTML."""
        return self.markdown_parser(text)

    def __init__(self, config, verbose=False, log_dir=None):
        self.config = config
        self.verbose = verbose
        self.log_dir = log_dir
        self.posts_generated = 0
        self.pages_generated = 0
        self.static_files_copied = 0

        self.setup_logging()

        self.resolver = PermalinkResolver()
        self.env = Environment(loader=FileSystemLoader([config.layouts_dir, config.includes_dir]))
        self.env.filters['markdown'] = self.markdown_filter
        self.markdown_parser = self.create_markdown_parser()

        self.posts = []
        self.pages = []

    def setup_logging(self):
        """Set up logging configuration."""
        self.logger = logging.getLogger('gazette_pkg')
        self.logger.setLevel(logging.DEBUG if self.verbose else logging.INFO)

        if not self.logger.handlers:
            # Console handler with filter
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.DEBUG if self.verbose else logging.INFO)
            if not self.verbose:
                console_handler.addFilter(InfoFilter())
            console_formatter = logging.Formatter('%(message)s')
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

            # File handler for all logs
            if self.log_dir:
                os.makedirs(self.log_dir, exist_ok=True)
                log_filename = datetime.now().strftime('gazette_%Y-%m-%d_%H-%M-%S.log')
                log_filepath = os.path.join(self.log_dir, log_filename)

                file_handler = logging.FileHandler(log_filepath)
                file_handler.setLevel(logging.DEBUG)
                file_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
                file_handler.setFormatter(file_formatter)
                self.logger.addHandler(file_handler)

    def load_site_data(self):
        """Site attributes, with files from the data directory merged into site.data."""
        site = dict(self.config.site)
        data = dict(site.get('data') or {})
        data_dir = self.config.data_dir
        if os.path.isdir(data_dir):
            for root, dirs, files in os.walk(data_dir):
                dirs.sort()
                rel_root = os.path.relpath(root, data_dir)
                target = data
                if rel_root != '.':
                    for part in rel_root.split(os.sep):
                        target = target.setdefault(part, {})
                for filename in sorted(files):
                    stem, ext = os.path.splitext(filename)
                    if ext.lower() not in ('.yml', '.yaml', '.json'):
                        continue
                    target[stem] = self._load_data_file(os.path.join(root, filename), ext.lower())
        site['data'] = data
        return site

    def _load_data_file(self, path, ext):
        try:
            with open(path, 'r', encoding='utf-8') as f:
                if ext == '.json':
                    return json.load(f)
                return yaml.safe_load(f)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid data file: {e}", path)
        except (IOError, OSError) as e:
            raise SourceReadError(path, e)

    def load_collection(self, collection):
        """Parse every document of a collection, dropping drafts unless they are built."""
        docs = []
        for path in collection.files():
            rel_path = os.path.relpath(path, self.config.source)
            docs.append(self._parse_document(path, rel_path, collection.default, collection))

        draft_files = collection.draft_files()
        if draft_files is not None:
            drafts_root = os.path.join(self.config.source, collection.drafts_dir)
            draft_default = PartialFrontmatter(is_draft=True).merge(collection.default)
            for path in draft_files:
                # Drafts are addressed as if they already lived in the collection.
                rel_path = os.path.join(collection.dir, os.path.relpath(path, drafts_root))
                docs.append(self._parse_document(path, rel_path, draft_default, collection))

        if not self.config.include_drafts:
            drafts = [doc for doc in docs if doc.front.is_draft]
            for doc in drafts:
                self.logger.debug(f"Skipping draft {doc.file_path}")
            docs = [doc for doc in docs if not doc.front.is_draft]

        return collection.sort_documents(docs)

    def _parse_document(self, path, rel_path, default, collection):
        rel_path = os.path.normpath(rel_path).replace(os.sep, '/')
        self.logger.debug(f"Parsing {rel_path}")
        return Document.parse(path, rel_path, default, self.resolver,
                              collection.publish_date_in_filename)

    def render_content(self, doc, context):
        """Render a document body: Jinja2 first when templated, then its markup."""
        content = doc.content
        excerpt = doc.excerpt
        if doc.front.templated:
            content = self._render_string(content, context, doc.file_path)
            if excerpt:
                excerpt = self._render_string(excerpt, context, doc.file_path)

        if doc.front.format is SourceFormat.MARKDOWN:
            content = self.markdown_filter(content)
            if excerpt:
                excerpt = self.markdown_filter(excerpt)
        # Raw and vimwiki sources are emitted as written.

        doc.rendered = content
        doc.rendered_excerpt = excerpt

    def _render_string(self, text, context, source):
        try:
            return self.env.from_string(text).render(**context)
        except TemplateSyntaxError as e:
            raise ContentError(f"template syntax error on line {e.lineno}: {e.message}", source)
        except TemplateNotFound as e:
            raise ContentError(f"template not found: {e}", source)
        except TemplateError as e:
            raise ContentError(f"failed to render: {e}", source)

    def render_template(self, template_name, source, **context):
        """Render a layout template with the given context."""
        try:
            template = self.env.get_template(template_name)
            return template.render(**context)
        except TemplateNotFound:
            raise ContentError(f"layout '{template_name}' not found in {self.config.layouts_dir}", source)
        except TemplateSyntaxError as e:
            raise ContentError(f"syntax error in layout '{template_name}' line {e.lineno}: {e.message}", source)
        except TemplateError as e:
            raise ContentError(f"failed to render layout '{template_name}': {e}", source)

    def base_context(self, site, posts_data):
        posts_collection = self.config.posts.attributes()
        posts_collection['pages'] = posts_data
        pages_collection = self.config.pages.attributes()
        return {
            'site': site,
            'collections': {
                'posts': posts_collection,
                'pages': pages_collection,
            },
        }

    def write_document(self, doc, context, url_path):
        """Render `doc` through its layout and write it for `url_path`."""
        context = dict(context)
        context['page'] = doc.attributes()
        context['page']['permalink'] = url_path
        self.render_content(doc, context)
        context['page'] = doc.attributes()
        context['page']['permalink'] = url_path
        context['content'] = doc.rendered

        if doc.front.layout:
            output = self.render_template(doc.front.layout, doc.file_path, **context)
        else:
            output = doc.rendered

        dest = os.path.join(self.config.destination, format_url_as_file(url_path))
        write_document_file(output, dest)
        self.logger.debug(f"Rendered {doc.file_path} -> {dest}")

    def build_documents(self, docs, context, posts_data):
        written = 0
        for doc in docs:
            if doc.front.pagination is None:
                self.write_document(doc, context, doc.url_path)
                written += 1
                continue
            paginators = generate_paginators(doc, posts_data, self.resolver)
            for i, paginator in enumerate(paginators):
                page_context = dict(context)
                page_context['paginator'] = paginator.to_dict()
                url_path = doc.url_path if i == 0 else paginator.index_permalink
                self.write_document(doc, page_context, url_path)
                written += 1
        return written

    def copy_static_files(self):
        """Copy every included file that is not a template to the destination."""
        self.logger.info("Copying static files")
        builder = FilesBuilder(self.config.source)
        for line in self.config.ignore:
            builder.add_ignore(line)
        posts = self.config.posts
        if posts.dir.startswith('_'):
            builder.add_ignore(f"!/{posts.dir}")
            builder.add_ignore(f"!/{posts.dir}/**")
            builder.add_ignore(f"/{posts.dir}/**/_*")

        extensions = set(self.config.template_extensions)
        copied = 0
        for path in builder.build():
            if os.path.splitext(path)[1].lstrip('.') in extensions:
                continue
            rel_path = os.path.relpath(path, self.config.source)
            copy_file(path, os.path.join(self.config.destination, rel_path))
            copied += 1
        return copied

    def absolute_url(self, url_path, base_url=None):
        base_url = base_url or self.config.site.get('base_url')
        if not base_url:
            raise ConfigurationError("site.base_url is required to generate feeds")
        return f"{base_url.rstrip('/')}/{url_path}"

    def generate_rss_feed(self, collection, posts):
        """Generate RSS feed."""
        site_name = collection.title or self.config.site.get('title') or ''
        site_url = self.absolute_url('', collection.base_url)

        rss_content = f'''<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
<channel>
<title>{escape(site_name)}</title>
<link>{escape(site_url)}</link>
<description>{escape(collection.description or '')}</description>
<lastBuildDate>{rfc822_datetime(datetime.now().astimezone())}</lastBuildDate>
'''

        for post in posts:
            title = escape(post.front.title)
            link = escape(self.absolute_url(post.url_path, collection.base_url))
            raw_description = post.rendered_excerpt or post.front.description or ''

            # Clean and escape the description for XML
            clean_description = html.unescape(str(raw_description))
            clean_description = re.sub(r'<.*?>', '', clean_description)
            clean_description = re.sub(r'\s+', ' ', clean_description)
            description = escape(clean_description.strip())

            rss_content += f'''
<item>
<title>{title}</title>
<link>{link}</link>
<description>{description}</description>'''
            if post.front.published_date is not None:
                rss_content += f'''
<pubDate>{rfc822_datetime(post.front.published_date)}</pubDate>'''
            rss_content += f'''
<guid>{link}</guid>
</item>'''

        rss_content += '''
</channel>
</rss>'''

        rss_file = os.path.join(self.config.destination, collection.rss)
        write_document_file(rss_content, rss_file)
        self.logger.info("Generating RSS feed")

    def generate_json_feed(self, collection, posts):
        """Generate a JSON Feed (version 1.1) for the collection."""
        feed = {
            'version': 'https://jsonfeed.org/version/1.1',
            'title': collection.title or self.config.site.get('title') or '',
            'home_page_url': self.absolute_url('', collection.base_url),
            'feed_url': self.absolute_url(collection.jsonfeed, collection.base_url),
            'items': [],
        }
        if collection.description:
            feed['description'] = collection.description

        for post in posts:
            item = {
                'id': self.absolute_url(post.url_path, collection.base_url),
                'url': self.absolute_url(post.url_path, collection.base_url),
                'title': post.front.title,
                'content_html': post.rendered or '',
            }
            if post.rendered_excerpt:
                item['summary'] = post.rendered_excerpt
            if post.front.published_date is not None:
                item['date_published'] = post.front.published_date.isoformat()
            if post.front.tags:
                item['tags'] = list(post.front.tags)
            feed['items'].append(item)

        feed_file = os.path.join(self.config.destination, collection.jsonfeed)
        write_document_file(json.dumps(feed, indent=2), feed_file)
        self.logger.info("Generating JSON feed")

    def build(self):
        """Main build process."""
        start_time = datetime.now()
        self.logger.info("Starting site build...")
        os.makedirs(self.config.destination, exist_ok=True)

        try:
            site = self.load_site_data()
            self.posts = self.load_collection(self.config.posts)
            self.pages = self.load_collection(self.config.pages)

            # Posts render first so listings can show their content and excerpts.
            context = self.base_context(site, [])
            for post in self.posts:
                self.render_content(post, dict(context, page=post.attributes()))
            posts_data = [post.attributes() for post in self.posts]
            context = self.base_context(site, posts_data)

            self.logger.info("Building posts")
            self.posts_generated = self.build_documents(self.posts, context, posts_data)
            self.logger.info("Building pages")
            self.pages_generated = self.build_documents(self.pages, context, posts_data)

            self.static_files_copied = self.copy_static_files()

            if self.config.posts.rss:
                self.generate_rss_feed(self.config.posts, self.posts)
            if self.config.posts.jsonfeed:
                self.generate_json_feed(self.config.posts, self.posts)
        except GazetteError as e:
            self.logger.error(f"Build failed: {e}")
            raise

        total_time = (datetime.now() - start_time).total_seconds()
        self.logger.info(f"Site build completed in {total_time:.6f} seconds.")
        self.logger.info(f"Total posts generated: {self.posts_generated}")
        self.logger.info(f"Total pages generated: {self.pages_generated}")
        self.logger.info(f"Total static files copied: {self.static_files_copied}")
