#!/usr/bin/env python3
"""
Command-line interface for Gazette - static site compiler.
"""

import os
import sys
import argparse
from typing import Dict, List, Optional

from . import __version__
from .core import Gazette
from .settings import GazetteSettings

STARTER_LAYOUT = """<!DOCTYPE html>
<html>
<head>
    <title>{{ page.title }} | {{ site.title }}</title>
</head>
<body>
    {{ content }}
</body>
</html>
"""

STARTER_INDEX = """---
title: Home
layout: default.html
pagination:
  include: all
  per_page: 5
---
{% for post in paginator.pages %}
<article>
  <h2><a href="/{{ post.permalink }}">{{ post.title }}</a></h2>
  {{ post.excerpt }}
</article>
{% endfor %}
{% if paginator.next_index_permalink %}<a href="/{{ paginator.next_index_permalink }}">Older posts</a>{% endif %}
"""

STARTER_POST = """---
title: Welcome to Gazette
layout: default.html
tags: [welcome]
---
This is your first post. Edit it in `posts/`, then run `gazette` to rebuild the site.

Everything after the first blank line is left out of the excerpt.
"""


def create_starter_structure(directory: str) -> List[str]:
    """Create layouts, an index page and a first post, skipping existing files."""
    starter_files: Dict[str, str] = {
        os.path.join('_layouts', 'default.html'): STARTER_LAYOUT,
        'index.html': STARTER_INDEX,
        os.path.join('posts', '2025-01-01-welcome-to-gazette.md'): STARTER_POST,
    }

    created = []
    for rel_path, content in starter_files.items():
        path = os.path.join(directory, rel_path)
        if os.path.exists(path):
            print(f"File already exists: {rel_path}")
            continue
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        print(f"Created: {rel_path}")
        created.append(path)
    return created


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Gazette - Static Site Compiler')
    parser.add_argument('--source', '-s', type=str,
                        help='Site source directory')
    parser.add_argument('--destination', '-d', type=str,
                        help='Output directory for the generated site')
    parser.add_argument('--config', '-c', type=str,
                        help='Configuration file (defaults to _gazette.yml found upwards)')
    parser.add_argument('--drafts', dest='include_drafts', action='store_true', default=None,
                        help='Include drafts in the build')
    parser.add_argument('--log-dir', type=str,
                        help='Directory to write a detailed build log into')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Show debug output on the console')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file and starter site')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        # Handle init command
        if args.init:
            settings_loader = GazetteSettings(args.source)
            config_path = settings_loader.create_sample_config(args.init)
            print(f"Created sample configuration file: {config_path}")

            print("\nCreating starter project structure...")
            create_starter_structure(settings_loader.config_dir)

            print("\nYour new Gazette site is ready!")
            print("Edit the configuration file and layouts, then run 'gazette' to build your site.")
            return

        # Load settings from configuration file
        settings_loader = GazetteSettings(args.source)
        settings_loader.load_settings(args.config)

        # Command line arguments take precedence
        args_dict = {
            'source': os.path.abspath(args.source) if args.source else None,
            'destination': args.destination,
            'include_drafts': args.include_drafts,
        }
        final_settings = settings_loader.merge_with_args(args_dict)
        config = settings_loader.build_config(final_settings)

        generator = Gazette(config, verbose=args.verbose, log_dir=args.log_dir)
        generator.build()

    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
